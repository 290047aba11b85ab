"""Exam authoring workflow: forms, step sequencing, submission and error display."""

from .authoring import ExamAuthoringWorkflow, WorkflowStateError
from .forms import PaperForm, QuestionForm, SessionForm
from .presenter import DisplayError, Entity, ErrorPresenter, ErrorSlot, Severity
from .sequencer import Step, StepSequencer
from .submission import Failure, Result, SubmissionCoordinator, Success

__all__ = [
    "ExamAuthoringWorkflow",
    "WorkflowStateError",
    "SessionForm",
    "PaperForm",
    "QuestionForm",
    "StepSequencer",
    "Step",
    "SubmissionCoordinator",
    "Success",
    "Failure",
    "Result",
    "ErrorPresenter",
    "ErrorSlot",
    "DisplayError",
    "Entity",
    "Severity",
]
