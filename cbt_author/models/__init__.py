"""Data models for exam authoring."""

from .exam import (
    Arm,
    Campus,
    CreatedExamSession,
    Envelope,
    ExamPaper,
    ExamReview,
    ExamSession,
    PresentationType,
    Question,
    QuestionType,
    SchoolClass,
    Teacher,
    UserSession,
    WorkflowStep,
)
from .plan import ExamPlan, PaperPlan, QuestionPlan, SessionPlan

__all__ = [
    "ExamSession",
    "ExamPaper",
    "Question",
    "QuestionType",
    "PresentationType",
    "WorkflowStep",
    "CreatedExamSession",
    "ExamReview",
    "Envelope",
    "Arm",
    "SchoolClass",
    "Campus",
    "Teacher",
    "UserSession",
    # Batch plans
    "ExamPlan",
    "SessionPlan",
    "PaperPlan",
    "QuestionPlan",
]
