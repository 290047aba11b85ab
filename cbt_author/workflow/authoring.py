"""The exam authoring workflow: session, papers, questions, review."""

import logging
from datetime import tzinfo
from typing import Callable, Optional

from cbt_author.api.client import CBTClient
from cbt_author.api.errors import SubmissionError
from cbt_author.models.exam import (
    Arm,
    CreatedExamSession,
    ExamPaper,
    ExamReview,
    Question,
    SchoolClass,
)
from cbt_author.workflow.forms import PaperForm, QuestionForm, SessionForm
from cbt_author.workflow.presenter import Entity, ErrorPresenter, ErrorSlot
from cbt_author.workflow.sequencer import Step, StepSequencer
from cbt_author.workflow.submission import Failure, Result, SubmissionCoordinator

logger = logging.getLogger(__name__)


class WorkflowStateError(RuntimeError):
    """An operation was attempted in a step where it does not apply."""


class ExamAuthoringWorkflow:
    """
    Holds one authoring run and moves it forward.

    Each ``submit_*`` method posts the active form through the
    ``SubmissionCoordinator``. On success the created entity is appended to
    the run, the form is reset for the next entity and the sequencer advances
    when the step is done. On failure the error is shown in ``error_slot``
    and the form keeps what was entered.
    """

    def __init__(
        self,
        client: CBTClient,
        coordinator: Optional[SubmissionCoordinator] = None,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.client = client
        self.coordinator = coordinator or SubmissionCoordinator(client, tz=tz)
        self.sequencer = StepSequencer()
        self.error_slot = ErrorSlot()
        self.loading = False
        self.classes: list[SchoolClass] = []
        self.session_form = SessionForm()
        self.paper_form: Optional[PaperForm] = None
        self.question_form: Optional[QuestionForm] = None
        self.created_session: Optional[CreatedExamSession] = None
        self.selected_paper: Optional[ExamPaper] = None

    # Selectors

    def load_classes(self) -> bool:
        """Fetch classes and their arms for the class/arm selectors."""
        try:
            self.classes = self.client.get_classes_with_arms()
        except SubmissionError as e:
            logger.warning("Could not load classes: %s", e.message)
            self.error_slot.show(ErrorPresenter(Entity.SESSION).present(e))
            return False
        return True

    def find_class(self, class_id: str) -> Optional[SchoolClass]:
        return next((c for c in self.classes if c.class_id == class_id), None)

    def arms_for_selected_class(self) -> list[Arm]:
        selected = self.find_class(self.session_form["class_id"])
        return selected.arms if selected else []

    # Steps

    @property
    def current_step(self) -> Step:
        return self.sequencer.current_step

    @property
    def added_papers(self) -> list[ExamPaper]:
        return self.sequencer.added_papers

    @property
    def added_questions(self) -> list[Question]:
        return self.sequencer.added_questions

    def submit_session(self) -> bool:
        """Step 1: create the exam session."""
        self._require_step(Step.SESSION_ENTRY)
        result = self._submit(
            Entity.SESSION, lambda: self.coordinator.submit_session(self.session_form)
        )
        if result is None:
            return False

        session = result.value
        selected = self.find_class(session.class_id)
        arm = selected.find_arm(session.arm_id) if selected else None
        self.created_session = CreatedExamSession(
            id=session.id,
            title=session.title,
            number_of_papers=session.number_of_papers,
            class_name=selected.class_name if selected else "",
            arm_name=arm.arm_name if arm else "",
        )
        self.session_form.reset()
        self.paper_form = PaperForm()
        self.sequencer.advance()
        return True

    def submit_paper(self) -> bool:
        """Step 2: add the next paper; moves on once every paper is added."""
        self._require_step(Step.PAPER_ENTRY)
        result = self._submit(
            Entity.PAPER,
            lambda: self.coordinator.submit_paper(self.created_session.id, self.paper_form),
        )
        if result is None:
            return False

        self.sequencer.added_papers.append(result.value)
        self.paper_form.reset()
        if len(self.added_papers) >= self.created_session.number_of_papers:
            self.sequencer.advance()
        return True

    def select_paper(self, paper_id: str) -> QuestionForm:
        """Step 3: open the question form for one of the added papers."""
        self._require_step(Step.QUESTION_ENTRY)
        paper = next((p for p in self.added_papers if p.id == paper_id), None)
        if paper is None:
            raise WorkflowStateError(f"Paper {paper_id!r} was not added in this run")
        self.selected_paper = paper
        self.question_form = QuestionForm(
            exam_paper_id=paper.id, presentation_type=paper.presentation_type
        )
        return self.question_form

    def submit_question(self) -> bool:
        """Step 3: add a question to the selected paper."""
        self._require_step(Step.QUESTION_ENTRY)
        if self.selected_paper is None or self.question_form is None:
            raise WorkflowStateError("Select a paper before adding questions")
        result = self._submit(
            Entity.QUESTION,
            lambda: self.coordinator.submit_question(self.selected_paper.id, self.question_form),
        )
        if result is None:
            return False

        self.sequencer.added_questions.append(result.value)
        self.question_form.reset()
        return True

    def finish_questions(self) -> None:
        """Step 3 -> 4: proceed to review."""
        self._require_step(Step.QUESTION_ENTRY)
        self.sequencer.advance()

    def review(self) -> ExamReview:
        """Step 4: what this run created."""
        self._require_step(Step.REVIEW)
        return ExamReview(
            session=self.created_session,
            papers=list(self.added_papers),
            questions=list(self.added_questions),
        )

    def reset(self) -> None:
        """Discard the run and start again at step 1."""
        self.sequencer.reset()
        self.error_slot.dismiss()
        self.loading = False
        self.session_form.reset()
        self.paper_form = None
        self.question_form = None
        self.created_session = None
        self.selected_paper = None

    # Internals

    def _require_step(self, step: Step) -> None:
        if self.sequencer.current_step != step:
            raise WorkflowStateError(
                f"{step.name} is not active (current step: {self.sequencer.current_step.name})"
            )

    def _submit(self, entity: Entity, call: Callable[[], Result]) -> Optional[Result]:
        """Run one submission with the loading guard; None on failure."""
        if self.loading:
            logger.debug("Ignoring %s submit: a submission is already in flight", entity.value)
            return None
        self.loading = True
        self.error_slot.dismiss()
        try:
            result = call()
        finally:
            self.loading = False

        if isinstance(result, Failure):
            self.error_slot.show(ErrorPresenter(entity).present(result.error))
            return None
        return result
