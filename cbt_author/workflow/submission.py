"""Validating, serializing and posting one authoring step."""

import logging
from dataclasses import dataclass
from datetime import tzinfo
from typing import Generic, Optional, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from cbt_author.api.client import CBTClient
from cbt_author.api.errors import SubmissionError, ValidationError
from cbt_author.models.exam import (
    MAX_TIME_PER_QUESTION,
    MIN_TIME_PER_QUESTION,
    MULTIPLE_CHOICE_ANSWERS,
    TRUE_FALSE_ANSWERS,
    ExamPaper,
    ExamSession,
    PresentationType,
    Question,
    QuestionType,
)
from cbt_author.workflow.forms import PaperForm, QuestionForm, SessionForm
from cbt_author.workflow.serialization import (
    parse_local_input,
    serialize_paper,
    serialize_question,
    serialize_session,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

QUESTION_TIME_MESSAGE = (
    f"Time per question is required for QuestionPreview mode "
    f"({MIN_TIME_PER_QUESTION}-{MAX_TIME_PER_QUESTION} minutes)"
)


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: SubmissionError


Result = Union[Success[T], Failure]


def _pydantic_problems(error: PydanticValidationError) -> list[str]:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        message = item["msg"].removeprefix("Value error, ")
        problems.append(f"{location}: {message}" if location else message)
    return problems


def _in_time_range(minutes: Optional[int]) -> bool:
    return minutes is not None and MIN_TIME_PER_QUESTION <= minutes <= MAX_TIME_PER_QUESTION


class SubmissionCoordinator:
    """
    One POST per call, preceded by client-side checks.

    Each ``submit_*`` method returns ``Success`` with the created entity
    (carrying its server id) or ``Failure`` with the reason. Errors never
    escape as exceptions. The caller decides what to do with the entity.
    Nothing is retried and no idempotency key is sent.
    """

    def __init__(self, client: CBTClient, tz: Optional[tzinfo] = None) -> None:
        self.client = client
        self.tz = tz

    def submit_session(self, form: SessionForm) -> Result[ExamSession]:
        try:
            session = self._build_session(form)
            session_id = self.client.create_exam_session(serialize_session(session))
        except SubmissionError as e:
            logger.warning("Exam session not created: %s", e.message)
            return Failure(e)
        logger.info("Created exam session %s (%r)", session_id, session.title)
        return Success(session.model_copy(update={"id": session_id}))

    def submit_paper(self, session_id: str, form: PaperForm) -> Result[ExamPaper]:
        try:
            paper = self._build_paper(session_id, form)
            paper_id = self.client.add_exam_paper(session_id, serialize_paper(paper))
        except SubmissionError as e:
            logger.warning("Paper not added to session %s: %s", session_id, e.message)
            return Failure(e)
        logger.info("Added paper %s (%r) to session %s", paper_id, paper.subject_name, session_id)
        return Success(paper.model_copy(update={"id": paper_id}))

    def submit_question(self, paper_id: str, form: QuestionForm) -> Result[Question]:
        try:
            question = self._build_question(paper_id, form)
            payload = serialize_question(question, form.presentation_type)
            question_id = self.client.add_question(payload)
        except SubmissionError as e:
            logger.warning("Question not added to paper %s: %s", paper_id, e.message)
            return Failure(e)
        logger.info("Added question %s to paper %s", question_id, paper_id)
        return Success(question.model_copy(update={"id": question_id}))

    # Validation and model construction

    def _build_session(self, form: SessionForm) -> ExamSession:
        values = form.snapshot()
        required = ("title", "class_id", "arm_id", "start_time", "end_time")
        missing = [name for name in required if not str(values[name]).strip()]
        if missing:
            raise ValidationError([f"{name} is required" for name in missing])

        problems = []
        times = {}
        for name in ("start_time", "end_time"):
            try:
                times[name] = parse_local_input(values[name], self.tz)
            except ValueError as e:
                problems.append(f"{name}: {e}")
        if problems:
            raise ValidationError(problems)

        try:
            return ExamSession(**{**values, **times})
        except PydanticValidationError as e:
            raise ValidationError(_pydantic_problems(e)) from e

    def _build_paper(self, session_id: str, form: PaperForm) -> ExamPaper:
        values = form.snapshot()
        problems = []
        if not session_id:
            problems.append("exam_session_id is required")
        if not str(values["subject_name"]).strip():
            problems.append("subject_name is required")
        if values["presentation_type"] == PresentationType.QUESTION_PREVIEW and not _in_time_range(
            values["default_time_per_question_in_minutes"]
        ):
            problems.append(QUESTION_TIME_MESSAGE)
        if problems:
            raise ValidationError(problems)

        try:
            return ExamPaper(exam_session_id=session_id, **values)
        except PydanticValidationError as e:
            raise ValidationError(_pydantic_problems(e)) from e

    def _build_question(self, paper_id: str, form: QuestionForm) -> Question:
        values = {**form.snapshot(), "exam_paper_id": paper_id}
        problems = []
        if not paper_id:
            problems.append("exam_paper_id is required")
        for name in ("question_text", "correct_answer"):
            if not str(values[name]).strip():
                problems.append(f"{name} is required")

        answer = str(values["correct_answer"]).strip()
        question_type = form.question_type
        if question_type == QuestionType.MULTIPLE_CHOICE:
            options = ("option_a", "option_b", "option_c", "option_d")
            if any(not str(values[name]).strip() for name in options):
                problems.append(
                    "All options (A, B, C, D) are required for Multiple Choice questions"
                )
            if answer and answer not in MULTIPLE_CHOICE_ANSWERS:
                problems.append(
                    "Correct answer must be A, B, C, or D for Multiple Choice questions"
                )
        elif question_type == QuestionType.TRUE_FALSE:
            if answer and answer not in TRUE_FALSE_ANSWERS:
                problems.append("Correct answer must be TRUE or FALSE for True/False questions")

        if form.times_each_question:
            if not _in_time_range(values["time_in_minutes"]):
                problems.append(QUESTION_TIME_MESSAGE)
        else:
            values["time_in_minutes"] = None

        if problems:
            raise ValidationError(problems)

        try:
            return Question(**values)
        except PydanticValidationError as e:
            raise ValidationError(_pydantic_problems(e)) from e
