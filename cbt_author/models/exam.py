"""Pydantic models for exam authoring and school directory records."""

from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Wire format produced by the browser's Date.toISOString()
UTC_WIRE_FORMAT = "%Y-%m-%dT%H:%M:%S.000Z"

MIN_TIME_PER_QUESTION = 1
MAX_TIME_PER_QUESTION = 60

# Shared config: camelCase on the wire, snake_case in Python
CAMEL_CONFIG = {
    "alias_generator": to_camel,
    "populate_by_name": True,
}


def format_utc(value: datetime) -> str:
    """Format an aware datetime as a UTC timestamp with a trailing ``Z``."""
    return value.astimezone(timezone.utc).strftime(UTC_WIRE_FORMAT)


class QuestionType(IntEnum):
    """Question answer formats."""

    MULTIPLE_CHOICE = 1
    TRUE_FALSE = 2
    SHORT_ANSWER = 3
    ESSAY = 4

    @property
    def label(self) -> str:
        return {
            QuestionType.MULTIPLE_CHOICE: "Multiple Choice",
            QuestionType.TRUE_FALSE: "True/False",
            QuestionType.SHORT_ANSWER: "Short Answer",
            QuestionType.ESSAY: "Essay",
        }[self]


class PresentationType(IntEnum):
    """How a paper is delivered to students."""

    QUESTION_PREVIEW = 1  # per-question timer
    SUBJECT_PREVIEW = 2  # whole-paper timer
    MULTIPLE_SUBJECTS = 3  # sequential-lock papers
    RANDOMIZED_QUESTIONS = 4  # per-student shuffled order

    @property
    def label(self) -> str:
        return {
            PresentationType.QUESTION_PREVIEW: "QuestionPreview",
            PresentationType.SUBJECT_PREVIEW: "SubjectPreview",
            PresentationType.MULTIPLE_SUBJECTS: "MultipleSubjects",
            PresentationType.RANDOMIZED_QUESTIONS: "RandomizedQuestions",
        }[self]


class AnswerOption(str, Enum):
    """Multiple choice answer keys."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"


MULTIPLE_CHOICE_ANSWERS = {option.value for option in AnswerOption}
TRUE_FALSE_ANSWERS = {"TRUE", "FALSE"}


class ExamSession(BaseModel):
    """Top-level exam record scoping papers to a class/arm and a time window."""

    id: Optional[str] = Field(None, description="Server-issued identifier")
    title: str = Field(..., min_length=1, description="Exam title")
    description: str = Field(default="", description="Exam instructions")
    class_id: str = Field(..., min_length=1, description="Class the exam is for")
    arm_id: str = Field(..., min_length=1, description="Arm within the class")
    number_of_papers: int = Field(default=1, ge=1, description="Papers in this exam")
    total_duration_in_minutes: int = Field(default=90, ge=0)
    pass_mark: int = Field(default=60, ge=0, le=100, description="Pass mark in percent")
    start_time: datetime = Field(..., description="Exam window start (aware)")
    end_time: datetime = Field(..., description="Exam window end (aware)")
    question_type: QuestionType = Field(default=QuestionType.MULTIPLE_CHOICE)
    total_points: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_time_window(self) -> "ExamSession":
        """Ensure the exam window is not empty."""
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime")
        return self

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: datetime) -> str:
        return format_utc(value)

    model_config = {
        **CAMEL_CONFIG,
        "json_schema_extra": {
            "example": {
                "title": "First Term Examination",
                "description": "Answer all questions",
                "classId": "c-jss1",
                "armId": "a-jss1-gold",
                "numberOfPapers": 2,
                "totalDurationInMinutes": 120,
                "passMark": 50,
                "startTime": "2025-06-01T08:00:00.000Z",
                "endTime": "2025-06-01T10:00:00.000Z",
                "questionType": 1,
                "totalPoints": 100,
            }
        },
    }


class ExamPaper(BaseModel):
    """A subject-scoped subdivision of an exam session."""

    id: Optional[str] = Field(None, description="Server-issued identifier")
    exam_session_id: str = Field(..., min_length=1)
    subject_name: str = Field(..., min_length=1, description="Subject of the paper")
    pass_mark_for_this_paper: int = Field(default=60, ge=0, le=100)
    total_time_for_this_paper_in_minutes: int = Field(default=60, ge=0)
    presentation_type: PresentationType = Field(default=PresentationType.QUESTION_PREVIEW)
    default_time_per_question_in_minutes: int = Field(default=2)

    @model_validator(mode="after")
    def check_time_per_question(self) -> "ExamPaper":
        """QuestionPreview papers need a per-question time between 1 and 60 minutes."""
        if self.presentation_type == PresentationType.QUESTION_PREVIEW and not (
            MIN_TIME_PER_QUESTION
            <= self.default_time_per_question_in_minutes
            <= MAX_TIME_PER_QUESTION
        ):
            raise ValueError(
                "defaultTimePerQuestionInMinutes must be between "
                f"{MIN_TIME_PER_QUESTION} and {MAX_TIME_PER_QUESTION} for QuestionPreview papers"
            )
        return self

    @property
    def uses_question_timer(self) -> bool:
        return self.presentation_type == PresentationType.QUESTION_PREVIEW

    model_config = CAMEL_CONFIG


class Question(BaseModel):
    """A single question belonging to an exam paper."""

    id: Optional[str] = Field(None, description="Server-issued identifier")
    exam_paper_id: str = Field(..., min_length=1)
    question_text: str = Field(..., min_length=1)
    question_type: QuestionType = Field(default=QuestionType.MULTIPLE_CHOICE)
    option_a: str = ""
    option_b: str = ""
    option_c: str = ""
    option_d: str = ""
    correct_answer: str = Field(..., min_length=1)
    points: int = Field(default=5, ge=0)
    time_in_minutes: Optional[int] = Field(
        None, ge=MIN_TIME_PER_QUESTION, le=MAX_TIME_PER_QUESTION
    )

    @field_validator("correct_answer")
    @classmethod
    def strip_correct_answer(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def check_answer_format(self) -> "Question":
        """Enforce the option and answer rules of each question type."""
        if self.question_type == QuestionType.MULTIPLE_CHOICE:
            missing = [key for key, text in self.options.items() if not text.strip()]
            if missing:
                raise ValueError(
                    f"Options {', '.join(missing)} are required for Multiple Choice questions"
                )
            if self.correct_answer not in MULTIPLE_CHOICE_ANSWERS:
                raise ValueError("correctAnswer must be A, B, C, or D for Multiple Choice")
        elif self.question_type == QuestionType.TRUE_FALSE:
            if self.correct_answer not in TRUE_FALSE_ANSWERS:
                raise ValueError("correctAnswer must be TRUE or FALSE for True/False")
        return self

    @property
    def options(self) -> dict[str, str]:
        return {
            "A": self.option_a,
            "B": self.option_b,
            "C": self.option_c,
            "D": self.option_d,
        }

    model_config = CAMEL_CONFIG


class WorkflowStep(BaseModel):
    """One entry of the authoring step indicator."""

    step: int = Field(..., ge=1, le=4)
    title: str
    description: str
    completed: bool = False


class CreatedExamSession(BaseModel):
    """Summary of the session created in step 1, kept for the later steps."""

    id: str
    title: str
    number_of_papers: int = Field(..., ge=1)
    class_name: str = ""
    arm_name: str = ""


class ExamReview(BaseModel):
    """Everything authored in one run of the workflow."""

    session: CreatedExamSession
    papers: list[ExamPaper] = Field(default_factory=list)
    questions: list[Question] = Field(default_factory=list)

    def questions_for(self, paper_id: str) -> list[Question]:
        """Get the questions added to one paper, in the order they were added."""
        return [q for q in self.questions if q.exam_paper_id == paper_id]

    @property
    def total_points(self) -> int:
        return sum(q.points for q in self.questions)

    @property
    def total_questions(self) -> int:
        return len(self.questions)


# Response envelope


class Envelope(BaseModel, Generic[T]):
    """The ``{statusCode, data, message}`` wrapper used by every response."""

    status_code: int
    data: Optional[T] = None
    message: Optional[str] = None
    errors: Any = None
    details: Optional[str] = None
    title: Optional[str] = None

    model_config = CAMEL_CONFIG


# Directory records


class Arm(BaseModel):
    """A subdivision (section/stream) of a class."""

    arm_id: str
    arm_name: str

    model_config = CAMEL_CONFIG


class SchoolClass(BaseModel):
    """A class with its embedded arms."""

    class_id: str
    class_name: str
    campus_id: Optional[str] = None
    campus_name: Optional[str] = None
    arms: list[Arm] = Field(default_factory=list)

    def find_arm(self, arm_id: str) -> Optional[Arm]:
        return next((arm for arm in self.arms if arm.arm_id == arm_id), None)

    model_config = CAMEL_CONFIG


class Campus(BaseModel):
    """A school campus."""

    id: str
    name: str
    description: Optional[str] = None
    address: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    phone_number: str = ""
    email: Optional[str] = None
    capacity: int = 0
    is_active: bool = True
    student_count: int = 0
    teacher_count: int = 0

    model_config = CAMEL_CONFIG


class Teacher(BaseModel):
    """A teacher assigned to a class."""

    teacher_id: str
    first_name: str
    last_name: str
    gender: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    subjects: list[str] = Field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    model_config = CAMEL_CONFIG


class UserSession(BaseModel):
    """The signed-in user returned by the login endpoint."""

    token: str = Field(..., min_length=1)
    expiry_date: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    role: str = ""
    school_name: str = ""
    email: str = ""
    must_change_password: bool = False

    model_config = {**CAMEL_CONFIG, "extra": "ignore"}
