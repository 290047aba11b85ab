"""Declarative exam plans for batch authoring."""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from cbt_author.models.exam import CAMEL_CONFIG, PresentationType, QuestionType

# Field order below is the order values are fed into the forms. Fields that
# reset others (class_id, presentation_type, question_type) come first.


class QuestionPlan(BaseModel):
    """A question to add to a paper."""

    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    question_text: str
    option_a: str = ""
    option_b: str = ""
    option_c: str = ""
    option_d: str = ""
    correct_answer: str
    points: int = 5
    time_in_minutes: Optional[int] = None

    model_config = CAMEL_CONFIG


class PaperPlan(BaseModel):
    """A paper to add to the session, with its questions."""

    presentation_type: PresentationType = PresentationType.QUESTION_PREVIEW
    subject_name: str
    pass_mark_for_this_paper: int = 60
    total_time_for_this_paper_in_minutes: int = 60
    default_time_per_question_in_minutes: Optional[int] = None
    questions: list[QuestionPlan] = Field(default_factory=list)

    model_config = CAMEL_CONFIG


class SessionPlan(BaseModel):
    """Exam session fields as entered in the first step.

    ``start_time`` and ``end_time`` are local wall-clock values in
    ``YYYY-MM-DDTHH:MM`` form, exactly as a datetime-local input yields them.
    """

    class_id: str
    arm_id: str
    title: str
    description: str = ""
    number_of_papers: int = Field(default=1, ge=1)
    total_duration_in_minutes: int = 90
    pass_mark: int = 60
    start_time: str
    end_time: str
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    total_points: int = 0

    model_config = CAMEL_CONFIG


class ExamPlan(BaseModel):
    """A whole exam: one session, its papers and their questions."""

    session: SessionPlan
    papers: list[PaperPlan] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_paper_count(self) -> "ExamPlan":
        """The plan must describe exactly as many papers as the session declares."""
        if len(self.papers) != self.session.number_of_papers:
            raise ValueError(
                f"Plan declares numberOfPapers={self.session.number_of_papers} "
                f"but lists {len(self.papers)} papers"
            )
        return self

    @property
    def total_questions(self) -> int:
        return sum(len(paper.questions) for paper in self.papers)

    model_config = {
        **CAMEL_CONFIG,
        "json_schema_extra": {
            "example": {
                "session": {
                    "classId": "c-jss1",
                    "armId": "a-jss1-gold",
                    "title": "First Term Examination",
                    "numberOfPapers": 1,
                    "startTime": "2025-06-01T09:00",
                    "endTime": "2025-06-01T11:00",
                    "totalPoints": 100,
                },
                "papers": [
                    {
                        "presentationType": 1,
                        "subjectName": "Mathematics",
                        "questions": [
                            {
                                "questionType": 2,
                                "questionText": "Zero is an even number.",
                                "correctAnswer": "TRUE",
                                "timeInMinutes": 1,
                            }
                        ],
                    }
                ],
            }
        },
    }
