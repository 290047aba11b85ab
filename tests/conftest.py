"""Shared test fixtures and configuration for pytest."""

import os
from datetime import datetime, timezone
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest

from cbt_author.api.auth import AuthContext
from cbt_author.api.client import CBTClient
from cbt_author.api.errors import SubmissionError
from cbt_author.models.exam import (
    CreatedExamSession,
    ExamPaper,
    ExamReview,
    PresentationType,
    Question,
    QuestionType,
    SchoolClass,
)
from cbt_author.models.plan import ExamPlan
from cbt_author.workflow.authoring import ExamAuthoringWorkflow

BASE_URL = "http://cbt.test/api"


def make_response(
    status_code: int = 200,
    body: Any = None,
    reason: str = "OK",
    json_error: bool = False,
) -> MagicMock:
    """Build a stand-in for ``requests.Response``."""
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


def envelope(data: Any = None, status_code: int = 200, message: str = "Success") -> dict[str, Any]:
    return {"statusCode": status_code, "data": data, "message": message}


class FakeClient:
    """
    Records every write and answers with sequential ids.

    ``failures`` maps a method name to a queue of errors; each call to that
    method pops one and raises it (``None`` entries let the call through).
    """

    def __init__(self, classes: Optional[list] = None) -> None:
        self.classes = classes or []
        self.calls: list[tuple[str, Any]] = []
        self.failures: dict[str, list[Optional[SubmissionError]]] = {}
        self._counter = 0

    def fail_next(self, method: str, *errors: Optional[SubmissionError]) -> None:
        self.failures.setdefault(method, []).extend(errors)

    def _maybe_fail(self, method: str) -> None:
        queue = self.failures.get(method)
        if queue:
            error = queue.pop(0)
            if error is not None:
                raise error

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    def get_classes_with_arms(self):
        self._maybe_fail("get_classes_with_arms")
        return self.classes

    def create_exam_session(self, payload: dict[str, Any]) -> str:
        self.calls.append(("create_exam_session", payload))
        self._maybe_fail("create_exam_session")
        return self._next_id("session")

    def add_exam_paper(self, session_id: str, payload: dict[str, Any]) -> str:
        self.calls.append(("add_exam_paper", (session_id, payload)))
        self._maybe_fail("add_exam_paper")
        return self._next_id("paper")

    def add_question(self, payload: dict[str, Any]) -> str:
        self.calls.append(("add_question", payload))
        self._maybe_fail("add_question")
        return self._next_id("question")

    def payloads(self, method: str) -> list[Any]:
        return [payload for name, payload in self.calls if name == method]


@pytest.fixture
def mock_session() -> MagicMock:
    """A ``requests.Session`` stand-in whose ``request`` returns a 200 envelope."""
    session = MagicMock()
    session.request.return_value = make_response(body=envelope("new-id"))
    return session


@pytest.fixture
def client(mock_session: MagicMock) -> CBTClient:
    """Client with a token and a mocked transport."""
    return CBTClient(BASE_URL, auth=AuthContext(token="test-token"), session=mock_session)


@pytest.fixture
def sample_classes_data() -> list[dict[str, Any]]:
    """Classes as the service returns them."""
    return [
        {
            "classId": "c-jss1",
            "className": "JSS 1",
            "campusId": "campus-1",
            "campusName": "Main Campus",
            "arms": [
                {"armId": "a-gold", "armName": "Gold"},
                {"armId": "a-silver", "armName": "Silver"},
            ],
        },
        {
            "classId": "c-jss2",
            "className": "JSS 2",
            "arms": [{"armId": "a-blue", "armName": "Blue"}],
        },
    ]


@pytest.fixture
def fake_client(sample_classes_data: list[dict[str, Any]]) -> FakeClient:
    return FakeClient(classes=[SchoolClass.model_validate(c) for c in sample_classes_data])


@pytest.fixture
def workflow(fake_client: FakeClient) -> ExamAuthoringWorkflow:
    """A fresh authoring run with classes loaded; times are read as UTC."""
    run = ExamAuthoringWorkflow(fake_client, tz=timezone.utc)
    run.load_classes()
    return run


@pytest.fixture
def session_values() -> dict[str, Any]:
    """A complete, valid session form."""
    return {
        "class_id": "c-jss1",
        "arm_id": "a-gold",
        "title": "First Term Examination",
        "description": "Answer all questions",
        "number_of_papers": 2,
        "total_duration_in_minutes": 120,
        "pass_mark": 50,
        "start_time": "2025-06-01T09:00",
        "end_time": "2025-06-01T11:00",
        "question_type": 1,
        "total_points": 100,
    }


@pytest.fixture
def multiple_choice_values() -> dict[str, Any]:
    """A complete multiple choice question."""
    return {
        "question_type": 1,
        "question_text": "What is 2 + 2?",
        "option_a": "3",
        "option_b": "4",
        "option_c": "5",
        "option_d": "6",
        "correct_answer": "B",
        "points": 5,
    }


@pytest.fixture
def sample_plan_data() -> dict[str, Any]:
    """An exam plan as it would be written in a JSON file."""
    return {
        "session": {
            "classId": "c-jss1",
            "armId": "a-gold",
            "title": "First Term Examination",
            "numberOfPapers": 2,
            "startTime": "2025-06-01T09:00",
            "endTime": "2025-06-01T11:00",
            "totalPoints": 100,
        },
        "papers": [
            {
                "presentationType": 1,
                "subjectName": "Mathematics",
                "defaultTimePerQuestionInMinutes": 3,
                "questions": [
                    {
                        "questionType": 1,
                        "questionText": "What is 2 + 2?",
                        "optionA": "3",
                        "optionB": "4",
                        "optionC": "5",
                        "optionD": "6",
                        "correctAnswer": "B",
                        "timeInMinutes": 2,
                    },
                    {
                        "questionType": 2,
                        "questionText": "Zero is an even number.",
                        "correctAnswer": "TRUE",
                    },
                ],
            },
            {
                "presentationType": 2,
                "subjectName": "English",
                "questions": [
                    {
                        "questionType": 4,
                        "questionText": "Describe your last holiday.",
                        "correctAnswer": "Open answer",
                        "points": 20,
                    }
                ],
            },
        ],
    }


@pytest.fixture
def sample_plan(sample_plan_data: dict[str, Any]) -> ExamPlan:
    return ExamPlan.model_validate(sample_plan_data)


@pytest.fixture
def sample_review() -> ExamReview:
    """A finished run with one timed and one untimed paper."""
    session = CreatedExamSession(
        id="session-1",
        title="First Term Examination",
        number_of_papers=2,
        class_name="JSS 1",
        arm_name="Gold",
    )
    papers = [
        ExamPaper(
            id="paper-1",
            exam_session_id="session-1",
            subject_name="Mathematics",
            presentation_type=PresentationType.QUESTION_PREVIEW,
            default_time_per_question_in_minutes=2,
        ),
        ExamPaper(
            id="paper-2",
            exam_session_id="session-1",
            subject_name="English",
            presentation_type=PresentationType.SUBJECT_PREVIEW,
            default_time_per_question_in_minutes=0,
        ),
    ]
    questions = [
        Question(
            id="question-1",
            exam_paper_id="paper-1",
            question_text="What is 2 + 2?",
            question_type=QuestionType.MULTIPLE_CHOICE,
            option_a="3",
            option_b="4",
            option_c="5",
            option_d="6",
            correct_answer="B",
            points=5,
            time_in_minutes=2,
        ),
        Question(
            id="question-2",
            exam_paper_id="paper-1",
            question_text="Zero is an even number.",
            question_type=QuestionType.TRUE_FALSE,
            correct_answer="TRUE",
            points=5,
            time_in_minutes=1,
        ),
        Question(
            id="question-3",
            exam_paper_id="paper-2",
            question_text="Describe your last holiday.",
            question_type=QuestionType.ESSAY,
            correct_answer="Open answer",
            points=20,
        ),
    ]
    return ExamReview(session=session, papers=papers, questions=questions)


@pytest.fixture
def aware_window() -> tuple[datetime, datetime]:
    return (
        datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc),
        datetime(2025, 6, 1, 11, 0, tzinfo=timezone.utc),
    )


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer CBT_* variables out of the tests."""
    for name in list(os.environ):
        if name.startswith("CBT_"):
            monkeypatch.delenv(name, raising=False)
