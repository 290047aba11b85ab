"""Turning submission failures into messages a person can act on."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cbt_author.api.errors import (
    AuthenticationError,
    NetworkError,
    RequestSetupError,
    ServerError,
    SubmissionError,
    ValidationError,
)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Entity(str, Enum):
    """What was being submitted; picks the suggestion table."""

    SESSION = "session"
    PAPER = "paper"
    QUESTION = "question"


@dataclass(frozen=True)
class DisplayError:
    """A failure ready to show next to the form."""

    title: str
    message: str
    suggestion: str
    severity: Severity = Severity.ERROR


STATUS_TITLES = {
    400: "Invalid Request",
    401: "Authentication Failed",
    403: "Permission Denied",
    404: "Not Found",
    409: "Conflict",
    422: "Validation Failed",
    500: "Server Error",
}

RELOGIN_HINT = "Please try logging in again."

# First matching row wins. Matching is on the lowercased message text, which
# the service does not promise to keep stable.
SUGGESTION_KEYWORDS: dict[Entity, list[tuple[tuple[str, ...], str]]] = {
    Entity.SESSION: [
        (("past",), "Please select a future date and time for your exam."),
        (("conflict",), "Try a different time slot or check existing exams."),
        (("class", "arm"), "Ensure you have selected valid class and arm."),
        (("permission", "forbidden"), "Check if you have permission to create exams for this class."),
        (("token", "unauthorized"), RELOGIN_HINT),
    ],
    Entity.PAPER: [
        (("subject",), "Enter a valid subject name (e.g., Mathematics, English)."),
        (("time", "duration"), "Check time allocation - ensure positive values."),
        (("pass mark", "percentage"), "Pass mark should be between 0-100%."),
        (("presentation",), "Select a valid presentation type."),
        (
            ("exam session", "not found"),
            "The exam session may have been deleted. Please recreate the exam.",
        ),
        (
            ("duplicate", "already exists"),
            "This subject may already be added. Try a different subject name.",
        ),
        (("permission", "forbidden"), "Check if you have permission to add papers to this exam."),
        (("token", "unauthorized"), RELOGIN_HINT),
    ],
    Entity.QUESTION: [
        (
            ("total points", "points"),
            "Check if you have enough remaining points in your exam session. "
            "Reduce question points or increase exam total points.",
        ),
        (
            ("correct answer",),
            "Ensure correct answer format - use A,B,C,D for Multiple Choice "
            "or TRUE/FALSE for True/False questions.",
        ),
        (("options", "option"), "All options (A, B, C, D) are required for Multiple Choice questions."),
        (("time", "minutes"), "Time per question is required for QuestionPreview papers (1-60 minutes)."),
        (
            ("paper", "not found"),
            "The exam paper may have been deleted. Please refresh and try again.",
        ),
        (
            ("duplicate", "already exists"),
            "This question may already exist. Try modifying the question text.",
        ),
        (("permission", "forbidden"), "Check if you have permission to add questions to this paper."),
        (("token", "unauthorized"), RELOGIN_HINT),
    ],
}

NETWORK_MESSAGE = (
    "Unable to reach the server. Please check your internet connection and try again."
)


def status_title(status: int) -> str:
    return STATUS_TITLES.get(status, f"Error {status}")


def keyword_suggestion(entity: Entity, message: str) -> str:
    """Best-effort hint picked by keywords in the server's message."""
    text = message.lower()
    for keywords, suggestion in SUGGESTION_KEYWORDS[entity]:
        if any(keyword in text for keyword in keywords):
            return suggestion
    return ""


def describe_server_error(error: ServerError) -> str:
    """Server message, then any validation errors, details and problem type."""
    message = error.server_message
    if error.errors:
        message += "\n\nValidation Errors:\n• " + "\n• ".join(error.errors)
    if error.field_errors:
        pairs = [f"{field}: {', '.join(msgs)}" for field, msgs in error.field_errors.items()]
        message += "\n\nField Errors:\n• " + "\n• ".join(pairs)
    if error.details:
        message += f"\n\nDetails: {error.details}"
    if error.title and error.title != error.server_message:
        message += f"\n\nType: {error.title}"
    if not message.strip():
        message = f"HTTP {error.http_status}: {error.status_text}".strip().rstrip(":")
    return message.strip()


class ErrorPresenter:
    """
    Maps a ``SubmissionError`` to a ``DisplayError``.

    A structured ``errorCode`` from the service is used when a suggestion is
    registered for it; the keyword tables are the fallback.
    """

    def __init__(
        self,
        entity: Entity = Entity.SESSION,
        code_suggestions: Optional[dict[str, str]] = None,
    ) -> None:
        self.entity = Entity(entity)
        self.code_suggestions = code_suggestions or {}

    def present(self, error: SubmissionError) -> DisplayError:
        if isinstance(error, ValidationError):
            return DisplayError(
                title="Missing or Invalid Fields",
                message="\n".join(error.problems) or error.message,
                suggestion="Fill in all required fields and submit again.",
                severity=Severity.WARNING,
            )
        if isinstance(error, NetworkError):
            return DisplayError(
                title="Network Connection Error",
                message=NETWORK_MESSAGE,
                suggestion="Check your internet connection and try again.",
            )
        if isinstance(error, AuthenticationError):
            return DisplayError(
                title="Authentication Required",
                message=error.message,
                suggestion=RELOGIN_HINT,
            )
        if isinstance(error, RequestSetupError):
            return DisplayError(
                title="Request Configuration Error",
                message=error.message,
                suggestion="Check the client configuration and try again.",
            )
        if isinstance(error, ServerError):
            message = describe_server_error(error)
            suggestion = ""
            if error.error_code:
                suggestion = self.code_suggestions.get(error.error_code, "")
            if not suggestion:
                suggestion = keyword_suggestion(self.entity, message)
            if not suggestion and error.http_status == 401:
                suggestion = RELOGIN_HINT
            return DisplayError(
                title=status_title(error.http_status),
                message=message,
                suggestion=suggestion,
            )
        return DisplayError(
            title="Unexpected Error",
            message=error.message,
            suggestion="Please try again.",
        )


class ErrorSlot:
    """Holds the error shown beside a form until it is dismissed."""

    def __init__(self) -> None:
        self.current: Optional[DisplayError] = None

    def show(self, error: DisplayError) -> None:
        self.current = error

    def dismiss(self) -> None:
        self.current = None

    def __bool__(self) -> bool:
        return self.current is not None
