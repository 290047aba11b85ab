"""Error taxonomy for calls against the CBT service."""

from typing import Any, Optional


class SubmissionError(Exception):
    """Base class for everything that can stop a submission."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SubmissionError):
    """Client-side check failed; nothing was sent."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "Invalid form")


class NetworkError(SubmissionError):
    """No response was received from the service."""


class RequestSetupError(SubmissionError):
    """The request could not be built (bad URL, unserializable body, ...)."""


class AuthenticationError(RequestSetupError):
    """No bearer token is available for an authenticated call."""


class ServerError(SubmissionError):
    """The service answered with a non-success status.

    Attributes:
        http_status: Status from the transport, or the envelope's statusCode
            when the transport said 200 but the envelope disagreed
        server_message: ``message`` from the response body
        field_errors: ``errors`` when given as ``{field: [messages]}``
        errors: ``errors`` when given as a flat list
        details: ``details`` from the response body
        title: ``title`` from the response body (problem-details style)
        error_code: ``errorCode`` from the response body, when the service sends one
        status_text: HTTP reason phrase
    """

    def __init__(
        self,
        http_status: int,
        server_message: str = "",
        field_errors: Optional[dict[str, list[str]]] = None,
        errors: Optional[list[str]] = None,
        details: Optional[str] = None,
        title: Optional[str] = None,
        error_code: Optional[str] = None,
        status_text: str = "",
    ) -> None:
        self.http_status = http_status
        self.server_message = server_message or ""
        self.field_errors = field_errors or {}
        self.errors = errors or []
        self.details = details
        self.title = title
        self.error_code = error_code
        self.status_text = status_text
        super().__init__(self.server_message or f"HTTP {http_status}: {status_text}".strip())

    @classmethod
    def from_body(cls, http_status: int, body: Any, status_text: str = "") -> "ServerError":
        """Build from a decoded error body, tolerating whatever shape it has."""
        if not isinstance(body, dict):
            return cls(http_status, status_text=status_text)

        field_errors: dict[str, list[str]] = {}
        flat_errors: list[str] = []
        raw_errors = body.get("errors")
        if isinstance(raw_errors, list):
            flat_errors = [str(item) for item in raw_errors]
        elif isinstance(raw_errors, dict):
            for field, messages in raw_errors.items():
                if isinstance(messages, list):
                    field_errors[field] = [str(m) for m in messages]
                else:
                    field_errors[field] = [str(messages)]

        return cls(
            http_status,
            server_message=str(body.get("message") or ""),
            field_errors=field_errors,
            errors=flat_errors,
            details=body.get("details"),
            title=body.get("title"),
            error_code=body.get("errorCode"),
            status_text=status_text,
        )
