"""HTTP client for the school CBT service."""

import json
import logging
from typing import Any, Optional, TypeVar

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from cbt_author.api.auth import AuthContext
from cbt_author.api.errors import NetworkError, RequestSetupError, ServerError
from cbt_author.config.settings import Settings, get_settings
from cbt_author.models.exam import Campus, Envelope, SchoolClass, Teacher, UserSession

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

SUCCESS_STATUS_CODES = frozenset({200, 201})

# Endpoint paths, relative to the API base URL
CLASSES_WITH_ARMS_PATH = "/Class/all-with-arms"
CAMPUSES_PATH = "/Tenant/campuses"
TEACHERS_BY_CLASS_PATH = "/teacher/by-class/{class_id}"
EXAM_SESSION_PATH = "/Tenant/exam-session"
EXAM_PAPERS_PATH = "/Tenant/exam-sessions/{session_id}/papers"
QUESTIONS_PATH = "/ExamPaper/questions"
LOGIN_PATH = "/Tenant/login"


class CBTClient:
    """
    Thin wrapper over the service's JSON endpoints.

    Every call returns the unwrapped ``data`` of the response envelope or
    raises a ``SubmissionError`` subclass. Nothing is retried: one call is
    one request.
    """

    def __init__(
        self,
        base_url: str,
        auth: Optional[AuthContext] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth = auth or AuthContext()
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CBTClient":
        settings = settings or get_settings()
        return cls(
            base_url=settings.api_base_url,
            auth=AuthContext.from_settings(settings),
            timeout=settings.request_timeout,
        )

    # Directory reads

    def get_classes_with_arms(self) -> list[SchoolClass]:
        return self._records(SchoolClass, self._request("GET", CLASSES_WITH_ARMS_PATH))

    def get_campuses(self) -> list[Campus]:
        return self._records(Campus, self._request("GET", CAMPUSES_PATH))

    def get_teachers_by_class(self, class_id: str) -> list[Teacher]:
        path = TEACHERS_BY_CLASS_PATH.format(class_id=class_id)
        return self._records(Teacher, self._request("GET", path))

    # Authoring writes

    def create_exam_session(self, payload: dict[str, Any]) -> str:
        """Create an exam session and return its id."""
        return self._created_id(self._request("POST", EXAM_SESSION_PATH, payload=payload))

    def add_exam_paper(self, session_id: str, payload: dict[str, Any]) -> str:
        """Add a paper to an exam session and return the paper id."""
        path = EXAM_PAPERS_PATH.format(session_id=session_id)
        return self._created_id(self._request("POST", path, payload=payload))

    def add_question(self, payload: dict[str, Any]) -> str:
        """Add a question to an exam paper and return the question id."""
        return self._created_id(self._request("POST", QUESTIONS_PATH, payload=payload))

    # Auth

    def login(self, email: str, password: str) -> UserSession:
        """Sign in and adopt the returned token for later calls."""
        envelope = self._request(
            "POST",
            LOGIN_PATH,
            payload={"email": email, "password": password},
            authenticated=False,
        )
        user = self._record(UserSession, envelope.data or {}, envelope.status_code)
        self.auth = AuthContext(token=user.token)
        return user

    # Internals

    def _request(
        self,
        method: str,
        path: str,
        payload: Optional[dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Envelope[Any]:
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        if authenticated:
            headers.update(self.auth.headers())

        body = None
        if payload is not None:
            headers["Content-Type"] = "application/json"
            try:
                body = json.dumps(payload)
            except (TypeError, ValueError) as e:
                raise RequestSetupError(f"Could not encode request body: {e}") from e

        logger.debug("%s %s (token %s)", method, url, self.auth.redacted())
        try:
            response = self.session.request(
                method, url, data=body, headers=headers, timeout=self.timeout
            )
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            logger.warning("%s %s: no response (%s)", method, url, e)
            raise NetworkError(
                "Unable to reach the server. Please check your internet connection and try again."
            ) from e
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s: request not sent (%s)", method, url, e)
            raise RequestSetupError(str(e)) from e

        logger.debug("%s %s -> %s", method, url, response.status_code)

        try:
            decoded = response.json()
        except ValueError:
            decoded = None

        if not 200 <= response.status_code < 300:
            error = ServerError.from_body(response.status_code, decoded, response.reason or "")
            logger.warning("%s %s -> %s: %s", method, url, response.status_code, error.message)
            raise error

        if not isinstance(decoded, dict):
            raise ServerError(
                response.status_code,
                server_message="Response was not a JSON envelope",
                status_text=response.reason or "",
            )

        try:
            envelope = Envelope[Any].model_validate(decoded)
        except PydanticValidationError as e:
            logger.warning("%s %s -> %s: malformed envelope", method, url, response.status_code)
            raise ServerError(
                response.status_code,
                server_message=f"Response was not a valid envelope: {_first_problem(e)}",
                status_text=response.reason or "",
            ) from e
        if envelope.status_code not in SUCCESS_STATUS_CODES:
            # Transport said OK but the envelope reports a failure
            error = ServerError.from_body(envelope.status_code, decoded, response.reason or "")
            logger.warning("%s %s -> envelope %s: %s", method, url, envelope.status_code, error.message)
            raise error
        return envelope

    @staticmethod
    def _created_id(envelope: Envelope[Any]) -> str:
        if envelope.data is None or envelope.data == "":
            raise ServerError(
                envelope.status_code,
                server_message="Response did not include the new record's id",
            )
        return str(envelope.data)

    @staticmethod
    def _record(model: type[M], data: Any, status_code: int) -> M:
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ServerError(
                status_code,
                server_message=f"Response held an invalid {model.__name__} record: {_first_problem(e)}",
            ) from e

    @classmethod
    def _records(cls, model: type[M], envelope: Envelope[Any]) -> list[M]:
        data = envelope.data or []
        if not isinstance(data, list):
            raise ServerError(
                envelope.status_code,
                server_message=f"Expected a list of {model.__name__} records",
            )
        return [cls._record(model, item, envelope.status_code) for item in data]


def _first_problem(error: PydanticValidationError) -> str:
    """First pydantic error as ``field: message``."""
    item = error.errors()[0]
    location = ".".join(str(part) for part in item["loc"])
    return f"{location}: {item['msg']}" if location else item["msg"]
