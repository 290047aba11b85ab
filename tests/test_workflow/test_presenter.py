"""Tests for error presentation."""

from cbt_author.api.errors import (
    AuthenticationError,
    NetworkError,
    RequestSetupError,
    ServerError,
    ValidationError,
)
from cbt_author.workflow.presenter import (
    DisplayError,
    Entity,
    ErrorPresenter,
    ErrorSlot,
    Severity,
    describe_server_error,
    keyword_suggestion,
)


class TestErrorPresenter:
    """Test mapping errors to display errors."""

    def test_class_not_found(self):
        """Test a 400 naming the class on session creation."""
        error = ServerError(400, server_message="Class not found")

        shown = ErrorPresenter(Entity.SESSION).present(error)

        assert shown.title == "Invalid Request"
        assert "Class not found" in shown.message
        assert "class and arm" in shown.suggestion

    def test_status_titles(self):
        """Test known and unknown statuses."""
        presenter = ErrorPresenter()

        assert presenter.present(ServerError(401)).title == "Authentication Failed"
        assert presenter.present(ServerError(403)).title == "Permission Denied"
        assert presenter.present(ServerError(409)).title == "Conflict"
        assert presenter.present(ServerError(422)).title == "Validation Failed"
        assert presenter.present(ServerError(500)).title == "Server Error"
        assert presenter.present(ServerError(418)).title == "Error 418"

    def test_validation_error_is_warning(self):
        """Test client-side problems."""
        shown = ErrorPresenter().present(ValidationError(["title is required"]))

        assert shown.title == "Missing or Invalid Fields"
        assert shown.severity == Severity.WARNING
        assert "title is required" in shown.message

    def test_network_error(self):
        """Test the no-response message."""
        shown = ErrorPresenter().present(NetworkError("timeout"))

        assert shown.title == "Network Connection Error"
        assert "internet connection" in shown.message

    def test_missing_token(self):
        """Test authentication setup failures."""
        shown = ErrorPresenter().present(AuthenticationError("Authentication token not found"))

        assert shown.title == "Authentication Required"
        assert "logging in" in shown.suggestion

    def test_request_setup_error(self):
        """Test other setup failures."""
        shown = ErrorPresenter().present(RequestSetupError("Invalid URL"))

        assert shown.title == "Request Configuration Error"
        assert shown.message == "Invalid URL"

    def test_error_code_wins_over_keywords(self):
        """Test that a registered errorCode suggestion is preferred."""
        presenter = ErrorPresenter(
            Entity.SESSION, code_suggestions={"EXAM_TIME_CONFLICT": "Pick another slot."}
        )
        error = ServerError(409, server_message="Class busy", error_code="EXAM_TIME_CONFLICT")

        assert presenter.present(error).suggestion == "Pick another slot."

    def test_unregistered_error_code_falls_back(self):
        """Test keyword matching when the code is unknown."""
        error = ServerError(409, server_message="Time conflict", error_code="OTHER")

        shown = ErrorPresenter(Entity.SESSION).present(error)

        assert "different time slot" in shown.suggestion

    def test_unauthorized_without_keywords(self):
        """Test the 401 fallback hint."""
        assert "logging in" in ErrorPresenter(Entity.PAPER).present(ServerError(401)).suggestion


class TestKeywordSuggestion:
    """Test the keyword tables."""

    def test_paper_keywords(self):
        """Test a paper-specific match."""
        assert "subject" in keyword_suggestion(Entity.PAPER, "Subject name is invalid")

    def test_question_points(self):
        """Test a question-specific match."""
        assert "remaining points" in keyword_suggestion(
            Entity.QUESTION, "Total points exceeded for this session"
        )

    def test_no_match(self):
        """Test that unknown messages give no suggestion."""
        assert keyword_suggestion(Entity.SESSION, "Something odd") == ""


class TestDescribeServerError:
    """Test the composed message."""

    def test_includes_everything(self):
        """Test errors, field errors, details and type."""
        error = ServerError(
            400,
            server_message="Validation failed",
            errors=["Title is required"],
            field_errors={"PassMark": ["must be <= 100"]},
            details="See docs",
            title="Bad Request",
        )

        message = describe_server_error(error)

        assert message.startswith("Validation failed")
        assert "Validation Errors:\n• Title is required" in message
        assert "Field Errors:\n• PassMark: must be <= 100" in message
        assert "Details: See docs" in message
        assert "Type: Bad Request" in message

    def test_empty_body_falls_back_to_status(self):
        """Test the status line fallback."""
        assert describe_server_error(ServerError(503, status_text="Service Unavailable")) == (
            "HTTP 503: Service Unavailable"
        )


class TestErrorSlot:
    """Test the error slot."""

    def test_show_and_dismiss(self):
        """Test that the slot holds one error until dismissed."""
        slot = ErrorSlot()
        assert not slot

        slot.show(DisplayError(title="t", message="m", suggestion=""))
        assert slot
        assert slot.current.title == "t"

        slot.dismiss()
        assert slot.current is None
