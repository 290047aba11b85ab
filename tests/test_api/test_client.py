"""Tests for the CBT service client."""

import json

import pytest
import requests

from cbt_author.api.auth import AuthContext
from cbt_author.api.client import CBTClient
from cbt_author.api.errors import (
    AuthenticationError,
    NetworkError,
    RequestSetupError,
    ServerError,
)
from cbt_author.config.settings import Settings

from conftest import BASE_URL, envelope, make_response


def sent(mock_session):
    """Method, URL, headers and decoded body of the last request."""
    args, kwargs = mock_session.request.call_args
    method, url = args
    body = json.loads(kwargs["data"]) if kwargs["data"] else None
    return method, url, kwargs["headers"], body


class TestDirectoryReads:
    """Test the GET endpoints."""

    def test_get_classes_with_arms(self, client, mock_session, sample_classes_data):
        """Test that classes and their arms are parsed."""
        mock_session.request.return_value = make_response(body=envelope(sample_classes_data))

        classes = client.get_classes_with_arms()

        method, url, headers, _ = sent(mock_session)
        assert method == "GET"
        assert url == f"{BASE_URL}/Class/all-with-arms"
        assert headers["Authorization"] == "Bearer test-token"
        assert [c.class_name for c in classes] == ["JSS 1", "JSS 2"]
        assert classes[0].arms[1].arm_id == "a-silver"

    def test_get_campuses(self, client, mock_session):
        """Test that campuses are parsed."""
        mock_session.request.return_value = make_response(
            body=envelope([{"id": "campus-1", "name": "Main", "city": "Lagos", "studentCount": 400}])
        )

        campuses = client.get_campuses()

        assert sent(mock_session)[1] == f"{BASE_URL}/Tenant/campuses"
        assert campuses[0].student_count == 400

    def test_get_teachers_by_class(self, client, mock_session):
        """Test that the class id goes into the path."""
        mock_session.request.return_value = make_response(
            body=envelope([{"teacherId": "t-1", "firstName": "Ada", "lastName": "Obi"}])
        )

        teachers = client.get_teachers_by_class("c-jss1")

        assert sent(mock_session)[1] == f"{BASE_URL}/teacher/by-class/c-jss1"
        assert teachers[0].full_name == "Ada Obi"

    def test_null_data_is_an_empty_list(self, client, mock_session):
        """Test that a missing data field reads as no records."""
        mock_session.request.return_value = make_response(body=envelope(None))

        assert client.get_campuses() == []


class TestAuthoringWrites:
    """Test the POST endpoints."""

    def test_create_exam_session_returns_id(self, client, mock_session):
        """Test that the id is unwrapped from data."""
        mock_session.request.return_value = make_response(body=envelope("session-9"))

        session_id = client.create_exam_session({"title": "Mid Term"})

        method, url, headers, body = sent(mock_session)
        assert session_id == "session-9"
        assert method == "POST"
        assert url == f"{BASE_URL}/Tenant/exam-session"
        assert headers["Content-Type"] == "application/json"
        assert body == {"title": "Mid Term"}

    def test_add_exam_paper_posts_to_session(self, client, mock_session):
        """Test the nested paper path."""
        mock_session.request.return_value = make_response(body=envelope("paper-3"), status_code=201)

        paper_id = client.add_exam_paper("session-9", {"subjectName": "Maths"})

        assert paper_id == "paper-3"
        assert sent(mock_session)[1] == f"{BASE_URL}/Tenant/exam-sessions/session-9/papers"

    def test_add_question(self, client, mock_session):
        """Test the question path."""
        client.add_question({"questionText": "?"})

        assert sent(mock_session)[1] == f"{BASE_URL}/ExamPaper/questions"

    def test_envelope_201_is_success(self, client, mock_session):
        """Test that statusCode 201 in the envelope counts as success."""
        mock_session.request.return_value = make_response(body=envelope("q-1", status_code=201))

        assert client.add_question({}) == "q-1"

    def test_missing_id_is_server_error(self, client, mock_session):
        """Test that a success without an id is rejected."""
        mock_session.request.return_value = make_response(body=envelope(None))

        with pytest.raises(ServerError):
            client.create_exam_session({})

    def test_uses_configured_timeout(self, mock_session):
        """Test that the timeout is passed to every request."""
        client = CBTClient(BASE_URL, auth=AuthContext(token="t"), timeout=7.5, session=mock_session)

        client.add_question({})

        assert mock_session.request.call_args.kwargs["timeout"] == 7.5


class TestFailures:
    """Test how failures are classified."""

    def test_missing_token_sends_nothing(self, mock_session):
        """Test that an authenticated call without a token fails before sending."""
        client = CBTClient(BASE_URL, auth=AuthContext(), session=mock_session)

        with pytest.raises(AuthenticationError, match="Authentication token not found"):
            client.create_exam_session({"title": "x"})

        mock_session.request.assert_not_called()

    def test_unserializable_body(self, client, mock_session):
        """Test that a body json cannot encode is a setup error."""
        with pytest.raises(RequestSetupError):
            client.add_question({"when": object()})

        mock_session.request.assert_not_called()

    def test_connection_error_is_network_error(self, client, mock_session):
        """Test that no response maps to NetworkError."""
        mock_session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(NetworkError):
            client.get_campuses()

    def test_timeout_is_network_error(self, client, mock_session):
        """Test that a timeout maps to NetworkError."""
        mock_session.request.side_effect = requests.exceptions.Timeout()

        with pytest.raises(NetworkError):
            client.get_campuses()

    def test_invalid_url_is_setup_error(self, client, mock_session):
        """Test that other request errors map to RequestSetupError."""
        mock_session.request.side_effect = requests.exceptions.InvalidURL("bad url")

        with pytest.raises(RequestSetupError):
            client.get_campuses()

    def test_http_error_carries_body(self, client, mock_session):
        """Test that a 400 body is parsed into the error."""
        mock_session.request.return_value = make_response(
            status_code=400,
            reason="Bad Request",
            body={
                "statusCode": 400,
                "message": "Start time cannot be in the past",
                "errors": {"StartTime": ["must be in the future"]},
            },
        )

        with pytest.raises(ServerError) as exc_info:
            client.create_exam_session({})

        error = exc_info.value
        assert error.http_status == 400
        assert error.server_message == "Start time cannot be in the past"
        assert error.field_errors == {"StartTime": ["must be in the future"]}

    def test_http_error_without_json(self, client, mock_session):
        """Test that a non-JSON error body still yields a ServerError."""
        mock_session.request.return_value = make_response(
            status_code=502, reason="Bad Gateway", json_error=True
        )

        with pytest.raises(ServerError) as exc_info:
            client.get_campuses()

        assert exc_info.value.http_status == 502
        assert exc_info.value.status_text == "Bad Gateway"

    def test_envelope_failure_inside_http_200(self, client, mock_session):
        """Test that a failing envelope status overrides a 200 transport status."""
        mock_session.request.return_value = make_response(
            body={"statusCode": 409, "message": "Exam conflicts with an existing exam"}
        )

        with pytest.raises(ServerError) as exc_info:
            client.create_exam_session({})

        assert exc_info.value.http_status == 409

    def test_body_that_is_not_an_envelope(self, client, mock_session):
        """Test that a 200 with a non-object body is rejected."""
        mock_session.request.return_value = make_response(body=["unexpected"])

        with pytest.raises(ServerError):
            client.get_campuses()


class TestLogin:
    """Test signing in."""

    def test_login_adopts_token(self, mock_session):
        """Test that login needs no token and keeps the one returned."""
        client = CBTClient(BASE_URL, session=mock_session)
        mock_session.request.return_value = make_response(
            body=envelope({"token": "fresh-token", "firstName": "Ada", "role": "Teacher"})
        )

        user = client.login("ada@school.test", "secret")

        _, url, headers, body = sent(mock_session)
        assert url == f"{BASE_URL}/Tenant/login"
        assert "Authorization" not in headers
        assert body == {"email": "ada@school.test", "password": "secret"}
        assert user.first_name == "Ada"
        assert client.auth.token == "fresh-token"


class TestFromSettings:
    """Test building a client from settings."""

    def test_uses_settings_values(self, tmp_path):
        """Test base URL, timeout and token come from settings."""
        settings = Settings(
            CBT_API_BASE_URL="http://example.test/api/",
            CBT_REQUEST_TIMEOUT=5,
            CBT_AUTH_TOKEN="env-token",
            CBT_TOKEN_FILE=str(tmp_path / "token"),
        )

        client = CBTClient.from_settings(settings)

        assert client.base_url == "http://example.test/api"
        assert client.timeout == 5
        assert client.auth.token == "env-token"


class TestMalformedResponses:
    """Test 2xx responses whose body does not have the expected shape."""

    def test_created_without_status_code(self, client, mock_session):
        """Test that a 201 body missing statusCode is a ServerError."""
        mock_session.request.return_value = make_response(
            status_code=201, reason="Created", body={"data": "paper-9"}
        )

        with pytest.raises(ServerError) as exc_info:
            client.add_exam_paper("s-1", {"subjectName": "Maths"})

        assert exc_info.value.http_status == 201
        assert "not a valid envelope" in exc_info.value.message

    def test_class_record_missing_name(self, client, mock_session):
        """Test that a class without className is a ServerError."""
        mock_session.request.return_value = make_response(body=envelope([{"classId": "c1"}]))

        with pytest.raises(ServerError) as exc_info:
            client.get_classes_with_arms()

        assert "SchoolClass" in exc_info.value.message
        assert "className" in exc_info.value.message

    def test_directory_data_not_a_list(self, client, mock_session):
        """Test that a directory read needs a list."""
        mock_session.request.return_value = make_response(body=envelope({"id": "campus-1"}))

        with pytest.raises(ServerError):
            client.get_campuses()

    def test_login_without_token(self, mock_session):
        """Test that a login response without a token is a ServerError."""
        client = CBTClient(BASE_URL, session=mock_session)
        mock_session.request.return_value = make_response(body=envelope({"firstName": "Ada"}))

        with pytest.raises(ServerError):
            client.login("ada@school.test", "secret")

        assert not client.auth.is_authenticated
