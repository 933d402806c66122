"""Tests for the error taxonomy and its helpers."""

import pytest

from poupadin.domain.exceptions import (
    DEFAULT_ERROR_MESSAGE,
    ApiError,
    ConflictError,
    InvalidCredentialsError,
    NetworkError,
    ServerError,
    SessionExpiredError,
    ValidationFailedError,
    error_from_response,
    extract_message,
    extract_validation_errors,
    get_error_message,
)


class TestErrorFromResponse:
    """Test the status -> exception table."""

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (400, ValidationFailedError),
            (401, InvalidCredentialsError),
            (409, ConflictError),
            (500, ServerError),
            (502, ServerError),
            (403, ApiError),
            (404, ApiError),
        ],
    )
    def test_status_mapping(self, status, expected):
        error = error_from_response(status, {"message": "x"})

        assert type(error) is expected
        assert error.status_code == status
        assert error.message == "x"

    def test_default_message_when_body_is_empty(self):
        error = error_from_response(500, None)
        assert error.message == DEFAULT_ERROR_MESSAGE

    def test_400_joins_field_errors_with_newlines(self):
        body = {"message": "Validation failed", "errors": ["Email invalid", {"msg": "Too short"}]}

        error = error_from_response(400, body)

        assert isinstance(error, ValidationFailedError)
        assert error.errors == ["Email invalid", "Too short"]
        assert error.message == "Email invalid\nToo short"
        assert error.body == body

    def test_str_includes_status(self):
        assert str(error_from_response(409, {"message": "Exists"})) == "HTTP 409: Exists"


class TestExtractMessage:
    """Test message extraction from error bodies."""

    def test_message_wins(self):
        assert extract_message({"message": "a", "error": "b"}, "d") == "a"

    def test_errors_joined_when_no_message(self):
        assert extract_message({"errors": ["a", "b"]}, "d") == "a, b"

    def test_error_field(self):
        assert extract_message({"error": "b"}, "d") == "b"

    def test_default(self):
        assert extract_message({}, "d") == "d"
        assert extract_message(None, "d") == "d"

    def test_validation_errors_ignore_junk(self):
        assert extract_validation_errors({"errors": [1, {"field": "x"}, "ok"]}) == ["ok"]
        assert extract_validation_errors({"errors": "not a list"}) == []


class TestGetErrorMessage:
    """Test the user-facing message helper."""

    def test_validation_error_lists_fields(self):
        error = ValidationFailedError("ignored", errors=["a", "b"])
        assert get_error_message(error) == "a\nb"

    def test_api_error_uses_server_message(self):
        assert get_error_message(ConflictError("Email taken", 409)) == "Email taken"

    def test_network_error_default_text(self):
        assert "internet" in get_error_message(NetworkError())

    def test_session_expired_default_text(self):
        error = SessionExpiredError()
        assert error.status_code == 401
        assert get_error_message(error) == "Session expired. Please log in again."

    def test_plain_exception_and_string(self):
        assert get_error_message(RuntimeError("boom")) == "boom"
        assert get_error_message("text") == "text"

    def test_fallback(self):
        assert get_error_message(None) == DEFAULT_ERROR_MESSAGE
        assert get_error_message(RuntimeError(), "fallback") == "fallback"
