"""Domain exceptions."""

from typing import Any

DEFAULT_ERROR_MESSAGE = "Unexpected error. Please try again."


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so code can inspect it without parsing
    # str(exception). This is your base class - DON'T raise it directly! Always use a specific
    # subclass so callers can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed before anything was sent.

    Raised by DTOs and entities whose invariants are violated (empty email,
    half a token pair, unparseable date of birth).
    """

    pass


class ApiError(DomainException):
    """The API answered with a non-2xx status.

    Carries the explicit status code and the parsed JSON body (None when the
    body was empty or not JSON), so nobody has to bolt attributes onto a
    generic exception to find out what the server said.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        return f"HTTP {self.status_code}: {self.message}"


class InvalidCredentialsError(ApiError):
    """Login (or another auth endpoint) rejected the credentials.

    HTTP Status: 401
    """

    pass


class ValidationFailedError(ApiError):
    """The server refused the payload.

    HTTP Status: 400

    `errors` holds the field-level messages, `message` is them joined by
    newlines (or the server's own message when there were none).
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        body: dict[str, Any] | None = None,
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(message, status_code, body)
        self.errors = errors or []


class ConflictError(ApiError):
    """The resource already exists (duplicate email on register, etc).

    HTTP Status: 409
    """

    pass


class ServerError(ApiError):
    """The server failed, or answered with something that is not JSON.

    HTTP Status: 5xx (or whatever status carried the unparseable body)
    """

    pass


class SessionExpiredError(ApiError):
    """An authenticated call still ended in 401 after the renewal attempt.

    Hey future me - by the time a resource client sees this, the gateway has
    already tried the refresh token and (if that failed) wiped the store. The
    only way forward is a fresh login. Don't retry!
    """

    def __init__(
        self,
        message: str = "Session expired. Please log in again.",
        status_code: int = 401,
        body: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code, body)


class NetworkError(DomainException):
    """Transport failure before any response was received.

    DNS, timeouts, connection refused. The original httpx exception is chained
    as __cause__.
    """

    def __init__(self, message: str = "Connection error. Check your internet and try again.") -> None:
        super().__init__(message)


class CredentialStoreError(DomainException):
    """The credential store could not be read or written."""

    pass


def extract_validation_errors(body: dict[str, Any] | None) -> list[str]:
    """Pull field-level messages out of an `errors` list.

    The backend sends either plain strings or objects like
    {"field": "email", "message": "..."} (express-validator uses "msg").
    """
    if not body:
        return []
    raw = body.get("errors")
    if not isinstance(raw, list):
        return []

    messages: list[str] = []
    for item in raw:
        if isinstance(item, str):
            messages.append(item)
        elif isinstance(item, dict):
            text = item.get("message") or item.get("msg")
            if text:
                messages.append(str(text))
    return messages


def extract_message(body: dict[str, Any] | None, default: str) -> str:
    """Best human-readable message in an error body: message, errors, error."""
    if body:
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
        errors = extract_validation_errors(body)
        if errors:
            return ", ".join(errors)
        error = body.get("error")
        if isinstance(error, str) and error:
            return error
    return default


# Listen up, this is THE status-to-exception table. 401 maps to InvalidCredentialsError here
# because that's what it means on the auth endpoints - resource clients override it with
# SessionExpiredError since the gateway already burned the refresh token by then.
def error_from_response(
    status_code: int,
    body: dict[str, Any] | None,
    default_message: str = DEFAULT_ERROR_MESSAGE,
) -> ApiError:
    """Build the tagged error for a non-2xx response."""
    message = extract_message(body, default_message)

    if status_code == 400:
        errors = extract_validation_errors(body)
        if errors:
            message = "\n".join(errors)
        return ValidationFailedError(message, status_code, body, errors)
    if status_code == 401:
        return InvalidCredentialsError(message, status_code, body)
    if status_code == 409:
        return ConflictError(message, status_code, body)
    if status_code >= 500:
        return ServerError(message, status_code, body)
    return ApiError(message, status_code, body)


def get_error_message(error: BaseException | str | None, default: str = DEFAULT_ERROR_MESSAGE) -> str:
    """User-facing text for any error that reaches a screen.

    Validation errors list every field message on its own line; API errors use
    the server's message; anything else falls back to its own text or the
    default.
    """
    if isinstance(error, ValidationFailedError) and error.errors:
        return "\n".join(error.errors)
    if isinstance(error, DomainException) and error.message:
        return error.message
    if isinstance(error, str) and error:
        return error
    if isinstance(error, BaseException) and str(error):
        return str(error)
    return default


__all__ = [
    "DEFAULT_ERROR_MESSAGE",
    # Base
    "DomainException",
    "ValidationError",
    # API errors
    "ApiError",
    "InvalidCredentialsError",
    "ValidationFailedError",
    "ConflictError",
    "ServerError",
    "SessionExpiredError",
    # Transport / storage
    "NetworkError",
    "CredentialStoreError",
    # Helpers
    "error_from_response",
    "extract_message",
    "extract_validation_errors",
    "get_error_message",
]
