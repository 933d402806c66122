"""HTTP client for the unauthenticated /auth endpoints."""

import json
import logging
from typing import Any

import httpx

from poupadin.domain.dtos import LoginCredentials, RegistrationDetails
from poupadin.domain.entities import TokenPair
from poupadin.domain.exceptions import (
    DEFAULT_ERROR_MESSAGE,
    NetworkError,
    ServerError,
    error_from_response,
)
from poupadin.infrastructure.integrations.http_pool import HttpClientPool
from poupadin.infrastructure.integrations.schemas import require_token_pair
from poupadin.infrastructure.observability.log_messages import LogMessages

logger = logging.getLogger(__name__)


def decode_json_body(response: httpx.Response) -> dict[str, Any] | None:
    """Parse a response body as a JSON object.

    Returns:
        The object, {} for an empty body, None when the body isn't a JSON object
    """
    if not response.content:
        return {}
    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


class AuthClient:
    """Client for login, register, token refresh and password reset.

    Hey future me - NONE of these calls carry a bearer token, and none of them
    go through the gateway. refresh() especially must NOT: the gateway calls
    refresh() while handling a 401, and a 401 from /auth/refresh going back
    into the gateway would try to renew the renewal.

    Every method returns the parsed JSON object or raises a tagged error:
    - body not JSON -> ServerError, whatever the status
    - non-2xx       -> error_from_response() (InvalidCredentials, Conflict, ...)
    - no response   -> NetworkError
    """

    LOGIN_PATH = "/auth/login"
    REGISTER_PATH = "/auth/register"
    REFRESH_PATH = "/auth/refresh"
    FORGOT_PASSWORD_PATH = "/auth/forgot-password"
    VERIFY_RESET_CODE_PATH = "/auth/verify-reset-code"
    RESET_PASSWORD_PATH = "/auth/reset-password"

    def __init__(self, pool: HttpClientPool) -> None:
        """Initialize auth client.

        Args:
            pool: Shared HTTP client pool
        """
        self._pool = pool

    async def _post(
        self,
        path: str,
        payload: dict[str, Any],
        default_message: str = DEFAULT_ERROR_MESSAGE,
    ) -> dict[str, Any]:
        client = await self._pool.get_client()
        try:
            response = await client.post(path, json=payload)
        except httpx.TransportError as e:
            logger.warning(LogMessages.request_failed("POST", path, type(e).__name__))
            raise NetworkError() from e

        body = decode_json_body(response)

        # Unreadable body wins over the status: a proxy 401 page is not a bad password.
        if body is None:
            logger.debug("POST %s -> %d with a non-JSON body", path, response.status_code)
            raise ServerError(
                "Invalid response from server", status_code=response.status_code
            )

        if not response.is_success:
            logger.debug("POST %s -> %d", path, response.status_code)
            raise error_from_response(response.status_code, body, default_message)
        return body

    async def login(self, credentials: LoginCredentials) -> dict[str, Any]:
        """POST /auth/login.

        Returns:
            Raw body: {token|accessToken, refreshToken, user: {...}}
        """
        return await self._post(self.LOGIN_PATH, credentials.to_payload())

    async def register(self, details: RegistrationDetails) -> dict[str, Any]:
        """POST /auth/register.

        Returns:
            Raw body: {token?, refreshToken?, user: {...}}
        """
        return await self._post(self.REGISTER_PATH, details.to_payload())

    # Listen up, the refresh endpoint answers {accessToken, refreshToken}. Both MUST be
    # there and be strings - a renewal that stores half a pair is worse than one that fails.
    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        Raises:
            ApiError: Refresh rejected (expired/revoked refresh token -> 401)
            ServerError: 2xx without a complete token pair
            NetworkError: No response
        """
        body = await self._post(
            self.REFRESH_PATH,
            {"refreshToken": refresh_token},
            default_message="Session expired",
        )
        return require_token_pair(body)

    async def forgot_password(self, email: str) -> dict[str, Any]:
        """POST /auth/forgot-password."""
        return await self._post(self.FORGOT_PASSWORD_PATH, {"email": email})

    async def verify_reset_code(self, email: str, code: str) -> dict[str, Any]:
        """POST /auth/verify-reset-code."""
        return await self._post(self.VERIFY_RESET_CODE_PATH, {"email": email, "code": code})

    async def reset_password(self, email: str, code: str, new_password: str) -> dict[str, Any]:
        """POST /auth/reset-password."""
        return await self._post(
            self.RESET_PASSWORD_PATH,
            {"email": email, "code": code, "new_password": new_password},
        )
