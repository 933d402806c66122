"""Session Manager - login, registration, logout and start-up restore.

Hey future me - this service OWNS the user-visible session. It is the only
place (besides the gateway's renewal) that writes the credential store:

- login()/register() persist access_token + refresh_token + user_data in ONE
  set_many() call, so a crash can never leave half a pair behind
- logout() wipes all three keys, no server call
- restore() rehydrates at start-up and wipes a half-stored pair

The gateway handles 401s on its own. When its renewal fails it clears the
store and fires the session-expired signal; we listen for that, drop the
cached profile and tell OUR listeners ("session_expired"). Screens subscribe
here, never to the gateway.

Password reset calls are stateless pass-throughs to the auth client. They
return the server's message so the caller can show it.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from poupadin.domain.dtos import LoginCredentials, RegistrationDetails
from poupadin.domain.entities import Session, UserProfile
from poupadin.domain.exceptions import ValidationFailedError, extract_message
from poupadin.domain.ports import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    USER_DATA_KEY,
    ICredentialStore,
)
from poupadin.infrastructure.integrations.auth_client import AuthClient
from poupadin.infrastructure.integrations.gateway import AuthenticatedGateway
from poupadin.infrastructure.integrations.schemas import (
    parse_token_pair,
    parse_user_profile,
    profile_from_json,
    profile_to_json,
    require_token_pair,
)
from poupadin.infrastructure.observability.log_messages import LogMessages

logger = logging.getLogger(__name__)

LoggedOutListener = Callable[[str], Awaitable[None] | None]

# Reasons handed to logged-out listeners.
REASON_SESSION_EXPIRED = "session_expired"
REASON_LOGOUT = "logout"


class SessionManager:
    """User-facing authentication state."""

    def __init__(
        self,
        store: ICredentialStore,
        auth_client: AuthClient,
        gateway: AuthenticatedGateway,
    ) -> None:
        """Initialize session manager.

        Args:
            store: Credential store shared with the gateway
            auth_client: Client for the /auth endpoints
            gateway: Gateway whose session-expired signal forces a logout
        """
        self._store = store
        self._auth_client = auth_client
        self._gateway = gateway
        self._user: UserProfile | None = None
        self._listeners: list[LoggedOutListener] = []
        gateway.add_session_expired_listener(self._on_session_expired)

    @property
    def user(self) -> UserProfile | None:
        """Profile of the logged-in user (None when logged out or not restored yet)."""
        return self._user

    def add_logged_out_listener(self, listener: LoggedOutListener) -> None:
        """Register a callback for logouts.

        The callback receives "logout" for an explicit logout() and
        "session_expired" when the gateway could not renew the session.
        """
        self._listeners.append(listener)

    def remove_logged_out_listener(self, listener: LoggedOutListener) -> None:
        """Unregister a callback (no-op if it isn't registered)."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    # === Login / registration ===

    async def login(self, credentials: LoginCredentials) -> UserProfile:
        """Log in and persist the session.

        Args:
            credentials: Email and password

        Returns:
            The logged-in user's profile

        Raises:
            InvalidCredentialsError: Wrong email/password (401)
            ValidationFailedError: Rejected input (400)
            ConflictError: 409
            ServerError: 5xx, or a 2xx without a usable token pair/user
            NetworkError: No response
        """
        body = await self._auth_client.login(credentials)
        pair = require_token_pair(body)
        profile = parse_user_profile(body)

        await self._persist(pair.access_token, pair.refresh_token, profile)
        logger.info("Logged in as user %s", profile.id)
        return profile

    # Listen up, some backends register WITHOUT logging in (no tokens in the answer).
    # That's fine, the caller sends the user to the login screen. What is NOT fine is
    # exactly one token: we'd have to store half a pair, so that's a ServerError.
    async def register(self, details: RegistrationDetails) -> UserProfile:
        """Create an account and, when the server returns tokens, persist the session.

        Returns:
            The new user's profile

        Raises:
            Same as login(); ConflictError for an already registered email
        """
        body = await self._auth_client.register(details)
        tokens = parse_token_pair(body)
        profile = parse_user_profile(body)

        if tokens.is_empty:
            logger.info("Registered user %s, no session returned", profile.id)
            return profile

        pair = require_token_pair(body)
        await self._persist(pair.access_token, pair.refresh_token, profile)
        logger.info("Registered and logged in as user %s", profile.id)
        return profile

    async def _persist(self, access_token: str, refresh_token: str, profile: UserProfile) -> None:
        await self._store.set_many(
            {
                ACCESS_TOKEN_KEY: access_token,
                REFRESH_TOKEN_KEY: refresh_token,
                USER_DATA_KEY: profile_to_json(profile),
            }
        )
        self._user = profile

    # === Logout ===

    async def logout(self) -> None:
        """Forget the session locally. Safe to call when already logged out."""
        await self._store.clear_all()
        self._user = None
        logger.info("Logged out")
        await self._notify_logged_out(REASON_LOGOUT)

    async def _on_session_expired(self, reason: str) -> None:
        # Store is already cleared by the gateway, only our own state is left.
        logger.info("Forced logout after failed renewal: %s", reason)
        self._user = None
        await self._notify_logged_out(REASON_SESSION_EXPIRED)

    async def _notify_logged_out(self, reason: str) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(reason)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Logged-out listener %r failed", listener)

    # === Password reset ===

    async def forgot_password(self, email: str) -> str:
        """Ask the server to email a reset code.

        Returns:
            Server message to show the user
        """
        body = await self._auth_client.forgot_password(email.strip())
        return extract_message(body, "Reset code sent")

    async def verify_reset_code(self, email: str, code: str) -> str:
        """Check a reset code before asking for the new password.

        Raises:
            ValidationFailedError: Server answered 2xx but said the code is invalid
        """
        body = await self._auth_client.verify_reset_code(email.strip(), code.strip())
        self._ensure_accepted(body, "Invalid or expired code")
        return extract_message(body, "Code verified")

    async def reset_password(self, email: str, code: str, new_password: str) -> str:
        """Set a new password with a verified code."""
        body = await self._auth_client.reset_password(email.strip(), code.strip(), new_password)
        self._ensure_accepted(body, "Password reset failed")
        return extract_message(body, "Password reset successfully")

    @staticmethod
    def _ensure_accepted(body: dict[str, Any], default_message: str) -> None:
        # Yo, some of these endpoints answer 200 with {"valid": false}. Still a rejection.
        if body.get("valid") is False or body.get("success") is False:
            raise ValidationFailedError(
                extract_message(body, default_message), status_code=200, body=body
            )

    # === State ===

    async def restore(self) -> UserProfile | None:
        """Rehydrate the session from the store at start-up.

        Returns:
            The stored profile when a full token pair is present, else None.
            A full pair with an unreadable profile still counts as logged in
            but returns None (the profile can be fetched again).
        """
        session = await self._read_session()

        if session.is_partial:
            logger.warning(
                LogMessages.session_corrupt(
                    access_present=bool(session.access_token),
                    refresh_present=bool(session.refresh_token),
                )
            )
            await self._store.clear_all()
            self._user = None
            return None

        if not session.is_authenticated:
            self._user = None
            return None

        self._user = session.user
        logger.debug("Session restored (profile %s)", "present" if session.user else "missing")
        return session.user

    async def current_session(self) -> Session:
        """Snapshot of what the store holds right now."""
        return await self._read_session()

    async def is_authenticated(self) -> bool:
        """True when an access token is stored. Read fresh, never cached."""
        return bool(await self._store.get(ACCESS_TOKEN_KEY))

    async def _read_session(self) -> Session:
        access_token = await self._store.get(ACCESS_TOKEN_KEY)
        refresh_token = await self._store.get(REFRESH_TOKEN_KEY)
        raw_user = await self._store.get(USER_DATA_KEY)
        return Session(
            access_token=access_token or None,
            refresh_token=refresh_token or None,
            user=self._load_profile(raw_user),
        )

    @staticmethod
    def _load_profile(raw: str | None) -> UserProfile | None:
        if not raw:
            return None
        try:
            return profile_from_json(raw)
        except PydanticValidationError:
            logger.warning("Stored user_data is unreadable, ignoring it")
            return None

