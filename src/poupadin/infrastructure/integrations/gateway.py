"""Authenticated request gateway: bearer injection, 401 renewal and replay.

Hey future me - EVERY authenticated API call goes through execute(). It is the
only place that:
1. reads the access token and attaches `Authorization: Bearer ...`
2. notices a 401
3. runs ONE shared token renewal no matter how many requests got 401 at once
4. replays each failed request exactly once with the new token
5. wipes the credentials when renewal is impossible and tells the listeners

What it does NOT do: retry anything else. 403/404/500 come back untouched,
transport errors come back as NetworkError, a second 401 after a replay comes
back as-is. Only the 401 -> refresh -> replay path is automatic.

State machine (per renewal, held by the SingleFlight slot):

    IDLE --(first 401)--> RENEWING --(refresh ok)--> store new pair --> IDLE
                              |
                              +--(refresh failed)--> clear store, notify --> IDLE

Late arrivals: a request that was SENT with the old token may get its 401
after the renewal already finished. Refreshing again would burn the brand-new
refresh token for nothing, so when the store already holds a different access
token than the one the request carried, we replay with the stored one directly.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

import httpx

from poupadin.domain.entities import RenewalResult
from poupadin.domain.exceptions import ApiError, NetworkError, ValidationError
from poupadin.domain.ports import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, ICredentialStore
from poupadin.infrastructure.integrations.auth_client import AuthClient
from poupadin.infrastructure.integrations.http_pool import HttpClientPool
from poupadin.infrastructure.observability.log_messages import LogMessages
from poupadin.infrastructure.observability.logging import get_correlation_id
from poupadin.infrastructure.single_flight import SingleFlight

logger = logging.getLogger(__name__)

SessionExpiredListener = Callable[[str], Awaitable[None] | None]

# Reasons handed to session-expired listeners.
REASON_NO_REFRESH_TOKEN = "refresh token missing"
REASON_REFRESH_REJECTED = "refresh rejected"
REASON_REFRESH_NETWORK = "refresh network error"

# Failed renewal with an empty store. Listeners already heard about this session.
REASON_NO_SESSION = "no session"


@dataclass(frozen=True)
class RequestDescriptor:
    """One outbound API request.

    Hey future me - frozen. The gateway builds the authorized
    version and the replay as COPIES; the caller's descriptor never changes.
    replay_count is 0 for the original and 1 for the replay, never more.
    """

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    json: Any = None
    params: Mapping[str, Any] | None = None
    replay_count: int = 0

    def as_replay(self) -> "RequestDescriptor":
        """Copy of this request marked as the (single) replay.

        Raises:
            ValidationError: If this request already is a replay
        """
        if self.replay_count >= 1:
            raise ValidationError(f"{self.method} {self.path} was already replayed once")
        return replace(self, replay_count=self.replay_count + 1)

    def build_headers(self, access_token: str | None) -> dict[str, str]:
        """Headers to send, with the bearer token when we have one."""
        headers = dict(self.headers)
        # Caller-supplied Authorization never wins over the stored token.
        headers.pop("Authorization", None)
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        correlation_id = get_correlation_id()
        if correlation_id:
            headers.setdefault("X-Correlation-ID", correlation_id)
        return headers


class AuthenticatedGateway:
    """Request interceptor with a single shared renewal transaction."""

    def __init__(
        self,
        pool: HttpClientPool,
        store: ICredentialStore,
        auth_client: AuthClient,
    ) -> None:
        """Initialize gateway.

        Args:
            pool: Shared HTTP client pool
            store: Credential store (read for every request, written on renewal)
            auth_client: Used for the refresh call only
        """
        self._pool = pool
        self._store = store
        self._auth_client = auth_client
        self._renewal: SingleFlight[RenewalResult] = SingleFlight(name="token-renewal")
        self._listeners: list[SessionExpiredListener] = []

    @property
    def renewal_in_progress(self) -> bool:
        """True while a refresh call is outstanding (RENEWING)."""
        return self._renewal.in_flight

    @property
    def renewal_count(self) -> int:
        """Renewal attempts started since creation."""
        return self._renewal.flights

    @property
    def renewal_waiters(self) -> int:
        """Requests currently waiting on the shared renewal."""
        return self._renewal.waiters

    def add_session_expired_listener(self, listener: SessionExpiredListener) -> None:
        """Register a callback fired after a failed renewal wiped the credentials.

        The callback gets the failure reason. Sync and async callables both work.
        """
        self._listeners.append(listener)

    def remove_session_expired_listener(self, listener: SessionExpiredListener) -> None:
        """Unregister a callback (no-op if it isn't registered)."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def execute(self, request: RequestDescriptor) -> httpx.Response:
        """Send an authenticated request, renewing the session once on 401.

        Args:
            request: What to send

        Returns:
            The response - the original one, or the replay's after a renewal.
            Never raises for an HTTP status; decoding is the caller's job.

        Raises:
            NetworkError: No response for the request or its replay
        """
        access_token = await self._store.get(ACCESS_TOKEN_KEY)
        response = await self._send(request, access_token)

        if response.status_code != httpx.codes.UNAUTHORIZED:
            return response

        logger.info(
            LogMessages.unauthorized(
                request.method,
                request.path,
                token_present=bool(access_token),
                replay=request.replay_count > 0,
            )
        )
        if request.replay_count > 0:
            return response

        outcome = await self._renew(stale_token=access_token)
        if not outcome.succeeded:
            # Callers get the ORIGINAL 401, unchanged.
            return response

        replay = request.as_replay()
        logger.debug("Replaying %s %s with renewed token", replay.method, replay.path)
        return await self._send(replay, outcome.access_token)

    async def _send(self, request: RequestDescriptor, access_token: str | None) -> httpx.Response:
        client = await self._pool.get_client()
        try:
            response = await client.request(
                request.method,
                request.path,
                headers=request.build_headers(access_token),
                json=request.json,
                params=dict(request.params) if request.params else None,
            )
        except httpx.TransportError as e:
            logger.warning(
                LogMessages.request_failed(request.method, request.path, type(e).__name__)
            )
            raise NetworkError() from e

        logger.debug(
            "%s %s -> %d (replay=%d)",
            request.method,
            request.path,
            response.status_code,
            request.replay_count,
        )
        return response

    async def _renew(self, stale_token: str | None) -> RenewalResult:
        if not self._renewal.in_flight:
            current = await self._store.get(ACCESS_TOKEN_KEY)
            # Re-check after the await: a renewal may have started meanwhile.
            if not self._renewal.in_flight and current and current != stale_token:
                logger.debug("Token was already renewed, skipping refresh")
                return RenewalResult.renewed(current)

        return await self._renewal.run(self._perform_renewal)

    # Listen up, this runs ONCE per renewal, inside the SingleFlight task. Every waiter gets
    # whatever it returns. It never raises: every failure becomes RenewalResult.failed() so
    # all waiters take the same "return the original 401" path.
    async def _perform_renewal(self) -> RenewalResult:
        logger.info(LogMessages.renewal_started())

        refresh_token = await self._store.get(REFRESH_TOKEN_KEY)
        if not refresh_token:
            if not await self._store.get(ACCESS_TOKEN_KEY):
                # Empty store: the session ended earlier or never existed.
                logger.debug("No credentials stored, nothing to renew")
                return RenewalResult.failed(REASON_NO_SESSION)
            return await self._fail_renewal(REASON_NO_REFRESH_TOKEN)

        try:
            pair = await self._auth_client.refresh(refresh_token)
        except ApiError as e:
            logger.debug("Refresh rejected: %s", e)
            return await self._fail_renewal(f"{REASON_REFRESH_REJECTED} (HTTP {e.status_code})")
        except NetworkError:
            return await self._fail_renewal(REASON_REFRESH_NETWORK)

        await self._store.set_many(
            {
                ACCESS_TOKEN_KEY: pair.access_token,
                REFRESH_TOKEN_KEY: pair.refresh_token,
            }
        )
        logger.info(LogMessages.renewal_succeeded())
        return RenewalResult.renewed(pair.access_token)

    async def _fail_renewal(self, reason: str) -> RenewalResult:
        logger.warning(LogMessages.renewal_failed(reason))
        await self._store.clear_all()
        await self._notify_session_expired(reason)
        return RenewalResult.failed(reason)

    async def _notify_session_expired(self, reason: str) -> None:
        logger.info(LogMessages.session_expired(reason, len(self._listeners)))
        for listener in list(self._listeners):
            try:
                result = listener(reason)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                # One broken listener must not keep the others from hearing about it.
                logger.exception("Session-expired listener %r failed", listener)
