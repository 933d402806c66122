"""Shared fixtures: settings without disk access and a scriptable fake API.

Hey future me - FakeApi is an httpx.MockTransport handler that behaves like the
real backend for the parts the session layer cares about:
- /auth/login hands out the currently valid pair
- a resource path answers 200 only for `Bearer <valid_token>`, 401 otherwise
- /auth/refresh can be HELD (refresh_gate) so tests can pile up concurrent
  401s before the renewal finishes
- every request is recorded, so tests can count refresh calls on the wire
"""

import asyncio
from collections.abc import Callable

import httpx
import pytest

from poupadin.config import ApiSettings, Settings, StorageSettings
from poupadin.domain.ports import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY
from poupadin.infrastructure.storage import MemoryCredentialStore

BASE_URL = "https://api.test/api"


class FakeApi:
    """In-process stand-in for the Poupadin backend."""

    def __init__(self) -> None:
        self.valid_token = "access-1"
        self.valid_refresh_token = "refresh-0"
        self.refresh_gate = asyncio.Event()
        self.refresh_gate.set()
        self.refresh_status = 200
        self.refresh_error: Exception | None = None
        self.reject_replays = False
        self.resource_status: dict[str, int] = {}
        self.on_resource: Callable[[httpx.Request], None] | None = None
        self.requests: list[httpx.Request] = []
        self._issued = 1

    @property
    def refresh_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/auth/refresh")]

    @property
    def resource_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if not r.url.path.endswith("/auth/refresh")]

    def hold_refresh(self) -> None:
        self.refresh_gate.clear()

    def release_refresh(self) -> None:
        self.refresh_gate.set()

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/auth/refresh"):
            return await self._refresh(request)
        if request.url.path.endswith("/auth/login"):
            return self._login()

        if self.on_resource is not None:
            self.on_resource(request)

        path = request.url.path.removeprefix("/api")
        if path in self.resource_status:
            return httpx.Response(self.resource_status[path], json={"message": "nope"})

        if request.headers.get("Authorization") != f"Bearer {self.valid_token}":
            return httpx.Response(401, json={"message": "Token expired"})
        if self.reject_replays and self.refresh_requests:
            return httpx.Response(401, json={"message": "Still unauthorized"})
        return httpx.Response(200, json={"path": path, "method": request.method})

    def _login(self) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "token": self.valid_token,
                "refreshToken": self.valid_refresh_token,
                "user": {"id": "u1", "fullName": "Ana Lima", "email": "a@b.com"},
            },
        )

    async def _refresh(self, request: httpx.Request) -> httpx.Response:
        await self.refresh_gate.wait()
        if self.refresh_error is not None:
            raise self.refresh_error
        if self.refresh_status != 200:
            return httpx.Response(
                self.refresh_status, json={"message": "Invalid or expired refresh token"}
            )

        self._issued += 1
        self.valid_token = f"access-{self._issued}"
        self.valid_refresh_token = f"refresh-{self._issued}"
        return httpx.Response(
            200,
            json={"accessToken": self.valid_token, "refreshToken": self.valid_refresh_token},
        )


async def wait_until(predicate: Callable[[], bool], ticks: int = 1000) -> None:
    """Yield to the event loop until predicate() holds."""
    for _ in range(ticks):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at the fake API with an in-memory store."""
    return Settings(
        api=ApiSettings(base_url=BASE_URL, timeout=5.0),
        storage=StorageSettings(backend="memory"),
    )


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
async def mock_http_client(fake_api: FakeApi):
    """httpx client routed to the fake API."""
    async with httpx.AsyncClient(
        base_url=BASE_URL, transport=httpx.MockTransport(fake_api.handler)
    ) as client:
        yield client


@pytest.fixture
def expired_store() -> MemoryCredentialStore:
    """Store holding a pair whose access token the fake API no longer accepts."""
    return MemoryCredentialStore(
        {ACCESS_TOKEN_KEY: "access-0", REFRESH_TOKEN_KEY: "refresh-0"}
    )


@pytest.fixture
def wait_for() -> Callable[..., object]:
    """The wait_until helper, for tests that build concurrency by hand."""
    return wait_until
