"""PoupadinClient - wires the session layer and the resource clients together.

Hey future me - this is the ONLY place that builds the object graph. One
client instance = one credential store, one HTTP pool, one gateway (so one
renewal slot). Two PoupadinClient instances pointed at the same file store
would each run their own renewal, so don't do that in one process.

Typical use:

    async with PoupadinClient() as api:
        await api.session.restore()
        if not await api.session.is_authenticated():
            await api.session.login(LoginCredentials(email, password))
        budget = await api.budget.get_current_budget()
"""

import logging
from types import TracebackType

import httpx

from poupadin.application.services.session_manager import SessionManager
from poupadin.config import Settings, get_settings
from poupadin.domain.ports import ICredentialStore
from poupadin.infrastructure.integrations.auth_client import AuthClient
from poupadin.infrastructure.integrations.gateway import AuthenticatedGateway
from poupadin.infrastructure.integrations.http_pool import HttpClientPool
from poupadin.infrastructure.integrations.resources import (
    BudgetClient,
    CategoryClient,
    GoalsClient,
    NotificationClient,
    ProfileClient,
)
from poupadin.infrastructure.observability import configure_logging
from poupadin.infrastructure.storage import build_credential_store

logger = logging.getLogger(__name__)


class PoupadinClient:
    """Entry point of the library."""

    def __init__(
        self,
        settings: Settings | None = None,
        store: ICredentialStore | None = None,
        http_client: httpx.AsyncClient | None = None,
        setup_logging: bool = False,
    ) -> None:
        """Build the client.

        Args:
            settings: Settings to use (default: get_settings())
            store: Credential store (default: built from settings.storage)
            http_client: Pre-built httpx client, e.g. with a MockTransport.
                Its base_url must already point at the API. Not closed by aclose().
            setup_logging: Also configure logging from settings
        """
        self.settings = settings if settings is not None else get_settings()

        if setup_logging:
            configure_logging(
                log_level=self.settings.log_level,
                json_format=self.settings.observability.log_json_format,
                app_name=self.settings.app_name,
            )

        # An empty MemoryCredentialStore is falsy (__len__), so test for None.
        self.store = store if store is not None else build_credential_store(self.settings.storage)
        self._pool = HttpClientPool(self.settings.api, client=http_client)

        self.auth = AuthClient(self._pool)
        self.gateway = AuthenticatedGateway(self._pool, self.store, self.auth)
        self.session = SessionManager(self.store, self.auth, self.gateway)

        self.budget = BudgetClient(self.gateway)
        self.categories = CategoryClient(self.gateway)
        self.goals = GoalsClient(self.gateway)
        self.notifications = NotificationClient(self.gateway)
        self.profile = ProfileClient(self.gateway)

        logger.debug("PoupadinClient ready (base_url=%s)", self._pool.base_url)

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        await self._pool.close()

    async def __aenter__(self) -> "PoupadinClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
