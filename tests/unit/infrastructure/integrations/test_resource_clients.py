"""Tests for the budget/category/goals/notification/profile clients.

The clients are thin, so these check the wire contract (method, path, query,
body) and the error mapping in ResourceClient. Renewal itself is covered in
test_gateway.py.
"""

import json

import pytest
from pytest_httpx import HTTPXMock

from poupadin.domain.exceptions import (
    ConflictError,
    ServerError,
    SessionExpiredError,
    ValidationError,
    ValidationFailedError,
)
from poupadin.domain.ports import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY
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
from poupadin.infrastructure.storage import MemoryCredentialStore


@pytest.fixture
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore({ACCESS_TOKEN_KEY: "access-1", REFRESH_TOKEN_KEY: "refresh-1"})


@pytest.fixture
async def gateway(settings, store):
    pool = HttpClientPool(settings.api)
    yield AuthenticatedGateway(pool, store, AuthClient(pool))
    await pool.close()


@pytest.fixture
def url(settings):
    return lambda path: f"{settings.api.base_url}{path}"


def sent_json(httpx_mock: HTTPXMock, index: int = 0):
    return json.loads(httpx_mock.get_requests()[index].content)


class TestResourceClientErrors:
    """Error mapping shared by every resource client."""

    @pytest.mark.asyncio
    async def test_bearer_token_is_attached(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(url=url("/budget/"), method="GET", json={"budget": {}})

        await BudgetClient(gateway).get_current_budget()

        assert httpx_mock.get_requests()[0].headers["Authorization"] == "Bearer access-1"

    @pytest.mark.asyncio
    async def test_401_after_failed_renewal_is_session_expired(
        self, gateway, store, httpx_mock: HTTPXMock, url
    ):
        """401 -> refresh rejected -> SessionExpiredError, store wiped."""
        httpx_mock.add_response(
            url=url("/goals/statistics"), method="GET", status_code=401, json={}
        )
        httpx_mock.add_response(url=url("/auth/refresh"), method="POST", status_code=401)

        with pytest.raises(SessionExpiredError) as exc_info:
            await GoalsClient(gateway).get_statistics()

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Session expired. Please log in again."
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_401_error_page_is_still_session_expired(
        self, gateway, store, httpx_mock: HTTPXMock, url
    ):
        """A proxy HTML 401 ends the session like any other 401."""
        httpx_mock.add_response(
            url=url("/goals/report"), method="GET", status_code=401, text="<html>gateway</html>"
        )
        httpx_mock.add_response(url=url("/auth/refresh"), method="POST", status_code=401)

        with pytest.raises(SessionExpiredError) as exc_info:
            await GoalsClient(gateway).get_report()

        assert exc_info.value.body is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_400_error_page_is_server_error(self, gateway, httpx_mock: HTTPXMock, url):
        """A 400 without a JSON body carries no field errors to show."""
        httpx_mock.add_response(
            url=url("/budget/expense"), method="POST", status_code=400, text="<html>bad</html>"
        )

        with pytest.raises(ServerError) as exc_info:
            await BudgetClient(gateway).create_expense({"amount": 1})

        assert type(exc_info.value) is ServerError
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_400_is_validation_failed(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(
            url=url("/budget/expense"),
            method="POST",
            status_code=400,
            json={"errors": ["Amount must be positive"]},
        )

        with pytest.raises(ValidationFailedError, match="Amount must be positive"):
            await BudgetClient(gateway).create_expense({"amount": -1})

    @pytest.mark.asyncio
    async def test_409_is_conflict(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(
            url=url("/budget/setup"),
            method="POST",
            status_code=409,
            json={"message": "Budget already exists"},
        )

        with pytest.raises(ConflictError, match="Budget already exists"):
            await BudgetClient(gateway).setup_budget({"name": "Casa"})

    @pytest.mark.asyncio
    async def test_invalid_json_is_server_error(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(url=url("/goals/report"), method="GET", text="not json")

        with pytest.raises(ServerError):
            await GoalsClient(gateway).get_report()

    @pytest.mark.asyncio
    async def test_empty_body_is_empty_dict(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(url=url("/goals/g1"), method="DELETE", status_code=204)

        assert await GoalsClient(gateway).delete_goal("g1") == {}


class TestBudgetClient:
    """Test budget and category endpoints."""

    @pytest.mark.asyncio
    async def test_get_transactions_query(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(
            url=url("/budget/transactions?period=weekly&limit=10"),
            method="GET",
            json={"transactions": [{"id": "t1"}]},
        )

        result = await BudgetClient(gateway).get_transactions("weekly", limit=10)

        assert result == {"transactions": [{"id": "t1"}]}

    @pytest.mark.asyncio
    async def test_get_transactions_defaults(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(
            url=url("/budget/transactions?period=monthly&limit=50"),
            method="GET",
            json={"transactions": []},
        )

        assert await BudgetClient(gateway).get_transactions() == {"transactions": []}

    @pytest.mark.asyncio
    async def test_get_transactions_rejects_unknown_period(self, gateway):
        with pytest.raises(ValidationError):
            await BudgetClient(gateway).get_transactions("yearly")  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_create_expense(self, gateway, httpx_mock: HTTPXMock, url):
        expense = {"category_id": "c1", "amount": 42.0, "description": "Mercado"}
        httpx_mock.add_response(
            url=url("/budget/expense"), method="POST", json={"message": "ok"}
        )

        await BudgetClient(gateway).create_expense(expense)

        assert sent_json(httpx_mock) == expense

    @pytest.mark.asyncio
    async def test_categories(self, gateway, httpx_mock: HTTPXMock, url):
        transfer = {"from_category_id": "c1", "to_category_id": "c2", "amount": 10}
        httpx_mock.add_response(
            url=url("/budget/categories"), method="GET", json={"categories": []}
        )
        httpx_mock.add_response(
            url=url("/budget/transfer"),
            method="POST",
            json={"from_new_balance": 90, "to_new_balance": 110},
        )
        categories = CategoryClient(gateway)

        assert await categories.get_categories() == {"categories": []}
        result = await categories.transfer_between_categories(transfer)

        assert result["to_new_balance"] == 110
        assert sent_json(httpx_mock, 1) == transfer


class TestGoalsClient:
    """Test goal endpoints."""

    @pytest.mark.asyncio
    async def test_list_goals_query(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(
            url=url("/goals?include_inactive=true"), method="GET", json={"goals": []}
        )

        assert await GoalsClient(gateway).get_goals(include_inactive=True) == {"goals": []}

    @pytest.mark.asyncio
    async def test_goal_crud(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(url=url("/goals"), method="POST", json={"goal": {"id": "g1"}})
        httpx_mock.add_response(url=url("/goals/g1"), method="GET", json={"goal": {"id": "g1"}})
        httpx_mock.add_response(url=url("/goals/g1"), method="PUT", json={"goal": {"id": "g1"}})
        httpx_mock.add_response(url=url("/goals/g1/complete"), method="POST", json={})
        goals = GoalsClient(gateway)

        await goals.create_goal({"name": "Viagem", "target_amount": 5000})
        await goals.get_goal("g1")
        await goals.update_goal("g1", {"target_amount": 6000})
        await goals.complete_goal("g1")

        methods = [(r.method, r.url.path) for r in httpx_mock.get_requests()]
        assert methods == [
            ("POST", "/api/goals"),
            ("GET", "/api/goals/g1"),
            ("PUT", "/api/goals/g1"),
            ("POST", "/api/goals/g1/complete"),
        ]
        assert sent_json(httpx_mock, 2) == {"target_amount": 6000}

    @pytest.mark.asyncio
    async def test_goal_transactions(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(url=url("/goals/transaction"), method="POST", json={})
        httpx_mock.add_response(
            url=url("/goals/g1/transactions?limit=50"), method="GET", json={"transactions": []}
        )
        goals = GoalsClient(gateway)

        await goals.create_transaction({"goal_id": "g1", "type": "deposit", "amount": 100})
        await goals.get_goal_transactions("g1")

        assert sent_json(httpx_mock)["type"] == "deposit"


class TestNotificationClient:
    """Test notification endpoints."""

    @pytest.mark.asyncio
    async def test_list_notifications_query(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(
            url=url("/notifications?limit=5&offset=10&unread_only=true"),
            method="GET",
            json={"notifications": []},
        )

        await NotificationClient(gateway).get_notifications(limit=5, offset=10, unread_only=True)

    @pytest.mark.asyncio
    async def test_settings_and_read_state(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(url=url("/notifications/settings"), method="GET", json={})
        httpx_mock.add_response(url=url("/notifications/settings"), method="POST", json={})
        httpx_mock.add_response(url=url("/notifications/n1/read"), method="POST", json={})
        httpx_mock.add_response(
            url=url("/notifications/mark-all-read"), method="POST", json={"updated_count": 3}
        )
        notifications = NotificationClient(gateway)

        await notifications.get_settings()
        await notifications.update_settings({"budget_alerts": False})
        await notifications.mark_as_read("n1")
        result = await notifications.mark_all_as_read()

        assert result == {"updated_count": 3}
        assert sent_json(httpx_mock, 1) == {"budget_alerts": False}

    @pytest.mark.asyncio
    async def test_stats_templates_and_test_message(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(url=url("/notifications/stats"), method="GET", json={"stats": {}})
        httpx_mock.add_response(
            url=url("/notifications/templates"), method="GET", json={"templates": []}
        )
        httpx_mock.add_response(url=url("/notifications/test"), method="POST", json={})
        notifications = NotificationClient(gateway)

        assert await notifications.get_stats() == {"stats": {}}
        assert await notifications.get_templates() == {"templates": []}
        await notifications.send_test_notification("hello")

        assert sent_json(httpx_mock, 2) == {"message": "hello"}


class TestProfileClient:
    """Test profile endpoints."""

    @pytest.mark.asyncio
    async def test_get_and_update_profile(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(url=url("/profile"), method="GET", json={"profile": {"id": "u1"}})
        httpx_mock.add_response(url=url("/profile"), method="PUT", json={"profile": {}})
        profile = ProfileClient(gateway)

        assert (await profile.get_profile())["profile"]["id"] == "u1"
        await profile.update_profile({"bio": "Oi"})

        assert sent_json(httpx_mock, 1) == {"bio": "Oi"}

    @pytest.mark.asyncio
    async def test_change_password(self, gateway, httpx_mock: HTTPXMock, url):
        httpx_mock.add_response(
            url=url("/profile/reset-password"),
            method="POST",
            json={"success": True, "logoutRequired": True},
        )

        result = await ProfileClient(gateway).change_password("old", "newpass1", "newpass1")

        assert result["logoutRequired"] is True
        assert sent_json(httpx_mock) == {
            "current_password": "old",
            "new_password": "newpass1",
            "confirm_password": "newpass1",
        }
