"""Budget and category API clients."""

from typing import Any, Literal

from poupadin.domain.exceptions import ValidationError
from poupadin.infrastructure.integrations.resources.base import ResourceClient

TransactionPeriod = Literal["daily", "weekly", "monthly"]
_PERIODS = ("daily", "weekly", "monthly")


class BudgetClient(ResourceClient):
    """Client for /budget endpoints."""

    async def setup_budget(self, budget_data: dict[str, Any]) -> dict[str, Any]:
        """Send the initial budget (name, incomes, categories)."""
        return await self._post("/budget/setup", budget_data)

    async def get_current_budget(self) -> dict[str, Any]:
        """Current budget summary: {"budget": {...}}."""
        return await self._get("/budget/")

    async def get_transactions(
        self, period: TransactionPeriod = "monthly", limit: int = 50
    ) -> dict[str, Any]:
        """Transactions for a period: {"transactions": [...]}.

        Raises:
            ValidationError: Unknown period
        """
        if period not in _PERIODS:
            raise ValidationError(f"Invalid period: {period!r} (expected one of {_PERIODS})")
        return await self._get(
            "/budget/transactions", params={"period": period, "limit": limit}
        )

    async def create_expense(self, expense_data: dict[str, Any]) -> dict[str, Any]:
        """Register a new expense."""
        return await self._post("/budget/expense", expense_data)


class CategoryClient(ResourceClient):
    """Client for budget category endpoints."""

    async def get_categories(self) -> dict[str, Any]:
        """All categories of the user's budget: {"categories": [...]}."""
        return await self._get("/budget/categories")

    async def transfer_between_categories(self, transfer_data: dict[str, Any]) -> dict[str, Any]:
        """Move an amount between two categories.

        Payload: {from_category_id, to_category_id, amount, description}.
        Returns {message, from_new_balance, to_new_balance}.
        """
        return await self._post("/budget/transfer", transfer_data)
