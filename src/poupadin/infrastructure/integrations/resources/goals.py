"""Savings goals API client."""

from typing import Any

from poupadin.infrastructure.integrations.resources.base import ResourceClient


class GoalsClient(ResourceClient):
    """Client for /goals endpoints."""

    async def create_goal(self, goal_data: dict[str, Any]) -> dict[str, Any]:
        """Create a goal: {message, goal}."""
        return await self._post("/goals", goal_data)

    async def get_goals(self, include_inactive: bool = False) -> dict[str, Any]:
        """List goals: {"goals": [...]}."""
        return await self._get(
            "/goals", params={"include_inactive": str(include_inactive).lower()}
        )

    async def get_goal(self, goal_id: str) -> dict[str, Any]:
        """One goal: {"goal": {...}}."""
        return await self._get(f"/goals/{goal_id}")

    async def update_goal(self, goal_id: str, goal_data: dict[str, Any]) -> dict[str, Any]:
        """Update a goal: {message, goal}."""
        return await self._put(f"/goals/{goal_id}", goal_data)

    async def delete_goal(self, goal_id: str) -> dict[str, Any]:
        """Delete a goal: {message}."""
        return await self._delete(f"/goals/{goal_id}")

    async def create_transaction(self, transaction_data: dict[str, Any]) -> dict[str, Any]:
        """Deposit into / withdraw from a goal."""
        return await self._post("/goals/transaction", transaction_data)

    async def complete_goal(self, goal_id: str) -> dict[str, Any]:
        """Mark a goal as completed."""
        return await self._post(f"/goals/{goal_id}/complete")

    async def get_goal_transactions(self, goal_id: str, limit: int = 50) -> dict[str, Any]:
        """Transactions of one goal: {"transactions": [...]}."""
        return await self._get(f"/goals/{goal_id}/transactions", params={"limit": limit})

    async def get_statistics(self) -> dict[str, Any]:
        """Aggregated goal statistics: {"statistics": {...}}."""
        return await self._get("/goals/statistics")

    async def get_report(self) -> dict[str, Any]:
        """Full goals report: {"report": {...}}."""
        return await self._get("/goals/report")
