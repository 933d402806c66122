"""In-app notifications API client."""

from typing import Any

from poupadin.infrastructure.integrations.resources.base import ResourceClient


class NotificationClient(ResourceClient):
    """Client for /notifications endpoints (no push token registration)."""

    async def get_settings(self) -> dict[str, Any]:
        """Notification settings: {"settings": {...}}."""
        return await self._get("/notifications/settings")

    async def update_settings(self, settings: dict[str, Any]) -> dict[str, Any]:
        """Partial settings update: {message, settings}."""
        return await self._post("/notifications/settings", settings)

    async def get_notifications(
        self, limit: int = 20, offset: int = 0, unread_only: bool = False
    ) -> dict[str, Any]:
        """Paginated notifications."""
        return await self._get(
            "/notifications",
            params={
                "limit": limit,
                "offset": offset,
                "unread_only": str(unread_only).lower(),
            },
        )

    async def mark_as_read(self, notification_id: str) -> dict[str, Any]:
        """Mark one notification as read."""
        return await self._post(f"/notifications/{notification_id}/read")

    async def mark_all_as_read(self) -> dict[str, Any]:
        """Mark everything as read: {message, updated_count}."""
        return await self._post("/notifications/mark-all-read")

    async def send_test_notification(self, message: str | None = None) -> dict[str, Any]:
        """Ask the server to send a test notification."""
        return await self._post("/notifications/test", {"message": message})

    async def get_stats(self) -> dict[str, Any]:
        """Notification statistics: {"stats": {...}}."""
        return await self._get("/notifications/stats")

    async def get_templates(self) -> dict[str, Any]:
        """Available templates: {"templates": [...]}."""
        return await self._get("/notifications/templates")
