"""User profile API client."""

from typing import Any

from poupadin.infrastructure.integrations.resources.base import ResourceClient


class ProfileClient(ResourceClient):
    """Client for /profile endpoints (avatar upload not included)."""

    async def get_profile(self) -> dict[str, Any]:
        """Current user's profile: {message, profile}."""
        return await self._get("/profile")

    async def update_profile(self, data: dict[str, Any]) -> dict[str, Any]:
        """Update bio/location/website/phone/privacy settings."""
        return await self._put("/profile", data)

    # Hey future me - the server may answer logoutRequired=true here. Acting on it
    # (calling SessionManager.logout()) is the caller's decision, not ours.
    async def change_password(
        self, current_password: str, new_password: str, confirm_password: str
    ) -> dict[str, Any]:
        """Change the password: {message, success, logoutRequired}."""
        return await self._post(
            "/profile/reset-password",
            {
                "current_password": current_password,
                "new_password": new_password,
                "confirm_password": confirm_password,
            },
        )
