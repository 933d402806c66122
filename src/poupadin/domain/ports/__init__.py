"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from collections.abc import Mapping

# Fixed key names. The persisted layout is exactly these three entries.
ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
USER_DATA_KEY = "user_data"

CREDENTIAL_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_DATA_KEY)


class ICredentialStore(ABC):
    """Durable, opaque key-value storage for the session credentials.

    Hey future me - this is a PURE storage abstraction. No token parsing, no
    expiry checks, no "is this a JWT" - just strings under fixed keys. Who may
    write here: SessionManager (login/register/logout) and the gateway
    (renewal success/failure). Nobody else!
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Get the stored value, None when absent. Never raises on absence."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Overwrite one key atomically."""
        pass

    # Yo, use this for the token pair! Two separate set() calls have a suspension point
    # between them where another task could read access_token without refresh_token.
    @abstractmethod
    async def set_many(self, values: Mapping[str, str]) -> None:
        """Overwrite several keys in one atomic step."""
        pass

    @abstractmethod
    async def clear(self, key: str) -> None:
        """Remove one key. Clearing an absent key is not an error."""
        pass

    @abstractmethod
    async def clear_all(self) -> None:
        """Remove every key. Idempotent."""
        pass


__all__ = [
    "ACCESS_TOKEN_KEY",
    "CREDENTIAL_KEYS",
    "REFRESH_TOKEN_KEY",
    "USER_DATA_KEY",
    "ICredentialStore",
]
