"""Session entities: who is logged in and with which tokens.

Hey future me - these are plain snapshots. The source of truth for "is there a
session" is the credential store, NOT these objects. Build a Session from the
store when you need one, don't keep it around and trust it later.
"""

from dataclasses import dataclass
from datetime import date

from poupadin.domain.exceptions import ValidationError


@dataclass(frozen=True)
class UserProfile:
    """Cached identity info. Display only, never used for authorization."""

    id: str
    full_name: str
    email: str
    mobile_number: str | None = None
    date_of_birth: date | None = None
    initial_setup_completed: bool = False
    created_at: str | None = None


@dataclass(frozen=True)
class TokenPair:
    """Access + refresh token, always together."""

    access_token: str
    refresh_token: str

    def __post_init__(self) -> None:
        """Refuse half a pair."""
        if not self.access_token or not self.refresh_token:
            raise ValidationError("Access and refresh token must both be present")

    def __repr__(self) -> str:
        # Tokens never end up in logs or tracebacks.
        return "TokenPair(access_token=***, refresh_token=***)"


@dataclass(frozen=True)
class Session:
    """Snapshot of the stored session state."""

    access_token: str | None = None
    refresh_token: str | None = None
    user: UserProfile | None = None

    @property
    def is_authenticated(self) -> bool:
        """Logged in means a non-empty access token is stored."""
        return bool(self.access_token)

    # Hey future me - one token without the other is a CORRUPTION bug, not a state we
    # support. Whoever sees is_partial=True must wipe the store.
    @property
    def is_partial(self) -> bool:
        """True when exactly one of the two tokens is present."""
        return bool(self.access_token) != bool(self.refresh_token)

    def __repr__(self) -> str:
        return (
            f"Session(access_token={'***' if self.access_token else None}, "
            f"refresh_token={'***' if self.refresh_token else None}, user={self.user!r})"
        )


@dataclass(frozen=True)
class RenewalResult:
    """Outcome of one shared token renewal, seen by every waiter."""

    succeeded: bool
    access_token: str | None = None
    reason: str | None = None

    @classmethod
    def renewed(cls, access_token: str) -> "RenewalResult":
        """Renewal worked, replay with this token."""
        return cls(succeeded=True, access_token=access_token)

    @classmethod
    def failed(cls, reason: str) -> "RenewalResult":
        """Renewal failed, callers get their original 401 back."""
        return cls(succeeded=False, reason=reason)

    def __repr__(self) -> str:
        return f"RenewalResult(succeeded={self.succeeded}, reason={self.reason!r})"
