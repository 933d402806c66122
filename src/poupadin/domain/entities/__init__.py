"""Domain entities."""

from poupadin.domain.entities.session import (
    RenewalResult,
    Session,
    TokenPair,
    UserProfile,
)

__all__ = [
    "RenewalResult",
    "Session",
    "TokenPair",
    "UserProfile",
]
