"""Per-resource API clients built on the authenticated gateway."""

from poupadin.infrastructure.integrations.resources.base import ResourceClient
from poupadin.infrastructure.integrations.resources.budget import (
    BudgetClient,
    CategoryClient,
    TransactionPeriod,
)
from poupadin.infrastructure.integrations.resources.goals import GoalsClient
from poupadin.infrastructure.integrations.resources.notifications import NotificationClient
from poupadin.infrastructure.integrations.resources.profile import ProfileClient

__all__ = [
    "BudgetClient",
    "CategoryClient",
    "GoalsClient",
    "NotificationClient",
    "ProfileClient",
    "ResourceClient",
    "TransactionPeriod",
]
