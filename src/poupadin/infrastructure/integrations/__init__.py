"""External integration client implementations."""

from poupadin.infrastructure.integrations.auth_client import AuthClient
from poupadin.infrastructure.integrations.gateway import (
    AuthenticatedGateway,
    RequestDescriptor,
)
from poupadin.infrastructure.integrations.http_pool import HttpClientPool

__all__ = [
    "AuthClient",
    "AuthenticatedGateway",
    "HttpClientPool",
    "RequestDescriptor",
]
