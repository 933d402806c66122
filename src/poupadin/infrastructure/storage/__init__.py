"""Credential storage backends."""

from poupadin.infrastructure.storage.credential_store import (
    FileCredentialStore,
    MemoryCredentialStore,
    build_credential_store,
)

__all__ = [
    "FileCredentialStore",
    "MemoryCredentialStore",
    "build_credential_store",
]
