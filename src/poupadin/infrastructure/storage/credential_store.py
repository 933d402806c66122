"""Credential store implementations.

Hey future me - two backends behind the same ICredentialStore port:

- MemoryCredentialStore: a dict. Tests and throwaway sessions.
- FileCredentialStore: one small JSON document on disk, 0600 permissions.
  Every write goes to a temp file next to the real one and is moved over it
  with os.replace(), so a crash mid-write leaves either the old or the new
  document - never half of one. Disk I/O runs in a worker thread so the event
  loop never blocks on it.

Encryption at rest is NOT handled here. If you need it, point
credentials_path at an encrypted volume or write another backend.
"""

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from collections.abc import Callable, Mapping
from pathlib import Path

from poupadin.config import StorageSettings
from poupadin.domain.exceptions import CredentialStoreError
from poupadin.domain.ports import ICredentialStore

logger = logging.getLogger(__name__)


class MemoryCredentialStore(ICredentialStore):
    """In-memory credential store."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def set_many(self, values: Mapping[str, str]) -> None:
        # No await in here - nothing can observe a half-applied update.
        self._data.update(values)

    async def clear(self, key: str) -> None:
        self._data.pop(key, None)

    async def clear_all(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


class FileCredentialStore(ICredentialStore):
    """JSON-file credential store with atomic replace-on-write."""

    def __init__(self, path: Path | str) -> None:
        """Initialize store.

        Args:
            path: Location of the JSON document. Parent directories are
                created on first write.
        """
        self._path = Path(path).expanduser()
        # Serializes read-modify-write cycles. Plain reads don't need it because
        # os.replace() swaps the whole document at once.
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        """Location of the JSON document."""
        return self._path

    async def get(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        await self._update(lambda data: data.__setitem__(key, value))

    async def set_many(self, values: Mapping[str, str]) -> None:
        await self._update(lambda data: data.update(values))

    async def clear(self, key: str) -> None:
        await self._update(lambda data: data.pop(key, None))

    async def clear_all(self) -> None:
        await self._update(lambda data: data.clear())

    async def _update(self, mutate: Callable[[dict[str, str]], object]) -> None:
        async with self._lock:
            await asyncio.to_thread(self._apply, mutate)

    def _apply(self, mutate: Callable[[dict[str, str]], object]) -> None:
        data = self._read()
        mutate(data)
        if data:
            self._write(data)
        else:
            # Empty store == no file. Keeps "logged out" trivially checkable on disk.
            try:
                self._path.unlink(missing_ok=True)
            except OSError as e:
                raise CredentialStoreError(
                    f"Could not remove credential file {self._path}: {e}"
                ) from e

    def _read(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise CredentialStoreError(
                f"Could not read credential file {self._path}: {e}"
            ) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CredentialStoreError(
                f"Credential file {self._path} is corrupt: {e}"
            ) from e

        if not isinstance(data, dict):
            raise CredentialStoreError(
                f"Credential file {self._path} is corrupt: expected a JSON object"
            )
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        parent = self._path.parent
        tmp_path: str | None = None
        try:
            parent.mkdir(parents=True, exist_ok=True, mode=0o700)
            # mkstemp creates the file with 0600 already.
            fd, tmp_path = tempfile.mkstemp(dir=parent, prefix=".credentials-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self._path)
            tmp_path = None
        except OSError as e:
            raise CredentialStoreError(
                f"Could not write credential file {self._path}: {e}"
            ) from e
        finally:
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)


def build_credential_store(settings: StorageSettings) -> ICredentialStore:
    """Create the credential store selected in settings."""
    if settings.backend == "memory":
        logger.debug("Using in-memory credential store")
        return MemoryCredentialStore()

    logger.debug("Using file credential store at %s", settings.credentials_path)
    return FileCredentialStore(settings.credentials_path)
