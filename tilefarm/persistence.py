"""
SaveStorage interface for pluggable save backends.

This module provides the abstract SaveStorage interface and two concrete
implementations for storing serialized save envelopes. A backend is a plain
key → text store; it knows nothing about the world schema. Encoding,
decoding and version checks live in ``tilefarm.saves``.

Included implementations:
1. InMemoryStorage - Dict-based storage, data lost on exit (testing, prototyping)
2. JsonFileStorage - One pretty-printed JSON file per key (desktop saves)

Failure contract:
- Backends raise ``PersistenceError`` subclasses for I/O problems
- ``SaveManager`` catches them at its boundary and reports a boolean/optional
  result plus a logged diagnostic, so no storage failure reaches the game loop

Usage pattern:
    storage = JsonFileStorage("saves")

    await storage.initialize()
    await storage.write("farming-game-save", text)
    text = await storage.read("farming-game-save")
    await storage.close()
"""

import asyncio
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from .config import Config
from .logging_utils import log_warning


# =============================
# Module-level Exceptions
# =============================

class PersistenceError(Exception):
    """Base class for storage and save-format failures."""


class StorageUnavailableError(PersistenceError):
    """Raised when the backend cannot read or write (disk full, quota, permissions)."""


class SaveFormatError(PersistenceError):
    """Raised when stored text is not a valid save envelope."""


class SaveStorage(ABC):
    """Abstract base class for save storage backends.

    Async interface rationale:
    - File and network backends do blocking I/O; running it off the event
      loop keeps growth ticks and input handling responsive
    - initialize() and close() manage directories, handles, connections
    - Async is a no-op for InMemoryStorage

    Method categories:
    1. Lifecycle: initialize(), close()
    2. Access: read(), write(), delete(), exists()
    """

    @abstractmethod
    async def initialize(self) -> None:
        """
        Prepare the backend. Called once before the first read/write.

        Raises:
            StorageUnavailableError: If the backend cannot be prepared
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources. Stored data is kept."""
        pass

    @abstractmethod
    async def read(self, key: str) -> Optional[str]:
        """
        Return the text stored under ``key``.

        Returns:
            Stored text, or None when nothing has been saved under the key

        Raises:
            StorageUnavailableError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def write(self, key: str, text: str) -> None:
        """
        Store ``text`` under ``key``, replacing any previous value.

        Raises:
            StorageUnavailableError: If the write fails (quota, disk, permissions)
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove ``key``.

        Returns:
            True if something was removed, False if the key did not exist
        """
        pass

    async def exists(self, key: str) -> bool:
        return await self.read(key) is not None


class InMemoryStorage(SaveStorage):
    """Dict-backed storage. Data is lost when the process exits.

    ``quota_bytes`` emulates a size-limited browser-style store: writes whose
    UTF-8 size exceeds the quota fail with ``StorageUnavailableError``.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self.items: Dict[str, str] = {}
        self.quota_bytes = quota_bytes

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        # Keep data so callers can inspect it after a session ends.
        pass

    async def read(self, key: str) -> Optional[str]:
        return self.items.get(key)

    async def write(self, key: str, text: str) -> None:
        if self.quota_bytes is not None and len(text.encode("utf-8")) > self.quota_bytes:
            raise StorageUnavailableError(
                f"Storage quota exceeded ({self.quota_bytes} bytes) while writing '{key}'"
            )
        self.items[key] = text

    async def delete(self, key: str) -> bool:
        return self.items.pop(key, None) is not None


class JsonFileStorage(SaveStorage):
    """File-based storage: ``{base_path}/{key}.json``.

    Writes go to a temporary sibling file first and are moved into place with
    ``os.replace`` so a crash mid-write never leaves a truncated save. Transient
    ``OSError``s are retried a bounded number of times before surfacing as
    ``StorageUnavailableError``.
    """

    def __init__(self, base_path: Path | str | None = None, retry_attempts: Optional[int] = None):
        self.base_path = Path(base_path) if base_path is not None else Config.SAVE_DIR
        self.retry_attempts = (
            retry_attempts if retry_attempts is not None else Config.SAVE_RETRY_ATTEMPTS
        )
        if self.retry_attempts < 1:
            raise ValueError("retry_attempts must be >= 1")

    async def initialize(self) -> None:
        try:
            await asyncio.to_thread(self.base_path.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(
                f"Cannot create save directory {self.base_path}: {exc}"
            ) from exc

    async def close(self) -> None:
        # Nothing to clean up for file storage
        return None

    def path_for(self, key: str) -> Path:
        return self.base_path / f"{key}.json"

    async def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return await asyncio.to_thread(path.read_text, "utf-8")
        except UnicodeDecodeError as exc:
            raise SaveFormatError(f"{path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot read {path}: {exc}") from exc

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self.path_for(key).exists)

    async def write(self, key: str, text: str) -> None:
        path = self.path_for(key)
        attempt_number = 0
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(OSError),
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_fixed(0.05),
                reraise=True,
            ):
                with attempt:
                    attempt_number += 1
                    if attempt_number > 1:
                        log_warning(
                            f"[Storage] Retry {attempt_number}/{self.retry_attempts} writing {path.name}"
                        )
                    await asyncio.to_thread(_atomic_write, path, text)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot write {path}: {exc}") from exc

    async def delete(self, key: str) -> bool:
        path = self.path_for(key)
        if not path.exists():
            return False
        try:
            await asyncio.to_thread(path.unlink)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot delete {path}: {exc}") from exc
        return True


def _atomic_write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(text, "utf-8")
    os.replace(tmp, path)
