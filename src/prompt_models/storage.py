"""Key-value storage providers for persisted configuration."""

from __future__ import annotations

import asyncio
import json
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import aiofiles
import aiofiles.os

from prompt_models.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageError(Exception):
    """Base exception for storage errors."""


class StorageProvider(ABC):
    """Key-value store holding string values.

    ``update_data`` is the read-modify-write primitive the model manager
    relies on: calls for the same key are serialised, so concurrent
    modifiers never overwrite each other's results.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    @abstractmethod
    async def get_item(self, key: str) -> str | None:
        """Get the raw value for a key, or None if absent."""

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Store the raw value for a key."""

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def get_data(self, key: str) -> Any | None:
        """Get the JSON-decoded value for a key.

        Raises:
            StorageError: If the stored value is not valid JSON.
        """
        raw = await self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            msg = f"Stored value for {key} is not valid JSON: {e}"
            raise StorageError(msg) from e

    async def update_data(self, key: str, modifier: Callable[[T | None], T]) -> T:
        """Atomically read, transform and write a JSON value.

        Args:
            key: Storage key.
            modifier: Pure function from the current value (None if absent)
                to the new value. If it raises, nothing is written.

        Returns:
            The value written.
        """
        async with self._lock_for(key):
            current = await self.get_data(key)
            updated = modifier(current)
            await self.set_item(key, json.dumps(updated, ensure_ascii=False))
            return updated


class MemoryStorageProvider(StorageProvider):
    """In-process storage, mainly for tests and embedding."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__()
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorageProvider(StorageProvider):
    """JSON file storage.

    Stores each key at {storage_dir}/{key}.json
    Uses atomic writes (write to temp, rename) for safety.
    """

    def __init__(self, storage_dir: Path) -> None:
        """Initialize storage.

        Args:
            storage_dir: Directory to store the value files.
        """
        super().__init__()
        self.storage_dir = Path(storage_dir).expanduser()

    async def ensure_dir(self) -> None:
        """Ensure storage directory exists."""
        if not self.storage_dir.exists():
            self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _get_path(self, key: str) -> Path:
        """Get the file path for a key."""
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.storage_dir / f"{key}.json"

    async def get_item(self, key: str) -> str | None:
        file_path = self._get_path(key)

        if not file_path.exists():
            return None

        try:
            async with aiofiles.open(file_path, encoding="utf-8") as f:
                return await f.read()
        except OSError as e:
            msg = f"Failed to read {key}: {e}"
            raise StorageError(msg) from e

    async def set_item(self, key: str, value: str) -> None:
        await self.ensure_dir()

        file_path = self._get_path(key)
        temp_path = file_path.with_suffix(".json.tmp")

        try:
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                await f.write(value)

            # Atomic rename
            await aiofiles.os.rename(temp_path, file_path)
            logger.debug("Saved storage item", path=str(file_path))
        except Exception as e:
            # Clean up temp file on error
            if temp_path.exists():
                await aiofiles.os.remove(temp_path)
            msg = f"Failed to save {key}: {e}"
            raise StorageError(msg) from e

    async def remove_item(self, key: str) -> None:
        file_path = self._get_path(key)

        if not file_path.exists():
            return

        try:
            await aiofiles.os.remove(file_path)
        except OSError as e:
            msg = f"Failed to delete {key}: {e}"
            raise StorageError(msg) from e
