"""
Synchronous key/value storage media.

A medium holds one serialized string per key, the way a browser's
localStorage does. The store layers typed collections on top of it.

Two implementations:
1. MemoryMedium: dict-backed, used by tests and ephemeral sessions
2. FileMedium: one file per key under a data directory, atomic writes

Both can enforce a capacity limit. A write that would exceed it raises
QuotaExceededError and leaves the previously stored value untouched.
"""

import errno
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import quote, unquote

from genstudio.core.errors import QuotaExceededError

logger = logging.getLogger(__name__)

# Errno values that mean "the disk (or the user's share of it) is full"
_CAPACITY_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


@runtime_checkable
class StorageMedium(Protocol):
    """
    Protocol for storage media.

    Implementations must be synchronous: when set_item returns, the value
    is durable. Capacity failures raise QuotaExceededError; anything else
    is fatal and propagates.
    """

    def get_item(self, key: str) -> str | None:
        """Return the stored string for key, or None if absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def remove_item(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""
        ...

    def keys(self) -> list[str]:
        """Return all stored keys."""
        ...


class MemoryMedium:
    """
    In-memory medium with an optional byte quota.

    Example:
        >>> medium = MemoryMedium(quota_bytes=32)
        >>> medium.set_item("a", "x" * 10)
        >>> medium.set_item("b", "y" * 40)
        Traceback (most recent call last):
        ...
        genstudio.core.errors.QuotaExceededError: ...
    """

    def __init__(self, quota_bytes: int | None = None) -> None:
        self.quota_bytes = quota_bytes
        self._data: dict[str, str] = {}

    def used_bytes(self) -> int:
        return sum(_entry_size(k, v) for k, v in self._data.items())

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            current = self._data.get(key)
            used = self.used_bytes()
            if current is not None:
                used -= _entry_size(key, current)
            needed = used + _entry_size(key, value)
            if needed > self.quota_bytes:
                raise QuotaExceededError(key, needed, self.quota_bytes)
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class FileMedium:
    """
    File-backed medium storing each key as a file under a root directory.

    Keys are percent-encoded into filenames so namespaced keys such as
    ``genstudio:songs`` are safe on every platform. Writes go through a
    temporary file and an atomic rename, so a failed write never leaves a
    truncated value behind.

    Attributes:
        root: Directory holding one file per key
        quota_bytes: Optional capacity limit across all keys
    """

    SUFFIX = ".json"

    def __init__(self, root: Path, quota_bytes: int | None = None) -> None:
        self.root = Path(root)
        self.quota_bytes = quota_bytes

    def _path_for(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}{self.SUFFIX}"

    def used_bytes(self) -> int:
        total = 0
        for key in self.keys():
            value = self.get_item(key)
            if value is not None:
                total += _entry_size(key, value)
        return total

    def get_item(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            # Treated like unreadable JSON: the key reads as absent
            logger.warning(f"Ignoring undecodable data for {key}: {e}")
            return None

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            current = self.get_item(key)
            used = self.used_bytes()
            if current is not None:
                used -= _entry_size(key, current)
            needed = used + _entry_size(key, value)
            if needed > self.quota_bytes:
                raise QuotaExceededError(key, needed, self.quota_bytes)

        self.root.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=self.root, prefix=".write_", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(temp_path, self._path_for(key))
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            if e.errno in _CAPACITY_ERRNOS:
                raise QuotaExceededError(key, _entry_size(key, value), self.quota_bytes) from e
            raise

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            path.unlink()

    def keys(self) -> list[str]:
        if not self.root.exists():
            return []
        return sorted(
            unquote(p.name[: -len(self.SUFFIX)])
            for p in self.root.glob(f"*{self.SUFFIX}")
            if not p.name.startswith(".")
        )
