"""Expiring key-value stores for resolved icon markup.

Any store with get/set(ttl) semantics satisfies the resolver:
- MemoryMarkupCache: process-local dict with a manual expiry sweep
- FileMarkupCache: one JSON file per key, durable across processes
"""

import hashlib
import json
import os
import tempfile
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

WEEK_IN_SECONDS = 7 * 24 * 60 * 60


class MarkupCache(ABC):
    """Minimal expiring store interface."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if missing or expired."""
        pass

    @abstractmethod
    def set(self, key: str, value: str, ttl: int) -> None:
        """Store a value for ttl seconds (last write wins)."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> int:
        """Remove every entry. Returns the number removed."""
        pass


class MemoryMarkupCache(MarkupCache):
    """In-memory store; expired rows are dropped lazily or by sweep()."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: str, ttl: int) -> None:
        self._entries[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def sweep(self) -> int:
        """Drop expired entries. Returns the number removed."""
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)


class FileMarkupCache(MarkupCache):
    """Durable store: one JSON document per key under a directory.

    Writes go to a temp file that replaces the target atomically, so two
    concurrent first-time writes of the same key leave one complete entry.
    """

    def __init__(self, cache_dir: Path, clock: Callable[[], float] = time.time):
        self.cache_dir = cache_dir
        self._clock = clock

    def _path(self, key: str) -> Path:
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:12]
        return self.cache_dir / f"{key}-{digest}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            path.unlink(missing_ok=True)
            return None
        except IOError:
            return None

        if not isinstance(data, dict) or not isinstance(data.get("value"), str):
            path.unlink(missing_ok=True)
            return None
        expires_at = data.get("expires_at", 0)
        if not isinstance(expires_at, (int, float)) or expires_at <= self._clock():
            path.unlink(missing_ok=True)
            return None
        return data["value"]

    def set(self, key: str, value: str, ttl: int) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        payload = json.dumps({"key": key, "value": value, "expires_at": self._clock() + ttl})
        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def clear(self) -> int:
        if not self.cache_dir.exists():
            return 0
        count = 0
        for path in self.cache_dir.glob("*.json"):
            path.unlink(missing_ok=True)
            count += 1
        return count
