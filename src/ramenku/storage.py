"""Key/value persistence for ramenku.

Every persisted collection (accounts, the current session, each user's
orders) lives under one opaque key. Values are plain JSON data.
"""

from __future__ import annotations

import copy
import fcntl
import json
import os
import re
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Protocol

from .errors import ValidationError

ACCOUNTS_KEY = "ramen-registered-users"
SESSION_KEY = "ramen-user"
ORDERS_KEY_PREFIX = "ramen-orders-"

_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def orders_key(user_id: str) -> str:
    """Key holding one user's order list."""
    return f"{ORDERS_KEY_PREFIX}{user_id}"


def _check_key(key: str) -> str:
    if not _KEY_RE.match(key):
        raise ValidationError("key", f"'{key}' is not a valid storage key")
    return key


class KeyValueStore(Protocol):
    """Storage backend used by the identity store and order ledger.

    `update` is the only way to read-modify-write a key; implementations
    must make it atomic per key so concurrent writers can't lose updates.
    """

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for key, or default when absent."""
        ...

    def put(self, key: str, value: Any) -> None:
        """Replace the value for key."""
        ...

    def delete(self, key: str) -> None:
        """Remove key. Missing keys are ignored."""
        ...

    def update(self, key: str, mutate: Callable[[Any], Any], default: Any = None) -> Any:
        """Apply mutate to the current value and store the result."""
        ...


class MemoryStore:
    """In-process store for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if key not in self._data:
                return default
            # Callers get a copy, same as reading back from disk
            return copy.deepcopy(self._data[key])

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[_check_key(key)] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def update(self, key: str, mutate: Callable[[Any], Any], default: Any = None) -> Any:
        with self._lock:
            current = copy.deepcopy(self._data.get(key, default))
            new_value = mutate(current)
            self._data[_check_key(key)] = copy.deepcopy(new_value)
            return new_value

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


class JsonFileStore:
    """Stores each key as <data_dir>/<key>.json.

    Writes go to a temp file and are renamed into place, so a reader never
    sees a half-written document. `update` additionally holds an exclusive
    per-key lock for the whole read-modify-write.
    """

    def __init__(self, data_dir: Path):
        """
        Initialize JsonFileStore.

        Args:
            data_dir: Directory holding the JSON documents.
        """
        self.data_dir = Path(data_dir)

    def _ensure_dir(self) -> None:
        """Ensure data directory exists."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{_check_key(key)}.json"

    @contextmanager
    def _lock(self, key: str) -> Iterator[None]:
        """Acquire exclusive lock on one key for read-modify-write operations."""
        self._ensure_dir()
        lock_path = self.data_dir / f".{_check_key(key)}.lock"
        with open(lock_path, "w") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def get(self, key: str, default: Any = None) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return default

        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write(self, key: str, value: Any) -> None:
        """Save one key atomically."""
        self._ensure_dir()

        fd, temp_path = tempfile.mkstemp(
            dir=self.data_dir, prefix=f".{key}_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2)
                f.write("\n")
            os.replace(temp_path, self.path_for(key))
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def put(self, key: str, value: Any) -> None:
        with self._lock(key):
            self._write(key, value)

    def delete(self, key: str) -> None:
        with self._lock(key):
            try:
                self.path_for(key).unlink()
            except FileNotFoundError:
                pass

    def update(self, key: str, mutate: Callable[[Any], Any], default: Any = None) -> Any:
        with self._lock(key):
            new_value = mutate(self.get(key, default))
            self._write(key, new_value)
            return new_value

    def keys(self) -> list[str]:
        if not self.data_dir.exists():
            return []
        return sorted(p.stem for p in self.data_dir.glob("*.json"))
