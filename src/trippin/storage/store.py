"""Key-value stores used to mirror journey collections.

The in-memory model is the authority; a store is a best-effort mirror.
Stores only need `get`, `set` and `subscribe`.
"""

from __future__ import annotations

import logging
import re
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[a-z0-9_.-]+$")

ChangeListener = Callable[[str], None]
Unsubscribe = Callable[[], None]


class PersistenceError(Exception):
    """Raised when a store read or write fails."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"Storage failure for {key}: {message}")


def validate_key(key: str) -> str:
    """Reject keys that could collide after mapping to a file name."""
    if not _KEY_PATTERN.match(key) or key in {".", ".."}:
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class KeyValueStore(Protocol):
    """Durable store contract."""

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...

    def subscribe(self, listener: ChangeListener) -> Unsubscribe: ...


class _ListenerMixin:
    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> Unsubscribe:
        """Call `listener(key)` after every successful write."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, key: str) -> None:
        for listener in list(self._listeners):
            listener(key)


class MemoryStore(_ListenerMixin):
    """Process-local store. Values vanish with the process."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        super().__init__()
        self._data: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self._data.get(validate_key(key))

    def set(self, key: str, value: bytes) -> None:
        self._data[validate_key(key)] = bytes(value)
        self._notify(key)

    def keys(self) -> list[str]:
        return sorted(self._data)


class FileStore(_ListenerMixin):
    """One file per key under a root directory."""

    def __init__(self, root: Path) -> None:
        super().__init__()
        self.root = root

    def path_for(self, key: str) -> Path:
        return self.root / f"{validate_key(key)}.jsonl"

    def get(self, key: str) -> bytes | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise PersistenceError(key, str(e)) from e

    def set(self, key: str, value: bytes) -> None:
        """Write atomically: temp file in the same directory, then rename."""
        path = self.path_for(key)
        temp_path: Path | None = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=self.root, suffix=".tmp", delete=False
            ) as f:
                temp_path = Path(f.name)
                f.write(value)
        except OSError as e:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()
            raise PersistenceError(key, str(e)) from e

        try:
            temp_path.replace(path)
        except OSError as e:
            # Clean up temp file on error
            if temp_path.exists():
                temp_path.unlink()
            raise PersistenceError(key, str(e)) from e

        logger.debug("Wrote %d bytes to %s", len(value), path)
        self._notify(key)
