"""Durable key-value storage backends."""

from trippin.storage.store import (
    FileStore,
    KeyValueStore,
    MemoryStore,
    PersistenceError,
    validate_key,
)

__all__ = [
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
    "PersistenceError",
    "validate_key",
]
