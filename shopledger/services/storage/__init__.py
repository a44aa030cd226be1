"""
Storage Services Package

Provides the key-value interface, its file and in-memory implementations,
and the PersistentStore that keeps the AppState and snapshot log on top.
"""

from shopledger.services.storage.interface import (
    KeyValueStore,
    NotFoundError,
    StorageError,
)
from shopledger.services.storage.file_store import FileKeyValueStore
from shopledger.services.storage.memory import InMemoryKeyValueStore
from shopledger.services.storage.state_store import PersistentStore

__all__ = [
    # Interfaces
    "KeyValueStore",
    # Exceptions
    "NotFoundError",
    "StorageError",
    # Implementations
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "PersistentStore",
]
