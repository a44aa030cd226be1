"""
Abstract Storage Interface

DESIGN DECISION: The durable store is a plain string key-value store.
This allows us to:
1. Keep the whole AppState under one key and replace it in full
2. Keep the snapshot log under a second key, independent of the state
3. Use an in-memory store for testing
4. Swap the local file store for anything else that can hold two strings

The interface is intentionally tiny. Serialization and migration live
above it; the store never interprets what it holds.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for durable key-value storage.

    Writes replace the previous value in full. A successful set() must
    be durable before it returns.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored text, or None if nothing is stored

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Durably store a value, replacing any previous one.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if something was removed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass
