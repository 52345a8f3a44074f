"""
Abstract Storage Interface

DESIGN DECISION: The storage adapters never talk to a concrete
medium. They read and write whole JSON documents through a
KeyValueStore, the same shape as browser localStorage. This allows us to:
1. Use in-memory storage for testing
2. Persist to a directory of JSON files in production
3. Add another backend (sqlite, redis) without touching business logic

The interface is intentionally tiny: get, set, remove by key.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract string key-value store.

    Values are complete serialized documents. A set_item call must
    either store the whole value or raise StorageWriteError.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageReadError: If the backend could not be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        Raises:
            StorageWriteError: If the value was not stored
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """The backend could not be read."""
    pass


class StorageWriteError(StorageError):
    """A collection could not be written. Nothing was persisted."""
    pass


class QuotaExceededError(StorageWriteError):
    """The value is larger than the backend allows."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


def validate_key(key: str) -> str:
    """Reject keys that cannot double as a plain file name."""
    if not key or "/" in key or "\\" in key or key in {".", ".."}:
        raise ValueError(f"Invalid storage key: {key!r}")
    return key
