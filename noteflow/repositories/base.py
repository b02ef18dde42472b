"""
Base Key-Value Store.

Interface shared by every persistence backend. Values are opaque strings
(JSON text); keys are plain strings such as ``users`` or ``notes-<userId>``.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """
    Minimal string key-value store.

    Subclasses implement get/set/delete/keys. Writes replace the whole value.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Raises:
            StorageError: If the backend cannot be written
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return all stored keys, sorted."""

    def exists(self, key: str) -> bool:
        """Check if a key is present."""
        return self.get(key) is not None
