"""
Collection Repository.

Reads and writes whole typed collections (users, sessions, a user's notes)
as JSON arrays under a key. Every write replaces the full collection; there
are no partial writes and no schema versions.

A stored value that cannot be parsed or validated reads as an empty list.
The failure is logged and not raised.
"""

from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from noteflow.core.logging import get_logger
from noteflow.repositories.base import KeyValueStore

logger = get_logger(__name__)

ItemType = TypeVar("ItemType")

USERS_KEY = "users"
SESSIONS_KEY = "sessions"


def notes_key(user_id: str) -> str:
    return f"notes-{user_id}"


def archive_key(user_id: str) -> str:
    return f"archive-{user_id}"


def categories_key(user_id: str) -> str:
    return f"categories-{user_id}"


class CollectionRepository(Generic[ItemType]):
    """
    Typed JSON collection over a key-value store.

    Usage:
        repo = CollectionRepository(store, User)
        users = repo.read(USERS_KEY)
        repo.write(USERS_KEY, users)
    """

    def __init__(
        self,
        store: KeyValueStore,
        item_type: Any,
        key_prefix: str = "",
    ) -> None:
        self.store = store
        self.key_prefix = key_prefix
        self._adapter: TypeAdapter[list[ItemType]] = TypeAdapter(list[item_type])

    def _key(self, name: str) -> str:
        return f"{self.key_prefix}{name}"

    def read(self, name: str) -> list[ItemType]:
        """
        Load the collection stored under ``name``.

        Returns:
            Parsed items, or an empty list when the key is absent or unreadable
        """
        key = self._key(name)
        try:
            raw = self.store.get(key)
        except UnicodeDecodeError as e:
            logger.warning(
                "Discarding undecodable collection",
                extra={"key": key, "error": str(e)},
            )
            return []
        if raw is None:
            return []
        try:
            return self._adapter.validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(
                "Discarding unreadable collection",
                extra={"key": key, "errors": e.error_count()},
            )
            return []

    def write(self, name: str, items: list[ItemType]) -> None:
        """Replace the collection stored under ``name``."""
        key = self._key(name)
        payload = self._adapter.dump_json(items, by_alias=True, exclude_none=True)
        self.store.set(key, payload.decode("utf-8"))
        logger.debug("Collection written", extra={"key": key, "count": len(items)})

    def exists(self, name: str) -> bool:
        """Check whether anything has been stored under ``name``."""
        return self.store.exists(self._key(name))

    def clear(self, name: str) -> None:
        """Remove the collection stored under ``name``."""
        self.store.delete(self._key(name))
