"""
Base Service.

Base class for all stores providing common patterns for business logic.
Stores keep their collections in memory, apply one user action at a time,
and write the affected collections back through a key-value store at the
end of each public operation.

Usage:
    from noteflow.services.base import BaseService

    class TagStore(BaseService):
        def __init__(self, storage: KeyValueStore) -> None:
            super().__init__(storage)
            self._repo = self._collection(Tag)
            self._tags = self._repo.read("tags")

        def add(self, name: str) -> Tag:
            self._validate_required({"name": name}, ["name"])
            ...
            self._repo.write("tags", self._tags)
"""

from typing import Any

from noteflow.core.exceptions import ValidationError
from noteflow.core.logging import get_logger
from noteflow.repositories.base import KeyValueStore
from noteflow.repositories.collection import CollectionRepository


class BaseService:
    """
    Base class for all stores.

    Provides:
    - Access to the injected key-value store
    - Typed collection repositories sharing the configured key prefix
    - Logging context
    - Common validation patterns
    """

    def __init__(self, storage: KeyValueStore, key_prefix: str = "") -> None:
        """
        Initialize the store with its persistence backend.

        Args:
            storage: Key-value store that receives every batch write
            key_prefix: Prefix prepended to every key this store writes
        """
        self._storage = storage
        self._key_prefix = key_prefix
        self._logger = get_logger(self.__class__.__module__)

    @property
    def storage(self) -> KeyValueStore:
        """Get the key-value store."""
        return self._storage

    def _collection(self, item_type: Any) -> CollectionRepository:
        """Create a collection repository for ``item_type`` on this store's backend."""
        return CollectionRepository(self._storage, item_type, self._key_prefix)

    def _validate_required(
        self,
        fields: dict[str, Any],
        field_names: list[str],
    ) -> None:
        """
        Validate that required fields are present and not empty.

        Raises:
            ValidationError: If any required field is missing or empty
        """
        missing = []
        for name in field_names:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)

        if missing:
            raise ValidationError(
                "Required fields missing",
                details={"missing_fields": missing},
            )

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """Log a store operation with context."""
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """Log debug information."""
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
