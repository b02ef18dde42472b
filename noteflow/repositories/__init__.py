"""
Persistence Adapters.

Key-value stores holding JSON-serialized collections, and the collection
repository that reads and writes typed lists through them.
"""

from noteflow.repositories.base import KeyValueStore
from noteflow.repositories.collection import CollectionRepository
from noteflow.repositories.file import FileKeyValueStore
from noteflow.repositories.memory import InMemoryKeyValueStore
from noteflow.repositories.sql import SqlKeyValueStore

__all__ = [
    "CollectionRepository",
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SqlKeyValueStore",
]
