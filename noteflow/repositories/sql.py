"""
SQL Key-Value Store.

Stores each key as a row of a single ``kv_entries`` table through SQLAlchemy.
SQLite is the default; any SQLAlchemy URL with a synchronous driver works.
"""

from datetime import datetime

from sqlalchemy import DateTime, Engine, String, Text, create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.orm import Session as DbSession
from sqlalchemy.pool import StaticPool

from noteflow.core.exceptions import StorageError
from noteflow.core.logging import get_logger
from noteflow.core.utils import utc_now
from noteflow.repositories.base import KeyValueStore

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


class KeyValueEntry(Base):
    """One persisted collection."""

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<KeyValueEntry(key={self.key!r})>"


def create_store_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the key-value table.

    In-memory SQLite needs a static pool so every connection sees the
    same database.
    """
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_engine(url, echo=echo)


class SqlKeyValueStore(KeyValueStore):
    def __init__(self, url: str | None = None, engine: Engine | None = None) -> None:
        if engine is None:
            if url is None:
                raise ValueError("Either url or engine is required")
            engine = create_store_engine(url)
        self.engine = engine
        Base.metadata.create_all(self.engine)
        logger.debug("SQL key-value store ready", extra={"url": str(engine.url)})

    def get(self, key: str) -> str | None:
        with DbSession(self.engine) as session:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        try:
            with DbSession(self.engine) as session, session.begin():
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=value))
                else:
                    entry.value = value
        except SQLAlchemyError as e:
            logger.error("SQL store write failed", extra={"key": key, "error": str(e)})
            raise StorageError(f"Could not write key: {key}") from e

    def delete(self, key: str) -> None:
        try:
            with DbSession(self.engine) as session, session.begin():
                session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
        except SQLAlchemyError as e:
            logger.error("SQL store delete failed", extra={"key": key, "error": str(e)})
            raise StorageError(f"Could not delete key: {key}") from e

    def keys(self) -> list[str]:
        with DbSession(self.engine) as session:
            result = session.execute(select(KeyValueEntry.key).order_by(KeyValueEntry.key))
            return list(result.scalars().all())

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
