"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Stores are built over an in-memory key-value store by default. Tests that
need to observe persistence read the raw JSON back out of ``storage``.
"""

from datetime import datetime, timedelta

import pytest

from noteflow.models.user import Session
from noteflow.repositories.memory import InMemoryKeyValueStore
from noteflow.services.auth import AuthStore
from noteflow.services.note import NoteStore

PASSWORD = "Secret123"


class FakeClock:
    """Settable clock for session lifetime tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# =============================================================================
# Storage and Store Fixtures
# =============================================================================


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def auth_store(storage: InMemoryKeyValueStore, clock: FakeClock) -> AuthStore:
    """Auth store with the default legacy scheme and a fake clock."""
    return AuthStore(storage, clock=clock)


@pytest.fixture
def session(auth_store: AuthStore) -> Session:
    """Session of a freshly registered user ``alice``."""
    auth_store.register("alice", "alice@example.com", PASSWORD)
    _, session = auth_store.login("alice@example.com", PASSWORD)
    return session


@pytest.fixture
def note_store(storage: InMemoryKeyValueStore, session: Session) -> NoteStore:
    """Note store of the logged-in user."""
    return NoteStore.for_session(storage, session)
