"""
User and Session Models.
"""

from datetime import datetime

from noteflow.models.base import CamelModel


class User(CamelModel):
    """A registered account. Immutable apart from its password hash."""

    id: str
    username: str
    email: str
    password_hash: str

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r})>"


class Session(CamelModel):
    """A login session carrying a snapshot of the user it belongs to."""

    id: str
    user_id: str
    user: User
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Check whether the session lifetime has elapsed at ``now``."""
        return now >= self.expires_at
