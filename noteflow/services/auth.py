"""
Auth Store.

User registration, login, logout, and session lookup over the persisted
``users`` and ``sessions`` tables. Both tables are rewritten in full after
every change.

Login failures are deliberately undifferentiated: an unknown email and a
wrong password raise the same AuthenticationError.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

from noteflow.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from noteflow.core.security import (
    SCHEME_LEGACY,
    generate_session_token,
    hash_password,
    hash_password_with,
    needs_rehash,
    sanitize_input,
    validate_email,
    validate_password,
    validate_username,
    verify_password,
)
from noteflow.core.utils import generate_id, utc_now
from noteflow.models.user import Session, User
from noteflow.repositories.base import KeyValueStore
from noteflow.repositories.collection import SESSIONS_KEY, USERS_KEY
from noteflow.services.base import BaseService

INVALID_CREDENTIALS = "Invalid email or password"

USERNAME_RULE = "Username must be 3-20 characters: letters, digits, or underscore"
EMAIL_RULE = "Invalid email format"
PASSWORD_RULE = (
    "Password must be at least 8 letters or digits, "
    "with an uppercase letter, a lowercase letter, and a digit"
)

DEMO_USER_ID = "1"
DEMO_USERNAME = "test"
DEMO_EMAIL = "test@example.com"
DEMO_PASSWORD = "Test123456"

DEFAULT_SESSION_LIFETIME = timedelta(hours=24)


def demo_user() -> User:
    """The fixed account installed in demo mode."""
    return User(
        id=DEMO_USER_ID,
        username=DEMO_USERNAME,
        email=DEMO_EMAIL,
        password_hash=hash_password(DEMO_PASSWORD),
    )


class AuthStore(BaseService):
    """
    Local credential and session store.

    Handles registration, login, logout and session resolution with
    typed errors for every failure the caller must handle.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        *,
        key_prefix: str = "",
        password_scheme: str = SCHEME_LEGACY,
        bcrypt_rounds: int = 12,
        rehash_on_login: bool = True,
        session_lifetime: timedelta = DEFAULT_SESSION_LIFETIME,
        enforce_session_expiry: bool = False,
        identity_case_sensitive: bool = True,
        seed_demo_account: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(storage, key_prefix)
        self.password_scheme = password_scheme
        self.bcrypt_rounds = bcrypt_rounds
        self.rehash_on_login = rehash_on_login
        self.session_lifetime = session_lifetime
        self.enforce_session_expiry = enforce_session_expiry
        self.identity_case_sensitive = identity_case_sensitive
        self._clock = clock

        self._users_repo = self._collection(User)
        self._sessions_repo = self._collection(Session)

        if seed_demo_account:
            self._users = [demo_user()]
            self._save_users()
            self._log_operation("Demo account seeded", user_id=DEMO_USER_ID)
        else:
            self._users = self._users_repo.read(USERS_KEY)
        self._sessions: list[Session] = self._sessions_repo.read(SESSIONS_KEY)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _save_users(self) -> None:
        self._users_repo.write(USERS_KEY, self._users)

    def _save_sessions(self) -> None:
        self._sessions_repo.write(SESSIONS_KEY, self._sessions)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def _same_identity(self, left: str, right: str) -> bool:
        if self.identity_case_sensitive:
            return left == right
        return left.casefold() == right.casefold()

    def _find_user(self, user_id: str) -> User | None:
        return next((u for u in self._users if u.id == user_id), None)

    def _find_by_email(self, email: str) -> User | None:
        return next((u for u in self._users if self._same_identity(u.email, email)), None)

    def _hash(self, password: str) -> str:
        return hash_password_with(password, self.password_scheme, rounds=self.bcrypt_rounds)

    @property
    def user_count(self) -> int:
        return len(self._users)

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def register(self, username: str, email: str, password: str) -> User:
        """
        Register a new user.

        All fields are sanitized before validation and storage.

        Args:
            username: Display name, 3-20 letters, digits, or underscores
            email: Login email
            password: Plain password, hashed before storage

        Returns:
            The stored user

        Raises:
            ValidationError: If a field breaks its rule
            ConflictError: If the email or username is already registered
        """
        username = sanitize_input(username)
        email = sanitize_input(email)
        password = sanitize_input(password)

        if not validate_username(username):
            raise ValidationError(USERNAME_RULE, details={"field": "username"})
        if not validate_email(email):
            raise ValidationError(EMAIL_RULE, details={"field": "email"})
        if not validate_password(password):
            raise ValidationError(PASSWORD_RULE, details={"field": "password"})

        if any(self._same_identity(u.email, email) for u in self._users):
            raise ConflictError("Email is already registered")
        if any(self._same_identity(u.username, username) for u in self._users):
            raise ConflictError("Username is already taken")

        user = User(
            id=generate_id(),
            username=username,
            email=email,
            password_hash=self._hash(password),
        )
        self._users.append(user)
        self._save_users()

        self._log_operation("User registered", user_id=user.id)
        return user.model_copy()

    def login(self, email: str, password: str) -> tuple[User, Session]:
        """
        Authenticate and open a new session.

        Returns:
            Tuple of (user, session)

        Raises:
            ValidationError: If the email is malformed
            AuthenticationError: If the email is unknown or the password is wrong
        """
        email = sanitize_input(email)
        password = sanitize_input(password)

        if not validate_email(email):
            raise ValidationError(EMAIL_RULE, details={"field": "email"})

        user = self._find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            self._log_debug("Login rejected")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if self.rehash_on_login and needs_rehash(user.password_hash, self.password_scheme):
            user.password_hash = self._hash(password)
            self._save_users()
            self._log_operation("Password re-hashed", user_id=user.id, scheme=self.password_scheme)

        now = self._clock()
        session = Session(
            id=generate_session_token(),
            user_id=user.id,
            user=user.model_copy(),
            created_at=now,
            expires_at=now + self.session_lifetime,
        )
        self._sessions.append(session)
        self._save_sessions()

        self._log_operation("Session opened", user_id=user.id)
        return user.model_copy(), session.model_copy(deep=True)

    def logout(self, session_id: str) -> None:
        """End a session. Unknown ids are ignored."""
        self._sessions = [s for s in self._sessions if s.id != session_id]
        self._save_sessions()
        self._log_operation("Session closed")

    def get_session(self, session_id: str) -> Session | None:
        """
        Resolve a session with the current state of its user.

        Returns:
            The session with a fresh user snapshot, or None if the session or
            its user no longer exists. Expired sessions are returned unless
            expiry enforcement is enabled.
        """
        session = next((s for s in self._sessions if s.id == session_id), None)
        if session is None:
            return None
        if self.enforce_session_expiry and session.is_expired(self._clock()):
            self._log_debug("Expired session rejected", user_id=session.user_id)
            return None
        user = self._find_user(session.user_id)
        if user is None:
            return None
        return session.model_copy(update={"user": user.model_copy()})

    def get_user(self, user_id: str) -> User | None:
        user = self._find_user(user_id)
        return user.model_copy() if user is not None else None

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        """
        Replace a user's password after checking the current one.

        Raises:
            NotFoundError: If the user does not exist
            AuthenticationError: If the current password is wrong
            ValidationError: If the new password breaks the password rule
        """
        current_password = sanitize_input(current_password)
        new_password = sanitize_input(new_password)

        user = self._find_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")
        if not validate_password(new_password):
            raise ValidationError(PASSWORD_RULE, details={"field": "password"})

        user.password_hash = self._hash(new_password)
        self._save_users()
        self._log_operation("Password changed", user_id=user_id)

    def purge_expired_sessions(self) -> int:
        """
        Drop every session whose lifetime has elapsed.

        Returns:
            Number of sessions removed
        """
        now = self._clock()
        remaining = [s for s in self._sessions if not s.is_expired(now)]
        removed = len(self._sessions) - len(remaining)
        if removed:
            self._sessions = remaining
            self._save_sessions()
            self._log_operation("Expired sessions purged", count=removed)
        return removed
