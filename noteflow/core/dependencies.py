"""
Store Dependencies.

Builds the key-value backend and the stores from configuration. Entry
points (the CLI, tests) obtain every store through these functions.
"""

from datetime import timedelta

from noteflow.core.config import (
    AppConfig,
    Settings,
    get_app_config,
    get_settings,
    resolve_data_dir,
)
from noteflow.core.exceptions import AuthenticationError
from noteflow.core.logging import get_logger
from noteflow.models.category import Category
from noteflow.models.user import Session
from noteflow.repositories import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    SqlKeyValueStore,
)
from noteflow.services.auth import AuthStore
from noteflow.services.category import CategoryStore
from noteflow.services.note import NoteStore

logger = get_logger(__name__)


def build_storage(
    config: AppConfig | None = None,
    settings: Settings | None = None,
) -> KeyValueStore:
    """
    Create the configured key-value backend.

    ``NOTEFLOW_STORAGE_BACKEND`` and friends override storage.yaml.
    """
    config = config or get_app_config()
    settings = settings or get_settings()
    backend = settings.storage_backend or config.storage.backend

    match backend:
        case "memory":
            storage: KeyValueStore = InMemoryKeyValueStore()
        case "file":
            storage = FileKeyValueStore(resolve_data_dir())
        case "sql":
            storage = SqlKeyValueStore(settings.database_url or config.storage.database_url)
        case _:
            raise ValueError(f"Unknown storage backend: {backend}")

    logger.debug("Storage backend ready", extra={"backend": backend})
    return storage


def get_auth_store(storage: KeyValueStore, config: AppConfig | None = None) -> AuthStore:
    config = config or get_app_config()
    security = config.security
    return AuthStore(
        storage,
        key_prefix=config.storage.key_prefix,
        password_scheme=security.password.scheme,
        bcrypt_rounds=security.password.bcrypt_rounds,
        rehash_on_login=security.password.rehash_on_login,
        session_lifetime=timedelta(hours=security.session.lifetime_hours),
        enforce_session_expiry=security.session.enforce_expiry,
        identity_case_sensitive=security.identity_case_sensitive,
        seed_demo_account=security.seed_demo_account,
    )


def open_note_store(
    storage: KeyValueStore,
    session: Session,
    config: AppConfig | None = None,
) -> NoteStore:
    config = config or get_app_config()
    return NoteStore.for_session(
        storage,
        session,
        key_prefix=config.storage.key_prefix,
        persist_archive=config.notes.persist_archive,
    )


def open_category_store(
    storage: KeyValueStore,
    session: Session,
    config: AppConfig | None = None,
) -> CategoryStore:
    config = config or get_app_config()
    return CategoryStore(
        storage,
        session.user.id,
        key_prefix=config.storage.key_prefix,
        palette=config.notes.palette,
        defaults=[Category(**c.model_dump()) for c in config.notes.default_categories],
    )


def require_session(auth: AuthStore, session_id: str | None) -> Session:
    """
    Resolve a session or fail.

    Raises:
        AuthenticationError: If no session id is given or it does not resolve
    """
    if not session_id:
        raise AuthenticationError("Not logged in")
    session = auth.get_session(session_id)
    if session is None:
        raise AuthenticationError("Session not found or expired")
    return session
