"""
Configuration Management.

Loads settings from config/settings/*.yaml and environment overrides from
NOTEFLOW_* variables (or config/.env when present).

Settings (YAML):
    application.yaml   - App identity
    storage.yaml       - Key-value backend selection and location
    security.yaml      - Password scheme, session lifetime, identity policy
    notes.yaml         - Archive persistence, category palette and defaults
    logging.yaml       - Logging configuration

Environment (NOTEFLOW_ prefix):
    NOTEFLOW_STORAGE_BACKEND, NOTEFLOW_DATA_DIR, NOTEFLOW_DATABASE_URL,
    NOTEFLOW_SESSION
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from noteflow.core.config_schema import (
    ApplicationSchema,
    LoggingSchema,
    NotesSchema,
    SecuritySchema,
    StorageSchema,
)


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Environment overrides. Unset values fall back to the YAML settings."""

    storage_backend: str | None = None
    data_dir: str | None = None
    database_url: str | None = None
    session: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="NOTEFLOW_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._storage = _load_validated(StorageSchema, "storage.yaml")
        self._security = _load_validated(SecuritySchema, "security.yaml")
        self._notes = _load_validated(NotesSchema, "notes.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def storage(self) -> StorageSchema:
        """Storage settings."""
        return self._storage

    @property
    def security(self) -> SecuritySchema:
        """Security settings."""
        return self._security

    @property
    def notes(self) -> NotesSchema:
        """Note and category settings."""
        return self._notes

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


@lru_cache
def get_settings() -> Settings:
    """Get cached environment settings. Reads config/.env when it exists."""
    try:
        env_path = find_project_root() / "config" / ".env"
    except RuntimeError:
        return Settings()
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def resolve_data_dir() -> Path:
    """
    Resolve the file-backend data directory.

    Relative paths are taken from the project root.
    """
    configured = get_settings().data_dir or get_app_config().storage.data_dir
    path = Path(configured).expanduser()
    if not path.is_absolute():
        path = find_project_root() / path
    return path
