"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    StorageSchema      → storage.yaml
    SecuritySchema     → security.yaml
    NotesSchema        → notes.yaml
    LoggingSchema      → logging.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str


# =============================================================================
# storage.yaml
# =============================================================================


class StorageSchema(_StrictBase):
    backend: Literal["memory", "file", "sql"]
    data_dir: str
    database_url: str
    key_prefix: str = ""


# =============================================================================
# security.yaml
# =============================================================================


class PasswordSchema(_StrictBase):
    scheme: Literal["legacy", "bcrypt"]
    bcrypt_rounds: int = Field(ge=4, le=31)
    rehash_on_login: bool


class SessionSchema(_StrictBase):
    lifetime_hours: int = Field(gt=0)
    enforce_expiry: bool


class SecuritySchema(_StrictBase):
    password: PasswordSchema
    session: SessionSchema
    identity_case_sensitive: bool
    seed_demo_account: bool


# =============================================================================
# notes.yaml
# =============================================================================


class CategoryDefaultSchema(_StrictBase):
    id: str
    name: str
    color: str


class NotesSchema(_StrictBase):
    persist_archive: bool
    palette: list[str]
    default_categories: list[CategoryDefaultSchema]


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema
