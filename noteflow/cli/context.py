"""
Command Context.

Shared plumbing for CLI commands: the console, the session option, store
access, id resolution, and domain error reporting.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from functools import cached_property

import typer
from rich.console import Console
from rich.markup import escape

from noteflow.core.config import get_settings
from noteflow.core.dependencies import (
    build_storage,
    get_auth_store,
    open_category_store,
    open_note_store,
    require_session,
)
from noteflow.core.exceptions import ApplicationError, NotFoundError, ValidationError
from noteflow.core.logging import get_logger, log_with_source
from noteflow.models.user import Session
from noteflow.repositories.base import KeyValueStore
from noteflow.services.auth import AuthStore
from noteflow.services.category import CategoryStore
from noteflow.services.note import NoteStore

logger = get_logger(__name__)

console = Console()

SESSION_OPTION = typer.Option(
    None,
    "--session",
    "-s",
    envvar="NOTEFLOW_SESSION",
    help="Session token printed by 'auth login'",
)

SHORT_ID_LENGTH = 8


@contextmanager
def handle_errors() -> Iterator[None]:
    """Print domain errors in red and exit with status 1."""
    try:
        yield
    except ApplicationError as e:
        log_with_source(logger, "cli", "info", "Command failed", code=e.code)
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        raise typer.Exit(1) from e


def open_auth() -> AuthStore:
    return get_auth_store(build_storage())


@dataclass
class Workspace:
    """Stores of the logged-in user, opened on first access."""

    storage: KeyValueStore
    auth: AuthStore
    session: Session

    @cached_property
    def notes(self) -> NoteStore:
        return open_note_store(self.storage, self.session)

    @cached_property
    def categories(self) -> CategoryStore:
        return open_category_store(self.storage, self.session)


def open_workspace(session_id: str | None) -> Workspace:
    """
    Resolve the session and open the user's stores.

    Raises:
        AuthenticationError: If no valid session is given
    """
    storage = build_storage()
    auth = get_auth_store(storage)
    session = require_session(auth, session_id or get_settings().session)
    return Workspace(storage=storage, auth=auth, session=session)


def resolve_id(candidates: Iterable[str], given: str, kind: str = "Note") -> str:
    """
    Match a full id or a unique prefix of one.

    Raises:
        NotFoundError: If nothing matches
        ValidationError: If the prefix matches more than one id
    """
    ids = list(candidates)
    if given in ids:
        return given
    matches = [i for i in ids if i.startswith(given)]
    if not matches:
        raise NotFoundError(f"{kind} not found: {given}")
    if len(matches) > 1:
        raise ValidationError(
            f"Ambiguous {kind.lower()} id: {given}",
            details={"matches": matches},
        )
    return matches[0]


def short_id(value: str) -> str:
    return value[:SHORT_ID_LENGTH]
