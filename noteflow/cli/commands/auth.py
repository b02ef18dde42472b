"""
Auth Commands.

Register, log in and out, and manage the current account.

Examples:
    noteflow auth register alice alice@example.com
    noteflow auth login alice@example.com
    export NOTEFLOW_SESSION=<token>
    noteflow auth whoami
"""

from typing import Optional

import typer
from rich.markup import escape
from rich.panel import Panel

from noteflow.cli.context import (
    SESSION_OPTION,
    console,
    handle_errors,
    open_auth,
    open_workspace,
)
from noteflow.cli.render import format_timestamp

app = typer.Typer(help="Account and session commands")


@app.command()
def register(
    username: str = typer.Argument(..., help="3-20 letters, digits or underscores"),
    email: str = typer.Argument(..., help="Login email"),
    password: str = typer.Option(
        ...,
        "--password",
        "-p",
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        help="At least 8 letters or digits with upper, lower and a digit",
    ),
) -> None:
    """
    Create an account.
    """
    with handle_errors():
        user = open_auth().register(username, email, password)

    console.print(f"[green]Registered {escape(user.username)}[/green] ({escape(user.email)})")
    console.print(f"[dim]Log in with: noteflow auth login {escape(user.email)}[/dim]")


@app.command()
def login(
    email: str = typer.Argument(..., help="Login email"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
) -> None:
    """
    Log in and print a session token.

    Pass the token with --session or export it as NOTEFLOW_SESSION.
    """
    with handle_errors():
        user, session = open_auth().login(email, password)

    console.print(f"[green]Logged in as {escape(user.username)}[/green]")
    console.print(f"Session expires {format_timestamp(session.expires_at)} UTC")
    console.print(f"export NOTEFLOW_SESSION={session.id}", highlight=False)


@app.command()
def logout(session: Optional[str] = SESSION_OPTION) -> None:
    """
    End the current session.
    """
    with handle_errors():
        workspace = open_workspace(session)
        workspace.auth.logout(workspace.session.id)

    console.print("[green]Logged out[/green]")


@app.command()
def whoami(session: Optional[str] = SESSION_OPTION) -> None:
    """
    Show the logged-in account.
    """
    with handle_errors():
        current = open_workspace(session).session

    console.print(Panel(
        f"[bold]{escape(current.user.username)}[/bold]\n"
        f"Email: {escape(current.user.email)}\n"
        f"User ID: {current.user.id}\n"
        f"Session started: {format_timestamp(current.created_at)}\n"
        f"Session expires: {format_timestamp(current.expires_at)}",
        title="Account",
    ))


@app.command()
def passwd(
    session: Optional[str] = SESSION_OPTION,
    current: str = typer.Option(..., "--current", prompt="Current password", hide_input=True),
    new: str = typer.Option(
        ...,
        "--new",
        prompt="New password",
        hide_input=True,
        confirmation_prompt=True,
    ),
) -> None:
    """
    Change the account password.
    """
    with handle_errors():
        workspace = open_workspace(session)
        workspace.auth.change_password(workspace.session.user.id, current, new)

    console.print("[green]Password changed[/green]")


@app.command()
def purge() -> None:
    """
    Remove every expired session.
    """
    with handle_errors():
        removed = open_auth().purge_expired_sessions()

    console.print(f"[green]Removed {removed} expired session(s)[/green]")
