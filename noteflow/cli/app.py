"""
NoteFlow CLI.

Usage:
    noteflow --help                                  # Show help

    # Accounts
    noteflow auth register alice alice@example.com   # Create an account
    noteflow auth login alice@example.com            # Prints a session token
    export NOTEFLOW_SESSION=<token>

    # Notes
    noteflow notes add text --title "Ideas" --content "..."
    noteflow notes add todo --title "Groceries" -i milk -i bread
    noteflow notes list
    noteflow todo toggle <note> <item>
    noteflow notes move <note> <before-note>

    # Overview
    noteflow categories list
    noteflow stats

    # System info
    noteflow system info                             # Show app info
    noteflow system config                           # Show configuration

Options:
    --verbose, -v     Enable verbose output
    --debug           Enable debug mode (detailed logging)
    --help            Show help message
"""

import typer

from noteflow.cli.commands import (
    auth_app,
    categories_app,
    notes_app,
    stats,
    system_app,
    todo_app,
)
from noteflow.cli.context import console
from noteflow.core.config import validate_project_root
from noteflow.core.logging import setup_logging

app = typer.Typer(
    name="noteflow",
    help="NoteFlow CLI - Personal notes, checklists and images from the terminal.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(auth_app, name="auth")
app.add_typer(notes_app, name="notes")
app.add_typer(todo_app, name="todo")
app.add_typer(categories_app, name="categories")
app.add_typer(system_app, name="system")
app.command()(stats)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    NoteFlow CLI.

    Notes, checklists, categories and statistics stored locally.
    Built with Typer for type-safe commands and Rich for formatted output.
    """
    validate_project_root()

    if debug:
        setup_logging(level="DEBUG", format_type="console")
        console.print("[dim]Debug mode enabled[/dim]")
    elif verbose:
        setup_logging(level="INFO", format_type="console")
    else:
        setup_logging()


if __name__ == "__main__":
    app()
