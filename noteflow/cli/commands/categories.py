"""
Category Commands.
"""

from typing import Optional

import typer
from rich.markup import escape

from noteflow.cli.context import (
    SESSION_OPTION,
    console,
    handle_errors,
    open_workspace,
    resolve_id,
    short_id,
)
from noteflow.cli.render import category_table

app = typer.Typer(help="Category commands")


@app.command("list")
def list_categories(session: Optional[str] = SESSION_OPTION) -> None:
    """
    List categories with the number of active notes in each.
    """
    with handle_errors():
        workspace = open_workspace(session)
        categories = workspace.categories.list()
        counts = workspace.categories.counts(workspace.notes.notes)

    console.print(category_table(categories, counts))


@app.command()
def add(
    name: str = typer.Argument(..., help="Category name"),
    color: str = typer.Option("gray", "--color", help="Palette color"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Create a category.
    """
    with handle_errors():
        category = open_workspace(session).categories.create(name, color)

    console.print(f"[green]Created category[/green] {escape(category.name)} ({short_id(category.id)})")


@app.command()
def remove(
    category_id: str = typer.Argument(..., help="Category id or prefix"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Delete a category. Notes in it keep their reference.
    """
    with handle_errors():
        store = open_workspace(session).categories
        resolved = resolve_id((c.id for c in store.list()), category_id, kind="Category")
        store.delete(resolved)

    console.print(f"[green]Removed category[/green] {short_id(resolved)}")
