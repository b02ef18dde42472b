"""
Todo Commands.

Checklist editing on todo notes. Item ids may be abbreviated like note ids.
"""

from typing import Optional

import typer
from rich.markup import escape

from noteflow.cli.context import (
    SESSION_OPTION,
    Workspace,
    console,
    handle_errors,
    open_workspace,
    resolve_id,
    short_id,
)
from noteflow.core.exceptions import ValidationError
from noteflow.models.note import TodoNote

app = typer.Typer(help="Checklist commands for todo notes")


def _todo_note(workspace: Workspace, given: str) -> TodoNote:
    note_id = resolve_id((n.id for n in workspace.notes.notes), given)
    note = workspace.notes.get(note_id)
    if not isinstance(note, TodoNote):
        raise ValidationError(f"Not a todo note: {short_id(note_id)}")
    return note


def _item_id(note: TodoNote, given: str) -> str:
    return resolve_id((item.id for item in note.items), given, kind="Item")


@app.command()
def add(
    note_id: str = typer.Argument(..., help="Todo note id or prefix"),
    text: str = typer.Argument(..., help="Item text"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Append an item to a checklist.
    """
    with handle_errors():
        workspace = open_workspace(session)
        note = _todo_note(workspace, note_id)
        store = workspace.notes
        item = store.add_todo_item(note.id)
        store.update_edit_buffer(text)
        store.save_todo_item_edit()

    console.print(f"[green]Added item[/green] {short_id(item.id)}: {escape(text.strip())}")


@app.command()
def toggle(
    note_id: str = typer.Argument(..., help="Todo note id or prefix"),
    item_id: str = typer.Argument(..., help="Item id or prefix"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Check or uncheck an item.
    """
    with handle_errors():
        workspace = open_workspace(session)
        note = _todo_note(workspace, note_id)
        resolved = _item_id(note, item_id)
        workspace.notes.toggle_todo_item(note.id, resolved)
        item = next(i for i in workspace.notes.get(note.id).items if i.id == resolved)

    state = "[green]done[/green]" if item.completed else "[yellow]open[/yellow]"
    console.print(f"{escape(item.text) or '(empty)'}: {state}")


@app.command()
def edit(
    note_id: str = typer.Argument(..., help="Todo note id or prefix"),
    item_id: str = typer.Argument(..., help="Item id or prefix"),
    text: str = typer.Argument(..., help="New item text"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Change the text of an item. Blank text leaves the item unchanged.
    """
    with handle_errors():
        workspace = open_workspace(session)
        note = _todo_note(workspace, note_id)
        resolved = _item_id(note, item_id)
        current = next(i.text for i in note.items if i.id == resolved)
        store = workspace.notes
        store.start_edit_todo_item(note.id, resolved, current)
        changed = store.save_todo_item_edit(text)

    if changed:
        console.print(f"[green]Item updated[/green]: {escape(text.strip())}")
    else:
        console.print("[dim]Item unchanged[/dim]")


@app.command()
def remove(
    note_id: str = typer.Argument(..., help="Todo note id or prefix"),
    item_id: str = typer.Argument(..., help="Item id or prefix"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Delete an item from a checklist.
    """
    with handle_errors():
        workspace = open_workspace(session)
        note = _todo_note(workspace, note_id)
        resolved = _item_id(note, item_id)
        workspace.notes.delete_todo_item(note.id, resolved)

    console.print(f"[green]Removed item[/green] {short_id(resolved)}")
