"""
Note Commands.

Create, browse, edit, reorder and archive notes of the logged-in user.
Note ids may be abbreviated to any unique prefix.

Examples:
    noteflow notes add text --title "Ideas" --content "..."
    noteflow notes add todo --title "Groceries" -i milk -i bread
    noteflow notes list --category 1
    noteflow notes move 3f2a 9c1b
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
from noteflow.cli.render import note_panel, note_table
from noteflow.core.exceptions import ValidationError
from noteflow.models.note import NOTE_TYPES, Location

app = typer.Typer(help="Note commands")


def _note_id(workspace: Workspace, given: str) -> str:
    return resolve_id((n.id for n in workspace.notes.notes), given)


def _archived_id(workspace: Workspace, given: str) -> str:
    return resolve_id((n.id for n in workspace.notes.archived_notes), given, kind="Archived note")


def _category_id(workspace: Workspace, given: str) -> str:
    return resolve_id((c.id for c in workspace.categories.list()), given, kind="Category")


def _category_map(workspace: Workspace) -> dict:
    return {c.id: c for c in workspace.categories.list()}


def _require_change(changed: bool, message: str) -> None:
    if not changed:
        raise ValidationError(message)


@app.command("list")
def list_notes(
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Only notes in this category"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only notes with this tag"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    List active notes in display order.
    """
    with handle_errors():
        workspace = open_workspace(session)
        if category:
            notes = workspace.notes.notes_in_category(_category_id(workspace, category))
        else:
            notes = workspace.notes.notes
        if tag:
            notes = [n for n in notes if tag in n.tags]
        categories = _category_map(workspace)

    if not notes:
        console.print("[dim]No notes[/dim]")
        return
    console.print(note_table("Notes", notes, categories))


@app.command()
def add(
    note_type: str = typer.Argument(..., help=f"One of: {', '.join(NOTE_TYPES)}"),
    title: str = typer.Option("", "--title", "-t", help="Note title"),
    content: str = typer.Option("", "--content", help="Body of a text note"),
    items: Optional[list[str]] = typer.Option(None, "--item", "-i", help="Checklist entry, repeatable"),
    image_url: str = typer.Option("", "--image-url", help="Image location for an image note"),
    caption: str = typer.Option("", "--caption", help="Caption for an image note"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Category id"),
    lat: Optional[float] = typer.Option(None, "--lat", help="Latitude"),
    lng: Optional[float] = typer.Option(None, "--lng", help="Longitude"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Create a note at the end of the list.
    """
    with handle_errors():
        if (lat is None) != (lng is None):
            raise ValidationError("Both --lat and --lng are required for a location")
        workspace = open_workspace(session)
        note = workspace.notes.new_note(
            note_type,
            title=title,
            content=content,
            items=items or [],
            image_url=image_url,
            caption=caption,
            category_id=_category_id(workspace, category) if category else None,
            location=Location(lat=lat, lng=lng) if lat is not None else None,
        )

    console.print(f"[green]Created {note.type} note[/green] {short_id(note.id)}")


@app.command()
def show(
    note_id: str = typer.Argument(..., help="Note id or prefix"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Show one note in full.
    """
    with handle_errors():
        workspace = open_workspace(session)
        note = workspace.notes.get(_note_id(workspace, note_id))
        categories = _category_map(workspace)

    console.print(note_panel(note, categories))


@app.command()
def title(
    note_id: str = typer.Argument(..., help="Note id or prefix"),
    text: str = typer.Argument(..., help="New title"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Rename a note.
    """
    with handle_errors():
        workspace = open_workspace(session)
        workspace.notes.update_title(_note_id(workspace, note_id), text)

    console.print(f"[green]Title set to[/green] {escape(text)}")


@app.command()
def content(
    note_id: str = typer.Argument(..., help="Note id or prefix"),
    text: str = typer.Argument(..., help="New body"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Replace the body of a text note.
    """
    with handle_errors():
        workspace = open_workspace(session)
        changed = workspace.notes.update_content(_note_id(workspace, note_id), text)
        _require_change(changed, "Content can only be set on text notes")

    console.print("[green]Content updated[/green]")


@app.command()
def caption(
    note_id: str = typer.Argument(..., help="Note id or prefix"),
    text: str = typer.Argument(..., help="New caption"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Replace the caption of an image note.
    """
    with handle_errors():
        workspace = open_workspace(session)
        changed = workspace.notes.update_caption(_note_id(workspace, note_id), text)
        _require_change(changed, "Captions can only be set on image notes")

    console.print("[green]Caption updated[/green]")


@app.command()
def image(
    note_id: str = typer.Argument(..., help="Note id or prefix"),
    url: str = typer.Argument(..., help="New image location"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Point an image note at a different image.
    """
    with handle_errors():
        workspace = open_workspace(session)
        changed = workspace.notes.update_image(_note_id(workspace, note_id), url)
        _require_change(changed, "Images can only be set on image notes")

    console.print("[green]Image updated[/green]")


@app.command()
def tag(
    note_id: str = typer.Argument(..., help="Note id or prefix"),
    name: str = typer.Argument(..., help="Tag to add"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Add a tag to a note.
    """
    with handle_errors():
        workspace = open_workspace(session)
        workspace.notes.add_tag(_note_id(workspace, note_id), name)

    console.print(f"[green]Tagged[/green] {escape(name)}")


@app.command()
def untag(
    note_id: str = typer.Argument(..., help="Note id or prefix"),
    name: str = typer.Argument(..., help="Tag to remove"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Remove a tag from a note.
    """
    with handle_errors():
        workspace = open_workspace(session)
        workspace.notes.remove_tag(_note_id(workspace, note_id), name)

    console.print(f"[green]Removed tag[/green] {escape(name)}")


@app.command()
def color(
    note_id: str = typer.Argument(..., help="Note id or prefix"),
    category: Optional[str] = typer.Argument(None, help="Category id"),
    clear: bool = typer.Option(False, "--clear", help="Remove the note from its category"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Move a note into a category.
    """
    with handle_errors():
        if not clear and not category:
            raise ValidationError("Give a category id or --clear")
        workspace = open_workspace(session)
        category_id = None if clear else _category_id(workspace, category)
        workspace.notes.set_color(_note_id(workspace, note_id), category_id)

    console.print("[green]Category cleared[/green]" if clear else "[green]Category set[/green]")


@app.command()
def complete(
    note_id: str = typer.Argument(..., help="Note id or prefix"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Toggle whether a note is marked done.
    """
    with handle_errors():
        workspace = open_workspace(session)
        resolved = _note_id(workspace, note_id)
        workspace.notes.toggle_note_completed(resolved)
        done = workspace.notes.get(resolved).completed

    console.print("[green]Marked done[/green]" if done else "[yellow]Marked not done[/yellow]")


@app.command()
def delete(
    note_id: str = typer.Argument(..., help="Note id or prefix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Delete a note without archiving it.
    """
    with handle_errors():
        workspace = open_workspace(session)
        resolved = _note_id(workspace, note_id)
        if not yes and not typer.confirm(f"Delete note {short_id(resolved)}?"):
            raise typer.Abort()
        workspace.notes.delete(resolved)

    console.print(f"[green]Deleted[/green] {short_id(resolved)}")


@app.command()
def archive(
    note_id: str = typer.Argument(..., help="Note id or prefix"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Move a note to the archive.
    """
    with handle_errors():
        workspace = open_workspace(session)
        resolved = _note_id(workspace, note_id)
        workspace.notes.archive(resolved)
        persisted = workspace.notes.persist_archive

    console.print(f"[green]Archived[/green] {short_id(resolved)}")
    if not persisted:
        console.print("[dim]Archive persistence is off; the note is gone after this command.[/dim]")


@app.command()
def restore(
    note_id: str = typer.Argument(..., help="Archived note id or prefix"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Return an archived note to the end of the list.
    """
    with handle_errors():
        workspace = open_workspace(session)
        resolved = _archived_id(workspace, note_id)
        workspace.notes.restore(resolved)

    console.print(f"[green]Restored[/green] {short_id(resolved)}")


@app.command()
def purge(
    note_id: str = typer.Argument(..., help="Archived note id or prefix"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Permanently delete an archived note.
    """
    with handle_errors():
        workspace = open_workspace(session)
        resolved = _archived_id(workspace, note_id)
        workspace.notes.permanently_delete(resolved)

    console.print(f"[green]Purged[/green] {short_id(resolved)}")


@app.command()
def move(
    note_id: str = typer.Argument(..., help="Note to move"),
    before: str = typer.Argument(..., help="Note it should sit in front of"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Reorder: place a note immediately before another one.
    """
    with handle_errors():
        workspace = open_workspace(session)
        dragged = _note_id(workspace, note_id)
        target = _note_id(workspace, before)
        store = workspace.notes
        store.drag_start(dragged)
        store.drag_over(target)
        moved = store.drop(target)

    if moved:
        console.print(f"[green]Moved[/green] {short_id(dragged)} before {short_id(target)}")
    else:
        console.print("[dim]Order unchanged[/dim]")


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to look for in titles and bodies"),
    session: Optional[str] = SESSION_OPTION,
) -> None:
    """
    Find active notes by text, ignoring case.
    """
    with handle_errors():
        workspace = open_workspace(session)
        notes = workspace.notes.search(query)
        categories = _category_map(workspace)

    if not notes:
        console.print(f"[dim]No notes match {escape(query)!r}[/dim]")
        return
    console.print(note_table(f"Matches for {escape(query)!r}", notes, categories))


@app.command()
def archived(session: Optional[str] = SESSION_OPTION) -> None:
    """
    List archived notes.
    """
    with handle_errors():
        workspace = open_workspace(session)
        notes = workspace.notes.archived_notes
        categories = _category_map(workspace)

    if not notes:
        console.print("[dim]Archive is empty[/dim]")
        return
    console.print(note_table("Archive", notes, categories))
