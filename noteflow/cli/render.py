"""
Rich renderables for notes and categories.
"""

from datetime import datetime

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from noteflow.cli.context import short_id
from noteflow.models.category import Category
from noteflow.models.note import ImageNote, Note, TextNote, TodoNote

# Palette names mapped to terminal colors
PALETTE_STYLES = {
    "indigo": "slate_blue1",
    "purple": "purple",
    "pink": "hot_pink",
    "blue": "blue",
    "green": "green",
    "yellow": "yellow",
    "red": "red",
    "gray": "grey50",
}


def swatch(color: str, text: str) -> str:
    style = PALETTE_STYLES.get(color, "default")
    return f"[{style}]{escape(text)}[/{style}]"


def format_timestamp(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value is not None else "-"


def category_label(note: Note, categories: dict[str, Category]) -> str:
    if not note.color:
        return "-"
    category = categories.get(note.color)
    if category is None:
        return escape(note.color)
    return swatch(category.color, category.name)


def summary(note: Note) -> str:
    """One-line body preview."""
    match note:
        case TextNote():
            text = note.content
        case TodoNote():
            done = sum(1 for item in note.items if item.completed)
            text = f"{done}/{len(note.items)} done"
        case ImageNote():
            text = note.caption or note.image_url
    text = " ".join(text.split())
    return escape(text if len(text) <= 40 else f"{text[:37]}...")


def note_table(title: str, notes: list[Note], categories: dict[str, Category]) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Title")
    table.add_column("Preview")
    table.add_column("Category")
    table.add_column("Tags")
    table.add_column("Done")
    table.add_column("Updated", no_wrap=True)

    for note in notes:
        table.add_row(
            short_id(note.id),
            note.type,
            escape(note.title) or "[dim](untitled)[/dim]",
            summary(note),
            category_label(note, categories),
            escape(", ".join(note.tags)) or "-",
            "[green]yes[/green]" if note.completed else "-",
            format_timestamp(note.updated_at),
        )
    return table


def note_panel(note: Note, categories: dict[str, Category]) -> Panel:
    """Full detail view of a single note."""
    lines = [
        f"[bold]{escape(note.title) or '(untitled)'}[/bold]",
        f"ID: {note.id}",
        f"Type: {note.type}",
        f"Category: {category_label(note, categories)}",
        f"Tags: {escape(', '.join(note.tags)) or '-'}",
        f"Completed: {'yes' if note.completed else 'no'}",
        f"Created: {format_timestamp(note.created_at)}",
        f"Updated: {format_timestamp(note.updated_at)}",
    ]
    if note.location is not None:
        lines.append(f"Location: {note.location.lat:.5f}, {note.location.lng:.5f}")
    if note.archived_at is not None:
        lines.append(f"Archived: {format_timestamp(note.archived_at)}")
    lines.append("")

    match note:
        case TextNote():
            lines.append(escape(note.content) or "[dim](empty)[/dim]")
        case TodoNote():
            for item in note.items:
                mark = "[green]x[/green]" if item.completed else " "
                lines.append(f"\\[{mark}] {escape(item.text)}  [dim]{short_id(item.id)}[/dim]")
            if not note.items:
                lines.append("[dim](no items)[/dim]")
        case ImageNote():
            lines.append(f"Image: {escape(note.image_url)}")
            if note.caption:
                lines.append(escape(note.caption))

    return Panel("\n".join(lines), title=f"{note.type.capitalize()} note")


def category_table(categories: list[Category], counts: dict[str, int]) -> Table:
    table = Table(title="Categories", show_header=True)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Color")
    table.add_column("Notes", justify="right")

    for category in categories:
        table.add_row(
            short_id(category.id),
            escape(category.name),
            swatch(category.color, category.color),
            str(counts.get(category.id, 0)),
        )
    return table
