"""
Note Model.

Notes are a tagged union on ``type``: text, todo, and image variants share
the common fields of ``BaseNote`` and add their own payload. Pydantic picks
the variant from the discriminator when parsing persisted records.

Mutators are plain functions over a note. Every mutation stamps
``updated_at``; idempotent mutations that change nothing leave it alone.
"""

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter

from noteflow.core.exceptions import ValidationError
from noteflow.core.utils import generate_id, utc_now
from noteflow.models.base import CamelModel

NoteType = Literal["text", "todo", "image"]

NOTE_TYPES: tuple[str, ...] = ("text", "todo", "image")


class Location(CamelModel):
    """Geolocation captured when the note was created."""

    lat: float
    lng: float


class TodoItem(CamelModel):
    id: str
    text: str = ""
    completed: bool = False


class BaseNote(CamelModel):
    """Fields shared by every note variant."""

    id: str
    title: str = ""
    created_at: datetime
    updated_at: datetime
    user_id: str = ""
    color: str | None = None
    tags: list[str] = Field(default_factory=list)
    completed: bool = False
    location: Location | None = None
    archived_at: datetime | None = None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id}, title={self.title!r})>"


class TextNote(BaseNote):
    type: Literal["text"] = "text"
    content: str = ""


class TodoNote(BaseNote):
    type: Literal["todo"] = "todo"
    items: list[TodoItem] = Field(default_factory=list)
    assigned_users: list[str] = Field(default_factory=list)


class ImageNote(BaseNote):
    type: Literal["image"] = "image"
    image_url: str = ""
    caption: str | None = ""


Note = Annotated[TextNote | TodoNote | ImageNote, Field(discriminator="type")]

_note_adapter: TypeAdapter[Note] = TypeAdapter(Note)


# =============================================================================
# Factory and conversion
# =============================================================================


def create_note(note_type: str, user_id: str) -> Note:
    """
    Create an empty note of the requested variant.

    Args:
        note_type: One of ``text``, ``todo``, ``image``
        user_id: Owner of the note

    Returns:
        New note with a generated id and ``created_at == updated_at``

    Raises:
        ValidationError: If the type is unknown
    """
    now = utc_now()
    fields: dict[str, Any] = {
        "id": generate_id(),
        "user_id": user_id,
        "created_at": now,
        "updated_at": now,
    }

    match note_type:
        case "text":
            return TextNote(**fields)
        case "todo":
            return TodoNote(**fields)
        case "image":
            return ImageNote(**fields)
        case _:
            raise ValidationError(
                f"Unknown note type: {note_type}",
                details={"type": note_type, "allowed": list(NOTE_TYPES)},
            )


def parse_note(data: dict[str, Any]) -> Note:
    """Build a note from its persisted (camelCase) or attribute form."""
    return _note_adapter.validate_python(data)


def dump_note(note: Note) -> dict[str, Any]:
    """Return the JSON-ready persisted form of a note."""
    return note.to_record()


def copy_note(note: Note) -> Note:
    """Deep copy, so callers cannot mutate store-owned instances."""
    return note.model_copy(deep=True)


# =============================================================================
# Mutators
# =============================================================================


def touch(note: BaseNote) -> None:
    """Stamp ``updated_at``, never earlier than ``created_at``."""
    note.updated_at = max(utc_now(), note.created_at)


def _require(note: BaseNote, variant: type[BaseNote]) -> None:
    if not isinstance(note, variant):
        raise ValidationError(
            f"Operation not supported for {note.type} notes",
            details={"note_id": note.id, "type": note.type},
        )


def update_title(note: BaseNote, title: str) -> None:
    note.title = title
    touch(note)


def add_tag(note: BaseNote, tag: str) -> None:
    if tag in note.tags:
        return
    note.tags.append(tag)
    touch(note)


def remove_tag(note: BaseNote, tag: str) -> None:
    if tag not in note.tags:
        return
    note.tags = [t for t in note.tags if t != tag]
    touch(note)


def set_color(note: BaseNote, color: str | None) -> None:
    """Assign the note to a category id, or clear it with ``None``."""
    note.color = color
    touch(note)


def set_completed(note: BaseNote, completed: bool) -> None:
    note.completed = completed
    touch(note)


def update_content(note: BaseNote, content: str) -> None:
    _require(note, TextNote)
    note.content = content
    touch(note)


def add_item(note: BaseNote, text: str = "") -> TodoItem:
    """Append a new open item to a todo note and return it."""
    _require(note, TodoNote)
    item = TodoItem(id=generate_id(), text=text, completed=False)
    note.items.append(item)
    touch(note)
    return item


def find_item(note: BaseNote, item_id: str) -> TodoItem | None:
    _require(note, TodoNote)
    return next((item for item in note.items if item.id == item_id), None)


def toggle_item(note: BaseNote, item_id: str) -> bool:
    """Flip an item's completion. Returns False if the item is absent."""
    item = find_item(note, item_id)
    if item is None:
        return False
    item.completed = not item.completed
    touch(note)
    return True


def set_item_text(note: BaseNote, item_id: str, text: str) -> bool:
    item = find_item(note, item_id)
    if item is None:
        return False
    item.text = text
    touch(note)
    return True


def remove_item(note: BaseNote, item_id: str) -> bool:
    """Remove an item. Returns False if the item is absent."""
    if find_item(note, item_id) is None:
        return False
    note.items = [item for item in note.items if item.id != item_id]
    touch(note)
    return True


def update_caption(note: BaseNote, caption: str) -> None:
    _require(note, ImageNote)
    note.caption = caption
    touch(note)


def update_image(note: BaseNote, image_url: str) -> None:
    _require(note, ImageNote)
    note.image_url = image_url
    touch(note)
