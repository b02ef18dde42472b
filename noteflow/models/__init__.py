"""
Domain Models.

Pydantic entities for notes, users, sessions, and categories.
"""

from noteflow.models.category import Category
from noteflow.models.note import (
    ImageNote,
    Location,
    Note,
    NoteType,
    TextNote,
    TodoItem,
    TodoNote,
)
from noteflow.models.user import Session, User

__all__ = [
    "Category",
    "ImageNote",
    "Location",
    "Note",
    "NoteType",
    "Session",
    "TextNote",
    "TodoItem",
    "TodoNote",
    "User",
]
