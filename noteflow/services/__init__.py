"""
Services.

Stateful stores implementing the note and account business rules.
"""

from noteflow.services.auth import AuthStore
from noteflow.services.category import CategoryStore
from noteflow.services.note import NoteStore, TodoItemEdit
from noteflow.services.stats import NoteStats, compute_stats

__all__ = [
    "AuthStore",
    "CategoryStore",
    "NoteStats",
    "NoteStore",
    "TodoItemEdit",
    "compute_stats",
]
