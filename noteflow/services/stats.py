"""
Note statistics for the dashboard and the ``stats`` command.
"""

from collections import Counter

from pydantic import BaseModel, Field

from noteflow.models.category import Category
from noteflow.models.note import NOTE_TYPES, Note, TodoNote


class NoteStats(BaseModel):
    total: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
    by_category: dict[str, int] = Field(default_factory=dict)
    by_month: dict[str, int] = Field(default_factory=dict)
    total_todos: int = 0
    completed_todos: int = 0
    completion_percentage: int = 0


def compute_stats(
    active: list[Note],
    archived: list[Note] | None = None,
    categories: list[Category] | None = None,
) -> NoteStats:
    """
    Summarize active and archived notes together.

    Notes whose category no longer exists are counted under the raw id.
    Months are ``YYYY-MM`` of the creation time, in ascending order.
    """
    notes = [*active, *(archived or [])]
    names = {c.id: c.name for c in categories or []}

    by_type = {t: 0 for t in NOTE_TYPES}
    by_type.update(Counter(n.type for n in notes))

    by_category = Counter(names.get(n.color, n.color) for n in notes if n.color)
    by_month = Counter(n.created_at.strftime("%Y-%m") for n in notes)

    items = [item for n in notes if isinstance(n, TodoNote) for item in n.items]
    completed = sum(1 for item in items if item.completed)
    percentage = round(completed * 100 / len(items)) if items else 0

    return NoteStats(
        total=len(notes),
        by_type=by_type,
        by_category=dict(by_category),
        by_month=dict(sorted(by_month.items())),
        total_todos=len(items),
        completed_todos=completed,
        completion_percentage=percentage,
    )
