"""
Note Store.

Business logic for one user's notes: the ordered active list, the archive,
the current selection, the single todo-item edit cursor, and the transient
drag-and-drop state.

Operations that reference a missing note or item do nothing and return
False. They never raise. Each applied operation ends with one batch write
of the active list (and of the archive when archive persistence is on).
"""

from dataclasses import dataclass

from noteflow.core.exceptions import ConflictError, ValidationError
from noteflow.core.utils import generate_id, utc_now
from noteflow.models import note as entity
from noteflow.models.note import (
    BaseNote,
    ImageNote,
    Location,
    Note,
    TextNote,
    TodoItem,
    TodoNote,
    copy_note,
    create_note,
)
from noteflow.models.user import Session
from noteflow.repositories.base import KeyValueStore
from noteflow.repositories.collection import archive_key, notes_key
from noteflow.services.base import BaseService


@dataclass(frozen=True)
class TodoItemEdit:
    """The todo item currently being edited and its uncommitted text."""

    note_id: str
    item_id: str
    buffer: str


def _searchable_text(note: Note) -> str:
    match note:
        case TextNote():
            body = note.content
        case TodoNote():
            body = " ".join(item.text for item in note.items)
        case ImageNote():
            body = note.caption or ""
    return f"{note.title} {body}"


class NoteStore(BaseService):
    """
    Store for one user's notes.

    The active list is in display order, front to back. Archived notes keep
    their content and gain ``archived_at``; a note lives in exactly one of
    the two lists.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        user_id: str,
        *,
        key_prefix: str = "",
        persist_archive: bool = False,
    ) -> None:
        super().__init__(storage, key_prefix)
        self.user_id = user_id
        self.persist_archive = persist_archive
        self._repo = self._collection(Note)

        self._notes: list[Note] = self._repo.read(notes_key(user_id))
        self._archived: list[Note] = (
            self._repo.read(archive_key(user_id)) if persist_archive else []
        )

        self._selected_id: str | None = None
        self._editing: TodoItemEdit | None = None
        self._dragged_id: str | None = None
        self._drag_over_id: str | None = None

        self._log_debug("Notes loaded", user_id=user_id, count=len(self._notes))

    @classmethod
    def for_session(cls, storage: KeyValueStore, session: Session, **options) -> "NoteStore":
        """Open the store for the user of an authenticated session."""
        return cls(storage, session.user.id, **options)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _save_active(self) -> None:
        self._repo.write(notes_key(self.user_id), self._notes)

    def _save_archive(self) -> None:
        if self.persist_archive:
            self._repo.write(archive_key(self.user_id), self._archived)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def _index(self, note_id: str) -> int | None:
        return next((i for i, n in enumerate(self._notes) if n.id == note_id), None)

    def _archive_index(self, note_id: str) -> int | None:
        return next((i for i, n in enumerate(self._archived) if n.id == note_id), None)

    def _find(self, note_id: str) -> Note | None:
        index = self._index(note_id)
        return self._notes[index] if index is not None else None

    def _release(self, note_id: str) -> None:
        """Drop selection and edit state that point at a note leaving the active list."""
        if self._selected_id == note_id:
            self._selected_id = None
        if self._editing is not None and self._editing.note_id == note_id:
            self._editing = None

    @property
    def notes(self) -> list[Note]:
        """Active notes in display order."""
        return [copy_note(n) for n in self._notes]

    @property
    def archived_notes(self) -> list[Note]:
        return [copy_note(n) for n in self._archived]

    def get(self, note_id: str) -> Note | None:
        note = self._find(note_id)
        return copy_note(note) if note is not None else None

    def get_archived(self, note_id: str) -> Note | None:
        index = self._archive_index(note_id)
        return copy_note(self._archived[index]) if index is not None else None

    def search(self, query: str) -> list[Note]:
        """Active notes whose title or body contains ``query``, ignoring case."""
        needle = query.strip().casefold()
        return [
            copy_note(n) for n in self._notes
            if needle in _searchable_text(n).casefold()
        ]

    def notes_in_category(self, category_id: str) -> list[Note]:
        return [copy_note(n) for n in self._notes if n.color == category_id]

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create(self, draft: Note) -> Note:
        """
        Append a note to the end of the active list.

        Args:
            draft: Note built by the factory; an empty owner is filled in

        Returns:
            The stored note

        Raises:
            ValidationError: If the draft belongs to another user
            ConflictError: If a note with the same id already exists
        """
        if draft.user_id and draft.user_id != self.user_id:
            raise ValidationError(
                "Note belongs to another user",
                details={"note_id": draft.id},
            )
        if self._index(draft.id) is not None or self._archive_index(draft.id) is not None:
            raise ConflictError(f"Note already exists: {draft.id}")

        note = copy_note(draft)
        note.user_id = self.user_id
        note.archived_at = None
        self._notes.append(note)
        self._save_active()

        self._log_operation("Note created", note_id=note.id, type=note.type)
        return copy_note(note)

    def new_note(
        self,
        note_type: str,
        *,
        title: str = "",
        content: str = "",
        items: list[str] | None = None,
        image_url: str = "",
        caption: str = "",
        category_id: str | None = None,
        location: Location | None = None,
    ) -> Note:
        """
        Build a note from form input and create it.

        Payload arguments that do not belong to ``note_type`` are ignored.
        Todo items with blank text are dropped.
        """
        note = create_note(note_type, self.user_id)
        note.title = title

        match note:
            case TextNote():
                note.content = content
            case TodoNote():
                note.items = [
                    TodoItem(id=generate_id(), text=text)
                    for text in items or []
                    if text.strip()
                ]
            case ImageNote():
                note.image_url = image_url
                note.caption = caption

        if category_id:
            note.color = category_id
        if location is not None:
            note.location = location

        return self.create(note)

    def delete(self, note_id: str) -> bool:
        """Remove an active note and clear the selection if it pointed at it."""
        index = self._index(note_id)
        if index is None:
            self._log_debug("Delete skipped, note not found", note_id=note_id)
            return False

        del self._notes[index]
        self._release(note_id)
        self._save_active()

        self._log_operation("Note deleted", note_id=note_id)
        return True

    def archive(self, note_id: str) -> bool:
        """Move an active note to the archive, stamping ``archived_at``."""
        index = self._index(note_id)
        if index is None:
            self._log_debug("Archive skipped, note not found", note_id=note_id)
            return False

        note = self._notes.pop(index)
        note.archived_at = utc_now()
        self._archived.append(note)
        self._release(note_id)
        self._save_active()
        self._save_archive()

        self._log_operation("Note archived", note_id=note_id)
        return True

    def restore(self, note_id: str) -> bool:
        """Move an archived note back to the end of the active list."""
        index = self._archive_index(note_id)
        if index is None:
            self._log_debug("Restore skipped, note not archived", note_id=note_id)
            return False

        note = self._archived.pop(index)
        note.archived_at = None
        self._notes.append(note)
        self._save_active()
        self._save_archive()

        self._log_operation("Note restored", note_id=note_id)
        return True

    def permanently_delete(self, note_id: str) -> bool:
        """Remove a note from the archive for good."""
        index = self._archive_index(note_id)
        if index is None:
            self._log_debug("Purge skipped, note not archived", note_id=note_id)
            return False

        del self._archived[index]
        self._save_archive()

        self._log_operation("Note permanently deleted", note_id=note_id)
        return True

    def reorder(self, dragged_id: str, target_id: str) -> bool:
        """
        Move ``dragged_id`` so it sits immediately before ``target_id``.

        No-op when the ids are equal or either is not active.
        """
        if dragged_id == target_id:
            return False
        source = self._index(dragged_id)
        if source is None or self._index(target_id) is None:
            self._log_debug("Reorder skipped", dragged_id=dragged_id, target_id=target_id)
            return False

        note = self._notes.pop(source)
        self._notes.insert(self._index(target_id), note)
        self._save_active()

        self._log_debug("Notes reordered", dragged_id=dragged_id, target_id=target_id)
        return True

    def save_note_edit(self, updated: Note) -> bool:
        """
        Replace an active note with an edited version of it.

        Identity, owner and creation time are kept from the stored note.
        """
        index = self._index(updated.id)
        if index is None:
            self._log_debug("Edit skipped, note not found", note_id=updated.id)
            return False

        current = self._notes[index]
        note = copy_note(updated)
        note.user_id = current.user_id
        note.created_at = current.created_at
        note.archived_at = None
        entity.touch(note)
        self._notes[index] = note
        self._save_active()

        self._log_operation("Note edited", note_id=note.id)
        return True

    def toggle_note_completed(self, note_id: str) -> bool:
        note = self._find(note_id)
        if note is None:
            return False
        entity.set_completed(note, not note.completed)
        self._save_active()
        return True

    # -------------------------------------------------------------------------
    # Field edits
    # -------------------------------------------------------------------------

    def _apply(self, note_id: str, variant: type[BaseNote], mutator, *args) -> bool:
        note = self._find(note_id)
        if note is None or not isinstance(note, variant):
            self._log_debug(
                "Edit skipped", note_id=note_id, operation=mutator.__name__,
            )
            return False
        mutator(note, *args)
        self._save_active()
        return True

    def update_title(self, note_id: str, title: str) -> bool:
        return self._apply(note_id, BaseNote, entity.update_title, title)

    def add_tag(self, note_id: str, tag: str) -> bool:
        return self._apply(note_id, BaseNote, entity.add_tag, tag)

    def remove_tag(self, note_id: str, tag: str) -> bool:
        return self._apply(note_id, BaseNote, entity.remove_tag, tag)

    def set_color(self, note_id: str, category_id: str | None) -> bool:
        return self._apply(note_id, BaseNote, entity.set_color, category_id)

    def update_content(self, note_id: str, content: str) -> bool:
        return self._apply(note_id, TextNote, entity.update_content, content)

    def update_caption(self, note_id: str, caption: str) -> bool:
        return self._apply(note_id, ImageNote, entity.update_caption, caption)

    def update_image(self, note_id: str, image_url: str) -> bool:
        return self._apply(note_id, ImageNote, entity.update_image, image_url)

    # -------------------------------------------------------------------------
    # Todo items
    # -------------------------------------------------------------------------

    def toggle_todo_item(self, note_id: str, item_id: str) -> bool:
        note = self._find(note_id)
        if not isinstance(note, TodoNote) or not entity.toggle_item(note, item_id):
            self._log_debug("Toggle skipped", note_id=note_id, item_id=item_id)
            return False
        self._save_active()
        return True

    def add_todo_item(self, note_id: str) -> TodoItem | None:
        """
        Append an empty item and start editing it.

        Returns:
            The new item, or None if the note is missing or not a todo note
        """
        note = self._find(note_id)
        if not isinstance(note, TodoNote):
            self._log_debug("Add item skipped", note_id=note_id)
            return None

        item = entity.add_item(note, "")
        self._save_active()
        self.start_edit_todo_item(note_id, item.id, "")
        return item.model_copy()

    def delete_todo_item(self, note_id: str, item_id: str) -> bool:
        note = self._find(note_id)
        if not isinstance(note, TodoNote) or not entity.remove_item(note, item_id):
            self._log_debug("Delete item skipped", note_id=note_id, item_id=item_id)
            return False
        if self._editing is not None and self._editing.item_id == item_id:
            self._editing = None
        self._save_active()
        return True

    # -------------------------------------------------------------------------
    # Todo item edit cursor
    # -------------------------------------------------------------------------

    @property
    def editing(self) -> TodoItemEdit | None:
        """The item being edited, or None when idle."""
        return self._editing

    def is_editing(self, note_id: str, item_id: str) -> bool:
        return (
            self._editing is not None
            and self._editing.note_id == note_id
            and self._editing.item_id == item_id
        )

    def start_edit_todo_item(self, note_id: str, item_id: str, text: str) -> None:
        """Start editing an item. Any uncommitted edit in progress is discarded."""
        if self._editing is not None:
            self._log_debug("Discarding uncommitted edit", item_id=self._editing.item_id)
        self._editing = TodoItemEdit(note_id=note_id, item_id=item_id, buffer=text)

    def update_edit_buffer(self, text: str) -> None:
        if self._editing is None:
            return
        self._editing = TodoItemEdit(
            note_id=self._editing.note_id,
            item_id=self._editing.item_id,
            buffer=text,
        )

    def save_todo_item_edit(self, new_text: str | None = None) -> bool:
        """
        Commit the edit and return to idle.

        Args:
            new_text: Text to commit; defaults to the current buffer

        Returns:
            True if the item text changed. Blank text leaves the item as is
            but still ends the edit.
        """
        edit = self._editing
        if edit is None:
            return False
        self._editing = None

        text = (edit.buffer if new_text is None else new_text).strip()
        if not text:
            return False

        note = self._find(edit.note_id)
        if not isinstance(note, TodoNote) or not entity.set_item_text(note, edit.item_id, text):
            self._log_debug("Edit target missing", note_id=edit.note_id, item_id=edit.item_id)
            return False
        self._save_active()
        return True

    def cancel_todo_item_edit(self) -> None:
        self._editing = None

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    @property
    def selected(self) -> Note | None:
        if self._selected_id is None:
            return None
        return self.get(self._selected_id)

    def select(self, note_id: str) -> bool:
        if self._index(note_id) is None:
            return False
        self._selected_id = note_id
        return True

    def clear_selection(self) -> None:
        self._selected_id = None

    # -------------------------------------------------------------------------
    # Drag and drop
    # -------------------------------------------------------------------------

    @property
    def dragged_id(self) -> str | None:
        return self._dragged_id

    @property
    def drag_over_id(self) -> str | None:
        return self._drag_over_id

    def is_dragged(self, note_id: str) -> bool:
        return self._dragged_id == note_id

    def is_drag_over(self, note_id: str) -> bool:
        return self._drag_over_id == note_id

    def drag_start(self, note_id: str) -> None:
        if self._index(note_id) is None:
            return
        self._dragged_id = note_id

    def drag_over(self, note_id: str) -> None:
        if self._index(note_id) is None:
            return
        self._drag_over_id = note_id

    def drag_leave(self) -> None:
        self._drag_over_id = None

    def drop(self, target_id: str) -> bool:
        """Finish a drag on ``target_id``: reorder, then clear both flags."""
        dragged_id = self._dragged_id
        self._dragged_id = None
        self._drag_over_id = None
        if dragged_id is None:
            return False
        return self.reorder(dragged_id, target_id)

    def drag_end(self) -> None:
        """Abandon a drag without dropping. Order is unchanged."""
        self._dragged_id = None
        self._drag_over_id = None
