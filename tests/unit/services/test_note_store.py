"""
Unit Tests for the Note Store.

Runs against an in-memory key-value store. Persistence is observed by
reading the raw JSON back or by opening a second store on the same backend.
"""

import json

import pytest

from noteflow.core.exceptions import ConflictError, ValidationError
from noteflow.models.note import ImageNote, Location, TextNote, TodoNote, create_note
from noteflow.repositories import FileKeyValueStore
from noteflow.services.note import NoteStore, TodoItemEdit


def _ids(store: NoteStore) -> list[str]:
    return [n.id for n in store.notes]


@pytest.fixture
def three_notes(note_store):
    """Three text notes titled a, b, c in that order."""
    notes = []
    for title in ("a", "b", "c"):
        notes.append(note_store.new_note("text", title=title))
    return [n.id for n in notes]


@pytest.fixture
def todo(note_store):
    return note_store.new_note("todo", title="Groceries", items=["milk", "bread"])


# =============================================================================
# Create
# =============================================================================


class TestCreate:
    """Tests for create and new_note."""

    def test_appends_to_end(self, note_store, three_notes):
        note = note_store.create(create_note("image", note_store.user_id))
        assert _ids(note_store)[-1] == note.id
        assert len(note_store.notes) == 4

    def test_fills_in_owner(self, note_store):
        note = note_store.create(create_note("text", ""))
        assert note.user_id == note_store.user_id

    def test_rejects_note_of_other_user(self, note_store):
        with pytest.raises(ValidationError, match="another user"):
            note_store.create(create_note("text", "someone-else"))

    def test_rejects_duplicate_id(self, note_store):
        note = note_store.new_note("text")
        with pytest.raises(ConflictError):
            note_store.create(note)

    def test_persists_active_list(self, note_store, storage):
        note = note_store.new_note("text", title="Hello", content="World")
        records = json.loads(storage.get(f"notes-{note_store.user_id}"))
        assert records[0]["id"] == note.id
        assert records[0]["content"] == "World"

    def test_returned_note_is_a_copy(self, note_store):
        note = note_store.new_note("text", title="Original")
        note.title = "Changed"
        assert note_store.get(note.id).title == "Original"

    def test_new_todo_drops_blank_items(self, note_store):
        note = note_store.new_note("todo", items=["milk", "  ", "", "bread"])
        assert isinstance(note, TodoNote)
        assert [i.text for i in note.items] == ["milk", "bread"]
        assert all(not i.completed for i in note.items)

    def test_new_image_note(self, note_store):
        note = note_store.new_note("image", image_url="https://x/y.png", caption="Sunset")
        assert isinstance(note, ImageNote)
        assert note.caption == "Sunset"

    def test_new_note_ignores_payload_of_other_variants(self, note_store):
        note = note_store.new_note("text", content="body", items=["x"], caption="c")
        assert isinstance(note, TextNote)
        assert "items" not in note.to_record()
        assert "caption" not in note.to_record()

    def test_new_note_with_category_and_location(self, note_store):
        note = note_store.new_note(
            "text", category_id="2", location=Location(lat=1.5, lng=2.5),
        )
        assert note.color == "2"
        assert note.location.lat == 1.5

    def test_new_note_unknown_type(self, note_store):
        with pytest.raises(ValidationError):
            note_store.new_note("audio")
        assert note_store.notes == []


class TestLoading:
    def test_reopened_store_sees_notes_in_order(self, note_store, storage, three_notes):
        reopened = NoteStore(storage, note_store.user_id)
        assert _ids(reopened) == three_notes
        assert [n.title for n in reopened.notes] == ["a", "b", "c"]

    def test_unreadable_notes_load_as_empty(self, storage):
        storage.set("notes-u1", "not json at all")
        assert NoteStore(storage, "u1").notes == []

    def test_undecodable_file_loads_as_empty(self, tmp_path):
        (tmp_path / "notes-u1.json").write_bytes(b"\xff\xfe[not utf8")

        store = NoteStore(FileKeyValueStore(tmp_path), "u1")

        assert store.notes == []
        assert store.new_note("text", title="fresh").title == "fresh"

    def test_users_are_isolated(self, storage, note_store):
        note_store.new_note("text", title="mine")
        assert NoteStore(storage, "other-user").notes == []


# =============================================================================
# Delete / archive / restore
# =============================================================================


class TestDelete:
    def test_removes_note(self, note_store, three_notes):
        assert note_store.delete(three_notes[1]) is True
        assert _ids(note_store) == [three_notes[0], three_notes[2]]

    def test_missing_id_is_silent_noop(self, note_store, three_notes, storage):
        before = storage.get(f"notes-{note_store.user_id}")
        assert note_store.delete("missing") is False
        assert _ids(note_store) == three_notes
        assert storage.get(f"notes-{note_store.user_id}") == before

    def test_clears_selection_of_deleted_note(self, note_store, three_notes):
        note_store.select(three_notes[0])
        note_store.delete(three_notes[0])
        assert note_store.selected is None

    def test_keeps_selection_of_other_note(self, note_store, three_notes):
        note_store.select(three_notes[0])
        note_store.delete(three_notes[1])
        assert note_store.selected.id == three_notes[0]


class TestArchive:
    """Tests for archive, restore and permanent deletion."""

    def test_moves_note_to_archive(self, note_store, three_notes):
        assert note_store.archive(three_notes[0]) is True
        assert three_notes[0] not in _ids(note_store)
        archived = note_store.get_archived(three_notes[0])
        assert archived.archived_at is not None

    def test_note_lives_in_exactly_one_list(self, note_store, three_notes):
        note_store.archive(three_notes[0])
        active = set(_ids(note_store))
        archived = {n.id for n in note_store.archived_notes}
        assert active.isdisjoint(archived)
        assert active | archived == set(three_notes)

    def test_archive_then_restore_round_trip(self, note_store, three_notes):
        note_store.add_tag(three_notes[0], "keep")
        before = note_store.get(three_notes[0])

        note_store.archive(three_notes[0])
        note_store.restore(three_notes[0])

        after = note_store.get(three_notes[0])
        assert after == before
        assert _ids(note_store)[-1] == three_notes[0]

    def test_archive_missing_id_is_noop(self, note_store, three_notes):
        assert note_store.archive("missing") is False
        assert note_store.archived_notes == []

    def test_restore_missing_id_is_noop(self, note_store, three_notes):
        assert note_store.restore(three_notes[0]) is False
        assert _ids(note_store) == three_notes

    def test_permanently_delete(self, note_store, three_notes):
        note_store.archive(three_notes[2])
        assert note_store.permanently_delete(three_notes[2]) is True
        assert note_store.archived_notes == []
        assert note_store.get(three_notes[2]) is None

    def test_permanently_delete_ignores_active_notes(self, note_store, three_notes):
        assert note_store.permanently_delete(three_notes[0]) is False
        assert _ids(note_store) == three_notes

    def test_archive_not_persisted_by_default(self, note_store, storage, three_notes):
        note_store.archive(three_notes[0])
        assert storage.get(f"archive-{note_store.user_id}") is None
        assert NoteStore(storage, note_store.user_id).archived_notes == []

    def test_archive_persisted_when_enabled(self, storage, session):
        store = NoteStore.for_session(storage, session, persist_archive=True)
        note = store.new_note("text", title="old")
        store.archive(note.id)

        reopened = NoteStore(storage, session.user.id, persist_archive=True)
        assert [n.id for n in reopened.archived_notes] == [note.id]
        assert reopened.notes == []

    def test_duplicate_of_archived_note_rejected(self, note_store, three_notes):
        archived = note_store.get(three_notes[0])
        note_store.archive(archived.id)
        with pytest.raises(ConflictError):
            note_store.create(archived)


# =============================================================================
# Reorder and drag protocol
# =============================================================================


class TestReorder:
    """Tests for reorder(dragged, target)."""

    def test_moves_later_note_before_earlier(self, note_store, three_notes):
        a, b, c = three_notes
        assert note_store.reorder(c, a) is True
        assert _ids(note_store) == [c, a, b]

    def test_moves_earlier_note_before_later(self, note_store, three_notes):
        a, b, c = three_notes
        note_store.reorder(a, c)
        assert _ids(note_store) == [b, a, c]

    def test_adjacent_notes(self, note_store, three_notes):
        a, b, c = three_notes
        note_store.reorder(a, b)
        assert _ids(note_store) == [a, b, c]
        note_store.reorder(b, a)
        assert _ids(note_store) == [b, a, c]

    @pytest.mark.parametrize(
        ("dragged", "target"),
        [(0, 0), (0, None), (None, 0)],
    )
    def test_noop_cases(self, note_store, three_notes, dragged, target):
        dragged_id = three_notes[dragged] if dragged is not None else "missing"
        target_id = three_notes[target] if target is not None else "missing"
        assert note_store.reorder(dragged_id, target_id) is False
        assert _ids(note_store) == three_notes

    def test_same_id_set_and_dragged_precedes_target(self, note_store, three_notes):
        extra = note_store.new_note("todo").id
        ids = [*three_notes, extra]
        for dragged in ids:
            for target in ids:
                if dragged == target:
                    continue
                note_store.reorder(dragged, target)
                order = _ids(note_store)
                assert sorted(order) == sorted(ids)
                assert order.index(dragged) + 1 == order.index(target)

    def test_order_persisted(self, note_store, storage, three_notes):
        a, b, c = three_notes
        note_store.reorder(c, a)
        assert _ids(NoteStore(storage, note_store.user_id)) == [c, a, b]


class TestDragProtocol:
    def test_drop_reorders_and_clears_flags(self, note_store, three_notes):
        a, b, c = three_notes
        note_store.drag_start(c)
        note_store.drag_over(b)
        assert note_store.is_dragged(c)
        assert note_store.is_drag_over(b)

        assert note_store.drop(b) is True

        assert _ids(note_store) == [a, c, b]
        assert note_store.dragged_id is None
        assert note_store.drag_over_id is None

    def test_only_one_drag_over_target(self, note_store, three_notes):
        a, b, c = three_notes
        note_store.drag_start(a)
        note_store.drag_over(b)
        note_store.drag_over(c)
        assert not note_store.is_drag_over(b)
        assert note_store.is_drag_over(c)

    def test_drag_leave_clears_drag_over(self, note_store, three_notes):
        note_store.drag_start(three_notes[0])
        note_store.drag_over(three_notes[1])
        note_store.drag_leave()
        assert note_store.drag_over_id is None
        assert note_store.is_dragged(three_notes[0])

    def test_drag_end_leaves_order_unchanged(self, note_store, three_notes):
        note_store.drag_start(three_notes[2])
        note_store.drag_over(three_notes[0])
        note_store.drag_end()
        assert _ids(note_store) == three_notes
        assert note_store.dragged_id is None
        assert note_store.drag_over_id is None

    def test_drop_without_drag_is_noop(self, note_store, three_notes):
        assert note_store.drop(three_notes[0]) is False
        assert _ids(note_store) == three_notes

    def test_drag_start_on_missing_note_ignored(self, note_store, three_notes):
        note_store.drag_start("missing")
        assert note_store.dragged_id is None


# =============================================================================
# Field edits
# =============================================================================


class TestFieldEdits:
    def test_update_title(self, note_store, three_notes):
        assert note_store.update_title(three_notes[0], "Renamed") is True
        assert note_store.get(three_notes[0]).title == "Renamed"

    def test_updated_at_never_before_created_at(self, note_store, three_notes):
        note_store.update_title(three_notes[0], "x")
        note = note_store.get(three_notes[0])
        assert note.updated_at >= note.created_at

    def test_tags_are_a_set(self, note_store, three_notes):
        note_store.add_tag(three_notes[0], "work")
        note_store.add_tag(three_notes[0], "work")
        note_store.add_tag(three_notes[0], "home")
        note_store.remove_tag(three_notes[0], "work")
        assert note_store.get(three_notes[0]).tags == ["home"]

    def test_set_color(self, note_store, three_notes):
        note_store.set_color(three_notes[0], "4")
        assert note_store.get(three_notes[0]).color == "4"
        assert [n.id for n in note_store.notes_in_category("4")] == [three_notes[0]]

    def test_update_content_on_text_note(self, note_store, three_notes):
        assert note_store.update_content(three_notes[0], "body") is True
        assert note_store.get(three_notes[0]).content == "body"

    def test_update_content_on_todo_note_is_noop(self, note_store, todo):
        assert note_store.update_content(todo.id, "body") is False

    def test_update_caption(self, note_store):
        note = note_store.new_note("image", image_url="u")
        assert note_store.update_caption(note.id, "caption") is True
        assert note_store.get(note.id).caption == "caption"

    def test_update_image(self, note_store, todo):
        note = note_store.new_note("image", image_url="https://x/a.png")
        assert note_store.update_image(note.id, "https://x/b.png") is True
        assert note_store.get(note.id).image_url == "https://x/b.png"
        assert note_store.update_image(todo.id, "https://x/b.png") is False

    def test_edit_missing_note_is_noop(self, note_store):
        assert note_store.update_title("missing", "x") is False

    def test_toggle_note_completed(self, note_store, three_notes):
        assert note_store.toggle_note_completed(three_notes[0]) is True
        assert note_store.get(three_notes[0]).completed is True
        note_store.toggle_note_completed(three_notes[0])
        assert note_store.get(three_notes[0]).completed is False

    def test_toggle_note_completed_missing_id(self, note_store):
        assert note_store.toggle_note_completed("missing") is False


class TestSaveNoteEdit:
    def test_replaces_note_keeping_identity(self, note_store, three_notes):
        original = note_store.get(three_notes[1])
        edited = original.model_copy(update={"title": "edited", "content": "new body"})
        edited.created_at = original.created_at.replace(year=2000)
        edited.user_id = "intruder"

        assert note_store.save_note_edit(edited) is True

        stored = note_store.get(three_notes[1])
        assert stored.title == "edited"
        assert stored.created_at == original.created_at
        assert stored.user_id == original.user_id
        assert stored.updated_at >= original.updated_at
        assert _ids(note_store) == three_notes

    def test_missing_note_is_noop(self, note_store):
        assert note_store.save_note_edit(create_note("text", "x")) is False


# =============================================================================
# Todo items and edit cursor
# =============================================================================


class TestTodoItems:
    def test_toggle_item(self, note_store, todo):
        item_id = todo.items[0].id
        assert note_store.toggle_todo_item(todo.id, item_id) is True
        assert note_store.get(todo.id).items[0].completed is True

    def test_toggle_on_text_note_is_noop(self, note_store, three_notes):
        assert note_store.toggle_todo_item(three_notes[0], "x") is False

    def test_toggle_missing_item_is_noop(self, note_store, todo):
        assert note_store.toggle_todo_item(todo.id, "missing") is False

    def test_delete_item(self, note_store, todo):
        assert note_store.delete_todo_item(todo.id, todo.items[0].id) is True
        assert [i.text for i in note_store.get(todo.id).items] == ["bread"]

    def test_delete_item_being_edited_ends_edit(self, note_store, todo):
        note_store.start_edit_todo_item(todo.id, todo.items[0].id, "milk")
        note_store.delete_todo_item(todo.id, todo.items[0].id)
        assert note_store.editing is None

    def test_add_item_enters_edit_mode(self, note_store, todo):
        item = note_store.add_todo_item(todo.id)
        assert item.text == ""
        assert item.completed is False
        assert note_store.editing == TodoItemEdit(todo.id, item.id, "")
        assert note_store.is_editing(todo.id, item.id)

    def test_add_item_on_text_note_returns_none(self, note_store, three_notes):
        assert note_store.add_todo_item(three_notes[0]) is None
        assert note_store.editing is None

    def test_buy_milk_scenario(self, note_store):
        note = note_store.create(create_note("todo", note_store.user_id))
        item = note_store.add_todo_item(note.id)
        assert note_store.editing.buffer == ""

        assert note_store.save_todo_item_edit("Buy milk") is True
        stored = note_store.get(note.id).items[0]
        assert stored.text == "Buy milk"
        assert stored.completed is False

        note_store.toggle_todo_item(note.id, item.id)
        assert note_store.get(note.id).items[0].completed is True


class TestEditCursor:
    """Tests for the single todo-item edit state machine."""

    @pytest.fixture
    def editing(self, note_store, todo):
        item = todo.items[0]
        note_store.start_edit_todo_item(todo.id, item.id, item.text)
        return todo.id, item.id

    def test_starts_idle(self, note_store):
        assert note_store.editing is None

    def test_save_trims_text(self, note_store, editing):
        note_id, item_id = editing
        assert note_store.save_todo_item_edit("  x ") is True
        assert note_store.get(note_id).items[0].text == "x"
        assert note_store.editing is None

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_save_keeps_text_and_exits(self, note_store, editing, text):
        note_id, _ = editing
        assert note_store.save_todo_item_edit(text) is False
        assert note_store.get(note_id).items[0].text == "milk"
        assert note_store.editing is None

    def test_save_uses_buffer_by_default(self, note_store, editing):
        note_id, _ = editing
        note_store.update_edit_buffer("oat milk")
        assert note_store.editing.buffer == "oat milk"
        note_store.save_todo_item_edit()
        assert note_store.get(note_id).items[0].text == "oat milk"

    def test_cancel_discards_buffer(self, note_store, editing):
        note_id, _ = editing
        note_store.update_edit_buffer("changed")
        note_store.cancel_todo_item_edit()
        assert note_store.editing is None
        assert note_store.get(note_id).items[0].text == "milk"

    def test_starting_new_edit_discards_previous_buffer(self, note_store, editing, todo):
        note_id, first_item = editing
        note_store.update_edit_buffer("uncommitted")
        second_item = todo.items[1].id

        note_store.start_edit_todo_item(note_id, second_item, "bread")

        assert note_store.editing.item_id == second_item
        assert note_store.get(note_id).items[0].text == "milk"

    def test_save_when_idle_is_noop(self, note_store):
        assert note_store.save_todo_item_edit("x") is False

    def test_update_buffer_when_idle_is_ignored(self, note_store):
        note_store.update_edit_buffer("x")
        assert note_store.editing is None

    def test_deleting_the_note_ends_the_edit(self, note_store, editing):
        note_id, _ = editing
        note_store.delete(note_id)
        assert note_store.editing is None
        assert note_store.save_todo_item_edit("x") is False

    def test_archiving_the_note_ends_the_edit(self, note_store, editing):
        note_id, _ = editing
        note_store.archive(note_id)
        assert note_store.editing is None
        assert note_store.get_archived(note_id).items[0].text == "milk"

    def test_removing_another_note_keeps_the_edit(self, note_store, editing):
        other = note_store.new_note("text", title="other")
        note_store.archive(other.id)
        assert note_store.editing.item_id == editing[1]


# =============================================================================
# Reads
# =============================================================================


class TestSelection:
    def test_select_and_clear(self, note_store, three_notes):
        assert note_store.select(three_notes[1]) is True
        assert note_store.selected.id == three_notes[1]
        note_store.clear_selection()
        assert note_store.selected is None

    def test_select_missing_note(self, note_store):
        assert note_store.select("missing") is False
        assert note_store.selected is None


class TestSearch:
    def test_matches_title_and_bodies_ignoring_case(self, note_store, todo):
        note_store.new_note("text", title="Meeting", content="Quarterly PLAN")
        note_store.new_note("image", caption="Plant photo")

        titles = [n.title for n in note_store.search("plan")]

        assert titles == ["Meeting", ""]

    def test_matches_todo_items(self, note_store, todo):
        assert [n.id for n in note_store.search("BREAD")] == [todo.id]

    def test_archived_notes_not_searched(self, note_store, todo):
        note_store.archive(todo.id)
        assert note_store.search("milk") == []
