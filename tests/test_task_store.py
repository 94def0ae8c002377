"""Tests for the in-memory task store."""

import pytest

from taskmatrix.engine.store import TaskStore
from taskmatrix.models.task import TaskStatus


class TestAddAndRemove:
    """Test add(), get() and remove()."""

    def test_add_prepends(self, make_record):
        store = TaskStore()
        first = store.add(make_record(original_text="first"))
        second = store.add(make_record(original_text="second"))

        assert store.records == [second, first]
        assert len(store) == 2

    def test_add_rejects_reused_id(self, make_record):
        store = TaskStore()
        record = store.add(make_record())
        with pytest.raises(ValueError):
            store.add(make_record(id=record.id))

    def test_removed_id_cannot_be_reused(self, make_record):
        store = TaskStore()
        record = store.add(make_record())
        store.remove(record.id)
        with pytest.raises(ValueError):
            store.add(make_record(id=record.id))

    def test_get(self, make_record):
        store = TaskStore()
        record = store.add(make_record())
        assert store.get(record.id) == record
        assert store.get("missing") is None

    def test_remove(self, make_record):
        store = TaskStore()
        keep = store.add(make_record())
        drop = store.add(make_record())

        assert store.remove(drop.id) is True
        assert store.records == [keep]

    def test_remove_missing_is_noop(self, make_record):
        store = TaskStore([make_record()])
        assert store.remove("missing") is False
        assert len(store) == 1


class TestToggleStatus:
    """Test toggle_status()."""

    def test_open_to_done_sets_completed_at(self, make_record, now):
        store = TaskStore()
        record = store.add(make_record())

        updated = store.toggle_status(record.id, now + 1000)

        assert updated.status == TaskStatus.DONE
        assert updated.completed_at == now + 1000
        assert store.get(record.id) == updated

    def test_done_to_open_clears_completed_at(self, make_record, now):
        store = TaskStore()
        record = store.add(make_record(status=TaskStatus.DONE, completed_at=now))

        updated = store.toggle_status(record.id, now + 1000)

        assert updated.status == TaskStatus.OPEN
        assert updated.completed_at is None

    def test_toggle_keeps_position_and_fields(self, make_record, now):
        store = TaskStore()
        older = store.add(make_record(u_score=70, i_score=20))
        store.add(make_record())

        updated = store.toggle_status(older.id, now)

        assert store.records[1].id == older.id
        assert (updated.u_score, updated.i_score, updated.quadrant) == (70, 20, older.quadrant)

    def test_toggle_twice_restores_open(self, make_record, now):
        store = TaskStore()
        record = store.add(make_record())
        store.toggle_status(record.id, now)
        restored = store.toggle_status(record.id, now + 5)
        assert restored.status == TaskStatus.OPEN
        assert restored.completed_at is None

    def test_toggle_missing_is_noop(self, make_record, now):
        store = TaskStore([make_record()])
        assert store.toggle_status("missing", now) is None


class TestClearAndLoad:
    """Test clear() and load()."""

    def test_clear(self, make_record):
        store = TaskStore([make_record(), make_record()])
        assert store.clear() == 2
        assert len(store) == 0

    def test_load_keeps_order(self, make_record):
        records = [make_record(), make_record(), make_record()]
        store = TaskStore(records)
        assert store.records == records

    def test_load_drops_duplicate_ids(self, make_record):
        record = make_record()
        store = TaskStore([record, make_record(id=record.id, original_text="duplicate")])

        assert len(store) == 1
        assert store.records[0].original_text == "Test task"


class TestSearchAndPartition:
    """Test search() and partition()."""

    def test_search_case_insensitive(self, make_record):
        store = TaskStore([make_record(original_text="Update Label"), make_record(original_text="写周报")])

        assert [r.original_text for r in store.search("label")] == ["Update Label"]
        assert [r.original_text for r in store.search("周报")] == ["写周报"]

    def test_blank_query_returns_all(self, make_record):
        store = TaskStore([make_record(), make_record()])
        assert len(store.search("")) == 2
        assert len(store.search("   ")) == 2
        assert len(store.search(None)) == 2

    def test_search_no_match(self, make_record):
        store = TaskStore([make_record()])
        assert store.search("nothing here") == []

    def test_partition(self, make_record, now):
        open_a = make_record(original_text="open a")
        done_old = make_record(original_text="done old", status=TaskStatus.DONE, completed_at=now - 1000)
        open_b = make_record(original_text="open b")
        done_new = make_record(original_text="done new", status=TaskStatus.DONE, completed_at=now)
        store = TaskStore([open_a, done_old, open_b, done_new])

        open_records, done_records = store.partition()

        assert open_records == [open_a, open_b]
        assert done_records == [done_new, done_old]

    def test_partition_with_query(self, make_record, now):
        store = TaskStore([
            make_record(original_text="label open"),
            make_record(original_text="label done", status=TaskStatus.DONE, completed_at=now),
            make_record(original_text="other"),
        ])

        open_records, done_records = store.partition("LABEL")

        assert [r.original_text for r in open_records] == ["label open"]
        assert [r.original_text for r in done_records] == ["label done"]
