"""Tests for slot stores and the persistence adapter."""

import json
import os
import tempfile

import pytest

from job_tracker.errors import StorageError
from job_tracker.records.models import Company, Job
from job_tracker.storage.persistence import PersistenceAdapter
from job_tracker.storage.slots import MemorySlotStore, SqlSlotStore, open_slot_store, slot_key
from job_tracker.storage.store import TrackerStore


def make_job(job_id="j1", company="Acme"):
    return Job(id=job_id, title="SE", company=company, location="", status="applied", date_applied="2024-01-01")


@pytest.fixture
def sql_slots():
    """Slot store on a temporary SQLite file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = os.path.join(tmpdir, "nested", "tracker.db")
        yield SqlSlotStore.from_url(f"sqlite:///{db_path}")


class FailingSlots(MemorySlotStore):
    def __init__(self):
        super().__init__()
        self.fail = True

    def set_many(self, items):
        if self.fail:
            raise OSError("quota exceeded")
        super().set_many(items)


class TestSlotStores:
    def test_memory_get_set(self):
        slots = MemorySlotStore()
        assert slots.get("k") is None
        slots.set("k", "[]")
        assert slots.get("k") == "[]"

    def test_sql_get_set(self, sql_slots):
        assert sql_slots.get("jobTracker-jobs") is None
        sql_slots.set("jobTracker-jobs", "[]")
        sql_slots.set("jobTracker-jobs", '[{"id": "j1"}]')
        assert sql_slots.get("jobTracker-jobs") == '[{"id": "j1"}]'
        assert sql_slots.keys() == ["jobTracker-jobs"]

    def test_sql_set_many(self, sql_slots):
        sql_slots.set_many({"a": "1", "b": "2"})
        assert sql_slots.get("a") == "1"
        assert sql_slots.get("b") == "2"

    def test_slot_key(self):
        assert slot_key("jobs") == "jobTracker-jobs"
        assert slot_key("tasks", "test-") == "test-tasks"

    def test_open_unknown_backend(self):
        with pytest.raises(ValueError):
            open_slot_store("redis")

    def test_open_memory(self):
        assert isinstance(open_slot_store("memory"), MemorySlotStore)


class TestLoadFromSlots:
    def test_missing_slots_are_empty(self):
        store = TrackerStore.from_slots(MemorySlotStore())
        assert store.jobs == ()
        assert store.tasks == ()

    def test_loads_records(self):
        slots = MemorySlotStore({
            "jobTracker-companies": json.dumps([{"id": "c1", "name": "Acme"}]),
        })
        store = TrackerStore.from_slots(slots)
        assert store.companies == (Company(id="c1", name="Acme"),)

    def test_corrupt_slot(self):
        slots = MemorySlotStore({"jobTracker-jobs": "{not json"})
        with pytest.raises(StorageError):
            TrackerStore.from_slots(slots)

    def test_slot_not_array(self):
        slots = MemorySlotStore({"jobTracker-jobs": '{"id": "j1"}'})
        with pytest.raises(StorageError):
            TrackerStore.from_slots(slots)


class TestPersistenceAdapter:
    def test_mutations_written_through(self, sql_slots):
        store = TrackerStore()
        PersistenceAdapter(sql_slots).attach(store)
        store.create(make_job())
        store.add_note("jobs", "j1", "Submitted")

        reloaded = TrackerStore.from_slots(sql_slots)
        assert reloaded.jobs == store.jobs
        assert [c.name for c in reloaded.companies] == ["Acme"]

    def test_batch_defers_writes(self):
        slots = MemorySlotStore()
        store = TrackerStore()
        adapter = PersistenceAdapter(slots).attach(store)

        with adapter.batch():
            store.create(make_job("j1"))
            store.create(make_job("j2"))
            assert slots.get("jobTracker-jobs") is None
            assert set(adapter.pending) == {"jobs", "companies"}

        assert len(json.loads(slots.get("jobTracker-jobs"))) == 2
        assert adapter.pending == ()

    def test_failure_is_reported_and_retried(self):
        slots = FailingSlots()
        errors = []
        store = TrackerStore()
        adapter = PersistenceAdapter(slots, on_error=errors.append).attach(store)

        store.create(make_job())
        assert len(store.jobs) == 1
        assert len(errors) == 2
        assert isinstance(adapter.last_error, OSError)
        assert set(adapter.pending) == {"jobs", "companies"}

        slots.fail = False
        assert adapter.flush() is True
        assert adapter.last_error is None
        assert TrackerStore.from_slots(slots).jobs == store.jobs

    def test_custom_prefix(self):
        slots = MemorySlotStore()
        store = TrackerStore()
        PersistenceAdapter(slots, key_prefix="test-").attach(store)
        store.create(make_job())
        assert slots.keys() == ["test-companies", "test-jobs"]
        assert TrackerStore.from_slots(slots, "test-").jobs == store.jobs
