"""
Adapter contract for TaskStore.

Any implementation (in-memory, SQLite, ...) must pass these tests.
"""

from abc import ABC, abstractmethod

import pytest

from cleaning_scheduler.domain.errors import NotFoundError, ValidationError
from cleaning_scheduler.domain.task import CleaningTask, make_task_id
from cleaning_scheduler.domain.task_store import TaskStore


def _task(checkout: str = "2025-08-10", booking_id: str = "B1", **fields) -> CleaningTask:
    return CleaningTask(
        id=make_task_id(checkout, booking_id),
        original_date=checkout,
        current_date=fields.pop("current_date", checkout),
        booking_id=booking_id,
        guest_name=fields.pop("guest_name", "Alice"),
        **fields,
    )


class TaskStoreContract(ABC):

    @abstractmethod
    def create_store(self) -> TaskStore:
        """Return a fresh, empty store."""
        ...

    # -- get / insert ----------------------------------------------------------

    def test_unknown_returns_none(self):
        store = self.create_store()
        assert store.get("2025-01-01_nope") is None

    def test_insert_and_get(self):
        store = self.create_store()
        task = _task(cleaner_id="c1", cleaner_name="Ana", updated_at="2025-08-01T00:00:00+00:00")
        assert store.insert(task) is True
        assert store.get(task.id) == task

    def test_insert_existing_returns_false_and_keeps_record(self):
        store = self.create_store()
        store.insert(_task(cleaner_id="c1", cleaner_name="Ana"))
        assert store.insert(_task()) is False
        assert store.get("2025-08-10_B1").cleaner_id == "c1"

    def test_relocated_flag_round_trips_as_bool(self):
        store = self.create_store()
        store.insert(_task(current_date="2025-08-12", relocated=True))
        assert store.get("2025-08-10_B1").relocated is True

    # -- update ----------------------------------------------------------------

    def test_update_merges_only_given_fields(self):
        store = self.create_store()
        store.insert(_task(guest_name="Alice"))
        store.update("2025-08-10_B1", {"cleaner_id": "c2", "cleaner_name": "Bo"})
        task = store.get("2025-08-10_B1")
        assert task.cleaner_id == "c2"
        assert task.cleaner_name == "Bo"
        assert task.guest_name == "Alice"
        assert task.current_date == "2025-08-10"

    def test_update_can_clear_assignment(self):
        store = self.create_store()
        store.insert(_task(cleaner_id="c1", cleaner_name="Ana"))
        store.update("2025-08-10_B1", {"cleaner_id": None, "cleaner_name": None})
        assert store.get("2025-08-10_B1").cleaner_id is None

    def test_update_missing_raises_not_found(self):
        store = self.create_store()
        with pytest.raises(NotFoundError):
            store.update("2025-08-10_B1", {"cleaner_id": "c1"})

    def test_update_identity_field_rejected(self):
        store = self.create_store()
        store.insert(_task())
        with pytest.raises(ValidationError):
            store.update("2025-08-10_B1", {"original_date": "2025-08-11"})

    # -- upsert ----------------------------------------------------------------

    def test_upsert_creates_when_absent(self):
        store = self.create_store()
        store.upsert("2025-08-10_B1", _task().to_fields())
        assert store.get("2025-08-10_B1") == _task()

    def test_upsert_merges_when_present(self):
        store = self.create_store()
        store.insert(_task(cleaner_id="c1", cleaner_name="Ana"))
        store.upsert("2025-08-10_B1", {"current_date": "2025-08-11", "relocated": True})
        task = store.get("2025-08-10_B1")
        assert task.current_date == "2025-08-11"
        assert task.cleaner_id == "c1"

    def test_upsert_create_without_identity_rejected(self):
        store = self.create_store()
        with pytest.raises(ValidationError):
            store.upsert("2025-08-10_B1", {"cleaner_id": "c1"})

    def test_upsert_without_merge_rejected(self):
        store = self.create_store()
        with pytest.raises(ValueError):
            store.upsert("2025-08-10_B1", _task().to_fields(), merge=False)

    # -- queries ---------------------------------------------------------------

    def test_query_by_booking(self):
        store = self.create_store()
        store.insert(_task("2025-08-10", "B1"))
        store.insert(_task("2025-08-14", "B1"))
        store.insert(_task("2025-08-12", "B2"))
        ids = [t.id for t in store.query("booking_id", "==", "B1")]
        assert ids == ["2025-08-10_B1", "2025-08-14_B1"]

    def test_query_date_bounds_inclusive(self):
        store = self.create_store()
        for day in ("2025-08-09", "2025-08-10", "2025-08-11"):
            store.insert(_task(day, f"B{day[-2:]}"))
        assert len(store.query("current_date", ">=", "2025-08-10")) == 2
        assert len(store.query("current_date", "<=", "2025-08-10")) == 2

    def test_query_unsupported_field_rejected(self):
        store = self.create_store()
        with pytest.raises(ValidationError):
            store.query("guest_name", "==", "Alice")

    def test_list_range_uses_current_date_and_orders(self):
        store = self.create_store()
        store.insert(_task("2025-07-31", "B0"))
        store.insert(_task("2025-08-20", "B2"))
        store.insert(_task("2025-08-05", "B1"))
        store.insert(_task("2025-07-30", "B3", current_date="2025-08-01", relocated=True))
        store.insert(_task("2025-09-01", "B4"))
        ids = [t.id for t in store.list_range("2025-08-01", "2025-08-31")]
        assert ids == ["2025-07-30_B3", "2025-08-05_B1", "2025-08-20_B2"]

    def test_tasks_for_bookings(self):
        store = self.create_store()
        store.insert(_task("2025-08-14", "B1"))
        store.insert(_task("2025-08-10", "B1"))
        store.insert(_task("2025-08-12", "B2"))
        store.insert(_task("2025-08-11", "B3"))
        ids = [t.id for t in store.tasks_for_bookings(["B1", "B3", "B9"])]
        assert ids == ["2025-08-10_B1", "2025-08-11_B3", "2025-08-14_B1"]

    def test_tasks_for_bookings_empty(self):
        store = self.create_store()
        assert store.tasks_for_bookings([]) == []

    def test_tasks_for_bookings_over_limit_rejected(self):
        store = self.create_store()
        with pytest.raises(ValueError):
            store.tasks_for_bookings([f"B{i}" for i in range(store.max_batch_size + 1)])

    # -- batch_exists ----------------------------------------------------------

    def test_batch_exists_returns_subset(self):
        store = self.create_store()
        store.insert(_task("2025-08-10", "B1"))
        found = store.batch_exists(["2025-08-10_B1", "2025-08-11_B9"])
        assert found == {"2025-08-10_B1"}

    def test_batch_exists_empty(self):
        store = self.create_store()
        assert store.batch_exists([]) == set()

    def test_batch_exists_over_limit_rejected(self):
        store = self.create_store()
        ids = [f"2025-08-10_B{i}" for i in range(store.max_batch_size + 1)]
        with pytest.raises(ValueError):
            store.batch_exists(ids)

    def test_batch_exists_at_limit_accepted(self):
        store = self.create_store()
        ids = [f"2025-08-10_B{i}" for i in range(store.max_batch_size)]
        assert store.batch_exists(ids) == set()

    # -- delete ----------------------------------------------------------------

    def test_delete(self):
        store = self.create_store()
        store.insert(_task())
        store.delete("2025-08-10_B1")
        assert store.get("2025-08-10_B1") is None

    def test_delete_missing_raises_not_found(self):
        store = self.create_store()
        with pytest.raises(NotFoundError):
            store.delete("2025-08-10_B1")
