"""
In-memory TaskStore for testing — no database required.
"""

import operator

from cleaning_scheduler.domain.errors import NotFoundError, StoreError, ValidationError
from cleaning_scheduler.domain.task import MUTABLE_FIELDS, CleaningTask, task_from_fields
from cleaning_scheduler.domain.task_store import TaskStore

_OPS = {"==": operator.eq, ">=": operator.ge, "<=": operator.le}
_QUERY_FIELDS = {"booking_id", "cleaner_id", "current_date", "original_date"}


class InMemoryTaskStore(TaskStore):
    """
    Test helpers:
        fail_writes_for()  — make every write to the given task ids raise StoreError
        clear_failures()   — undo fail_writes_for() and fail_reads
        fail_reads         — when True, every read raises StoreError
        batch_calls        — sizes of the id lists passed to batch_exists()
        lookup_calls       — sizes of the id lists passed to tasks_for_bookings()
        write_count        — number of successful writes
    """

    def __init__(self):
        self._tasks: dict[str, CleaningTask] = {}
        self._failing_ids: set[str] = set()
        self.fail_reads = False
        self.batch_calls: list[int] = []
        self.lookup_calls: list[int] = []
        self.write_count = 0

    def fail_writes_for(self, *task_ids: str) -> None:
        self._failing_ids.update(task_ids)

    def clear_failures(self) -> None:
        self._failing_ids.clear()
        self.fail_reads = False

    def _check_read(self) -> None:
        if self.fail_reads:
            raise StoreError("simulated store read timeout")

    def _check_write(self, task_id: str) -> None:
        if task_id in self._failing_ids:
            raise StoreError(f"simulated store write failure for {task_id}")

    def get(self, task_id: str) -> CleaningTask | None:
        self._check_read()
        return self._tasks.get(task_id)

    def query(self, field: str, op: str, value: str) -> list[CleaningTask]:
        self._check_read()
        if field not in _QUERY_FIELDS:
            raise ValidationError(f"unsupported query: {field} {op}")
        compare = _OPS.get(op)
        if compare is None:
            raise ValidationError(f"unsupported query: {field} {op}")
        found = [
            t for t in self._tasks.values()
            if getattr(t, field) is not None and compare(getattr(t, field), value)
        ]
        return sorted(found, key=lambda t: (t.current_date, t.id))

    def list_range(self, start: str, end: str) -> list[CleaningTask]:
        self._check_read()
        found = [t for t in self._tasks.values() if start <= t.current_date <= end]
        return sorted(found, key=lambda t: (t.current_date, t.id))

    def batch_exists(self, task_ids: list[str]) -> set[str]:
        self._check_read()
        if len(task_ids) > self.max_batch_size:
            raise ValueError(f"batch of {len(task_ids)} ids exceeds limit {self.max_batch_size}")
        self.batch_calls.append(len(task_ids))
        return {i for i in task_ids if i in self._tasks}

    def tasks_for_bookings(self, booking_ids: list[str]) -> list[CleaningTask]:
        self._check_read()
        if len(booking_ids) > self.max_batch_size:
            raise ValueError(f"batch of {len(booking_ids)} ids exceeds limit {self.max_batch_size}")
        self.lookup_calls.append(len(booking_ids))
        wanted = set(booking_ids)
        found = [t for t in self._tasks.values() if t.booking_id in wanted]
        return sorted(found, key=lambda t: (t.current_date, t.id))

    def insert(self, task: CleaningTask) -> bool:
        self._check_write(task.id)
        if task.id in self._tasks:
            return False
        self._tasks[task.id] = task
        self.write_count += 1
        return True

    def upsert(self, task_id: str, fields: dict, merge: bool = True) -> None:
        if not merge:
            raise ValueError("task store only supports merge writes")
        self._check_write(task_id)
        if task_id not in self._tasks:
            self.insert(task_from_fields(task_id, fields))
            return
        self.update(task_id, {k: v for k, v in fields.items() if k in MUTABLE_FIELDS})

    def update(self, task_id: str, fields: dict) -> None:
        self._check_write(task_id)
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValidationError(f"fields cannot be updated: {', '.join(sorted(unknown))}")
        current = self._tasks.get(task_id)
        if current is None:
            raise NotFoundError("task", task_id)
        self._tasks[task_id] = current.with_fields(**fields)
        self.write_count += 1

    def delete(self, task_id: str) -> None:
        self._check_write(task_id)
        if self._tasks.pop(task_id, None) is None:
            raise NotFoundError("task", task_id)

    def all_tasks(self) -> list[CleaningTask]:
        """Test helper: snapshot of every stored task, ordered by id."""
        return [self._tasks[k] for k in sorted(self._tasks)]
