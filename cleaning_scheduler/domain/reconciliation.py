"""
Reconciliation: make sure every qualifying booking has a task record.

Strictly additive.  Missing tasks are inserted as skeletons, existing ones
are left exactly as they are (assignments and relocations survive), and
nothing is ever deleted.  Running it twice over the same bookings leaves
the store in the same state as running it once.

Tasks whose booking has since been cancelled, or whose booking's checkout
moved, are reported as discrepancies for an operator to resolve.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Literal

from cleaning_scheduler.domain.booking import Booking, dedupe_bookings
from cleaning_scheduler.domain.errors import StoreError
from cleaning_scheduler.domain.task import CleaningTask, derive_task, utc_now
from cleaning_scheduler.domain.task_store import TaskStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Discrepancy:
    kind: Literal["booking_cancelled", "checkout_changed"]
    task_id: str
    booking_id: str
    details: str = ""


@dataclass
class SyncReport:
    created: list[str] = field(default_factory=list)
    already_present: list[str] = field(default_factory=list)
    not_required: list[str] = field(default_factory=list)   # booking ids with no task due
    failed: dict[str, str] = field(default_factory=dict)    # task id -> error
    discrepancies: list[Discrepancy] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"created={len(self.created)} present={len(self.already_present)}"
            f" not_required={len(self.not_required)} failed={len(self.failed)}"
            f" discrepancies={len(self.discrepancies)}"
        )


def chunked(items: list[str], size: int) -> list[list[str]]:
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    return [items[i:i + size] for i in range(0, len(items), size)]


class ReconciliationSyncer:

    def __init__(self, store: TaskStore, batch_size: int = 500):
        self._store = store
        # Never exceed what the store accepts in one call.
        self._batch_size = min(batch_size, store.max_batch_size)

    def sync(self, bookings: list[Booking]) -> SyncReport:
        """
        Insert the tasks missing for *bookings*.

        StoreError from the existence check propagates (nothing has been
        written yet).  Insert failures are per task: the ones that succeeded
        stay created and the caller can simply run sync again.
        """
        report = SyncReport()
        bookings = dedupe_bookings(bookings)

        expected: dict[str, CleaningTask] = {}
        for booking in bookings:
            task = derive_task(booking)
            if task is None:
                report.not_required.append(booking.id)
                continue
            expected.setdefault(task.id, task)

        existing: set[str] = set()
        for chunk in chunked(list(expected), self._batch_size):
            existing |= self._store.batch_exists(chunk)

        created_tasks: list[CleaningTask] = []
        for task_id, task in expected.items():
            if task_id in existing:
                report.already_present.append(task_id)
                continue
            try:
                created = self._store.insert(task.with_fields(updated_at=utc_now()))
            except StoreError as exc:
                log.error("task=%s insert failed: %s", task_id, exc)
                report.failed[task_id] = str(exc)
                continue
            if created:
                log.info("task=%s created for booking=%s", task_id, task.booking_id)
                report.created.append(task_id)
                created_tasks.append(task)
            else:
                # Someone else created it between the check and the write.
                report.already_present.append(task_id)

        cancelled_ids = [b.id for b in bookings if b.is_cancelled]
        report.discrepancies.extend(self._discrepancies(created_tasks, cancelled_ids))

        log.info("sync done: %s", report.summary())
        return report

    # Discrepancy lookups are reporting only; a failed read is logged and the
    # sync result stands.

    def _discrepancies(
        self,
        created_tasks: list[CleaningTask],
        cancelled_ids: list[str],
    ) -> list[Discrepancy]:
        booking_ids = list(dict.fromkeys([t.booking_id for t in created_tasks] + cancelled_ids))
        if not booking_ids:
            return []

        by_booking: dict[str, list[CleaningTask]] = defaultdict(list)
        try:
            for chunk in chunked(booking_ids, self._batch_size):
                for stored in self._store.tasks_for_bookings(chunk):
                    by_booking[stored.booking_id].append(stored)
        except StoreError as exc:
            log.error("discrepancy lookup for %d booking(s) failed: %s", len(booking_ids), exc)
            return []

        found = []
        for task in created_tasks:
            for stale in by_booking.get(task.booking_id, []):
                if stale.id == task.id:
                    continue
                found.append(Discrepancy(
                    kind="checkout_changed",
                    task_id=stale.id,
                    booking_id=task.booking_id,
                    details=f"checkout moved from {stale.original_date} to {task.original_date}",
                ))

        for booking_id in cancelled_ids:
            for leftover in by_booking.get(booking_id, []):
                log.warning("task=%s booking=%s cancelled but task kept", leftover.id, booking_id)
                found.append(Discrepancy(
                    kind="booking_cancelled",
                    task_id=leftover.id,
                    booking_id=booking_id,
                    details="booking cancelled after the task was created",
                ))

        return found
