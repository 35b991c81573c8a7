"""
Scheduling service: the operations an operator triggers from the calendar.

Wires the TaskStore and CleanerRoster ports to the domain rules:

  sync            bookings → missing task records (additive, idempotent)
  list_calendar   fail-soft read of the tasks in a date range
  relocate        move a task to a date the relocation validator allows
  assign/unassign set or clear a task's cleaner
  auto_assign     fair distribution over a month's unassigned tasks

Each call runs to completion on its own; the store is the only shared
state and concurrent writers are last-writer-wins.
"""

import logging
from dataclasses import dataclass, field

from cleaning_scheduler.domain.booking import Booking
from cleaning_scheduler.domain.errors import NotFoundError, StoreError, ValidationError
from cleaning_scheduler.domain.fair_distribution import DistributionReport, distribute_fairly
from cleaning_scheduler.domain.periods import month_bounds, parse_date
from cleaning_scheduler.domain.reconciliation import ReconciliationSyncer, SyncReport
from cleaning_scheduler.domain.relocation import (
    DEFAULT_HORIZON_DAYS,
    RelocationWindow,
    check_relocation,
    compute_relocation_window,
)
from cleaning_scheduler.domain.roster import Cleaner, CleanerRoster
from cleaning_scheduler.domain.task import CleaningTask, derive_task, utc_now
from cleaning_scheduler.domain.task_store import TaskStore
from cleaning_scheduler.throttle import FetchThrottle

log = logging.getLogger(__name__)

# Distinct calendar ranges kept for throttled reads; the oldest is dropped first.
MAX_CACHED_LISTINGS = 32


@dataclass
class SchedulerConfig:
    store: TaskStore
    roster: CleanerRoster
    throttle: FetchThrottle | None = None
    horizon_days: int = DEFAULT_HORIZON_DAYS
    sync_batch_size: int = 500


@dataclass
class CalendarListing:
    """Tasks for a range. On a degraded store read: no tasks, error set."""

    tasks: list[CleaningTask] = field(default_factory=list)
    error: str | None = None
    cached: bool = False


class SchedulingService:

    def __init__(self, config: SchedulerConfig):
        self._cfg = config
        self._syncer = ReconciliationSyncer(config.store, batch_size=config.sync_batch_size)
        self._listings: dict[tuple[str, str], CalendarListing] = {}

    # -- reconciliation --------------------------------------------------------

    def sync(self, bookings: list[Booking]) -> SyncReport:
        report = self._syncer.sync(bookings)
        if report.created:
            self._invalidate()
        return report

    # -- reads -----------------------------------------------------------------

    def list_calendar(self, start: str, end: str) -> CalendarListing:
        """
        Tasks scheduled within [start, end].

        This read is fail-soft: a StoreError yields an empty listing with
        the error text so the calendar stays usable.  Within the throttle
        interval the previous listing for the same range is reused.
        """
        key = (start, end)
        throttle = self._cfg.throttle
        if throttle is not None and not throttle.allow(key) and key in self._listings:
            previous = self._listings[key]
            return CalendarListing(tasks=list(previous.tasks), cached=True)

        try:
            tasks = self._cfg.store.list_range(start, end)
        except StoreError as exc:
            log.error("calendar %s..%s read failed: %s", start, end, exc)
            if throttle is not None:
                throttle.reset(key)
            return CalendarListing(tasks=[], error=str(exc))

        listing = CalendarListing(tasks=tasks)
        self._remember(key, listing)
        return listing

    def _remember(self, key: tuple[str, str], listing: CalendarListing) -> None:
        self._listings.pop(key, None)
        self._listings[key] = listing
        while len(self._listings) > MAX_CACHED_LISTINGS:
            oldest = next(iter(self._listings))
            del self._listings[oldest]
            if self._cfg.throttle is not None:
                self._cfg.throttle.reset(oldest)

    def list_month(self, month: str) -> CalendarListing:
        start, end = month_bounds(month)
        return self.list_calendar(start, end)

    def get_task(self, task_id: str) -> CleaningTask:
        task = self._cfg.store.get(task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        return task

    # -- relocation ------------------------------------------------------------

    def relocation_window(self, task_id: str, bookings: list[Booking]) -> RelocationWindow:
        task, missing = self._task_or_skeleton(task_id, bookings)
        if missing:
            self._recreate(task)
            self._invalidate()
        return compute_relocation_window(task, bookings, self._cfg.horizon_days)

    def relocate(self, task_id: str, target_date: str, bookings: list[Booking]) -> CleaningTask:
        """
        Move a task; ValidationError when *target_date* is not legal.

        A missing task record whose booking is in *bookings* is recreated
        (once the target has been validated) before the move is written.
        """
        task, missing = self._task_or_skeleton(task_id, bookings)
        check_relocation(task, target_date, bookings, self._cfg.horizon_days)
        target = parse_date(target_date).isoformat()
        if missing:
            self._recreate(task)

        fields = {
            "current_date": target,
            "relocated": target != task.original_date,
            "updated_at": utc_now(),
        }
        self._cfg.store.update(task_id, fields)
        self._invalidate()
        log.info("task=%s relocated %s → %s", task_id, task.current_date, target)
        return task.with_fields(**fields)

    # -- assignment ------------------------------------------------------------

    def assign_cleaner(
        self,
        task_id: str,
        cleaner_id: str,
        bookings: list[Booking] | None = None,
    ) -> CleaningTask:
        """
        Put *cleaner_id* on the task.

        When the task record is missing and *bookings* holds its booking,
        the record is created from the booking and the write retried once.
        """
        cleaner = self._cfg.roster.get_cleaner(cleaner_id)
        if cleaner is None:
            raise NotFoundError("cleaner", cleaner_id)
        if not cleaner.is_active:
            raise ValidationError(f"cleaner {cleaner_id} is not active")

        self._write_assignment(task_id, cleaner, bookings)
        self._invalidate()
        log.info("task=%s assigned → %s", task_id, cleaner.name)
        return self.get_task(task_id)

    def unassign_cleaner(self, task_id: str) -> CleaningTask:
        self._cfg.store.update(
            task_id, {"cleaner_id": None, "cleaner_name": None, "updated_at": utc_now()}
        )
        self._invalidate()
        log.info("task=%s unassigned", task_id)
        return self.get_task(task_id)

    def auto_assign(self, month: str, bookings: list[Booking] | None = None) -> DistributionReport:
        """Fair distribution over the month's unassigned tasks."""
        start, end = month_bounds(month)
        tasks = self._cfg.store.list_range(start, end)
        cleaners = self._cfg.roster.list_cleaners(active_only=True)
        available = {c.id: self._cfg.roster.get_available_dates(c.id, month) for c in cleaners}

        report = distribute_fairly(
            tasks,
            cleaners,
            available,
            persist=lambda task, cleaner: self._write_assignment(task.id, cleaner, bookings),
        )
        if report.assigned:
            self._invalidate()
        log.info(
            "auto-assign %s: assigned=%d skipped=%d failed=%d",
            month, report.assigned, report.skipped, report.failed,
        )
        return report

    def _write_assignment(
        self,
        task_id: str,
        cleaner: Cleaner,
        bookings: list[Booking] | None,
    ) -> None:
        fields = {"cleaner_id": cleaner.id, "cleaner_name": cleaner.name, "updated_at": utc_now()}
        try:
            self._cfg.store.update(task_id, fields)
            return
        except NotFoundError:
            skeleton = self._skeleton_for(task_id, bookings)
            if skeleton is None:
                raise

        self._recreate(skeleton)
        self._cfg.store.update(task_id, fields)

    def _task_or_skeleton(
        self,
        task_id: str,
        bookings: list[Booking] | None,
    ) -> tuple[CleaningTask, bool]:
        """The stored task, or its skeleton from *bookings* flagged as missing."""
        task = self._cfg.store.get(task_id)
        if task is not None:
            return task, False
        skeleton = self._skeleton_for(task_id, bookings)
        if skeleton is None:
            raise NotFoundError("task", task_id)
        return skeleton, True

    def _recreate(self, skeleton: CleaningTask) -> None:
        log.warning("task=%s missing, recreating from booking=%s", skeleton.id, skeleton.booking_id)
        # False means another writer created it meanwhile; the caller's
        # partial write applies on top either way.
        self._cfg.store.insert(skeleton.with_fields(updated_at=utc_now()))

    @staticmethod
    def _skeleton_for(task_id: str, bookings: list[Booking] | None) -> CleaningTask | None:
        for booking in bookings or []:
            task = derive_task(booking)
            if task is not None and task.id == task_id:
                return task
        return None

    # -- administration --------------------------------------------------------

    def delete_task(self, task_id: str) -> None:
        """Explicit operator deletion; the core never deletes on its own."""
        self._cfg.store.delete(task_id)
        self._invalidate()
        log.info("task=%s deleted by operator", task_id)

    def _invalidate(self) -> None:
        self._listings.clear()
        if self._cfg.throttle is not None:
            self._cfg.throttle.reset(all_keys=True)
