"""
Relocation validator: which dates may a cleaning task be moved to?

The window is always computed from the task's anchor (its original
checkout date), never from where it currently sits.  That keeps the set of
destinations identical no matter how often the task has been dragged
around, and the anchor itself is always a legal target so every move can
be undone.

Rules, for anchor A and the active booking list:
  - next booking = earliest other booking with check_in >= A
  - window = (A, next.check_in]   or   (A, A + horizon] when there is none
  - a date is occupied when it lies strictly inside another booking's stay
    (check_in < d < check_out); check-in and check-out days stay legal
  - legal = unoccupied window dates + A
"""

from dataclasses import dataclass
from datetime import date, timedelta

from cleaning_scheduler.domain.booking import Booking, active_bookings
from cleaning_scheduler.domain.errors import ValidationError
from cleaning_scheduler.domain.periods import date_range, parse_date
from cleaning_scheduler.domain.task import CleaningTask

DEFAULT_HORIZON_DAYS = 30


@dataclass(frozen=True)
class RelocationWindow:
    task_id: str
    anchor: str
    legal_dates: frozenset[str]
    next_check_in: str | None = None   # check-in that closes the window, if any

    @property
    def draggable(self) -> bool:
        """False when the anchor is the only legal date (task fixed in place)."""
        return any(d != self.anchor for d in self.legal_dates)

    def allows(self, day: str) -> bool:
        return day in self.legal_dates

    def sorted_dates(self) -> list[str]:
        return sorted(self.legal_dates)


def compute_relocation_window(
    task: CleaningTask,
    bookings: list[Booking],
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> RelocationWindow:
    """Legal target dates for *task* given every booking on the calendar."""
    if horizon_days < 1:
        raise ValidationError(f"relocation horizon must be at least 1 day, got {horizon_days}")

    anchor = parse_date(task.original_date)
    others = [
        (b, parse_date(b.check_in), parse_date(b.check_out) if b.check_out else None)
        for b in active_bookings(bookings)
        if b.id != task.booking_id
    ]

    upcoming = [(check_in, b) for b, check_in, _ in others if check_in >= anchor]
    next_check_in: date | None = min(upcoming, key=lambda item: item[0])[0] if upcoming else None

    window_end = next_check_in if next_check_in is not None else anchor + timedelta(days=horizon_days)
    candidates = date_range(anchor + timedelta(days=1), window_end)

    legal = {d.isoformat() for d in candidates if not _occupied(d, others)}
    legal.add(anchor.isoformat())

    return RelocationWindow(
        task_id=task.id,
        anchor=anchor.isoformat(),
        legal_dates=frozenset(legal),
        next_check_in=next_check_in.isoformat() if next_check_in else None,
    )


def _occupied(day: date, others: list[tuple[Booking, date, date | None]]) -> bool:
    for _, check_in, check_out in others:
        if check_out is None:
            # Open-ended stay: everything after arrival is taken.
            if day > check_in:
                return True
        elif check_in < day < check_out:
            return True
    return False


def check_relocation(
    task: CleaningTask,
    target: str,
    bookings: list[Booking],
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> RelocationWindow:
    """Raise ValidationError unless *target* is a legal date for *task*."""
    target_day = parse_date(target).isoformat()
    window = compute_relocation_window(task, bookings, horizon_days)
    if not window.allows(target_day):
        if not window.draggable:
            raise ValidationError(f"task {task.id} cannot be relocated (no free date before the next check-in)")
        raise ValidationError(
            f"{target_day} is not a legal date for task {task.id}"
            f" (window {window.anchor}..{max(window.legal_dates)})"
        )
    return window
