"""
CleaningTask model and the deriver that produces tasks from bookings.

A task's identity is "{original_date}_{booking_id}".  The original date is
the checkout date seen when the task was first derived and never changes,
so deriving from the same booking twice always yields the same id and the
store upsert stays idempotent.
"""

import logging
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone

from cleaning_scheduler.domain.booking import Booking
from cleaning_scheduler.domain.errors import ValidationError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleaningTask:
    id: str
    original_date: str          # anchor: checkout date at creation, immutable
    current_date: str           # where the task is scheduled now
    booking_id: str
    guest_name: str
    cleaner_id: str | None = None
    cleaner_name: str | None = None
    relocated: bool = False
    updated_at: str = ""        # ISO 8601 UTC timestamp of the last write

    @property
    def is_assigned(self) -> bool:
        return self.cleaner_id is not None

    def to_fields(self) -> dict:
        return asdict(self)

    def with_fields(self, **fields) -> "CleaningTask":
        return replace(self, **fields)


# Fields a caller may change after creation.  id, original_date and
# booking_id are identity and never rewritten.
MUTABLE_FIELDS = frozenset(
    {"current_date", "guest_name", "cleaner_id", "cleaner_name", "relocated", "updated_at"}
)


def make_task_id(original_date: str, booking_id: str) -> str:
    return f"{original_date}_{booking_id}"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def derive_task(booking: Booking) -> CleaningTask | None:
    """Map a booking to its skeleton task, or None when no cleaning is due."""
    if booking.is_cancelled:
        return None
    if not booking.cleaning_required:
        return None
    if not booking.check_out:
        return None

    return CleaningTask(
        id=make_task_id(booking.check_out, booking.id),
        original_date=booking.check_out,
        current_date=booking.check_out,
        booking_id=booking.id,
        guest_name=booking.guest_name,
    )


def derive_tasks(bookings: list[Booking]) -> list[CleaningTask]:
    """Derive every qualifying task once; duplicate bookings collapse by id."""
    tasks: dict[str, CleaningTask] = {}
    for booking in bookings:
        task = derive_task(booking)
        if task is None:
            log.debug("booking=%s no cleaning task (status=%s)", booking.id, booking.status)
            continue
        tasks.setdefault(task.id, task)
    return list(tasks.values())


_IDENTITY_FIELDS = ("original_date", "current_date", "booking_id", "guest_name")


def task_from_fields(task_id: str, fields: dict) -> CleaningTask:
    """Build a new task from an upsert payload, checking the id matches its parts."""
    missing = [f for f in _IDENTITY_FIELDS if not fields.get(f)]
    if missing:
        raise ValidationError(f"cannot create task {task_id}: missing {', '.join(missing)}")
    expected_id = make_task_id(fields["original_date"], fields["booking_id"])
    if expected_id != task_id:
        raise ValidationError(f"task id {task_id} does not match its fields ({expected_id})")
    known = {k: v for k, v in fields.items() if k in CleaningTask.__dataclass_fields__ and k != "id"}
    return CleaningTask(id=task_id, **known)
