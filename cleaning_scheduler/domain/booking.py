"""
Booking model and the single adapter that turns feed payloads into it.

Bookings arrive in three shapes: the calendar's camelCase records, older
snake_case records, and raw reservations from the booking aggregator.
booking_from_payload() is the only place that knows about those shapes;
everything downstream works with the canonical Booking.
"""

from dataclasses import dataclass
from typing import Literal, TypedDict, Union

from cleaning_scheduler.domain.errors import ValidationError
from cleaning_scheduler.domain.periods import parse_date

BookingStatus = Literal["confirmed", "pending", "cancelled"]

UNKNOWN_GUEST = "Unknown Guest"

_STATUS_MAP: dict[str, BookingStatus] = {
    "confirmed": "confirmed",
    "accepted": "confirmed",
    "checked_in": "confirmed",
    "checked_out": "confirmed",
    "pending": "pending",
    "wait_accept": "pending",
    "wait_pay": "pending",
    "cancelled": "cancelled",
    "canceled": "cancelled",
    "denied": "cancelled",
    "declined": "cancelled",
}


@dataclass(frozen=True)
class Booking:
    """A guest stay. The guest occupies [check_in, check_out)."""

    id: str
    check_in: str              # ISO date
    check_out: str | None      # ISO date, exclusive; None when the feed omits it
    guest_name: str = UNKNOWN_GUEST
    cleaning_required: bool = True
    status: BookingStatus = "confirmed"

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"


class CamelBookingPayload(TypedDict, total=False):
    id: str
    checkIn: str
    checkOut: str
    guestName: str
    cleaningRequired: bool
    status: str


class SnakeBookingPayload(TypedDict, total=False):
    id: str
    check_in: str
    check_out: str
    guest_name: str
    cleaning_required: bool
    status: str


class AggregatorReservationPayload(TypedDict, total=False):
    reservation_code: str
    check_in_date: str
    check_out_date: str
    guest_name: str
    status: str


BookingPayload = Union[CamelBookingPayload, SnakeBookingPayload, AggregatorReservationPayload]


def booking_from_payload(payload: BookingPayload) -> Booking:
    """Normalize one feed record into a Booking, or raise ValidationError."""
    if "reservation_code" in payload or "check_in_date" in payload:
        raw_id = payload.get("reservation_code")
        check_in = payload.get("check_in_date")
        check_out = payload.get("check_out_date")
        guest = payload.get("guest_name")
        required = True
    elif "checkIn" in payload or "checkOut" in payload or "guestName" in payload:
        raw_id = payload.get("id")
        check_in = payload.get("checkIn")
        check_out = payload.get("checkOut")
        guest = payload.get("guestName")
        required = payload.get("cleaningRequired", True)
    else:
        raw_id = payload.get("id")
        check_in = payload.get("check_in")
        check_out = payload.get("check_out")
        guest = payload.get("guest_name")
        required = payload.get("cleaning_required", True)

    if raw_id is None or str(raw_id).strip() == "":
        raise ValidationError("booking is missing its id")
    booking_id = str(raw_id).strip()

    if not check_in:
        raise ValidationError(f"booking {booking_id} is missing its check-in date")
    check_in = _iso_date(check_in)
    check_out = _iso_date(check_out) if check_out else None

    if check_out is not None and check_in >= check_out:
        raise ValidationError(
            f"booking {booking_id} has check-in {check_in} not before check-out {check_out}"
        )

    raw_status = str(payload.get("status") or "confirmed").strip().lower()
    status = _STATUS_MAP.get(raw_status)
    if status is None:
        raise ValidationError(f"booking {booking_id} has unknown status {raw_status!r}")

    return Booking(
        id=booking_id,
        check_in=check_in,
        check_out=check_out,
        guest_name=(guest or "").strip() or UNKNOWN_GUEST,
        cleaning_required=_parse_flag(required, booking_id),
        status=status,
    )


_TRUE_WORDS = {"true", "yes", "1"}
_FALSE_WORDS = {"false", "no", "0"}


def _parse_flag(value, booking_id: str) -> bool:
    """cleaningRequired: absent means True; loosely typed feeds may send strings."""
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValidationError(f"booking {booking_id} has invalid cleaning flag {value!r}")


def _iso_date(value: str) -> str:
    # Feeds sometimes send full timestamps; the date part is what matters.
    return parse_date(str(value)[:10]).isoformat()


def dedupe_bookings(bookings: list[Booking]) -> list[Booking]:
    """Drop repeated ids, keeping the first occurrence in feed order."""
    seen: set[str] = set()
    unique = []
    for b in bookings:
        if b.id in seen:
            continue
        seen.add(b.id)
        unique.append(b)
    return unique


def active_bookings(bookings: list[Booking]) -> list[Booking]:
    """Bookings that still occupy the property (everything but cancelled)."""
    return [b for b in bookings if not b.is_cancelled]
