"""Month and date-range helpers. Dates travel as ISO strings (YYYY-MM-DD)."""

import calendar
import re
from datetime import date, timedelta

from cleaning_scheduler.domain.errors import ValidationError

_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")


def parse_date(value: str) -> date:
    """Parse an ISO date, raising ValidationError instead of ValueError."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"invalid date {value!r}, expected YYYY-MM-DD") from None


def month_of(day: str) -> str:
    """'2025-08-10' -> '2025-08'"""
    return parse_date(day).isoformat()[:7]


def month_bounds(month: str) -> tuple[str, str]:
    """Return the first and last ISO dates of a YYYY-MM month."""
    if not _MONTH_RE.match(month or ""):
        raise ValidationError(f"invalid month {month!r}, expected YYYY-MM")
    year, mon = int(month[:4]), int(month[5:])
    if not 1 <= mon <= 12:
        raise ValidationError(f"invalid month {month!r}, expected YYYY-MM")
    last = calendar.monthrange(year, mon)[1]
    return f"{month}-01", f"{month}-{last:02d}"


def date_range(start: date, end: date) -> list[date]:
    """Inclusive range of days; empty when end < start."""
    days = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days
