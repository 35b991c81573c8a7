"""
Core sync logic for the scheduling daemon.

Extracted from scripts/run.py so it can be imported and tested
without network access or credentials.
"""

import logging
from datetime import date, timedelta

from cleaning_scheduler.adapters.ports import BookingGateway
from cleaning_scheduler.domain.reconciliation import SyncReport
from cleaning_scheduler.scheduler import SchedulingService

log = logging.getLogger(__name__)


def sync_once(
    service: SchedulingService,
    gateway: BookingGateway,
    today: date | None = None,
    lookback_days: int = 30,
    lookahead_days: int = 180,
) -> SyncReport | None:
    """
    One sync cycle.

    1. Fetch bookings checking in within [today - lookback, today + lookahead].
    2. Reconcile the task store against them.

    A failed fetch is logged and returns None; the next cycle tries again.
    Store errors from the reconciliation itself propagate.
    """
    today = today or date.today()
    check_in_from = (today - timedelta(days=lookback_days)).isoformat()
    check_in_to = (today + timedelta(days=lookahead_days)).isoformat()

    log.info("Fetching bookings %s → %s", check_in_from, check_in_to)
    try:
        bookings = gateway.fetch_bookings(check_in_from=check_in_from, check_in_to=check_in_to)
    except Exception as exc:
        log.error("Failed to fetch bookings: %s", exc)
        return None

    log.info("Found %d booking(s)", len(bookings))
    report = service.sync(bookings)

    for d in report.discrepancies:
        log.warning("discrepancy %s task=%s booking=%s: %s", d.kind, d.task_id, d.booking_id, d.details)
    for task_id, error in report.failed.items():
        log.error("task=%s not created: %s", task_id, error)

    return report
