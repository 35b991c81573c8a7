#!/usr/bin/env python3
"""
Fair-distribution CLI — assign cleaners to a month's unassigned tasks.

Usage (from project root):
    python scripts/assign_month.py 2025-08            # assign and print outcomes
    python scripts/assign_month.py 2025-08 --notify   # also push each cleaner's schedule
    python scripts/assign_month.py show 2025-08       # list the month's tasks

Environment variables:
    DB_PATH                   - SQLite database path (default: data/cleaning.db)
    HOSTEX_API_TOKEN          - optional; when set, bookings are fetched so
                                missing task records can be recreated
    NOTIFICATION_CHANNEL      - "line" or "console" (default: console)
    LINE_CHANNEL_ACCESS_TOKEN - required when NOTIFICATION_CHANNEL=line
"""

import asyncio
import logging
import os
import sys

# Allow running as `python scripts/assign_month.py` from project root.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cleaning_scheduler.adapters.hostex_client import HostexClient
from cleaning_scheduler.adapters.sqlite_roster import SqliteCleanerRoster
from cleaning_scheduler.adapters.sqlite_task_store import SqliteTaskStore
from cleaning_scheduler.communication.factory import create_notifier
from cleaning_scheduler.domain.errors import SchedulingError
from cleaning_scheduler.domain.periods import month_bounds
from cleaning_scheduler.notifications import NotificationService
from cleaning_scheduler.scheduler import SchedulerConfig, SchedulingService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-7s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

DB_PATH = os.environ.get("DB_PATH", "data/cleaning.db")


def show_month(service: SchedulingService, month: str) -> None:
    listing = service.list_month(month)
    if listing.error:
        print(f"Task store unavailable: {listing.error}")
        return
    if not listing.tasks:
        print(f"No cleaning tasks in {month}.")
        return

    print(f"\n{'Date':<11}  {'Original':<11}  {'Cleaner':<16}  Guest")
    print("-" * 70)
    for t in listing.tasks:
        original = t.original_date if t.relocated else ""
        print(f"{t.current_date:<11}  {original:<11}  {t.cleaner_name or '—':<16}  {t.guest_name}")
    print()


def assign(service: SchedulingService, month: str) -> None:
    bookings = None
    api_token = os.environ.get("HOSTEX_API_TOKEN")
    if api_token:
        _, end = month_bounds(month)
        # Stays checking out this month may have checked in last month.
        bookings = HostexClient(api_token=api_token).fetch_bookings(check_in_to=end)

    report = service.auto_assign(month, bookings)
    for o in report.outcomes:
        who = o.cleaner_name or ""
        print(f"{o.date}  {o.status:<8}  {who:<16}  {o.task_id}  {o.reason}")
    print(f"\nassigned={report.assigned}  skipped={report.skipped}  failed={report.failed}")
    print("Load per cleaner:", ", ".join(f"{cid}={n}" for cid, n in sorted(report.loads.items())))


async def notify(store: SqliteTaskStore, roster: SqliteCleanerRoster, month: str) -> None:
    service = NotificationService(create_notifier(), store, roster)
    report = await service.send_monthly_schedules(month)
    print(f"Schedules sent={len(report.sent)}  failed={len(report.failed)}  skipped={len(report.skipped)}")
    for cleaner_id, reason in report.skipped.items():
        print(f"  skipped {cleaner_id}: {reason}")


def main() -> None:
    args = sys.argv[1:]
    if not args:
        print(__doc__)
        return

    os.makedirs(os.path.dirname(DB_PATH) or ".", exist_ok=True)
    store = SqliteTaskStore(DB_PATH)
    roster = SqliteCleanerRoster(DB_PATH)
    service = SchedulingService(SchedulerConfig(store=store, roster=roster))

    try:
        if args[0] == "show" and len(args) >= 2:
            show_month(service, args[1])
        elif len(args) >= 1 and args[0] != "show":
            assign(service, args[0])
            if "--notify" in args:
                asyncio.run(notify(store, roster, args[0]))
        else:
            print(__doc__)
    except SchedulingError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
