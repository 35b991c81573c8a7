#!/usr/bin/env python3
"""
Availability-link CLI — issue, send and redeem monthly availability links.

Usage (from project root):
    python scripts/availability_links.py issue 2025-09            # print a link per active cleaner
    python scripts/availability_links.py send 2025-09             # push each link to its cleaner
    python scripts/availability_links.py submit TOKEN 2025-09-01 2025-09-02 ...

Environment variables:
    AVAILABILITY_LINK_SECRET   - HMAC secret for link tokens (required)
    AVAILABILITY_LINK_TTL_DAYS - link lifetime in days (default: 45)
    FRONTEND_BASE_URL          - calendar front-end URL (default: https://localhost)
    DB_PATH                    - SQLite database path (default: data/cleaning.db)
    NOTIFICATION_CHANNEL       - "line" or "console" (default: console)
"""

import asyncio
import logging
import os
import sys
from datetime import timedelta

# Allow running as `python scripts/availability_links.py` from project root.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cleaning_scheduler.adapters.sqlite_roster import SqliteCleanerRoster
from cleaning_scheduler.adapters.sqlite_task_store import SqliteTaskStore
from cleaning_scheduler.communication.factory import create_notifier
from cleaning_scheduler.domain.availability_links import (
    AvailabilityLinkSigner,
    build_link,
    submit_availability,
)
from cleaning_scheduler.domain.errors import SchedulingError
from cleaning_scheduler.notifications import NotificationService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-7s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

DB_PATH = os.environ.get("DB_PATH", "data/cleaning.db")


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        print(f"ERROR: environment variable {name!r} is not set.", file=sys.stderr)
        sys.exit(1)
    return value


def _links(signer: AvailabilityLinkSigner, roster: SqliteCleanerRoster, month: str) -> list[tuple[str, str]]:
    base_url = os.environ.get("FRONTEND_BASE_URL", "https://localhost")
    return [
        (c.id, build_link(base_url, signer.issue(c.id, month)))
        for c in roster.list_cleaners(active_only=True)
    ]


async def send_links(signer: AvailabilityLinkSigner, roster: SqliteCleanerRoster, month: str) -> None:
    service = NotificationService(create_notifier(), SqliteTaskStore(DB_PATH), roster)
    sent = failed = 0
    for cleaner_id, link in _links(signer, roster, month):
        try:
            ok = await service.send_availability_link(cleaner_id, month, link)
        except SchedulingError as exc:
            print(f"  {cleaner_id}: {exc}")
            failed += 1
            continue
        if ok:
            sent += 1
        else:
            failed += 1
    print(f"Links sent={sent}  failed={failed}")


def main() -> None:
    args = sys.argv[1:]
    if len(args) < 2:
        print(__doc__)
        return

    signer = AvailabilityLinkSigner(
        _require_env("AVAILABILITY_LINK_SECRET"),
        ttl=timedelta(days=int(os.environ.get("AVAILABILITY_LINK_TTL_DAYS", "45"))),
    )
    roster = SqliteCleanerRoster(DB_PATH)
    cmd = args[0]

    try:
        if cmd == "issue":
            for cleaner_id, link in _links(signer, roster, args[1]):
                print(f"{cleaner_id:<16}  {link}")
        elif cmd == "send":
            asyncio.run(send_links(signer, roster, args[1]))
        elif cmd == "submit":
            grant = submit_availability(signer, roster, args[1], args[2:])
            print(f"Saved {len(args) - 2} day(s) for {grant.cleaner_id} in {grant.month}.")
        else:
            print(__doc__)
    except SchedulingError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
