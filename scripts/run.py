"""
Local process runner for the cleaning scheduler.

Fetches bookings from the booking aggregator every SYNC_INTERVAL seconds
and makes sure each checkout has a cleaning task in the task store.
Existing tasks (assignments, relocations) are never touched.

Usage:
    source .env && python scripts/run.py

Environment variables (all required unless noted):
    HOSTEX_API_TOKEN        - booking aggregator API token
    HOSTEX_BASE_URL         - aggregator base URL (default: https://api.hostex.io/v3)
    DB_PATH                 - SQLite database path (default: data/cleaning.db)
    SYNC_INTERVAL           - seconds between syncs (default: 300)
    SYNC_LOOKBACK_DAYS      - check-ins this many days back are included (default: 30)
    SYNC_LOOKAHEAD_DAYS     - check-ins this many days ahead are included (default: 180)
    RELOCATION_HORIZON_DAYS - relocation window without a next booking (default: 30)
    CALENDAR_THROTTLE_SECONDS - minimum seconds between identical calendar reads (default: 5)
"""

import logging
import os
import sys
import time

# Make sure project root is on sys.path when run as a script
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cleaning_scheduler.adapters.hostex_client import BASE_URL, HostexClient
from cleaning_scheduler.adapters.sqlite_roster import SqliteCleanerRoster
from cleaning_scheduler.adapters.sqlite_task_store import SqliteTaskStore
from cleaning_scheduler.daemon import sync_once
from cleaning_scheduler.scheduler import SchedulerConfig, SchedulingService
from cleaning_scheduler.throttle import FetchThrottle

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-7s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger(__name__)


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        print(f"ERROR: environment variable {name!r} is not set.", file=sys.stderr)
        sys.exit(1)
    return value


def build_service() -> SchedulingService:
    db_path = os.environ.get("DB_PATH", "data/cleaning.db")
    os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)

    config = SchedulerConfig(
        store=SqliteTaskStore(db_path=db_path),
        roster=SqliteCleanerRoster(db_path=db_path),
        throttle=FetchThrottle(float(os.environ.get("CALENDAR_THROTTLE_SECONDS", "5"))),
        horizon_days=int(os.environ.get("RELOCATION_HORIZON_DAYS", "30")),
    )
    return SchedulingService(config)


def main() -> None:
    gateway = HostexClient(
        api_token=_require_env("HOSTEX_API_TOKEN"),
        base_url=os.environ.get("HOSTEX_BASE_URL", BASE_URL),
    )
    sync_interval = int(os.environ.get("SYNC_INTERVAL", "300"))
    lookback_days = int(os.environ.get("SYNC_LOOKBACK_DAYS", "30"))
    lookahead_days = int(os.environ.get("SYNC_LOOKAHEAD_DAYS", "180"))
    service = build_service()

    log.info(
        "Daemon started — interval=%ds  lookback=%dd  lookahead=%dd",
        sync_interval,
        lookback_days,
        lookahead_days,
    )

    while True:
        report = sync_once(service, gateway, lookback_days=lookback_days, lookahead_days=lookahead_days)
        if report is not None:
            log.info("Sync: %s", report.summary())
        log.info("Sleeping %ds …", sync_interval)
        time.sleep(sync_interval)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        log.info("Daemon stopped.")
