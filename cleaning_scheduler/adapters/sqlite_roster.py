"""
SQLite adapter for CleanerRoster.

Use ":memory:" for tests, a file path for production.
"""

import sqlite3
from datetime import datetime, timezone

from cleaning_scheduler.domain.errors import StoreError
from cleaning_scheduler.domain.roster import Cleaner, CleanerRoster

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cleaners (
    id            TEXT PRIMARY KEY,
    name          TEXT NOT NULL,
    is_active     INTEGER NOT NULL DEFAULT 1,
    line_user_id  TEXT,
    updated_at    TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS cleaner_availability (
    cleaner_id  TEXT NOT NULL,
    month       TEXT NOT NULL,
    day         TEXT NOT NULL,
    PRIMARY KEY (cleaner_id, month, day)
);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SqliteCleanerRoster(CleanerRoster):

    def __init__(self, db_path: str = "cleaning.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)

    def list_cleaners(self, active_only: bool = True) -> list[Cleaner]:
        sql = "SELECT * FROM cleaners"
        if active_only:
            sql += " WHERE is_active = 1"
        sql += " ORDER BY name, id"
        try:
            rows = self._conn.execute(sql).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"roster read failed: {exc}") from exc
        return [self._row_to_cleaner(r) for r in rows]

    def get_cleaner(self, cleaner_id: str) -> Cleaner | None:
        try:
            row = self._conn.execute(
                "SELECT * FROM cleaners WHERE id = ?", (cleaner_id,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"roster read failed: {exc}") from exc
        return self._row_to_cleaner(row) if row else None

    def save_cleaner(self, cleaner: Cleaner) -> None:
        try:
            self._conn.execute(
                "INSERT OR REPLACE INTO cleaners (id, name, is_active, line_user_id, updated_at)"
                " VALUES (?, ?, ?, ?, ?)",
                (cleaner.id, cleaner.name, 1 if cleaner.is_active else 0,
                 cleaner.line_user_id, _now()),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise StoreError(f"roster write failed: {exc}") from exc

    def get_available_dates(self, cleaner_id: str, month: str) -> set[str]:
        try:
            rows = self._conn.execute(
                "SELECT day FROM cleaner_availability WHERE cleaner_id = ? AND month = ?",
                (cleaner_id, month),
            ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"availability read failed: {exc}") from exc
        return {r["day"] for r in rows}

    def set_available_dates(self, cleaner_id: str, month: str, dates: set[str]) -> None:
        try:
            with self._conn:
                self._conn.execute(
                    "DELETE FROM cleaner_availability WHERE cleaner_id = ? AND month = ?",
                    (cleaner_id, month),
                )
                self._conn.executemany(
                    "INSERT INTO cleaner_availability (cleaner_id, month, day) VALUES (?, ?, ?)",
                    [(cleaner_id, month, d) for d in sorted(dates)],
                )
        except sqlite3.Error as exc:
            raise StoreError(f"availability write failed: {exc}") from exc

    @staticmethod
    def _row_to_cleaner(row) -> Cleaner:
        return Cleaner(
            id=row["id"],
            name=row["name"],
            is_active=bool(row["is_active"]),
            line_user_id=row["line_user_id"],
        )
