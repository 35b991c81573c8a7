"""
SQLite adapter for TaskStore.

Use ":memory:" for tests, a file path for production.
"""

import logging
import sqlite3

from cleaning_scheduler.domain.errors import NotFoundError, StoreError, ValidationError
from cleaning_scheduler.domain.task import MUTABLE_FIELDS, CleaningTask, task_from_fields
from cleaning_scheduler.domain.task_store import TaskStore

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cleaning_tasks (
    id             TEXT PRIMARY KEY,
    original_date  TEXT NOT NULL,
    scheduled_date TEXT NOT NULL,
    booking_id     TEXT NOT NULL,
    guest_name     TEXT NOT NULL,
    cleaner_id     TEXT,
    cleaner_name   TEXT,
    relocated      INTEGER NOT NULL DEFAULT 0,
    updated_at     TEXT NOT NULL DEFAULT ''
);

CREATE INDEX IF NOT EXISTS idx_tasks_scheduled_date ON cleaning_tasks (scheduled_date);
CREATE INDEX IF NOT EXISTS idx_tasks_booking_id ON cleaning_tasks (booking_id);
"""

_QUERY_FIELDS = {"booking_id", "cleaner_id", "current_date", "original_date"}
_QUERY_OPS = {"==": "=", ">=": ">=", "<=": "<="}
_FIELDS = tuple(CleaningTask.__dataclass_fields__)

# CURRENT_DATE is an SQL keyword, so the column gets another name.
_COLUMN = {f: f for f in _FIELDS} | {"current_date": "scheduled_date"}


class SqliteTaskStore(TaskStore):

    def __init__(self, db_path: str = "cleaning.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)

    def get(self, task_id: str) -> CleaningTask | None:
        row = self._fetchone("SELECT * FROM cleaning_tasks WHERE id = ?", (task_id,))
        return self._row_to_task(row) if row else None

    def query(self, field: str, op: str, value: str) -> list[CleaningTask]:
        if field not in _QUERY_FIELDS or op not in _QUERY_OPS:
            raise ValidationError(f"unsupported query: {field} {op}")
        rows = self._fetchall(
            f"SELECT * FROM cleaning_tasks WHERE {_COLUMN[field]} {_QUERY_OPS[op]} ?"
            " ORDER BY scheduled_date, id",
            (value,),
        )
        return [self._row_to_task(r) for r in rows]

    def list_range(self, start: str, end: str) -> list[CleaningTask]:
        rows = self._fetchall(
            "SELECT * FROM cleaning_tasks WHERE scheduled_date BETWEEN ? AND ?"
            " ORDER BY scheduled_date, id",
            (start, end),
        )
        return [self._row_to_task(r) for r in rows]

    def batch_exists(self, task_ids: list[str]) -> set[str]:
        if len(task_ids) > self.max_batch_size:
            raise ValueError(f"batch of {len(task_ids)} ids exceeds limit {self.max_batch_size}")
        if not task_ids:
            return set()
        placeholders = ", ".join("?" for _ in task_ids)
        rows = self._fetchall(
            f"SELECT id FROM cleaning_tasks WHERE id IN ({placeholders})",
            tuple(task_ids),
        )
        return {r["id"] for r in rows}

    def tasks_for_bookings(self, booking_ids: list[str]) -> list[CleaningTask]:
        if len(booking_ids) > self.max_batch_size:
            raise ValueError(f"batch of {len(booking_ids)} ids exceeds limit {self.max_batch_size}")
        if not booking_ids:
            return []
        placeholders = ", ".join("?" for _ in booking_ids)
        rows = self._fetchall(
            f"SELECT * FROM cleaning_tasks WHERE booking_id IN ({placeholders})"
            " ORDER BY scheduled_date, id",
            tuple(booking_ids),
        )
        return [self._row_to_task(r) for r in rows]

    def insert(self, task: CleaningTask) -> bool:
        fields = task.to_fields()
        cur = self._execute(
            f"INSERT OR IGNORE INTO cleaning_tasks ({', '.join(_COLUMN[f] for f in _FIELDS)})"
            f" VALUES ({', '.join('?' for _ in _FIELDS)})",
            tuple(self._to_column(f, fields[f]) for f in _FIELDS),
        )
        return cur.rowcount == 1

    def upsert(self, task_id: str, fields: dict, merge: bool = True) -> None:
        if not merge:
            raise ValueError("task store only supports merge writes")
        if self.get(task_id) is None:
            task = task_from_fields(task_id, fields)
            if self.insert(task):
                return
        # Exists (or appeared meanwhile): partial write only.
        self.update(task_id, {k: v for k, v in fields.items() if k in MUTABLE_FIELDS})

    def update(self, task_id: str, fields: dict) -> None:
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValidationError(f"fields cannot be updated: {', '.join(sorted(unknown))}")
        if not fields:
            if self.get(task_id) is None:
                raise NotFoundError("task", task_id)
            return
        assignments = ", ".join(f"{_COLUMN[k]} = ?" for k in fields)
        cur = self._execute(
            f"UPDATE cleaning_tasks SET {assignments} WHERE id = ?",
            tuple(self._to_column(k, v) for k, v in fields.items()) + (task_id,),
        )
        if cur.rowcount == 0:
            raise NotFoundError("task", task_id)

    def delete(self, task_id: str) -> None:
        cur = self._execute("DELETE FROM cleaning_tasks WHERE id = ?", (task_id,))
        if cur.rowcount == 0:
            raise NotFoundError("task", task_id)

    # -- sqlite plumbing ------------------------------------------------------

    def _execute(self, sql: str, params: tuple) -> sqlite3.Cursor:
        try:
            cur = self._conn.execute(sql, params)
            self._conn.commit()
            return cur
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise StoreError(f"task store write failed: {exc}") from exc

    def _fetchone(self, sql: str, params: tuple):
        try:
            return self._conn.execute(sql, params).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"task store read failed: {exc}") from exc

    def _fetchall(self, sql: str, params: tuple):
        try:
            return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"task store read failed: {exc}") from exc

    @staticmethod
    def _to_column(name: str, value):
        if name == "relocated":
            return 1 if value else 0
        return value

    @staticmethod
    def _row_to_task(row) -> CleaningTask:
        return CleaningTask(
            id=row["id"],
            original_date=row["original_date"],
            current_date=row["scheduled_date"],
            booking_id=row["booking_id"],
            guest_name=row["guest_name"],
            cleaner_id=row["cleaner_id"],
            cleaner_name=row["cleaner_name"],
            relocated=bool(row["relocated"]),
            updated_at=row["updated_at"],
        )
