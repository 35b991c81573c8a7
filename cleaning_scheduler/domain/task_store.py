"""
TaskStore port — the document collection holding cleaning tasks.

Keyed by the composite task id.  Writes are partial (merge) so fields a
caller did not mention are never touched.  Adapters raise StoreError for
transient failures and NotFoundError where noted.
"""

from abc import ABC, abstractmethod

from cleaning_scheduler.domain.task import CleaningTask


class TaskStore(ABC):
    """
    Port: persist and query cleaning tasks.

    The scheduling code depends ONLY on this interface; it doesn't know
    whether tasks live in SQLite, a hosted document database, or a dict.
    """

    # Largest id list a single batch_exists() call accepts.
    max_batch_size: int = 500

    @abstractmethod
    def get(self, task_id: str) -> CleaningTask | None:
        """Return the task, or None when it does not exist."""
        ...

    @abstractmethod
    def query(self, field: str, op: str, value: str) -> list[CleaningTask]:
        """
        Return tasks where `field op value` holds.

        field: "booking_id", "cleaner_id", "current_date" or "original_date"
        op:    "==", ">=" or "<="
        """
        ...

    @abstractmethod
    def list_range(self, start: str, end: str) -> list[CleaningTask]:
        """Tasks whose current_date is within [start, end], ordered by date then id."""
        ...

    @abstractmethod
    def batch_exists(self, task_ids: list[str]) -> set[str]:
        """
        Return the subset of *task_ids* that exist.

        Raises ValueError when more than max_batch_size ids are passed;
        callers chunk.
        """
        ...

    @abstractmethod
    def tasks_for_bookings(self, booking_ids: list[str]) -> list[CleaningTask]:
        """
        Every task belonging to any of *booking_ids*, ordered by date then id.

        Same limit as batch_exists(): more than max_batch_size ids raises
        ValueError.
        """
        ...

    @abstractmethod
    def insert(self, task: CleaningTask) -> bool:
        """Create the task unless its id exists. Returns False when it already did."""
        ...

    @abstractmethod
    def upsert(self, task_id: str, fields: dict, merge: bool = True) -> None:
        """
        Merge *fields* into the task, creating it when absent.

        Creating requires the identity fields (original_date, booking_id,
        current_date, guest_name) to be present in *fields*.
        """
        ...

    @abstractmethod
    def update(self, task_id: str, fields: dict) -> None:
        """Merge *fields* into an existing task. Raises NotFoundError when missing."""
        ...

    @abstractmethod
    def delete(self, task_id: str) -> None:
        """Administrative removal. Raises NotFoundError when missing."""
        ...
