"""
Fair distribution of cleaners over unassigned tasks.

Greedy online balancing: loads are seeded from assignments that already
exist in the period, unassigned tasks are visited by ascending date (then
id), and each goes to the available cleaner with the smallest load.  Ties
go to the cleaner that comes first in the roster order, so the result is
deterministic for a given snapshot.

Every assignment is persisted on its own.  A failed write is recorded and
the loop carries on; the failed task stays unassigned and does not count
towards anyone's load.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Literal

from cleaning_scheduler.domain.roster import Cleaner
from cleaning_scheduler.domain.task import CleaningTask

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentOutcome:
    task_id: str
    date: str
    status: Literal["assigned", "skipped", "failed"]
    cleaner_id: str | None = None
    cleaner_name: str | None = None
    reason: str = ""


@dataclass
class DistributionReport:
    outcomes: list[AssignmentOutcome] = field(default_factory=list)
    loads: dict[str, int] = field(default_factory=dict)   # cleaner_id -> tasks in period

    def _count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def assigned(self) -> int:
        return self._count("assigned")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def failed(self) -> int:
        return self._count("failed")

    def spread(self) -> int:
        """max - min load among cleaners holding at least one task."""
        busy = [n for n in self.loads.values() if n > 0]
        return max(busy) - min(busy) if busy else 0


def seed_loads(tasks: list[CleaningTask], cleaners: list[Cleaner]) -> dict[str, int]:
    """Per-cleaner task count for the period, starting from existing assignments."""
    loads = {c.id: 0 for c in cleaners}
    for task in tasks:
        if task.cleaner_id is not None:
            loads[task.cleaner_id] = loads.get(task.cleaner_id, 0) + 1
    return loads


def distribute_fairly(
    tasks: list[CleaningTask],
    cleaners: list[Cleaner],
    available_dates: Mapping[str, set[str]],
    persist: Callable[[CleaningTask, Cleaner], None],
) -> DistributionReport:
    """
    Assign every unassigned task in *tasks* (one period's worth).

    cleaners:        roster in tie-break order
    available_dates: cleaner_id -> ISO dates the cleaner can work
    persist:         writes one assignment; any exception marks it failed
    """
    loads = seed_loads(tasks, cleaners)
    report = DistributionReport(loads=loads)

    pending = sorted(
        (t for t in tasks if t.cleaner_id is None),
        key=lambda t: (t.current_date, t.id),
    )

    for task in pending:
        available = [
            c for c in cleaners
            if c.is_active and task.current_date in available_dates.get(c.id, ())
        ]
        if not available:
            log.info("task=%s date=%s skip: no cleaner available", task.id, task.current_date)
            report.outcomes.append(AssignmentOutcome(
                task_id=task.id, date=task.current_date, status="skipped",
                reason="no cleaner available",
            ))
            continue

        # min() keeps the first of equal loads, i.e. roster order.
        chosen = min(available, key=lambda c: loads[c.id])

        try:
            persist(task, chosen)
        except Exception as exc:
            log.error("task=%s cleaner=%s assignment failed: %s", task.id, chosen.id, exc)
            report.outcomes.append(AssignmentOutcome(
                task_id=task.id, date=task.current_date, status="failed",
                cleaner_id=chosen.id, cleaner_name=chosen.name, reason=str(exc),
            ))
            continue

        loads[chosen.id] += 1
        log.info("task=%s date=%s assigned → %s (load=%d)",
                 task.id, task.current_date, chosen.name, loads[chosen.id])
        report.outcomes.append(AssignmentOutcome(
            task_id=task.id, date=task.current_date, status="assigned",
            cleaner_id=chosen.id, cleaner_name=chosen.name,
        ))

    return report
