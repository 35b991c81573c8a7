"""
Messages pushed to cleaners: task reminders, weekly and monthly schedules,
and availability links.

Each recipient is handled on its own.  A failed send is logged and
counted, never retried, and never stops the remaining sends.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import timedelta

from cleaning_scheduler.communication.ports import Notifier
from cleaning_scheduler.domain.errors import NotFoundError, ValidationError
from cleaning_scheduler.domain.periods import month_bounds, parse_date
from cleaning_scheduler.domain.roster import Cleaner, CleanerRoster
from cleaning_scheduler.domain.task import CleaningTask
from cleaning_scheduler.domain.task_store import TaskStore

log = logging.getLogger(__name__)


@dataclass
class NotificationReport:
    sent: list[str] = field(default_factory=list)       # cleaner ids
    failed: dict[str, str] = field(default_factory=dict)  # cleaner id -> error
    skipped: dict[str, str] = field(default_factory=dict)  # cleaner id -> reason


def _schedule_lines(tasks: list[CleaningTask]) -> list[str]:
    lines = []
    for task in sorted(tasks, key=lambda t: (t.current_date, t.id)):
        moved = f" (moved from {task.original_date})" if task.relocated else ""
        lines.append(f"{task.current_date}: {task.guest_name}{moved}")
    return lines


def format_monthly_schedule(cleaner: Cleaner, month: str, tasks: list[CleaningTask]) -> str:
    lines = [f"Cleaning schedule for {month}", "", f"Hi {cleaner.name},", ""]
    lines += _schedule_lines(tasks)
    lines += ["", f"{len(tasks)} cleaning(s) in total."]
    return "\n".join(lines)


def format_weekly_schedule(cleaner: Cleaner, week_start: str, week_end: str, tasks: list[CleaningTask]) -> str:
    lines = [f"Cleaning schedule {week_start} - {week_end}", "", f"Hi {cleaner.name},", ""]
    lines += _schedule_lines(tasks) or ["No cleanings this week."]
    lines += ["", f"{len(tasks)} cleaning(s) in total."]
    return "\n".join(lines)


def format_task_reminder(cleaner: Cleaner, task: CleaningTask) -> str:
    return (
        f"Cleaning reminder\n\n"
        f"Hi {cleaner.name},\n"
        f"Date: {task.current_date}\n"
        f"Guest: {task.guest_name}\n"
        f"Checkout: {task.original_date}\n\n"
        f"Standard cleaning, please."
    )


def format_availability_request(cleaner: Cleaner, month: str, link: str) -> str:
    return (
        f"Hi {cleaner.name},\n\n"
        f"Please tell us which days you can work in {month}.\n"
        f"Open the calendar and select your free days:\n{link}"
    )


class NotificationService:

    def __init__(self, notifier: Notifier, store: TaskStore, roster: CleanerRoster):
        self._notifier = notifier
        self._store = store
        self._roster = roster

    async def _deliver(
        self,
        report: NotificationReport,
        cleaner_id: str,
        cleaner: Cleaner | None,
        text: str,
        what: str,
    ) -> None:
        """Send one message, recording the outcome in *report*."""
        if cleaner is None:
            report.skipped[cleaner_id] = "unknown cleaner"
            return
        if not cleaner.line_user_id:
            report.skipped[cleaner_id] = "no recipient id"
            return

        try:
            await self._notifier.send(cleaner.line_user_id, text)
        except Exception as exc:
            log.error("cleaner=%s %s send failed: %s", cleaner_id, what, exc)
            report.failed[cleaner_id] = str(exc)
            return

        log.info("cleaner=%s %s sent", cleaner_id, what)
        report.sent.append(cleaner_id)

    async def send_monthly_schedules(self, month: str) -> NotificationReport:
        """One message per assigned cleaner listing that cleaner's tasks for *month*."""
        start, end = month_bounds(month)
        by_cleaner: dict[str, list[CleaningTask]] = defaultdict(list)
        for task in self._store.list_range(start, end):
            if task.cleaner_id is not None:
                by_cleaner[task.cleaner_id].append(task)

        report = NotificationReport()
        for cleaner_id, tasks in by_cleaner.items():
            cleaner = self._roster.get_cleaner(cleaner_id)
            text = format_monthly_schedule(cleaner, month, tasks) if cleaner else ""
            await self._deliver(report, cleaner_id, cleaner, text, f"month={month} schedule ({len(tasks)} task(s))")
        return report

    async def send_weekly_schedule(self, cleaner_id: str, week_start: str) -> NotificationReport:
        """The cleaner's tasks for the 7 days starting at *week_start*, even when there are none."""
        cleaner = self._roster.get_cleaner(cleaner_id)
        if cleaner is None:
            raise NotFoundError("cleaner", cleaner_id)

        first = parse_date(week_start)
        start, end = first.isoformat(), (first + timedelta(days=6)).isoformat()
        tasks = [t for t in self._store.list_range(start, end) if t.cleaner_id == cleaner_id]

        report = NotificationReport()
        text = format_weekly_schedule(cleaner, start, end, tasks)
        await self._deliver(report, cleaner_id, cleaner, text, f"week={start} schedule ({len(tasks)} task(s))")
        return report

    async def send_task_reminder(self, task_id: str) -> NotificationReport:
        """Remind the assigned cleaner of one task."""
        task = self._store.get(task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        if task.cleaner_id is None:
            raise ValidationError(f"task {task_id} has no cleaner assigned")

        cleaner = self._roster.get_cleaner(task.cleaner_id)
        report = NotificationReport()
        text = format_task_reminder(cleaner, task) if cleaner else ""
        await self._deliver(report, task.cleaner_id, cleaner, text, f"task={task_id} reminder")
        return report

    async def send_availability_link(self, cleaner_id: str, month: str, link: str) -> bool:
        """Push the availability link; returns False (logged) when delivery fails."""
        cleaner = self._roster.get_cleaner(cleaner_id)
        if cleaner is None:
            raise NotFoundError("cleaner", cleaner_id)
        if not cleaner.line_user_id:
            raise ValidationError(f"cleaner {cleaner_id} has no recipient id configured")

        report = NotificationReport()
        await self._deliver(
            report, cleaner_id, cleaner,
            format_availability_request(cleaner, month, link),
            f"month={month} availability link",
        )
        return not report.failed
