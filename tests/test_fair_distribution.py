"""
Fair distribution: least-loaded available cleaner wins, failures are isolated.
"""

from cleaning_scheduler.domain.fair_distribution import distribute_fairly, seed_loads
from cleaning_scheduler.domain.roster import Cleaner
from cleaning_scheduler.domain.task import CleaningTask

ALICE = Cleaner("alice", "Alice")
BOB = Cleaner("bob", "Bob")
CARLA = Cleaner("carla", "Carla")


def _task(day: str, booking_id: str, cleaner: Cleaner | None = None) -> CleaningTask:
    return CleaningTask(
        id=f"{day}_{booking_id}",
        original_date=day,
        current_date=day,
        booking_id=booking_id,
        guest_name="Guest",
        cleaner_id=cleaner.id if cleaner else None,
        cleaner_name=cleaner.name if cleaner else None,
    )


class Recorder:
    """persist callback that remembers writes and can fail on demand."""

    def __init__(self, fail_for=()):
        self.writes: list[tuple[str, str]] = []
        self.fail_for = set(fail_for)

    def __call__(self, task, cleaner):
        if task.id in self.fail_for:
            raise ConnectionError("store timeout")
        self.writes.append((task.id, cleaner.id))


def test_least_loaded_available_cleaner_wins():
    """Alice has no tasks, Bob already has one: Alice gets the new task."""
    tasks = [_task("2025-08-03", "B0", BOB), _task("2025-08-10", "B1")]
    everyone = {"alice": {"2025-08-10"}, "bob": {"2025-08-03", "2025-08-10"}}
    persist = Recorder()
    report = distribute_fairly(tasks, [ALICE, BOB], everyone, persist)
    assert persist.writes == [("2025-08-10_B1", "alice")]
    assert report.loads == {"alice": 1, "bob": 1}


def test_ties_go_to_roster_order():
    tasks = [_task("2025-08-10", "B1")]
    available = {"alice": {"2025-08-10"}, "bob": {"2025-08-10"}}
    report = distribute_fairly(tasks, [BOB, ALICE], available, Recorder())
    assert report.outcomes[0].cleaner_id == "bob"


def test_tasks_visited_in_date_order():
    tasks = [_task("2025-08-12", "B2"), _task("2025-08-10", "B1"), _task("2025-08-11", "B3")]
    available = {"alice": {"2025-08-10", "2025-08-11", "2025-08-12"},
                 "bob": {"2025-08-10", "2025-08-11", "2025-08-12"}}
    persist = Recorder()
    distribute_fairly(tasks, [ALICE, BOB], available, persist)
    assert persist.writes == [
        ("2025-08-10_B1", "alice"),
        ("2025-08-11_B3", "bob"),
        ("2025-08-12_B2", "alice"),
    ]


def test_nobody_available_is_skipped():
    tasks = [_task("2025-08-10", "B1")]
    report = distribute_fairly(tasks, [ALICE], {"alice": {"2025-08-11"}}, Recorder())
    assert report.skipped == 1
    assert report.outcomes[0].reason == "no cleaner available"


def test_inactive_cleaners_never_chosen():
    retired = Cleaner("zed", "Zed", is_active=False)
    tasks = [_task("2025-08-10", "B1")]
    report = distribute_fairly(tasks, [retired], {"zed": {"2025-08-10"}}, Recorder())
    assert report.skipped == 1


def test_already_assigned_tasks_untouched():
    tasks = [_task("2025-08-10", "B1", CARLA)]
    persist = Recorder()
    report = distribute_fairly(tasks, [ALICE], {"alice": {"2025-08-10"}}, persist)
    assert persist.writes == []
    assert report.outcomes == []


def test_failed_write_isolated_and_not_counted():
    tasks = [_task("2025-08-10", "B1"), _task("2025-08-11", "B2")]
    available = {"alice": {"2025-08-10", "2025-08-11"}, "bob": {"2025-08-10", "2025-08-11"}}
    persist = Recorder(fail_for={"2025-08-10_B1"})
    report = distribute_fairly(tasks, [ALICE, BOB], available, persist)
    assert [o.status for o in report.outcomes] == ["failed", "assigned"]
    # Alice's failed write did not raise her load, so she gets the next one.
    assert persist.writes == [("2025-08-11_B2", "alice")]
    assert report.loads == {"alice": 1, "bob": 0}


def test_spread_never_exceeds_one_when_everyone_is_always_available():
    days = [f"2025-08-{d:02d}" for d in range(1, 32)]
    tasks = [_task(day, f"B{i}") for i, day in enumerate(days)]
    available = {c.id: set(days) for c in (ALICE, BOB, CARLA)}
    report = distribute_fairly(tasks, [ALICE, BOB, CARLA], available, Recorder())
    assert report.assigned == 31
    assert report.spread() <= 1


def test_assignment_never_widens_the_spread():
    days = [f"2025-08-{d:02d}" for d in range(1, 11)]
    tasks = [_task("2025-08-01", "X1", ALICE), _task("2025-08-02", "X2", ALICE)]
    tasks += [_task(day, f"B{i}") for i, day in enumerate(days)]
    available = {"alice": set(days), "bob": set(days)}
    before = max(seed_loads(tasks, [ALICE, BOB]).values()) - min(seed_loads(tasks, [ALICE, BOB]).values())
    report = distribute_fairly(tasks, [ALICE, BOB], available, Recorder())
    after = max(report.loads.values()) - min(report.loads.values())
    assert after <= before


def test_seed_loads_counts_cleaners_outside_roster():
    loads = seed_loads([_task("2025-08-10", "B1", CARLA)], [ALICE])
    assert loads == {"alice": 0, "carla": 1}
