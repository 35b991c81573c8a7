"""
In-memory CleanerRoster for testing — no database required.
"""

from cleaning_scheduler.domain.roster import Cleaner, CleanerRoster


class InMemoryCleanerRoster(CleanerRoster):

    def __init__(self, cleaners: list[Cleaner] | None = None):
        self._cleaners: dict[str, Cleaner] = {}
        self._availability: dict[tuple[str, str], set[str]] = {}
        for cleaner in cleaners or []:
            self.save_cleaner(cleaner)

    def list_cleaners(self, active_only: bool = True) -> list[Cleaner]:
        cleaners = [c for c in self._cleaners.values() if c.is_active or not active_only]
        return sorted(cleaners, key=lambda c: (c.name, c.id))

    def get_cleaner(self, cleaner_id: str) -> Cleaner | None:
        return self._cleaners.get(cleaner_id)

    def save_cleaner(self, cleaner: Cleaner) -> None:
        self._cleaners[cleaner.id] = cleaner

    def get_available_dates(self, cleaner_id: str, month: str) -> set[str]:
        return set(self._availability.get((cleaner_id, month), set()))

    def set_available_dates(self, cleaner_id: str, month: str, dates: set[str]) -> None:
        self._availability[(cleaner_id, month)] = set(dates)
