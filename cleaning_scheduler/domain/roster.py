"""
CleanerRoster port — who the cleaners are and when they can work.

Availability is declared per month through the availability-link
workflow; the assignment logic only ever reads it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Cleaner:
    id: str
    name: str
    is_active: bool = True
    line_user_id: str | None = None   # recipient id on the notification channel


class CleanerRoster(ABC):

    @abstractmethod
    def list_cleaners(self, active_only: bool = True) -> list[Cleaner]:
        """Cleaners ordered by name; this order is the fair-distribution tie-break."""
        ...

    @abstractmethod
    def get_cleaner(self, cleaner_id: str) -> Cleaner | None:
        """Return the cleaner, or None if unknown."""
        ...

    @abstractmethod
    def save_cleaner(self, cleaner: Cleaner) -> None:
        """Create or replace a cleaner record."""
        ...

    @abstractmethod
    def get_available_dates(self, cleaner_id: str, month: str) -> set[str]:
        """ISO dates the cleaner declared for *month* (YYYY-MM); empty if none."""
        ...

    @abstractmethod
    def set_available_dates(self, cleaner_id: str, month: str, dates: set[str]) -> None:
        """Replace the cleaner's declared dates for *month*."""
        ...
