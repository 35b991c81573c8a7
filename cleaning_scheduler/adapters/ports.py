from abc import ABC, abstractmethod

from cleaning_scheduler.domain.booking import Booking, dedupe_bookings


class BookingGateway(ABC):
    """
    Port: how we read bookings from the booking aggregator.

    The scheduling code depends ONLY on this interface.
    It doesn't know or care whether bookings come from the real
    aggregator API or an in-memory simulator.
    """

    @abstractmethod
    def fetch_bookings(
        self,
        status: str | None = None,
        check_in_from: str | None = None,
        check_in_to: str | None = None,
    ) -> list[Booking]:
        """
        Return bookings, de-duplicated by id, optionally filtered.

        status:        canonical status ("confirmed", "pending", "cancelled")
        check_in_from: inclusive lower bound on check-in (YYYY-MM-DD)
        check_in_to:   inclusive upper bound on check-in (YYYY-MM-DD)
        """
        ...

    def fetch_ranges(
        self,
        ranges: list[tuple[str, str]],
        status: str | None = None,
    ) -> list[Booking]:
        """Fetch several check-in ranges and merge them, first occurrence wins."""
        merged: list[Booking] = []
        for start, end in ranges:
            merged.extend(self.fetch_bookings(status=status, check_in_from=start, check_in_to=end))
        return dedupe_bookings(merged)
