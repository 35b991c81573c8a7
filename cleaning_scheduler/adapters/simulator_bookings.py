from dataclasses import replace

from cleaning_scheduler.domain.booking import Booking, dedupe_bookings

from .ports import BookingGateway


class SimulatorBookingGateway(BookingGateway):
    """
    In-memory fake for testing. No mocking framework needed.

    Test helpers:
        inject_booking()  — add a booking to the feed (duplicates allowed,
                            the feed de-duplicates like the real one)
        cancel()          — flip an injected booking to cancelled
        calls             — list of (status, check_in_from, check_in_to)
                            recorded by fetch_bookings()
    """

    def __init__(self):
        self._bookings: list[Booking] = []
        self.calls: list[tuple[str | None, str | None, str | None]] = []

    def inject_booking(self, booking: Booking) -> None:
        self._bookings.append(booking)

    def cancel(self, booking_id: str) -> None:
        self._bookings = [
            replace(b, status="cancelled") if b.id == booking_id else b
            for b in self._bookings
        ]

    def fetch_bookings(
        self,
        status: str | None = None,
        check_in_from: str | None = None,
        check_in_to: str | None = None,
    ) -> list[Booking]:
        self.calls.append((status, check_in_from, check_in_to))
        return dedupe_bookings([
            b for b in self._bookings
            if (status is None or b.status == status)
            and (check_in_from is None or b.check_in >= check_in_from)
            and (check_in_to is None or b.check_in <= check_in_to)
        ])
