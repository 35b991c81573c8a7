import logging

import requests

from cleaning_scheduler.domain.booking import Booking, booking_from_payload, dedupe_bookings
from cleaning_scheduler.domain.errors import ValidationError

from .ports import BookingGateway

log = logging.getLogger(__name__)

BASE_URL = "https://api.hostex.io/v3"
PAGE_LIMIT = 100

# Canonical status -> the aggregator's filter value.
_STATUS_FILTER = {
    "confirmed": "accepted",
    "pending": "wait_accept",
    "cancelled": "cancelled",
}


class HostexClient(BookingGateway):
    """Adapter: real booking aggregator HTTP client."""

    def __init__(
        self,
        api_token: str,
        base_url: str = BASE_URL,
        max_pages: int = 10,
        timeout: float = 30,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_pages = max_pages
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_token}",
                "Content-Type": "application/json",
            }
        )

    def fetch_bookings(
        self,
        status: str | None = None,
        check_in_from: str | None = None,
        check_in_to: str | None = None,
    ) -> list[Booking]:
        params: dict[str, str | int] = {"limit": PAGE_LIMIT, "offset": 0}
        if status:
            params["status"] = _STATUS_FILTER.get(status, status)
        if check_in_from:
            params["start_check_in_date"] = check_in_from
        if check_in_to:
            params["end_check_in_date"] = check_in_to

        bookings: list[Booking] = []
        for page in range(self.max_pages):
            params["offset"] = page * PAGE_LIMIT
            resp = self.session.get(f"{self.base_url}/reservations", params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
            reservations = (data.get("data") or {}).get("reservations", [])
            log.debug("Fetched %d reservation(s) at offset %d", len(reservations), params["offset"])

            for raw in reservations:
                try:
                    bookings.append(booking_from_payload(raw))
                except ValidationError as exc:
                    log.warning("Skipping reservation %s: %s", raw.get("reservation_code", "?"), exc.reason)

            if len(reservations) < PAGE_LIMIT:
                break
        else:
            log.warning("Stopped paging after %d page(s); results may be incomplete", self.max_pages)

        return dedupe_bookings(bookings)
