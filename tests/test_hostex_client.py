"""
HostexClient paging and payload handling against a canned HTTP session.

No network: the client's requests session is swapped for a fake that
serves pre-built pages.
"""

import pytest
import requests

from cleaning_scheduler.adapters.hostex_client import PAGE_LIMIT, HostexClient


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.ok = status_code < 400
        self.text = ""

    def json(self):
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, pages, status_code=200):
        self.pages = pages
        self.status_code = status_code
        self.requests: list[dict] = []
        self.headers = {}

    def get(self, url, params=None, timeout=None):
        self.requests.append(dict(params))
        index = params["offset"] // PAGE_LIMIT
        reservations = self.pages[index] if index < len(self.pages) else []
        return FakeResponse({"data": {"reservations": reservations}}, self.status_code)


def _reservation(code, check_in="2025-08-01", check_out="2025-08-03", status="accepted"):
    return {
        "reservation_code": code,
        "check_in_date": check_in,
        "check_out_date": check_out,
        "guest_name": f"Guest {code}",
        "status": status,
    }


def _client(pages, max_pages=10, status_code=200):
    client = HostexClient(api_token="token", max_pages=max_pages)
    client.session = FakeSession(pages, status_code)
    return client


def test_single_short_page():
    client = _client([[_reservation("R1"), _reservation("R2", status="wait_accept")]])
    bookings = client.fetch_bookings()
    assert [(b.id, b.status) for b in bookings] == [("R1", "confirmed"), ("R2", "pending")]
    assert len(client.session.requests) == 1


def test_pages_until_short_page():
    full = [_reservation(f"R{i}") for i in range(PAGE_LIMIT)]
    client = _client([full, [_reservation("LAST")]])
    bookings = client.fetch_bookings()
    assert len(bookings) == PAGE_LIMIT + 1
    assert [r["offset"] for r in client.session.requests] == [0, PAGE_LIMIT]


def test_stops_at_page_cap():
    full = [_reservation(f"R{i}") for i in range(PAGE_LIMIT)]
    client = _client([full, full, full], max_pages=2)
    client.fetch_bookings()
    assert len(client.session.requests) == 2


def test_duplicates_across_pages_removed():
    page = [_reservation(f"R{i}") for i in range(PAGE_LIMIT)]
    client = _client([page, [_reservation("R0")]])
    assert len(client.fetch_bookings()) == PAGE_LIMIT


def test_filters_sent_as_query_params():
    client = _client([[]])
    client.fetch_bookings(status="confirmed", check_in_from="2025-08-01", check_in_to="2025-08-31")
    params = client.session.requests[0]
    assert params["status"] == "accepted"
    assert params["start_check_in_date"] == "2025-08-01"
    assert params["end_check_in_date"] == "2025-08-31"
    assert params["limit"] == PAGE_LIMIT


def test_invalid_reservations_skipped():
    client = _client([[
        _reservation("R1"),
        _reservation("BAD", check_in="2025-08-05", check_out="2025-08-01"),
        {"check_in_date": "2025-08-01"},
    ]])
    assert [b.id for b in client.fetch_bookings()] == ["R1"]


def test_http_error_propagates():
    client = _client([[]], status_code=401)
    with pytest.raises(requests.HTTPError):
        client.fetch_bookings()
