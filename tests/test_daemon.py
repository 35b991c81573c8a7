"""
Daemon behaviour tests for sync_once().

Uses simulators only — no network, no credentials.
Covers: fetch window, task creation, idempotence, fetch-error isolation,
        and discrepancy reporting.
"""

import logging
from datetime import date

import pytest

from cleaning_scheduler.adapters.simulator_bookings import SimulatorBookingGateway
from cleaning_scheduler.adapters.simulator_roster import InMemoryCleanerRoster
from cleaning_scheduler.adapters.simulator_task_store import InMemoryTaskStore
from cleaning_scheduler.daemon import sync_once
from cleaning_scheduler.domain.booking import Booking
from cleaning_scheduler.domain.errors import StoreError
from cleaning_scheduler.scheduler import SchedulerConfig, SchedulingService

TODAY = date(2025, 8, 1)


class FailingGateway(SimulatorBookingGateway):
    def fetch_bookings(self, status=None, check_in_from=None, check_in_to=None):
        raise ConnectionError("aggregator unreachable")


@pytest.fixture
def store():
    return InMemoryTaskStore()


@pytest.fixture
def service(store):
    return SchedulingService(SchedulerConfig(store=store, roster=InMemoryCleanerRoster()))


@pytest.fixture
def gateway():
    gw = SimulatorBookingGateway()
    gw.inject_booking(Booking("B1", "2025-08-02", "2025-08-06", "Alice"))
    gw.inject_booking(Booking("B2", "2025-08-06", "2025-08-09", "Bob"))
    gw.inject_booking(Booking("OLD", "2025-05-01", "2025-05-04", "Too old"))
    return gw


def test_fetch_window(service, gateway):
    sync_once(service, gateway, today=TODAY, lookback_days=30, lookahead_days=180)
    assert gateway.calls == [(None, "2025-07-02", "2026-01-28")]


def test_creates_tasks_in_window(service, gateway, store):
    report = sync_once(service, gateway, today=TODAY)
    assert report.created == ["2025-08-06_B1", "2025-08-09_B2"]
    assert [t.id for t in store.all_tasks()] == ["2025-08-06_B1", "2025-08-09_B2"]


def test_second_cycle_creates_nothing(service, gateway, store):
    sync_once(service, gateway, today=TODAY)
    store.update("2025-08-06_B1", {"cleaner_id": "c1", "cleaner_name": "Ana"})
    report = sync_once(service, gateway, today=TODAY)
    assert report.created == []
    assert store.get("2025-08-06_B1").cleaner_id == "c1"


def test_fetch_error_is_isolated(service, store, caplog):
    with caplog.at_level(logging.ERROR):
        report = sync_once(service, FailingGateway(), today=TODAY)
    assert report is None
    assert store.all_tasks() == []
    assert "aggregator unreachable" in caplog.text


def test_cancellation_logged_as_discrepancy(service, gateway, caplog):
    sync_once(service, gateway, today=TODAY)
    gateway.cancel("B1")
    with caplog.at_level(logging.WARNING):
        report = sync_once(service, gateway, today=TODAY)
    assert [d.kind for d in report.discrepancies] == ["booking_cancelled"]
    assert "booking_cancelled" in caplog.text


def test_store_outage_propagates(service, gateway, store):
    store.fail_reads = True
    with pytest.raises(StoreError):
        sync_once(service, gateway, today=TODAY)
