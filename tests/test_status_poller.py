"""Tests de la surveillance du statut du serveur."""

from __future__ import annotations

import pytest
import requests

from cyclechat.services import MessageGateway, ServerStatusPoller
from cyclechat.state import ServerStatus
from tests.fakes import FakeTransport, ManualDispatcher, ManualScheduler


@pytest.fixture
def reloads() -> list[int]:
    return []


@pytest.fixture
def poller(
    message_gateway: MessageGateway,
    scheduler: ManualScheduler,
    dispatcher: ManualDispatcher,
    reloads: list[int],
) -> ServerStatusPoller:
    return ServerStatusPoller(
        message_gateway,
        scheduler,
        dispatcher=dispatcher,
        interval_ms=5000,
        on_online=lambda: reloads.append(1),
    )


def _health_ok(transport: FakeTransport) -> None:
    transport.add("GET", "/health", body="Backend is running!")


def _health_down(transport: FakeTransport) -> None:
    transport.add("GET", "/health", error=requests.ConnectionError("refused"))


def test_initial_status_is_checking(poller: ServerStatusPoller) -> None:
    assert poller.status is ServerStatus.CHECKING
    assert not poller.running


def test_start_checks_immediately_and_schedules(
    poller: ServerStatusPoller,
    transport: FakeTransport,
    scheduler: ManualScheduler,
    dispatcher: ManualDispatcher,
) -> None:
    _health_ok(transport)

    poller.start()

    assert poller.status is ServerStatus.CHECKING
    assert len(dispatcher.pending) == 1
    dispatcher.run_all()
    assert poller.status is ServerStatus.ONLINE
    assert len(transport.calls("GET", "/health")) == 1
    assert [task.interval_ms for task in scheduler.active] == [5000]


def test_alternating_results(
    poller: ServerStatusPoller,
    transport: FakeTransport,
    scheduler: ManualScheduler,
    dispatcher: ManualDispatcher,
    reloads: list[int],
) -> None:
    statuses: list[ServerStatus] = []
    poller.subscribe(statuses.append)
    _health_ok(transport)
    _health_down(transport)
    _health_ok(transport)

    poller.start()
    dispatcher.run_all()
    scheduler.tick()
    dispatcher.run_all()
    scheduler.tick()
    dispatcher.run_all()

    assert statuses == [
        ServerStatus.CHECKING,
        ServerStatus.ONLINE,
        ServerStatus.OFFLINE,
        ServerStatus.ONLINE,
    ]
    assert len(reloads) == 2


def test_server_error_counts_as_offline(
    poller: ServerStatusPoller, transport: FakeTransport, dispatcher: ManualDispatcher
) -> None:
    transport.add("GET", "/health", status=503)
    poller.start()
    dispatcher.run_all()
    assert poller.status is ServerStatus.OFFLINE


def test_staying_online_does_not_reload(
    poller: ServerStatusPoller,
    transport: FakeTransport,
    scheduler: ManualScheduler,
    dispatcher: ManualDispatcher,
    reloads: list[int],
) -> None:
    _health_ok(transport)

    poller.start()
    dispatcher.run_all()
    scheduler.tick()
    dispatcher.run_all()
    scheduler.tick()
    dispatcher.run_all()

    assert poller.status is ServerStatus.ONLINE
    assert len(reloads) == 1
    assert len(transport.calls("GET", "/health")) == 3


def test_tick_skipped_while_check_in_flight(
    poller: ServerStatusPoller,
    transport: FakeTransport,
    scheduler: ManualScheduler,
    dispatcher: ManualDispatcher,
) -> None:
    _health_ok(transport)

    poller.start()
    scheduler.tick()
    scheduler.tick()

    assert len(dispatcher.pending) == 1
    dispatcher.run_all()
    scheduler.tick()
    assert len(dispatcher.pending) == 1


def test_stop_cancels_task(
    poller: ServerStatusPoller,
    transport: FakeTransport,
    scheduler: ManualScheduler,
    dispatcher: ManualDispatcher,
) -> None:
    _health_ok(transport)
    poller.start()
    dispatcher.run_all()

    poller.stop()
    poller.stop()
    scheduler.tick()

    assert not poller.running
    assert scheduler.active == []
    assert dispatcher.pending == []
    assert len(transport.calls("GET", "/health")) == 1


def test_result_arriving_after_stop_is_ignored(
    poller: ServerStatusPoller,
    transport: FakeTransport,
    dispatcher: ManualDispatcher,
    reloads: list[int],
) -> None:
    statuses: list[ServerStatus] = []
    poller.subscribe(statuses.append)
    _health_ok(transport)

    poller.start()
    poller.stop()
    dispatcher.run_all()

    assert poller.status is ServerStatus.CHECKING
    assert statuses == [ServerStatus.CHECKING]
    assert reloads == []


def test_start_twice_keeps_single_task(
    poller: ServerStatusPoller,
    transport: FakeTransport,
    scheduler: ManualScheduler,
    dispatcher: ManualDispatcher,
) -> None:
    _health_ok(transport)
    poller.start()
    poller.start()
    assert len(scheduler.active) == 1
    assert len(dispatcher.pending) == 1


def test_restart_goes_through_checking(
    poller: ServerStatusPoller,
    transport: FakeTransport,
    dispatcher: ManualDispatcher,
    reloads: list[int],
) -> None:
    statuses: list[ServerStatus] = []
    poller.subscribe(statuses.append)
    _health_ok(transport)

    poller.start()
    dispatcher.run_all()
    poller.stop()
    poller.start()
    dispatcher.run_all()

    assert statuses == [
        ServerStatus.CHECKING,
        ServerStatus.ONLINE,
        ServerStatus.CHECKING,
        ServerStatus.ONLINE,
    ]
    assert len(reloads) == 2
