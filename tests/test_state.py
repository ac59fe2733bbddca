"""Tests des objets d'état partagés et de la navigation."""

from __future__ import annotations

from cyclechat.models import User
from cyclechat.navigation import Navigator, View
from cyclechat.scheduler import InlineDispatcher
from cyclechat.state import Observable, Session, SessionPhase


def test_session_flags() -> None:
    assert Session().loading is True
    assert Session(phase=SessionPhase.LOADING).loading is True
    assert Session.anonymous().loading is False
    assert Session.anonymous().is_authenticated is False

    session = Session.authenticated(User(id=1, username="testuser", role="USER"))
    assert session.is_authenticated is True
    assert session.loading is False


def test_observable_unsubscribe() -> None:
    observable: Observable[int] = Observable()
    received: list[int] = []
    unsubscribe = observable.subscribe(received.append)

    observable.notify(1)
    unsubscribe()
    unsubscribe()
    observable.notify(2)

    assert received == [1]


def test_failing_listener_does_not_block_others() -> None:
    observable: Observable[int] = Observable()
    received: list[int] = []

    def broken(_: int) -> None:
        raise RuntimeError("boom")

    observable.subscribe(broken)
    observable.subscribe(received.append)
    observable.notify(7)

    assert received == [7]


def test_navigator_notifies_only_on_change() -> None:
    navigator = Navigator()
    views: list[View] = []
    navigator.subscribe(views.append)

    navigator.navigate(View.LOGIN)
    navigator.navigate(View.MESSAGES)
    navigator.navigate(View.MESSAGES)

    assert navigator.current is View.MESSAGES
    assert views == [View.MESSAGES]


def test_inline_dispatcher_runs_immediately() -> None:
    dispatcher = InlineDispatcher()
    outcomes: list[object] = []

    dispatcher.submit(lambda: 42, lambda done: outcomes.append(done.result()))
    dispatcher.submit(lambda: 1 / 0, lambda done: outcomes.append(done.exception()))
    dispatcher.call_soon(lambda: outcomes.append("soon"))

    assert outcomes[0] == 42
    assert isinstance(outcomes[1], ZeroDivisionError)
    assert outcomes[2] == "soon"
