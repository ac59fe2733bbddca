"""Abstractions de planification : tâches répétitives et appels hors du thread UI.

Les services n'accèdent jamais au réseau depuis le thread de l'interface :
ils confient l'appel bloquant à un ``Dispatcher`` qui l'exécute ailleurs puis
rappelle ``on_done`` sur le thread de l'interface. Toutes les transitions
d'état ont donc lieu sur ce seul thread.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Callable, Protocol, TypeVar

T = TypeVar("T")


class RepeatingTask(Protocol):
    """Poignée d'une tâche répétée, annulable."""

    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_every(self, interval_ms: int, callback: Callable[[], None]) -> RepeatingTask:
        """Appelle ``callback`` toutes les ``interval_ms`` millisecondes."""
        ...


class Dispatcher(Protocol):
    def submit(self, call: Callable[[], T], on_done: Callable[[Future[T]], None]) -> None:
        """Exécute ``call`` hors du thread UI, puis ``on_done`` sur le thread UI."""
        ...

    def call_soon(self, callback: Callable[[], None]) -> None:
        """Exécute ``callback`` sur le thread UI, depuis n'importe quel thread."""
        ...


class InlineDispatcher:
    """Exécute tout immédiatement dans le thread appelant.

    Convient aux usages sans boucle d'événements (scripts, tests).
    """

    def submit(self, call: Callable[[], T], on_done: Callable[[Future[T]], None]) -> None:
        future: Future[T] = Future()
        try:
            future.set_result(call())
        except Exception as exc:
            future.set_exception(exc)
        on_done(future)

    def call_soon(self, callback: Callable[[], None]) -> None:
        callback()


def failed(exc: BaseException) -> Future:
    future: Future = Future()
    future.set_exception(exc)
    return future
