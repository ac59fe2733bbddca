"""Surveillance périodique de la disponibilité du backend."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Callable

from cyclechat.scheduler import Dispatcher, InlineDispatcher, RepeatingTask, Scheduler
from cyclechat.services.message_api import MessageGateway
from cyclechat.state import Observable, ServerStatus

logger = logging.getLogger(__name__)

HEALTH_INTERVAL_MS = 5000


class ServerStatusPoller:
    """Interroge ``/health`` au démarrage puis à intervalle fixe.

    Un seul résultat suffit à basculer le statut, sans hystérésis. Chaque
    entrée dans l'état ``online`` déclenche ``on_online``. Un seul appel est
    en vol à la fois ; les réponses arrivées après ``stop()`` sont ignorées.
    """

    def __init__(
        self,
        gateway: MessageGateway,
        scheduler: Scheduler,
        *,
        dispatcher: Dispatcher | None = None,
        interval_ms: int = HEALTH_INTERVAL_MS,
        on_online: Callable[[], None] | None = None,
    ) -> None:
        self._gateway = gateway
        self._scheduler = scheduler
        self._dispatcher = dispatcher or InlineDispatcher()
        self._interval_ms = interval_ms
        self._on_online = on_online
        self._status = ServerStatus.CHECKING
        self._task: RepeatingTask | None = None
        self._generation = 0
        self._in_flight = False
        self._observers: Observable[ServerStatus] = Observable()

    @property
    def status(self) -> ServerStatus:
        return self._status

    @property
    def running(self) -> bool:
        return self._task is not None

    def subscribe(self, listener: Callable[[ServerStatus], None]) -> Callable[[], None]:
        return self._observers.subscribe(listener)

    def start(self) -> None:
        """Vérifie immédiatement puis répète toutes les ``interval_ms`` ms."""
        if self._task is not None:
            return
        self._status = ServerStatus.CHECKING
        self._observers.notify(self._status)
        self._task = self._scheduler.call_every(self._interval_ms, self.check)
        self.check()

    def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        self._generation += 1
        self._in_flight = False
        logger.debug("Surveillance du serveur arrêtée.")

    def check(self) -> None:
        if self._in_flight:
            logger.debug("Vérification précédente toujours en cours, tour sauté.")
            return
        self._in_flight = True
        generation = self._generation
        self._dispatcher.submit(
            self._gateway.health,
            lambda done: self._on_health(generation, done),
        )

    def _on_health(self, generation: int, done: Future[str]) -> None:
        if generation != self._generation:
            return
        self._in_flight = False
        error = done.exception()
        if error is not None:
            logger.debug("Vérification de santé en échec : %s", error)
            self._transition(ServerStatus.OFFLINE)
        else:
            self._transition(ServerStatus.ONLINE)

    def _transition(self, status: ServerStatus) -> None:
        if status is self._status:
            return
        logger.info("Statut du serveur : %s -> %s", self._status.value, status.value)
        self._status = status
        self._observers.notify(status)
        if status is ServerStatus.ONLINE and self._on_online is not None:
            self._on_online()
