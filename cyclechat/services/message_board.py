"""Liste des messages affichés et envoi conditionné au statut du serveur."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Callable

from cyclechat.models import Message
from cyclechat.scheduler import Dispatcher, InlineDispatcher, failed
from cyclechat.services.errors import ValidationError
from cyclechat.services.message_api import MessageGateway, validate_content
from cyclechat.state import Observable, ServerStatus

logger = logging.getLogger(__name__)


class MessageBoard:
    """Séquence ordonnée des messages de la session en cours.

    Les réponses sont appliquées dans leur ordre d'arrivée : un rechargement
    remplace la liste, une création ajoute à la liste courante. La dernière
    réponse arrivée l'emporte. Après ``clear()``, les réponses encore en vol
    ne modifient plus la liste.
    """

    def __init__(self, gateway: MessageGateway, dispatcher: Dispatcher | None = None) -> None:
        self._gateway = gateway
        self._dispatcher = dispatcher or InlineDispatcher()
        self._messages: list[Message] = []
        self._status = ServerStatus.CHECKING
        self._generation = 0
        self._observers: Observable[list[Message]] = Observable()

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    @property
    def status(self) -> ServerStatus:
        return self._status

    @property
    def can_send(self) -> bool:
        return self._status is ServerStatus.ONLINE

    def subscribe(self, listener: Callable[[list[Message]], None]) -> Callable[[], None]:
        return self._observers.subscribe(listener)

    def set_status(self, status: ServerStatus) -> None:
        self._status = status

    def reload(self) -> Future[list[Message]]:
        """Remplace la liste par celle du serveur ; inchangée en cas d'erreur."""
        result: Future[list[Message]] = Future()
        generation = self._generation

        def loaded(done: Future[list[Message]]) -> None:
            error = done.exception()
            if error is not None:
                result.set_exception(error)
                return
            if generation == self._generation:
                self._messages = list(done.result())
                logger.debug("%d message(s) chargé(s)", len(self._messages))
                self._observers.notify(self.messages)
            result.set_result(self.messages)

        self._dispatcher.submit(self._gateway.get_all, loaded)
        return result

    def send(self, content: str) -> Future[Message]:
        try:
            validate_content(content)
        except ValidationError as exc:
            return failed(exc)
        if not self.can_send:
            return failed(ValidationError("Serveur hors ligne, envoi impossible."))

        result: Future[Message] = Future()
        generation = self._generation

        def created(done: Future[Message]) -> None:
            error = done.exception()
            if error is not None:
                result.set_exception(error)
                return
            message = done.result()
            if generation == self._generation:
                self._messages.append(message)
                self._observers.notify(self.messages)
            result.set_result(message)

        self._dispatcher.submit(lambda: self._gateway.create(content), created)
        return result

    def clear(self) -> None:
        self._generation += 1
        self._messages = []
        self._observers.notify(self.messages)
