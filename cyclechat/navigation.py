"""Navigation entre les vues de l'application."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from cyclechat.state import Observable

logger = logging.getLogger(__name__)


class View(str, Enum):
    LOGIN = "login"
    MESSAGES = "messages"


class Navigator:
    """Mémorise la vue courante et prévient les abonnés à chaque changement."""

    def __init__(self, initial: View = View.LOGIN) -> None:
        self._current = initial
        self._observers: Observable[View] = Observable()

    @property
    def current(self) -> View:
        return self._current

    def subscribe(self, listener: Callable[[View], None]) -> Callable[[], None]:
        return self._observers.subscribe(listener)

    def navigate(self, view: View) -> None:
        if view is self._current:
            return
        logger.info("Navigation : %s -> %s", self._current.value, view.value)
        self._current = view
        self._observers.notify(view)
