"""Structures de données partagées entre la couche UI et les services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, TypeVar

from cyclechat.models import User

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Observable(Generic[T]):
    """Liste d'abonnés notifiés à chaque changement d'état."""

    def __init__(self) -> None:
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """Enregistre un abonné et retourne la fonction de désabonnement."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, value: T) -> None:
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                logger.exception("Un abonné a échoué lors de la notification.")


class SessionPhase(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True, slots=True)
class Session:
    """Instantané de l'état d'authentification."""

    phase: SessionPhase = SessionPhase.UNINITIALIZED
    user: User | None = None

    @property
    def loading(self) -> bool:
        return self.phase in (SessionPhase.UNINITIALIZED, SessionPhase.LOADING)

    @property
    def is_authenticated(self) -> bool:
        """Retourne True si l'utilisateur est authentifié."""
        return self.user is not None

    @classmethod
    def anonymous(cls) -> Session:
        return cls(phase=SessionPhase.ANONYMOUS)

    @classmethod
    def authenticated(cls, user: User) -> Session:
        return cls(phase=SessionPhase.AUTHENTICATED, user=user)


class ServerStatus(str, Enum):
    CHECKING = "checking"
    ONLINE = "online"
    OFFLINE = "offline"
