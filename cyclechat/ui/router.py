"""Routage entre les vues, indépendant de Tkinter.

Garde l'accès à la vue des messages, y monte la surveillance du serveur et
la démonte en la quittant.
"""

from __future__ import annotations

import logging
from typing import Callable

from cyclechat.navigation import Navigator, View
from cyclechat.services import MessageBoard, ServerStatusPoller, SessionManager
from cyclechat.state import ServerStatus, Session

logger = logging.getLogger(__name__)


class ViewRouter:
    def __init__(
        self,
        session: SessionManager,
        navigator: Navigator,
        poller: ServerStatusPoller,
        board: MessageBoard,
    ) -> None:
        self._session = session
        self._navigator = navigator
        self._poller = poller
        self._board = board
        self._unsubscribers: list[Callable[[], None]] = [
            session.subscribe(self._on_session_changed),
            navigator.subscribe(self._on_view_changed),
            poller.subscribe(self._on_status_changed),
        ]

    def _on_session_changed(self, session: Session) -> None:
        if session.loading:
            return
        self._navigator.navigate(View.MESSAGES if session.is_authenticated else View.LOGIN)

    def _on_view_changed(self, view: View) -> None:
        if view is View.MESSAGES:
            if not self._session.is_authenticated:
                logger.debug("Vue des messages refusée sans session.")
                self._navigator.navigate(View.LOGIN)
                return
            self._poller.start()
        else:
            self._poller.stop()
            self._board.clear()

    def _on_status_changed(self, status: ServerStatus) -> None:
        self._board.set_status(status)

    def close(self) -> None:
        self._poller.stop()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
