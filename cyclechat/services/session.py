"""Cycle de vie de la session utilisateur."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Callable

from cyclechat.models import AuthResult, User
from cyclechat.navigation import Navigator, View
from cyclechat.scheduler import Dispatcher, InlineDispatcher, failed
from cyclechat.services.auth_api import AuthGateway
from cyclechat.services.errors import SessionBusyError
from cyclechat.services.http_client import UnauthorizedMiddleware
from cyclechat.state import Observable, Session, SessionPhase
from cyclechat.storage import TokenStore

logger = logging.getLogger(__name__)


class SessionManager:
    """Détient l'état d'authentification et ses transitions.

    Transitions possibles :

    * ``initialize`` : uninitialized -> loading -> authenticated | anonymous
    * ``login`` : anonymous -> authenticated (inchangé en cas d'échec)
    * ``logout`` : * -> anonymous, puis retour à la vue de connexion

    Les appels au backend passent par ``dispatcher`` ; chaque opération
    retourne un ``Future`` résolu sur le thread de l'interface, où ont lieu
    toutes les transitions.
    """

    def __init__(
        self,
        auth: AuthGateway,
        store: TokenStore,
        navigator: Navigator,
        *,
        dispatcher: Dispatcher | None = None,
        unauthorized: UnauthorizedMiddleware | None = None,
    ) -> None:
        self._auth = auth
        self._store = store
        self._navigator = navigator
        self._dispatcher = dispatcher or InlineDispatcher()
        self._session = Session()
        self._login_pending = False
        self._observers: Observable[Session] = Observable()
        if unauthorized is not None:
            unauthorized.subscribe(lambda _response: self._on_token_rejected())

    @property
    def session(self) -> Session:
        return self._session

    @property
    def user(self) -> User | None:
        return self._session.user

    @property
    def loading(self) -> bool:
        return self._session.loading

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def login_pending(self) -> bool:
        return self._login_pending

    def subscribe(self, listener: Callable[[Session], None]) -> Callable[[], None]:
        """Prévient ``listener`` après chaque transition ; retourne le désabonnement."""
        return self._observers.subscribe(listener)

    def _set(self, session: Session) -> None:
        self._session = session
        logger.debug("Session : %s", session.phase.value)
        self._observers.notify(session)

    # ------------------------------------------------------------- Transitions -
    def initialize(self) -> Future[Session]:
        """Restaure la session depuis le jeton stocké, une seule fois."""
        result: Future[Session] = Future()
        if self._session.phase is not SessionPhase.UNINITIALIZED:
            logger.warning("Session déjà initialisée, appel ignoré.")
            result.set_result(self._session)
            return result

        self._set(Session(phase=SessionPhase.LOADING))
        if not self._store.get():
            self._set(Session.anonymous())
            result.set_result(self._session)
            return result

        def restored(done: Future[User]) -> None:
            error = done.exception()
            if error is None:
                user = done.result()
                logger.info("Session restaurée pour %s", user.username)
                self._set(Session.authenticated(user))
            else:
                logger.info("Jeton stocké refusé (%s), session anonyme.", error)
                self._store.clear()
                self._set(Session.anonymous())
            result.set_result(self._session)

        self._dispatcher.submit(self._auth.get_current_user, restored)
        return result

    def login(self, username: str, password: str) -> Future[Session]:
        """Authentifie l'utilisateur.

        Le ``Future`` retourné porte l'erreur éventuelle ; dans ce cas l'état
        et le jeton stocké sont ceux d'avant l'appel.
        """
        if self._session.phase is SessionPhase.LOADING:
            return failed(SessionBusyError("Initialisation de la session en cours."))
        if self._login_pending:
            return failed(SessionBusyError("Connexion déjà en cours."))

        self._login_pending = True
        result: Future[Session] = Future()

        def finish(error: BaseException | None = None) -> None:
            self._login_pending = False
            if error is None:
                result.set_result(self._session)
            else:
                result.set_exception(error)

        def identified(done: Future[User]) -> None:
            error = done.exception()
            if error is not None:
                self._store.clear()
                finish(error)
                return
            user = done.result()
            logger.info("Connecté en tant que %s (%s)", user.username, user.role)
            self._set(Session.authenticated(user))
            finish()

        def logged_in(done: Future[AuthResult]) -> None:
            error = done.exception()
            if error is not None:
                finish(error)
                return
            self._store.set(done.result().access_token)
            self._dispatcher.submit(self._auth.get_current_user, identified)

        self._dispatcher.submit(lambda: self._auth.login(username, password), logged_in)
        return result

    def logout(self) -> Future[Session]:
        """Déconnecte l'utilisateur, même si le backend ne répond pas."""
        result: Future[Session] = Future()

        def done(outcome: Future[None]) -> None:
            error = outcome.exception()
            if error is not None:
                # TODO: confirmer avec le backend si une session serveur reste ouverte dans ce cas
                logger.warning("Déconnexion côté serveur impossible : %s", error)
            self._store.clear()
            self._set(Session.anonymous())
            self._navigator.navigate(View.LOGIN)
            result.set_result(self._session)

        self._dispatcher.submit(self._auth.logout, done)
        return result

    def _on_token_rejected(self) -> None:
        if self._session.is_authenticated:
            logger.info("Jeton expiré, session terminée.")
            self._set(Session.anonymous())
