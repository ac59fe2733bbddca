"""Client HTTP configuré pour le backend CycleChat.

Chaque requête traverse une chaîne explicite de middlewares :

* côté requête, des fonctions ``(PreparedRequest, RequestOptions) -> PreparedRequest``
  (ajout du jeton Bearer par exemple) ;
* côté réponse, des fonctions ``(Response, RequestOptions) -> Response``
  exécutées sur toute réponse reçue, y compris les statuts d'erreur
  (traitement global des 401).

Les effets de bord des middlewares n'empêchent pas l'appelant de recevoir
l'erreur correspondante. ``send`` est bloquant : il est appelé depuis un
thread de travail, jamais depuis le thread de l'interface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable

import requests

from cyclechat.config import ClientConfig
from cyclechat.navigation import Navigator, View
from cyclechat.scheduler import Dispatcher, InlineDispatcher
from cyclechat.services.errors import AuthError, NetworkError, ServerError
from cyclechat.state import Observable
from cyclechat.storage import TokenStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RequestOptions:
    """Options d'une requête transmises à chaque middleware.

    ``credential_exchange`` marque l'échange d'identifiants (``/auth/login``) :
    son 401 signifie « identifiants refusés » et ne touche pas au jeton stocké.
    """

    authenticated: bool = True
    credential_exchange: bool = False


RequestMiddleware = Callable[[requests.PreparedRequest, RequestOptions], requests.PreparedRequest]
ResponseMiddleware = Callable[[requests.Response, RequestOptions], requests.Response]

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class BearerTokenMiddleware:
    """Ajoute ``Authorization: Bearer <jeton>`` si un jeton est stocké."""

    def __init__(self, store: TokenStore) -> None:
        self._store = store

    def __call__(
        self, request: requests.PreparedRequest, options: RequestOptions
    ) -> requests.PreparedRequest:
        request.headers.pop("Authorization", None)
        if not options.authenticated:
            return request
        token = self._store.get()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        return request


class UnauthorizedMiddleware:
    """Sur tout 401, efface le jeton et renvoie vers la vue de connexion.

    Seul l'échange d'identifiants en est exempté. Le jeton est effacé
    immédiatement ; la notification et la navigation sont confiées au thread
    de l'interface via ``dispatcher``, ce qui garantit une seule redirection
    pour plusieurs 401 simultanés.
    """

    def __init__(
        self,
        store: TokenStore,
        navigator: Navigator,
        *,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        self._store = store
        self._navigator = navigator
        self._dispatcher = dispatcher or InlineDispatcher()
        self._observers: Observable[requests.Response] = Observable()

    def subscribe(self, listener: Callable[[requests.Response], None]) -> Callable[[], None]:
        """Prévient ``listener`` après chaque jeton invalidé."""
        return self._observers.subscribe(listener)

    def __call__(self, response: requests.Response, options: RequestOptions) -> requests.Response:
        if response.status_code != 401 or options.credential_exchange:
            return response

        logger.warning("401 reçu pour %s, suppression du jeton local.", response.url)
        self._store.clear()
        self._dispatcher.call_soon(lambda: self._redirect(response))
        return response

    def _redirect(self, response: requests.Response) -> None:
        self._observers.notify(response)
        if self._navigator.current is not View.LOGIN:
            self._navigator.navigate(View.LOGIN)


def _error_message(body: Any, default: str) -> str:
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    if isinstance(body, str) and body.strip():
        return body.strip()
    return default


def decode_body(response: requests.Response) -> Any:
    """Retourne le JSON de la réponse, son texte brut, ou None si vide."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiClient:
    """Émetteur de requêtes vers l'API, avec URL de base et en-têtes communs."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = 10.0,
        session: requests.Session | None = None,
        request_middlewares: Iterable[RequestMiddleware] = (),
        response_middlewares: Iterable[ResponseMiddleware] = (),
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(DEFAULT_HEADERS)
        self.request_middlewares: list[RequestMiddleware] = list(request_middlewares)
        self.response_middlewares: list[ResponseMiddleware] = list(response_middlewares)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        store: TokenStore,
        navigator: Navigator,
        *,
        dispatcher: Dispatcher | None = None,
        session: requests.Session | None = None,
    ) -> ApiClient:
        """Construit le client avec la chaîne de middlewares par défaut."""
        return cls(
            config.api_url,
            timeout=config.timeout,
            session=session,
            request_middlewares=[BearerTokenMiddleware(store)],
            response_middlewares=[
                UnauthorizedMiddleware(store, navigator, dispatcher=dispatcher)
            ],
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def unauthorized(self) -> UnauthorizedMiddleware | None:
        """Middleware de gestion des 401, s'il fait partie de la chaîne."""
        for middleware in self.response_middlewares:
            if isinstance(middleware, UnauthorizedMiddleware):
                return middleware
        return None

    def url_for(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def send(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        authenticated: bool = True,
        credential_exchange: bool = False,
    ) -> Any:
        """Envoie une requête et retourne le corps décodé de la réponse.

        Raises:
            NetworkError: aucune réponse reçue (connexion, délai dépassé).
            AuthError: statut 401 ou 403.
            ServerError: tout autre statut hors 2xx.
        """
        options = RequestOptions(
            authenticated=authenticated, credential_exchange=credential_exchange
        )
        url = self.url_for(path)
        prepared = self._session.prepare_request(
            requests.Request(method.upper(), url, json=body)
        )
        for middleware in self.request_middlewares:
            prepared = middleware(prepared, options)

        logger.debug(
            "-> %s %s (jeton : %s)",
            prepared.method,
            url,
            "oui" if "Authorization" in prepared.headers else "non",
        )

        try:
            response = self._session.send(prepared, timeout=self._timeout)
        except requests.Timeout as exc:
            logger.warning("Délai dépassé pour %s %s", prepared.method, url)
            raise NetworkError(f"Délai dépassé pour {url}") from exc
        except requests.RequestException as exc:
            logger.warning("Échec réseau pour %s %s : %s", prepared.method, url, exc)
            raise NetworkError(f"Serveur injoignable ({url})") from exc

        for response_middleware in self.response_middlewares:
            response = response_middleware(response, options)

        payload = decode_body(response)
        status = response.status_code
        logger.debug("<- %s %s", status, url)

        if status in (401, 403):
            raise AuthError(
                _error_message(payload, "Authentification requise."),
                status_code=status,
                body=payload,
            )
        if not response.ok:
            logger.warning("Réponse %s pour %s %s", status, prepared.method, url)
            raise ServerError(
                _error_message(payload, f"Erreur serveur ({status})."),
                status_code=status,
                body=payload,
            )
        return payload

    def get(self, path: str, *, authenticated: bool = True) -> Any:
        return self.send("GET", path, authenticated=authenticated)

    def post(
        self,
        path: str,
        body: Any = None,
        *,
        authenticated: bool = True,
        credential_exchange: bool = False,
    ) -> Any:
        return self.send(
            "POST",
            path,
            body,
            authenticated=authenticated,
            credential_exchange=credential_exchange,
        )

    def close(self) -> None:
        self._session.close()
