"""Opérations d'authentification exposées par le backend."""

from __future__ import annotations

import logging

from cyclechat.models import AuthResult, User
from cyclechat.services.errors import AuthError, HttpError, NetworkError, ProtocolError
from cyclechat.services.http_client import ApiClient

logger = logging.getLogger(__name__)


class AuthGateway:
    """Accès typé à ``/auth/*``."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def login(self, username: str, password: str) -> AuthResult:
        """Échange des identifiants contre un jeton d'accès.

        Les identifiants refusés (400/401) comme l'absence de réponse du
        serveur sont signalés par ``AuthError``.
        """
        try:
            payload = self._client.post(
                "/auth/login",
                {"username": username, "password": password},
                authenticated=False,
                credential_exchange=True,
            )
        except NetworkError as exc:
            raise AuthError("Serveur injoignable, connexion impossible.", status_code=0) from exc
        except HttpError as exc:
            if exc.status_code in (400, 401, 403):
                raise AuthError(
                    "Nom d'utilisateur ou mot de passe incorrect.",
                    status_code=exc.status_code,
                    body=exc.body,
                ) from exc
            raise

        try:
            return AuthResult.from_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise ProtocolError("Réponse de connexion inattendue.") from exc

    def logout(self) -> None:
        self._client.post("/auth/logout")

    def get_current_user(self) -> User:
        """Retourne l'utilisateur associé au jeton stocké."""
        payload = self._client.get("/auth/me")
        try:
            return User.from_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise ProtocolError("Profil utilisateur illisible.") from exc
