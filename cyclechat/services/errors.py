"""Hiérarchie des erreurs levées par les services CycleChat."""

from __future__ import annotations

from typing import Any


class ServiceError(RuntimeError):
    """Erreur générique levée lors des échanges avec le backend."""


class NetworkError(ServiceError):
    """Aucune réponse reçue (connexion refusée, délai dépassé...)."""


class HttpError(ServiceError):
    """Le backend a répondu avec un statut hors 2xx."""

    def __init__(self, message: str, status_code: int, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthError(HttpError):
    """Identifiants refusés ou jeton absent/invalide (401/403)."""

    def __init__(self, message: str, status_code: int = 401, body: Any = None) -> None:
        super().__init__(message, status_code, body)


class ServerError(HttpError):
    """Erreur côté serveur ou statut inattendu."""


class ValidationError(ServiceError):
    """Données refusées avant tout envoi au backend."""


class ProtocolError(ServiceError):
    """Réponse 2xx dont le contenu ne correspond pas au format attendu."""


class SessionBusyError(ServiceError):
    """Action refusée pendant l'initialisation de la session."""
