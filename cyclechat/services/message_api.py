"""Opérations sur les messages et vérification de santé du backend."""

from __future__ import annotations

from typing import Any

from cyclechat.models import Message
from cyclechat.services.errors import ProtocolError, ValidationError
from cyclechat.services.http_client import ApiClient

MAX_CONTENT_LENGTH = 1000


def validate_content(content: str) -> str:
    """Retourne le contenu nettoyé ou lève ``ValidationError``."""
    cleaned = (content or "").strip()
    if not cleaned:
        raise ValidationError("Le message ne peut pas être vide.")
    if len(cleaned) > MAX_CONTENT_LENGTH:
        raise ValidationError(
            f"Le message dépasse {MAX_CONTENT_LENGTH} caractères ({len(cleaned)})."
        )
    return cleaned


def _to_message(payload: Any) -> Message:
    try:
        return Message.from_payload(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise ProtocolError("Message illisible dans la réponse du serveur.") from exc


class MessageGateway:
    """Accès typé à ``/messages`` et ``/health``."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def create(self, content: str) -> Message:
        """Publie un message ; le serveur attribue l'identifiant et l'horodatage."""
        cleaned = validate_content(content)
        return _to_message(self._client.post("/messages", {"content": cleaned}))

    def get_all(self) -> list[Message]:
        payload = self._client.get("/messages")
        if not isinstance(payload, list):
            raise ProtocolError("La liste des messages est illisible.")
        return [_to_message(item) for item in payload]

    def get_by_id(self, message_id: int) -> Message:
        return _to_message(self._client.get(f"/messages/{int(message_id)}"))

    def health(self) -> str:
        """Vérifie que le backend répond ; seul le succès compte."""
        payload = self._client.get("/health", authenticated=False)
        return payload if isinstance(payload, str) else str(payload)
