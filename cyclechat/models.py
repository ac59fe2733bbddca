"""Entités renvoyées par le backend."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

_FRACTION = re.compile(r"(T\d{2}:\d{2}:\d{2})\.(\d+)")


def parse_timestamp(value: str) -> datetime:
    """Convertit un horodatage ISO 8601 (suffixe ``Z`` accepté).

    Les fractions de seconde sont ramenées à six chiffres : le backend en
    émet de une à neuf selon l'instant, ce que ``fromisoformat`` refuse
    avant Python 3.11.
    """
    text = _FRACTION.sub(
        lambda match: f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}",
        value.strip().replace("Z", "+00:00"),
    )
    return datetime.fromisoformat(text)


@dataclass(frozen=True, slots=True)
class User:
    """Utilisateur courant tel que renvoyé par ``/auth/me``."""

    id: int
    username: str
    role: str
    created_at: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> User:
        return cls(
            id=int(payload["id"]),
            username=str(payload["username"]),
            role=str(payload.get("role") or ""),
            created_at=payload.get("createdAt"),
        )


@dataclass(frozen=True, slots=True)
class AuthResult:
    """Réponse de ``/auth/login``."""

    access_token: str
    token_type: str
    expires_in: int
    username: str
    role: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> AuthResult:
        token = payload["accessToken"]
        if not isinstance(token, str) or not token:
            raise ValueError("accessToken manquant dans la réponse.")
        return cls(
            access_token=token,
            token_type=str(payload.get("tokenType") or "Bearer"),
            expires_in=int(payload.get("expiresIn") or 0),
            username=str(payload.get("username") or ""),
            role=str(payload.get("role") or ""),
        )


@dataclass(frozen=True, slots=True)
class Author:
    """Auteur d'un message (sans données sensibles)."""

    id: int
    username: str
    role: str = ""


@dataclass(frozen=True, slots=True)
class Message:
    """Message court stocké par le backend."""

    id: int
    content: str
    timestamp: str
    author: Author | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Message:
        author_payload = payload.get("author")
        author = None
        if isinstance(author_payload, Mapping) and "username" in author_payload:
            author = Author(
                id=int(author_payload.get("id") or 0),
                username=str(author_payload["username"]),
                role=str(author_payload.get("role") or ""),
            )
        return cls(
            id=int(payload["id"]),
            content=str(payload["content"]),
            timestamp=str(payload["timestamp"]),
            author=author,
        )

    @property
    def sent_at(self) -> datetime | None:
        """Horodatage converti, ou None s'il est illisible."""
        try:
            return parse_timestamp(self.timestamp)
        except ValueError:
            return None

    def display_text(self) -> str:
        """Texte affiché dans la liste des messages."""
        sent_at = self.sent_at
        prefix = f"[{sent_at:%H:%M}] " if sent_at else ""
        if self.author:
            return f"{prefix}{self.author.username} : {self.content}"
        return f"{prefix}{self.content}"
