"""Stockage local du jeton d'accès."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    """Stockage clé-valeur réduit à un seul jeton."""

    def get(self) -> str | None: ...

    def set(self, token: str) -> None: ...

    def clear(self) -> None: ...


class FileTokenStore:
    """Conserve le jeton brut dans un fichier local."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> str | None:
        try:
            token = self._path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return token or None

    def set(self, token: str) -> None:
        self._path.write_text(token, encoding="utf-8")
        try:
            os.chmod(self._path, 0o600)
        except OSError:
            logger.debug("Impossible de restreindre les droits de %s", self._path)

    def clear(self) -> None:
        try:
            os.remove(self._path)
        except FileNotFoundError:
            pass


class MemoryTokenStore:
    """Jeton conservé en mémoire, sans persistance."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def get(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None
