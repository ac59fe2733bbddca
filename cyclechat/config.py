"""Gestion centralisée de la configuration du client CycleChat."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:8080/api"
DEFAULT_TIMEOUT = 10.0
DEFAULT_TOKEN_PATH = ".cyclechat_token"
DEFAULT_HEALTH_INTERVAL_MS = 5000
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(RuntimeError):
    """Erreur levée lorsque la configuration est invalide."""


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Paramètres nécessaires pour dialoguer avec le backend."""

    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    token_path: str = DEFAULT_TOKEN_PATH
    health_interval_ms: int = DEFAULT_HEALTH_INTERVAL_MS
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        if not self.api_url.startswith(("http://", "https://")):
            raise ConfigError(f"URL d'API invalide : {self.api_url!r}")
        if self.timeout <= 0:
            raise ConfigError("Le délai d'attente doit être strictement positif.")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"Niveau de journalisation inconnu : {self.log_level!r}")
        if self.health_interval_ms <= 0:
            raise ConfigError("L'intervalle de vérification doit être strictement positif.")


def _read_number(name: str, default: float, cast: type) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} doit être un nombre (reçu {raw!r}).") from exc


def load_config() -> ClientConfig:
    """Charge la configuration depuis l'environnement."""
    load_dotenv()

    api_url = os.getenv("CYCLECHAT_API_URL", DEFAULT_API_URL).rstrip("/")
    timeout = _read_number("CYCLECHAT_TIMEOUT", DEFAULT_TIMEOUT, float)
    token_path = os.getenv("CYCLECHAT_TOKEN_PATH", DEFAULT_TOKEN_PATH)
    interval = _read_number("CYCLECHAT_HEALTH_INTERVAL_MS", DEFAULT_HEALTH_INTERVAL_MS, int)
    log_level = os.getenv("CYCLECHAT_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    return ClientConfig(
        api_url=api_url,
        timeout=timeout,
        token_path=token_path,
        health_interval_ms=interval,
        log_level=log_level,
    )
