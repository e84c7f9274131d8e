"""Définition et chargement des paramètres de configuration applicative.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
"""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _resolve_env_file() -> Path | str:
    """Fichier .env retenu : ENV_FILE, sinon .env.{APP_ENV} s'il existe, sinon .env."""
    explicit = os.getenv("ENV_FILE")
    if explicit:
        return explicit
    cwd = Path.cwd()
    specific = cwd / f".env.{os.getenv('APP_ENV', 'dev')}"
    return specific if specific.exists() else cwd / ".env"


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file(),
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )
    APP_NAME: str = "cms-schema-engine"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True

    # None → stores en mémoire ; sinon URL SQLAlchemy async (ex. sqlite+aiosqlite:///./cms.db)
    DATABASE_URL: str | None = None

    # JWT/Auth
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALG: str = "HS256"
    AUTH_COOKIE_NAME: str = "access_token"

    OTLP_ENDPOINT: str | None = None
    LOG_LEVEL: str = "INFO"

    # Garde-fou de profondeur d'imbrication des composants
    MAX_COMPONENT_DEPTH: int = 32
    DEFAULT_PAGE_SIZE: int = 50


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()
