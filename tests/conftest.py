"""Configuration de test pour pytest avec gestion des chemins.

Ce module configure pytest pour résoudre les imports `cms_backend` en ajoutant la racine du projet
au sys.path, et fournit un conteneur câblé sur des stores en mémoire ainsi que
le constructeur de fixtures métier (`tests/builders.py`).
"""

import os
import sys

import pytest

# Ensure project root is on sys.path so that
# imports like `from cms_backend...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from cms_backend.core.container import Container  # noqa: E402
from cms_backend.core.settings import Settings  # noqa: E402
from cms_backend.domain.auth import create_access_token  # noqa: E402
from tests.builders import CmsBuilder  # noqa: E402

JWT_SECRET = "test-secret"


@pytest.fixture
def settings() -> Settings:
    """Settings de test : stockage mémoire, logs peu bavards."""
    return Settings(
        DATABASE_URL=None,
        APP_ENV="test",
        LOG_LEVEL="WARNING",
        JWT_SECRET=JWT_SECRET,
        OTLP_ENDPOINT=None,
    )


@pytest.fixture
def container(settings: Settings) -> Container:
    return Container(settings)


@pytest.fixture
def build(container: Container) -> CmsBuilder:
    return CmsBuilder(container)


@pytest.fixture
def make_token():
    """Fabrique de tokens JWT signés avec le secret de test."""

    def _make(permissions=(), role: str | None = None, sub: str = "user-1") -> str:
        payload = {"sub": sub, "profile": f"profile-{sub}", "permissions": list(permissions)}
        if role:
            payload["role"] = role
        return create_access_token(JWT_SECRET, "HS256", 15, payload)

    return _make
