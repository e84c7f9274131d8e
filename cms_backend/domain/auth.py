"""
Module de gestion des tokens d'accès.

Ce module fournit la création et la validation des tokens JWT, ainsi que la conversion des claims
en `Actor` (utilisateur, profil, rôle, permissions).
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError
from pydantic import BaseModel

from cms_backend.domain.permissions import Actor, Permission


class TokenData(BaseModel):
    """Données contenues dans un token JWT."""

    sub: str
    profile: str | None = None
    role: str | None = None
    permissions: list[str] = []

    def to_actor(self) -> Actor:
        return Actor(
            user_id=self.sub,
            profile_id=self.profile,
            role=self.role,
            permissions=Permission.parse(self.permissions),
        )


def create_access_token(
    secret: str, alg: str, expires_min: int, payload: dict[str, Any]
) -> str:
    """Crée un token JWT d'accès avec expiration."""
    to_encode = payload.copy()
    expire = datetime.now(UTC) + timedelta(minutes=expires_min)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret, algorithm=alg)


def decode_token(token: str, secret: str, alg: str) -> TokenData | None:
    """Décode et valide un token JWT ; None si invalide ou expiré."""
    try:
        data = jwt.decode(token, secret, algorithms=[alg])
        return TokenData(**data)
    except (InvalidTokenError, ValueError):
        return None
