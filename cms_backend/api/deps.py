"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Donner accès au conteneur attaché à l'application (`app.state.container`).
- Résoudre l'acteur courant depuis `Authorization: Bearer` ou le cookie d'authentification.
- Exposer `require(permission)` pour protéger les routes de mutation et de lecture.
"""

from collections.abc import Awaitable, Callable

from fastapi import Depends, Request

from cms_backend.core.container import Container
from cms_backend.domain.auth import decode_token
from cms_backend.domain.errors import UnauthorizedError
from cms_backend.domain.permissions import Actor, Permission, require_permission


def get_container(request: Request) -> Container:
    return request.app.state.container


def _extract_token(request: Request, cookie_name: str) -> str | None:
    header = request.headers.get("Authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return request.cookies.get(cookie_name)


def get_actor(request: Request, container: Container = Depends(get_container)) -> Actor:
    """Décode le token ; lève `UnauthorizedError` s'il est absent ou invalide."""
    settings = container.settings
    token = _extract_token(request, settings.AUTH_COOKIE_NAME)
    if not token:
        raise UnauthorizedError("missing access token")
    data = decode_token(token, settings.JWT_SECRET, settings.JWT_ALG)
    if data is None:
        raise UnauthorizedError("invalid or expired access token")
    return data.to_actor()


def require(permission: Permission) -> Callable[..., Awaitable[Actor]]:
    """Dépendance FastAPI : acteur courant possédant `permission`."""

    async def dependency(actor: Actor = Depends(get_actor)) -> Actor:
        require_permission(actor, permission)
        return actor

    return dependency
