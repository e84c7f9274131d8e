"""
Permissions de l'acteur courant.

Ce module définit l'énumération fermée des permissions et le contrôle d'accès par appartenance à
l'ensemble accordé. Le rôle `admin` est toujours autorisé.

Le cœur (compilateur, validateur, services) n'appelle jamais ces fonctions : seules les routes les
utilisent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from cms_backend.domain.errors import ForbiddenError

ADMIN_ROLE = "admin"


class Permission(str, Enum):
    COLLECTION_CREATE = "collection:create"
    COLLECTION_READ = "collection:read"
    COLLECTION_DELETE = "collection:delete"
    ATTRIBUTE_CREATE = "attribute:create"
    ATTRIBUTE_READ = "attribute:read"
    ATTRIBUTE_UPDATE = "attribute:update"
    ATTRIBUTE_DELETE = "attribute:delete"
    CONTENT_CREATE = "content:create"
    CONTENT_READ = "content:read"
    CONTENT_UPDATE = "content:update"
    CONTENT_DELETE = "content:delete"
    TRANSLATION_CREATE = "translation:create"
    TRANSLATION_READ = "translation:read"
    TRANSLATION_DELETE = "translation:delete"
    LOCALE_CREATE = "locale:create"
    LOCALE_READ = "locale:read"

    @classmethod
    def parse(cls, values: list[str]) -> frozenset[Permission]:
        """Convertit des chaînes en permissions ; les valeurs inconnues sont ignorées."""
        known = {p.value: p for p in cls}
        return frozenset(known[v] for v in values if v in known)


@dataclass(frozen=True)
class Actor:
    """Acteur courant : alimente les champs d'audit et le contrôle d'accès."""

    user_id: str
    profile_id: str | None = None
    role: str | None = None
    permissions: frozenset[Permission] = field(default_factory=frozenset)

    @property
    def audit_id(self) -> str:
        return self.profile_id or self.user_id

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def has_permission(actor: Actor, permission: Permission) -> bool:
    if actor.is_admin:
        return True
    return permission in actor.permissions


def require_permission(actor: Actor, permission: Permission) -> None:
    """
    Vérifie que l'acteur possède la permission demandée.

    Raises:
        ForbiddenError: si la permission n'est pas accordée.
    """
    if not has_permission(actor, permission):
        raise ForbiddenError(
            f"missing_permission:{permission.value}", {"permission": permission.value}
        )
