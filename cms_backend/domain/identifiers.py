"""Identifiants opaques des documents.

Les ids sont des chaînes hexadécimales de 32 caractères (uuid4). Toute valeur venant de l'extérieur
passe par `validate_id` avant d'atteindre la couche de persistance.
"""

from __future__ import annotations

import re
import uuid

from cms_backend.domain.errors import BadRequestError

_ID_RE = re.compile(r"[0-9a-f]{32}")


def new_id() -> str:
    """Génère un nouvel identifiant unique."""
    return uuid.uuid4().hex


def is_valid_id(value: object) -> bool:
    """Indique si `value` a la forme d'un identifiant."""
    return isinstance(value, str) and _ID_RE.fullmatch(value) is not None


def validate_id(value: object, field: str = "id") -> str:
    """Retourne `value` si c'est un id valide, sinon lève `BadRequestError`."""
    if not is_valid_id(value):
        raise BadRequestError(f"invalid {field}: {value!r}")
    return value  # type: ignore[return-value]
