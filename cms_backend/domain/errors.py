"""
Taxonomie des erreurs métier du moteur de contenus.

Ce module définit les exceptions levées par le cœur (compilateur de schéma, validateur, services
d'orchestration). Elles ne dépendent pas de FastAPI : la couche `apigw` se charge de les traduire en
réponses HTTP avec l'enveloppe standard.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class Violation:
    """Une violation de contrainte relevée par le validateur.

    Attributs
    - path: chemin pointé vers le champ (ex. `address.zip`, `items.0.title`).
    - code: `required` | `type` | `validation` | `enum` | `format`.
    - message: description lisible.
    """

    path: str
    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        """Sérialise la violation pour les réponses API."""
        return asdict(self)


class CMSError(Exception):
    """Erreur racine du domaine, porte un code stable et des détails optionnels."""

    code = "CMS_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class BadRequestError(CMSError):
    code = "BAD_REQUEST"


class UnauthorizedError(CMSError):
    code = "UNAUTHORIZED"


class ForbiddenError(CMSError):
    code = "FORBIDDEN"


class NotFoundError(CMSError):
    code = "NOT_FOUND"


class ConflictError(CMSError):
    code = "CONFLICT"


class PositionConflictError(ConflictError):
    """Lot de réordonnancement contenant des ids étrangers à la collection."""

    code = "POSITION_CONFLICT"

    def __init__(self, message: str, foreign_ids: list[str] | None = None) -> None:
        super().__init__(message, {"foreign_ids": foreign_ids or []})
        self.foreign_ids = foreign_ids or []


class SchemaError(CMSError):
    """Graphe d'attributs mal formé : faute de configuration, jamais rejouée."""

    code = "SCHEMA_ERROR"


class SchemaCycleError(SchemaError):
    code = "SCHEMA_CYCLE"

    def __init__(self, message: str, chain: list[str] | None = None) -> None:
        super().__init__(message, {"chain": chain or []})
        self.chain = chain or []


class SchemaReferenceError(SchemaError):
    code = "SCHEMA_REFERENCE"

    def __init__(self, message: str, component_id: str | None = None) -> None:
        super().__init__(message, {"component_id": component_id})
        self.component_id = component_id


class ValidationError(CMSError):
    """Le payload ne respecte pas le schéma compilé.

    Toutes les violations sont collectées (pas d'arrêt à la première) afin que l'appelant les voie
    en une seule réponse.
    """

    code = "VALIDATION_ERROR"

    def __init__(self, violations: list[Violation] | str) -> None:
        if isinstance(violations, str):
            violations = [Violation(path="", code="validation", message=violations)]
        self.violations = list(violations)
        summary = ", ".join(
            f"{v.path}: {v.message}" if v.path else v.message for v in self.violations
        )
        super().__init__(
            f"Data validation failed: {summary}",
            {"violations": [v.to_dict() for v in self.violations]},
        )
