"""
Entités du domaine de gestion de contenus.

Ce module définit les documents persistés (collections, définitions d'attributs, composants,
contenus, traductions, locales) ainsi que les payloads d'entrée acceptés par les services.

Les champs sont en snake_case côté Python ; les payloads JSON acceptent aussi le camelCase
(`attributeType`, `enumValues`, `minLength`...) via un générateur d'alias.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cms_backend.domain.identifiers import new_id


def utcnow() -> datetime:
    """Horodatage UTC courant."""
    return datetime.now(UTC)


class CMSModel(BaseModel):
    """Base commune : alias camelCase, population par nom accepté."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_document(self) -> dict[str, Any]:
        """Représentation JSON-compatible utilisée par les stores."""
        return self.model_dump(mode="json")


class AttributeKind(str, Enum):
    PRIMITIVE = "primitive"
    COMPONENT = "component"


class SchemaType(str, Enum):
    PRIMITIVE = "primitive"
    ARRAY = "array"


class AttributeType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


class AttributeFormat(str, Enum):
    DATE_TIME = "date-time"
    DATE = "date"
    TIME = "time"
    URI = "uri"
    MEDIA_URI = "media-uri"


class CollectionType(str, Enum):
    SINGLE = "single"
    COLLECTION = "collection"


class ContentStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ValidationRules(CMSModel):
    """Règles optionnelles : longueurs/pattern pour les chaînes, bornes pour les nombres."""

    min_length: int | None = None
    max_length: int | None = None
    minimum: float | None = None
    maximum: float | None = None
    pattern: str | None = None

    def is_empty(self) -> bool:
        return all(v is None for v in self.model_dump().values())


class AttributeDefinition(CMSModel):
    """Définition d'un champ, rattachée soit à une collection soit à un composant.

    Un attribut `component` pointe via `component_ref_id` vers un composant dont les propres
    définitions forment un sous-schéma. `schema_type=array` rend l'attribut répétable.
    """

    id: str = Field(default_factory=new_id)
    tenant_id: str | None = None
    content_collection_id: str | None = None
    component_id: str | None = None
    key: str
    label: str
    kind: AttributeKind = AttributeKind.PRIMITIVE
    schema_type: SchemaType = SchemaType.PRIMITIVE
    attribute_type: AttributeType | None = None
    attribute_format: AttributeFormat | None = None
    component_ref_id: str | None = None
    required: bool = False
    enum_values: list[str] | None = None
    validation: ValidationRules | None = None
    default_value: Any = None
    inherit_default: bool = False
    translatable: bool = True
    position: int = 0
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None


class AttributeComponent(CMSModel):
    """Gabarit réutilisable regroupant des définitions d'attributs."""

    id: str = Field(default_factory=new_id)
    tenant_id: str
    key: str
    label: str
    category: str
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None


class ContentCollection(CMSModel):
    id: str = Field(default_factory=new_id)
    tenant_id: str
    slug: str
    display_name: str
    type: CollectionType = CollectionType.COLLECTION
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None


class Content(CMSModel):
    id: str = Field(default_factory=new_id)
    tenant_id: str
    content_collection_id: str
    data: dict[str, Any] = Field(default_factory=dict)
    status: ContentStatus = ContentStatus.DRAFT
    position: int = 0
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None


class ContentTranslation(CMSModel):
    id: str = Field(default_factory=new_id)
    tenant_id: str
    content_collection_id: str
    content_id: str
    locale: str
    data: dict[str, Any] = Field(default_factory=dict)
    status: ContentStatus = ContentStatus.DRAFT
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None


class TenantLocale(CMSModel):
    id: str = Field(default_factory=new_id)
    tenant_id: str
    locale: str
    display_name: str
    is_default: bool = False
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class FullContent(Content):
    """Contenu de base enrichi de la vue fusionnée pour une locale (réponse uniquement)."""

    requested_locale: str | None = None
    resolved_locale: str | None = None
    locale_not_found: bool = False
    full_data: dict[str, Any] = Field(default_factory=dict)


class FullContentTranslation(ContentTranslation):
    """Traduction avec, sur demande, sa collection et son contenu de base."""

    content_collection: ContentCollection | None = None
    content: Content | None = None


# --- Payloads d'entrée ---


class CreateCollectionInput(CMSModel):
    tenant_id: str
    slug: str
    display_name: str
    type: CollectionType = CollectionType.COLLECTION


class CreateComponentInput(CMSModel):
    key: str
    label: str
    category: str


class CreatePrimitiveAttributeInput(CMSModel):
    key: str
    label: str
    required: bool = False
    attribute_type: AttributeType
    attribute_format: AttributeFormat | None = None
    schema_type: SchemaType = SchemaType.PRIMITIVE
    enum_values: list[str] | None = None
    validation: ValidationRules | None = None
    default_value: Any = None
    inherit_default: bool = False
    translatable: bool = True


class CreateComponentAttributeInput(CMSModel):
    key: str
    label: str
    required: bool = False
    component_ref_id: str
    schema_type: SchemaType = SchemaType.PRIMITIVE
    translatable: bool = True


class UpdateAttributeInput(CMSModel):
    """Champs modifiables ; seuls ceux explicitement fournis sont appliqués."""

    label: str | None = None
    required: bool | None = None
    enum_values: list[str] | None = None
    validation: ValidationRules | None = None
    default_value: Any = None
    inherit_default: bool | None = None
    translatable: bool | None = None


class CreateContentInput(CMSModel):
    data: dict[str, Any] = Field(default_factory=dict)
    status: ContentStatus = ContentStatus.DRAFT


class UpdateContentInput(CMSModel):
    data: dict[str, Any] | None = None
    status: ContentStatus | None = None


class CreateTranslationInput(CMSModel):
    locale: str
    data: dict[str, Any] = Field(default_factory=dict)
    status: ContentStatus = ContentStatus.DRAFT


class CreateLocaleInput(CMSModel):
    tenant_id: str
    locale: str
    display_name: str
