# Schémas Pydantic exposés par l'API (corps de requêtes).
# Les payloads métier réutilisent les entrées du domaine ; on y ajoute les ids de rattachement.

from typing import Any

from pydantic import Field

from cms_backend.domain.entities import (
    CMSModel,
    CreateComponentAttributeInput,
    CreateComponentInput,
    CreateContentInput,
    CreatePrimitiveAttributeInput,
    CreateTranslationInput,
)


class TenantScoped(CMSModel):
    tenant_id: str


class CollectionAttributeBody(CreatePrimitiveAttributeInput):
    content_collection_id: str


class CollectionComponentAttributeBody(CreateComponentAttributeInput):
    content_collection_id: str


class AttributeListBody(CMSModel):
    content_collection_id: str | None = None
    component_id: str | None = None


class ContentCreateBody(CreateContentInput):
    content_collection_id: str


class ContentListBody(CMSModel):
    content_collection_id: str
    locale: str | None = None


class PositionBody(CMSModel):
    """Ordre complet des contenus ; l'index dans `ids` devient la position."""

    content_collection_id: str
    ids: list[str] = Field(min_length=1)


class TranslationCreateBody(CreateTranslationInput):
    content_collection_id: str
    content_id: str


class TranslationListBody(CMSModel):
    filter: dict[str, Any] = Field(default_factory=dict)
    lookup: list[str] | None = None


class ComponentCreateBody(CreateComponentInput, TenantScoped):
    pass
