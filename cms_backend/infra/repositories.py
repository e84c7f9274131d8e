"""
Repositories typés au-dessus du contrat `DocumentStore`.

Chaque dépôt convertit les documents JSON en entités pydantic et expose les requêtes dont les
services ont besoin. Le stockage (mémoire ou SQL) est choisi au câblage.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from cms_backend.domain.entities import (
    AttributeComponent,
    AttributeDefinition,
    CMSModel,
    Content,
    ContentCollection,
    ContentTranslation,
    TenantLocale,
    utcnow,
)
from cms_backend.infra.repo.store import DocumentStore, Filter, Sort

T = TypeVar("T", bound=CMSModel)

# Contraintes d'unicité portées par chaque famille de documents
UNIQUE_FIELDS: dict[str, tuple[str, ...]] = {
    "collections": ("tenant_id", "slug"),
    "components": ("tenant_id", "key"),
    "attributes": ("content_collection_id", "component_id", "key"),
    "contents": (),
    "translations": ("content_id", "locale"),
    "locales": ("tenant_id", "locale"),
}


class DocumentRepository(Generic[T]):
    """Dépôt générique : (dé)sérialisation d'une entité sur un store."""

    model: type[T]

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def _load(self, doc: Mapping[str, Any] | None) -> T | None:
        return self.model.model_validate(doc) if doc is not None else None

    async def get(self, entity_id: str, **extra: Any) -> T | None:
        """Retourne l'entité `entity_id` (filtre additionnel optionnel, ex. tenant)."""
        return self._load(await self.store.find_one({"id": entity_id, **extra}))

    async def find_one(self, filter: Filter) -> T | None:
        return self._load(await self.store.find_one(filter))

    async def find_many(
        self,
        filter: Filter,
        sort: Sort | None = None,
        limit: int | None = None,
        skip: int = 0,
    ) -> list[T]:
        docs = await self.store.find_many(filter, sort=sort, limit=limit, skip=skip)
        return [self.model.model_validate(d) for d in docs]

    async def insert(self, entity: T) -> T:
        return self.model.model_validate(await self.store.insert_one(entity.to_document()))

    async def save(self, entity: T) -> T | None:
        """Réécrit le document complet de l'entité (`$set`), horodate `updated_at` si présent."""
        if "updated_at" in type(entity).model_fields:
            entity = entity.model_copy(update={"updated_at": utcnow()})
        doc = entity.to_document()
        doc.pop("id", None)
        return self._load(await self.store.find_one_and_update({"id": entity.id}, {"$set": doc}))

    async def set_fields(self, entity_id: str, **values: Any) -> T | None:
        """`$set` ciblé sur des valeurs JSON natives (ex. `position`)."""
        return self._load(
            await self.store.find_one_and_update({"id": entity_id}, {"$set": values})
        )

    async def delete(self, entity_id: str) -> bool:
        return await self.store.delete_one({"id": entity_id}) > 0

    async def count(self, filter: Filter) -> int:
        return await self.store.count(filter)


class CollectionRepository(DocumentRepository[ContentCollection]):
    model = ContentCollection

    async def get_by_slug(self, tenant_id: str, slug: str) -> ContentCollection | None:
        return await self.find_one({"tenant_id": tenant_id, "slug": slug})

    async def list_for_tenant(self, tenant_id: str) -> list[ContentCollection]:
        return await self.find_many({"tenant_id": tenant_id}, sort=[("slug", 1)])


class ComponentRepository(DocumentRepository[AttributeComponent]):
    model = AttributeComponent

    async def get_by_key(self, tenant_id: str, key: str) -> AttributeComponent | None:
        return await self.find_one({"tenant_id": tenant_id, "key": key})

    async def list_for_tenant(self, tenant_id: str) -> list[AttributeComponent]:
        return await self.find_many({"tenant_id": tenant_id}, sort=[("category", 1), ("key", 1)])


class AttributeRepository(DocumentRepository[AttributeDefinition]):
    """Définitions d'attributs ; sert aussi de source au compilateur de schéma."""

    model = AttributeDefinition

    def __init__(self, store: DocumentStore, components: ComponentRepository) -> None:
        super().__init__(store)
        self._components = components

    @staticmethod
    def owner_filter(
        collection_id: str | None = None, component_id: str | None = None
    ) -> dict[str, Any]:
        if component_id is not None:
            return {"component_id": component_id}
        return {"content_collection_id": collection_id, "component_id": None}

    async def list_for_owner(
        self, collection_id: str | None = None, component_id: str | None = None
    ) -> list[AttributeDefinition]:
        return await self.find_many(
            self.owner_filter(collection_id, component_id), sort=[("position", 1)]
        )

    async def list_for_collection(self, collection_id: str) -> list[AttributeDefinition]:
        return await self.list_for_owner(collection_id=collection_id)

    async def list_for_component(self, component_id: str) -> list[AttributeDefinition]:
        return await self.list_for_owner(component_id=component_id)

    async def get_component(self, component_id: str) -> AttributeComponent | None:
        return await self._components.get(component_id)

    async def count_references(self, component_id: str) -> int:
        return await self.count({"component_ref_id": component_id})


class ContentRepository(DocumentRepository[Content]):
    model = Content

    async def list_for_collection(self, collection_id: str) -> list[Content]:
        return await self.find_many(
            {"content_collection_id": collection_id}, sort=[("position", 1), ("created_at", 1)]
        )

    async def max_position(self, collection_id: str) -> int | None:
        last = await self.find_many(
            {"content_collection_id": collection_id}, sort=[("position", -1)], limit=1
        )
        return last[0].position if last else None


class TranslationRepository(DocumentRepository[ContentTranslation]):
    model = ContentTranslation

    async def get_for_locale(self, content_id: str, locale: str) -> ContentTranslation | None:
        return await self.find_one({"content_id": content_id, "locale": locale})


class LocaleRepository(DocumentRepository[TenantLocale]):
    model = TenantLocale

    async def list_for_tenant(self, tenant_id: str) -> list[TenantLocale]:
        return await self.find_many({"tenant_id": tenant_id}, sort=[("locale", 1)])

    async def get_default(self, tenant_id: str) -> TenantLocale | None:
        return await self.find_one({"tenant_id": tenant_id, "is_default": True})

    async def get_by_locale(self, tenant_id: str, locale: str) -> TenantLocale | None:
        return await self.find_one({"tenant_id": tenant_id, "locale": locale})
