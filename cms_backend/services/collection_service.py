# ============================================================
# Module : cms_backend/services/collection_service.py
# Objet  : Cycle de vie des collections de contenus.
# Invariants :
#  - slug unique par tenant (pré-contrôle + contrainte du store).
#  - Suppression refusée tant que la collection contient des contenus.
# ============================================================

from __future__ import annotations

import re

import structlog

from cms_backend.domain.entities import ContentCollection, CreateCollectionInput
from cms_backend.domain.errors import ConflictError, NotFoundError, ValidationError
from cms_backend.domain.identifiers import validate_id
from cms_backend.infra.repositories import (
    AttributeRepository,
    CollectionRepository,
    ContentRepository,
)

SLUG_RE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


class CollectionService:
    def __init__(
        self,
        collections: CollectionRepository,
        contents: ContentRepository,
        attributes: AttributeRepository,
    ) -> None:
        self.collections = collections
        self.contents = contents
        self.attributes = attributes
        self._log = structlog.get_logger(__name__).bind(component="collection_service")

    async def create(
        self, data: CreateCollectionInput, created_by: str | None = None
    ) -> ContentCollection:
        slug = data.slug.strip()
        if not SLUG_RE.match(slug):
            raise ValidationError("slug may only contain lowercase letters, digits and dashes")
        if not data.display_name.strip():
            raise ValidationError("displayName must be a non-empty string")
        if await self.collections.get_by_slug(data.tenant_id, slug):
            raise ConflictError(f"collection slug '{slug}' already exists")
        collection = await self.collections.insert(
            ContentCollection(
                tenant_id=data.tenant_id,
                slug=slug,
                display_name=data.display_name.strip(),
                type=data.type,
                created_by=created_by,
            )
        )
        self._log.info("collection.created", collection_id=collection.id, slug=slug)
        return collection

    async def get(self, collection_id: str) -> ContentCollection:
        """Retourne la collection ou lève `NotFoundError`."""
        validate_id(collection_id, "contentCollectionId")
        collection = await self.collections.get(collection_id)
        if collection is None:
            raise NotFoundError("content collection not found")
        return collection

    async def list(self, tenant_id: str) -> list[ContentCollection]:
        return await self.collections.list_for_tenant(tenant_id)

    async def delete(self, collection: ContentCollection) -> ContentCollection:
        if await self.contents.count({"content_collection_id": collection.id}):
            raise ConflictError("content collection still has contents")
        await self.attributes.store.delete_many(
            AttributeRepository.owner_filter(collection_id=collection.id)
        )
        await self.collections.delete(collection.id)
        self._log.info("collection.deleted", collection_id=collection.id)
        return collection
