# ============================================================
# Module : cms_backend/services/content_service.py
# Objet  : Orchestration des contenus (création, mise à jour, ordre, lecture localisée).
# Contexte : compile → valide → écrit ; la lecture localisée fusionne base + traduction.
# Invariants :
#  - Le schéma compilé est passé par l'appelant et réutilisé dans la requête.
#  - Collection `single` : un seul contenu, position fixe 0.
#  - Réordonnancement : tout ou rien.
# ============================================================

from __future__ import annotations

import structlog

from cms_backend.app.metrics import TRANSLATION_MERGE_TOTAL
from cms_backend.domain.entities import (
    CollectionType,
    Content,
    ContentCollection,
    CreateContentInput,
    FullContent,
    UpdateContentInput,
)
from cms_backend.domain.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    PositionConflictError,
)
from cms_backend.domain.identifiers import validate_id
from cms_backend.domain.merge import deep_merge, merge_translation
from cms_backend.domain.schema import CompiledSchema
from cms_backend.infra.repositories import (
    ContentRepository,
    LocaleRepository,
    TranslationRepository,
)
from cms_backend.services.schema_service import SchemaService


class ContentService:
    def __init__(
        self,
        contents: ContentRepository,
        translations: TranslationRepository,
        locales: LocaleRepository,
        schemas: SchemaService,
    ) -> None:
        self.contents = contents
        self.translations = translations
        self.locales = locales
        self.schemas = schemas
        self._log = structlog.get_logger(__name__).bind(component="content_service")

    async def create(
        self,
        data: CreateContentInput,
        collection: ContentCollection,
        schema: CompiledSchema | None = None,
        created_by: str | None = None,
    ) -> Content:
        """Compile (si besoin), valide puis persiste un contenu en fin de collection."""
        if schema is None:
            schema = await self.schemas.compile(collection)
        sanitized = self.schemas.validate(schema, data.data, collection_id=collection.id)

        if collection.type == CollectionType.SINGLE:
            if await self.contents.count({"content_collection_id": collection.id}):
                raise ConflictError(
                    "Current collection is a single type, cannot create more than one content"
                )
            position = 0
        else:
            last = await self.contents.max_position(collection.id)
            position = 0 if last is None else last + 1

        content = await self.contents.insert(
            Content(
                tenant_id=collection.tenant_id,
                content_collection_id=collection.id,
                data=sanitized,
                status=data.status,
                position=position,
                created_by=created_by,
            )
        )
        self._log.info(
            "content.created",
            content_id=content.id,
            collection_id=collection.id,
            position=position,
        )
        return content

    async def update(
        self, content: Content, data: UpdateContentInput, schema: CompiledSchema
    ) -> Content:
        """Fusionne le patch sur les données existantes puis revalide l'ensemble."""
        fields = data.model_fields_set
        if "data" not in fields and "status" not in fields:
            raise BadRequestError("No valid fields provided for update")
        changes: dict = {}
        if data.data is not None:
            merged = deep_merge(content.data, data.data)
            changes["data"] = self.schemas.validate(
                schema, merged, content_id=content.id, collection_id=content.content_collection_id
            )
        if data.status is not None:
            changes["status"] = data.status
        updated = await self.contents.save(content.model_copy(update=changes))
        if updated is None:
            raise NotFoundError("Failed to update content")
        self._log.info("content.updated", content_id=content.id, fields=sorted(changes))
        return updated

    async def update_position(
        self, content_ids: list[str], collection: ContentCollection
    ) -> list[Content]:
        """Réécrit `position` = index dans la liste ; échoue sans rien écrire si un id est étranger."""
        if len(set(content_ids)) != len(content_ids):
            raise BadRequestError("duplicate content ids in reorder batch")
        owned = {c.id: c for c in await self.contents.list_for_collection(collection.id)}
        foreign = [cid for cid in content_ids if cid not in owned]
        if foreign:
            raise PositionConflictError(
                "some contents do not belong to this collection", foreign_ids=foreign
            )
        for index, content_id in enumerate(content_ids):
            if owned[content_id].position != index:
                await self.contents.set_fields(content_id, position=index)
        self._log.info("content.reordered", collection_id=collection.id, count=len(content_ids))
        return await self.contents.list_for_collection(collection.id)

    async def delete(self, content: Content) -> Content:
        """Supprime le contenu et ses traductions."""
        removed = await self.translations.store.delete_many({"content_id": content.id})
        await self.contents.delete(content.id)
        self._log.info("content.deleted", content_id=content.id, translations=removed)
        return content

    async def get(self, content_id: str) -> Content:
        validate_id(content_id, "contentId")
        content = await self.contents.get(content_id)
        if content is None:
            raise NotFoundError("content not found")
        return content

    async def list(self, collection: ContentCollection) -> list[Content]:
        return await self.contents.list_for_collection(collection.id)

    async def list_full(
        self,
        collection: ContentCollection,
        locale: str | None = None,
        schema: CompiledSchema | None = None,
    ) -> list[FullContent]:
        """
        Contenus de la collection fusionnés avec leur traduction dans la locale demandée.

        Sans locale, la locale par défaut du tenant est utilisée. Une locale non déclarée pour
        le tenant donne une liste vide (pas une erreur).
        """
        if locale:
            tenant_locale = await self.locales.get_by_locale(collection.tenant_id, locale)
        else:
            tenant_locale = await self.locales.get_default(collection.tenant_id)
        if tenant_locale is None:
            self._log.info(
                "content.locale_not_found", collection_id=collection.id, locale=locale
            )
            return []

        if schema is None:
            schema = await self.schemas.compile(collection)
        results: list[FullContent] = []
        for content in await self.contents.list_for_collection(collection.id):
            translation = await self.translations.get_for_locale(
                content.id, tenant_locale.locale
            )
            full_data = merge_translation(
                content.data, translation.data if translation else None, schema
            )
            TRANSLATION_MERGE_TOTAL.inc()
            results.append(
                FullContent(
                    **content.model_dump(),
                    requested_locale=locale,
                    resolved_locale=tenant_locale.locale,
                    locale_not_found=translation is None,
                    full_data=full_data,
                )
            )
        return results
