# ============================================================
# Module : cms_backend/services/translation_service.py
# Objet  : Overlays de traduction par locale rattachés à un contenu.
# Invariants :
#  - au plus une traduction par (content_id, locale) : pré-contrôle + contrainte du store.
#  - les données ne portent que des clés traduisibles (validation partielle).
# ============================================================

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from cms_backend.domain.entities import (
    Content,
    ContentCollection,
    ContentTranslation,
    CreateTranslationInput,
    FullContentTranslation,
)
from cms_backend.domain.errors import BadRequestError, ConflictError, NotFoundError
from cms_backend.domain.identifiers import validate_id
from cms_backend.domain.schema import CompiledSchema
from cms_backend.infra.repositories import (
    CollectionRepository,
    ContentRepository,
    LocaleRepository,
    TranslationRepository,
)
from cms_backend.services.schema_service import SchemaService

LOOKUPS = frozenset({"contentCollection", "content"})


class ContentTranslationService:
    def __init__(
        self,
        translations: TranslationRepository,
        locales: LocaleRepository,
        contents: ContentRepository,
        collections: CollectionRepository,
        schemas: SchemaService,
    ) -> None:
        self.translations = translations
        self.locales = locales
        self.contents = contents
        self.collections = collections
        self.schemas = schemas
        self._log = structlog.get_logger(__name__).bind(component="translation_service")

    async def create(
        self,
        data: CreateTranslationInput,
        collection: ContentCollection,
        content: Content,
        schema: CompiledSchema | None = None,
        created_by: str | None = None,
    ) -> ContentTranslation:
        locale = data.locale.strip()
        if not locale:
            raise BadRequestError('"locale" field is required')
        if content.content_collection_id != collection.id:
            raise BadRequestError("content does not belong to this collection")
        if await self.locales.get_by_locale(collection.tenant_id, locale) is None:
            raise NotFoundError(f"locale '{locale}' is not declared for this tenant")
        if await self.translations.get_for_locale(content.id, locale):
            raise ConflictError(f"translation for locale '{locale}' already exists")

        if schema is None:
            schema = await self.schemas.compile(collection)
        sanitized = self.schemas.validate(
            schema.translatable_view(),
            data.data,
            partial=True,
            content_id=content.id,
            locale=locale,
        )
        translation = await self.translations.insert(
            ContentTranslation(
                tenant_id=collection.tenant_id,
                content_collection_id=collection.id,
                content_id=content.id,
                locale=locale,
                data=sanitized,
                status=data.status,
                created_by=created_by,
            )
        )
        self._log.info(
            "translation.created",
            translation_id=translation.id,
            content_id=content.id,
            locale=locale,
        )
        return translation

    async def list(
        self, match: Mapping[str, Any], lookup: Iterable[str] | None = None
    ) -> list[FullContentTranslation]:
        """Requête filtrée en lecture seule ; `lookup` joint la collection et/ou le contenu."""
        wanted = set(lookup or ())
        unknown = wanted - LOOKUPS
        if unknown:
            raise BadRequestError(f"unsupported lookup: {sorted(unknown)}")
        results: list[FullContentTranslation] = []
        for translation in await self.translations.find_many(
            match, sort=[("created_at", 1)]
        ):
            extra: dict[str, Any] = {}
            if "contentCollection" in wanted:
                extra["content_collection"] = await self.collections.get(
                    translation.content_collection_id
                )
            if "content" in wanted:
                extra["content"] = await self.contents.get(translation.content_id)
            results.append(FullContentTranslation(**translation.model_dump(), **extra))
        return results

    async def get(self, translation_id: str) -> ContentTranslation:
        validate_id(translation_id, "translationId")
        translation = await self.translations.get(translation_id)
        if translation is None:
            raise NotFoundError("content translation not found")
        return translation

    async def delete(self, translation: ContentTranslation) -> ContentTranslation:
        if not await self.translations.delete(translation.id):
            raise NotFoundError("content translation not found")
        self._log.info("translation.deleted", translation_id=translation.id)
        return translation
