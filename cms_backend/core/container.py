"""
Conteneur d'injection de dépendances.

Instancie une seule fois, au démarrage du process, les stores (mémoire ou SQL selon
`DATABASE_URL`), les dépôts typés, le compilateur de schéma et les services d'orchestration. Chaque
service reçoit explicitement ses dépendances par constructeur.
"""

from __future__ import annotations

from cms_backend.core.settings import Settings, get_settings
from cms_backend.domain.schema_compiler import SchemaCompiler
from cms_backend.infra.repo.db import create_schema, get_engine
from cms_backend.infra.repo.sql_store import SqlDocumentStore
from cms_backend.infra.repo.store import DocumentStore, InMemoryDocumentStore
from cms_backend.infra.repositories import (
    UNIQUE_FIELDS,
    AttributeRepository,
    CollectionRepository,
    ComponentRepository,
    ContentRepository,
    LocaleRepository,
    TranslationRepository,
)
from cms_backend.services.attribute_service import AttributeService
from cms_backend.services.collection_service import CollectionService
from cms_backend.services.component_service import ComponentService
from cms_backend.services.content_service import ContentService
from cms_backend.services.locale_service import LocaleService
from cms_backend.services.schema_service import SchemaService
from cms_backend.services.translation_service import ContentTranslationService


class Container:
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        if self.settings.DATABASE_URL:
            self.engine = get_engine(self.settings.DATABASE_URL)
            self.storage_backend = "sql"
        else:
            self.engine = None
            self.storage_backend = "memory"

        # dépôts
        self.collection_repo = CollectionRepository(self._store("collections"))
        self.component_repo = ComponentRepository(self._store("components"))
        self.attribute_repo = AttributeRepository(self._store("attributes"), self.component_repo)
        self.content_repo = ContentRepository(self._store("contents"))
        self.translation_repo = TranslationRepository(self._store("translations"))
        self.locale_repo = LocaleRepository(self._store("locales"))

        # moteur
        self.compiler = SchemaCompiler(
            self.attribute_repo, max_depth=self.settings.MAX_COMPONENT_DEPTH
        )
        self.schema_service = SchemaService(self.compiler)

        # services
        self.collection_service = CollectionService(
            self.collection_repo, self.content_repo, self.attribute_repo
        )
        self.component_service = ComponentService(self.component_repo, self.attribute_repo)
        self.attribute_service = AttributeService(
            self.attribute_repo, self.component_repo, self.compiler
        )
        self.locale_service = LocaleService(self.locale_repo)
        self.content_service = ContentService(
            self.content_repo, self.translation_repo, self.locale_repo, self.schema_service
        )
        self.translation_service = ContentTranslationService(
            self.translation_repo,
            self.locale_repo,
            self.content_repo,
            self.collection_repo,
            self.schema_service,
        )

    def _store(self, kind: str) -> DocumentStore:
        unique = UNIQUE_FIELDS[kind]
        if self.engine is not None:
            return SqlDocumentStore(self.engine, kind, unique)
        return InMemoryDocumentStore(kind, unique)

    async def startup(self) -> None:
        """Crée les tables manquantes si le stockage est SQL."""
        if self.engine is not None:
            await create_schema(self.engine)

    async def shutdown(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()


container = Container()
