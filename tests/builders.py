"""Constructeur de fixtures métier partagé par les tests (collections, attributs, composants,
locales), appuyé sur les services du conteneur."""

from __future__ import annotations

from cms_backend.core.container import Container
from cms_backend.domain.entities import (
    AttributeComponent,
    AttributeDefinition,
    AttributeType,
    CollectionType,
    ContentCollection,
    CreateCollectionInput,
    CreateComponentAttributeInput,
    CreateComponentInput,
    CreateLocaleInput,
    CreatePrimitiveAttributeInput,
    SchemaType,
    TenantLocale,
)

TENANT = "tenant-a"


class CmsBuilder:
    """Raccourcis pour préparer un jeu de définitions via les services."""

    def __init__(self, container: Container, tenant_id: str = TENANT) -> None:
        self.container = container
        self.tenant_id = tenant_id

    async def collection(
        self, slug: str = "articles", type: CollectionType = CollectionType.COLLECTION
    ) -> ContentCollection:
        return await self.container.collection_service.create(
            CreateCollectionInput(
                tenant_id=self.tenant_id, slug=slug, display_name=slug.title(), type=type
            )
        )

    async def primitive(
        self,
        owner: ContentCollection | AttributeComponent,
        key: str,
        attribute_type: AttributeType = AttributeType.STRING,
        **fields,
    ) -> AttributeDefinition:
        data = CreatePrimitiveAttributeInput(
            key=key, label=key.title(), attribute_type=attribute_type, **fields
        )
        if isinstance(owner, AttributeComponent):
            return await self.container.attribute_service.add_to_component(data, owner)
        return await self.container.attribute_service.create_primitive(data, owner)

    async def component(self, key: str, category: str = "blocks") -> AttributeComponent:
        return await self.container.component_service.create(
            self.tenant_id, CreateComponentInput(key=key, label=key.title(), category=category)
        )

    async def component_attr(
        self,
        owner: ContentCollection | AttributeComponent,
        key: str,
        component: AttributeComponent,
        array: bool = False,
        **fields,
    ) -> AttributeDefinition:
        data = CreateComponentAttributeInput(
            key=key,
            label=key.title(),
            component_ref_id=component.id,
            schema_type=SchemaType.ARRAY if array else SchemaType.PRIMITIVE,
            **fields,
        )
        if isinstance(owner, AttributeComponent):
            return await self.container.attribute_service.add_to_component(data, owner)
        return await self.container.attribute_service.create_component_attribute(data, owner)

    async def locale(self, locale: str, display_name: str | None = None) -> TenantLocale:
        return await self.container.locale_service.create(
            CreateLocaleInput(
                tenant_id=self.tenant_id, locale=locale, display_name=display_name or locale
            )
        )

