# ============================================================
# Module : cms_backend/services/component_service.py
# Objet  : Composants d'attributs réutilisables (gabarits).
# Invariants :
#  - clé unique par tenant ; clé et catégorie alphanumériques.
#  - Suppression refusée tant qu'un attribut référence le composant.
# ============================================================

from __future__ import annotations

import re

import structlog

from cms_backend.domain.entities import AttributeComponent, CreateComponentInput
from cms_backend.domain.errors import ConflictError, NotFoundError, ValidationError
from cms_backend.domain.identifiers import validate_id
from cms_backend.infra.repositories import AttributeRepository, ComponentRepository

ALNUM_RE = re.compile(r"^[A-Za-z0-9]+$")


class ComponentService:
    def __init__(self, components: ComponentRepository, attributes: AttributeRepository) -> None:
        self.components = components
        self.attributes = attributes
        self._log = structlog.get_logger(__name__).bind(component="component_service")

    async def create(
        self, tenant_id: str, data: CreateComponentInput, created_by: str | None = None
    ) -> AttributeComponent:
        key, category = data.key.strip(), data.category.strip()
        if not ALNUM_RE.match(key):
            raise ValidationError("key may only contain letters and numbers")
        if not ALNUM_RE.match(category):
            raise ValidationError("category may only contain letters and numbers")
        if not data.label.strip():
            raise ValidationError("label must be a non-empty string")
        if await self.components.get_by_key(tenant_id, key):
            raise ConflictError(f"component key '{key}' already exists")
        component = await self.components.insert(
            AttributeComponent(
                tenant_id=tenant_id,
                key=key,
                label=data.label.strip(),
                category=category,
                created_by=created_by,
            )
        )
        self._log.info("component.created", component_id=component.id, key=key)
        return component

    async def get(self, component_id: str) -> AttributeComponent:
        validate_id(component_id, "componentId")
        component = await self.components.get(component_id)
        if component is None:
            raise NotFoundError("attribute component not found")
        return component

    async def list(self, tenant_id: str) -> list[AttributeComponent]:
        return await self.components.list_for_tenant(tenant_id)

    async def delete(self, component: AttributeComponent) -> AttributeComponent:
        if await self.attributes.count_references(component.id):
            raise ConflictError("attribute component is still referenced by an attribute")
        await self.attributes.store.delete_many(
            AttributeRepository.owner_filter(component_id=component.id)
        )
        await self.components.delete(component.id)
        self._log.info("component.deleted", component_id=component.id)
        return component
