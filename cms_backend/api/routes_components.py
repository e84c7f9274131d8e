"""
Routes des composants d'attributs réutilisables (`/components`).

Un composant regroupe ses propres attributs ; on peut y ajouter des primitifs ou des références à
d'autres composants (les cycles sont refusés).
"""

from fastapi import APIRouter, Depends

from cms_backend.api.deps import get_container, require
from cms_backend.api.schemas import ComponentCreateBody, TenantScoped
from cms_backend.core.container import Container
from cms_backend.core.http_constants import HTTP_CREATED
from cms_backend.domain.entities import (
    AttributeComponent,
    AttributeDefinition,
    CreateComponentAttributeInput,
    CreatePrimitiveAttributeInput,
)
from cms_backend.domain.permissions import Actor, Permission

router = APIRouter(prefix="/components", tags=["components"])


@router.post("/create", status_code=HTTP_CREATED)
async def create_component(
    payload: ComponentCreateBody,
    actor: Actor = Depends(require(Permission.ATTRIBUTE_CREATE)),
    container: Container = Depends(get_container),
) -> AttributeComponent:
    return await container.component_service.create(
        payload.tenant_id, payload, created_by=actor.audit_id
    )


@router.post("/list")
async def list_components(
    payload: TenantScoped,
    actor: Actor = Depends(require(Permission.ATTRIBUTE_READ)),
    container: Container = Depends(get_container),
) -> list[AttributeComponent]:
    return await container.component_service.list(payload.tenant_id)


@router.post("/{component_id}/get")
async def get_component(
    component_id: str,
    actor: Actor = Depends(require(Permission.ATTRIBUTE_READ)),
    container: Container = Depends(get_container),
) -> AttributeComponent:
    return await container.component_service.get(component_id)


@router.post("/{component_id}/delete")
async def delete_component(
    component_id: str,
    actor: Actor = Depends(require(Permission.ATTRIBUTE_DELETE)),
    container: Container = Depends(get_container),
) -> AttributeComponent:
    component = await container.component_service.get(component_id)
    return await container.component_service.delete(component)


@router.post("/{component_id}/attributes/create-primitive", status_code=HTTP_CREATED)
async def add_primitive_attribute(
    component_id: str,
    payload: CreatePrimitiveAttributeInput,
    actor: Actor = Depends(require(Permission.ATTRIBUTE_CREATE)),
    container: Container = Depends(get_container),
) -> AttributeDefinition:
    component = await container.component_service.get(component_id)
    return await container.attribute_service.add_to_component(
        payload, component, created_by=actor.audit_id
    )


@router.post("/{component_id}/attributes/create-component", status_code=HTTP_CREATED)
async def add_component_attribute(
    component_id: str,
    payload: CreateComponentAttributeInput,
    actor: Actor = Depends(require(Permission.ATTRIBUTE_CREATE)),
    container: Container = Depends(get_container),
) -> AttributeDefinition:
    component = await container.component_service.get(component_id)
    return await container.attribute_service.add_to_component(
        payload, component, created_by=actor.audit_id
    )
