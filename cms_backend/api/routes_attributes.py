"""Routes des définitions d'attributs d'une collection (`/attributes`)."""

from fastapi import APIRouter, Depends

from cms_backend.api.deps import get_container, require
from cms_backend.api.schemas import (
    AttributeListBody,
    CollectionAttributeBody,
    CollectionComponentAttributeBody,
)
from cms_backend.core.container import Container
from cms_backend.core.http_constants import HTTP_CREATED
from cms_backend.domain.entities import AttributeDefinition, UpdateAttributeInput
from cms_backend.domain.permissions import Actor, Permission

router = APIRouter(prefix="/attributes", tags=["attributes"])


@router.post("/create-primitive", status_code=HTTP_CREATED)
async def create_primitive_attribute(
    payload: CollectionAttributeBody,
    actor: Actor = Depends(require(Permission.ATTRIBUTE_CREATE)),
    container: Container = Depends(get_container),
) -> AttributeDefinition:
    collection = await container.collection_service.get(payload.content_collection_id)
    return await container.attribute_service.create_primitive(
        payload, collection, created_by=actor.audit_id
    )


@router.post("/create-component", status_code=HTTP_CREATED)
async def create_component_attribute(
    payload: CollectionComponentAttributeBody,
    actor: Actor = Depends(require(Permission.ATTRIBUTE_CREATE)),
    container: Container = Depends(get_container),
) -> AttributeDefinition:
    collection = await container.collection_service.get(payload.content_collection_id)
    return await container.attribute_service.create_component_attribute(
        payload, collection, created_by=actor.audit_id
    )


@router.post("/list")
async def list_attributes(
    payload: AttributeListBody,
    actor: Actor = Depends(require(Permission.ATTRIBUTE_READ)),
    container: Container = Depends(get_container),
) -> list[AttributeDefinition]:
    return await container.attribute_service.list(
        collection_id=payload.content_collection_id, component_id=payload.component_id
    )


@router.post("/{attribute_id}/get")
async def get_attribute(
    attribute_id: str,
    actor: Actor = Depends(require(Permission.ATTRIBUTE_READ)),
    container: Container = Depends(get_container),
) -> AttributeDefinition:
    return await container.attribute_service.get(attribute_id)


@router.post("/{attribute_id}/update")
async def update_attribute(
    attribute_id: str,
    payload: UpdateAttributeInput,
    actor: Actor = Depends(require(Permission.ATTRIBUTE_UPDATE)),
    container: Container = Depends(get_container),
) -> AttributeDefinition:
    attribute = await container.attribute_service.get(attribute_id)
    return await container.attribute_service.update(attribute, payload)


@router.post("/{attribute_id}/delete")
async def delete_attribute(
    attribute_id: str,
    actor: Actor = Depends(require(Permission.ATTRIBUTE_DELETE)),
    container: Container = Depends(get_container),
) -> AttributeDefinition:
    attribute = await container.attribute_service.get(attribute_id)
    return await container.attribute_service.delete(attribute)
