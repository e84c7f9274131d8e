"""
Routes des collections de contenus (`/collections`).

Toutes les opérations sont exposées en POST, y compris les lectures.
"""

from fastapi import APIRouter, Depends

from cms_backend.api.deps import get_container, require
from cms_backend.api.schemas import TenantScoped
from cms_backend.core.container import Container
from cms_backend.core.http_constants import HTTP_CREATED
from cms_backend.domain.entities import ContentCollection, CreateCollectionInput
from cms_backend.domain.permissions import Actor, Permission

router = APIRouter(prefix="/collections", tags=["collections"])


@router.post("/create", status_code=HTTP_CREATED)
async def create_collection(
    payload: CreateCollectionInput,
    actor: Actor = Depends(require(Permission.COLLECTION_CREATE)),
    container: Container = Depends(get_container),
) -> ContentCollection:
    return await container.collection_service.create(payload, created_by=actor.audit_id)


@router.post("/list")
async def list_collections(
    payload: TenantScoped,
    actor: Actor = Depends(require(Permission.COLLECTION_READ)),
    container: Container = Depends(get_container),
) -> list[ContentCollection]:
    return await container.collection_service.list(payload.tenant_id)


@router.post("/{collection_id}/get")
async def get_collection(
    collection_id: str,
    actor: Actor = Depends(require(Permission.COLLECTION_READ)),
    container: Container = Depends(get_container),
) -> ContentCollection:
    return await container.collection_service.get(collection_id)


@router.post("/{collection_id}/schema")
async def get_collection_schema(
    collection_id: str,
    actor: Actor = Depends(require(Permission.COLLECTION_READ)),
    container: Container = Depends(get_container),
) -> dict:
    """Schéma compilé de la collection, rendu façon JSON Schema."""
    collection = await container.collection_service.get(collection_id)
    schema = await container.schema_service.compile(collection)
    return schema.to_json_schema()


@router.post("/{collection_id}/delete")
async def delete_collection(
    collection_id: str,
    actor: Actor = Depends(require(Permission.COLLECTION_DELETE)),
    container: Container = Depends(get_container),
) -> ContentCollection:
    collection = await container.collection_service.get(collection_id)
    return await container.collection_service.delete(collection)
