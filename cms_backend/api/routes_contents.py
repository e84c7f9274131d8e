"""
Routes des contenus (`/contents`).

Le schéma de la collection est compilé une fois par requête puis transmis au service ; la liste
renvoie la vue fusionnée dans la locale demandée (ou la locale par défaut du tenant).
"""

from fastapi import APIRouter, Depends

from cms_backend.api.deps import get_container, require
from cms_backend.api.schemas import ContentCreateBody, ContentListBody, PositionBody
from cms_backend.core.container import Container
from cms_backend.core.http_constants import HTTP_CREATED
from cms_backend.domain.entities import Content, FullContent, UpdateContentInput
from cms_backend.domain.permissions import Actor, Permission

router = APIRouter(prefix="/contents", tags=["contents"])


@router.post("/create", status_code=HTTP_CREATED)
async def create_content(
    payload: ContentCreateBody,
    actor: Actor = Depends(require(Permission.CONTENT_CREATE)),
    container: Container = Depends(get_container),
) -> Content:
    collection = await container.collection_service.get(payload.content_collection_id)
    return await container.content_service.create(payload, collection, created_by=actor.audit_id)


@router.post("/list")
async def list_contents(
    payload: ContentListBody,
    actor: Actor = Depends(require(Permission.CONTENT_READ)),
    container: Container = Depends(get_container),
) -> list[FullContent]:
    collection = await container.collection_service.get(payload.content_collection_id)
    return await container.content_service.list_full(collection, payload.locale)


@router.post("/update-position")
async def update_position(
    payload: PositionBody,
    actor: Actor = Depends(require(Permission.CONTENT_UPDATE)),
    container: Container = Depends(get_container),
) -> list[Content]:
    collection = await container.collection_service.get(payload.content_collection_id)
    return await container.content_service.update_position(payload.ids, collection)


@router.post("/{content_id}/get")
async def get_content(
    content_id: str,
    actor: Actor = Depends(require(Permission.CONTENT_READ)),
    container: Container = Depends(get_container),
) -> Content:
    return await container.content_service.get(content_id)


@router.post("/{content_id}/update")
async def update_content(
    content_id: str,
    payload: UpdateContentInput,
    actor: Actor = Depends(require(Permission.CONTENT_UPDATE)),
    container: Container = Depends(get_container),
) -> Content:
    content = await container.content_service.get(content_id)
    collection = await container.collection_service.get(content.content_collection_id)
    schema = await container.schema_service.compile(collection)
    return await container.content_service.update(content, payload, schema)


@router.post("/{content_id}/delete")
async def delete_content(
    content_id: str,
    actor: Actor = Depends(require(Permission.CONTENT_DELETE)),
    container: Container = Depends(get_container),
) -> Content:
    content = await container.content_service.get(content_id)
    return await container.content_service.delete(content)
