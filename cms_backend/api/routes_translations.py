"""Routes des traductions de contenus (`/content-translations`)."""

from fastapi import APIRouter, Depends

from cms_backend.api.deps import get_container, require
from cms_backend.api.schemas import TranslationCreateBody, TranslationListBody
from cms_backend.core.container import Container
from cms_backend.core.http_constants import HTTP_CREATED
from cms_backend.domain.entities import ContentTranslation, FullContentTranslation
from cms_backend.domain.identifiers import validate_id
from cms_backend.domain.permissions import Actor, Permission

router = APIRouter(prefix="/content-translations", tags=["content-translations"])

# Filtres acceptés par /list (clé API -> champ stocké)
LIST_FILTERS = {
    "id": "id",
    "contentCollectionId": "content_collection_id",
    "contentId": "content_id",
    "locale": "locale",
}


@router.post("/create", status_code=HTTP_CREATED)
async def create_translation(
    payload: TranslationCreateBody,
    actor: Actor = Depends(require(Permission.TRANSLATION_CREATE)),
    container: Container = Depends(get_container),
) -> ContentTranslation:
    collection = await container.collection_service.get(payload.content_collection_id)
    content = await container.content_service.get(payload.content_id)
    return await container.translation_service.create(
        payload, collection, content, created_by=actor.audit_id
    )


@router.post("/list")
async def list_translations(
    payload: TranslationListBody,
    actor: Actor = Depends(require(Permission.TRANSLATION_READ)),
    container: Container = Depends(get_container),
) -> list[FullContentTranslation]:
    match: dict[str, str] = {}
    for api_key, field in LIST_FILTERS.items():
        value = payload.filter.get(api_key)
        if value is None:
            continue
        match[field] = value if field == "locale" else validate_id(value, api_key)
    return await container.translation_service.list(match, payload.lookup)


@router.post("/{translation_id}/get")
async def get_translation(
    translation_id: str,
    actor: Actor = Depends(require(Permission.TRANSLATION_READ)),
    container: Container = Depends(get_container),
) -> ContentTranslation:
    return await container.translation_service.get(translation_id)


@router.post("/{translation_id}/delete")
async def delete_translation(
    translation_id: str,
    actor: Actor = Depends(require(Permission.TRANSLATION_DELETE)),
    container: Container = Depends(get_container),
) -> ContentTranslation:
    translation = await container.translation_service.get(translation_id)
    return await container.translation_service.delete(translation)
