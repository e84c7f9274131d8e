"""Routes des locales déclarées par tenant (`/locales`)."""

from fastapi import APIRouter, Depends

from cms_backend.api.deps import get_container, require
from cms_backend.api.schemas import TenantScoped
from cms_backend.core.container import Container
from cms_backend.core.http_constants import HTTP_CREATED
from cms_backend.domain.entities import CreateLocaleInput, TenantLocale
from cms_backend.domain.permissions import Actor, Permission

router = APIRouter(prefix="/locales", tags=["locales"])


@router.post("/create", status_code=HTTP_CREATED)
async def create_locale(
    payload: CreateLocaleInput,
    actor: Actor = Depends(require(Permission.LOCALE_CREATE)),
    container: Container = Depends(get_container),
) -> TenantLocale:
    return await container.locale_service.create(payload, created_by=actor.audit_id)


@router.post("/list")
async def list_locales(
    payload: TenantScoped,
    actor: Actor = Depends(require(Permission.LOCALE_READ)),
    container: Container = Depends(get_container),
) -> list[TenantLocale]:
    return await container.locale_service.list(payload.tenant_id)
