# ============================================================
# Module : cms_backend/services/locale_service.py
# Objet  : Locales déclarées par tenant (la première devient la locale par défaut).
# ============================================================

from __future__ import annotations

import structlog

from cms_backend.domain.entities import CreateLocaleInput, TenantLocale
from cms_backend.domain.errors import ConflictError, ValidationError
from cms_backend.infra.repositories import LocaleRepository


class LocaleService:
    def __init__(self, locales: LocaleRepository) -> None:
        self.locales = locales
        self._log = structlog.get_logger(__name__).bind(component="locale_service")

    async def create(self, data: CreateLocaleInput, created_by: str | None = None) -> TenantLocale:
        locale = data.locale.strip()
        if not locale:
            raise ValidationError("locale must be a non-empty string")
        if await self.locales.get_by_locale(data.tenant_id, locale):
            raise ConflictError(f"locale '{locale}' already exists for this tenant")
        is_default = await self.locales.get_default(data.tenant_id) is None
        created = await self.locales.insert(
            TenantLocale(
                tenant_id=data.tenant_id,
                locale=locale,
                display_name=data.display_name,
                is_default=is_default,
                created_by=created_by,
            )
        )
        self._log.info("locale.created", tenant_id=data.tenant_id, locale=locale, default=is_default)
        return created

    async def list(self, tenant_id: str) -> list[TenantLocale]:
        return await self.locales.list_for_tenant(tenant_id)

    async def get_default(self, tenant_id: str) -> TenantLocale | None:
        return await self.locales.get_default(tenant_id)

    async def find(self, tenant_id: str, locale: str) -> TenantLocale | None:
        return await self.locales.get_by_locale(tenant_id, locale)
