"""Tenant settings for the caller's own tenant."""

from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.context import AuthorizationContext
from belegboost.core.exceptions import ForbiddenError, NotFoundError
from belegboost.domain.enums import UserRole
from belegboost.domain.tenant import Tenant, branding_columns
from belegboost.repositories.entities import TenantRepository
from belegboost.schemas.tenant import TenantUpdate


class TenantService:
    def __init__(self, session: AsyncSession, context: AuthorizationContext):
        self._context = context
        self._repo = TenantRepository(session, context)

    async def get_current(self) -> Tenant:
        tenant = await self._repo.current()
        if tenant is None:
            raise NotFoundError("Tenant")
        return tenant

    async def update_settings(self, data: TenantUpdate) -> Tenant:
        if self._context.role != UserRole.OWNER:
            raise ForbiddenError("Only the tenant owner can change settings")
        values: dict = {}
        if data.name is not None:
            values["name"] = data.name
        if "branding" in data.model_fields_set:
            values.update(branding_columns(data.branding.to_branding() if data.branding else None))
        if data.status is not None:
            values["status"] = data.status.value
        tenant = await self._repo.update(**values)
        if tenant is None:
            raise NotFoundError("Tenant")
        return tenant
