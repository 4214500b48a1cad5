"""Current tenant settings (name, branding)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.context import AuthorizationContext
from belegboost.core.response import DataResponse
from belegboost.db.base import get_db
from belegboost.routers.deps import OWNER_ONLY, get_authorization_context, require_roles
from belegboost.schemas.tenant import TenantOut, TenantUpdate
from belegboost.services.tenant import TenantService

router = APIRouter(prefix="/tenant", tags=["Tenant"])


def _svc(session: AsyncSession, context: AuthorizationContext) -> TenantService:
    return TenantService(session, context)


@router.get("", response_model=DataResponse[TenantOut])
async def get_tenant(
    context: AuthorizationContext = Depends(get_authorization_context),
    session: AsyncSession = Depends(get_db),
):
    tenant = await _svc(session, context).get_current()
    return {"data": TenantOut.from_tenant(tenant)}


@router.patch("", response_model=DataResponse[TenantOut])
async def update_tenant(
    body: TenantUpdate,
    context: AuthorizationContext = Depends(require_roles(*OWNER_ONLY)),
    session: AsyncSession = Depends(get_db),
):
    """Rename the firm or change its branding. Owner only."""
    tenant = await _svc(session, context).update_settings(body)
    return {"data": TenantOut.from_tenant(tenant)}
