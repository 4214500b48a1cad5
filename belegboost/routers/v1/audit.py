"""Audit log router (read and export only; entries are append-only)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.context import AuthorizationContext
from belegboost.core.pagination import PaginationParams
from belegboost.core.response import ListResponse, paginated
from belegboost.db.base import get_db
from belegboost.domain.enums import AuditAction
from belegboost.routers.deps import ADVISOR_ROLES, require_roles
from belegboost.schemas.audit import AuditLogOut
from belegboost.services.audit import AuditService

router = APIRouter(prefix="/audit-logs", tags=["Audit"])


def _svc(session: AsyncSession, context: AuthorizationContext) -> AuditService:
    return AuditService(session, context)


@router.get("", response_model=ListResponse[AuditLogOut])
async def list_audit_logs(
    action: Optional[AuditAction] = Query(default=None),
    pagination: PaginationParams = Depends(),
    context: AuthorizationContext = Depends(require_roles(*ADVISOR_ROLES)),
    session: AsyncSession = Depends(get_db),
):
    page = await _svc(session, context).list_entries(pagination, action=action)
    return paginated(page, pagination, AuditLogOut)


@router.get("/export")
async def export_audit_logs(
    context: AuthorizationContext = Depends(require_roles(*ADVISOR_ROLES)),
    session: AsyncSession = Depends(get_db),
):
    """Full chronological export for the tenant; the export itself is audited."""
    entries = await _svc(session, context).export()
    return {"data": [AuditLogOut.model_validate(e) for e in entries]}
