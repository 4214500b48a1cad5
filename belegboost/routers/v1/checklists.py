"""Checklists router, including the nested traffic-light items."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.context import AuthorizationContext
from belegboost.core.pagination import PaginationParams
from belegboost.core.response import DataResponse, ListResponse, paginated
from belegboost.db.base import get_db
from belegboost.domain.enums import ChecklistStatus
from belegboost.routers.deps import ADVISOR_ROLES, get_authorization_context, require_roles
from belegboost.schemas.checklist import (
    ChecklistCreate,
    ChecklistDetailOut,
    ChecklistItemCreate,
    ChecklistItemOut,
    ChecklistItemUpdate,
    ChecklistOut,
    ChecklistUpdate,
)
from belegboost.services.checklist import ChecklistService, ChecklistView

router = APIRouter(prefix="/checklists", tags=["Checklists"])


def _svc(session: AsyncSession, context: AuthorizationContext) -> ChecklistService:
    return ChecklistService(session, context)


def _detail(view: ChecklistView) -> ChecklistDetailOut:
    return ChecklistDetailOut(
        **ChecklistOut.model_validate(view.checklist).model_dump(),
        items=[ChecklistItemOut.model_validate(i) for i in view.items],
    )


# ------------------------------------------------------------------
# Checklists
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[ChecklistOut])
async def list_checklists(
    filter_status: Optional[ChecklistStatus] = Query(default=None, alias="status"),
    organization_id: Optional[str] = Query(default=None, alias="organizationId"),
    pagination: PaginationParams = Depends(),
    context: AuthorizationContext = Depends(get_authorization_context),
    session: AsyncSession = Depends(get_db),
):
    """List checklists. Clients only ever see their own organization's."""
    page = await _svc(session, context).list_checklists(
        pagination, status=filter_status, organization_id=organization_id
    )
    return paginated(page, pagination, ChecklistOut)


@router.post("", response_model=DataResponse[ChecklistOut], status_code=status.HTTP_201_CREATED)
async def create_checklist(
    body: ChecklistCreate,
    context: AuthorizationContext = Depends(require_roles(*ADVISOR_ROLES)),
    session: AsyncSession = Depends(get_db),
):
    checklist = await _svc(session, context).create_checklist(body)
    return {"data": ChecklistOut.model_validate(checklist)}


@router.get("/{checklist_id}", response_model=DataResponse[ChecklistDetailOut])
async def get_checklist(
    checklist_id: str,
    context: AuthorizationContext = Depends(get_authorization_context),
    session: AsyncSession = Depends(get_db),
):
    view = await _svc(session, context).get_checklist(checklist_id)
    return {"data": _detail(view)}


@router.patch("/{checklist_id}", response_model=DataResponse[ChecklistOut])
async def update_checklist(
    checklist_id: str,
    body: ChecklistUpdate,
    context: AuthorizationContext = Depends(require_roles(*ADVISOR_ROLES)),
    session: AsyncSession = Depends(get_db),
):
    checklist = await _svc(session, context).update_checklist(checklist_id, body)
    return {"data": ChecklistOut.model_validate(checklist)}


@router.delete("/{checklist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_checklist(
    checklist_id: str,
    context: AuthorizationContext = Depends(require_roles(*ADVISOR_ROLES)),
    session: AsyncSession = Depends(get_db),
):
    await _svc(session, context).delete_checklist(checklist_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ------------------------------------------------------------------
# Items
# ------------------------------------------------------------------

@router.post(
    "/{checklist_id}/items",
    response_model=DataResponse[ChecklistItemOut],
    status_code=status.HTTP_201_CREATED,
)
async def add_item(
    checklist_id: str,
    body: ChecklistItemCreate,
    context: AuthorizationContext = Depends(require_roles(*ADVISOR_ROLES)),
    session: AsyncSession = Depends(get_db),
):
    item = await _svc(session, context).add_item(checklist_id, body)
    return {"data": ChecklistItemOut.model_validate(item)}


@router.patch("/{checklist_id}/items/{item_id}", response_model=DataResponse[ChecklistItemOut])
async def update_item(
    checklist_id: str,
    item_id: str,
    body: ChecklistItemUpdate,
    context: AuthorizationContext = Depends(get_authorization_context),
    session: AsyncSession = Depends(get_db),
):
    """Advisors may edit anything; clients may only move the traffic light."""
    item = await _svc(session, context).update_item(checklist_id, item_id, body)
    return {"data": ChecklistItemOut.model_validate(item)}


@router.delete("/{checklist_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    checklist_id: str,
    item_id: str,
    context: AuthorizationContext = Depends(require_roles(*ADVISOR_ROLES)),
    session: AsyncSession = Depends(get_db),
):
    await _svc(session, context).delete_item(checklist_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
