"""Organizations router: the advisor firm and its client companies."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.context import AuthorizationContext
from belegboost.core.pagination import PaginationParams
from belegboost.core.response import DataResponse, ListResponse, paginated
from belegboost.db.base import get_db
from belegboost.domain.enums import OrganizationType
from belegboost.routers.deps import ADVISOR_ROLES, get_authorization_context, require_roles
from belegboost.schemas.tenant import OrganizationCreate, OrganizationOut, OrganizationUpdate
from belegboost.services.organization import OrganizationService

router = APIRouter(prefix="/organizations", tags=["Organizations"])


def _svc(session: AsyncSession, context: AuthorizationContext) -> OrganizationService:
    return OrganizationService(session, context)


@router.get("", response_model=ListResponse[OrganizationOut])
async def list_organizations(
    filter_type: Optional[OrganizationType] = Query(default=None, alias="type"),
    pagination: PaginationParams = Depends(),
    context: AuthorizationContext = Depends(get_authorization_context),
    session: AsyncSession = Depends(get_db),
):
    """Advisors see every organization of the tenant, clients only their own."""
    page = await _svc(session, context).list_organizations(pagination, type=filter_type)
    return paginated(page, pagination, OrganizationOut)


@router.post("", response_model=DataResponse[OrganizationOut], status_code=status.HTTP_201_CREATED)
async def create_organization(
    body: OrganizationCreate,
    context: AuthorizationContext = Depends(require_roles(*ADVISOR_ROLES)),
    session: AsyncSession = Depends(get_db),
):
    organization = await _svc(session, context).create_client(body)
    return {"data": OrganizationOut.model_validate(organization)}


@router.get("/{organization_id}", response_model=DataResponse[OrganizationOut])
async def get_organization(
    organization_id: str,
    context: AuthorizationContext = Depends(get_authorization_context),
    session: AsyncSession = Depends(get_db),
):
    organization = await _svc(session, context).get_organization(organization_id)
    return {"data": OrganizationOut.model_validate(organization)}


@router.patch("/{organization_id}", response_model=DataResponse[OrganizationOut])
async def update_organization(
    organization_id: str,
    body: OrganizationUpdate,
    context: AuthorizationContext = Depends(require_roles(*ADVISOR_ROLES)),
    session: AsyncSession = Depends(get_db),
):
    organization = await _svc(session, context).update_organization(organization_id, body)
    return {"data": OrganizationOut.model_validate(organization)}
