"""Users router: memberships of the caller's tenant (or organization, for clients)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.context import AuthorizationContext
from belegboost.core.pagination import PaginationParams
from belegboost.core.response import DataResponse, ListResponse, paginated
from belegboost.db.base import get_db
from belegboost.domain.enums import UserRole, UserStatus
from belegboost.routers.deps import (
    OWNER_ONLY,
    get_authorization_context,
    get_identity_provider,
    require_roles,
)
from belegboost.schemas.tenant import UserOut
from belegboost.services.identity import IdentityProvider
from belegboost.services.user import UserService

router = APIRouter(prefix="/users", tags=["Users"])


def _svc(session: AsyncSession, context: AuthorizationContext) -> UserService:
    return UserService(session, context)


@router.get("", response_model=ListResponse[UserOut])
async def list_users(
    filter_status: Optional[UserStatus] = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
    context: AuthorizationContext = Depends(get_authorization_context),
    session: AsyncSession = Depends(get_db),
):
    page = await _svc(session, context).list_users(pagination, status=filter_status)
    return paginated(page, pagination, UserOut)


@router.get("/{user_id}", response_model=DataResponse[UserOut])
async def get_user(
    user_id: str,
    context: AuthorizationContext = Depends(get_authorization_context),
    session: AsyncSession = Depends(get_db),
):
    user = await _svc(session, context).get_user(user_id)
    return {"data": UserOut.model_validate(user)}


@router.post("/{user_id}/deactivate", response_model=DataResponse[UserOut])
async def deactivate_user(
    user_id: str,
    context: AuthorizationContext = Depends(
        require_roles(UserRole.OWNER, UserRole.CLIENT_ADMIN)
    ),
    session: AsyncSession = Depends(get_db),
):
    user = await _svc(session, context).deactivate_user(user_id)
    return {"data": UserOut.model_validate(user)}


@router.post("/{user_id}/erase", response_model=DataResponse[UserOut])
async def erase_user(
    user_id: str,
    context: AuthorizationContext = Depends(require_roles(*OWNER_ONLY)),
    session: AsyncSession = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    """Scrub a user's personal data and pseudonymize their audit trail."""
    user = await _svc(session, context).erase_user(user_id, provider)
    return {"data": UserOut.model_validate(user)}
