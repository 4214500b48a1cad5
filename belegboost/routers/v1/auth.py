"""Login, logout and current-context endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.config import TenancyConfig
from belegboost.core.context import AuthorizationContext
from belegboost.core.response import DataResponse
from belegboost.db.base import get_db
from belegboost.routers.deps import (
    get_authorization_context,
    get_identity_provider,
    get_tenancy_config,
)
from belegboost.schemas.auth import LoginRequest
from belegboost.schemas.tenant import ContextOut, MeOut, UserOut
from belegboost.services.auth import AuthService
from belegboost.services.identity import IdentityProvider
from belegboost.routers.cookies import clear_session_cookie, session_credential, set_session_cookie
from belegboost.services.user import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])


def _svc(
    session: AsyncSession = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
    config: TenancyConfig = Depends(get_tenancy_config),
) -> AuthService:
    return AuthService(session, provider, config)


def _context_out(context: AuthorizationContext) -> ContextOut:
    return ContextOut(
        tenant_id=context.tenant_id,
        organization_id=context.organization_id,
        user_id=context.user_id,
        role=context.role,
        subdomain=context.subdomain,
    )


@router.post("/login", response_model=DataResponse[ContextOut])
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    svc: AuthService = Depends(_svc),
    config: TenancyConfig = Depends(get_tenancy_config),
):
    credential, context = await svc.login(
        request.headers.get("host"),
        body,
        path_subdomain=request.path_params.get("tenant"),
        ip_address=request.client.host if request.client else None,
    )
    set_session_cookie(response, credential, config)
    return {"data": _context_out(context)}


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    request: Request,
    svc: AuthService = Depends(_svc),
    config: TenancyConfig = Depends(get_tenancy_config),
):
    await svc.logout(session_credential(request, config))
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_session_cookie(response, config)
    return response


@router.get("/me", response_model=DataResponse[MeOut])
async def me(
    context: AuthorizationContext = Depends(get_authorization_context),
    session: AsyncSession = Depends(get_db),
):
    user = await UserService(session, context).get_user(context.user_id)
    return {"data": MeOut(context=_context_out(context), user=UserOut.model_validate(user))}
