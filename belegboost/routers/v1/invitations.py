"""Client invitation endpoints."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Request, Response, status

from belegboost.core.config import TenancyConfig
from belegboost.core.context import AuthorizationContext
from belegboost.core.exceptions import NoTenantInRequest, TenantNotFound
from belegboost.core.hosts import resolve_subdomain
from belegboost.core.response import DataResponse
from belegboost.routers.deps import ADVISOR_ROLES, get_tenancy_config, require_roles
from belegboost.routers.registration import get_registration_service
from belegboost.schemas.auth import AcceptInvitationRequest, InvitationOut, InvitationRequest
from belegboost.schemas.tenant import UserOut
from belegboost.services.registration import RegistrationService
from belegboost.routers.cookies import set_session_cookie

router = APIRouter(prefix="/invitations", tags=["Invitations"])


@router.post("", response_model=DataResponse[InvitationOut], status_code=status.HTTP_201_CREATED)
async def invite_client(
    body: InvitationRequest,
    request: Request,
    context: AuthorizationContext = Depends(require_roles(*ADVISOR_ROLES)),
    svc: RegistrationService = Depends(get_registration_service),
):
    """Create (or reuse) a client organization and a pending membership.

    Email delivery is handled elsewhere; the token is returned to the advisor.
    """
    ip = request.client.host if request.client else None
    outcome = await asyncio.shield(svc.invite_client(context, body, ip_address=ip))
    return {
        "data": InvitationOut(
            user_id=outcome.user.id,
            organization_id=outcome.organization.id,
            email=outcome.user.email,
            role=outcome.user.role,
            invitation_token=outcome.user.invitation_token,
        )
    }


@router.post("/accept", response_model=DataResponse[UserOut])
async def accept_invitation(
    body: AcceptInvitationRequest,
    request: Request,
    response: Response,
    svc: RegistrationService = Depends(get_registration_service),
    config: TenancyConfig = Depends(get_tenancy_config),
):
    subdomain = resolve_subdomain(request.headers.get("host"), config)
    path_subdomain = request.path_params.get("tenant")
    if subdomain is None:
        raise NoTenantInRequest(subdomain=path_subdomain)
    if path_subdomain is not None and path_subdomain.lower() != subdomain:
        raise TenantNotFound(subdomain=path_subdomain)

    outcome = await asyncio.shield(svc.accept_invitation(subdomain, body))
    if outcome.credential is not None:
        set_session_cookie(response, outcome.credential, config)
    return {"data": UserOut.model_validate(outcome.user)}
