"""Root-domain registration endpoints (/api/v1/registrations/*)."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from belegboost.core.config import TenancyConfig
from belegboost.core.response import DataResponse
from belegboost.db.base import get_session_factory
from belegboost.routers.deps import get_tenancy_config
from belegboost.schemas.auth import RegistrationRequest, RegistrationResult, SubdomainAvailability
from belegboost.services.registration import RegistrationService
from belegboost.routers.cookies import set_session_cookie

router = APIRouter(prefix="/api/v1/registrations", tags=["Registration"])


def get_registration_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    config: TenancyConfig = Depends(get_tenancy_config),
) -> RegistrationService:
    return RegistrationService(session_factory, config)


@router.post("", response_model=DataResponse[RegistrationResult], status_code=status.HTTP_201_CREATED)
async def register_tax_advisor(
    body: RegistrationRequest,
    response: Response,
    svc: RegistrationService = Depends(get_registration_service),
    config: TenancyConfig = Depends(get_tenancy_config),
):
    """Create tenant, advisor organization and owner in one compensated sequence."""
    # A client disconnect must not interrupt the sequence half way
    outcome = await asyncio.shield(svc.register_tax_advisor(body))
    if outcome.credential is not None:
        set_session_cookie(response, outcome.credential, config)
    return {
        "data": RegistrationResult(
            tenant_id=outcome.tenant.id,
            subdomain=outcome.tenant.subdomain,
            organization_id=outcome.organization.id,
            user_id=outcome.user.id,
            session_created=outcome.credential is not None,
        )
    }


@router.get("/subdomains/{slug}", response_model=DataResponse[SubdomainAvailability])
async def check_subdomain(
    slug: str = Path(min_length=1, max_length=63),
    svc: RegistrationService = Depends(get_registration_service),
):
    available = await svc.subdomain_available(slug)
    return {"data": SubdomainAvailability(subdomain=slug.lower(), available=available)}
