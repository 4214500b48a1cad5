"""Shared FastAPI dependencies: tenancy config, identity provider, authorization context."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.config import TenancyConfig
from belegboost.core.context import AuthorizationContext
from belegboost.core.exceptions import ForbiddenError
from belegboost.db.base import get_db
from belegboost.domain.enums import UserRole
from belegboost.routers.cookies import session_credential
from belegboost.services.context import ContextAssembler
from belegboost.services.identity import IdentityProvider, LocalIdentityProvider
from belegboost.services.session import SessionResolver


def get_tenancy_config(request: Request) -> TenancyConfig:
    return request.app.state.tenancy


def get_identity_provider(
    session: AsyncSession = Depends(get_db),
    config: TenancyConfig = Depends(get_tenancy_config),
) -> IdentityProvider:
    return LocalIdentityProvider(session, config.session_max_age)


def get_session_resolver(
    provider: IdentityProvider = Depends(get_identity_provider),
) -> SessionResolver:
    return SessionResolver(provider)


async def get_authorization_context(
    request: Request,
    session: AsyncSession = Depends(get_db),
    resolver: SessionResolver = Depends(get_session_resolver),
    config: TenancyConfig = Depends(get_tenancy_config),
) -> AuthorizationContext:
    """Resolve the caller's context for every tenant-scoped endpoint."""
    assembler = ContextAssembler(session, resolver, config)
    return await assembler.assemble(
        host=request.headers.get("host"),
        credential=session_credential(request, config),
        path_subdomain=request.path_params.get("tenant"),
    )


def require_roles(*roles: UserRole) -> Callable[..., AuthorizationContext]:
    """Dependency factory restricting an endpoint to the given roles."""

    async def _checker(
        context: AuthorizationContext = Depends(get_authorization_context),
    ) -> AuthorizationContext:
        if context.role not in roles:
            raise ForbiddenError("Your role does not permit this action")
        return context

    return _checker


ADVISOR_ROLES = (UserRole.OWNER, UserRole.ADVISOR)
OWNER_ONLY = (UserRole.OWNER,)
