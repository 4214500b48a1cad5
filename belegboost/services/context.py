"""Context assembler: turns a request into an AuthorizationContext or a typed failure.

The five steps run in a fixed order and stop at the first failure. Nothing
is cached between requests and nothing is retried.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.config import TenancyConfig
from belegboost.core.context import AuthorizationContext
from belegboost.core.exceptions import (
    MembershipNotFound,
    NoTenantInRequest,
    TenantMismatch,
    TenantNotFound,
    Unauthenticated,
)
from belegboost.core.hosts import resolve_subdomain
from belegboost.domain.enums import UserRole
from belegboost.repositories.directory import DirectoryRepository
from belegboost.services.session import SessionResolver

logger = logging.getLogger(__name__)


class ContextAssembler:
    def __init__(self, session: AsyncSession, resolver: SessionResolver, config: TenancyConfig):
        self._directory = DirectoryRepository(session)
        self._resolver = resolver
        self._config = config

    async def assemble(
        self,
        host: str | None,
        credential: str | None,
        path_subdomain: str | None = None,
    ) -> AuthorizationContext:
        # 1. subdomain, from the Host header only
        subdomain = resolve_subdomain(host, self._config)
        if subdomain is None:
            raise NoTenantInRequest(subdomain=path_subdomain)
        if path_subdomain is not None and path_subdomain.lower() != subdomain:
            # /tenants/<other>/... requested directly on a foreign host
            raise TenantNotFound(subdomain=path_subdomain)

        # 2. principal
        principal = await self._resolver.resolve(credential)
        if principal is None:
            raise Unauthenticated(subdomain=subdomain)

        # 3. tenant
        tenant = await self._directory.tenant_by_slug(subdomain)
        if tenant is None or not tenant.is_active:
            raise TenantNotFound(subdomain=subdomain, identity_id=principal.identity_id)

        # 4. membership
        membership = await self._directory.membership_by_identity(principal.identity_id)
        if membership is None or not membership.user.is_active:
            raise MembershipNotFound(subdomain=subdomain, identity_id=principal.identity_id)

        # 5. cross-check, never skipped
        if membership.user.tenant_id != tenant.id or membership.tenant.id != tenant.id:
            raise TenantMismatch(subdomain=subdomain, identity_id=principal.identity_id)

        context = AuthorizationContext(
            tenant_id=tenant.id,
            organization_id=membership.user.organization_id,
            user_id=membership.user.id,
            role=UserRole(membership.user.role),
            subdomain=subdomain,
        )
        logger.debug("Context for %s: user=%s role=%s", subdomain, context.user_id, context.role.value)
        return context
