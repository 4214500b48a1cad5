"""Login and logout on a tenant subdomain."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.config import TenancyConfig
from belegboost.core.context import AuthorizationContext
from belegboost.core.exceptions import (
    AuthProviderUnavailable,
    InvalidCredentials,
    NoTenantInRequest,
    TenantNotFound,
)
from belegboost.core.hosts import resolve_subdomain
from belegboost.domain.enums import AuditAction, UserRole
from belegboost.domain.mixins import utcnow
from belegboost.repositories.directory import DirectoryRepository
from belegboost.schemas.auth import LoginRequest
from belegboost.services.audit import AuditService
from belegboost.services.identity import IdentityProvider, SessionCredential

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, session: AsyncSession, provider: IdentityProvider, config: TenancyConfig):
        self._session = session
        self._provider = provider
        self._config = config
        self._directory = DirectoryRepository(session)

    async def login(
        self,
        host: str | None,
        data: LoginRequest,
        path_subdomain: str | None = None,
        ip_address: str | None = None,
    ) -> tuple[SessionCredential, AuthorizationContext]:
        subdomain = resolve_subdomain(host, self._config)
        if subdomain is None:
            raise NoTenantInRequest(subdomain=path_subdomain)
        if path_subdomain is not None and path_subdomain.lower() != subdomain:
            raise TenantNotFound(subdomain=path_subdomain)

        tenant = await self._directory.tenant_by_slug(subdomain)
        if tenant is None or not tenant.is_active:
            raise TenantNotFound(subdomain=subdomain)

        credential = await self._provider.create_session_for_identity(data.email, data.password)

        membership = await self._directory.membership_by_identity(credential.identity_id)
        if membership is None or membership.user.tenant_id != tenant.id or not membership.user.is_active:
            # Valid password, wrong tenant: answer exactly like a bad password
            await self._provider.delete_session(credential.secret)
            logger.warning(
                "Login of identity %s rejected on subdomain '%s': no active membership in tenant",
                credential.identity_id, subdomain,
            )
            raise InvalidCredentials()

        user = membership.user
        user.last_login_at = utcnow()
        await self._session.flush()

        context = AuthorizationContext(
            tenant_id=tenant.id,
            organization_id=user.organization_id,
            user_id=user.id,
            role=UserRole(user.role),
            subdomain=subdomain,
        )
        await AuditService(self._session, context).record(
            AuditAction.LOGIN, "session", None, user_email=user.email, ip_address=ip_address,
        )
        return credential, context

    async def logout(self, credential: str | None) -> None:
        """Delete the provider session. The cookie is cleared by the caller regardless."""
        if not credential:
            return
        try:
            await self._provider.delete_session(credential)
        except AuthProviderUnavailable:
            logger.warning("Could not delete session at identity provider during logout")
