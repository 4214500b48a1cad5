"""Membership management: listing, deactivation, GDPR erasure."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.context import AuthorizationContext
from belegboost.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from belegboost.core.pagination import Page, PaginationParams
from belegboost.domain.enums import UserRole, UserStatus
from belegboost.domain.user import User
from belegboost.repositories.entities import UserRepository
from belegboost.services.audit import AuditService
from belegboost.services.identity import IdentityProvider

logger = logging.getLogger(__name__)

ERASED_NAME = "Erased"


class UserService:
    def __init__(self, session: AsyncSession, context: AuthorizationContext):
        self._context = context
        self._repo = UserRepository(session, context)
        self._audit = AuditService(session, context)

    async def list_users(self, pagination: PaginationParams, status: UserStatus | None = None) -> Page[User]:
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"status": status.value if status else None},
        )

    async def get_user(self, user_id: str) -> User:
        user = await self._repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def deactivate_user(self, user_id: str) -> User:
        if self._context.role not in (UserRole.OWNER, UserRole.CLIENT_ADMIN):
            raise ForbiddenError("Only owners and client admins can deactivate users")
        user = await self.get_user(user_id)
        if user.id == self._context.user_id:
            raise ConflictError("You cannot deactivate your own account")
        if user.role == UserRole.OWNER:
            raise ForbiddenError("The tenant owner cannot be deactivated")
        updated = await self._repo.update(user_id, status=UserStatus.INACTIVE.value)
        return updated  # type: ignore[return-value]

    async def erase_user(self, user_id: str, provider: IdentityProvider) -> User:
        """GDPR erasure: scrub personal fields, keep the row and the audit trail."""
        if self._context.role != UserRole.OWNER:
            raise ForbiddenError("Only the tenant owner can erase users")
        user = await self.get_user(user_id)
        if user.role == UserRole.OWNER:
            raise ForbiddenError("The tenant owner cannot be erased")

        identity_id = user.identity_id
        updated = await self._repo.update(
            user_id,
            first_name=ERASED_NAME,
            last_name=ERASED_NAME,
            email=f"erased-{user.id}@invalid",
            phone=None,
            status=UserStatus.INACTIVE.value,
            identity_id=None,
            invitation_token=None,
            invitation_expires_at=None,
        )
        if identity_id:
            await provider.delete_identity(identity_id)
        await self._audit.pseudonymize_user(user_id)
        logger.info("Erased personal data of user %s in tenant %s", user_id, self._context.tenant_id)
        return updated  # type: ignore[return-value]
