"""Unscoped directory lookups used before an AuthorizationContext exists.

Only the context assembler and the registration / invitation / login flows
use this module. Business operations go through ScopedRepository.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.domain.enums import OrganizationType
from belegboost.domain.organization import Organization
from belegboost.domain.tenant import Tenant
from belegboost.domain.user import User


@dataclass(frozen=True)
class Membership:
    tenant: Tenant
    organization: Organization
    user: User


class DirectoryRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def tenant_by_slug(self, slug: str) -> Tenant | None:
        result = await self._session.execute(
            select(Tenant).where(Tenant.subdomain == slug.lower()).limit(1)
        )
        return result.scalars().first()

    async def subdomain_taken(self, slug: str) -> bool:
        return await self.tenant_by_slug(slug) is not None

    async def membership_by_identity(self, identity_id: str) -> Membership | None:
        result = await self._session.execute(
            select(User, Organization, Tenant)
            .join(Organization, Organization.id == User.organization_id)
            .join(Tenant, Tenant.id == User.tenant_id)
            .where(User.identity_id == identity_id)
            .limit(1)
        )
        row = result.first()
        if row is None:
            return None
        user, organization, tenant = row
        return Membership(tenant=tenant, organization=organization, user=user)

    async def user_by_invitation_token(self, token: str) -> User | None:
        result = await self._session.execute(
            select(User).where(User.invitation_token == token).limit(1)
        )
        return result.scalars().first()

    async def email_in_tenant(self, tenant_id: str, email: str) -> bool:
        result = await self._session.execute(
            select(User.id)
            .where(User.tenant_id == tenant_id)
            .where(User.email == email.lower())
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def advisor_organization(self, tenant_id: str) -> Organization | None:
        result = await self._session.execute(
            select(Organization)
            .where(Organization.tenant_id == tenant_id)
            .where(Organization.type == OrganizationType.ADVISOR.value)
            .limit(1)
        )
        return result.scalars().first()

    # ------------------------------------------------------------------
    # Creation sequence steps (each flushed on its own)
    # ------------------------------------------------------------------

    async def add(self, instance: Any) -> Any:
        self._session.add(instance)
        await self._session.flush()
        await self._session.refresh(instance)
        return instance

    async def purge(self, instance: Any) -> None:
        """Physically remove a row that was never reachable. Compensation only."""
        # The identity key survives the expiry caused by a rollback
        model = type(instance)
        entity_id = inspect(instance).identity[0]
        await self._session.execute(delete(model).where(model.id == entity_id))
        await self._session.flush()
