"""Multi-record creation flows: advisor registration, client invitation, invitation acceptance.

Each step commits on its own, like an independent write to the store. When
a step fails, the steps that already succeeded are undone in reverse order
before the error is raised, so no tenant without owner (or organization
without invitee) is left behind. Undo failures are logged as orphans that
need manual remediation.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from belegboost.core.config import TenancyConfig
from belegboost.core.context import AuthorizationContext
from belegboost.core.exceptions import (
    AppException,
    ConflictError,
    DuplicateSubdomain,
    ForbiddenError,
    NotFoundError,
    OrphanedRegistrationFailure,
    ReservedSubdomain,
    TenantNotFound,
)
from belegboost.domain.enums import (
    AuditAction,
    OrganizationStatus,
    OrganizationType,
    TenantStatus,
    UserRole,
    UserStatus,
)
from belegboost.domain.mixins import utcnow
from belegboost.domain.organization import Organization
from belegboost.domain.tenant import Tenant
from belegboost.domain.user import User
from belegboost.repositories.directory import DirectoryRepository
from belegboost.repositories.entities import OrganizationRepository, UserRepository
from belegboost.schemas.auth import AcceptInvitationRequest, InvitationRequest, RegistrationRequest
from belegboost.services.audit import AuditService
from belegboost.services.identity import IdentityProvider, LocalIdentityProvider, SessionCredential

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProviderFactory = Callable[[AsyncSession], IdentityProvider]


class CompensatingSequence:
    """Ordered durable steps with reverse-order undo on failure."""

    def __init__(self, session: AsyncSession, name: str):
        self._session = session
        self._name = name
        self._undo: list[tuple[str, Callable[[], Awaitable[Any]]]] = []

    async def step(
        self,
        label: str,
        action: Callable[[], Awaitable[T]],
        undo: Callable[[T], Awaitable[Any]] | None = None,
        translate: Callable[[Exception], AppException | None] | None = None,
    ) -> T:
        try:
            result = await action()
            await self._session.commit()
        except Exception as exc:
            await self._session.rollback()
            had_prior = bool(self._undo)
            logger.error("%s step '%s' failed: %s", self._name, label, exc)
            compensated = await self.compensate()
            mapped = translate(exc) if translate else None
            if mapped is not None:
                raise mapped from exc
            if had_prior:
                raise OrphanedRegistrationFailure(label, compensated=compensated) from exc
            raise
        if undo is not None:
            self._undo.append((label, lambda: undo(result)))
        return result

    async def compensate(self) -> bool:
        """Undo completed steps newest first. Returns False if any undo failed."""
        ok = True
        while self._undo:
            label, undo = self._undo.pop()
            try:
                await undo()
                await self._session.commit()
                logger.info("%s: undid step '%s'", self._name, label)
            except Exception as exc:
                await self._session.rollback()
                ok = False
                logger.critical(
                    "ORPHANED RESOURCE: %s could not undo step '%s' (%s); manual remediation required",
                    self._name, label, exc,
                )
        return ok


@dataclass(frozen=True)
class RegistrationOutcome:
    tenant: Tenant
    organization: Organization
    user: User
    credential: SessionCredential | None


@dataclass(frozen=True)
class InvitationOutcome:
    organization: Organization
    user: User


@dataclass(frozen=True)
class AcceptanceOutcome:
    user: User
    credential: SessionCredential | None


def _duplicate_subdomain(slug: str) -> Callable[[Exception], AppException | None]:
    def _translate(exc: Exception) -> AppException | None:
        return DuplicateSubdomain(slug) if isinstance(exc, IntegrityError) else None

    return _translate


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class RegistrationService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        config: TenancyConfig,
        provider_factory: ProviderFactory | None = None,
    ):
        self._session_factory = session_factory
        self._config = config
        self._provider_factory = provider_factory or (
            lambda session: LocalIdentityProvider(session, config.session_max_age)
        )

    async def _open_session(self, email: str, password: str) -> SessionCredential | None:
        """Create a login session after the records exist. Failure is not fatal.

        Runs in its own session so a failure here cannot touch the records
        the sequence already committed.
        """
        async with self._session_factory() as session:
            try:
                credential = await self._provider_factory(session).create_session_for_identity(
                    email, password
                )
                await session.commit()
                return credential
            except (AppException, SQLAlchemyError) as exc:
                await session.rollback()
                logger.warning("Session creation after signup failed for %s: %s", email, exc)
                return None

    # ------------------------------------------------------------------
    # Subdomains
    # ------------------------------------------------------------------

    async def subdomain_available(self, slug: str) -> bool:
        slug = slug.lower()
        if self._config.is_reserved(slug):
            return False
        async with self._session_factory() as session:
            return not await DirectoryRepository(session).subdomain_taken(slug)

    # ------------------------------------------------------------------
    # Advisor registration
    # ------------------------------------------------------------------

    async def register_tax_advisor(self, data: RegistrationRequest) -> RegistrationOutcome:
        slug = data.subdomain
        if self._config.is_reserved(slug):
            raise ReservedSubdomain(slug)

        async with self._session_factory() as session:
            directory = DirectoryRepository(session)
            provider = self._provider_factory(session)
            if await directory.subdomain_taken(slug):
                raise DuplicateSubdomain(slug)

            sequence = CompensatingSequence(session, f"registration of '{slug}'")

            principal = await sequence.step(
                "identity",
                lambda: provider.create_identity(
                    data.email, data.password, f"{data.first_name} {data.last_name}"
                ),
                undo=lambda p: provider.delete_identity(p.identity_id),
            )
            tenant = await sequence.step(
                "tenant",
                lambda: directory.add(Tenant(
                    subdomain=slug,
                    name=data.firm_name,
                    owner_email=data.email,
                    status=TenantStatus.ACTIVE.value,
                )),
                undo=directory.purge,
                translate=_duplicate_subdomain(slug),
            )
            organization = await sequence.step(
                "advisor organization",
                lambda: directory.add(Organization(
                    tenant_id=tenant.id,
                    type=OrganizationType.ADVISOR.value,
                    name=data.firm_name,
                    contact_email=data.email,
                    status=OrganizationStatus.ACTIVE.value,
                )),
                undo=directory.purge,
            )
            user = await sequence.step(
                "owner membership",
                lambda: directory.add(User(
                    tenant_id=tenant.id,
                    organization_id=organization.id,
                    identity_id=principal.identity_id,
                    role=UserRole.OWNER.value,
                    first_name=data.first_name,
                    last_name=data.last_name,
                    email=data.email,
                    status=UserStatus.ACTIVE.value,
                )),
            )
            logger.info("Registered tenant '%s' (%s) with owner %s", slug, tenant.id, user.id)

        credential = await self._open_session(data.email, data.password)
        return RegistrationOutcome(tenant, organization, user, credential)

    # ------------------------------------------------------------------
    # Client invitations
    # ------------------------------------------------------------------

    async def invite_client(
        self, context: AuthorizationContext, data: InvitationRequest, ip_address: str | None = None
    ) -> InvitationOutcome:
        if not context.is_advisor:
            raise ForbiddenError("Only advisors can invite clients")

        async with self._session_factory() as session:
            directory = DirectoryRepository(session)
            if await directory.email_in_tenant(context.tenant_id, data.email):
                raise ConflictError(f"A user with email '{data.email}' already exists")

            organizations = OrganizationRepository(session, context)
            users = UserRepository(session, context)
            sequence = CompensatingSequence(session, f"invitation of {data.email}")

            if data.organization_id:
                organization = await organizations.get_by_id(data.organization_id)
                if organization is None or organization.type != OrganizationType.CLIENT:
                    raise NotFoundError("Organization", data.organization_id)
            else:
                organization = await sequence.step(
                    "client organization",
                    lambda: organizations.create(
                        type=OrganizationType.CLIENT.value,
                        name=data.organization_name,
                        contact_email=data.email,
                        status=OrganizationStatus.ACTIVE.value,
                    ),
                    undo=directory.purge,
                )

            async def _create_invitee() -> User:
                invitee = await users.create(
                    organization_id=organization.id,
                    role=data.role.value,
                    first_name=data.first_name,
                    last_name=data.last_name,
                    email=data.email,
                    status=UserStatus.PENDING.value,
                    invitation_token=secrets.token_urlsafe(32),
                    invitation_expires_at=utcnow() + timedelta(hours=self._config.invitation_expiry_hours),
                )
                await AuditService(session, context).record(
                    AuditAction.INVITE, "user", invitee.id,
                    ip_address=ip_address,
                    details={"organization_id": organization.id, "role": data.role.value},
                )
                return invitee

            user = await sequence.step("invitee membership", _create_invitee)
            return InvitationOutcome(organization, user)

    async def accept_invitation(
        self, subdomain: str, data: AcceptInvitationRequest
    ) -> AcceptanceOutcome:
        async with self._session_factory() as session:
            directory = DirectoryRepository(session)
            provider = self._provider_factory(session)

            tenant = await directory.tenant_by_slug(subdomain)
            if tenant is None or not tenant.is_active:
                raise TenantNotFound(subdomain=subdomain)

            user = await directory.user_by_invitation_token(data.invitation_token)
            if (
                user is None
                or user.tenant_id != tenant.id
                or user.status != UserStatus.PENDING
                or user.invitation_expires_at is None
                or _as_utc(user.invitation_expires_at) <= utcnow()
            ):
                raise NotFoundError("Invitation")

            sequence = CompensatingSequence(session, f"invitation acceptance of {user.id}")
            principal = await sequence.step(
                "identity",
                lambda: provider.create_identity(
                    user.email, data.password, f"{user.first_name} {user.last_name}"
                ),
                undo=lambda p: provider.delete_identity(p.identity_id),
            )

            async def _activate() -> User:
                user.identity_id = principal.identity_id
                user.status = UserStatus.ACTIVE.value
                user.invitation_token = None
                user.invitation_expires_at = None
                await session.flush()
                await session.refresh(user)
                return user

            await sequence.step("activation", _activate)

        credential = await self._open_session(user.email, data.password)
        return AcceptanceOutcome(user, credential)
