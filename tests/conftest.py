"""
Shared test fixtures for pytest.

Provides:
- engine / session_factory: in-memory aiosqlite database, schema created per test
- tenancy: the TenancyConfig every component under test receives
- app: FastAPI app with get_db / get_session_factory bound to the test database
- mueller, schmidt: two seeded tenants (owner + one client organization each)
- http: factory for AsyncClients bound to a Host header and an optional session cookie
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass

import httpx
import pytest
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

import belegboost.domain  # noqa: F401  (registers all tables on Base.metadata)
from belegboost.core.config import Settings, TenancyConfig
from belegboost.core.context import AuthorizationContext
from belegboost.db.base import Base, build_engine, build_session_factory, get_db, get_session_factory
from belegboost.domain.enums import (
    OrganizationStatus,
    OrganizationType,
    TenantStatus,
    UserRole,
    UserStatus,
)
from belegboost.domain.organization import Organization
from belegboost.domain.tenant import Tenant
from belegboost.domain.user import User
from belegboost.main import create_app
from belegboost.services.identity import LocalIdentityProvider

PASSWORD = "Geheim123!"


# ------------------------------------------------------------------ #
# Database
# ------------------------------------------------------------------ #

@pytest.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ------------------------------------------------------------------ #
# Configuration & app
# ------------------------------------------------------------------ #

@pytest.fixture
def test_settings() -> Settings:
    return Settings(app_env="test", database_url="sqlite+aiosqlite://")


@pytest.fixture
def tenancy(test_settings: Settings) -> TenancyConfig:
    return TenancyConfig.from_settings(test_settings)


@pytest.fixture
def app(test_settings: Settings, session_factory) -> FastAPI:
    app = create_app(test_settings)

    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    return app


@pytest.fixture
def http(app: FastAPI) -> Callable[..., httpx.AsyncClient]:
    """Build a client for one host; the session cookie is sent explicitly."""

    def _client(host: str, credential: str | None = None) -> httpx.AsyncClient:
        headers = {"Host": host}
        if credential:
            headers["Cookie"] = f"belegboost_session={credential}"
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url=f"http://{host}",
            headers=headers,
        )

    return _client


# ------------------------------------------------------------------ #
# Seeded tenants
# ------------------------------------------------------------------ #

@dataclass
class SeededTenant:
    tenant: Tenant
    advisor_org: Organization
    client_org: Organization
    owner: User
    client_user: User
    owner_credential: str
    client_credential: str

    @property
    def host(self) -> str:
        return f"{self.tenant.subdomain}.localhost"

    def context_for(self, user: User) -> AuthorizationContext:
        return AuthorizationContext(
            tenant_id=self.tenant.id,
            organization_id=user.organization_id,
            user_id=user.id,
            role=UserRole(user.role),
            subdomain=self.tenant.subdomain,
        )

    @property
    def owner_context(self) -> AuthorizationContext:
        return self.context_for(self.owner)

    @property
    def client_context(self) -> AuthorizationContext:
        return self.context_for(self.client_user)


async def seed_tenant(
    session_factory: async_sessionmaker[AsyncSession],
    slug: str,
    client_name: str = "Bäckerei GmbH",
    client_role: UserRole = UserRole.CLIENT_EMPLOYEE,
) -> SeededTenant:
    async with session_factory() as session:
        provider = LocalIdentityProvider(session, 3600)

        tenant = Tenant(subdomain=slug, name=f"Kanzlei {slug.title()}", owner_email=f"owner@{slug}.de")
        session.add(tenant)
        await session.flush()

        advisor_org = Organization(
            tenant_id=tenant.id, type=OrganizationType.ADVISOR.value,
            name=tenant.name, status=OrganizationStatus.ACTIVE.value,
        )
        client_org = Organization(
            tenant_id=tenant.id, type=OrganizationType.CLIENT.value,
            name=client_name, status=OrganizationStatus.ACTIVE.value,
        )
        session.add_all([advisor_org, client_org])
        await session.flush()

        owner_identity = await provider.create_identity(f"owner@{slug}.de", PASSWORD, "Owner")
        client_identity = await provider.create_identity(f"client@{slug}.de", PASSWORD, "Client")

        owner = User(
            tenant_id=tenant.id, organization_id=advisor_org.id,
            identity_id=owner_identity.identity_id, role=UserRole.OWNER.value,
            first_name="Olga", last_name="Owner", email=f"owner@{slug}.de",
            status=UserStatus.ACTIVE.value,
        )
        client_user = User(
            tenant_id=tenant.id, organization_id=client_org.id,
            identity_id=client_identity.identity_id, role=client_role.value,
            first_name="Carl", last_name="Client", email=f"client@{slug}.de",
            status=UserStatus.ACTIVE.value,
        )
        session.add_all([owner, client_user])
        await session.flush()

        owner_session = await provider.create_session_for_identity(f"owner@{slug}.de", PASSWORD)
        client_session = await provider.create_session_for_identity(f"client@{slug}.de", PASSWORD)
        await session.commit()

        for instance in (tenant, advisor_org, client_org, owner, client_user):
            await session.refresh(instance)

        return SeededTenant(
            tenant=tenant,
            advisor_org=advisor_org,
            client_org=client_org,
            owner=owner,
            client_user=client_user,
            owner_credential=owner_session.secret,
            client_credential=client_session.secret,
        )


@pytest.fixture
async def mueller(session_factory) -> SeededTenant:
    return await seed_tenant(session_factory, "mueller")


@pytest.fixture
async def schmidt(session_factory) -> SeededTenant:
    return await seed_tenant(session_factory, "schmidt", client_name="IT Consulting AG")


async def add_organization(
    session_factory: async_sessionmaker[AsyncSession], seeded: SeededTenant, name: str
) -> Organization:
    async with session_factory() as session:
        organization = Organization(
            tenant_id=seeded.tenant.id, type=OrganizationType.CLIENT.value,
            name=name, status=OrganizationStatus.ACTIVE.value,
        )
        session.add(organization)
        await session.commit()
        await session.refresh(organization)
        return organization


async def set_tenant_status(
    session_factory: async_sessionmaker[AsyncSession], tenant_id: str, status: TenantStatus
) -> None:
    async with session_factory() as session:
        tenant = await session.get(Tenant, tenant_id)
        tenant.status = status.value
        await session.commit()


def cookie_value(response: httpx.Response, name: str = "belegboost_session") -> str | None:
    """Value of a Set-Cookie header, read without a cookie jar."""
    for header in response.headers.get_list("set-cookie"):
        key, _, rest = header.partition("=")
        if key == name:
            return rest.split(";", 1)[0]
    return None
