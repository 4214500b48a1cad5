"""Context assembly: host + session cookie -> AuthorizationContext, or a typed failure.

Covers cross-tenant isolation: a member of one tenant authenticated on another
tenant's subdomain never gets a context for that tenant.
"""

from __future__ import annotations

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from belegboost.core.exceptions import (
    AuthProviderUnavailable,
    MembershipNotFound,
    NoTenantInRequest,
    TenantMismatch,
    TenantNotFound,
    Unauthenticated,
)
from belegboost.domain.enums import TenantStatus, UserRole, UserStatus
from belegboost.domain.user import User
from belegboost.routers.deps import get_identity_provider
from belegboost.services.context import ContextAssembler
from belegboost.services.identity import LocalIdentityProvider
from belegboost.services.session import SessionResolver
from tests.conftest import set_tenant_status


def _assembler(db_session, tenancy) -> ContextAssembler:
    resolver = SessionResolver(LocalIdentityProvider(db_session, tenancy.session_max_age))
    return ContextAssembler(db_session, resolver, tenancy)


class TestAssemble:
    @pytest.mark.asyncio
    async def test_owner_context(self, db_session, tenancy, mueller) -> None:
        context = await _assembler(db_session, tenancy).assemble(
            "mueller.localhost", mueller.owner_credential
        )
        assert context.tenant_id == mueller.tenant.id
        assert context.organization_id == mueller.advisor_org.id
        assert context.user_id == mueller.owner.id
        assert context.role is UserRole.OWNER
        assert context.subdomain == "mueller"
        assert context.is_advisor and not context.is_client

    @pytest.mark.asyncio
    async def test_root_host_has_no_tenant(self, db_session, tenancy, mueller) -> None:
        with pytest.raises(NoTenantInRequest):
            await _assembler(db_session, tenancy).assemble("localhost", mueller.owner_credential)

    @pytest.mark.asyncio
    async def test_missing_cookie_is_unauthenticated(self, db_session, tenancy, mueller) -> None:
        with pytest.raises(Unauthenticated):
            await _assembler(db_session, tenancy).assemble("mueller.localhost", None)

    @pytest.mark.asyncio
    async def test_garbage_cookie_is_unauthenticated(self, db_session, tenancy, mueller) -> None:
        with pytest.raises(Unauthenticated):
            await _assembler(db_session, tenancy).assemble("mueller.localhost", "not-a-session")

    @pytest.mark.asyncio
    async def test_unknown_tenant(self, db_session, tenancy, mueller) -> None:
        with pytest.raises(TenantNotFound):
            await _assembler(db_session, tenancy).assemble(
                "wagner.localhost", mueller.owner_credential
            )

    @pytest.mark.asyncio
    async def test_suspended_tenant_is_not_found(
        self, db_session, session_factory, tenancy, mueller
    ) -> None:
        await set_tenant_status(session_factory, mueller.tenant.id, TenantStatus.SUSPENDED)
        with pytest.raises(TenantNotFound):
            await _assembler(db_session, tenancy).assemble(
                "mueller.localhost", mueller.owner_credential
            )

    @pytest.mark.asyncio
    async def test_inactive_membership_is_not_found(
        self, db_session, tenancy, mueller
    ) -> None:
        await db_session.execute(
            update(User).where(User.id == mueller.client_user.id)
            .values(status=UserStatus.INACTIVE.value)
        )
        await db_session.commit()
        with pytest.raises(MembershipNotFound):
            await _assembler(db_session, tenancy).assemble(
                "mueller.localhost", mueller.client_credential
            )

    @pytest.mark.asyncio
    async def test_path_tenant_must_match_host(self, db_session, tenancy, mueller, schmidt) -> None:
        with pytest.raises(TenantNotFound):
            await _assembler(db_session, tenancy).assemble(
                "mueller.localhost", mueller.owner_credential, path_subdomain="schmidt"
            )

    @pytest.mark.asyncio
    async def test_reserved_slug_never_yields_a_context(
        self, db_session, session_factory, tenancy, mueller
    ) -> None:
        """Even with a row named 'admin', the host resolves to the root site."""
        from tests.conftest import seed_tenant

        admin = await seed_tenant(session_factory, "admin")
        with pytest.raises(NoTenantInRequest):
            await _assembler(db_session, tenancy).assemble(
                "admin.localhost", admin.owner_credential
            )


class TestCrossTenantIsolation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("who", ["owner_credential", "client_credential"])
    async def test_member_of_one_tenant_on_another_subdomain(
        self, db_session, tenancy, mueller, schmidt, who
    ) -> None:
        with pytest.raises((TenantMismatch, MembershipNotFound)):
            await _assembler(db_session, tenancy).assemble(
                "schmidt.localhost", getattr(mueller, who)
            )

    @pytest.mark.asyncio
    async def test_cross_tenant_response_is_indistinguishable(self, http, mueller, schmidt) -> None:
        """Foreign tenant and non-existent tenant render the same body."""
        async with http(schmidt.host, mueller.owner_credential) as client:
            foreign = await client.get("/api/v1/auth/me")
        async with http("wagner.localhost", mueller.owner_credential) as client:
            unknown = await client.get("/api/v1/auth/me")

        assert foreign.status_code == unknown.status_code == 404
        assert foreign.json() == unknown.json() == {
            "error": {"code": "NOT_FOUND", "message": "Resource not found"}
        }

    @pytest.mark.asyncio
    async def test_unauthenticated_redirects_to_login(self, http, mueller) -> None:
        async with http(mueller.host) as client:
            resp = await client.get("/api/v1/checklists")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "UNAUTHENTICATED"
        assert resp.json()["error"]["redirectTo"] == "/login"

    @pytest.mark.asyncio
    async def test_cross_tenant_attempt_is_logged(self, http, mueller, schmidt, caplog) -> None:
        with caplog.at_level("WARNING"):
            async with http(schmidt.host, mueller.owner_credential) as client:
                await client.get("/api/v1/auth/me")
        assert any(
            "TenantMismatch" in r.getMessage() and "schmidt" in r.getMessage()
            for r in caplog.records
        )


class _UnreachableProvider:
    async def resolve_session(self, credential):
        raise AuthProviderUnavailable()


class TestProviderOutage:
    @pytest.mark.asyncio
    async def test_outage_is_503_not_401(self, app, http, mueller) -> None:
        app.dependency_overrides[get_identity_provider] = lambda: _UnreachableProvider()
        async with http(mueller.host, mueller.owner_credential) as client:
            resp = await client.get("/api/v1/auth/me")
        assert resp.status_code == 503
        assert resp.json()["error"]["code"] == "AUTH_PROVIDER_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_database_errors_become_outage(self, db_session, tenancy) -> None:
        provider = LocalIdentityProvider(db_session, tenancy.session_max_age)

        async def _broken():
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        with pytest.raises(AuthProviderUnavailable):
            await provider._run(_broken())
