"""Client invitations: pending membership, acceptance on the right subdomain only."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError

from belegboost.core.exceptions import OrphanedRegistrationFailure
from belegboost.domain.audit import AuditLogEntry
from belegboost.domain.mixins import utcnow
from belegboost.domain.organization import Organization
from belegboost.domain.user import User
from belegboost.repositories.entities import UserRepository
from belegboost.schemas.auth import InvitationRequest
from belegboost.services.registration import RegistrationService
from tests.conftest import PASSWORD, cookie_value


def _invite(**overrides) -> dict:
    payload = {
        "email": "ines@it-consulting.de",
        "firstName": "Ines",
        "lastName": "Invite",
        "role": "client_admin",
        "organizationName": "IT Consulting AG",
    }
    payload.update(overrides)
    return payload


async def _send_invite(http, seeded, **overrides):
    async with http(seeded.host, seeded.owner_credential) as client:
        return await client.post("/api/v1/invitations", json=_invite(**overrides))


async def _accept(http, host: str, token: str):
    async with http(host) as client:
        return await client.post(
            "/api/v1/invitations/accept",
            json={"invitationToken": token, "password": PASSWORD, "confirmPassword": PASSWORD},
        )


class TestInvite:
    @pytest.mark.asyncio
    async def test_invite_creates_organization_and_pending_user(
        self, http, session_factory, mueller
    ) -> None:
        resp = await _send_invite(http, mueller)

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["role"] == "client_admin"
        assert data["invitationToken"]

        async with session_factory() as session:
            user = await session.get(User, data["userId"])
            organization = await session.get(Organization, data["organizationId"])
            invites = (
                await session.execute(
                    select(AuditLogEntry).where(AuditLogEntry.action == "invite")
                )
            ).scalars().all()

        assert user.status == "pending"
        assert user.identity_id is None
        assert user.tenant_id == mueller.tenant.id
        assert organization.type == "client"
        assert organization.name == "IT Consulting AG"
        assert [e.resource_id for e in invites] == [user.id]

    @pytest.mark.asyncio
    async def test_invite_into_existing_organization(self, http, mueller) -> None:
        resp = await _send_invite(
            http, mueller, organizationName=None, organizationId=mueller.client_org.id
        )
        assert resp.status_code == 201
        assert resp.json()["data"]["organizationId"] == mueller.client_org.id

    @pytest.mark.asyncio
    async def test_cannot_invite_into_other_tenant_organization(self, http, mueller, schmidt) -> None:
        resp = await _send_invite(
            http, mueller, organizationName=None, organizationId=schmidt.client_org.id
        )
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_client_cannot_invite(self, http, mueller) -> None:
        async with http(mueller.host, mueller.client_credential) as client:
            resp = await client.post("/api/v1/invitations", json=_invite())
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_existing_email_is_a_conflict(self, http, mueller) -> None:
        resp = await _send_invite(http, mueller, email="client@mueller.de")
        assert resp.status_code == 409

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"role": "owner"},
            {"role": "advisor"},
            {"organizationId": "some-id"},
            {"organizationName": None},
        ],
    )
    async def test_payload_validation(self, http, mueller, overrides) -> None:
        resp = await _send_invite(http, mueller, **overrides)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_failed_invitee_step_removes_new_organization(
        self, session_factory, tenancy, mueller, monkeypatch
    ) -> None:
        async def _failing_create(self, **kwargs):
            raise SQLAlchemyError("users table unavailable")

        monkeypatch.setattr(UserRepository, "create", _failing_create)
        data = InvitationRequest(
            email="ines@it-consulting.de", first_name="Ines", last_name="Invite",
            role="client_admin", organization_name="IT Consulting AG",
        )

        with pytest.raises(OrphanedRegistrationFailure):
            await RegistrationService(session_factory, tenancy).invite_client(
                mueller.owner_context, data
            )

        async with session_factory() as session:
            count = (
                await session.execute(
                    select(func.count()).select_from(Organization)
                    .where(Organization.name == "IT Consulting AG")
                )
            ).scalar_one()
        assert count == 0


class TestAccept:
    @pytest.mark.asyncio
    async def test_accept_activates_and_logs_in(self, http, mueller) -> None:
        token = (await _send_invite(http, mueller)).json()["data"]["invitationToken"]

        resp = await _accept(http, mueller.host, token)
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "active"
        credential = cookie_value(resp)
        assert credential

        async with http(mueller.host, credential) as client:
            me = await client.get("/api/v1/auth/me")
        assert me.status_code == 200
        assert me.json()["data"]["context"]["role"] == "client_admin"

    @pytest.mark.asyncio
    async def test_token_is_single_use(self, http, mueller) -> None:
        token = (await _send_invite(http, mueller)).json()["data"]["invitationToken"]
        assert (await _accept(http, mueller.host, token)).status_code == 200
        assert (await _accept(http, mueller.host, token)).status_code == 404

    @pytest.mark.asyncio
    async def test_token_of_other_tenant_is_not_found(self, http, mueller, schmidt) -> None:
        token = (await _send_invite(http, mueller)).json()["data"]["invitationToken"]
        resp = await _accept(http, schmidt.host, token)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_expired_token_is_not_found(self, http, session_factory, mueller) -> None:
        data = (await _send_invite(http, mueller)).json()["data"]
        async with session_factory() as session:
            await session.execute(
                update(User).where(User.id == data["userId"])
                .values(invitation_expires_at=utcnow() - timedelta(minutes=1))
            )
            await session.commit()

        resp = await _accept(http, mueller.host, data["invitationToken"])
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_accept_on_root_domain_has_no_tenant(self, http, mueller) -> None:
        token = (await _send_invite(http, mueller)).json()["data"]["invitationToken"]
        async with http("localhost") as client:
            resp = await client.post(
                "/tenants/mueller/api/v1/invitations/accept",
                json={"invitationToken": token, "password": PASSWORD, "confirmPassword": PASSWORD},
            )
        assert resp.status_code == 404
