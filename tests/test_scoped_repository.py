"""Scoped data access: tenant predicate always, organization predicate for client roles,
and identifier injection on create."""

from __future__ import annotations

import logging

import pytest

from belegboost.core.exceptions import (
    NotFoundError,
    OrganizationScopeViolation,
    ValidationError,
)
from belegboost.domain.checklist import Checklist
from belegboost.repositories.entities import (
    AuditLogRepository,
    ChecklistRepository,
    OrganizationRepository,
)
from tests.conftest import add_organization


async def _checklist(db_session, seeded, organization_id: str, title: str) -> Checklist:
    repo = ChecklistRepository(db_session, seeded.owner_context)
    checklist = await repo.create(organization_id=organization_id, title=title)
    await db_session.commit()
    return checklist


class TestOrganizationScoping:
    @pytest.mark.asyncio
    async def test_client_list_ignores_forged_organization_filter(
        self, db_session, session_factory, mueller
    ) -> None:
        other = await add_organization(session_factory, mueller, "IT Consulting AG")
        own = await _checklist(db_session, mueller, mueller.client_org.id, "Jahresabschluss 2024")
        await _checklist(db_session, mueller, other.id, "Lohnunterlagen")

        repo = ChecklistRepository(db_session, mueller.client_context)
        page = await repo.list(filters={"organization_id": other.id})

        assert [c.id for c in page.items] == [own.id]
        assert page.total == 1

    @pytest.mark.asyncio
    async def test_advisor_sees_all_organizations_of_tenant(
        self, db_session, session_factory, mueller
    ) -> None:
        other = await add_organization(session_factory, mueller, "IT Consulting AG")
        await _checklist(db_session, mueller, mueller.client_org.id, "A")
        await _checklist(db_session, mueller, other.id, "B")

        page = await ChecklistRepository(db_session, mueller.owner_context).list()
        assert page.total == 2

        filtered = await ChecklistRepository(db_session, mueller.owner_context).list(
            filters={"organization_id": other.id}
        )
        assert [c.organization_id for c in filtered.items] == [other.id]

    @pytest.mark.asyncio
    async def test_client_get_by_id_of_other_organization_is_missing(
        self, db_session, session_factory, mueller, caplog
    ) -> None:
        other = await add_organization(session_factory, mueller, "IT Consulting AG")
        foreign = await _checklist(db_session, mueller, other.id, "Lohnunterlagen")

        with caplog.at_level(logging.WARNING):
            found = await ChecklistRepository(db_session, mueller.client_context).get_by_id(foreign.id)

        assert found is None
        assert any("Organization scope violation" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_check_scope_raises_for_client_only(self, db_session, session_factory, mueller) -> None:
        other = await add_organization(session_factory, mueller, "IT Consulting AG")
        foreign = await _checklist(db_session, mueller, other.id, "Lohnunterlagen")

        with pytest.raises(OrganizationScopeViolation):
            ChecklistRepository(db_session, mueller.client_context).check_scope(foreign)
        ChecklistRepository(db_session, mueller.owner_context).check_scope(foreign)

    @pytest.mark.asyncio
    async def test_client_sees_only_own_organization(self, db_session, session_factory, mueller) -> None:
        await add_organization(session_factory, mueller, "IT Consulting AG")
        page = await OrganizationRepository(db_session, mueller.client_context).list()
        assert [o.id for o in page.items] == [mueller.client_org.id]


class TestSorting:
    @pytest.mark.asyncio
    async def test_unknown_sort_column_is_rejected(self, db_session, mueller) -> None:
        repo = ChecklistRepository(db_session, mueller.owner_context)
        with pytest.raises(ValidationError):
            await repo.list(order_by="progress_percentage")


class TestTenantScoping:
    @pytest.mark.asyncio
    async def test_other_tenant_record_is_missing(self, db_session, mueller, schmidt) -> None:
        foreign = await _checklist(db_session, schmidt, schmidt.client_org.id, "Schmidt intern")

        repo = ChecklistRepository(db_session, mueller.owner_context)
        assert await repo.get_by_id(foreign.id) is None
        assert (await repo.list()).total == 0
        assert await repo.update(foreign.id, title="hijacked") is None
        assert await repo.soft_delete(foreign.id) is False

        await db_session.refresh(foreign)
        assert foreign.title == "Schmidt intern"
        assert foreign.deleted_at is None


class TestIdentifierInjection:
    @pytest.mark.asyncio
    async def test_payload_tenant_id_is_overwritten(self, db_session, mueller, schmidt) -> None:
        repo = ChecklistRepository(db_session, mueller.owner_context)
        checklist = await repo.create(
            tenant_id=schmidt.tenant.id,
            id="forged-id",
            organization_id=mueller.client_org.id,
            title="Belege Q1",
        )
        assert checklist.tenant_id == mueller.tenant.id
        assert checklist.id != "forged-id"

    @pytest.mark.asyncio
    async def test_client_organization_is_forced(self, db_session, session_factory, mueller) -> None:
        other = await add_organization(session_factory, mueller, "IT Consulting AG")
        repo = ChecklistRepository(db_session, mueller.client_context)
        checklist = await repo.create(organization_id=other.id, title="Belege Q1")
        assert checklist.organization_id == mueller.client_org.id

    @pytest.mark.asyncio
    async def test_advisor_cannot_target_foreign_tenant_organization(
        self, db_session, mueller, schmidt
    ) -> None:
        repo = ChecklistRepository(db_session, mueller.owner_context)
        with pytest.raises(NotFoundError):
            await repo.create(organization_id=schmidt.client_org.id, title="Belege Q1")

    @pytest.mark.asyncio
    async def test_advisor_must_name_an_organization(self, db_session, mueller) -> None:
        with pytest.raises(ValidationError):
            await ChecklistRepository(db_session, mueller.owner_context).create(title="Belege Q1")

    @pytest.mark.asyncio
    async def test_update_cannot_move_record(self, db_session, session_factory, mueller) -> None:
        other = await add_organization(session_factory, mueller, "IT Consulting AG")
        checklist = await _checklist(db_session, mueller, mueller.client_org.id, "Belege")
        repo = ChecklistRepository(db_session, mueller.owner_context)

        updated = await repo.update(checklist.id, organization_id=other.id, title="Belege 2024")
        assert updated.title == "Belege 2024"
        assert updated.organization_id == mueller.client_org.id


class TestSoftDelete:
    @pytest.mark.asyncio
    async def test_deleted_rows_disappear(self, db_session, mueller) -> None:
        checklist = await _checklist(db_session, mueller, mueller.client_org.id, "Belege")
        repo = ChecklistRepository(db_session, mueller.owner_context)

        assert await repo.soft_delete(checklist.id) is True
        assert await repo.get_by_id(checklist.id) is None
        assert (await repo.list()).total == 0
        assert await repo.soft_delete(checklist.id) is False

    @pytest.mark.asyncio
    async def test_audit_log_is_append_only(self, db_session, mueller) -> None:
        repo = AuditLogRepository(db_session, mueller.owner_context)
        with pytest.raises(TypeError):
            await repo.update("any", action="login")
        with pytest.raises(TypeError):
            await repo.soft_delete("any")
