"""Scoped repositories for every tenant-owned model.

How to add a new repository:
  1. class MyEntityRepository(ScopedRepository[MyEntity]):
         model = MyEntity
  2. Set organization_column when client roles may only see their own rows
"""

from __future__ import annotations

from sqlalchemy import select, update

from belegboost.domain.audit import AuditLogEntry
from belegboost.domain.checklist import Checklist, ChecklistItem
from belegboost.domain.document import Document
from belegboost.domain.organization import Organization
from belegboost.domain.tenant import Tenant
from belegboost.domain.user import User
from belegboost.repositories.base import ScopedRepository


class OrganizationRepository(ScopedRepository[Organization]):
    model = Organization
    organization_column = "id"


class UserRepository(ScopedRepository[User]):
    model = User
    organization_column = "organization_id"


class ChecklistRepository(ScopedRepository[Checklist]):
    model = Checklist
    organization_column = "organization_id"


class ChecklistItemRepository(ScopedRepository[ChecklistItem]):
    model = ChecklistItem
    organization_column = "organization_id"

    async def for_checklist(self, checklist_id: str) -> list[ChecklistItem]:
        q = self._base_query().where(ChecklistItem.checklist_id == checklist_id)
        q = q.order_by(ChecklistItem.position.asc(), ChecklistItem.created_at.asc())
        return list((await self._session.execute(q)).scalars().all())


class DocumentRepository(ScopedRepository[Document]):
    model = Document
    organization_column = "organization_id"


class AuditLogRepository(ScopedRepository[AuditLogEntry]):
    """Append-only: update and soft_delete are not available."""

    model = AuditLogEntry
    organization_column = "organization_id"

    async def update(self, entity_id, **kwargs):  # type: ignore[override]
        raise TypeError("Audit log entries are immutable")

    async def soft_delete(self, entity_id):  # type: ignore[override]
        raise TypeError("Audit log entries are immutable")

    async def pseudonymize_user(self, user_id: str, pseudonym: str) -> int:
        """Replace identifying fields of one user's entries. GDPR erasure only."""
        result = await self._session.execute(
            update(AuditLogEntry)
            .where(AuditLogEntry.tenant_id == self._context.tenant_id)
            .where(AuditLogEntry.user_id == user_id)
            .values(user_id=pseudonym, user_email=None, ip_address=None)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        return result.rowcount


class TenantRepository:
    """The caller's own tenant row. The id always comes from the context."""

    def __init__(self, session, context):
        self._session = session
        self._context = context

    async def current(self) -> Tenant | None:
        result = await self._session.execute(
            select(Tenant).where(Tenant.id == self._context.tenant_id)
        )
        return result.scalars().first()

    async def update(self, **values) -> Tenant | None:
        values.pop("id", None)
        values.pop("subdomain", None)  # immutable
        tenant = await self.current()
        if tenant is None:
            return None
        for key, value in values.items():
            setattr(tenant, key, value)
        await self._session.flush()
        await self._session.refresh(tenant)
        return tenant
