"""Append-only audit trail for sensitive actions."""

from __future__ import annotations

import hashlib
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.context import AuthorizationContext
from belegboost.core.pagination import Page, PaginationParams
from belegboost.domain.audit import AuditLogEntry
from belegboost.domain.enums import AuditAction
from belegboost.repositories.entities import AuditLogRepository

logger = logging.getLogger(__name__)


def pseudonym_for(user_id: str) -> str:
    return "erased-" + hashlib.sha256(user_id.encode("utf-8")).hexdigest()[:24]


class AuditService:
    def __init__(self, session: AsyncSession, context: AuthorizationContext):
        self._context = context
        self._repo = AuditLogRepository(session, context)

    async def record(
        self,
        action: AuditAction,
        resource_type: str,
        resource_id: str | None = None,
        *,
        user_email: str | None = None,
        ip_address: str | None = None,
        details: dict[str, Any] | None = None,
        description: str | None = None,
    ) -> AuditLogEntry:
        entry = await self._repo.create(
            organization_id=self._context.organization_id,
            user_id=self._context.user_id,
            user_email=user_email,
            ip_address=ip_address,
            action=action.value,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details,
            description=description,
        )
        logger.info(
            "audit %s %s/%s by user %s in tenant %s",
            action.value, resource_type, resource_id, self._context.user_id, self._context.tenant_id,
        )
        return entry

    async def list_entries(
        self, pagination: PaginationParams, action: AuditAction | None = None
    ) -> Page[AuditLogEntry]:
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"action": action.value if action else None},
        )

    async def export(self) -> list[AuditLogEntry]:
        entries = await self._repo.all()
        entries.sort(key=lambda e: e.created_at)
        await self.record(
            AuditAction.EXPORT, "audit_log", details={"entries": len(entries)},
        )
        return entries

    async def pseudonymize_user(self, user_id: str) -> int:
        changed = await self._repo.pseudonymize_user(user_id, pseudonym_for(user_id))
        logger.info("Pseudonymized %d audit entries of user %s", changed, user_id)
        return changed
