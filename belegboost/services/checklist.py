"""Checklist service: checklists, traffic-light items and the derived progress.

The stored total_items / completed_items counters are rewritten in the same
transaction as every item change. Reads recount from the items and repair
the counters when they drifted, so a failed counter write is never permanent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.context import AuthorizationContext
from belegboost.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from belegboost.core.pagination import Page, PaginationParams
from belegboost.domain.checklist import Checklist, ChecklistItem, count_progress
from belegboost.domain.enums import ChecklistStatus, OrganizationType
from belegboost.repositories.entities import (
    ChecklistItemRepository,
    ChecklistRepository,
    OrganizationRepository,
)
from belegboost.schemas.checklist import (
    ChecklistCreate,
    ChecklistItemCreate,
    ChecklistItemUpdate,
    ChecklistUpdate,
)

logger = logging.getLogger(__name__)

# Fields only advisor roles may change on an item; status is open to everyone in scope
_ADVISOR_ITEM_FIELDS = frozenset({"title", "description", "position", "requires_document"})


@dataclass
class ChecklistView:
    checklist: Checklist
    items: list[ChecklistItem] = field(default_factory=list)


class ChecklistService:
    def __init__(self, session: AsyncSession, context: AuthorizationContext):
        self._context = context
        self._checklists = ChecklistRepository(session, context)
        self._items = ChecklistItemRepository(session, context)
        self._organizations = OrganizationRepository(session, context)

    def _require_advisor(self) -> None:
        if not self._context.is_advisor:
            raise ForbiddenError("Only advisors can manage checklists")

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    async def _sync_progress(self, checklist: Checklist, items: list[ChecklistItem] | None = None) -> Checklist:
        if items is None:
            items = await self._items.for_checklist(checklist.id)
        total, completed = count_progress(item.status for item in items)
        if (checklist.total_items, checklist.completed_items) == (total, completed):
            return checklist
        updated = await self._checklists.update(
            checklist.id, total_items=total, completed_items=completed
        )
        return updated or checklist

    # ------------------------------------------------------------------
    # Checklists
    # ------------------------------------------------------------------

    async def list_checklists(
        self,
        pagination: PaginationParams,
        status: ChecklistStatus | None = None,
        organization_id: str | None = None,
    ) -> Page[Checklist]:
        # organization_id is ignored for client roles by the repository
        return await self._checklists.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={
                "status": status.value if status else None,
                "organization_id": organization_id,
            },
        )

    async def _get(self, checklist_id: str) -> Checklist:
        checklist = await self._checklists.get_by_id(checklist_id)
        if checklist is None:
            raise NotFoundError("Checklist", checklist_id)
        return checklist

    async def get_checklist(self, checklist_id: str) -> ChecklistView:
        checklist = await self._get(checklist_id)
        items = await self._items.for_checklist(checklist.id)
        total, completed = count_progress(item.status for item in items)
        if (checklist.total_items, checklist.completed_items) != (total, completed):
            logger.warning(
                "Checklist %s progress drifted (stored %d/%d, actual %d/%d); repairing",
                checklist.id, checklist.completed_items, checklist.total_items, completed, total,
            )
            checklist = await self._sync_progress(checklist, items)
        return ChecklistView(checklist=checklist, items=items)

    async def create_checklist(self, data: ChecklistCreate) -> Checklist:
        self._require_advisor()
        if not data.organization_id:
            raise ValidationError("organizationId is required")
        organization = await self._organizations.get_by_id(data.organization_id)
        if organization is None:
            raise NotFoundError("Organization", data.organization_id)
        if organization.type != OrganizationType.CLIENT:
            raise ValidationError("Checklists can only be assigned to client organizations")

        payload = data.model_dump(exclude_none=True)
        payload["status"] = data.status.value
        return await self._checklists.create(
            **payload, created_by_user_id=self._context.user_id
        )

    async def update_checklist(self, checklist_id: str, data: ChecklistUpdate) -> Checklist:
        self._require_advisor()
        await self._get(checklist_id)
        values = data.model_dump(exclude_unset=True, exclude_none=True)
        if data.status is not None:
            values["status"] = data.status.value
        updated = await self._checklists.update(checklist_id, **values)
        if updated is None:
            raise NotFoundError("Checklist", checklist_id)
        return updated

    async def delete_checklist(self, checklist_id: str) -> None:
        self._require_advisor()
        if not await self._checklists.soft_delete(checklist_id):
            raise NotFoundError("Checklist", checklist_id)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    async def _get_item(self, checklist_id: str, item_id: str) -> ChecklistItem:
        item = await self._items.get_by_id(item_id)
        if item is None or item.checklist_id != checklist_id:
            raise NotFoundError("Checklist item", item_id)
        return item

    async def add_item(self, checklist_id: str, data: ChecklistItemCreate) -> ChecklistItem:
        self._require_advisor()
        checklist = await self._get(checklist_id)
        existing = await self._items.for_checklist(checklist.id)

        position = data.position
        if position is None:
            position = max((i.position for i in existing), default=-1) + 1

        item = await self._items.create(
            checklist_id=checklist.id,
            organization_id=checklist.organization_id,
            title=data.title,
            description=data.description,
            status=data.status.value,
            position=position,
            requires_document=data.requires_document,
        )
        await self._sync_progress(checklist, existing + [item])
        return item

    async def update_item(
        self, checklist_id: str, item_id: str, data: ChecklistItemUpdate
    ) -> ChecklistItem:
        checklist = await self._get(checklist_id)
        await self._get_item(checklist.id, item_id)

        values = data.model_dump(exclude_unset=True, exclude_none=True)
        if not self._context.is_advisor and _ADVISOR_ITEM_FIELDS.intersection(values):
            raise ForbiddenError("Clients may only change the status of an item")
        if data.status is not None:
            values["status"] = data.status.value

        item = await self._items.update(item_id, **values)
        if item is None:
            raise NotFoundError("Checklist item", item_id)
        if "status" in values:
            await self._sync_progress(checklist)
        return item

    async def delete_item(self, checklist_id: str, item_id: str) -> None:
        self._require_advisor()
        checklist = await self._get(checklist_id)
        await self._get_item(checklist.id, item_id)
        if not await self._items.soft_delete(item_id):
            raise NotFoundError("Checklist item", item_id)
        await self._sync_progress(checklist)
