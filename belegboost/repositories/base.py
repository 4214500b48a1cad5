"""Scoped async repository: every read and write is bound to an AuthorizationContext.

Rules enforced here, not by callers:
  * the tenant predicate is part of every query and cannot be removed;
  * for organization-scoped models, client roles always get their own
    organization predicate, whatever filters they pass;
  * fetch-by-id re-checks ownership and reports foreign records as missing;
  * tenant_id / organization_id on writes come from the context (or from a
    tenant-verified organization for advisor roles), never from payloads.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.context import AuthorizationContext
from belegboost.core.exceptions import NotFoundError, OrganizationScopeViolation, ValidationError
from belegboost.core.pagination import Page
from belegboost.db.base import Base
from belegboost.domain.mixins import utcnow
from belegboost.domain.organization import Organization

ModelT = TypeVar("ModelT", bound=Base)

logger = logging.getLogger(__name__)

# Columns callers may never set or filter by directly
_OWNER_COLUMNS = frozenset({"id", "tenant_id", "organization_id"})


class ScopedRepository(Generic[ModelT]):
    """Generic CRUD repository scoped by tenant and, for client roles, organization.

    Soft-deletes: rows with `deleted_at IS NOT NULL` are excluded from all
    standard reads. Hard-delete is intentionally never exposed.
    """

    model: type[ModelT]
    # Column holding the owning organization; None for tenant-wide models
    organization_column: str | None = None

    def __init__(self, session: AsyncSession, context: AuthorizationContext):
        self._session = session
        self._context = context

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @property
    def _org_scoped(self) -> bool:
        return self.organization_column is not None and self._context.is_client

    def _base_query(self):
        """SELECT filtered by tenant, client organization, and soft-delete state."""
        q = select(self.model).where(self.model.tenant_id == self._context.tenant_id)
        if self._org_scoped:
            q = q.where(
                getattr(self.model, self.organization_column) == self._context.organization_id
            )
        if hasattr(self.model, "deleted_at"):
            q = q.where(self.model.deleted_at.is_(None))
        return q

    def check_scope(self, instance: ModelT) -> None:
        """Raise OrganizationScopeViolation for a client reaching outside their organization."""
        if not self._org_scoped:
            return
        if getattr(instance, self.organization_column) != self._context.organization_id:
            raise OrganizationScopeViolation(
                subdomain=self._context.subdomain, identity_id=self._context.user_id
            )

    def _owns(self, instance: ModelT) -> bool:
        if instance.tenant_id != self._context.tenant_id:
            logger.warning(
                "Cross-tenant access to %s %s by user %s (tenant %s)",
                self.model.__name__, instance.id, self._context.user_id, self._context.tenant_id,
            )
            return False
        try:
            self.check_scope(instance)
        except OrganizationScopeViolation as exc:
            # Reported to the caller as a missing record
            logger.warning(
                "Organization scope violation on %s %s by user %s (organization %s, subdomain %s)",
                self.model.__name__, instance.id,
                exc.identity_id, self._context.organization_id, exc.subdomain,
            )
            return False
        return getattr(instance, "deleted_at", None) is None

    def _column(self, name: str):
        """Mapped table column by name, or None for properties and unknown names."""
        return self.model.__table__.columns.get(name)

    async def _verified_organization_id(self, requested: str | None) -> str:
        """Organization id for a new record, never trusting the payload blindly."""
        if self._context.is_client:
            return self._context.organization_id
        if not requested:
            raise ValidationError("organization_id is required")
        found = await self._session.execute(
            select(Organization.id)
            .where(Organization.id == requested)
            .where(Organization.tenant_id == self._context.tenant_id)
        )
        if found.scalar_one_or_none() is None:
            raise NotFoundError("Organization", requested)
        return requested

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str) -> ModelT | None:
        instance = await self._session.get(self.model, entity_id)
        if instance is None or not self._owns(instance):
            return None
        return instance

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
    ) -> Page[ModelT]:
        """Return one page with optional equality filters on model columns."""
        sort_column = self._column(order_by)
        if sort_column is None:
            raise ValidationError(f"Cannot sort by '{order_by}'")
        q = self._base_query()

        for col_name, value in (filters or {}).items():
            if value is None or col_name in ("id", "tenant_id"):
                continue
            if col_name == self.organization_column and self._org_scoped:
                # Forced to the caller's organization by _base_query
                continue
            column = self._column(col_name)
            if column is not None:
                q = q.where(column == value)

        count_q = select(func.count()).select_from(q.subquery())
        total = (await self._session.execute(count_q)).scalar_one()

        q = q.order_by(sort_column.desc() if order == "desc" else sort_column.asc())
        q = q.offset(offset).limit(limit)

        items = (await self._session.execute(q)).scalars().all()
        return Page(items=list(items), total=total)

    async def all(self, **filters: Any) -> list[ModelT]:
        """Unpaginated scoped read, for small child collections."""
        q = self._base_query()
        for col_name, value in filters.items():
            if col_name in _OWNER_COLUMNS:
                continue
            q = q.where(getattr(self.model, col_name) == value)
        return list((await self._session.execute(q)).scalars().all())

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        kwargs.pop("id", None)
        kwargs.pop("tenant_id", None)
        requested_org = kwargs.pop("organization_id", None)
        if self.organization_column == "organization_id":
            kwargs["organization_id"] = await self._verified_organization_id(requested_org)

        instance = self.model(tenant_id=self._context.tenant_id, **kwargs)
        self._session.add(instance)
        await self._session.flush()  # populate id
        await self._session.refresh(instance)
        return instance

    async def _execute_update(self, entity_id: str, values: dict[str, Any]) -> int:
        stmt = (
            update(self.model)
            .where(self.model.id == entity_id)
            .where(self.model.tenant_id == self._context.tenant_id)
        )
        if self._org_scoped:
            stmt = stmt.where(
                getattr(self.model, self.organization_column) == self._context.organization_id
            )
        result = await self._session.execute(
            stmt.values(**values).execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        return result.rowcount

    async def update(self, entity_id: str, **kwargs: Any) -> ModelT | None:
        # Ownership is re-verified immediately before the mutation
        if await self.get_by_id(entity_id) is None:
            return None

        for col_name in _OWNER_COLUMNS:
            kwargs.pop(col_name, None)
        if "updated_at" not in kwargs and hasattr(self.model, "updated_at"):
            kwargs["updated_at"] = utcnow()

        await self._execute_update(entity_id, kwargs)
        instance = await self.get_by_id(entity_id)
        if instance is not None:
            await self._session.refresh(instance)
        return instance

    async def soft_delete(self, entity_id: str) -> bool:
        if not hasattr(self.model, "deleted_at"):
            raise TypeError(f"{self.model.__name__} does not support deletion")
        if await self.get_by_id(entity_id) is None:
            return False
        now = utcnow()
        return await self._execute_update(entity_id, {"deleted_at": now, "updated_at": now}) > 0
