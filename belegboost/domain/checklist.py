"""SQLAlchemy ORM models for checklists and their traffic-light items."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from belegboost.db.base import Base
from belegboost.domain.enums import ChecklistStatus, ItemStatus
from belegboost.domain.mixins import (
    IdMixin,
    OrganizationMixin,
    SoftDeleteMixin,
    TenantMixin,
    TimestampMixin,
)


class Checklist(Base, IdMixin, TenantMixin, OrganizationMixin, TimestampMixin, SoftDeleteMixin):
    """Assigned to exactly one client organization.

    total_items / completed_items are a cache of the item statuses. They are
    rewritten in the same transaction as every item change and re-derived on
    read, so the items stay the ground truth.
    """

    __tablename__ = "checklists"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=ChecklistStatus.DRAFT.value, nullable=False, index=True
    )
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    total_items: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed_items: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_by_user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    @property
    def progress_percentage(self) -> int:
        if not self.total_items:
            return 0
        return round(self.completed_items / self.total_items * 100)

    @property
    def is_complete(self) -> bool:
        return self.total_items > 0 and self.completed_items == self.total_items


class ChecklistItem(Base, IdMixin, TenantMixin, OrganizationMixin, TimestampMixin, SoftDeleteMixin):
    # organization_id is copied from the parent checklist for scoping
    __tablename__ = "checklist_items"

    checklist_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("checklists.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(10), default=ItemStatus.RED.value, nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    requires_document: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


def count_progress(statuses: Iterable[str]) -> tuple[int, int]:
    """Return (total, completed) for a collection of item statuses."""
    total = completed = 0
    for status in statuses:
        total += 1
        if status == ItemStatus.GREEN:
            completed += 1
    return total, completed
