"""SQLAlchemy ORM model for uploaded document metadata."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from belegboost.db.base import Base
from belegboost.domain.mixins import (
    IdMixin,
    OrganizationMixin,
    SoftDeleteMixin,
    TenantMixin,
    TimestampMixin,
)


class Document(Base, IdMixin, TenantMixin, OrganizationMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "documents"

    checklist_item_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("checklist_items.id"), nullable=False, index=True
    )
    uploaded_by_user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    # Opaque reference into the file storage backend
    storage_file_id: Mapped[str] = mapped_column(String(255), nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    file_size_bytes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Deletion is refused before this instant
    retention_until: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
