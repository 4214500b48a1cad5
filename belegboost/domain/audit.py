"""SQLAlchemy ORM model for the audit log."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime, JSON, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from belegboost.db.base import Base
from belegboost.domain.mixins import IdMixin, TenantMixin


class AuditLogEntry(Base, IdMixin, TenantMixin):
    __tablename__ = "audit_logs"

    organization_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)

    # Who (pseudonymized on GDPR erasure, never removed)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), index=True, nullable=True)
    user_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # What
    action: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False)
    resource_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)
    details: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # When (no updated_at or deleted_at, rows are append-only)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
