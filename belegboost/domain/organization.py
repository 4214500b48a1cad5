"""SQLAlchemy ORM model for organizations (advisor firm or client company)."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from belegboost.db.base import Base
from belegboost.domain.enums import OrganizationStatus, OrganizationType
from belegboost.domain.mixins import IdMixin, TenantMixin, TimestampMixin


class Organization(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "organizations"

    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    tax_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=OrganizationStatus.ACTIVE.value, nullable=False
    )

    @property
    def is_advisor(self) -> bool:
        return self.type == OrganizationType.ADVISOR
