"""SQLAlchemy ORM model for memberships (a person inside one organization)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from belegboost.db.base import Base
from belegboost.domain.enums import UserRole, UserStatus
from belegboost.domain.mixins import IdMixin, OrganizationMixin, TenantMixin, TimestampMixin


class User(Base, IdMixin, TenantMixin, OrganizationMixin, TimestampMixin):
    __tablename__ = "users"

    # One identity maps to at most one membership, so no cross-tenant users.
    # NULL while an invitation is pending.
    identity_id: Mapped[Optional[str]] = mapped_column(
        String(36), nullable=True, unique=True, index=True
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=UserStatus.ACTIVE.value, nullable=False
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    invitation_token: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, unique=True, index=True
    )
    invitation_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @property
    def user_role(self) -> UserRole:
        return UserRole(self.role)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE
