"""Tenant ORM model and the branding mapping.

Branding is a nested value in the API and three flat nullable columns in
storage. ``branding_of`` and ``branding_columns`` are the only conversion
points between the two shapes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from belegboost.db.base import Base
from belegboost.domain.enums import TenantStatus
from belegboost.domain.mixins import IdMixin, TimestampMixin


class Tenant(Base, IdMixin, TimestampMixin):
    __tablename__ = "tenants"

    # Unique and immutable after creation; enforced by the unique index
    subdomain: Mapped[str] = mapped_column(String(63), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    owner_email: Mapped[str] = mapped_column(String(255), nullable=False)

    branding_logo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    branding_primary_color: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)
    branding_secondary_color: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), default=TenantStatus.ACTIVE.value, nullable=False
    )

    @property
    def is_active(self) -> bool:
        return self.status == TenantStatus.ACTIVE


@dataclass(frozen=True)
class Branding:
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.logo_url or self.primary_color or self.secondary_color)


def branding_of(tenant: Tenant) -> Optional[Branding]:
    branding = Branding(
        logo_url=tenant.branding_logo_url,
        primary_color=tenant.branding_primary_color,
        secondary_color=tenant.branding_secondary_color,
    )
    return None if branding.is_empty else branding


def branding_columns(branding: Optional[Branding]) -> dict[str, Optional[str]]:
    branding = branding or Branding()
    return {
        "branding_logo_url": branding.logo_url,
        "branding_primary_color": branding.primary_color,
        "branding_secondary_color": branding.secondary_color,
    }
