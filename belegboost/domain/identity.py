"""Authentication identities and their sessions (local identity provider)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from belegboost.db.base import Base
from belegboost.domain.mixins import IdMixin, TimestampMixin


class Identity(Base, IdMixin, TimestampMixin):
    """Login credentials, independent of any tenant membership."""

    __tablename__ = "identities"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)


class IdentitySession(Base, IdMixin, TimestampMixin):
    __tablename__ = "identity_sessions"

    identity_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("identities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    secret: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
