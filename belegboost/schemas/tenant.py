"""Tenant, organization and user schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from belegboost.domain.enums import (
    OrganizationStatus,
    OrganizationType,
    TenantStatus,
    UserRole,
    UserStatus,
)
from belegboost.domain.tenant import Branding, Tenant, branding_of
from belegboost.schemas.common import CamelModel, OrganizationRecordOut, TenantRecordOut

_HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class BrandingSchema(CamelModel):
    logo_url: str | None = Field(default=None, max_length=500)
    primary_color: str | None = Field(default=None, pattern=_HEX_COLOR)
    secondary_color: str | None = Field(default=None, pattern=_HEX_COLOR)

    @classmethod
    def from_branding(cls, branding: Branding) -> BrandingSchema:
        return cls(
            logo_url=branding.logo_url,
            primary_color=branding.primary_color,
            secondary_color=branding.secondary_color,
        )

    def to_branding(self) -> Branding:
        return Branding(
            logo_url=self.logo_url,
            primary_color=self.primary_color,
            secondary_color=self.secondary_color,
        )


class TenantOut(CamelModel):
    id: str
    subdomain: str
    name: str
    owner_email: str
    branding: BrandingSchema | None = None
    status: TenantStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_tenant(cls, tenant: Tenant) -> TenantOut:
        branding = branding_of(tenant)
        return cls(
            id=tenant.id,
            subdomain=tenant.subdomain,
            name=tenant.name,
            owner_email=tenant.owner_email,
            branding=BrandingSchema.from_branding(branding) if branding else None,
            status=tenant.status,
            created_at=tenant.created_at,
            updated_at=tenant.updated_at,
        )


class TenantUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    branding: BrandingSchema | None = None
    status: TenantStatus | None = None


class OrganizationCreate(CamelModel):
    name: str = Field(min_length=2, max_length=200)
    tax_id: str | None = Field(default=None, max_length=50)
    contact_email: str | None = Field(default=None, max_length=255)
    contact_phone: str | None = Field(default=None, max_length=20)


class OrganizationUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    tax_id: str | None = Field(default=None, max_length=50)
    contact_email: str | None = Field(default=None, max_length=255)
    contact_phone: str | None = Field(default=None, max_length=20)
    status: OrganizationStatus | None = None


class OrganizationOut(TenantRecordOut):
    type: OrganizationType
    name: str
    tax_id: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    status: OrganizationStatus


class UserOut(OrganizationRecordOut):
    role: UserRole
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    status: UserStatus
    last_login_at: datetime | None = None


class ContextOut(CamelModel):
    tenant_id: str
    organization_id: str
    user_id: str
    role: UserRole
    subdomain: str


class MeOut(CamelModel):
    context: ContextOut
    user: UserOut
