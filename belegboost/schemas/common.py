"""Shared schema bases: camelCase aliasing and the owner fields of tenant records."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """All API schemas inherit from this to auto-generate camelCase aliases."""

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class TenantRecordOut(CamelModel):
    """Fields every tenant-owned record exposes."""

    id: str
    tenant_id: str
    created_at: datetime


class OrganizationRecordOut(TenantRecordOut):
    organization_id: str


class HealthResponse(BaseModel):
    status: str = "ok"
    app: str
    env: str
    root_domain: str
