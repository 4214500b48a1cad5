from __future__ import annotations

from datetime import datetime
from typing import Any

from belegboost.domain.enums import AuditAction
from belegboost.schemas.common import CamelModel


class AuditLogOut(CamelModel):
    id: str
    organization_id: str | None = None
    user_id: str | None = None
    user_email: str | None = None
    action: AuditAction
    resource_type: str
    resource_id: str | None = None
    details: Any | None = None
    description: str | None = None
    created_at: datetime
