"""The per-request authorization context every business operation receives."""

from __future__ import annotations

from dataclasses import dataclass

from belegboost.domain.enums import UserRole


@dataclass(frozen=True)
class AuthorizationContext:
    tenant_id: str
    organization_id: str
    user_id: str
    role: UserRole
    subdomain: str

    @property
    def is_advisor(self) -> bool:
        return self.role.is_advisor

    @property
    def is_client(self) -> bool:
        return self.role.is_client
