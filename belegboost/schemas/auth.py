"""Registration, login and invitation request/response schemas."""

from __future__ import annotations

import re

from pydantic import EmailStr, Field, field_validator, model_validator

from belegboost.domain.enums import UserRole
from belegboost.schemas.common import CamelModel

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{1,61}[a-z0-9])?$")
_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "a lowercase letter"),
    (re.compile(r"[A-Z]"), "an uppercase letter"),
    (re.compile(r"\d"), "a digit"),
    (re.compile(r"[@$!%*?&]"), "a special character (@$!%*?&)"),
)


def _check_password(value: str) -> str:
    missing = [label for pattern, label in _PASSWORD_RULES if not pattern.search(value)]
    if missing:
        raise ValueError("Password must contain " + ", ".join(missing))
    return value


class _PasswordConfirmation(CamelModel):
    password: str = Field(min_length=8, max_length=128)
    confirm_password: str

    @field_validator("password")
    @classmethod
    def _password_strength(cls, v: str) -> str:
        return _check_password(v)

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class RegistrationRequest(_PasswordConfirmation):
    firm_name: str = Field(min_length=2, max_length=200)
    subdomain: str = Field(min_length=3, max_length=63)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    accept_terms: bool

    @field_validator("firm_name", "first_name", "last_name", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("subdomain", mode="before")
    @classmethod
    def _normalize_subdomain(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("subdomain")
    @classmethod
    def _subdomain_shape(cls, v: str) -> str:
        if not SUBDOMAIN_PATTERN.match(v):
            raise ValueError("Subdomain may only contain lowercase letters, digits and hyphens")
        return v

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("accept_terms")
    @classmethod
    def _terms_accepted(cls, v: bool) -> bool:
        if not v:
            raise ValueError("Terms of use must be accepted")
        return v


class RegistrationResult(CamelModel):
    tenant_id: str
    subdomain: str
    organization_id: str
    user_id: str
    session_created: bool


class SubdomainAvailability(CamelModel):
    subdomain: str
    available: bool


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()


class InvitationRequest(CamelModel):
    email: EmailStr
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: UserRole
    organization_id: str | None = None
    organization_name: str | None = Field(default=None, min_length=2, max_length=200)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("role")
    @classmethod
    def _client_role(cls, v: UserRole) -> UserRole:
        if not v.is_client:
            raise ValueError("Only client_admin or client_employee can be invited")
        return v

    @model_validator(mode="after")
    def _one_organization(self):
        if bool(self.organization_id) == bool(self.organization_name):
            raise ValueError("Provide either organizationId or organizationName")
        return self


class InvitationOut(CamelModel):
    user_id: str
    organization_id: str
    email: str
    role: UserRole
    invitation_token: str


class AcceptInvitationRequest(_PasswordConfirmation):
    invitation_token: str = Field(min_length=1)
