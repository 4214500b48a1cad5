"""Canonical domain enumerations. Every module imports these; none redefines them."""

import enum


class TenantStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class OrganizationType(str, enum.Enum):
    ADVISOR = "advisor"  # the tax advisor firm itself, exactly one per tenant
    CLIENT = "client"


class OrganizationStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class UserRole(str, enum.Enum):
    OWNER = "owner"
    ADVISOR = "advisor"
    CLIENT_ADMIN = "client_admin"
    CLIENT_EMPLOYEE = "client_employee"

    @property
    def is_advisor(self) -> bool:
        """Advisor-side roles see every organization of their tenant."""
        return self in (UserRole.OWNER, UserRole.ADVISOR)

    @property
    def is_client(self) -> bool:
        return self in (UserRole.CLIENT_ADMIN, UserRole.CLIENT_EMPLOYEE)


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class ChecklistStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class ItemStatus(str, enum.Enum):
    """Traffic light status. Any state may follow any other."""

    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


class AuditAction(str, enum.Enum):
    LOGIN = "login"
    UPLOAD = "upload"
    DOWNLOAD = "download"
    DELETE = "delete"
    EXPORT = "export"
    INVITE = "invite"
