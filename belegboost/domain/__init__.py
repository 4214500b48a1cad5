"""Domain package: all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  enums.py         — the single definition of every domain enumeration
  tenant.py        — Tenant + nested/flat branding mapping
  organization.py  — advisor firm / client company
  user.py          — memberships (person inside one organization)
  checklist.py     — checklists and traffic-light items
  document.py      — uploaded file metadata with retention deadline
  audit.py         — append-only audit log
  identity.py      — local identity provider credentials and sessions
  mixins.py        — shared id/timestamp/tenant/organization columns
"""

from belegboost.domain.audit import AuditLogEntry
from belegboost.domain.checklist import Checklist, ChecklistItem
from belegboost.domain.document import Document
from belegboost.domain.identity import Identity, IdentitySession
from belegboost.domain.organization import Organization
from belegboost.domain.tenant import Tenant
from belegboost.domain.user import User

__all__ = [
    "AuditLogEntry",
    "Checklist",
    "ChecklistItem",
    "Document",
    "Identity",
    "IdentitySession",
    "Organization",
    "Tenant",
    "User",
]
