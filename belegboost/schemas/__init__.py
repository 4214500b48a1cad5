"""Pydantic schemas package.

Folder intent:
  common.py     — CamelModel base, tenant/organization record bases, HealthResponse
  auth.py       — registration, login, invitation DTOs
  tenant.py     — tenant settings, organizations, users, current context
  checklist.py  — checklists, traffic-light items, document metadata
  audit.py      — audit log entries
"""
