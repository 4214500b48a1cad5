"""Routers package: HTTP endpoint definitions.

Files:
  deps.py          — shared dependencies (tenancy config, identity provider, context)
  cookies.py       — session cookie read / set / clear
  registration.py  — root-domain signup routes (/api/v1/registrations/*)
  v1/              — tenant-scoped routes (/tenants/{tenant}/api/v1/*)
"""
