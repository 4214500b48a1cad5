"""Services package: all business logic lives here, never in routers.

Files:
  identity.py      — IdentityProvider protocol and the database-backed provider
  session.py       — session cookie <-> Principal
  context.py       — ContextAssembler (host + session -> AuthorizationContext)
  registration.py  — compensated multi-record flows (signup, invite, accept)
  auth.py          — login / logout on a tenant subdomain
  tenant.py, organization.py, user.py, checklist.py, document.py, audit.py
                   — tenant-scoped business operations

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
