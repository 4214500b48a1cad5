"""v1 router package: every tenant-scoped endpoint lives here.

The Host Router middleware rewrites `<slug>.<root>/api/v1/...` to
`/tenants/<slug>/api/v1/...`, which is the prefix of `tenant_router`.

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to belegboost/services/.
"""

from fastapi import APIRouter

from belegboost.routers.v1.audit import router as audit_router
from belegboost.routers.v1.auth import router as auth_router
from belegboost.routers.v1.checklists import router as checklists_router
from belegboost.routers.v1.documents import router as documents_router
from belegboost.routers.v1.invitations import router as invitations_router
from belegboost.routers.v1.organizations import router as organizations_router
from belegboost.routers.v1.tenant import router as tenant_router_settings
from belegboost.routers.v1.users import router as users_router

TENANT_PREFIX = "/tenants/{tenant}/api/v1"

tenant_router = APIRouter(prefix=TENANT_PREFIX)
for _router in (
    auth_router,
    invitations_router,
    tenant_router_settings,
    organizations_router,
    users_router,
    checklists_router,
    documents_router,
    audit_router,
):
    tenant_router.include_router(_router)
