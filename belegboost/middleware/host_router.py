"""Host router middleware: maps `<slug>.<root>/...` onto the `/tenants/<slug>/...` namespace.

Runs before routing. It only rewrites paths; whether the tenant exists and
whether the caller belongs to it is decided later by the context assembler.
"""

import logging
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from belegboost.core.config import TenancyConfig
from belegboost.core.hosts import route_request

logger = logging.getLogger(__name__)

# Served identically on every host
_PASS_THROUGH = ("/health", "/docs", "/redoc", "/openapi.json")


def _passes_through(path: str) -> bool:
    return any(path == p or path.startswith(p + "/") for p in _PASS_THROUGH)


class HostRouterMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, config: TenancyConfig):
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.scope["path"]
        request.state.subdomain = None

        if not _passes_through(path):
            route = route_request(request.headers.get("host"), path, self.config)
            if not route.is_root:
                logger.debug("Host %s: %s -> %s", request.headers.get("host"), path, route.path)
                request.state.subdomain = route.subdomain
                request.scope["path"] = route.path
                request.scope["raw_path"] = route.path.encode("utf-8")

        return await call_next(request)
