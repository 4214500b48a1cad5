"""BelegBoost API: FastAPI application factory."""


import logging
import re
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from belegboost.core.config import Settings, TenancyConfig, settings
from belegboost.core.exceptions import register_exception_handlers
from belegboost.middleware.host_router import HostRouterMiddleware
from belegboost.routers.registration import router as registration_router
from belegboost.routers.v1 import tenant_router
from belegboost.schemas.common import HealthResponse


def _configure_logging(app_settings: Settings) -> None:
    level = logging.DEBUG if app_settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


def create_app(app_settings: Settings = settings) -> FastAPI:
    _configure_logging(app_settings)
    tenancy = TenancyConfig.from_settings(app_settings)

    app = FastAPI(
        title=app_settings.app_name,
        version="1.0.0",
        docs_url="/docs" if app_settings.app_env == "development" else None,
        redoc_url="/redoc" if app_settings.app_env == "development" else None,
    )
    app.state.tenancy = tenancy

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[app_settings.frontend_url],
        allow_origin_regex=rf"https?://([a-z0-9-]+\.)?{re.escape(tenancy.root_domain)}(:\d+)?",
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Subdomain -> /tenants/<slug> rewrite (added last, runs first) ---
    app.add_middleware(HostRouterMiddleware, config=tenancy)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- Root domain: signup ---
    app.include_router(registration_router)

    # --- Tenant subdomains: /tenants/{tenant}/api/v1/* ---
    app.include_router(tenant_router)

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(
            app=app_settings.app_name, env=app_settings.app_env, root_domain=tenancy.root_domain
        )

    return app


app = create_app()
