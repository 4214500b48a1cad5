"""Session cookie helpers shared by the auth, registration and invitation routers."""

from __future__ import annotations

from fastapi import Request, Response

from belegboost.core.config import TenancyConfig
from belegboost.services.identity import SessionCredential


def session_credential(request: Request, config: TenancyConfig) -> str | None:
    return request.cookies.get(config.session_cookie_name) or None


def set_session_cookie(response: Response, credential: SessionCredential, config: TenancyConfig) -> None:
    # Host-only cookie: scoped to the subdomain that issued it
    response.set_cookie(
        key=config.session_cookie_name,
        value=credential.secret,
        max_age=config.session_max_age,
        path="/",
        httponly=True,
        secure=config.session_cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response, config: TenancyConfig) -> None:
    response.delete_cookie(
        key=config.session_cookie_name,
        path="/",
        httponly=True,
        secure=config.session_cookie_secure,
        samesite="lax",
    )
