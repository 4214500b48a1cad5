"""Application-level exceptions and FastAPI exception handlers."""


import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

    def extra(self) -> dict[str, Any]:
        """Additional keys merged into the error body."""
        return {}

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None):
        msg = f"{entity} not found" if not entity_id else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")

class ForbiddenError(AppException):
    def __init__(self, message: str = "Access denied"):
        super().__init__(message, status_code=403, code="FORBIDDEN")

class ConflictError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=409, code="CONFLICT")

class ValidationError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=422, code="VALIDATION_ERROR")

# ---------------------------------------------------------------------------
# Tenancy / authorization failures
# ---------------------------------------------------------------------------

class AuthorizationFailure(AppException):
    """Context assembly failed. Rendered as a plain 404 unless overridden.

    ``subdomain`` and ``identity_id`` are kept for the security log only and
    never reach the response body.
    """

    def __init__(
        self,
        message: str,
        *,
        subdomain: str | None = None,
        identity_id: str | None = None,
        status_code: int = 404,
        code: str = "NOT_FOUND",
    ):
        self.subdomain = subdomain
        self.identity_id = identity_id
        super().__init__(message, status_code=status_code, code=code)

class NoTenantInRequest(AuthorizationFailure):
    def __init__(self, **kwargs: Any):
        super().__init__("No tenant subdomain found in request", **kwargs)

class Unauthenticated(AuthorizationFailure):
    def __init__(self, **kwargs: Any):
        super().__init__(
            "Authentication required", status_code=401, code="UNAUTHENTICATED", **kwargs
        )

    def extra(self) -> dict[str, Any]:
        # Login surface on the same subdomain
        return {"redirectTo": "/login"}

class TenantNotFound(AuthorizationFailure):
    def __init__(self, **kwargs: Any):
        super().__init__("Tenant not found", **kwargs)

class MembershipNotFound(AuthorizationFailure):
    def __init__(self, **kwargs: Any):
        super().__init__("Membership not found", **kwargs)

class TenantMismatch(AuthorizationFailure):
    def __init__(self, **kwargs: Any):
        super().__init__("Membership belongs to another tenant", **kwargs)

class OrganizationScopeViolation(AuthorizationFailure):
    def __init__(self, **kwargs: Any):
        super().__init__("Record outside the caller's organization", **kwargs)

class AuthProviderUnavailable(AppException):
    def __init__(self, message: str = "Authentication service unavailable, please try again later"):
        super().__init__(message, status_code=503, code="AUTH_PROVIDER_UNAVAILABLE")

class InvalidCredentials(AppException):
    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, status_code=401, code="INVALID_CREDENTIALS")

# ---------------------------------------------------------------------------
# Registration failures
# ---------------------------------------------------------------------------

class DuplicateSubdomain(AppException):
    def __init__(self, subdomain: str):
        super().__init__(
            f"Subdomain '{subdomain}' is already taken", status_code=409, code="DUPLICATE_SUBDOMAIN"
        )

class ReservedSubdomain(AppException):
    def __init__(self, subdomain: str):
        super().__init__(
            f"Subdomain '{subdomain}' is reserved", status_code=422, code="RESERVED_SUBDOMAIN"
        )

class OrphanedRegistrationFailure(AppException):
    """A step of a multi-record creation sequence failed after earlier steps succeeded."""

    def __init__(self, step: str, *, compensated: bool = True):
        self.step = step
        self.compensated = compensated
        super().__init__(
            "Registration could not be completed, please try again",
            status_code=500,
            code="REGISTRATION_FAILED",
        )

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str, extra: dict[str, Any] | None = None) -> dict:
    error: dict[str, Any] = {"code": code, "message": message}
    if extra:
        error.update(extra)
    return {"error": error}

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AuthorizationFailure)
    async def authorization_failure_handler(
        request: Request, exc: AuthorizationFailure
    ) -> JSONResponse:
        logger.warning(
            "Authorization failure %s on %s %s (subdomain=%s, identity=%s)",
            type(exc).__name__, request.method, request.url.path,
            exc.subdomain, exc.identity_id,
        )
        # Every not-found flavour renders the same body
        message = exc.message if exc.status_code != 404 else "Resource not found"
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, message, exc.extra()),
        )

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, exc.extra()),
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
