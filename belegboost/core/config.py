from __future__ import annotations

from dataclasses import dataclass

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_RESERVED_SUBDOMAINS: tuple[str, ...] = (
    "www", "app", "api", "admin", "dashboard", "auth", "login", "logout",
    "register", "signup", "signin", "mail", "email", "smtp", "ftp", "help",
    "support", "docs", "blog", "status", "cdn", "assets", "static", "media",
    "uploads", "downloads", "test", "testing", "staging", "dev",
    "development", "prod", "production",
)


class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "BelegBoost API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (SQLite for local dev, any async driver in production)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./belegboost_dev.db",
        alias="DATABASE_URL",
    )

    # Host routing
    root_domain: str = Field(default="belegboost.de", alias="ROOT_DOMAIN")
    dev_root_token: str = Field(default="localhost", alias="DEV_ROOT_TOKEN")
    reserved_subdomains: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RESERVED_SUBDOMAINS),
        alias="RESERVED_SUBDOMAINS",
    )

    # Session cookie
    session_cookie_name: str = Field(default="belegboost_session", alias="SESSION_COOKIE_NAME")
    session_max_age: int = Field(
        default=30 * 24 * 60 * 60, alias="SESSION_MAX_AGE",
    )  # seconds

    invitation_expiry_hours: int = Field(default=7 * 24, alias="INVITATION_EXPIRY_HOURS")
    document_retention_years: int = Field(default=10, alias="DOCUMENT_RETENTION_YEARS")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "frozen": True,
    }

    @property
    def session_cookie_secure(self) -> bool:
        return self.app_env == "production"


@dataclass(frozen=True)
class TenancyConfig:
    """Immutable tenancy constants, built once at process start and injected."""

    root_domain: str
    dev_root_token: str
    reserved_subdomains: frozenset[str]
    session_cookie_name: str
    session_max_age: int
    session_cookie_secure: bool
    invitation_expiry_hours: int
    document_retention_years: int

    @classmethod
    def from_settings(cls, s: Settings) -> TenancyConfig:
        return cls(
            root_domain=s.root_domain.lower(),
            dev_root_token=s.dev_root_token.lower(),
            reserved_subdomains=frozenset(slug.lower() for slug in s.reserved_subdomains),
            session_cookie_name=s.session_cookie_name,
            session_max_age=s.session_max_age,
            session_cookie_secure=s.session_cookie_secure,
            invitation_expiry_hours=s.invitation_expiry_hours,
            document_retention_years=s.document_retention_years,
        )

    def is_reserved(self, slug: str) -> bool:
        return slug.lower() in self.reserved_subdomains


settings = Settings()
