"""Host header parsing for subdomain-based tenant routing.

Pure string handling: no lookups, no authentication. Anything that does not
clearly look like ``<slug>.<root>`` resolves to the root site.
"""

from __future__ import annotations

from dataclasses import dataclass

from belegboost.core.config import TenancyConfig

TENANT_NAMESPACE = "/tenants"


@dataclass(frozen=True)
class HostRoute:
    """Result of routing one request: root site when ``subdomain`` is None."""

    subdomain: str | None
    path: str

    @property
    def is_root(self) -> bool:
        return self.subdomain is None


def _strip_port(host: str) -> str:
    # IPv6 literals ("[::1]:8000") never carry a tenant, keep them intact
    if host.startswith("["):
        return host
    return host.split(":", 1)[0]


def resolve_subdomain(host: str | None, config: TenancyConfig) -> str | None:
    """Extract the tenant slug from a Host header, or None for the root site."""
    hostname = _strip_port((host or "").strip().lower()).rstrip(".")
    if not hostname:
        return None

    slug: str | None = None
    for root in (config.root_domain, config.dev_root_token):
        if not root or hostname == root:
            continue
        if hostname.endswith("." + root):
            # <slug>.<root> only; the root may itself have several labels
            prefix = hostname[: -len(root) - 1]
            if "." not in prefix and prefix != "www":
                slug = prefix
            break

    if not slug:
        return None
    if config.is_reserved(slug):
        return None
    return slug


def tenant_path(subdomain: str, path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return f"{TENANT_NAMESPACE}/{subdomain}{path}"


def route_request(host: str | None, path: str, config: TenancyConfig) -> HostRoute:
    """Decide between root pass-through and a rewrite into the tenant namespace."""
    subdomain = resolve_subdomain(host, config)
    if subdomain is None:
        return HostRoute(subdomain=None, path=path)
    return HostRoute(subdomain=subdomain, path=tenant_path(subdomain, path))
