"""Session resolution: session credential -> Principal."""

from __future__ import annotations

from belegboost.services.identity import IdentityProvider, Principal


class SessionResolver:
    """Maps a session credential to a Principal.

    A credential that fails validation is handled exactly like a missing
    one. AuthProviderUnavailable is not caught here.
    """

    def __init__(self, provider: IdentityProvider):
        self._provider = provider

    async def resolve(self, credential: str | None) -> Principal | None:
        if not credential:
            return None
        return await self._provider.resolve_session(credential)
