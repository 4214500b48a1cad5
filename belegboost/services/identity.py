"""Identity provider interface and the database-backed default implementation.

Identities are tenant-agnostic: they only know an email, a password hash and
a display name. Memberships (``users`` table) attach them to a tenant.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

from passlib.context import CryptContext
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.exceptions import AuthProviderUnavailable, ConflictError, InvalidCredentials
from belegboost.domain.identity import Identity, IdentitySession

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class Principal:
    """An authenticated identity, independent of tenant membership."""

    identity_id: str
    email: str
    display_name: str


@dataclass(frozen=True)
class SessionCredential:
    secret: str
    identity_id: str
    expires_at: datetime


class DuplicateIdentityError(ConflictError):
    def __init__(self, email: str):
        super().__init__(f"An account with email '{email}' already exists")


class IdentityProvider(Protocol):
    async def create_identity(self, email: str, secret: str, display_name: str) -> Principal: ...

    async def create_session_for_identity(self, email: str, secret: str) -> SessionCredential: ...

    async def resolve_session(self, credential: str) -> Principal | None: ...

    async def delete_session(self, credential: str) -> None: ...

    async def delete_identity(self, identity_id: str) -> None: ...


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class LocalIdentityProvider:
    """Identity provider stored in the application database.

    Connectivity errors surface as AuthProviderUnavailable so callers can
    tell an outage apart from a bad credential.
    """

    def __init__(self, session: AsyncSession, session_max_age: int):
        self._session = session
        self._max_age = timedelta(seconds=session_max_age)

    async def _run(self, coro):
        try:
            return await coro
        except (OperationalError, InterfaceError) as exc:
            logger.error("Identity store unreachable: %s", exc)
            raise AuthProviderUnavailable() from exc

    async def _identity_by_email(self, email: str) -> Identity | None:
        result = await self._session.execute(
            select(Identity).where(Identity.email == email.lower()).limit(1)
        )
        return result.scalars().first()

    async def create_identity(self, email: str, secret: str, display_name: str) -> Principal:
        async def _create() -> Principal:
            if await self._identity_by_email(email) is not None:
                raise DuplicateIdentityError(email)
            identity = Identity(
                email=email.lower(),
                password_hash=pwd_context.hash(secret),
                display_name=display_name,
            )
            self._session.add(identity)
            try:
                await self._session.flush()
            except IntegrityError as exc:
                raise DuplicateIdentityError(email) from exc
            return Principal(identity.id, identity.email, identity.display_name)

        return await self._run(_create())

    async def create_session_for_identity(self, email: str, secret: str) -> SessionCredential:
        async def _login() -> SessionCredential:
            identity = await self._identity_by_email(email)
            if identity is None or not pwd_context.verify(secret, identity.password_hash):
                raise InvalidCredentials()
            record = IdentitySession(
                identity_id=identity.id,
                secret=secrets.token_urlsafe(32),
                expires_at=datetime.now(timezone.utc) + self._max_age,
            )
            self._session.add(record)
            await self._session.flush()
            return SessionCredential(record.secret, identity.id, record.expires_at)

        return await self._run(_login())

    async def resolve_session(self, credential: str) -> Principal | None:
        async def _resolve() -> Principal | None:
            result = await self._session.execute(
                select(IdentitySession, Identity)
                .join(Identity, Identity.id == IdentitySession.identity_id)
                .where(IdentitySession.secret == credential)
                .limit(1)
            )
            row = result.first()
            if row is None:
                return None
            record, identity = row
            if _as_utc(record.expires_at) <= datetime.now(timezone.utc):
                return None
            return Principal(identity.id, identity.email, identity.display_name)

        return await self._run(_resolve())

    async def delete_session(self, credential: str) -> None:
        async def _delete() -> None:
            await self._session.execute(
                delete(IdentitySession).where(IdentitySession.secret == credential)
            )
            await self._session.flush()

        await self._run(_delete())

    async def delete_identity(self, identity_id: str) -> None:
        async def _delete() -> None:
            await self._session.execute(
                delete(IdentitySession).where(IdentitySession.identity_id == identity_id)
            )
            await self._session.execute(delete(Identity).where(Identity.id == identity_id))
            await self._session.flush()

        await self._run(_delete())
