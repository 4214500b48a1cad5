"""Alembic async env for the belegboost schema.

The database URL defaults to DATABASE_URL from the application settings;
`alembic -x url=sqlite+aiosqlite:///other.db upgrade head` overrides it.
"""

from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection

from belegboost.core.config import settings
from belegboost.db.base import Base, build_engine

# Registers tenants, organizations, users, checklists, documents, audit and identity tables
import belegboost.domain  # noqa: F401

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# SQLite cannot ALTER most constraints in place
_options = {"render_as_batch": True, "compare_type": True}


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("url", settings.database_url)


def run_migrations_offline() -> None:
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_options,
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata, **_options)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = build_engine(_database_url())
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
