"""Alembic environment for the admin_sessions store (async engine).

DATABASE_URL wins over alembic.ini; either is normalised to the asyncpg
driver with the same rule the application settings apply.
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from admin_gateway.config import asyncpg_url
from admin_gateway.db.base import Base
from admin_gateway.models.admin_session import AdminSession  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
database_url = asyncpg_url(
    os.environ.get("DATABASE_URL") or config.get_main_option("sqlalchemy.url"),
)


def _apply(connection=None) -> None:
    if connection is None:
        context.configure(
            url=database_url,
            target_metadata=target_metadata,
            literal_binds=True,
            dialect_opts={"paramstyle": "named"},
        )
    else:
        context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def _apply_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = database_url
    engine = async_engine_from_config(
        section, prefix="sqlalchemy.", poolclass=pool.NullPool,
    )
    async with engine.connect() as connection:
        await connection.run_sync(_apply)
    await engine.dispose()


if context.is_offline_mode():
    _apply()
else:
    asyncio.run(_apply_online())
