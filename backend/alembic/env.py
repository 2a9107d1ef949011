"""
Alembic Migration Environment
===============================

What:  Runs the `messages` migrations through the application's async driver.
How:   The target URL is, in order of preference:
           alembic -x db_url=sqlite+aiosqlite:///./local.db upgrade head
           DATABASE_URL (memorymap.config.settings)
       Online runs use a NullPool async engine; offline runs
       (`alembic upgrade head --sql`) print the DDL instead.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from memorymap.config import settings
from memorymap.database import Base
from memorymap.models.message import Message  # noqa: F401  (registers the table)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("db_url") or settings.database_url


def configure_context(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        # SQLite cannot ALTER constraints in place
        render_as_batch=database_url().startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    configure_context(
        url=database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def apply_migrations(connection: Connection) -> None:
    configure_context(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(database_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(apply_migrations)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
