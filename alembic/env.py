"""Alembic environment — migrations for the catalog schema (authors, books, users).

Invariants:
    - Target metadata is catalog Base with every model imported
    - DATABASE_URL wins over alembic.ini and goes through async_database_url,
      the same rewrite the application applies
    - SQLite migrations run in batch mode (ALTER TABLE emulation)

Design Decisions:
    - Only the URL is read from the environment, not the full Settings:
      migrations must not require LOGIN_PASSWORD
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from catalog.config import async_database_url
from catalog.db.base import Base
import catalog.models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def catalog_database_url() -> str:
    url = os.environ.get("DATABASE_URL") or config.get_main_option("sqlalchemy.url")
    return async_database_url(url)


def _configure(**kwargs) -> None:
    url = catalog_database_url()
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=make_url(url).get_backend_name() == "sqlite",
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the catalog DDL as SQL without connecting."""
    _configure(
        url=catalog_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_on_connection(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(catalog_database_url(), poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(_run_on_connection)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
