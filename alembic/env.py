"""Alembic environment for the voting portal schema (async SQLAlchemy).

The database URL and optional PostgreSQL schema come from application
settings, never from alembic.ini. SQLite runs in batch mode so ALTERs on
the ballot and roster tables can be expressed as table rebuilds.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

import voting_portal.models  # noqa: F401  registers every table on Base.metadata
from voting_portal.core.config import get_settings
from voting_portal.models.base import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

settings = get_settings()
database_url = settings.database_url
is_sqlite = database_url.startswith("sqlite")
schema = None if is_sqlite else settings.database_schema


def _context_options() -> dict[str, object]:
    """Options shared by offline and online runs."""
    options: dict[str, object] = {
        "target_metadata": Base.metadata,
        "compare_type": True,
        "render_as_batch": is_sqlite,
    }
    if schema is not None:
        options["version_table_schema"] = schema
    return options


def run_migrations_offline() -> None:
    """Emit SQL for the migrations without connecting."""
    context.configure(url=database_url, literal_binds=True, dialect_opts={"paramstyle": "named"}, **_context_options())
    with context.begin_transaction():
        context.run_migrations()


def _run_with_connection(connection: Connection) -> None:
    if schema is not None:
        connection.execute(text(f'SET search_path TO "{schema}", public'))
    context.configure(connection=connection, **_context_options())
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Apply the migrations over an async connection."""
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = database_url
    engine = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    async with engine.connect() as connection:
        if schema is not None:
            await connection.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{schema}"'))
            await connection.commit()
        await connection.run_sync(_run_with_connection)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
