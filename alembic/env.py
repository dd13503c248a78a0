"""Migrations for the users table.

The URL comes from DATABASE_URL, the same setting the API reads. Alembic
runs synchronously, so the asyncpg driver is swapped for psycopg2.
"""

from __future__ import annotations

from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context
from app.core.config import SETTINGS
from app.db.tables import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _sync_url() -> str:
    url = SETTINGS.database_url or config.get_main_option("sqlalchemy.url")
    return url.replace("postgresql+asyncpg://", "postgresql+psycopg2://", 1)


def _configure(**kwargs) -> None:
    context.configure(target_metadata=Base.metadata, compare_type=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    _configure(url=_sync_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
else:
    with create_engine(_sync_url(), poolclass=pool.NullPool).connect() as connection:
        _configure(connection=connection)
