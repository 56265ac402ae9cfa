"""Alembic environment for the archive schema (SQLite in dev, PostgreSQL in prod).

From the backend/ directory:
    alembic upgrade head                                 # apply pending revisions
    alembic revision --autogenerate -m "add column x"    # draft a new revision
    alembic downgrade -1                                 # undo the last revision

The database comes from the same ``DB_URL`` setting the app reads.  Alembic
runs synchronously, so the async driver in that URL is swapped for its sync
counterpart via ``settings.sync_db_url()``.
"""

from __future__ import annotations

import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, event, pool

# Allow `alembic` to be run from any cwd.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from gradarchive.config import settings   # noqa: E402  (after sys.path tweak)
from gradarchive.db.models import Base    # noqa: E402  (registers every table)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
config.set_main_option("sqlalchemy.url", settings.sync_db_url())


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite cannot ALTER most things; batch mode rebuilds the table instead.
        render_as_batch=settings.is_sqlite,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL for review instead of executing it (``alembic upgrade head --sql``)."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    if settings.is_sqlite:
        @event.listens_for(connectable, "connect")
        def _fk_on(dbapi_conn, _rec):  # type: ignore[no-untyped-def]
            dbapi_conn.execute("PRAGMA foreign_keys=ON")

    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
