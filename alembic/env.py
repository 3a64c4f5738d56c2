"""
Alembic environment for the Websiter back-office schema.

The target URL comes from DATABASE_URL (postgres:// rewritten for SQLAlchemy),
falling back to the application's configured default.
"""

import os
import sys
from logging.config import fileConfig

from sqlalchemy import pool, create_engine
from alembic import context

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import Config, _normalize_database_url  # noqa: E402
from database.connection import Base  # noqa: E402
from database import models  # noqa: E402,F401 - registers the tables on Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def database_url():
    return _normalize_database_url(os.environ.get('DATABASE_URL')) or Config.DATABASE_URL


def run_migrations_offline():
    """Emit SQL to stdout without a live connection."""
    context.configure(
        url=database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """Apply migrations over a short-lived, unpooled connection."""
    connectable = create_engine(database_url(), poolclass=pool.NullPool)

    try:
        with connectable.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                compare_type=True,
                render_as_batch=connection.dialect.name == 'sqlite',
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
