"""
Alembic env.py for the e-LACAK database.

Credentials are resolved by elacak.core.config.Settings, the same way the API
resolves them:
  1. LOCAL_DB_* variables  (when ENVIRONMENT=development)
  2. DB_HOST + DB_PASSWORD env vars
  3. AWS Secrets Manager at /elacak/db/credentials (DB_HOST set, no password)

Usage:
  ENVIRONMENT=development alembic upgrade head
  ENVIRONMENT=production alembic upgrade head
"""
import logging
import logging.config
import sys

from alembic import context
from sqlalchemy import engine_from_config, pool

from elacak.core.config import get_settings

logger = logging.getLogger("alembic.env")

config = context.config

# Interpret the config file for Python logging
if config.config_file_name is not None:
    logging.config.fileConfig(config.config_file_name)

try:
    config.set_main_option("sqlalchemy.url", get_settings().database_url_sync)
except RuntimeError as exc:
    logger.error("Cannot resolve the database URL: %s", exc)
    sys.exit(1)

target_metadata = None  # Raw SQL migrations; the ORM models are not consulted


def run_migrations_offline() -> None:
    """Emit the migration SQL without a DB connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
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
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
