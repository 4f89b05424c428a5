from __future__ import annotations

import os
from logging.config import fileConfig

from sqlalchemy import create_engine, pool
from sqlalchemy.engine import Connection

from alembic import context

_POSTGRES_DSN_ENV = "TFA_PG_DSN"

config = context.config

target_metadata = None


def _resolve_url() -> str:
    """
    Return database URL from `TFA_PG_DSN`, falling back to `sqlalchemy.url` of `alembic.ini`.

    Args:
        None.
    Returns:
        str: SQLAlchemy URL using the psycopg 3 driver.
    Assumptions:
        Plain `postgresql://` and `postgres://` URLs are rewritten to `postgresql+psycopg://`.
    Raises:
        ValueError: If no URL is configured.
    Side Effects:
        Reads process environment.
    """
    url = os.environ.get(_POSTGRES_DSN_ENV, "").strip() or (
        config.get_main_option("sqlalchemy.url") or ""
    ).strip()
    if not url:
        raise ValueError(f"Set {_POSTGRES_DSN_ENV} or sqlalchemy.url in alembic.ini")
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix) :]
    return url


def run_migrations_offline() -> None:
    """
    Print two-factor schema SQL instead of executing it (`alembic upgrade head --sql`).

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - alembic/versions/20261018_0001_two_factor_settings_v1.py
    """
    context.configure(
        url=_resolve_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Apply migrations on the connection injected by the runner, or on a new one.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Injected connection already holds the migration advisory lock.
    Raises:
        Exception: Alembic configuration/runtime errors.
    Side Effects:
        Applies schema changes.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - apps/migrations/main.py
    """
    injected_connection = config.attributes.get("connection")
    if isinstance(injected_connection, Connection):
        _run_on_connection(connection=injected_connection)
        return

    engine = create_engine(_resolve_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        _run_on_connection(connection=connection)


def _run_on_connection(*, connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


if config.config_file_name is not None and "connection" not in config.attributes:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
