"""
Fail-fast Alembic runner creating the two-factor settings schema.

Docs: docs/architecture/two_factor/two-factor-totp-v1.md
Related: alembic/env.py, alembic/versions/20261018_0001_two_factor_settings_v1.py
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Mapping

import psycopg
from sqlalchemy import create_engine, pool, text
from sqlalchemy.engine import Connection, Engine

from alembic import command
from alembic.config import Config

_POSTGRES_DSN_ENV = "TFA_PG_DSN"
_DEFAULT_LOCK_KEY = 61823004917
_DEFAULT_REVISION = "head"


def _build_parser() -> argparse.ArgumentParser:
    """
    Build command-line parser of the migration runner.

    Args:
        None.
    Returns:
        argparse.ArgumentParser: Parser with `--dsn`, `--revision`, and `--lock-key`.
    Assumptions:
        Running without arguments upgrades to the newest revision.
    Raises:
        None.
    Side Effects:
        None.
    """
    parser = argparse.ArgumentParser(prog="tfa-migrations")
    parser.add_argument(
        "--dsn",
        default="",
        help=f"Postgres DSN (URL or conninfo). Defaults to ${_POSTGRES_DSN_ENV}.",
    )
    parser.add_argument(
        "--revision",
        default=_DEFAULT_REVISION,
        help="Target Alembic revision for upgrade.",
    )
    parser.add_argument(
        "--lock-key",
        type=int,
        default=_DEFAULT_LOCK_KEY,
        help="pg_advisory_lock key serializing concurrent runners.",
    )
    return parser


def _resolve_dsn(*, arg_dsn: str, environ: Mapping[str, str]) -> str:
    """
    Pick DSN from the command line first, then from the environment.

    Args:
        arg_dsn: Value of `--dsn`.
        environ: Environment mapping.
    Returns:
        str: Stripped DSN.
    Assumptions:
        API storage and migrations share `TFA_PG_DSN`.
    Raises:
        ValueError: If neither source provides a DSN.
    Side Effects:
        None.
    """
    dsn = arg_dsn.strip() or environ.get(_POSTGRES_DSN_ENV, "").strip()
    if not dsn:
        raise ValueError(f"Migration DSN is required via --dsn or {_POSTGRES_DSN_ENV}")
    return dsn


def _build_alembic_config(*, repo_root: Path) -> Config:
    """
    Load `alembic.ini` and pin script location to the repository `alembic/` directory.

    Args:
        repo_root: Directory holding `alembic.ini`.
    Returns:
        Config: Alembic config independent of the current working directory.
    Raises:
        ValueError: If `alembic.ini` is absent.
    """
    alembic_ini = repo_root / "alembic.ini"
    if not alembic_ini.exists():
        raise ValueError(f"Missing Alembic config file: {alembic_ini}")

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(repo_root / "alembic"))
    return config


def _build_engine(*, dsn: str) -> Engine:
    """
    Build SQLAlchemy engine whose connections are opened by psycopg from the raw DSN.

    Args:
        dsn: Postgres URL or libpq conninfo string, as accepted by `psycopg.connect`.
    Returns:
        Engine: Engine using the `postgresql+psycopg` dialect.
    Assumptions:
        Passing a creator keeps DSN parsing in psycopg for both DSN formats.
    Raises:
        None.
    Side Effects:
        None.
    """
    return create_engine(
        "postgresql+psycopg://",
        creator=lambda: psycopg.connect(dsn),
        poolclass=pool.NullPool,
    )


def _upgrade_under_lock(
    *,
    config: Config,
    engine: Engine,
    revision: str,
    lock_key: int,
) -> None:
    """
    Upgrade schema to `revision` on one connection holding the advisory lock.

    Args:
        config: Prepared Alembic config.
        engine: Engine for the target database.
        revision: Target revision, usually `head`.
        lock_key: Advisory lock key.
    Returns:
        None.
    Assumptions:
        `alembic/env.py` reuses the connection passed through `config.attributes`.
    Raises:
        Exception: Database or Alembic failures propagate after rollback.
    Side Effects:
        Applies DDL and prints progress lines.
    """
    with engine.connect() as connection:
        _set_pg_advisory_lock(connection=connection, lock_key=lock_key, acquire=True)
        try:
            config.attributes["connection"] = connection
            print(f"Running: alembic upgrade {revision}")
            command.upgrade(config, revision)
            connection.commit()
            print("Migration success")
        except Exception:  # noqa: BLE001
            connection.rollback()
            raise
        finally:
            _set_pg_advisory_lock(connection=connection, lock_key=lock_key, acquire=False)
            connection.commit()


def _set_pg_advisory_lock(*, connection: Connection, lock_key: int, acquire: bool) -> None:
    """
    Acquire or release session-level `pg_advisory_lock` around the upgrade.

    Args:
        connection: SQLAlchemy connection.
        lock_key: Advisory lock key.
        acquire: `True` to lock, `False` to unlock.
    Returns:
        None.
    Raises:
        Exception: Underlying DB execution errors.
    Side Effects:
        Blocks until lock is obtained when acquiring.
    """
    function_name = "pg_advisory_lock" if acquire else "pg_advisory_unlock"
    print(f"{'Acquiring' if acquire else 'Releasing'} {function_name}({lock_key})")
    connection.execute(text(f"SELECT {function_name}(:lock_key)"), {"lock_key": lock_key})


def main(argv: list[str] | None = None) -> int:
    """
    Entry point of `tfa-migrations`.

    Args:
        argv: Arguments without program name; `sys.argv` when omitted.
    Returns:
        int: `0` after a successful upgrade, `1` on any failure.
    Assumptions:
        Deploy pipelines stop when the exit code is non-zero.
    Raises:
        None.
    Side Effects:
        Reads environment, connects to Postgres, prints progress.
    """
    args = _build_parser().parse_args(argv)

    try:
        dsn = _resolve_dsn(arg_dsn=args.dsn, environ=os.environ)
        config = _build_alembic_config(repo_root=Path(__file__).resolve().parents[2])
        _upgrade_under_lock(
            config=config,
            engine=_build_engine(dsn=dsn),
            revision=args.revision,
            lock_key=args.lock_key,
        )
    except Exception as error:  # noqa: BLE001
        print(f"Migration failed: {error}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
