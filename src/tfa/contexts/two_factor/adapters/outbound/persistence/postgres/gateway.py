from __future__ import annotations

from typing import Any, Mapping, Protocol, cast

import psycopg
from psycopg.rows import dict_row


class TwoFactorPostgresGateway(Protocol):
    """
    TwoFactorPostgresGateway — minimal SQL gateway for two-factor Postgres adapters.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/adapters/outbound/persistence/postgres/settings_repository.py
      - alembic/versions/20261018_0001_two_factor_settings_v1.py
      - apps/api/wiring/modules/two_factor.py
    """

    def fetch_one(self, *, query: str, parameters: Mapping[str, Any]) -> Mapping[str, Any] | None:
        """
        Execute SQL query and return one row as mapping.

        Args:
            query: SQL text.
            parameters: Bind parameters mapping.
        Returns:
            Mapping[str, Any] | None: One row or `None`.
        Assumptions:
            Query may include `RETURNING` clause.
        Raises:
            Exception: Storage/driver exceptions from implementation.
        Side Effects:
            Executes one SQL statement.
        """
        ...


class PsycopgTwoFactorPostgresGateway(TwoFactorPostgresGateway):
    """
    PsycopgTwoFactorPostgresGateway — psycopg3 implementation of two-factor SQL gateway.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/adapters/outbound/persistence/postgres/settings_repository.py
      - alembic/versions/20261018_0001_two_factor_settings_v1.py
    """

    def __init__(self, *, dsn: str) -> None:
        """
        Initialize gateway with DSN connection string.

        Args:
            dsn: PostgreSQL DSN.
        Returns:
            None.
        Assumptions:
            DSN points to database migrated with `alembic upgrade head`.
        Raises:
            ValueError: If DSN is blank.
        Side Effects:
            None.
        """
        normalized_dsn = dsn.strip()
        if not normalized_dsn:
            raise ValueError("PsycopgTwoFactorPostgresGateway requires non-empty dsn")
        self._dsn = normalized_dsn

    def fetch_one(self, *, query: str, parameters: Mapping[str, Any]) -> Mapping[str, Any] | None:
        """
        Execute query in its own transaction and return first row mapped by column names.

        Args:
            query: SQL text.
            parameters: Bind parameters mapping.
        Returns:
            Mapping[str, Any] | None: Query row or `None`.
        Assumptions:
            psycopg connection context commits on success and rolls back on error.
        Raises:
            psycopg.Error: When database operation fails.
        Side Effects:
            Opens one database connection and executes one query.
        """
        with psycopg.connect(
            self._dsn,
            row_factory=cast(Any, dict_row),
        ) as connection:
            with connection.cursor() as cursor:
                cursor.execute(cast(Any, query), parameters)
                row = cursor.fetchone() if cursor.description is not None else None
        if row is None:
            return None
        return dict(row)
