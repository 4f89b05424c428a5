from __future__ import annotations

import logging
from typing import Any, Mapping

import psycopg

from tfa.contexts.two_factor.adapters.outbound.persistence.postgres.gateway import (
    TwoFactorPostgresGateway,
)
from tfa.contexts.two_factor.application.ports.settings_repository import (
    TwoFactorSettingsRepository,
)
from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.contexts.two_factor.domain.errors import TwoFactorSettingsPersistenceError
from tfa.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)


class PostgresTwoFactorSettingsRepository(TwoFactorSettingsRepository):
    """
    PostgresTwoFactorSettingsRepository — Postgres adapter for the settings storage port.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/settings_repository.py
      - src/tfa/contexts/two_factor/adapters/outbound/persistence/postgres/gateway.py
      - alembic/versions/20261018_0001_two_factor_settings_v1.py
    """

    def __init__(
        self,
        *,
        gateway: TwoFactorPostgresGateway,
        settings_table: str = "two_factor_settings",
    ) -> None:
        """
        Initialize repository with SQL gateway and target table name.

        Args:
            gateway: SQL gateway abstraction.
            settings_table: Target settings table name.
        Returns:
            None.
        Assumptions:
            Table schema follows migration `20261018_0001_two_factor_settings_v1`.
        Raises:
            ValueError: If dependencies are invalid.
        Side Effects:
            None.
        """
        if gateway is None:  # type: ignore[truthy-bool]
            raise ValueError("PostgresTwoFactorSettingsRepository requires gateway")
        normalized_table = settings_table.strip()
        if not normalized_table:
            raise ValueError("PostgresTwoFactorSettingsRepository requires non-empty table name")

        self._gateway = gateway
        self._table = normalized_table

    def read(self, *, user_id: UserId) -> UserTfaSettings:
        """
        Read settings row by user id, falling back to disabled defaults.

        Args:
            user_id: Settings owner.
        Returns:
            UserTfaSettings: Stored record or disabled defaults.
        Assumptions:
            `user_id` is primary key of settings table.
        Raises:
            TwoFactorSettingsPersistenceError: If the query fails or the row is malformed.
        Side Effects:
            Executes one SQL SELECT statement.
        """
        query = f"""
        SELECT
            user_id,
            enabled,
            secret,
            encrypted,
            timeslice
        FROM {self._table}
        WHERE user_id = %(user_id)s
        """
        row = self._fetch_one(
            operation="read",
            query=query,
            parameters={"user_id": str(user_id)},
        )
        if row is None:
            return UserTfaSettings.disabled()
        return _map_settings_row(row=row)

    def write(self, *, user_id: UserId, settings: UserTfaSettings) -> UserTfaSettings:
        """
        Upsert settings row of one user.

        Args:
            user_id: Settings owner.
            settings: Record in storage form.
        Returns:
            UserTfaSettings: Persisted record as returned by `RETURNING`.
        Assumptions:
            Transient `pending_confirm_code` has no column and is dropped.
        Raises:
            TwoFactorSettingsPersistenceError: If the upsert fails.
        Side Effects:
            Executes one SQL upsert statement.
        """
        query = f"""
        INSERT INTO {self._table}
        (
            user_id,
            enabled,
            secret,
            encrypted,
            timeslice,
            updated_at
        )
        VALUES
        (
            %(user_id)s,
            %(enabled)s,
            %(secret)s,
            %(encrypted)s,
            %(timeslice)s,
            NOW()
        )
        ON CONFLICT (user_id)
        DO UPDATE
        SET
            enabled = EXCLUDED.enabled,
            secret = EXCLUDED.secret,
            encrypted = EXCLUDED.encrypted,
            timeslice = EXCLUDED.timeslice,
            updated_at = EXCLUDED.updated_at
        RETURNING
            user_id,
            enabled,
            secret,
            encrypted,
            timeslice
        """
        row = self._fetch_one(
            operation="write",
            query=query,
            parameters={
                "user_id": str(user_id),
                "enabled": settings.enabled is True,
                "secret": settings.secret,
                "encrypted": bool(settings.encrypted),
                "timeslice": settings.timeslice,
            },
        )
        if row is None:
            raise TwoFactorSettingsPersistenceError(detail="upsert returned no row")
        return _map_settings_row(row=row)

    def advance_timeslice(self, *, user_id: UserId, expected: int, timeslice: int) -> bool:
        """
        Conditionally move watermark in a single UPDATE statement.

        Args:
            user_id: Settings owner.
            expected: Watermark observed by the caller.
            timeslice: New watermark, strictly greater than `expected`.
        Returns:
            bool: `True` when exactly this call advanced the watermark.
        Assumptions:
            Row-level lock taken by UPDATE serializes concurrent logins of one user.
        Raises:
            TwoFactorSettingsPersistenceError: If the update fails.
        Side Effects:
            Executes one SQL UPDATE statement.
        """
        if timeslice <= expected:
            return False
        query = f"""
        UPDATE {self._table}
        SET
            timeslice = %(timeslice)s,
            updated_at = NOW()
        WHERE user_id = %(user_id)s
          AND timeslice = %(expected)s
          AND timeslice < %(timeslice)s
        RETURNING user_id
        """
        row = self._fetch_one(
            operation="advance_timeslice",
            query=query,
            parameters={
                "user_id": str(user_id),
                "expected": expected,
                "timeslice": timeslice,
            },
        )
        return row is not None

    def _fetch_one(
        self,
        *,
        operation: str,
        query: str,
        parameters: Mapping[str, Any],
    ) -> Mapping[str, Any] | None:
        """
        Run gateway query translating driver failures into persistence errors.

        Args:
            operation: Repository operation name for logs.
            query: SQL text.
            parameters: Bind parameters mapping.
        Returns:
            Mapping[str, Any] | None: Gateway result row.
        Raises:
            TwoFactorSettingsPersistenceError: If psycopg raises.
        Side Effects:
            Executes one SQL statement; logs failures without parameters.
        """
        try:
            return self._gateway.fetch_one(query=query, parameters=parameters)
        except psycopg.Error as error:
            log.exception(
                "event=two_factor_settings_storage_failed operation=%s table=%s",
                operation,
                self._table,
            )
            raise TwoFactorSettingsPersistenceError(detail=str(error)) from error


def _map_settings_row(*, row: Mapping[str, Any]) -> UserTfaSettings:
    """
    Map SQL row mapping into immutable `UserTfaSettings` record.

    Args:
        row: SQL result mapping.
    Returns:
        UserTfaSettings: Stored record.
    Assumptions:
        Row follows schema of `two_factor_settings` table.
    Raises:
        TwoFactorSettingsPersistenceError: If required fields are missing or malformed.
    Side Effects:
        None.
    """
    try:
        return UserTfaSettings(
            enabled=row["enabled"],
            secret=row["secret"] or "",
            encrypted=bool(row["encrypted"]),
            timeslice=int(row["timeslice"]),
        )
    except (KeyError, TypeError, ValueError) as error:
        raise TwoFactorSettingsPersistenceError(
            detail="cannot map two_factor_settings row"
        ) from error
