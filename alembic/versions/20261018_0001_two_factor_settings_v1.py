"""Create two-factor settings table with replay watermark."""

from __future__ import annotations

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    Apply two-factor settings storage schema.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        One row per user; `user_id` is the opaque identifier of the host application.
    Raises:
        Exception: Postgres execution errors from Alembic runtime.
    Side Effects:
        Creates `two_factor_settings` table and constraints.
    """
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS two_factor_settings (
            user_id TEXT PRIMARY KEY,
            enabled BOOLEAN NOT NULL DEFAULT FALSE,
            secret TEXT NOT NULL DEFAULT '',
            encrypted BOOLEAN NOT NULL DEFAULT FALSE,
            timeslice BIGINT NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT two_factor_settings_user_id_chk
                CHECK (length(user_id) BETWEEN 1 AND 255),
            CONSTRAINT two_factor_settings_timeslice_chk
                CHECK (timeslice >= 0),
            CONSTRAINT two_factor_settings_enabled_secret_chk
                CHECK (NOT enabled OR secret <> '')
        )
        """
    )


def downgrade() -> None:
    """
    Drop two-factor settings storage schema.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Dropping the table disables second factor for every user.
    Raises:
        Exception: Postgres execution errors from Alembic runtime.
    Side Effects:
        Drops `two_factor_settings` table.
    """
    op.execute("DROP TABLE IF EXISTS two_factor_settings")
