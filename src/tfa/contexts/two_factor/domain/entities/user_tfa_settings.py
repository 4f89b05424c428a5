from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class UserTfaSettings:
    """
    UserTfaSettings — durable per-user TOTP settings record.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/settings_repository.py
      - src/tfa/contexts/two_factor/application/use_cases/verify_two_factor_code.py
      - alembic/versions/20261018_0001_two_factor_settings_v1.py

    `enabled` is stored exactly as read from storage. Consumers must compare it
    by identity (`enabled is True`) so that a stray non-boolean value never
    counts as an enabled second factor.
    """

    enabled: Any = False
    secret: str = ""
    encrypted: bool = False
    timeslice: int = 0
    pending_confirm_code: str = ""

    def __post_init__(self) -> None:
        """
        Validate secret and watermark field shapes.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            `timeslice` is the last accepted TOTP slice index and never negative.
        Raises:
            ValueError: If secret/code are not strings or timeslice is negative.
        Side Effects:
            None.
        """
        if not isinstance(self.secret, str):
            raise ValueError("UserTfaSettings.secret must be str")
        if not isinstance(self.pending_confirm_code, str):
            raise ValueError("UserTfaSettings.pending_confirm_code must be str")
        if isinstance(self.timeslice, bool) or not isinstance(self.timeslice, int):
            raise ValueError("UserTfaSettings.timeslice must be int")
        if self.timeslice < 0:
            raise ValueError(f"UserTfaSettings.timeslice must be >= 0, got {self.timeslice}")

    @classmethod
    def disabled(cls) -> UserTfaSettings:
        """Return default record for users without a second factor."""
        return cls()

    def with_secret(self, *, secret: str, enabled: bool) -> UserTfaSettings:
        """
        Return copy carrying a plaintext secret, ready for vault protection.

        Args:
            secret: Plaintext base32 secret, or `""` to clear.
            enabled: New enabled flag.
        Returns:
            UserTfaSettings: Updated copy with `encrypted=False`.
        """
        return replace(self, secret=secret, enabled=enabled, encrypted=False)

    def without_pending_code(self) -> UserTfaSettings:
        return replace(self, pending_confirm_code="")
