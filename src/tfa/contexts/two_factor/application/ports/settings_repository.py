from __future__ import annotations

from typing import Protocol

from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.shared_kernel.primitives import UserId


class TwoFactorSettingsRepository(Protocol):
    """
    TwoFactorSettingsRepository — port of the durable per-user settings store.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/domain/entities/user_tfa_settings.py
      - src/tfa/contexts/two_factor/adapters/outbound/persistence/in_memory/settings_repository.py
      - src/tfa/contexts/two_factor/adapters/outbound/persistence/postgres/settings_repository.py
    """

    def read(self, *, user_id: UserId) -> UserTfaSettings:
        """
        Read settings record of one user.

        Args:
            user_id: Settings owner.
        Returns:
            UserTfaSettings: Stored record, or `UserTfaSettings.disabled()` when absent.
        Assumptions:
            One record per user.
        Raises:
            TwoFactorSettingsPersistenceError: If the store cannot be read.
        Side Effects:
            Reads one storage record.
        """
        ...

    def write(self, *, user_id: UserId, settings: UserTfaSettings) -> UserTfaSettings:
        """
        Create or replace settings record of one user.

        Args:
            user_id: Settings owner.
            settings: Record in storage form (secret already protected).
        Returns:
            UserTfaSettings: Persisted record.
        Assumptions:
            `pending_confirm_code` is transient and not required to survive a write.
        Raises:
            TwoFactorSettingsPersistenceError: If the write fails.
        Side Effects:
            Writes one storage record.
        """
        ...

    def advance_timeslice(self, *, user_id: UserId, expected: int, timeslice: int) -> bool:
        """
        Atomically move the replay watermark from `expected` to `timeslice`.

        Args:
            user_id: Settings owner.
            expected: Watermark observed when the code was verified.
            timeslice: Newly accepted slice index, strictly greater than `expected`.
        Returns:
            bool: `True` when stored watermark was still `expected` and got advanced.
        Assumptions:
            Concurrent logins for one user race on this call; only one may win per slice.
        Raises:
            TwoFactorSettingsPersistenceError: If the write fails.
        Side Effects:
            Writes one storage record on success.
        """
        ...
