from __future__ import annotations

import threading
from dataclasses import replace

from tfa.contexts.two_factor.application.ports.settings_repository import (
    TwoFactorSettingsRepository,
)
from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.shared_kernel.primitives import UserId


class InMemoryTwoFactorSettingsRepository(TwoFactorSettingsRepository):
    """
    InMemoryTwoFactorSettingsRepository — process-local settings storage with atomic watermark.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/settings_repository.py
      - src/tfa/contexts/two_factor/adapters/outbound/persistence/postgres/
        settings_repository.py
      - tests/unit/contexts/two_factor/application/test_verify_two_factor_code.py
    """

    def __init__(self) -> None:
        """
        Initialize empty storage guarded by one lock.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Instance is shared by all request threads of one process.
        Raises:
            None.
        Side Effects:
            None.
        """
        self._rows: dict[str, UserTfaSettings] = {}
        self._lock = threading.Lock()

    def read(self, *, user_id: UserId) -> UserTfaSettings:
        """
        Return stored record or disabled defaults for unknown users.

        Args:
            user_id: Settings owner.
        Returns:
            UserTfaSettings: Stored snapshot.
        Assumptions:
            Dictionary key uses canonical string form of `UserId`.
        Raises:
            None.
        Side Effects:
            None.
        """
        with self._lock:
            return self._rows.get(str(user_id), UserTfaSettings.disabled())

    def write(self, *, user_id: UserId, settings: UserTfaSettings) -> UserTfaSettings:
        """
        Replace record of one user; the transient confirmation code is not stored.

        Args:
            user_id: Settings owner.
            settings: Record in storage form.
        Returns:
            UserTfaSettings: Stored snapshot.
        Assumptions:
            Caller already applied vault protection.
        Raises:
            None.
        Side Effects:
            Mutates in-memory dictionary row for the user.
        """
        stored = settings.without_pending_code()
        with self._lock:
            self._rows[str(user_id)] = stored
        return stored

    def advance_timeslice(self, *, user_id: UserId, expected: int, timeslice: int) -> bool:
        """
        Compare-and-set replay watermark under the storage lock.

        Args:
            user_id: Settings owner.
            expected: Watermark observed by the caller.
            timeslice: New watermark, strictly greater than `expected`.
        Returns:
            bool: `True` when watermark moved; `False` when a concurrent call won.
        Assumptions:
            Missing rows have no secret and can never accept a code.
        Raises:
            None.
        Side Effects:
            Mutates in-memory dictionary row on success.
        """
        if timeslice <= expected:
            return False
        key = str(user_id)
        with self._lock:
            current = self._rows.get(key)
            if current is None or current.timeslice != expected:
                return False
            self._rows[key] = replace(current, timeslice=timeslice)
        return True
