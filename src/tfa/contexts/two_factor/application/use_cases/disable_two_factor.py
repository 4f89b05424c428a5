from __future__ import annotations

import logging

from tfa.contexts.two_factor.application.ports.settings_repository import (
    TwoFactorSettingsRepository,
)
from tfa.contexts.two_factor.application.use_cases.save_two_factor_settings import (
    SaveTwoFactorSettingsUseCase,
)
from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)


class DisableTwoFactorUseCase:
    """
    DisableTwoFactorUseCase — clear secret so the user can enroll again.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/use_cases/begin_two_factor_enrollment.py
      - src/tfa/contexts/two_factor/adapters/inbound/api/routes/two_factor_totp.py
    """

    def __init__(
        self,
        *,
        repository: TwoFactorSettingsRepository,
        save_settings: SaveTwoFactorSettingsUseCase,
    ) -> None:
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("DisableTwoFactorUseCase requires repository")
        if save_settings is None:  # type: ignore[truthy-bool]
            raise ValueError("DisableTwoFactorUseCase requires save_settings")

        self._repository = repository
        self._save_settings = save_settings

    def disable(self, *, user_id: UserId) -> UserTfaSettings:
        """
        Reset stored secret and enabled flag, keeping the replay watermark.

        Args:
            user_id: Settings owner.
        Returns:
            UserTfaSettings: Persisted disabled record.
        Assumptions:
            Watermark survives so codes of an old secret cannot be replayed against a new one
            within the same slices.
        Raises:
            TwoFactorSettingsPersistenceError: If the write fails.
        Side Effects:
            Writes one settings record.
        """
        current = self._repository.read(user_id=user_id)
        disabled = self._save_settings.save(
            user_id=user_id,
            settings=current.without_pending_code().with_secret(secret="", enabled=False),
        )
        log.info("two_factor disabled user_id=%s", user_id)
        return disabled
