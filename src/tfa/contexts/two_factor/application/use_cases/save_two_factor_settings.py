from __future__ import annotations

import logging
from dataclasses import replace

from tfa.contexts.two_factor.application.ports.secret_vault import TwoFactorSecretVault
from tfa.contexts.two_factor.application.ports.settings_repository import (
    TwoFactorSettingsRepository,
)
from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)


class SaveTwoFactorSettingsUseCase:
    """
    SaveTwoFactorSettingsUseCase — protect plaintext secret through the vault and persist.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/secret_vault.py
      - src/tfa/contexts/two_factor/application/ports/settings_repository.py
      - src/tfa/contexts/two_factor/application/use_cases/confirm_two_factor_enrollment.py
    """

    def __init__(
        self,
        *,
        repository: TwoFactorSettingsRepository,
        secret_vault: TwoFactorSecretVault,
    ) -> None:
        """
        Initialize save use-case dependencies.

        Args:
            repository: Settings persistence port.
            secret_vault: Secret-at-rest protection port.
        Returns:
            None.
        Assumptions:
            Dependencies are initialized and non-null.
        Raises:
            ValueError: If required dependency is missing.
        Side Effects:
            None.
        """
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("SaveTwoFactorSettingsUseCase requires repository")
        if secret_vault is None:  # type: ignore[truthy-bool]
            raise ValueError("SaveTwoFactorSettingsUseCase requires secret_vault")

        self._repository = repository
        self._secret_vault = secret_vault

    def save(self, *, user_id: UserId, settings: UserTfaSettings) -> UserTfaSettings:
        """
        Persist settings record with its secret converted to storage form.

        Args:
            user_id: Settings owner.
            settings: Record carrying a plaintext secret (`encrypted=False`).
        Returns:
            UserTfaSettings: Record as persisted by the repository.
        Assumptions:
            Transient `pending_confirm_code` is always cleared on save.
        Raises:
            ValueError: If record already claims a protected secret.
            TwoFactorSettingsPersistenceError: If the repository write fails.
        Side Effects:
            Writes one settings record.
        """
        if settings.encrypted:
            raise ValueError("SaveTwoFactorSettingsUseCase expects plaintext secret")

        protected = self._secret_vault.protect(secret=settings.secret)
        stored = replace(
            settings,
            secret=protected.value,
            encrypted=protected.transformed if protected.value else False,
            pending_confirm_code="",
        )
        persisted = self._repository.write(user_id=user_id, settings=stored)
        log.debug(
            "two_factor settings saved user_id=%s enabled=%s encrypted=%s",
            user_id,
            persisted.enabled,
            persisted.encrypted,
        )
        return persisted
