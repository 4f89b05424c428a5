from __future__ import annotations

import logging

from tfa.contexts.two_factor.application.dto import ConfirmTwoFactorEnrollmentResult
from tfa.contexts.two_factor.application.ports.clock import TwoFactorClock
from tfa.contexts.two_factor.application.ports.enrollment_session_store import (
    PENDING_SECRET_KEY,
    EnrollmentSessionStore,
)
from tfa.contexts.two_factor.application.ports.settings_repository import (
    TwoFactorSettingsRepository,
)
from tfa.contexts.two_factor.application.ports.totp_codec import TotpCodec
from tfa.contexts.two_factor.application.use_cases.save_two_factor_settings import (
    SaveTwoFactorSettingsUseCase,
)
from tfa.contexts.two_factor.application.use_cases.verify_two_factor_code import (
    two_factor_enabled_for_user,
)
from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)

_DEFAULT_DISCREPANCY = 1


class ConfirmTwoFactorEnrollmentUseCase:
    """
    ConfirmTwoFactorEnrollmentUseCase — promote pending secret after a matching code.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/use_cases/begin_two_factor_enrollment.py
      - src/tfa/contexts/two_factor/application/use_cases/save_two_factor_settings.py
      - src/tfa/contexts/two_factor/adapters/inbound/api/routes/two_factor_totp.py
    """

    def __init__(
        self,
        *,
        repository: TwoFactorSettingsRepository,
        totp_codec: TotpCodec,
        save_settings: SaveTwoFactorSettingsUseCase,
        clock: TwoFactorClock,
        discrepancy: int = _DEFAULT_DISCREPANCY,
    ) -> None:
        """
        Initialize confirm use-case dependencies.

        Args:
            repository: Settings persistence port.
            totp_codec: TOTP verification port.
            save_settings: Vault-aware settings writer.
            clock: UTC time source.
            discrepancy: Slices accepted before and after the current one.
        Returns:
            None.
        Assumptions:
            Dependencies are initialized and non-null.
        Raises:
            ValueError: If dependency is missing or discrepancy is negative.
        Side Effects:
            None.
        """
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("ConfirmTwoFactorEnrollmentUseCase requires repository")
        if totp_codec is None:  # type: ignore[truthy-bool]
            raise ValueError("ConfirmTwoFactorEnrollmentUseCase requires totp_codec")
        if save_settings is None:  # type: ignore[truthy-bool]
            raise ValueError("ConfirmTwoFactorEnrollmentUseCase requires save_settings")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("ConfirmTwoFactorEnrollmentUseCase requires clock")
        if discrepancy < 0:
            raise ValueError("ConfirmTwoFactorEnrollmentUseCase discrepancy must be >= 0")

        self._repository = repository
        self._totp_codec = totp_codec
        self._save_settings = save_settings
        self._clock = clock
        self._discrepancy = discrepancy

    def confirm(
        self,
        *,
        user_id: UserId,
        session: EnrollmentSessionStore,
        code: str | None = None,
        submitted_settings: UserTfaSettings | None = None,
    ) -> ConfirmTwoFactorEnrollmentResult:
        """
        Verify confirmation code against pending secret and persist the outcome.

        Args:
            user_id: User finishing enrollment.
            session: Ephemeral store holding the pending secret.
            code: Submitted code; `submitted_settings.pending_confirm_code` is used when omitted.
            submitted_settings: Settings form record carrying the typed confirmation code.
        Returns:
            ConfirmTwoFactorEnrollmentResult: Enabled flag and user-visible notice.
        Assumptions:
            Pending secret is taken with one atomic `pop`, so among overlapping requests
            only the one holding the secret verifies and writes settings.
        Raises:
            TwoFactorSettingsPersistenceError: If the outcome cannot be stored.
        Side Effects:
            Removes pending secret from session store and writes settings record.
        """
        current = self._repository.read(user_id=user_id)
        if two_factor_enabled_for_user(current):
            log.info(
                "two_factor enrollment confirm skipped reason=already_enabled user_id=%s",
                user_id,
            )
            return ConfirmTwoFactorEnrollmentResult.already_enabled()

        pending_secret = session.pop(PENDING_SECRET_KEY) or ""
        if not pending_secret:
            log.info(
                "two_factor enrollment confirm rejected reason=no_pending_secret user_id=%s",
                user_id,
            )
            return ConfirmTwoFactorEnrollmentResult.rejected()

        submitted_code = _resolve_submitted_code(code=code, submitted_settings=submitted_settings)
        if submitted_code and self._totp_codec.verify_code(
            secret=pending_secret,
            code=submitted_code,
            discrepancy=self._discrepancy,
            at_time=self._clock.now(),
        ).valid:
            self._save_settings.save(
                user_id=user_id,
                settings=current.with_secret(secret=pending_secret, enabled=True),
            )
            log.info("two_factor enrollment confirmed user_id=%s", user_id)
            return ConfirmTwoFactorEnrollmentResult.confirmed()

        self._save_settings.save(
            user_id=user_id,
            settings=current.with_secret(secret="", enabled=False),
        )
        log.info(
            "two_factor enrollment confirm rejected reason=%s user_id=%s",
            "mismatch" if submitted_code else "empty_code",
            user_id,
        )
        return ConfirmTwoFactorEnrollmentResult.rejected()


def _resolve_submitted_code(
    *,
    code: str | None,
    submitted_settings: UserTfaSettings | None,
) -> str:
    if code is not None:
        return code.strip()
    if submitted_settings is None:
        return ""
    return submitted_settings.pending_confirm_code.strip()
