from __future__ import annotations

import logging

from tfa.contexts.two_factor.application.ports.clock import TwoFactorClock
from tfa.contexts.two_factor.application.ports.secret_vault import TwoFactorSecretVault
from tfa.contexts.two_factor.application.ports.settings_repository import (
    TwoFactorSettingsRepository,
)
from tfa.contexts.two_factor.application.ports.totp_codec import TotpCodec
from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)

_DEFAULT_DISCREPANCY = 1


def two_factor_enabled_for_user(settings: UserTfaSettings) -> bool:
    """
    Return whether settings describe an active second factor.

    Args:
        settings: Stored settings record.
    Returns:
        bool: `True` only for a non-empty secret with `enabled` being literally `True`.
    Assumptions:
        Truthy non-boolean `enabled` values come from corrupted records and count as disabled.
    Raises:
        None.
    Side Effects:
        None.
    """
    return bool(settings.secret) and settings.enabled is True


class VerifyTwoFactorCodeUseCase:
    """
    VerifyTwoFactorCodeUseCase — login-time code check with single-use-per-slice replay guard.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/totp_codec.py
      - src/tfa/contexts/two_factor/application/ports/settings_repository.py
      - src/tfa/contexts/two_factor/adapters/inbound/api/routes/two_factor_totp.py
    """

    def __init__(
        self,
        *,
        repository: TwoFactorSettingsRepository,
        secret_vault: TwoFactorSecretVault,
        totp_codec: TotpCodec,
        clock: TwoFactorClock,
        discrepancy: int = _DEFAULT_DISCREPANCY,
    ) -> None:
        """
        Initialize verify use-case dependencies and tolerance window.

        Args:
            repository: Settings persistence port.
            secret_vault: Secret reveal port.
            totp_codec: TOTP verification port.
            clock: UTC time source selecting the current slice.
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
            raise ValueError("VerifyTwoFactorCodeUseCase requires repository")
        if secret_vault is None:  # type: ignore[truthy-bool]
            raise ValueError("VerifyTwoFactorCodeUseCase requires secret_vault")
        if totp_codec is None:  # type: ignore[truthy-bool]
            raise ValueError("VerifyTwoFactorCodeUseCase requires totp_codec")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("VerifyTwoFactorCodeUseCase requires clock")
        if discrepancy < 0:
            raise ValueError("VerifyTwoFactorCodeUseCase discrepancy must be >= 0")

        self._repository = repository
        self._secret_vault = secret_vault
        self._totp_codec = totp_codec
        self._clock = clock
        self._discrepancy = discrepancy

    def verify(
        self,
        *,
        user_id: UserId,
        code: str,
        settings: UserTfaSettings | None = None,
    ) -> bool:
        """
        Verify login code and consume its time slice on success.

        Args:
            user_id: User attempting to log in.
            code: Submitted TOTP code.
            settings: Settings snapshot already loaded by the caller; read when omitted.
        Returns:
            bool: `True` when the code matches a slice newer than the stored watermark
                and the watermark was advanced to it.
        Assumptions:
            Watermark starts at 0, so slice 0 itself can never be accepted; real
            clocks are far past it.
        Raises:
            ValueError: If the stored protected secret cannot be revealed.
            TwoFactorSettingsPersistenceError: If the store cannot be read or updated.
        Side Effects:
            Advances the stored `timeslice` watermark on success.
        """
        state = settings if settings is not None else self._repository.read(user_id=user_id)
        normalized_code = code.strip() if isinstance(code, str) else ""
        if not normalized_code or not state.secret:
            log.debug("two_factor verify fast-rejected reason=empty_input user_id=%s", user_id)
            return False

        plaintext_secret = self._secret_vault.reveal(
            stored_secret=state.secret,
            is_protected=bool(state.encrypted),
        )
        outcome = self._totp_codec.verify_code(
            secret=plaintext_secret,
            code=normalized_code,
            discrepancy=self._discrepancy,
            at_time=self._clock.now(),
        )
        if not outcome.valid or outcome.timeslice is None:
            log.info("two_factor verify rejected reason=mismatch user_id=%s", user_id)
            return False

        matched_timeslice = outcome.timeslice
        if matched_timeslice <= state.timeslice:
            log.warning(
                "two_factor verify rejected reason=replay user_id=%s timeslice=%s watermark=%s",
                user_id,
                matched_timeslice,
                state.timeslice,
            )
            return False

        advanced = self._repository.advance_timeslice(
            user_id=user_id,
            expected=state.timeslice,
            timeslice=matched_timeslice,
        )
        if not advanced:
            log.warning(
                "two_factor verify rejected reason=stale_watermark user_id=%s timeslice=%s",
                user_id,
                matched_timeslice,
            )
            return False

        log.info(
            "two_factor verify accepted user_id=%s timeslice=%s",
            user_id,
            matched_timeslice,
        )
        return True
