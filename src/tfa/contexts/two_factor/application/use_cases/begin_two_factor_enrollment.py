from __future__ import annotations

import logging

from tfa.contexts.two_factor.application.dto import TwoFactorEnrollmentView
from tfa.contexts.two_factor.application.ports.enrollment_session_store import (
    PENDING_SECRET_KEY,
    EnrollmentSessionStore,
)
from tfa.contexts.two_factor.application.ports.settings_repository import (
    TwoFactorSettingsRepository,
)
from tfa.contexts.two_factor.application.ports.totp_codec import TotpCodec
from tfa.contexts.two_factor.application.use_cases.verify_two_factor_code import (
    two_factor_enabled_for_user,
)
from tfa.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)

_DEFAULT_SECRET_BITS = 160


class BeginTwoFactorEnrollmentUseCase:
    """
    BeginTwoFactorEnrollmentUseCase — create unconfirmed secret and enrollment form data.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/enrollment_session_store.py
      - src/tfa/contexts/two_factor/application/use_cases/confirm_two_factor_enrollment.py
      - src/tfa/contexts/two_factor/adapters/inbound/api/routes/two_factor_totp.py
    """

    def __init__(
        self,
        *,
        repository: TwoFactorSettingsRepository,
        totp_codec: TotpCodec,
        issuer: str,
        secret_bits: int = _DEFAULT_SECRET_BITS,
    ) -> None:
        """
        Initialize enrollment dependencies and issuer label.

        Args:
            repository: Settings persistence port.
            totp_codec: Secret generation and otpauth URI port.
            issuer: Issuer label shown in authenticator apps.
            secret_bits: Entropy of generated secrets.
        Returns:
            None.
        Assumptions:
            Dependencies are initialized and non-null.
        Raises:
            ValueError: If dependencies are missing or issuer is blank.
        Side Effects:
            None.
        """
        normalized_issuer = issuer.strip()
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("BeginTwoFactorEnrollmentUseCase requires repository")
        if totp_codec is None:  # type: ignore[truthy-bool]
            raise ValueError("BeginTwoFactorEnrollmentUseCase requires totp_codec")
        if not normalized_issuer:
            raise ValueError("BeginTwoFactorEnrollmentUseCase requires non-empty issuer")

        self._repository = repository
        self._totp_codec = totp_codec
        self._issuer = normalized_issuer
        self._secret_bits = secret_bits

    def begin(
        self,
        *,
        user_id: UserId,
        session: EnrollmentSessionStore,
        account_label: str | None = None,
    ) -> TwoFactorEnrollmentView | None:
        """
        Generate fresh pending secret for a user without an active second factor.

        Args:
            user_id: User viewing the enrollment form.
            session: Ephemeral store of this enrollment attempt.
            account_label: Label shown in authenticator apps; user id when omitted.
        Returns:
            TwoFactorEnrollmentView | None: Form data, or `None` when already enabled.
        Assumptions:
            Each call replaces any earlier pending secret of the session.
        Raises:
            ValueError: If codec rejects configured secret length.
            TwoFactorSettingsPersistenceError: If settings cannot be read.
        Side Effects:
            Writes pending secret into session store.
        """
        current = self._repository.read(user_id=user_id)
        if two_factor_enabled_for_user(current):
            log.debug("two_factor enrollment skipped reason=already_enabled user_id=%s", user_id)
            return None

        secret = self._totp_codec.generate_secret(length_bits=self._secret_bits)
        session.set(PENDING_SECRET_KEY, secret)

        label = (account_label or "").strip() or str(user_id)
        otpauth_uri = self._totp_codec.build_otpauth_uri(
            secret=secret,
            account_label=label,
            issuer=self._issuer,
        )
        log.info("two_factor enrollment started user_id=%s", user_id)
        return TwoFactorEnrollmentView(
            account_label=label,
            secret=secret,
            otpauth_uri=otpauth_uri,
        )
