from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

NoticeLevel = Literal["success", "error"]

ENROLLMENT_INSTRUCTIONS = (
    "Scan the QR code with your authenticator app, or enter the secret manually, "
    "then submit the six-digit code it shows to finish enabling two-factor authentication."
)
ENROLLMENT_SUCCESS_MESSAGE = "Two-factor authentication has been enabled."
ENROLLMENT_FAILURE_MESSAGE = "Unable to confirm the code, re-scan and try again."


@dataclass(frozen=True, slots=True)
class TwoFactorEnrollmentView:
    """
    TwoFactorEnrollmentView — data handed to the UI to render an enrollment form.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/use_cases/begin_two_factor_enrollment.py
      - src/tfa/contexts/two_factor/adapters/inbound/api/routes/two_factor_totp.py

    The UI renders `otpauth_uri` as a QR image; `secret` is shown as text for
    manual entry.
    """

    account_label: str
    secret: str
    otpauth_uri: str
    instructions: str = ENROLLMENT_INSTRUCTIONS

    def __post_init__(self) -> None:
        """
        Validate view carries a secret and a standard otpauth URI.

        Raises:
            ValueError: If label/secret are empty or URI has an unexpected scheme.
        """
        if not self.account_label.strip():
            raise ValueError("TwoFactorEnrollmentView.account_label must be non-empty")
        if not self.secret:
            raise ValueError("TwoFactorEnrollmentView.secret must be non-empty")
        if not self.otpauth_uri.startswith("otpauth://totp"):
            raise ValueError("TwoFactorEnrollmentView.otpauth_uri must start with 'otpauth://totp'")


@dataclass(frozen=True, slots=True)
class EnrollmentNotice:
    """User-visible outcome message of an enrollment confirmation."""

    level: NoticeLevel
    message: str


@dataclass(frozen=True, slots=True)
class ConfirmTwoFactorEnrollmentResult:
    """
    ConfirmTwoFactorEnrollmentResult — outcome of processing a confirmation code.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/use_cases/confirm_two_factor_enrollment.py
      - src/tfa/contexts/two_factor/adapters/inbound/api/routes/two_factor_totp.py
    """

    enabled: bool
    notice: EnrollmentNotice | None = None

    @classmethod
    def confirmed(cls) -> ConfirmTwoFactorEnrollmentResult:
        return cls(
            enabled=True,
            notice=EnrollmentNotice(level="success", message=ENROLLMENT_SUCCESS_MESSAGE),
        )

    @classmethod
    def rejected(cls) -> ConfirmTwoFactorEnrollmentResult:
        return cls(
            enabled=False,
            notice=EnrollmentNotice(level="error", message=ENROLLMENT_FAILURE_MESSAGE),
        )

    @classmethod
    def already_enabled(cls) -> ConfirmTwoFactorEnrollmentResult:
        return cls(enabled=True, notice=None)
