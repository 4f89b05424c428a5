from .begin_two_factor_enrollment import BeginTwoFactorEnrollmentUseCase
from .confirm_two_factor_enrollment import ConfirmTwoFactorEnrollmentUseCase
from .disable_two_factor import DisableTwoFactorUseCase
from .save_two_factor_settings import SaveTwoFactorSettingsUseCase
from .totp_two_factor_provider import TotpTwoFactorProvider
from .verify_two_factor_code import VerifyTwoFactorCodeUseCase, two_factor_enabled_for_user

__all__ = [
    "BeginTwoFactorEnrollmentUseCase",
    "ConfirmTwoFactorEnrollmentUseCase",
    "DisableTwoFactorUseCase",
    "SaveTwoFactorSettingsUseCase",
    "TotpTwoFactorProvider",
    "VerifyTwoFactorCodeUseCase",
    "two_factor_enabled_for_user",
]
