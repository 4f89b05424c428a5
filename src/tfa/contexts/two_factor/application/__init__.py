from .dto import ConfirmTwoFactorEnrollmentResult, EnrollmentNotice, TwoFactorEnrollmentView
from .ports import (
    PENDING_SECRET_KEY,
    EnrollmentSessionStore,
    TotpCodec,
    TwoFactorClock,
    TwoFactorProvider,
    TwoFactorSecretVault,
    TwoFactorSettingsRepository,
)
from .use_cases import (
    BeginTwoFactorEnrollmentUseCase,
    ConfirmTwoFactorEnrollmentUseCase,
    DisableTwoFactorUseCase,
    SaveTwoFactorSettingsUseCase,
    TotpTwoFactorProvider,
    VerifyTwoFactorCodeUseCase,
    two_factor_enabled_for_user,
)

__all__ = [
    "PENDING_SECRET_KEY",
    "BeginTwoFactorEnrollmentUseCase",
    "ConfirmTwoFactorEnrollmentResult",
    "ConfirmTwoFactorEnrollmentUseCase",
    "DisableTwoFactorUseCase",
    "EnrollmentNotice",
    "EnrollmentSessionStore",
    "SaveTwoFactorSettingsUseCase",
    "TotpCodec",
    "TotpTwoFactorProvider",
    "TwoFactorClock",
    "TwoFactorEnrollmentView",
    "TwoFactorProvider",
    "TwoFactorSecretVault",
    "TwoFactorSettingsRepository",
    "VerifyTwoFactorCodeUseCase",
    "two_factor_enabled_for_user",
]
