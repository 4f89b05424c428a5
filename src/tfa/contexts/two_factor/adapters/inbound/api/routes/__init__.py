from .two_factor_totp import (
    TwoFactorCodeRequest,
    TwoFactorConfirmResponse,
    TwoFactorEnrollmentResponse,
    TwoFactorNoticeResponse,
    TwoFactorStatusResponse,
    TwoFactorVerifyResponse,
    build_two_factor_totp_router,
)

__all__ = [
    "TwoFactorCodeRequest",
    "TwoFactorConfirmResponse",
    "TwoFactorEnrollmentResponse",
    "TwoFactorNoticeResponse",
    "TwoFactorStatusResponse",
    "TwoFactorVerifyResponse",
    "build_two_factor_totp_router",
]
