from .api import (
    RequireUserIdHeaderDependency,
    TwoFactorCodeRequest,
    TwoFactorConfirmResponse,
    TwoFactorEnrollmentResponse,
    TwoFactorStatusResponse,
    TwoFactorVerifyResponse,
    build_two_factor_totp_router,
)

__all__ = [
    "RequireUserIdHeaderDependency",
    "TwoFactorCodeRequest",
    "TwoFactorConfirmResponse",
    "TwoFactorEnrollmentResponse",
    "TwoFactorStatusResponse",
    "TwoFactorVerifyResponse",
    "build_two_factor_totp_router",
]
