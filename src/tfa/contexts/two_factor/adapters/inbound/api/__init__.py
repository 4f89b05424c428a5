from .deps import DEFAULT_USER_ID_HEADER, RequireUserIdHeaderDependency
from .routes import (
    TwoFactorCodeRequest,
    TwoFactorConfirmResponse,
    TwoFactorEnrollmentResponse,
    TwoFactorStatusResponse,
    TwoFactorVerifyResponse,
    build_two_factor_totp_router,
)

__all__ = [
    "DEFAULT_USER_ID_HEADER",
    "RequireUserIdHeaderDependency",
    "TwoFactorCodeRequest",
    "TwoFactorConfirmResponse",
    "TwoFactorEnrollmentResponse",
    "TwoFactorStatusResponse",
    "TwoFactorVerifyResponse",
    "build_two_factor_totp_router",
]
