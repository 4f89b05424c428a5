from .two_factor import (
    TwoFactorApiModule,
    TwoFactorRuntimeSettings,
    build_two_factor_api_module,
    build_two_factor_provider,
    build_two_factor_router,
)

__all__ = [
    "TwoFactorApiModule",
    "TwoFactorRuntimeSettings",
    "build_two_factor_api_module",
    "build_two_factor_provider",
    "build_two_factor_router",
]
