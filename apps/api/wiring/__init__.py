from .modules import (
    TwoFactorApiModule,
    build_two_factor_api_module,
    build_two_factor_provider,
    build_two_factor_router,
)

__all__ = [
    "TwoFactorApiModule",
    "build_two_factor_api_module",
    "build_two_factor_provider",
    "build_two_factor_router",
]
