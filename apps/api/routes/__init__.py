from .two_factor import build_two_factor_router

__all__ = [
    "build_two_factor_router",
]
