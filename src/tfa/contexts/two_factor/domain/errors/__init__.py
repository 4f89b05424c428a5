from .two_factor_errors import (
    TwoFactorDependencyUnavailableError,
    TwoFactorOperationError,
    TwoFactorSettingsPersistenceError,
)

__all__ = [
    "TwoFactorDependencyUnavailableError",
    "TwoFactorOperationError",
    "TwoFactorSettingsPersistenceError",
]
