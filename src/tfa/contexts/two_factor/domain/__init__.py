from .entities import UserTfaSettings
from .errors import (
    TwoFactorDependencyUnavailableError,
    TwoFactorOperationError,
    TwoFactorSettingsPersistenceError,
)
from .value_objects import ProtectedSecret, TotpVerification

__all__ = [
    "ProtectedSecret",
    "TotpVerification",
    "TwoFactorDependencyUnavailableError",
    "TwoFactorOperationError",
    "TwoFactorSettingsPersistenceError",
    "UserTfaSettings",
]
