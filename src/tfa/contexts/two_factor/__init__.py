from .application import (
    TotpTwoFactorProvider,
    TwoFactorProvider,
    two_factor_enabled_for_user,
)
from .domain import (
    TwoFactorOperationError,
    TwoFactorSettingsPersistenceError,
    UserTfaSettings,
)

__all__ = [
    "TotpTwoFactorProvider",
    "TwoFactorOperationError",
    "TwoFactorProvider",
    "TwoFactorSettingsPersistenceError",
    "UserTfaSettings",
    "two_factor_enabled_for_user",
]
