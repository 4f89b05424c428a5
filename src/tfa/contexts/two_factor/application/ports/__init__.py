from .clock import TwoFactorClock
from .enrollment_session_store import PENDING_SECRET_KEY, EnrollmentSessionStore
from .secret_vault import TwoFactorSecretVault
from .settings_repository import TwoFactorSettingsRepository
from .totp_codec import TotpCodec
from .two_factor_provider import TwoFactorProvider

__all__ = [
    "PENDING_SECRET_KEY",
    "EnrollmentSessionStore",
    "TotpCodec",
    "TwoFactorClock",
    "TwoFactorProvider",
    "TwoFactorSecretVault",
    "TwoFactorSettingsRepository",
]
