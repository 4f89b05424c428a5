from .protected_secret import ProtectedSecret
from .totp_verification import TotpVerification

__all__ = [
    "ProtectedSecret",
    "TotpVerification",
]
