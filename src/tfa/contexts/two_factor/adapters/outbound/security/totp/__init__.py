from .pyotp_totp_codec import PyOtpTotpCodec

__all__ = [
    "PyOtpTotpCodec",
]
