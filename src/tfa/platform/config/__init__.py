from .two_factor_totp import TwoFactorTotpConfig, load_two_factor_totp_config, resolve_env_name

__all__ = [
    "TwoFactorTotpConfig",
    "load_two_factor_totp_config",
    "resolve_env_name",
]
