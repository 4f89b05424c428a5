from .user_tfa_settings import UserTfaSettings

__all__ = [
    "UserTfaSettings",
]
