from .settings_repository import InMemoryTwoFactorSettingsRepository

__all__ = [
    "InMemoryTwoFactorSettingsRepository",
]
