from .gateway import PsycopgTwoFactorPostgresGateway, TwoFactorPostgresGateway
from .settings_repository import PostgresTwoFactorSettingsRepository

__all__ = [
    "PostgresTwoFactorSettingsRepository",
    "PsycopgTwoFactorPostgresGateway",
    "TwoFactorPostgresGateway",
]
