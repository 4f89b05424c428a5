from .in_memory import InMemoryTwoFactorSettingsRepository
from .postgres import PostgresTwoFactorSettingsRepository, PsycopgTwoFactorPostgresGateway

__all__ = [
    "InMemoryTwoFactorSettingsRepository",
    "PostgresTwoFactorSettingsRepository",
    "PsycopgTwoFactorPostgresGateway",
]
