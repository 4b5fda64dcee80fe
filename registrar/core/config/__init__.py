__all__ = [
    "GradingSettings",
    "LoggingSettings",
    "PostgresqlSecrets",
    "PostgresqlSettings",
    "Secrets",
    "Settings",
    "StorageSettings",
]


from .grading import GradingSettings
from .logging import LoggingSettings
from .secrets import PostgresqlSecrets, Secrets
from .settings import Settings
from .storage import PostgresqlSettings, StorageSettings
