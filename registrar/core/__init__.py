__all__ = [
    "di",
    "LoggingProvider",
    "Settings",
    "Secrets",
    "TimestampProvider",
]

# NOTE: the containers live in registrar.core.container and are not imported
#       here; they import registrar.grading, which imports the storage
#       modules, which import this package for di
from . import di
from .config import Secrets, Settings
from .provider import LoggingProvider, TimestampProvider
