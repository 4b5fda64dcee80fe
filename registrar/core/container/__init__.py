__all__ = [
    "BootConfiguration",
    "PersistentContainer",
    "RegistrarContainer",
    "StorageContainer",
]

from .registrar import BootConfiguration, RegistrarContainer
from .storage import PersistentContainer, StorageContainer
