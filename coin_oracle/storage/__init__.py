"""Storage backends and the selector that picks the live one."""

from coin_oracle.storage.base import Storage
from coin_oracle.storage.database import DatabaseStorage
from coin_oracle.storage.manager import StorageManager, initialize_storage
from coin_oracle.storage.memory import MemoryStorage

__all__ = [
    "Storage",
    "DatabaseStorage",
    "MemoryStorage",
    "StorageManager",
    "initialize_storage",
]
