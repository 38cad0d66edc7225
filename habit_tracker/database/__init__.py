# database/__init__.py

from .storage import KeyValueStore, FileKeyValueStore, MemoryKeyValueStore, StoreError
from .backup import BackupManager
from .manager import StateRepository, STORAGE_KEY

__all__ = [
    'KeyValueStore',
    'FileKeyValueStore',
    'MemoryKeyValueStore',
    'StoreError',
    'BackupManager',
    'StateRepository',
    'STORAGE_KEY'
]
