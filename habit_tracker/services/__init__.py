# services/__init__.py

"""
Сервисы Habit Curve: удаленное зеркало и сервис трекера.
"""

import logging
from typing import Optional

from habit_tracker.database.backup import BackupManager
from habit_tracker.database.manager import StateRepository
from habit_tracker.database.storage import FileKeyValueStore, KeyValueStore
from .remote_sync import AtlasDataApiStore, RemoteDocumentStore, RemoteSyncGateway
from .tracker_service import HabitTrackerService

logger = logging.getLogger(__name__)

def create_tracker_service(cfg=None, store: Optional[KeyValueStore] = None,
                           remote_store: Optional[RemoteDocumentStore] = None) -> HabitTrackerService:
    """Собрать HabitTrackerService по конфигурации"""
    if cfg is None:
        from habit_tracker.config import config as cfg

    if store is None:
        cfg.ensure_directories()
        store = FileKeyValueStore(cfg.storage.store_file)

    backup_manager = None
    if cfg.storage.auto_backup and isinstance(store, FileKeyValueStore):
        backup_manager = BackupManager(
            cfg.storage.backup_dir,
            max_backups=cfg.storage.max_backups,
            interval_hours=cfg.storage.backup_interval_hours
        )

    repository = StateRepository(store, backup_manager=backup_manager, timezone=cfg.timezone)

    if remote_store is None and cfg.remote.enabled:
        remote_store = AtlasDataApiStore(cfg.remote)

    sync_gateway = None
    if remote_store is not None:
        sync_gateway = RemoteSyncGateway(remote_store, store)
        logger.info("Remote sync enabled")
    else:
        logger.info("Remote sync disabled, running local-only")

    return HabitTrackerService(repository, sync_gateway, timezone=cfg.timezone)

__all__ = [
    'AtlasDataApiStore',
    'RemoteDocumentStore',
    'RemoteSyncGateway',
    'HabitTrackerService',
    'create_tracker_service'
]
