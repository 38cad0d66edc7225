#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Curve - State Repository
Загрузка и сохранение AppState в локальном key-value хранилище.

Локальное хранилище - единственный источник истины; load() никогда не
пробрасывает ошибки, save() сообщает результат через bool.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
import logging

from habit_tracker.core.models import AppState
from habit_tracker.database.backup import BackupManager
from habit_tracker.database.storage import FileKeyValueStore, KeyValueStore
from habit_tracker.shared.models import PayloadError, dump_state_payload, parse_state_payload
from habit_tracker.utils.datetime_utils import now_local

logger = logging.getLogger(__name__)

STORAGE_KEY = 'habit_tracker_state_v2'

@dataclass
class RepositoryStats:
    """Статистика хранилища"""
    load_count: int = 0
    save_count: int = 0
    error_count: int = 0
    restored_from_backup: int = 0
    last_save: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'load_count': self.load_count,
            'save_count': self.save_count,
            'error_count': self.error_count,
            'restored_from_backup': self.restored_from_backup,
            'last_save': self.last_save
        }

class StateRepository:
    """Persistence gateway для AppState"""

    def __init__(self, store: KeyValueStore, backup_manager: Optional[BackupManager] = None,
                 timezone: Optional[str] = None):
        self.store = store
        self.backup_manager = backup_manager
        self.timezone = timezone
        self.stats = RepositoryStats()

    def default_state(self) -> AppState:
        return AppState.default(now_local(self.timezone))

    async def load(self) -> AppState:
        """Загрузить состояние; при любой ошибке - состояние по умолчанию"""
        loop = asyncio.get_running_loop()
        self.stats.load_count += 1

        try:
            raw = await loop.run_in_executor(None, self.store.get_item, STORAGE_KEY)
        except Exception as e:
            logger.error(f"loadState error: {e}")
            self.stats.error_count += 1
            return await self._restore_or_default(loop)

        if not raw:
            logger.info("No saved state, starting with empty state")
            return self.default_state()

        try:
            state = parse_state_payload(raw)
        except PayloadError as e:
            logger.error(f"Saved state is corrupted: {e}")
            self.stats.error_count += 1
            return await self._restore_or_default(loop)

        logger.info(f"Loaded state with {len(state.month_data)} months")
        return state

    async def _restore_or_default(self, loop) -> AppState:
        if self.backup_manager is not None:
            try:
                raw = await loop.run_in_executor(None, self.backup_manager.find_latest_value, STORAGE_KEY)
                if raw:
                    state = parse_state_payload(raw)
                    self.stats.restored_from_backup += 1
                    logger.warning("State restored from latest backup")
                    return state
            except Exception as e:
                logger.warning(f"Could not restore state from backup: {e}")

        logger.warning("Falling back to empty state")
        return self.default_state()

    async def save(self, state: AppState) -> bool:
        """Сохранить состояние; ошибки логируются, не пробрасываются"""
        loop = asyncio.get_running_loop()
        try:
            payload = dump_state_payload(state)
            await loop.run_in_executor(None, self.store.set_item, STORAGE_KEY, payload)
        except Exception as e:
            logger.error(f"saveState error: {e}")
            self.stats.error_count += 1
            return False

        self.stats.save_count += 1
        self.stats.last_save = datetime.now().isoformat()

        if self.backup_manager is not None and isinstance(self.store, FileKeyValueStore):
            await loop.run_in_executor(None, self.backup_manager.backup_if_due, self.store.path)
        return True
