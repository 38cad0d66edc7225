# core/reconciler.py
"""
Слияние локального и удаленного состояния при старте.

Правило: курсор selectedMonth - локальный; monthData - удаленные месяцы,
поверх которых целиком кладутся локальные (по месяцу, без слияния дней).
Изменения одного месяца на двух устройствах теряются в пользу локальных.
"""

import asyncio
import logging

from habit_tracker.core.models import AppState

logger = logging.getLogger(__name__)

def merge_states(local: AppState, remote: AppState) -> AppState:
    month_data = dict(remote.month_data)
    month_data.update(local.month_data)
    return AppState(selected_month=local.selected_month, month_data=month_data)

class Reconciler:
    """Одноразовая стартовая синхронизация (не реентерабельна)"""

    def __init__(self, repository, sync_gateway):
        self.repository = repository
        self.sync_gateway = sync_gateway
        self._lock = asyncio.Lock()
        self.has_run = False

    async def run(self, local: AppState) -> AppState:
        async with self._lock:
            if self.has_run:
                logger.debug("Reconciliation already done for this process, skipping")
                return local
            self.has_run = True

            remote = await self.sync_gateway.pull()
            if remote is None:
                logger.info("No remote state, local state stands")
                return local

            merged = merge_states(local, remote)
            remote_only = sorted(set(remote.month_data) - set(local.month_data))
            logger.info(
                f"Merged remote state: {len(merged.month_data)} months, "
                f"{len(remote_only)} restored from remote"
            )
            await self.repository.save(merged)
            return merged
