# services/tracker_service.py

import asyncio
import logging
from datetime import date
from typing import List, Optional, Set

from habit_tracker.core import state as ops
from habit_tracker.core.analytics import MonthSummary, summarize_month
from habit_tracker.core.models import AppState, MonthData
from habit_tracker.core.reconciler import Reconciler
from habit_tracker.database.manager import StateRepository
from habit_tracker.services.remote_sync import RemoteSyncGateway
from habit_tracker.utils.datetime_utils import next_month_key, prev_month_key, today_local

logger = logging.getLogger(__name__)

class HabitTrackerService:
    """
    Владелец единственного AppState.

    Каждое изменение:
    - строит новый снимок из предыдущего
    - дожидается записи в локальное хранилище
    - отправляет push в отдельной задаче, результат которой не ожидается
    """

    def __init__(self, repository: StateRepository,
                 sync_gateway: Optional[RemoteSyncGateway] = None,
                 timezone: Optional[str] = None):
        self.repository = repository
        self.sync_gateway = sync_gateway
        self.timezone = timezone
        self.reconciler = Reconciler(repository, sync_gateway) if sync_gateway else None
        self._state: Optional[AppState] = None
        self._mutation_lock = asyncio.Lock()
        self._pending_pushes: Set[asyncio.Task] = set()

    @property
    def state(self) -> AppState:
        if self._state is None:
            raise RuntimeError("HabitTrackerService is not started")
        return self._state

    @property
    def pending_pushes(self) -> int:
        return len(self._pending_pushes)

    # ===== LIFECYCLE =====

    async def start(self) -> AppState:
        """Загрузка локального состояния"""
        self._state = await self.repository.load()
        return self._state

    async def reconcile(self) -> AppState:
        """Стартовое слияние с удаленным зеркалом (один раз за процесс)"""
        if self.reconciler is None:
            return self.state
        async with self._mutation_lock:
            self._state = await self.reconciler.run(self.state)
        return self._state

    async def startup(self) -> AppState:
        await self.start()
        return await self.reconcile()

    async def drain(self) -> None:
        """Дождаться отправленных push (для остановки и тестов)"""
        while self._pending_pushes:
            await asyncio.gather(*list(self._pending_pushes), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        if self.sync_gateway is not None:
            await self.sync_gateway.close()

    # ===== MUTATION PATH =====

    async def commit(self, new_state: AppState) -> AppState:
        self._state = new_state
        saved = await self.repository.save(new_state)
        if not saved:
            logger.warning("State kept in memory only, local save failed")
        self._dispatch_push(new_state)
        return new_state

    def _dispatch_push(self, state: AppState) -> None:
        if self.sync_gateway is None:
            return
        task = asyncio.create_task(self.sync_gateway.push(state))
        self._pending_pushes.add(task)
        task.add_done_callback(self._on_push_done)

    def _on_push_done(self, task: asyncio.Task) -> None:
        self._pending_pushes.discard(task)
        if task.cancelled():
            logger.debug("Push cancelled")
            return
        if task.exception() is not None:
            logger.warning(f"Push failed: {task.exception()}")

    async def _apply(self, mutation) -> AppState:
        async with self._mutation_lock:
            current = self.state
            new_state = mutation(current)
            if new_state is current:
                return current
            return await self.commit(new_state)

    async def select_month(self, month: str) -> AppState:
        return await self._apply(lambda s: ops.select_month(s, month))

    async def show_previous_month(self) -> AppState:
        return await self._apply(lambda s: ops.select_month(s, prev_month_key(s.selected_month)))

    async def show_next_month(self) -> AppState:
        return await self._apply(lambda s: ops.select_month(s, next_month_key(s.selected_month)))

    async def toggle(self, day: int, habit_id: str) -> AppState:
        return await self._apply(lambda s: ops.toggle_day(s, day, habit_id))

    async def add_habit(self, name: str, color: Optional[str] = None) -> AppState:
        return await self._apply(lambda s: ops.add_habit_to_state(s, name, color))

    async def remove_habit(self, habit_id: str) -> AppState:
        return await self._apply(lambda s: ops.remove_habit_from_state(s, habit_id))

    # ===== QUERIES =====

    def month_data(self, month: Optional[str] = None) -> MonthData:
        return ops.get_month_data(self.state, month or self.state.selected_month)

    def summary(self, month: Optional[str] = None, today: Optional[date] = None) -> MonthSummary:
        month = month or self.state.selected_month
        return summarize_month(self.month_data(month), month, today or today_local(self.timezone))

    async def month_history(self) -> List[str]:
        if self.sync_gateway is None:
            return []
        return await self.sync_gateway.month_history()
