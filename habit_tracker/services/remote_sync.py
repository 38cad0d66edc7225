# services/remote_sync.py
"""
Удаленное зеркало состояния (MongoDB Atlas Data API).

Зеркало необязательное: push/pull/month_history никогда не пробрасывают
ошибки сети, авторизации или формата - локальное хранилище остается
источником истины.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

import aiohttp

from habit_tracker.config import RemoteConfig
from habit_tracker.core.models import AppState
from habit_tracker.database.storage import KeyValueStore
from habit_tracker.shared.models import MonthHistoryDocument, RemoteDocument
from habit_tracker.utils.decorators import best_effort
from habit_tracker.utils.identifiers import generate_user_id

logger = logging.getLogger(__name__)

USER_ID_KEY = 'habit_user_id'

class RemoteStoreError(Exception):
    """Ошибка ответа удаленного хранилища"""
    pass

class RemoteDocumentStore(ABC):
    """Одна логическая коллекция документов, адресуемых фильтром"""

    @abstractmethod
    async def update_one(self, filter: Dict[str, Any], fields: Dict[str, Any], upsert: bool = True) -> None:
        ...

    @abstractmethod
    async def find_one(self, filter: Dict[str, Any],
                       projection: Optional[Dict[str, int]] = None) -> Optional[Dict[str, Any]]:
        ...

    async def close(self) -> None:
        pass

class AtlasDataApiStore(RemoteDocumentStore):
    """Клиент Atlas Data API поверх aiohttp"""

    def __init__(self, remote_config: RemoteConfig, session: Optional[aiohttp.ClientSession] = None):
        self.config = remote_config
        self._session = session
        self._owns_session = session is None

    @property
    def headers(self) -> Dict[str, str]:
        return {
            'Content-Type': 'application/json',
            'api-key': self.config.api_key or '',
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def _action(self, action: str, body: Dict[str, Any]) -> Dict[str, Any]:
        payload = {
            'dataSource': self.config.data_source,
            'database': self.config.database,
            'collection': self.config.collection,
            **body,
        }
        url = f"{self.config.endpoint}/{action}"
        session = self._get_session()
        async with session.post(url, json=payload, headers=self.headers) as response:
            if response.status >= 400:
                text = await response.text()
                raise RemoteStoreError(f"{action} failed with HTTP {response.status}: {text[:200]}")
            data = await response.json(content_type=None)
        if not isinstance(data, dict):
            raise RemoteStoreError(f"{action} returned unexpected payload")
        return data

    async def update_one(self, filter: Dict[str, Any], fields: Dict[str, Any], upsert: bool = True) -> None:
        await self._action('updateOne', {
            'filter': filter,
            'update': {'$set': fields},
            'upsert': upsert,
        })

    async def find_one(self, filter: Dict[str, Any],
                       projection: Optional[Dict[str, int]] = None) -> Optional[Dict[str, Any]]:
        body: Dict[str, Any] = {'filter': filter}
        if projection:
            body['projection'] = projection
        data = await self._action('findOne', body)
        return data.get('document')

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()

def _extended_json_now() -> Dict[str, str]:
    now = datetime.now(timezone.utc)
    return {'$date': now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')}

class RemoteSyncGateway:
    """push / pull полного состояния по userId установки"""

    def __init__(self, remote_store: RemoteDocumentStore, kv_store: KeyValueStore):
        self.remote_store = remote_store
        self.kv_store = kv_store
        self._user_id: Optional[str] = None
        self._user_id_lock = asyncio.Lock()

    async def ensure_user_id(self) -> str:
        """Стабильный id установки; создается и сохраняется при первом вызове"""
        async with self._user_id_lock:
            if self._user_id:
                return self._user_id

            loop = asyncio.get_running_loop()
            user_id = await loop.run_in_executor(None, self.kv_store.get_item, USER_ID_KEY)
            if not user_id:
                user_id = generate_user_id()
                await loop.run_in_executor(None, self.kv_store.set_item, USER_ID_KEY, user_id)
                logger.info(f"Generated new user id {user_id}")

            self._user_id = user_id
            return user_id

    @best_effort(default=None, message="Remote sync failed (offline?)")
    async def push(self, state: AppState) -> None:
        user_id = await self.ensure_user_id()
        await self.remote_store.update_one(
            {'userId': user_id},
            {
                'userId': user_id,
                'state': state.to_dict(),
                'updatedAt': _extended_json_now(),
            },
            upsert=True,
        )
        logger.debug(f"Pushed state for {user_id} ({len(state.month_data)} months)")

    @best_effort(default=None, message="Remote load failed (offline?)")
    async def pull(self) -> Optional[AppState]:
        user_id = await self.ensure_user_id()
        document = await self.remote_store.find_one({'userId': user_id})
        if not document:
            return None
        parsed = RemoteDocument.model_validate(document)
        if parsed.state is None:
            return None
        return parsed.state.to_state()

    @best_effort(default=list, message="Remote month history failed")
    async def month_history(self) -> List[str]:
        """Месяцы, когда-либо попавшие в зеркало (новые первыми)"""
        user_id = await self.ensure_user_id()
        document = await self.remote_store.find_one(
            {'userId': user_id},
            projection={'state.monthData': 1},
        )
        if not document:
            return []
        return MonthHistoryDocument.model_validate(document).month_keys()

    async def close(self) -> None:
        await self.remote_store.close()
