# database/storage.py
"""
Локальное key-value хранилище строк (аналог AsyncStorage).
FileKeyValueStore держит все ключи в одном JSON-файле и пишет его атомарно;
копия последней удачной записи (.last) служит для восстановления ключей.
"""

import json
import re
import shutil
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

class StoreError(Exception):
    """Базовое исключение хранилища"""
    pass

class StoreCorruptionError(StoreError):
    """Файл хранилища поврежден"""
    pass

class KeyValueStore(ABC):

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...

class MemoryKeyValueStore(KeyValueStore):
    """Хранилище в памяти процесса"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

class FileKeyValueStore(KeyValueStore):
    """Все ключи в одном JSON-файле {key: value}"""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.last_good_path = self.path.with_suffix('.last')
        self.file_lock = threading.RLock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except ValueError as e:
            raise StoreCorruptionError(f"Store file {self.path} is corrupted: {e}") from e
        if not isinstance(data, dict):
            raise StoreCorruptionError(f"Store file {self.path} has unexpected format")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Атомарное сохранение через временный файл
        temp_file = self.path.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)

            # Проверяем целостность записанного файла
            with open(temp_file, 'r', encoding='utf-8') as f:
                json.load(f)

            temp_file.replace(self.path)
            shutil.copy2(self.path, self.last_good_path)
        except Exception:
            if temp_file.exists():
                temp_file.unlink()
            raise

    def _read_for_update(self) -> Dict[str, str]:
        try:
            return self._read_all()
        except StoreCorruptionError as e:
            # Поврежденный файл откладываем в сторону, уцелевшие ключи переносим
            corrupt_copy = self.path.with_suffix('.corrupt')
            corrupt_text = self.path.read_text(encoding='utf-8', errors='replace')
            shutil.move(str(self.path), str(corrupt_copy))

            data = self._read_last_good()
            data.update(_readable_pairs(corrupt_text))
            logger.error(f"{e}; moved aside to {corrupt_copy}, salvaged keys: {sorted(data)}")
            return data

    def _read_last_good(self) -> Dict[str, str]:
        """Ключи из копии последней удачной записи"""
        if not self.last_good_path.exists():
            return {}
        try:
            with open(self.last_good_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Last good store copy {self.last_good_path} is unreadable: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {key: value for key, value in data.items() if isinstance(value, str)}

    def get_item(self, key: str) -> Optional[str]:
        with self.file_lock:
            value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        with self.file_lock:
            data = self._read_for_update()
            data[key] = value
            self._write_all(data)

    def remove_item(self, key: str) -> None:
        with self.file_lock:
            data = self._read_for_update()
            if key in data:
                del data[key]
                self._write_all(data)

_GAP_RE = re.compile(r'[\s,{]*')
_COLON_RE = re.compile(r'\s*:\s*')

def _readable_pairs(text: str) -> Dict[str, str]:
    """Пары "ключ": "строка" от начала поврежденного JSON до первой ошибки"""
    decoder = json.JSONDecoder()
    pairs: Dict[str, str] = {}
    idx = _GAP_RE.match(text).end()
    while idx < len(text):
        try:
            key, idx = decoder.raw_decode(text, idx)
            colon = _COLON_RE.match(text, idx)
            if colon is None:
                break
            value, idx = decoder.raw_decode(text, colon.end())
        except ValueError:
            break
        if not isinstance(key, str) or not isinstance(value, str):
            break
        pairs[key] = value
        idx = _GAP_RE.match(text, idx).end()
    return pairs
