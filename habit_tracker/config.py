#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Curve - Configuration
Централизованная конфигурация с валидацией

Версия: 1.0.0
"""

import os
import sys
import logging
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass
from enum import Enum

import pytz

class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"

class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

@dataclass
class StorageConfig:
    """Конфигурация локального хранилища"""
    data_dir: Path
    store_file: Path
    backup_dir: Path
    backup_interval_hours: int = 6
    max_backups: int = 10
    auto_backup: bool = True

@dataclass
class RemoteConfig:
    """Конфигурация удаленного зеркала (Atlas Data API)"""
    app_id: Optional[str] = None
    api_key: Optional[str] = None
    data_source: str = "Cluster0"
    database: str = "habit_tracker"
    collection: str = "states"
    base_url: Optional[str] = None
    request_timeout: Optional[float] = None

    @property
    def enabled(self) -> bool:
        return bool(self.app_id and self.api_key)

    @property
    def endpoint(self) -> str:
        if self.base_url:
            return self.base_url.rstrip('/')
        return f"https://data.mongodb-api.com/app/{self.app_id}/endpoint/data/v1/action"

class TrackerConfig:
    """Главный класс конфигурации"""

    def __init__(self):
        self.environment = Environment(os.getenv('ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Загрузка конфигурации из переменных окружения"""

        # Директории
        self.data_dir = Path(os.getenv('DATA_DIR', 'data'))
        self.backup_dir = Path(os.getenv('BACKUP_DIR', 'backups'))
        self.log_dir = Path(os.getenv('LOG_DIR', 'logs'))

        # Хранилище
        self.storage = StorageConfig(
            data_dir=self.data_dir,
            store_file=self.data_dir / os.getenv('STORE_FILE', 'habit_store.json'),
            backup_dir=self.backup_dir,
            backup_interval_hours=int(os.getenv('BACKUP_INTERVAL_HOURS', 6)),
            max_backups=int(os.getenv('MAX_BACKUPS', 10)),
            auto_backup=os.getenv('AUTO_BACKUP', 'true').lower() == 'true'
        )

        # Удаленное зеркало
        timeout = os.getenv('REMOTE_TIMEOUT')
        self.remote = RemoteConfig(
            app_id=os.getenv('ATLAS_APP_ID'),
            api_key=os.getenv('ATLAS_API_KEY'),
            data_source=os.getenv('ATLAS_CLUSTER', 'Cluster0'),
            database=os.getenv('ATLAS_DATABASE', 'habit_tracker'),
            collection=os.getenv('ATLAS_COLLECTION', 'states'),
            base_url=os.getenv('ATLAS_BASE_URL'),
            request_timeout=float(timeout) if timeout else None
        )

        # Часовой пояс для "сегодня" и текущего месяца (пусто = системный)
        self.timezone = os.getenv('TIMEZONE') or None

        # Логирование
        self.log_level = LogLevel(os.getenv('LOG_LEVEL', 'INFO').upper())
        self.log_to_file = os.getenv('LOG_TO_FILE', 'false').lower() == 'true'
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    def _validate_config(self):
        """Валидация конфигурации"""
        errors = []

        if self.timezone and self.timezone not in pytz.all_timezones_set:
            errors.append(f"Неизвестный часовой пояс TIMEZONE={self.timezone}")

        if self.storage.max_backups < 1:
            errors.append("MAX_BACKUPS должен быть положительным числом")

        if self.storage.backup_interval_hours < 0:
            errors.append("BACKUP_INTERVAL_HOURS не может быть отрицательным")

        if self.remote.request_timeout is not None and self.remote.request_timeout <= 0:
            errors.append("REMOTE_TIMEOUT должен быть положительным")

        if bool(self.remote.app_id) != bool(self.remote.api_key):
            logging.warning("⚠️ ATLAS_APP_ID и ATLAS_API_KEY заданы не вместе - синхронизация отключена")

        if errors:
            raise ValueError("Ошибки конфигурации:\n" + "\n".join(f"• {error}" for error in errors))

    def ensure_directories(self):
        """Создание необходимых директорий"""
        directories = [self.data_dir]
        if self.storage.auto_backup:
            directories.append(self.backup_dir)
        if self.log_to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """Получение конфигурации логирования"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        handler_config = {
            'console': {
                'class': 'logging.StreamHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'stream': sys.stdout
            }
        }
        if self.log_to_file:
            handler_config['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'filename': str(self.log_dir / f"habit_tracker_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': handler_config,
            'loggers': {
                '': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                'aiohttp': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация конфигурации в словарь"""
        return {
            'environment': self.environment.value,
            'storage': {
                'store_file': str(self.storage.store_file),
                'backup_dir': str(self.storage.backup_dir),
                'auto_backup': self.storage.auto_backup,
                'max_backups': self.storage.max_backups
            },
            'remote': {
                'enabled': self.remote.enabled,
                'api_key': (self.remote.api_key[:6] + "...") if self.remote.api_key else None,  # Скрываем ключ
                'data_source': self.remote.data_source,
                'database': self.remote.database,
                'collection': self.remote.collection
            },
            'timezone': self.timezone,
            'log_level': self.log_level.value
        }

# Глобальный экземпляр конфигурации
config = TrackerConfig()

__all__ = [
    'config',
    'TrackerConfig',
    'Environment',
    'LogLevel',
    'StorageConfig',
    'RemoteConfig'
]
