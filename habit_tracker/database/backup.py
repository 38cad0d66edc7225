# database/backup.py

import gzip
import json
import shutil
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

class BackupManager:
    """Менеджер резервных копий файла хранилища"""

    def __init__(self, backup_dir: Path, max_backups: int = 10, interval_hours: int = 6):
        self.backup_dir = Path(backup_dir)
        self.max_backups = max_backups
        self.interval = timedelta(hours=interval_hours)

    def create_backup(self, source_file: Path, compressed: bool = True) -> Optional[Path]:
        """Создать резервную копию"""
        try:
            if not source_file.exists():
                logger.warning(f"Source file {source_file} does not exist for backup")
                return None

            self.backup_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
            backup_name = f"backup_{timestamp}.json"

            if compressed:
                backup_name += ".gz"
                backup_path = self.backup_dir / backup_name

                with open(source_file, 'rb') as f_in:
                    with gzip.open(backup_path, 'wb') as f_out:
                        f_out.writelines(f_in)
            else:
                backup_path = self.backup_dir / backup_name
                shutil.copy2(source_file, backup_path)

            logger.info(f"Backup created: {backup_path}")
            self._cleanup_old_backups()
            return backup_path

        except Exception as e:
            logger.error(f"Failed to create backup: {e}")
            return None

    def backup_if_due(self, source_file: Path, now: Optional[datetime] = None) -> Optional[Path]:
        """Копия, если последняя старше интервала"""
        now = now or datetime.now()
        backups = self.list_backups()
        if backups:
            last = datetime.fromisoformat(backups[0]['created'])
            if now - last < self.interval:
                return None
        return self.create_backup(source_file)

    def list_backups(self) -> List[Dict[str, Any]]:
        """Получить список всех резервных копий (новые первыми)"""
        backups = []
        if not self.backup_dir.exists():
            return backups

        for backup_file in self.backup_dir.glob("backup_*.json*"):
            try:
                stat = backup_file.stat()
                backups.append({
                    'name': backup_file.name,
                    'path': str(backup_file),
                    'size_mb': stat.st_size / (1024 * 1024),
                    'created': datetime.fromtimestamp(stat.st_mtime).isoformat(),
                    'compressed': backup_file.name.endswith('.gz')
                })
            except OSError as e:
                logger.warning(f"Failed to get info for backup {backup_file}: {e}")

        # в имени время с микросекундами
        return sorted(backups, key=lambda x: x['name'], reverse=True)

    def read_backup(self, backup_path: Path) -> Dict[str, Any]:
        if backup_path.name.endswith('.gz'):
            with gzip.open(backup_path, 'rt', encoding='utf-8') as f:
                return json.load(f)
        with open(backup_path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def find_latest_value(self, key: str) -> Optional[str]:
        """Значение ключа из самой свежей читаемой копии"""
        for backup in self.list_backups():
            try:
                data = self.read_backup(Path(backup['path']))
            except (OSError, EOFError, ValueError) as e:
                logger.warning(f"Failed to read backup {backup['name']}: {e}")
                continue
            value = data.get(key) if isinstance(data, dict) else None
            if isinstance(value, str):
                return value
        return None

    def _cleanup_old_backups(self) -> None:
        """Удалить старые резервные копии"""
        try:
            for backup in self.list_backups()[self.max_backups:]:
                Path(backup['path']).unlink()
                logger.info(f"Removed old backup: {backup['name']}")

        except Exception as e:
            logger.error(f"Failed to cleanup old backups: {e}")
