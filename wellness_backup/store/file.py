"""
JSON file persistence store.

All keys live in a single JSON object on disk. Every write rewrites the
file through a temporary file in the same directory followed by a rename,
so a crash never leaves a half-written store behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Union

from wellness_backup.core.exceptions import StorageError
from wellness_backup.store.base import PersistenceStore
from wellness_backup.store.registry import is_registered


logger = logging.getLogger(__name__)


class JsonFileStore(PersistenceStore):
    """Persistence store backed by one JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._data: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {}
            return self._data

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(
                f"Cannot read store file {self.path}: {e}",
                details={"path": str(self.path)}
            )

        if not isinstance(data, dict):
            raise StorageError(
                f"Store file {self.path} does not contain a JSON object",
                details={"path": str(self.path)}
            )

        self._data = {}
        for key, value in data.items():
            if not isinstance(value, str):
                logger.warning(f"Ignored non-string value for '{key}' in {self.path}")
            elif not is_registered(key):
                logger.warning(f"Ignored unregistered key '{key}' in {self.path}")
            else:
                self._data[key] = value
        return self._data

    def _flush(self) -> None:
        data = self._load()
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(
                f"Cannot write store file {self.path}: {e}",
                details={"path": str(self.path)}
            )

    async def _read(self, key: str) -> Optional[str]:
        return self._load().get(key)

    async def _write(self, key: str, value: str) -> None:
        self._load()[key] = value
        self._flush()

    async def _delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._flush()

    async def _list_keys(self) -> List[str]:
        return list(self._load().keys())
