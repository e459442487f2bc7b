"""
In-memory persistence store.
"""

from typing import Dict, List, Optional

from wellness_backup.store.base import PersistenceStore
from wellness_backup.store.registry import resolve_key


class InMemoryStore(PersistenceStore):
    """Persistence store held in a plain dictionary."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = {}
        if initial:
            for key, value in initial.items():
                self._data[resolve_key(key).value] = value

    async def _read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def _write(self, key: str, value: str) -> None:
        self._data[key] = value

    async def _delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def _list_keys(self) -> List[str]:
        return list(self._data.keys())

    def snapshot_raw(self) -> Dict[str, str]:
        """Copy of everything stored, for assertions in tests."""
        return dict(self._data)
