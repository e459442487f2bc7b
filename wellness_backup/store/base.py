"""
Abstract persistence store.

The store is a string key-value store in the style of platform preference
storage. Raw primitives are implemented by subclasses; typed accessors for
sections, settings and the data-version marker are built on top of them.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from wellness_backup.core.exceptions import StorageError
from wellness_backup.store.registry import (
    ExcludedKey,
    SectionKey,
    SectionKind,
    StoreKey,
    get_spec,
    iter_specs,
    resolve_key,
)
from wellness_backup.store.serialization import (
    decode_payload,
    default_value,
    encode_stored,
)


logger = logging.getLogger(__name__)


class PersistenceStore(ABC):
    """Base class for key-value persistence stores."""

    @abstractmethod
    async def _read(self, key: str) -> Optional[str]:
        """Read the raw string stored under ``key``."""
        pass

    @abstractmethod
    async def _write(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        pass

    @abstractmethod
    async def _delete(self, key: str) -> None:
        """Delete ``key`` if present."""
        pass

    @abstractmethod
    async def _list_keys(self) -> List[str]:
        """All keys currently stored."""
        pass

    # Raw primitives

    async def get_raw(self, key: Union[StoreKey, str]) -> Optional[str]:
        """Raw string stored under a registered key, or None."""
        return await self._read(resolve_key(key).value)

    async def set_raw(self, key: Union[StoreKey, str], value: str) -> None:
        """
        Store a raw string under a registered key.

        Raises:
            UnregisteredKeyError: If the key is not part of the registry
        """
        resolved = resolve_key(key)
        if not isinstance(value, str):
            raise StorageError(
                f"Raw values must be strings, got {type(value).__name__} for '{resolved.value}'"
            )
        await self._write(resolved.value, value)

    async def remove(self, key: Union[StoreKey, str]) -> None:
        """Remove a registered key."""
        await self._delete(resolve_key(key).value)

    async def keys(self) -> List[str]:
        """Keys currently stored."""
        return await self._list_keys()

    # Typed accessors

    async def load_section(self, key: Union[SectionKey, str]) -> Any:
        """
        Load a section as its typed value.

        Corrupted stored data is logged and loaded as the section default.
        """
        spec = get_spec(key)
        raw = await self.get_raw(spec.key)
        if raw is None:
            return default_value(spec)

        try:
            if spec.kind == SectionKind.SCALAR:
                return decode_payload(spec, json.loads(raw))
            return decode_payload(spec, raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Stored data for {spec.key.value} is corrupted, using default: {e}")
            return default_value(spec)

    async def save_section(self, key: Union[SectionKey, str], value: Any) -> None:
        """Save a typed section value; None removes object and scalar sections."""
        spec = get_spec(key)
        stored = encode_stored(spec, value)
        if stored is None:
            await self.remove(spec.key)
        else:
            await self.set_raw(spec.key, stored)

    async def load_settings(self) -> Dict[str, Any]:
        """Load the settings object."""
        return await self.load_section(SectionKey.SETTINGS)

    async def save_settings(self, settings: Dict[str, Any]) -> None:
        """Save the settings object."""
        await self.save_section(SectionKey.SETTINGS, settings)

    async def load_raw_sections(self) -> Dict[str, Optional[str]]:
        """Raw stored string of every registered section, keyed by section key."""
        sections = {}
        for spec in iter_specs():
            sections[spec.key.value] = await self.get_raw(spec.key)
        return sections

    async def get_schema_version(self) -> Optional[int]:
        """Data version the stored sections are at, or None if never stamped."""
        raw = await self.get_raw(ExcludedKey.SCHEMA_VERSION)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            raise StorageError(f"Stored schema version is not an integer: {raw!r}")

    async def set_schema_version(self, version: int) -> None:
        """Stamp the data version of the stored sections."""
        await self.set_raw(ExcludedKey.SCHEMA_VERSION, str(version))

    async def has_data(self) -> bool:
        """Whether any backed-up section is stored."""
        stored = set(await self.keys())
        return any(spec.key.value in stored for spec in iter_specs())
