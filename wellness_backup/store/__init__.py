"""
Persistence layer for the wellness backup subsystem.

This module contains the section registry, the abstract persistence
store and its in-memory and JSON file implementations.
"""

from wellness_backup.store.registry import (
    CURRENT_SCHEMA_VERSION,
    SectionKey,
    ExcludedKey,
    SectionKind,
    SectionSpec,
    SECTION_SPECS,
    get_spec,
    iter_specs,
    required_section_keys,
)
from wellness_backup.store.base import PersistenceStore
from wellness_backup.store.memory import InMemoryStore
from wellness_backup.store.file import JsonFileStore

__all__ = [
    # Registry
    "CURRENT_SCHEMA_VERSION",
    "SectionKey",
    "ExcludedKey",
    "SectionKind",
    "SectionSpec",
    "SECTION_SPECS",
    "get_spec",
    "iter_specs",
    "required_section_keys",
    # Stores
    "PersistenceStore",
    "InMemoryStore",
    "JsonFileStore",
]
