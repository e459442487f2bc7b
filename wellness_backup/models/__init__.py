"""
Data models for the wellness backup subsystem.

This module contains the Pydantic models used for domain records,
backup snapshots, restore outcomes and configuration.
"""

from wellness_backup.models.records import (
    Record,
    Goal,
    Habit,
    JournalEntry,
    PulseEntry,
    PulseType,
)
from wellness_backup.models.snapshot import (
    Snapshot,
    ImportItemResult,
    ImportOutcome,
    BackupResult,
)
from wellness_backup.models.config import (
    BackupConfig,
    load_config,
)

__all__ = [
    # Record models
    "Record",
    "Goal",
    "Habit",
    "JournalEntry",
    "PulseEntry",
    "PulseType",
    # Snapshot models
    "Snapshot",
    "ImportItemResult",
    "ImportOutcome",
    "BackupResult",
    # Configuration
    "BackupConfig",
    "load_config",
]
