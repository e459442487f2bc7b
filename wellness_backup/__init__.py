"""
Wellness Backup

Backup, restore and schema migration for the data of a personal
wellness and mentoring app.
"""

__version__ = "0.1.0"

from wellness_backup.backup.manager import BackupOrchestrator
from wellness_backup.models.snapshot import ImportOutcome, Snapshot
from wellness_backup.store.registry import CURRENT_SCHEMA_VERSION, SectionKey

__all__ = [
    "BackupOrchestrator",
    "ImportOutcome",
    "Snapshot",
    "CURRENT_SCHEMA_VERSION",
    "SectionKey",
]
