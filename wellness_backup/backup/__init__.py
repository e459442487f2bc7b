"""
Backup and restore system for the wellness app.

This module provides snapshot export, container encoding, schema
validation and migration, and resilient per-section restore.
"""

from wellness_backup.backup.codec import ArchiveCodec
from wellness_backup.backup.validator import SchemaValidator
from wellness_backup.backup.migrations import Migration, MigrationPipeline
from wellness_backup.backup.events import (
    DataChangeChannel,
    SectionRestored,
    RestoreCompleted,
)
from wellness_backup.backup.manager import BackupOrchestrator

__all__ = [
    "ArchiveCodec",
    "SchemaValidator",
    "Migration",
    "MigrationPipeline",
    "DataChangeChannel",
    "SectionRestored",
    "RestoreCompleted",
    "BackupOrchestrator",
]
