"""
Schema migrations for backup snapshots.

This module contains the migration step base class, the legacy format
bridge, the versioned steps and the pipeline that chains them.
"""

from wellness_backup.backup.migrations.base import Migration
from wellness_backup.backup.migrations.legacy import LegacyToV1Migration, is_legacy_format
from wellness_backup.backup.migrations.v1_to_v2 import StructuredJournalContentMigration
from wellness_backup.backup.migrations.v2_to_v3 import PulseCustomMetricsMigration
from wellness_backup.backup.migrations.pipeline import MigrationPipeline, default_migrations

__all__ = [
    "Migration",
    "LegacyToV1Migration",
    "is_legacy_format",
    "StructuredJournalContentMigration",
    "PulseCustomMetricsMigration",
    "MigrationPipeline",
    "default_migrations",
]
