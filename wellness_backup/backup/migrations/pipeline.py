"""
Migration pipeline.

Runs the ordered chain of schema migrations over parsed snapshot
documents, and over the live persistence store at startup.
"""

import copy
import time
from typing import Any, Dict, List, Optional

from wellness_backup.backup.migrations.base import Migration
from wellness_backup.backup.migrations.legacy import LegacyToV1Migration, is_legacy_format
from wellness_backup.backup.migrations.v1_to_v2 import StructuredJournalContentMigration
from wellness_backup.backup.migrations.v2_to_v3 import PulseCustomMetricsMigration
from wellness_backup.core.exceptions import (
    BackupSystemError,
    ConfigurationError,
    IncompatibleVersionError,
    MigrationError,
)
from wellness_backup.store.base import PersistenceStore
from wellness_backup.store.registry import CURRENT_SCHEMA_VERSION
from wellness_backup.utils.logging import BackupLogger, LogCategory


def default_migrations() -> List[Migration]:
    """The built-in migration chain, v1 up to the current schema."""
    return [
        StructuredJournalContentMigration(),
        PulseCustomMetricsMigration(),
    ]


class MigrationPipeline:
    """Applies schema migrations in order, without skipping steps."""

    def __init__(
        self,
        migrations: Optional[List[Migration]] = None,
        legacy_migration: Optional[Migration] = None,
        current_version: int = CURRENT_SCHEMA_VERSION
    ):
        self.migrations = sorted(
            migrations if migrations is not None else default_migrations(),
            key=lambda m: m.from_version
        )
        self.legacy_migration = legacy_migration or LegacyToV1Migration()
        self.current_version = current_version
        self.log = BackupLogger("migrations")
        self._verify_chain()

    def _verify_chain(self):
        expected = 1
        for migration in self.migrations:
            if migration.from_version != expected or migration.to_version != expected + 1:
                raise ConfigurationError(
                    f"Migration chain is broken at {migration!r}: expected v{expected} -> v{expected + 1}",
                    details={"migrations": [repr(m) for m in self.migrations]}
                )
            expected = migration.to_version
        if expected != self.current_version:
            raise ConfigurationError(
                f"Migration chain ends at v{expected} but the current schema is v{self.current_version}"
            )

    def is_legacy_format(self, snapshot: Any) -> bool:
        """Whether ``snapshot`` is a pre-versioning export."""
        return is_legacy_format(snapshot)

    def migrate_legacy(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        """Bridge a legacy export to a schema v1 document."""
        self.log.step_start("legacy_to_v1", LogCategory.MIGRATION)
        started = time.monotonic()
        try:
            result = self.legacy_migration.migrate(copy.deepcopy(snapshot))
        except BackupSystemError:
            raise
        except Exception as e:
            raise MigrationError(
                f"Legacy conversion failed: {e}",
                from_version=0,
                to_version=1
            ) from e
        self.log.step_complete("legacy_to_v1", time.monotonic() - started, LogCategory.MIGRATION)
        return result

    def pending_migrations(self, version: int, target: Optional[int] = None) -> List[Migration]:
        """Steps needed to bring a document from ``version`` to ``target``."""
        target = self.current_version if target is None else target
        return [m for m in self.migrations if version <= m.from_version < target]

    def migrate(self, snapshot: Dict[str, Any], target: Optional[int] = None) -> Dict[str, Any]:
        """
        Migrate a snapshot document to ``target`` (the current version by default).

        Args:
            snapshot: Parsed document carrying an integer schemaVersion
            target: Schema version to stop at

        Returns:
            A migrated copy of the document

        Raises:
            IncompatibleVersionError: If the snapshot is newer than ``target``
            MigrationError: If a step fails or no path to ``target`` exists
        """
        target = self.current_version if target is None else target
        version = snapshot.get("schemaVersion")
        if not isinstance(version, int) or isinstance(version, bool) or version < 1:
            raise MigrationError(f"Snapshot has no valid schemaVersion: {version!r}")
        if version > target:
            raise IncompatibleVersionError(version, target)
        if target > self.current_version:
            raise MigrationError(
                f"No migration path to v{target}; the newest known schema is v{self.current_version}",
                from_version=version,
                to_version=target
            )

        result = copy.deepcopy(snapshot)
        for migration in self.pending_migrations(version, target):
            step_name = f"v{migration.from_version}_to_v{migration.to_version}"
            self.log.step_start(step_name, LogCategory.MIGRATION)
            started = time.monotonic()
            try:
                result = migration.migrate(result)
            except BackupSystemError as e:
                self.log.step_failed(step_name, str(e), LogCategory.MIGRATION, error_code=e.code)
                raise
            except Exception as e:
                self.log.step_failed(step_name, str(e), LogCategory.MIGRATION)
                raise migration.error(f"{migration.description} failed: {e}") from e

            if result.get("schemaVersion") != migration.to_version:
                raise migration.error(
                    f"Step left schemaVersion at {result.get('schemaVersion')!r}"
                )
            self.log.step_complete(step_name, time.monotonic() - started, LogCategory.MIGRATION)

        return result

    async def migrate_store(self, store: PersistenceStore) -> int:
        """
        Bring the data held by ``store`` up to the current schema version.

        Only string sections whose content changed are written back, then
        the new version is stamped.

        Returns:
            The version the store was at before migrating
        """
        stored_version = await store.get_schema_version()
        if stored_version is None:
            stored_version = 1 if await store.has_data() else self.current_version

        if stored_version > self.current_version:
            raise IncompatibleVersionError(stored_version, self.current_version)

        if stored_version == self.current_version:
            await store.set_schema_version(self.current_version)
            return stored_version

        raw_sections = await store.load_raw_sections()
        document: Dict[str, Any] = {
            key: value for key, value in raw_sections.items() if value is not None
        }
        document["schemaVersion"] = stored_version

        migrated = self.migrate(document)

        written = 0
        for key, original in raw_sections.items():
            updated = migrated.get(key)
            if original is None or not isinstance(updated, str) or updated == original:
                continue
            await store.set_raw(key, updated)
            written += 1

        await store.set_schema_version(self.current_version)
        self.log.info(
            f"Migrated stored data from v{stored_version} to v{self.current_version} "
            f"({written} section(s) rewritten)",
            LogCategory.MIGRATION
        )
        return stored_version
