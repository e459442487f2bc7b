"""
Backup orchestrator for exporting and restoring user data.

This module provides the BackupOrchestrator class that turns the contents
of a persistence store into a portable snapshot and restores snapshots
back into a store, isolating failures to the section they occur in.
"""

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from wellness_backup.backup.codec import ArchiveCodec
from wellness_backup.backup.events import DataChangeChannel, RestoreCompleted, SectionRestored
from wellness_backup.backup.migrations.pipeline import MigrationPipeline
from wellness_backup.backup.validator import SchemaValidator
from wellness_backup.core.exceptions import (
    BackupSystemError,
    FormatError,
    IncompatibleVersionError,
    SectionImportError,
    ValidationError,
)
from wellness_backup.models.config import BackupConfig
from wellness_backup.models.snapshot import BackupResult, ImportItemResult, ImportOutcome, Snapshot
from wellness_backup.store.base import PersistenceStore
from wellness_backup.store.registry import (
    INSTALLATION_SETTINGS_FIELDS,
    PRESERVED_LOCAL_SETTINGS,
    SENSITIVE_SETTINGS_FIELDS,
    SectionKind,
    SectionSpec,
    iter_specs,
)
from wellness_backup.store.serialization import (
    compute_statistics,
    decode_payload,
    encode_payload,
    record_count,
)
from wellness_backup.utils.helpers import format_bytes, generate_backup_filename, strip_keys
from wellness_backup.utils.logging import BackupLogger, LogCategory


INVALID_FORMAT_MESSAGE = (
    "Invalid backup file format. File may be corrupted or from an incompatible app version."
)
CORRUPTED_MESSAGE = "Backup file is corrupted: it contains no data."
POST_MIGRATION_INVALID_MESSAGE = "Backup validation failed after migration. Data may be corrupted."


class BackupOrchestrator:
    """Exports store contents to snapshots and restores them."""

    def __init__(
        self,
        store: PersistenceStore,
        config: Optional[BackupConfig] = None,
        pipeline: Optional[MigrationPipeline] = None,
        validator: Optional[SchemaValidator] = None,
        codec: Optional[ArchiveCodec] = None,
        events: Optional[DataChangeChannel] = None
    ):
        self.store = store
        self.config = config or BackupConfig()
        self.pipeline = pipeline or MigrationPipeline()
        self.current_version = self.pipeline.current_version
        self.validator = validator or SchemaValidator(self.current_version)
        self.codec = codec or ArchiveCodec(self.config.archive_entry_name)
        self.events = events or DataChangeChannel()
        self.log = BackupLogger("manager", structured=self.config.structured_logging)

    # Export

    async def create_snapshot(self) -> Snapshot:
        """Build a snapshot of every registered section held by the store."""
        specs = list(iter_specs(self.current_version))
        values: Dict[str, Any] = {}
        sections: Dict[str, Any] = {}

        for spec in specs:
            value = await self.store.load_section(spec.key)
            if spec.kind == SectionKind.SETTINGS:
                value = strip_keys(value, SENSITIVE_SETTINGS_FIELDS)
            values[spec.key.value] = value
            sections[spec.key.value] = encode_payload(spec, value)

        return Snapshot(
            schema_version=self.current_version,
            app_version=self.config.app_version,
            build_number=self.config.build_number,
            build_info=dict(self.config.build_info),
            sections=sections,
            statistics=compute_statistics(values, specs),
        )

    async def create_snapshot_document(self, compress: Optional[bool] = None) -> bytes:
        """
        Serialize a fresh snapshot into backup file bytes.

        Args:
            compress: Zip the document; defaults to the configured behavior

        Returns:
            Zip archive bytes, or plain UTF-8 JSON when not compressed
        """
        compress = self.config.compress if compress is None else compress
        started = time.monotonic()
        self.log.step_start("export", LogCategory.EXPORT)

        snapshot = await self.create_snapshot()
        text = json.dumps(snapshot.to_document(), indent=self.config.indent, ensure_ascii=False)
        data = self.codec.encode(text) if compress else self.codec.encode_plain(text)

        self.log.step_complete("export", time.monotonic() - started, LogCategory.EXPORT)
        self.log.info(
            f"Created backup of {format_bytes(len(data))} ({'zip' if compress else 'json'})",
            LogCategory.EXPORT,
            metadata={'size': len(data), 'compressed': compress}
        )
        return data

    async def export_to_path(self, destination: Union[str, Path]) -> BackupResult:
        """
        Write a backup file to ``destination``.

        A directory destination receives a timestamped file name. A file
        destination ending in ``.json`` or ``.zip`` selects the container
        explicitly; any other name follows the configured compression.
        """
        destination = Path(destination)
        compress = self.config.compress
        if destination.is_dir():
            destination = destination / generate_backup_filename(self.config.file_prefix, compress)
        elif destination.suffix.lower() == ".json":
            compress = False
        elif destination.suffix.lower() == ".zip":
            compress = True

        try:
            snapshot = await self.create_snapshot()
            text = json.dumps(snapshot.to_document(), indent=self.config.indent, ensure_ascii=False)
            data = self.codec.encode(text) if compress else self.codec.encode_plain(text)
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(data)
        except (OSError, BackupSystemError) as e:
            self.log.step_failed("export_to_path", str(e), LogCategory.EXPORT)
            return BackupResult(success=False, message=f"Failed to create backup: {e}")

        self.log.info(f"Backup written to {destination}", LogCategory.EXPORT)
        return BackupResult(
            success=True,
            message=f"Backup saved to {destination}",
            file_path=str(destination),
            size=len(data),
            statistics=snapshot.statistics,
        )

    # Import

    async def restore_from_path(self, path: Union[str, Path]) -> ImportOutcome:
        """Restore from a backup file on disk."""
        path = Path(path)
        if not path.is_file():
            return self._finish(ImportOutcome.failure(
                f"Backup file not found: {path}", error_code="FileNotFound"
            ))
        try:
            data = path.read_bytes()
        except OSError as e:
            return self._finish(ImportOutcome.failure(
                f"Cannot read backup file {path}: {e}", error_code="FileReadError"
            ))
        return await self.restore_from_bytes(data)

    async def restore_from_bytes(self, data: bytes) -> ImportOutcome:
        """Restore from backup file bytes (zip archive or plain JSON)."""
        try:
            text = self.codec.decode(data)
        except FormatError as e:
            return self._fatal(e)
        return await self.restore_from_text(text)

    async def restore_from_text(self, text: str) -> ImportOutcome:
        """Restore from a JSON backup document."""
        started = time.monotonic()
        self.log.step_start("restore", LogCategory.IMPORT)

        try:
            document, import_version, migrated_from, legacy = self._prepare(text)
        except BackupSystemError as e:
            return self._fatal(e)

        items = await self._import_sections(document)
        statistics = document.get("statistics")

        outcome = ImportOutcome(
            message="",
            items=items,
            statistics=statistics if isinstance(statistics, dict) else None,
            import_version=import_version,
            migrated_from=migrated_from,
            legacy_format=legacy,
        )
        outcome.message = self._outcome_message(outcome)

        self.log.step_complete("restore", time.monotonic() - started, LogCategory.IMPORT)
        return self._finish(outcome)

    def _prepare(self, text: str) -> Tuple[Dict[str, Any], int, Optional[int], bool]:
        """Parse, bridge, validate and migrate a document. Nothing is written."""
        try:
            document = json.loads(text)
        except (ValueError, RecursionError) as e:
            raise FormatError(f"Invalid backup file: could not parse JSON ({e})")
        if not isinstance(document, dict):
            raise FormatError(INVALID_FORMAT_MESSAGE, details={"type": type(document).__name__})

        legacy = self.pipeline.is_legacy_format(document)
        if legacy:
            self.log.info("Detected legacy backup format", LogCategory.MIGRATION)
            document = self.pipeline.migrate_legacy(document)

        if not self.validator.validate_import_candidate(document):
            message = CORRUPTED_MESSAGE if not document else INVALID_FORMAT_MESSAGE
            raise ValidationError(message, failed_checks=["import_candidate"])

        import_version = document["schemaVersion"]
        if import_version > self.current_version:
            raise IncompatibleVersionError(import_version, self.current_version)

        migrated_from = None
        if import_version < self.current_version:
            self.log.info(
                f"Migrating backup from v{import_version} to v{self.current_version}",
                LogCategory.MIGRATION
            )
            document = self.pipeline.migrate(document)
            migrated_from = import_version

        if not self.validator.validate_structure(document):
            raise ValidationError(
                POST_MIGRATION_INVALID_MESSAGE,
                failed_checks=self.validator.structure_failures(document)
            )

        return document, import_version, migrated_from, legacy

    async def _import_sections(self, document: Dict[str, Any]) -> List[ImportItemResult]:
        items = []
        for spec in iter_specs(self.current_version):
            key = spec.key.value
            try:
                count = await self._import_section(spec, document.get(key))
            except Exception as e:
                error = e if isinstance(e, SectionImportError) else SectionImportError(key, str(e))
                self.log.log_section_result(key, False, error=error.message)
                items.append(ImportItemResult(
                    section_key=key,
                    label=spec.label,
                    success=False,
                    error_message=error.message,
                ))
                continue

            self.log.log_section_result(key, True, count)
            items.append(ImportItemResult(
                section_key=key,
                label=spec.label,
                success=True,
                record_count=count,
            ))
        return items

    async def _import_section(self, spec: SectionSpec, payload: Any) -> int:
        """Deserialize and write one section, returning its record count."""
        if payload is None:
            return 0

        value = decode_payload(spec, payload)
        if value is None:
            return 0
        if spec.kind == SectionKind.SETTINGS:
            value = await self._merge_settings(value)

        await self.store.save_section(spec.key, value)
        count = record_count(spec, value)
        self.events.publish(SectionRestored(section_key=spec.key.value, record_count=count))
        return count

    async def _merge_settings(self, imported: Dict[str, Any]) -> Dict[str, Any]:
        """Imported settings with device-local fields kept from the current settings."""
        current = await self.store.load_settings()
        merged = dict(imported)
        for field_name in PRESERVED_LOCAL_SETTINGS:
            if field_name in current:
                merged[field_name] = current[field_name]
            else:
                merged.pop(field_name, None)
        return strip_keys(merged, INSTALLATION_SETTINGS_FIELDS)

    def _outcome_message(self, outcome: ImportOutcome) -> str:
        if not outcome.overall_success:
            return "Restore failed completely. No data could be imported."

        if outcome.partial_failure:
            failed = ", ".join(item.label for item in outcome.failed_sections)
            return (
                f"Restore partially successful. {outcome.success_count} of "
                f"{len(outcome.items)} data types imported. Failed: {failed}."
            )

        message = "Backup restored successfully!"
        if outcome.legacy_format:
            message += f" (Migrated from legacy format to v{self.current_version})"
        elif outcome.migrated_from is not None:
            message += f" (Migrated from v{outcome.migrated_from} to v{self.current_version})"
        return message

    def _fatal(self, error: BackupSystemError) -> ImportOutcome:
        self.log.step_failed("restore", str(error), LogCategory.IMPORT, error_code=error.code)
        return self._finish(ImportOutcome.failure(
            error.message,
            error_code=error.code,
            import_version=getattr(error, "import_version", None),
        ))

    def _finish(self, outcome: ImportOutcome) -> ImportOutcome:
        self.events.publish(RestoreCompleted(summary=outcome.to_summary()))
        if outcome.overall_success:
            self.log.info(outcome.message, LogCategory.IMPORT, metadata=outcome.to_summary())
        else:
            self.log.warning(outcome.message, LogCategory.IMPORT, metadata=outcome.to_summary())
        return outcome
