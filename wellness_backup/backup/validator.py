"""
Structural validation of backup snapshots.

Validation happens twice during a restore: once on the raw candidate to
decide whether it can be imported at all, and once after migration to
make sure the document has the exact shape of the current schema.
"""

from typing import Any, List, Optional

from wellness_backup.backup.migrations.legacy import is_legacy_format
from wellness_backup.store.registry import CURRENT_SCHEMA_VERSION, required_section_keys
from wellness_backup.utils.logging import BackupLogger


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class SchemaValidator:
    """Pure predicates over parsed snapshot documents."""

    def __init__(self, current_version: int = CURRENT_SCHEMA_VERSION):
        self.current_version = current_version
        self.log = BackupLogger("validator")

    def validate_import_candidate(self, snapshot: Any) -> bool:
        """
        Check whether a parsed document can enter the restore pipeline.

        A candidate is a non-empty mapping that either carries an integer
        schemaVersion of at least 1 or is recognized as a legacy export.
        """
        if not isinstance(snapshot, dict) or not snapshot:
            self.log.log_validation_result("import_candidate", False, "not a non-empty object")
            return False

        if "schemaVersion" in snapshot:
            version = snapshot["schemaVersion"]
            if not _is_int(version) or version < 1:
                self.log.log_validation_result(
                    "import_candidate", False, f"invalid schemaVersion {version!r}"
                )
                return False
            self.log.log_validation_result("import_candidate", True)
            return True

        if is_legacy_format(snapshot):
            self.log.log_validation_result("import_candidate", True, "legacy format")
            return True

        self.log.log_validation_result("import_candidate", False, "no schemaVersion")
        return False

    def validate_structure(self, snapshot: Any) -> bool:
        """Check a migrated document against the current schema."""
        failures = self.structure_failures(snapshot)
        for reason in failures:
            self.log.log_validation_result("structure", False, reason)
        if not failures:
            self.log.log_validation_result("structure", True)
        return not failures

    def structure_failures(self, snapshot: Any, version: Optional[int] = None) -> List[str]:
        """Reasons a document does not match the schema at ``version``."""
        version = self.current_version if version is None else version

        if not isinstance(snapshot, dict):
            return ["document is not an object"]

        failures = []
        schema_version = snapshot.get("schemaVersion")
        if not _is_int(schema_version) or schema_version != version:
            failures.append(f"schemaVersion is {schema_version!r}, expected {version}")

        missing = [key for key in required_section_keys(version) if key not in snapshot]
        if missing:
            failures.append(f"missing sections: {', '.join(missing)}")

        for field_name in ("exportDate", "appVersion", "buildNumber"):
            value = snapshot.get(field_name)
            if value is not None and not isinstance(value, str):
                failures.append(f"{field_name} must be a string")

        for field_name in ("buildInfo", "statistics"):
            value = snapshot.get(field_name)
            if value is not None and not isinstance(value, dict):
                failures.append(f"{field_name} must be an object")

        return failures
