"""
Snapshot and restore outcome models.

This module defines the Pydantic models for the backup document, the
per-section import results and the aggregated restore outcome.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# Top-level document fields that are not sections.
METADATA_FIELDS: Tuple[str, ...] = (
    "schemaVersion",
    "exportDate",
    "appVersion",
    "buildNumber",
    "buildInfo",
    "statistics",
)


class Snapshot(BaseModel):
    """Complete versioned backup document."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(alias="schemaVersion")
    export_date: str = Field(
        default_factory=lambda: datetime.now().isoformat(),
        alias="exportDate"
    )
    app_version: str = Field(default="1.0.0", alias="appVersion")
    build_number: Optional[str] = Field(default=None, alias="buildNumber")
    build_info: Dict[str, Any] = Field(default_factory=dict, alias="buildInfo")
    sections: Dict[str, Any] = Field(default_factory=dict)
    statistics: Dict[str, Any] = Field(default_factory=dict)

    def to_document(self) -> Dict[str, Any]:
        """Flatten into the on-disk document shape."""
        document: Dict[str, Any] = {
            "schemaVersion": self.schema_version,
            "exportDate": self.export_date,
            "appVersion": self.app_version,
            "buildNumber": self.build_number,
            "buildInfo": dict(self.build_info),
        }
        document.update(self.sections)
        document["statistics"] = dict(self.statistics)
        return document

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Snapshot":
        """Build a snapshot from a parsed current-format document."""
        sections = {
            key: value for key, value in document.items()
            if key not in METADATA_FIELDS
        }
        metadata = {
            key: document[key] for key in METADATA_FIELDS
            if key in document and document[key] is not None
        }
        return cls(sections=sections, **metadata)

    def section(self, key: str) -> Any:
        """Payload of one section, or None when absent."""
        return self.sections.get(key)


class ImportItemResult(BaseModel):
    """Result of importing a single section."""
    section_key: str
    label: str
    success: bool
    record_count: int = 0
    error_message: Optional[str] = None


class ImportOutcome(BaseModel):
    """Aggregated result of a restore."""
    message: str
    items: List[ImportItemResult] = Field(default_factory=list)
    statistics: Optional[Dict[str, Any]] = None
    import_version: Optional[int] = None
    migrated_from: Optional[int] = None
    legacy_format: bool = False
    error_code: Optional[str] = None
    completed_at: datetime = Field(default_factory=datetime.now)

    @property
    def success_count(self) -> int:
        return sum(1 for item in self.items if item.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for item in self.items if not item.success)

    @property
    def overall_success(self) -> bool:
        """True when at least one section was restored."""
        return self.success_count > 0

    @property
    def partial_failure(self) -> bool:
        """True when some sections were restored and others failed."""
        return self.success_count > 0 and self.failure_count > 0

    @property
    def failed_sections(self) -> List[ImportItemResult]:
        return [item for item in self.items if not item.success]

    def get_item(self, section_key: str) -> Optional[ImportItemResult]:
        """Look up the result for one section."""
        for item in self.items:
            if item.section_key == section_key:
                return item
        return None

    @classmethod
    def failure(cls, message: str, error_code: Optional[str] = None, **kwargs) -> "ImportOutcome":
        """Outcome of a restore that aborted before any section was written."""
        return cls(message=message, error_code=error_code, **kwargs)

    def to_summary(self) -> Dict[str, Any]:
        """Compact dictionary for logs and events."""
        return {
            "overall_success": self.overall_success,
            "partial_failure": self.partial_failure,
            "successes": self.success_count,
            "failures": self.failure_count,
            "import_version": self.import_version,
            "migrated_from": self.migrated_from,
            "error_code": self.error_code,
        }


class BackupResult(BaseModel):
    """Result of writing a backup to a destination."""
    success: bool
    message: str
    file_path: Optional[str] = None
    size: Optional[int] = None  # bytes
    statistics: Optional[Dict[str, Any]] = None
