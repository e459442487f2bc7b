"""
Base class for snapshot migrations.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from wellness_backup.core.exceptions import MigrationError
from wellness_backup.store.registry import sections_introduced_in
from wellness_backup.utils.helpers import parse_json_payload


class Migration(ABC):
    """
    One step of the schema migration chain.

    A step receives a document at ``from_version`` and returns it at
    ``to_version``. Steps may mutate the document they receive; the
    pipeline hands them a private copy. Every step must be idempotent over
    data that is already in the target shape.
    """

    from_version: int
    to_version: int
    description: str = ""

    @abstractmethod
    def migrate(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        """Transform ``snapshot`` to ``to_version``."""
        pass

    def can_migrate(self, snapshot: Dict[str, Any]) -> bool:
        """Whether ``snapshot`` is at this step's source version."""
        return snapshot.get("schemaVersion") == self.from_version

    def error(self, message: str, section_key: Optional[str] = None) -> MigrationError:
        """Build a MigrationError located at this step."""
        return MigrationError(
            message,
            from_version=self.from_version,
            to_version=self.to_version,
            section_key=section_key
        )

    def read_records(self, snapshot: Dict[str, Any], key: str) -> Optional[List[Dict[str, Any]]]:
        """
        Decode a list section into a list of record dicts.

        Returns None when the section is absent or null.
        """
        payload = snapshot.get(key)
        if payload is None:
            return None
        try:
            data = parse_json_payload(payload)
        except ValueError as e:
            raise self.error(f"Cannot parse section: {e}", key)
        if data is None:
            return None
        if not isinstance(data, list):
            raise self.error(f"Expected a list of records, got {type(data).__name__}", key)
        for index, item in enumerate(data):
            if not isinstance(item, dict):
                raise self.error(f"Record {index} is not an object", key)
        return data

    @staticmethod
    def write_records(snapshot: Dict[str, Any], key: str, records: List[Dict[str, Any]]) -> None:
        """Store records back as a JSON-encoded section payload."""
        snapshot[key] = json.dumps(records)

    def introduce_sections(self, snapshot: Dict[str, Any]) -> None:
        """Add every section first appearing at ``to_version`` with its empty default."""
        for spec in sections_introduced_in(self.to_version):
            snapshot.setdefault(spec.key.value, spec.default_payload)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} v{self.from_version} -> v{self.to_version}>"
