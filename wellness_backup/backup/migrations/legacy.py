"""
Bridge from the pre-versioning export format to schema v1.

Legacy exports look like::

    {
        "version": "1.0.0",
        "exportedAt": "...",
        "buildInfo": {"gitCommitShort": "..."},
        "data": {"goals": [...], "journalEntries": [...], "checkin": {...}},
        "statistics": {...}
    }

Collections are plain JSON values keyed by camelCase names. Schema v1
stores every collection as a JSON-encoded string under its section key.
"""

import json
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from wellness_backup.backup.migrations.base import Migration
from wellness_backup.store.registry import SectionKey, SectionKind, get_spec, iter_specs
from wellness_backup.utils.helpers import parse_json_payload


# Legacy collection names, in lookup order. Later aliases only apply when
# the section has not been filled by an earlier name.
LEGACY_SECTION_NAMES: Tuple[Tuple[str, SectionKey], ...] = (
    ("goals", SectionKey.GOALS),
    ("journalEntries", SectionKey.JOURNAL_ENTRIES),
    ("habits", SectionKey.HABITS),
    ("checkin", SectionKey.CHECKINS),
    ("checkins", SectionKey.CHECKINS),
    ("pulseEntries", SectionKey.PULSE_ENTRIES),
    ("moodEntries", SectionKey.PULSE_ENTRIES),
    ("pulseTypes", SectionKey.PULSE_TYPES),
    ("conversations", SectionKey.CONVERSATIONS),
    ("customTemplates", SectionKey.CUSTOM_TEMPLATES),
    ("sessions", SectionKey.SESSIONS),
    ("enabledTemplates", SectionKey.ENABLED_TEMPLATES),
    ("checkinTemplates", SectionKey.CHECKIN_TEMPLATES),
    ("checkinResponses", SectionKey.CHECKIN_RESPONSES),
    ("settings", SectionKey.SETTINGS),
)

LEGACY_COLLECTION_MARKERS = ("journalEntries", "pulseEntries", "moodEntries", "pulseTypes")


def is_legacy_format(snapshot: Any) -> bool:
    """
    Heuristically decide whether a parsed document is a legacy export.

    A legacy export has no ``schemaVersion`` and carries at least one of: a
    ``data`` mapping, ``exportedAt``, a string ``version``, a camelCase
    collection name, or a v1 section key holding a decoded array or object
    instead of a JSON string.
    """
    if not isinstance(snapshot, dict) or "schemaVersion" in snapshot:
        return False
    if isinstance(snapshot.get("data"), dict):
        return True
    if "exportedAt" in snapshot:
        return True
    if isinstance(snapshot.get("version"), str):
        return True
    if any(name in snapshot for name in LEGACY_COLLECTION_MARKERS):
        return True
    return any(
        isinstance(snapshot.get(spec.key.value), (list, dict))
        for spec in iter_specs(1)
    )


class LegacyToV1Migration(Migration):
    """Convert a legacy export into a schema v1 document."""

    from_version = 0
    to_version = 1
    description = "Convert pre-versioning export to schema v1"

    def can_migrate(self, snapshot: Dict[str, Any]) -> bool:
        return is_legacy_format(snapshot)

    def migrate(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        source = snapshot.get("data")
        if not isinstance(source, dict):
            source = snapshot

        build_info = snapshot.get("buildInfo")
        if not isinstance(build_info, dict):
            build_info = {}

        result: Dict[str, Any] = {
            "schemaVersion": 1,
            "exportDate": self._export_date(snapshot),
            "appVersion": self._string_or_none(snapshot.get("version")) or "legacy",
            "buildNumber": self._string_or_none(build_info.get("gitCommitShort")),
            "buildInfo": build_info,
        }

        for name, key in LEGACY_SECTION_NAMES:
            if key.value in result or name not in source:
                continue
            result[key.value] = self._convert_section(key, source[name])

        # Some legacy builds already used section keys inside "data"
        for spec in iter_specs(1):
            if spec.key.value not in result and spec.key.value in source:
                result[spec.key.value] = self._convert_section(spec.key, source[spec.key.value])

        for spec in iter_specs(1):
            result.setdefault(spec.key.value, spec.default_payload)

        return result

    def _convert_section(self, key: SectionKey, value: Any) -> Optional[str]:
        spec = get_spec(key)
        try:
            data = parse_json_payload(value)
        except ValueError as e:
            raise self.error(f"Cannot parse legacy collection: {e}", key.value)

        if data is None:
            return spec.default_payload

        if spec.kind == SectionKind.LIST:
            if not isinstance(data, list):
                raise self.error(
                    f"Expected a list, got {type(data).__name__}", key.value
                )
            if key == SectionKey.GOALS:
                data = [self._strip_goal(goal, index) for index, goal in enumerate(data)]
        elif spec.kind in (SectionKind.OBJECT, SectionKind.SETTINGS):
            if not isinstance(data, dict):
                raise self.error(
                    f"Expected an object, got {type(data).__name__}", key.value
                )

        return json.dumps(data)

    def _strip_goal(self, goal: Any, index: int) -> Dict[str, Any]:
        if not isinstance(goal, dict):
            raise self.error(f"Goal {index} is not an object", SectionKey.GOALS.value)
        # isActive was replaced by goal status
        return {key: value for key, value in goal.items() if key != "isActive"}

    @staticmethod
    def _export_date(snapshot: Dict[str, Any]) -> str:
        for field_name in ("exportedAt", "exportDate"):
            value = snapshot.get(field_name)
            if isinstance(value, str):
                return value
        return datetime.now().isoformat()

    @staticmethod
    def _string_or_none(value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)
