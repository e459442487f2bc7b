"""
Schema v1 -> v2.

Structured journal entries saved by early builds kept their answers only
in ``structuredData`` and left ``content`` empty, which made them render
blank. This step synthesizes readable content from the answers and adds
the wellness sections introduced in v2.
"""

from typing import Any, Dict, Optional

from wellness_backup.backup.migrations.base import Migration
from wellness_backup.store.registry import SectionKey


STRUCTURED_JOURNAL_TYPE = "structuredJournal"


def build_structured_content(structured_data: Dict[str, Any]) -> Optional[str]:
    """Render structured answers as ``Key: value`` lines, skipping nulls."""
    lines = [
        f"{key}: {value}"
        for key, value in structured_data.items()
        if value is not None and str(value).strip()
    ]
    return "\n".join(lines) if lines else None


class StructuredJournalContentMigration(Migration):

    from_version = 1
    to_version = 2
    description = "Synthesize structured journal content and add v2 sections"

    def migrate(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        key = SectionKey.JOURNAL_ENTRIES.value
        entries = self.read_records(snapshot, key)

        if entries is not None:
            changed = False
            for entry in entries:
                if entry.get("type") != STRUCTURED_JOURNAL_TYPE or entry.get("content"):
                    continue
                structured_data = entry.get("structuredData")
                if not isinstance(structured_data, dict):
                    continue
                content = build_structured_content(structured_data)
                if content:
                    entry["content"] = content
                    changed = True
            if changed:
                self.write_records(snapshot, key, entries)

        self.introduce_sections(snapshot)
        snapshot["schemaVersion"] = self.to_version
        return snapshot
