"""
Schema v2 -> v3.

Pulse entries used to carry a fixed ``mood`` enum and an ``energyLevel``
integer. v3 stores every metric in ``customMetrics`` on a 1-5 scale.
"""

from typing import Any, Dict

from wellness_backup.backup.migrations.base import Migration
from wellness_backup.store.registry import SectionKey


MOOD_SCALE = {
    "veryBad": 1,
    "bad": 2,
    "neutral": 3,
    "good": 4,
    "excellent": 5,
}

LEGACY_PULSE_FIELDS = ("mood", "energyLevel")


def _mood_value(mood: Any) -> int:
    """Map a mood enum string (``MoodRating.good``) to its 1-5 value, 0 if unset."""
    if isinstance(mood, str):
        return MOOD_SCALE.get(mood.rsplit(".", 1)[-1], 0)
    if isinstance(mood, int) and not isinstance(mood, bool) and 1 <= mood <= 5:
        return mood
    return 0


def build_custom_metrics(entry: Dict[str, Any]) -> Dict[str, int]:
    """Custom metrics equivalent to an entry's legacy mood and energy fields."""
    metrics: Dict[str, int] = {}
    mood = _mood_value(entry.get("mood"))
    if mood:
        metrics["Mood"] = mood
    energy = entry.get("energyLevel")
    if isinstance(energy, int) and not isinstance(energy, bool) and energy > 0:
        metrics["Energy"] = energy
    return metrics


class PulseCustomMetricsMigration(Migration):

    from_version = 2
    to_version = 3
    description = "Move legacy pulse mood/energy into customMetrics and add v3 sections"

    def migrate(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        key = SectionKey.PULSE_ENTRIES.value
        entries = self.read_records(snapshot, key)

        if entries is not None:
            changed = False
            for entry in entries:
                if entry.get("customMetrics") is None:
                    entry["customMetrics"] = build_custom_metrics(entry)
                    changed = True
                for field_name in LEGACY_PULSE_FIELDS:
                    if field_name in entry:
                        del entry[field_name]
                        changed = True
            if changed:
                self.write_records(snapshot, key, entries)

        self.introduce_sections(snapshot)
        snapshot["schemaVersion"] = self.to_version
        return snapshot
