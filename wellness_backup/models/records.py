"""
Record models for the domain collections held in the persistence store.

Only the fields the backup subsystem relies on are declared. Every model
allows extra fields so records written by newer or older app builds survive
an export/import round-trip untouched.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    """Generic record of a list section."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None

    def to_json_dict(self) -> Dict[str, Any]:
        """Dump the record in its stored shape."""
        return self.model_dump(mode="json", exclude_unset=True)


class Goal(Record):
    """User goal."""
    id: str
    title: str


class Habit(Record):
    """Tracked habit."""
    id: str
    title: str


class JournalEntry(Record):
    """Journal entry (quick note, guided or structured journal)."""
    id: str
    createdAt: str
    type: str
    content: Optional[str] = None


class PulseEntry(Record):
    """Pulse (wellness check-in) reading."""
    id: str
    timestamp: Optional[str] = None
    customMetrics: Dict[str, int] = Field(default_factory=dict)


class PulseType(Record):
    """User-defined pulse metric."""
    id: str
    name: str
