"""
Pytest configuration and fixtures for the wellness backup tests.

This module provides stores pre-filled with realistic data, an
orchestrator wired to them, and sample legacy and versioned documents.
"""

import json
import tempfile
from pathlib import Path
from typing import Any, Dict

import pytest

from wellness_backup.backup.manager import BackupOrchestrator
from wellness_backup.backup.events import DataChangeChannel
from wellness_backup.models.config import BackupConfig
from wellness_backup.store.memory import InMemoryStore
from wellness_backup.store.registry import CURRENT_SCHEMA_VERSION, iter_specs


SAMPLE_GOALS = [
    {"id": "g1", "title": "Run a 5k", "status": "GoalStatus.active", "createdAt": "2025-01-02T08:00:00"},
    {"id": "g2", "title": "Read 12 books", "status": "GoalStatus.backlog", "createdAt": "2025-01-03T08:00:00"},
]

SAMPLE_JOURNAL = [
    {"id": "j1", "createdAt": "2025-01-05T21:00:00", "type": "quickNote", "content": "Good day"},
    {"id": "j2", "createdAt": "2025-01-06T21:00:00", "type": "guidedJournal", "content": "Grateful for rest"},
    {"id": "j3", "createdAt": "2025-01-07T21:00:00", "type": "quickNote", "content": "Tired"},
]

SAMPLE_HABITS = [
    {"id": "h1", "title": "Meditate", "frequency": "HabitFrequency.daily", "completionDates": []},
]

SAMPLE_PULSE_ENTRIES = [
    {"id": "p1", "timestamp": "2025-01-05T09:00:00", "customMetrics": {"Mood": 4, "Energy": 3}},
]

SAMPLE_SETTINGS = {
    "aiProvider": "cloud",
    "selectedModel": "example-model",
    "claudeApiKey": "sk-local-secret",
    "huggingfaceToken": "hf-local-token",
    "hasCompletedOnboarding": True,
    "autoBackupEnabled": True,
    "saf_folder_uri": "content://local/tree/backups",
}


def populated_store_data() -> Dict[str, str]:
    """Raw store contents covering list, object, scalar, raw and settings sections."""
    return {
        "goals": json.dumps(SAMPLE_GOALS),
        "journal_entries": json.dumps(SAMPLE_JOURNAL),
        "habits": json.dumps(SAMPLE_HABITS),
        "pulse_entries": json.dumps(SAMPLE_PULSE_ENTRIES),
        "pulse_types": json.dumps([{"id": "t1", "name": "Mood"}]),
        "checkins": json.dumps({"id": "c1", "nextCheckinTime": None}),
        "custom_templates": json.dumps([{"id": "tpl1", "name": "Evening review"}]),
        "enabled_templates": json.dumps(["tpl1"]),
        "settings": json.dumps(SAMPLE_SETTINGS),
        "hydration_entries": json.dumps([{"id": "w1", "glasses": 2}]),
        "hydration_goal": json.dumps(10),
        "weight_unit": json.dumps("kg"),
        "safety_plan": json.dumps({"warningSigns": ["isolating"], "contacts": []}),
        "schema_version": str(CURRENT_SCHEMA_VERSION),
    }


def current_document(**overrides: Any) -> Dict[str, Any]:
    """A minimal valid document at the current schema version."""
    document: Dict[str, Any] = {
        "schemaVersion": CURRENT_SCHEMA_VERSION,
        "exportDate": "2025-02-01T10:00:00",
        "appVersion": "1.4.0",
        "buildNumber": "abc1234",
        "buildInfo": {"gitCommitShort": "abc1234"},
    }
    for spec in iter_specs(CURRENT_SCHEMA_VERSION):
        document[spec.key.value] = spec.default_payload
    document["statistics"] = {}
    document.update(overrides)
    return document


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def empty_store():
    """Empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def populated_store():
    """In-memory store holding a representative data set."""
    return InMemoryStore(populated_store_data())


@pytest.fixture
def backup_config():
    """Backup configuration used by the orchestrator fixtures."""
    return BackupConfig(app_version="1.4.0", build_info={"gitCommitShort": "abc1234"})


@pytest.fixture
def events():
    """Event channel shared with the orchestrator."""
    return DataChangeChannel()


@pytest.fixture
def orchestrator(populated_store, backup_config, events):
    """Orchestrator exporting from the populated store."""
    return BackupOrchestrator(populated_store, config=backup_config, events=events)


@pytest.fixture
def fresh_orchestrator(empty_store, backup_config, events):
    """Orchestrator restoring into an empty store."""
    return BackupOrchestrator(empty_store, config=backup_config, events=events)


@pytest.fixture
def legacy_document() -> Dict[str, Any]:
    """Pre-versioning export with three journal entries."""
    return {
        "version": "1.0.0",
        "exportedAt": "2025-11-16T07:33:58.066679",
        "buildInfo": {
            "gitCommit": "30a69f4ecb75d40c2e88ef44ad7c6d1e446cc12b",
            "gitCommitShort": "30a69f4",
        },
        "data": {
            "goals": [
                {
                    "id": "legacy-goal-1",
                    "title": "Make CBT daily practice",
                    "status": "GoalStatus.backlog",
                    "isActive": True,
                }
            ],
            "journalEntries": [
                {
                    "id": "legacy-entry-1",
                    "createdAt": "2025-11-15T22:14:14.115244",
                    "type": "quickNote",
                    "content": "Test content",
                    "goalIds": [],
                },
                {
                    "id": "legacy-entry-2",
                    "createdAt": "2025-11-15T19:25:37.465211",
                    "type": "structuredJournal",
                    "content": None,
                    "structuredData": {
                        "Food Log": None,
                        "Meal Type": "Dinner",
                        "What You Ate": "Pizza",
                    },
                },
                {
                    "id": "legacy-entry-3",
                    "createdAt": "2025-11-14T08:00:00",
                    "type": "guidedJournal",
                    "content": "Morning pages",
                },
            ],
            "habits": [
                {"id": "legacy-habit-1", "title": "Daily Reflection", "isActive": True},
            ],
            "checkin": {"id": "legacy-checkin", "nextCheckinTime": None},
            "moodEntries": [
                {
                    "id": "legacy-pulse-1",
                    "timestamp": "2025-11-15T09:00:00",
                    "mood": "MoodRating.good",
                    "energyLevel": 3,
                }
            ],
            "pulseTypes": [{"id": "legacy-type-1", "name": "Mood", "isActive": True}],
            "conversations": [],
            "settings": {
                "aiProvider": "local",
                "claudeApiKey": "sk-imported-secret",
            },
        },
        "statistics": {"totalGoals": 1, "totalJournalEntries": 3},
    }


@pytest.fixture
def make_document():
    """Factory for valid current-version documents."""
    return current_document
