"""
Unit tests for the migration pipeline and its steps.

Tests legacy detection and bridging, each versioned step, chain
verification, forward-only semantics and store-level migration.
"""

import json
from typing import Any, Dict

import pytest

from wellness_backup.backup.migrations import (
    LegacyToV1Migration,
    Migration,
    MigrationPipeline,
    PulseCustomMetricsMigration,
    StructuredJournalContentMigration,
)
from wellness_backup.backup.validator import SchemaValidator
from wellness_backup.core.exceptions import (
    ConfigurationError,
    IncompatibleVersionError,
    MigrationError,
)
from wellness_backup.store.memory import InMemoryStore
from wellness_backup.store.registry import (
    CURRENT_SCHEMA_VERSION,
    SectionKey,
    iter_specs,
    required_section_keys,
)


def v1_document(**sections: Any) -> Dict[str, Any]:
    document = {
        "schemaVersion": 1,
        "exportDate": "2025-06-01T12:00:00",
        "appVersion": "1.1.0",
        "buildNumber": "v1build",
        "buildInfo": {},
    }
    for spec in iter_specs(1):
        document[spec.key.value] = spec.default_payload
    document.update(sections)
    return document


class TestLegacyDetection:
    """Test cases for is_legacy_format."""

    @pytest.fixture
    def pipeline(self):
        return MigrationPipeline()

    def test_detects_legacy_document(self, pipeline, legacy_document):
        assert pipeline.is_legacy_format(legacy_document) is True

    @pytest.mark.parametrize("document", [
        {"version": "1.0.0", "exportedAt": "2025-11-16T07:33:58", "data": {}},
        {"data": {"goals": []}},
        {"exportedAt": "2025-11-16T07:33:58"},
        {"version": "0.9.1"},
        {"journalEntries": []},
        {"moodEntries": []},
        {"journal_entries": [{"id": "j1"}]},
        {"settings": {"aiProvider": "local"}},
    ])
    def test_legacy_markers(self, pipeline, document):
        assert pipeline.is_legacy_format(document) is True

    @pytest.mark.parametrize("document", [
        {"schemaVersion": 1, "exportDate": "2025-11-16T07:33:58"},
        {"schemaVersion": 3, "data": {}},
        {"goals": "[]"},
        {"version": 2},
        {},
        [],
    ])
    def test_current_and_unrecognized_documents(self, pipeline, document):
        assert pipeline.is_legacy_format(document) is False


class TestLegacyBridge:
    """Test cases for the legacy -> v1 conversion."""

    @pytest.fixture
    def migration(self):
        return LegacyToV1Migration()

    def test_metadata_mapping(self, migration, legacy_document):
        v1 = migration.migrate(legacy_document)

        assert v1["schemaVersion"] == 1
        assert v1["exportDate"] == "2025-11-16T07:33:58.066679"
        assert v1["appVersion"] == "1.0.0"
        assert v1["buildNumber"] == "30a69f4"
        assert "statistics" not in v1

    def test_collections_become_json_strings(self, migration, legacy_document):
        v1 = migration.migrate(legacy_document)

        for key in ("goals", "journal_entries", "habits", "checkins", "pulse_types",
                    "conversations", "settings", "pulse_entries"):
            assert isinstance(v1[key], str), key

        assert len(json.loads(v1["journal_entries"])) == 3
        assert json.loads(v1["checkins"])["id"] == "legacy-checkin"

    def test_goal_is_active_is_dropped(self, migration, legacy_document):
        v1 = migration.migrate(legacy_document)

        goals = json.loads(v1["goals"])
        habits = json.loads(v1["habits"])
        assert "isActive" not in goals[0]
        assert goals[0]["status"] == "GoalStatus.backlog"
        assert habits[0]["isActive"] is True

    def test_mood_entries_fill_pulse_entries(self, migration, legacy_document):
        v1 = migration.migrate(legacy_document)

        assert json.loads(v1["pulse_entries"])[0]["id"] == "legacy-pulse-1"

    def test_pulse_entries_win_over_mood_entries(self, migration):
        v1 = migration.migrate({
            "version": "1.0.0",
            "data": {"pulseEntries": [{"id": "new"}], "moodEntries": [{"id": "old"}]},
        })

        assert [entry["id"] for entry in json.loads(v1["pulse_entries"])] == ["new"]

    def test_missing_v1_sections_get_defaults(self, migration):
        v1 = migration.migrate({"version": "1.0.0", "exportedAt": "2025-01-01", "data": {}})

        assert set(required_section_keys(1)) <= set(v1)
        assert v1["goals"] == "[]"
        assert v1["checkins"] is None
        assert v1["buildNumber"] is None

    def test_top_level_collections(self, migration):
        v1 = migration.migrate({"journalEntries": [{"id": "j1"}]})

        assert len(json.loads(v1["journal_entries"])) == 1
        assert v1["appVersion"] == "legacy"

    def test_malformed_collection_raises(self, migration):
        with pytest.raises(MigrationError) as exc_info:
            migration.migrate({"version": "1.0.0", "data": {"journalEntries": {"id": "x"}}})

        assert exc_info.value.section_key == "journal_entries"

    def test_bridge_output_passes_candidate_validation(self, migration, legacy_document):
        assert SchemaValidator().validate_import_candidate(migration.migrate(legacy_document))

    def test_can_migrate(self, migration, legacy_document, make_document):
        assert migration.can_migrate(legacy_document)
        assert not migration.can_migrate(make_document())
        assert StructuredJournalContentMigration().can_migrate(v1_document())


class TestStructuredJournalMigration:
    """Test cases for the v1 -> v2 step."""

    @pytest.fixture
    def migration(self):
        return StructuredJournalContentMigration()

    def test_synthesizes_content(self, migration):
        entries = [{
            "id": "s1", "createdAt": "2025-01-01", "type": "structuredJournal", "content": None,
            "structuredData": {"Food Log": None, "Meal Type": "Dinner", "What You Ate": "Pizza"},
        }]
        v2 = migration.migrate(v1_document(journal_entries=json.dumps(entries)))

        content = json.loads(v2["journal_entries"])[0]["content"]
        assert content == "Meal Type: Dinner\nWhat You Ate: Pizza"
        assert v2["schemaVersion"] == 2

    def test_existing_content_is_kept(self, migration):
        entries = [
            {"id": "s1", "type": "structuredJournal", "content": "Already written",
             "structuredData": {"Mood": "ok"}},
            {"id": "q1", "type": "quickNote", "content": None},
        ]
        payload = json.dumps(entries)
        v2 = migration.migrate(v1_document(journal_entries=payload))

        assert v2["journal_entries"] == payload

    def test_introduces_v2_sections(self, migration):
        v2 = migration.migrate(v1_document())

        assert v2["gratitude_entries"] == "[]"
        assert v2["hydration_goal"] is None
        assert v2["meditation_settings"] is None
        assert "food_entries" not in v2

    def test_unparseable_journal_raises(self, migration):
        with pytest.raises(MigrationError) as exc_info:
            migration.migrate(v1_document(journal_entries="{broken"))

        assert exc_info.value.from_version == 1
        assert exc_info.value.to_version == 2
        assert exc_info.value.section_key == "journal_entries"


class TestPulseMetricsMigration:
    """Test cases for the v2 -> v3 step."""

    @pytest.fixture
    def migration(self):
        return PulseCustomMetricsMigration()

    def _v2(self, pulse_entries):
        document = StructuredJournalContentMigration().migrate(v1_document())
        document["pulse_entries"] = json.dumps(pulse_entries)
        return document

    def test_maps_mood_and_energy(self, migration):
        v3 = migration.migrate(self._v2([
            {"id": "p1", "mood": "MoodRating.veryBad", "energyLevel": 2},
            {"id": "p2", "mood": "MoodRating.excellent", "energyLevel": 0},
            {"id": "p3", "mood": "MoodRating.notSet"},
        ]))

        entries = json.loads(v3["pulse_entries"])
        assert entries[0]["customMetrics"] == {"Mood": 1, "Energy": 2}
        assert entries[1]["customMetrics"] == {"Mood": 5}
        assert entries[2]["customMetrics"] == {}
        assert all("mood" not in entry and "energyLevel" not in entry for entry in entries)

    def test_existing_custom_metrics_untouched(self, migration):
        payload = json.dumps([{"id": "p1", "customMetrics": {"Sleep": 4}}])
        document = self._v2([])
        document["pulse_entries"] = payload

        v3 = migration.migrate(document)

        assert v3["pulse_entries"] == payload
        assert v3["schemaVersion"] == 3

    def test_introduces_v3_sections(self, migration):
        v3 = migration.migrate(self._v2([]))

        assert v3["food_entries"] == "[]"
        assert v3["safety_plan"] is None
        assert v3["user_name"] is None

    def test_non_object_entry_raises(self, migration):
        with pytest.raises(MigrationError):
            migration.migrate(self._v2(["not an entry"]))


class TestMigrationPipeline:
    """Test cases for chaining migrations."""

    @pytest.fixture
    def pipeline(self):
        return MigrationPipeline()

    def test_migrates_to_current(self, pipeline):
        migrated = pipeline.migrate(v1_document())

        assert migrated["schemaVersion"] == CURRENT_SCHEMA_VERSION
        assert SchemaValidator().validate_structure(migrated)

    def test_does_not_mutate_input(self, pipeline):
        document = v1_document()
        snapshot = json.dumps(document, sort_keys=True)

        pipeline.migrate(document)

        assert json.dumps(document, sort_keys=True) == snapshot

    def test_is_idempotent_at_current(self, pipeline):
        migrated = pipeline.migrate(v1_document())

        assert pipeline.migrate(migrated) == migrated
        assert pipeline.migrate(migrated) is not migrated

    def test_stops_at_target(self, pipeline):
        assert pipeline.migrate(v1_document(), target=2)["schemaVersion"] == 2

    def test_rejects_newer_snapshot(self, pipeline, make_document):
        with pytest.raises(IncompatibleVersionError) as exc_info:
            pipeline.migrate(make_document(schemaVersion=CURRENT_SCHEMA_VERSION + 1))

        assert exc_info.value.import_version == CURRENT_SCHEMA_VERSION + 1
        assert "update the app" in exc_info.value.message

    def test_rejects_missing_version(self, pipeline):
        with pytest.raises(MigrationError):
            pipeline.migrate({"goals": "[]"})

    def test_pending_migrations(self, pipeline):
        assert [m.to_version for m in pipeline.pending_migrations(1)] == [2, 3]
        assert pipeline.pending_migrations(CURRENT_SCHEMA_VERSION) == []

    def test_legacy_through_to_current(self, pipeline, legacy_document):
        migrated = pipeline.migrate(pipeline.migrate_legacy(legacy_document))

        assert migrated["schemaVersion"] == CURRENT_SCHEMA_VERSION
        entries = json.loads(migrated["journal_entries"])
        assert "Meal Type: Dinner" in entries[1]["content"]
        pulse = json.loads(migrated["pulse_entries"])
        assert pulse[0]["customMetrics"] == {"Mood": 4, "Energy": 3}

    def test_wraps_unexpected_step_errors(self):
        class ExplodingMigration(Migration):
            from_version = 1
            to_version = 2
            description = "Explode"

            def migrate(self, snapshot):
                raise KeyError("boom")

        pipeline = MigrationPipeline([ExplodingMigration()], current_version=2)

        with pytest.raises(MigrationError) as exc_info:
            pipeline.migrate(v1_document())

        assert exc_info.value.from_version == 1

    def test_step_must_stamp_its_version(self):
        class ForgetfulMigration(Migration):
            from_version = 1
            to_version = 2

            def migrate(self, snapshot):
                return snapshot

        pipeline = MigrationPipeline([ForgetfulMigration()], current_version=2)

        with pytest.raises(MigrationError):
            pipeline.migrate(v1_document())


class TestChainVerification:
    """Test cases for the contiguous chain check."""

    def test_gap_in_chain(self):
        with pytest.raises(ConfigurationError):
            MigrationPipeline([PulseCustomMetricsMigration()])

    def test_chain_shorter_than_current(self):
        with pytest.raises(ConfigurationError):
            MigrationPipeline([StructuredJournalContentMigration()])

    def test_steps_are_sorted(self):
        pipeline = MigrationPipeline([
            PulseCustomMetricsMigration(),
            StructuredJournalContentMigration(),
        ])

        assert [m.from_version for m in pipeline.migrations] == [1, 2]


class TestStoreMigration:
    """Test cases for migrate_store."""

    @pytest.mark.asyncio
    async def test_migrates_unstamped_store(self):
        entries = [{"id": "p1", "mood": "MoodRating.good", "energyLevel": 4}]
        goals = json.dumps([{"id": "g1", "title": "Walk"}])
        store = InMemoryStore({"pulse_entries": json.dumps(entries), "goals": goals})

        previous = await MigrationPipeline().migrate_store(store)

        assert previous == 1
        assert await store.get_schema_version() == CURRENT_SCHEMA_VERSION
        pulse = json.loads(await store.get_raw(SectionKey.PULSE_ENTRIES))
        assert pulse[0]["customMetrics"] == {"Mood": 4, "Energy": 4}
        assert await store.get_raw(SectionKey.GOALS) == goals
        # Sections absent from the store are not created
        assert await store.get_raw(SectionKey.FOOD_ENTRIES) is None

    @pytest.mark.asyncio
    async def test_empty_store_is_stamped_current(self, empty_store):
        previous = await MigrationPipeline().migrate_store(empty_store)

        assert previous == CURRENT_SCHEMA_VERSION
        assert await empty_store.keys() == ["schema_version"]

    @pytest.mark.asyncio
    async def test_current_store_is_untouched(self, populated_store):
        before = populated_store.snapshot_raw()

        await MigrationPipeline().migrate_store(populated_store)

        assert populated_store.snapshot_raw() == before

    @pytest.mark.asyncio
    async def test_newer_store_is_rejected(self):
        store = InMemoryStore({"schema_version": str(CURRENT_SCHEMA_VERSION + 1)})

        with pytest.raises(IncompatibleVersionError):
            await MigrationPipeline().migrate_store(store)
