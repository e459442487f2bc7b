"""
Tests for the schema validator.
"""

import logging

import pytest

from wellness_backup.backup.validator import SchemaValidator


class TestImportCandidate:
    """Test cases for validate_import_candidate."""

    @pytest.fixture
    def validator(self):
        return SchemaValidator()

    @pytest.mark.parametrize("candidate", [None, [], "text", 3, {}])
    def test_rejects_non_objects_and_empty(self, validator, candidate):
        assert validator.validate_import_candidate(candidate) is False

    @pytest.mark.parametrize("version", [0, -1, "3", 2.0, True, None])
    def test_rejects_bad_schema_version(self, validator, version):
        assert validator.validate_import_candidate({"schemaVersion": version}) is False

    @pytest.mark.parametrize("version", [1, 2, 3, 99])
    def test_accepts_integer_schema_version(self, validator, version):
        # Newer versions are rejected later with a dedicated message
        assert validator.validate_import_candidate({"schemaVersion": version}) is True

    def test_accepts_legacy_format(self, validator, legacy_document):
        assert validator.validate_import_candidate(legacy_document) is True

    def test_rejects_unrecognized_object(self, validator):
        assert validator.validate_import_candidate({"goals": "[]"}) is False

    def test_reasons_are_logged_at_debug(self, validator, caplog):
        with caplog.at_level(logging.DEBUG, logger="wellness_backup"):
            validator.validate_import_candidate({"schemaVersion": "x"})

        assert "invalid schemaVersion" in caplog.text


class TestStructure:
    """Test cases for validate_structure."""

    @pytest.fixture
    def validator(self):
        return SchemaValidator()

    def test_valid_document(self, validator, make_document):
        assert validator.validate_structure(make_document()) is True

    def test_null_sections_are_allowed(self, validator, make_document):
        document = make_document(goals=None, safety_plan=None)

        assert validator.validate_structure(document) is True

    def test_requires_current_version(self, validator, make_document):
        assert validator.validate_structure(make_document(schemaVersion=2)) is False

    def test_missing_section(self, validator, make_document):
        document = make_document()
        del document["medication_logs"]

        assert validator.validate_structure(document) is False
        assert "medication_logs" in validator.structure_failures(document)[0]

    @pytest.mark.parametrize("field_name,value", [
        ("exportDate", 12345),
        ("appVersion", 1.4),
        ("buildNumber", 42),
        ("buildInfo", "abc"),
        ("statistics", []),
    ])
    def test_metadata_types(self, validator, make_document, field_name, value):
        assert validator.validate_structure(make_document(**{field_name: value})) is False

    def test_optional_metadata_may_be_absent(self, validator, make_document):
        document = make_document()
        for field_name in ("exportDate", "appVersion", "buildNumber", "buildInfo", "statistics"):
            del document[field_name]

        assert validator.validate_structure(document) is True

    def test_section_contents_are_not_inspected(self, validator, make_document):
        assert validator.validate_structure(make_document(goals="not json at all")) is True

    def test_structure_at_older_version(self, validator, make_document):
        document = make_document(schemaVersion=1)

        assert validator.structure_failures(document, version=1) == []
