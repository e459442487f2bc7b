"""
Section registry for the persistence store and the backup format.

Every key the store may hold is enumerated here, either as a backed-up
section (SectionKey) or as a key that must never leave the device
(ExcludedKey). The registry order is the order sections are exported,
imported and reported in.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, Union

from wellness_backup.core.exceptions import UnregisteredKeyError
from wellness_backup.models.records import (
    Goal,
    Habit,
    JournalEntry,
    PulseEntry,
    PulseType,
    Record,
)


CURRENT_SCHEMA_VERSION = 3


class SectionKey(str, Enum):
    """Keys of the collections included in a backup."""
    # v1
    JOURNAL_ENTRIES = "journal_entries"
    GOALS = "goals"
    HABITS = "habits"
    CHECKINS = "checkins"
    PULSE_ENTRIES = "pulse_entries"
    PULSE_TYPES = "pulse_types"
    CONVERSATIONS = "conversations"
    CUSTOM_TEMPLATES = "custom_templates"
    SESSIONS = "sessions"
    ENABLED_TEMPLATES = "enabled_templates"
    CHECKIN_TEMPLATES = "checkin_templates"
    CHECKIN_RESPONSES = "checkin_responses"
    SETTINGS = "settings"
    # v2
    CLINICAL_ASSESSMENTS = "clinical_assessments"
    INTERVENTION_ATTEMPTS = "intervention_attempts"
    ACTIVITIES = "activities"
    SCHEDULED_ACTIVITIES = "scheduled_activities"
    GRATITUDE_ENTRIES = "gratitude_entries"
    WORRIES = "worries"
    WORRY_SESSIONS = "worry_sessions"
    SELF_COMPASSION_ENTRIES = "self_compassion_entries"
    PERSONAL_VALUES = "personal_values"
    IMPLEMENTATION_INTENTIONS = "implementation_intentions"
    MEDITATION_SESSIONS = "meditation_sessions"
    MEDITATION_SETTINGS = "meditation_settings"
    URGE_SURFING_SESSIONS = "urge_surfing_sessions"
    HYDRATION_ENTRIES = "hydration_entries"
    HYDRATION_GOAL = "hydration_goal"
    USER_CONTEXT_SUMMARY = "user_context_summary"
    WINS = "wins"
    # v3
    FOOD_ENTRIES = "food_entries"
    NUTRITION_GOAL = "nutrition_goal"
    FOOD_TEMPLATES = "food_templates"
    WEIGHT_ENTRIES = "weight_entries"
    WEIGHT_GOAL = "weight_goal"
    WEIGHT_UNIT = "weight_unit"
    HEIGHT = "height"
    GENDER = "gender"
    USER_AGE = "user_age"
    USER_NAME = "user_name"
    CUSTOM_EXERCISES = "custom_exercises"
    EXERCISE_PLANS = "exercise_plans"
    WORKOUT_LOGS = "workout_logs"
    UNPLUG_SESSIONS = "unplug_sessions"
    DEVICE_BOUNDARIES = "device_boundaries"
    SAFETY_PLAN = "safety_plan"
    MEDICATIONS = "medications"
    MEDICATION_LOGS = "medication_logs"
    SYMPTOM_TYPES = "symptom_types"
    SYMPTOM_ENTRIES = "symptom_entries"


class ExcludedKey(str, Enum):
    """Keys the store holds that are never exported."""
    SCHEMA_VERSION = "schema_version"
    SAF_FOLDER_URI = "saf_folder_uri"
    CLAUDE_API_KEY = "claude_api_key"
    HUGGINGFACE_TOKEN = "huggingface_token"
    LOCAL_AI_TIMEOUT = "local_ai_timeout_minutes"
    AUTO_BACKUP_LAST_RUN = "auto_backup_last_run"


StoreKey = Union[SectionKey, ExcludedKey]


class SectionKind(str, Enum):
    """How a section payload is encoded in a snapshot."""
    LIST = "list"          # JSON-encoded array of records
    OBJECT = "object"      # JSON-encoded object, or null
    SCALAR = "scalar"      # bare primitive, or null
    RAW = "raw"            # string the app already stores JSON-encoded
    SETTINGS = "settings"  # JSON-encoded object, merged on import


@dataclass(frozen=True)
class SectionSpec:
    """Registry entry for one backed-up section."""
    key: SectionKey
    label: str
    kind: SectionKind
    introduced_in: int = 1
    model: Optional[Type[Record]] = None
    scalar_types: Tuple[type, ...] = field(default=())
    report_value: bool = False

    @property
    def default_payload(self) -> Any:
        """Payload used when a migration introduces this section."""
        if self.kind == SectionKind.LIST:
            return "[]"
        return None

    @property
    def stat_name(self) -> str:
        """Statistics counter name, e.g. ``totalJournalEntries`` or ``hasSafetyPlan``."""
        camel = "".join(part.capitalize() for part in self.key.value.split("_"))
        if self.report_value:
            return camel[0].lower() + camel[1:]
        if self.kind == SectionKind.LIST:
            return f"total{camel}"
        return f"has{camel}"


def _list(key: SectionKey, label: str, version: int, model: Type[Record] = Record) -> SectionSpec:
    return SectionSpec(key, label, SectionKind.LIST, version, model)


def _object(key: SectionKey, label: str, version: int) -> SectionSpec:
    return SectionSpec(key, label, SectionKind.OBJECT, version)


def _scalar(key: SectionKey, label: str, version: int, *types: type,
            report_value: bool = False) -> SectionSpec:
    return SectionSpec(key, label, SectionKind.SCALAR, version,
                       scalar_types=types, report_value=report_value)


SECTION_SPECS: Tuple[SectionSpec, ...] = (
    # v1
    _list(SectionKey.GOALS, "Goals", 1, Goal),
    _list(SectionKey.JOURNAL_ENTRIES, "Journal Entries", 1, JournalEntry),
    _object(SectionKey.CHECKINS, "Check-in", 1),
    _list(SectionKey.HABITS, "Habits", 1, Habit),
    _list(SectionKey.PULSE_ENTRIES, "Pulse Entries", 1, PulseEntry),
    _list(SectionKey.PULSE_TYPES, "Pulse Types", 1, PulseType),
    _list(SectionKey.CONVERSATIONS, "Conversations", 1),
    SectionSpec(SectionKey.CUSTOM_TEMPLATES, "Custom Templates", SectionKind.RAW, 1),
    SectionSpec(SectionKey.SESSIONS, "Structured Journaling Sessions", SectionKind.RAW, 1),
    SectionSpec(SectionKey.ENABLED_TEMPLATES, "Enabled Templates", SectionKind.LIST, 1),
    SectionSpec(SectionKey.CHECKIN_TEMPLATES, "Check-in Templates", SectionKind.RAW, 1),
    SectionSpec(SectionKey.CHECKIN_RESPONSES, "Check-in Responses", SectionKind.RAW, 1),
    SectionSpec(SectionKey.SETTINGS, "Settings", SectionKind.SETTINGS, 1),
    # v2
    _list(SectionKey.CLINICAL_ASSESSMENTS, "Clinical Assessments", 2),
    _list(SectionKey.INTERVENTION_ATTEMPTS, "Intervention Attempts", 2),
    _list(SectionKey.ACTIVITIES, "Activities", 2),
    _list(SectionKey.SCHEDULED_ACTIVITIES, "Scheduled Activities", 2),
    _list(SectionKey.GRATITUDE_ENTRIES, "Gratitude Entries", 2),
    _list(SectionKey.WORRIES, "Worries", 2),
    _list(SectionKey.WORRY_SESSIONS, "Worry Sessions", 2),
    _list(SectionKey.SELF_COMPASSION_ENTRIES, "Self-Compassion Entries", 2),
    _list(SectionKey.PERSONAL_VALUES, "Personal Values", 2),
    _list(SectionKey.IMPLEMENTATION_INTENTIONS, "Implementation Intentions", 2),
    _list(SectionKey.MEDITATION_SESSIONS, "Meditation Sessions", 2),
    _object(SectionKey.MEDITATION_SETTINGS, "Meditation Settings", 2),
    _list(SectionKey.URGE_SURFING_SESSIONS, "Urge Surfing Sessions", 2),
    _list(SectionKey.HYDRATION_ENTRIES, "Hydration Entries", 2),
    _scalar(SectionKey.HYDRATION_GOAL, "Hydration Goal", 2, int, report_value=True),
    _object(SectionKey.USER_CONTEXT_SUMMARY, "User Context Summary", 2),
    _list(SectionKey.WINS, "Wins", 2),
    # v3
    _list(SectionKey.FOOD_ENTRIES, "Food Entries", 3),
    _object(SectionKey.NUTRITION_GOAL, "Nutrition Goal", 3),
    _list(SectionKey.FOOD_TEMPLATES, "Food Templates", 3),
    _list(SectionKey.WEIGHT_ENTRIES, "Weight Entries", 3),
    _object(SectionKey.WEIGHT_GOAL, "Weight Goal", 3),
    _scalar(SectionKey.WEIGHT_UNIT, "Weight Unit", 3, str, report_value=True),
    _scalar(SectionKey.HEIGHT, "Height", 3, int, float),
    _scalar(SectionKey.GENDER, "Gender", 3, str),
    _scalar(SectionKey.USER_AGE, "Age", 3, int),
    _scalar(SectionKey.USER_NAME, "User Name", 3, str),
    _list(SectionKey.CUSTOM_EXERCISES, "Custom Exercises", 3),
    _list(SectionKey.EXERCISE_PLANS, "Exercise Plans", 3),
    _list(SectionKey.WORKOUT_LOGS, "Workout Logs", 3),
    _list(SectionKey.UNPLUG_SESSIONS, "Unplug Sessions", 3),
    _list(SectionKey.DEVICE_BOUNDARIES, "Device Boundaries", 3),
    _object(SectionKey.SAFETY_PLAN, "Safety Plan", 3),
    _list(SectionKey.MEDICATIONS, "Medications", 3),
    _list(SectionKey.MEDICATION_LOGS, "Medication Logs", 3),
    _list(SectionKey.SYMPTOM_TYPES, "Symptom Types", 3),
    _list(SectionKey.SYMPTOM_ENTRIES, "Symptom Entries", 3),
)

_SPECS_BY_KEY: Dict[SectionKey, SectionSpec] = {spec.key: spec for spec in SECTION_SPECS}

# Settings fields that never leave the device.
SENSITIVE_SETTINGS_FIELDS: Tuple[str, ...] = (
    "claudeApiKey",
    "huggingfaceToken",
    "saf_folder_uri",
)

# Settings fields whose local value always wins over an imported one.
PRESERVED_LOCAL_SETTINGS: Tuple[str, ...] = (
    "claudeApiKey",
    "huggingfaceToken",
    "hasCompletedOnboarding",
    "autoBackupEnabled",
)

# Installation-specific permission handles, stripped on every import.
INSTALLATION_SETTINGS_FIELDS: Tuple[str, ...] = ("saf_folder_uri",)


def get_spec(key: Union[SectionKey, str]) -> SectionSpec:
    """Look up the registry entry for a section key."""
    return _SPECS_BY_KEY[SectionKey(key)]


def iter_specs(up_to_version: Optional[int] = None) -> Iterator[SectionSpec]:
    """Iterate section specs in registry order, optionally capped by schema version."""
    for spec in SECTION_SPECS:
        if up_to_version is None or spec.introduced_in <= up_to_version:
            yield spec


def sections_introduced_in(version: int) -> List[SectionSpec]:
    """Sections first appearing at exactly ``version``."""
    return [spec for spec in SECTION_SPECS if spec.introduced_in == version]


def required_section_keys(version: int = CURRENT_SCHEMA_VERSION) -> List[str]:
    """Section keys a snapshot at ``version`` must carry."""
    return [spec.key.value for spec in iter_specs(version)]


def resolve_key(key: Union[StoreKey, str]) -> StoreKey:
    """Map a raw string to its registered key, or raise UnregisteredKeyError."""
    if isinstance(key, (SectionKey, ExcludedKey)):
        return key
    for enum_type in (SectionKey, ExcludedKey):
        try:
            return enum_type(key)
        except ValueError:
            continue
    raise UnregisteredKeyError(str(key))


def is_registered(key: str) -> bool:
    """Whether ``key`` belongs to the registry."""
    return key in SectionKey._value2member_map_ or key in ExcludedKey._value2member_map_
