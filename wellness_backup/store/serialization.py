"""
Conversion between typed section values and snapshot payloads.

A payload is what a section looks like inside a snapshot document: a JSON
encoded string for list, object, raw and settings sections, or a bare
primitive for scalar sections. Typed values are what the persistence store
hands out: record models, dicts and primitives.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from wellness_backup.models.records import Record
from wellness_backup.store.registry import SectionKind, SectionSpec
from wellness_backup.utils.helpers import parse_json_payload


def default_value(spec: SectionSpec) -> Any:
    """Typed value of a section that holds no data."""
    if spec.kind == SectionKind.LIST:
        return []
    if spec.kind == SectionKind.SETTINGS:
        return {}
    return None


def encode_payload(spec: SectionSpec, value: Any) -> Any:
    """Serialize a typed section value into its snapshot payload."""
    if spec.kind == SectionKind.LIST:
        items = [
            item.to_json_dict() if isinstance(item, Record) else item
            for item in (value or [])
        ]
        return json.dumps(items)
    if spec.kind == SectionKind.SETTINGS:
        return json.dumps(value or {})
    if spec.kind == SectionKind.OBJECT:
        return None if value is None else json.dumps(value)
    if spec.kind == SectionKind.RAW:
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value)
    return value


def decode_payload(spec: SectionSpec, payload: Any) -> Any:
    """
    Deserialize a snapshot payload into a typed section value.

    Args:
        spec: Registry entry of the section
        payload: Payload taken from a snapshot document

    Returns:
        The typed value

    Raises:
        ValueError: If the payload does not have the section's shape
        TypeError: If the payload has the wrong type
    """
    if payload is None:
        return default_value(spec)

    if spec.kind == SectionKind.SCALAR:
        return _decode_scalar(spec, payload)

    if spec.kind == SectionKind.RAW:
        if isinstance(payload, str):
            # Must still be valid JSON even though it is stored verbatim
            json.loads(payload)
            return payload
        return json.dumps(payload)

    data = parse_json_payload(payload)

    if spec.kind == SectionKind.LIST:
        if data is None:
            return []
        if not isinstance(data, list):
            raise TypeError(f"expected a JSON array, got {type(data).__name__}")
        return _decode_records(spec, data)

    if spec.kind == SectionKind.SETTINGS:
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")
        return data

    # Object section
    if data is not None and not isinstance(data, dict):
        raise TypeError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _decode_records(spec: SectionSpec, items: List[Any]) -> List[Any]:
    if spec.model is None:
        return list(items)
    records = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise TypeError(f"record {index} is not an object")
        try:
            records.append(spec.model.model_validate(item))
        except PydanticValidationError as e:
            raise ValueError(f"record {index} is invalid: {e.error_count()} error(s)") from e
    return records


def _decode_scalar(spec: SectionSpec, payload: Any) -> Any:
    if isinstance(payload, bool):
        raise TypeError("boolean is not a valid scalar value")
    if isinstance(payload, spec.scalar_types):
        return payload
    if int in spec.scalar_types and isinstance(payload, float) and payload.is_integer():
        return int(payload)
    if isinstance(payload, str) and str not in spec.scalar_types:
        # Scalars written by a JSON-string-only serializer
        return _decode_scalar(spec, json.loads(payload))
    expected = ", ".join(t.__name__ for t in spec.scalar_types)
    raise TypeError(f"expected {expected}, got {type(payload).__name__}")


def record_count(spec: SectionSpec, value: Any) -> int:
    """Number of records a typed section value represents."""
    if value is None:
        return 0
    if spec.kind == SectionKind.LIST:
        return len(value)
    if spec.kind == SectionKind.RAW:
        try:
            data = json.loads(value)
        except (TypeError, ValueError):
            return 1
        if isinstance(data, (list, dict)):
            return len(data)
        return 0 if data is None else 1
    if spec.kind in (SectionKind.OBJECT, SectionKind.SETTINGS):
        return 1 if value else 0
    return 1


def statistic_value(spec: SectionSpec, value: Any) -> Any:
    """Statistics counter value for a typed section value."""
    if spec.report_value:
        return value
    if spec.kind == SectionKind.LIST:
        return len(value or [])
    if spec.kind == SectionKind.SCALAR and isinstance(value, str):
        return bool(value.strip())
    return record_count(spec, value) > 0


def compute_statistics(values: Dict[str, Any], specs: List[SectionSpec]) -> Dict[str, Any]:
    """Statistics block for a snapshot built from ``values``."""
    return {spec.stat_name: statistic_value(spec, values.get(spec.key.value)) for spec in specs}


def encode_stored(spec: SectionSpec, value: Any) -> Optional[str]:
    """Serialize a typed value into the string the store persists."""
    payload = encode_payload(spec, value)
    if payload is None:
        return None
    if spec.kind == SectionKind.SCALAR:
        return json.dumps(payload)
    return payload
