"""
Helper utilities for the wellness backup subsystem.

This module contains small functions shared by the orchestrator,
the persistence stores and the CLI.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import yaml


def generate_backup_filename(prefix: str = "wellness_backup", compressed: bool = True,
                             timestamp: Optional[datetime] = None) -> str:
    """Generate a backup file name such as ``wellness_backup_20250101_120000.zip``."""
    timestamp = timestamp or datetime.now()
    extension = "zip" if compressed else "json"
    return f"{prefix}_{timestamp.strftime('%Y%m%d_%H%M%S')}.{extension}"


def format_bytes(bytes_count: int) -> str:
    """Format bytes into human-readable string."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_count < 1024.0:
            return f"{bytes_count:.1f} {unit}"
        bytes_count /= 1024.0
    return f"{bytes_count:.1f} PB"


def load_config_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Args:
        file_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(file_path, 'r', encoding='utf-8') as f:
        if file_path.suffix.lower() in ['.yaml', '.yml']:
            return yaml.safe_load(f)
        elif file_path.suffix.lower() == '.json':
            return json.load(f)
        else:
            raise ValueError(f"Unsupported configuration file format: {file_path.suffix}")


def strip_keys(data: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    """Return a shallow copy of ``data`` without ``keys``."""
    excluded = set(keys)
    return {key: value for key, value in data.items() if key not in excluded}


def parse_json_payload(payload: Any) -> Any:
    """
    Decode a section payload that may be a JSON string or already decoded.

    Args:
        payload: JSON-encoded string, list, dict or primitive

    Returns:
        The decoded value
    """
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8")
    if isinstance(payload, str):
        return json.loads(payload)
    return payload
