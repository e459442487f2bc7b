"""
Configuration models for the wellness backup subsystem.

This module defines the Pydantic model for backup configuration and the
loader that reads it from YAML or JSON files.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator, ValidationError as PydanticValidationError

from wellness_backup.core.exceptions import ConfigurationError
from wellness_backup.utils.helpers import load_config_file


class BackupConfig(BaseModel):
    """Backup and restore configuration."""
    app_version: str = "1.0.0"
    build_info: Dict[str, Any] = Field(default_factory=dict)
    archive_entry_name: str = "backup.json"
    compress: bool = True
    indent: int = Field(default=2, ge=0)
    file_prefix: str = "wellness_backup"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    structured_logging: bool = False

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('archive_entry_name', 'file_prefix')
    @classmethod
    def validate_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("Value cannot be empty")
        return v.strip()

    @property
    def build_number(self) -> Optional[str]:
        """Short build identifier taken from build info, when present."""
        value = self.build_info.get("gitCommitShort") or self.build_info.get("buildNumber")
        return str(value) if value is not None else None


def load_config(path: Optional[Union[str, Path]] = None) -> BackupConfig:
    """
    Load backup configuration from a YAML or JSON file.

    Args:
        path: Configuration file path; defaults are returned when omitted

    Returns:
        Parsed configuration
    """
    if path is None:
        return BackupConfig()

    try:
        data = load_config_file(path)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(str(e))

    if data is None:
        return BackupConfig()
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping: {path}"
        )

    # Accept either a bare mapping or one nested under "backup"
    section = data.get("backup", data)
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"Configuration section 'backup' must be a mapping: {path}"
        )
    try:
        return BackupConfig(**section)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {path}",
            details={"errors": e.errors(include_url=False)}
        )
