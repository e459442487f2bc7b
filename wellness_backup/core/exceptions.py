"""
Custom exceptions for the wellness backup subsystem.

This module defines the exception taxonomy used by the codec, validator,
migration pipeline, persistence store and backup orchestrator.
"""

from typing import Any, Dict, List, Optional


class BackupSystemError(Exception):
    """Base exception class for backup subsystem errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(BackupSystemError):
    """Raised when there's an error in configuration."""
    pass


class UnregisteredKeyError(ConfigurationError):
    """Raised when a store key is not part of the section registry."""

    def __init__(self, key: str, **kwargs):
        super().__init__(
            f"Storage key '{key}' is not registered. Add it to SectionKey "
            f"(backed up) or ExcludedKey (never backed up).",
            **kwargs
        )
        self.key = key


class StorageError(BackupSystemError):
    """Raised when the persistence store cannot read or write data."""
    pass


class FormatError(BackupSystemError):
    """Raised when a backup container or document cannot be parsed."""
    pass


class ValidationError(BackupSystemError):
    """Raised when snapshot validation fails."""

    def __init__(
        self,
        message: str,
        failed_checks: Optional[List[str]] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.failed_checks = failed_checks or []


class MigrationError(BackupSystemError):
    """Raised when a migration step cannot transform its input."""

    def __init__(
        self,
        message: str,
        from_version: Optional[int] = None,
        to_version: Optional[int] = None,
        section_key: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.from_version = from_version
        self.to_version = to_version
        self.section_key = section_key
        self.details.setdefault("from_version", from_version)
        self.details.setdefault("to_version", to_version)
        self.details.setdefault("section_key", section_key)

    def __str__(self) -> str:
        location = []
        if self.from_version is not None and self.to_version is not None:
            location.append(f"v{self.from_version} -> v{self.to_version}")
        if self.section_key:
            location.append(f"section '{self.section_key}'")
        if location:
            return f"{self.message} ({', '.join(location)})"
        return self.message


class IncompatibleVersionError(BackupSystemError):
    """Raised when a snapshot is newer than the running application understands."""

    def __init__(self, import_version: int, current_version: int, **kwargs):
        super().__init__(
            f"This backup is from a newer version of the app (v{import_version}). "
            f"Please update the app to v{import_version} or later before importing.",
            **kwargs
        )
        self.import_version = import_version
        self.current_version = current_version


class SectionImportError(BackupSystemError):
    """Raised when a single section cannot be deserialized or written."""

    def __init__(self, section_key: str, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.section_key = section_key
