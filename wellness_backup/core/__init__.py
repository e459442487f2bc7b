"""
Core module for the wellness backup subsystem.

This module contains the exception taxonomy shared by every component.
"""

from wellness_backup.core.exceptions import (
    BackupSystemError,
    ConfigurationError,
    UnregisteredKeyError,
    StorageError,
    FormatError,
    ValidationError,
    MigrationError,
    IncompatibleVersionError,
    SectionImportError,
)

__all__ = [
    "BackupSystemError",
    "ConfigurationError",
    "UnregisteredKeyError",
    "StorageError",
    "FormatError",
    "ValidationError",
    "MigrationError",
    "IncompatibleVersionError",
    "SectionImportError",
]
