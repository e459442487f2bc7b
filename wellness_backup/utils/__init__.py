"""
Utilities module for the wellness backup subsystem.

This module contains utility functions and helper classes
used throughout the package.
"""

from wellness_backup.utils.helpers import (
    generate_backup_filename,
    format_bytes,
    load_config_file,
    strip_keys,
    parse_json_payload,
)
from wellness_backup.utils.logging import (
    setup_logging,
    get_logger,
    BackupLogger,
    LogCategory,
    StructuredFormatter,
)

__all__ = [
    # Helper functions
    "generate_backup_filename",
    "format_bytes",
    "load_config_file",
    "strip_keys",
    "parse_json_payload",
    # Logging utilities
    "setup_logging",
    "get_logger",
    "BackupLogger",
    "LogCategory",
    "StructuredFormatter",
]
