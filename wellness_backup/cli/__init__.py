"""
CLI module for the wellness backup tool.

This module provides command-line interface functionality
using Click and Rich.
"""

from wellness_backup.cli.main import main

__all__ = ["main"]
