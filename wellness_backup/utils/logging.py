"""
Logging system for the wellness backup subsystem.

This module provides Rich console logging, optional rotating file logs,
structured JSON logging and a logger wrapper for export, import and
migration operations.
"""

import json
import logging
import logging.handlers
import sys
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler


ROOT_LOGGER_NAME = "wellness_backup"

_STANDARD_RECORD_FIELDS = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'getMessage',
    'exc_info', 'exc_text', 'stack_info', 'taskName', 'log_entry',
])


class LogLevel(str, Enum):
    """Log levels for structured logging."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogCategory(str, Enum):
    """Categories for structured logging."""
    SYSTEM = "system"
    EXPORT = "export"
    IMPORT = "import"
    MIGRATION = "migration"
    VALIDATION = "validation"
    CODEC = "codec"
    STORAGE = "storage"
    CLI = "cli"


@dataclass
class LogEntry:
    """Structured log entry with metadata."""
    timestamp: datetime = field(default_factory=datetime.now)
    level: LogLevel = LogLevel.INFO
    category: LogCategory = LogCategory.SYSTEM
    message: str = ""
    operation_id: Optional[str] = None
    operation: Optional[str] = None
    step: Optional[str] = None
    section_key: Optional[str] = None
    duration: Optional[float] = None
    error_code: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert log entry to dictionary."""
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data

    def to_json(self) -> str:
        """Convert log entry to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class StructuredFormatter(logging.Formatter):
    """Formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry = getattr(record, 'log_entry', None)

        if log_entry and isinstance(log_entry, LogEntry):
            return log_entry.to_json()

        log_entry = LogEntry(
            timestamp=datetime.fromtimestamp(record.created),
            level=LogLevel(record.levelname),
            message=record.getMessage(),
            metadata={
                'logger': record.name,
                'module': record.module,
                'function': record.funcName,
                'line': record.lineno,
            }
        )

        # Carry over fields passed through ``extra``
        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_FIELDS:
                log_entry.metadata[key] = value

        return log_entry.to_json()


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rich_console: bool = True,
    structured_logging: bool = False,
    log_rotation: bool = True,
    max_log_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """
    Set up logging for the wellness backup subsystem.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        rich_console: Whether to use Rich console handler for CLI
        structured_logging: Whether to use structured JSON logging
        log_rotation: Whether to enable log rotation
        max_log_size: Maximum log file size before rotation
        backup_count: Number of backup log files to keep

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    logger.handlers.clear()

    if rich_console and not structured_logging:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True
        )
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        if structured_logging:
            console_handler.setFormatter(StructuredFormatter())
        else:
            console_handler.setFormatter(logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))

    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        if log_rotation:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=max_log_size,
                backupCount=backup_count
            )
        else:
            file_handler = logging.FileHandler(log_file)

        if structured_logging:
            file_handler.setFormatter(StructuredFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))

        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class BackupLogger:
    """Logger wrapper for export, import and migration operations."""

    def __init__(
        self,
        name: str,
        operation_id: Optional[str] = None,
        structured: bool = False
    ):
        self.operation_id = operation_id
        self.structured = structured
        self.logger = get_logger(name)

    def _log(
        self,
        level: LogLevel,
        message: str,
        category: LogCategory,
        operation: Optional[str] = None,
        step: Optional[str] = None,
        section_key: Optional[str] = None,
        duration: Optional[float] = None,
        error_code: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        log_method = getattr(self.logger, level.value.lower())
        if self.structured:
            log_entry = LogEntry(
                level=level,
                category=category,
                message=message,
                operation_id=self.operation_id,
                operation=operation,
                step=step,
                section_key=section_key,
                duration=duration,
                error_code=error_code,
                metadata=metadata or {}
            )
            log_method(message, extra={'log_entry': log_entry})
        else:
            extra = {'category': category.value, **(metadata or {})}
            if section_key:
                extra['section_key'] = section_key
            log_method(message, extra=extra)

    def debug(self, message: str, category: LogCategory = LogCategory.SYSTEM, **kwargs):
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, category, **kwargs)

    def info(self, message: str, category: LogCategory = LogCategory.SYSTEM, **kwargs):
        """Log info message."""
        self._log(LogLevel.INFO, message, category, **kwargs)

    def warning(self, message: str, category: LogCategory = LogCategory.SYSTEM, **kwargs):
        """Log warning message."""
        self._log(LogLevel.WARNING, message, category, **kwargs)

    def error(self, message: str, category: LogCategory = LogCategory.SYSTEM, **kwargs):
        """Log error message."""
        self._log(LogLevel.ERROR, message, category, **kwargs)

    def step_start(self, step_name: str, category: LogCategory, operation: Optional[str] = None):
        """Log step start."""
        self.debug(
            f"Starting step: {step_name}",
            category,
            operation=operation,
            step=step_name,
            metadata={'step_status': 'started'}
        )

    def step_complete(
        self,
        step_name: str,
        duration: float,
        category: LogCategory,
        operation: Optional[str] = None
    ):
        """Log step completion."""
        self.debug(
            f"Completed step: {step_name} (took {duration:.3f}s)",
            category,
            operation=operation,
            step=step_name,
            duration=duration,
            metadata={'step_status': 'completed'}
        )

    def step_failed(
        self,
        step_name: str,
        error: str,
        category: LogCategory,
        operation: Optional[str] = None,
        error_code: Optional[str] = None
    ):
        """Log step failure."""
        self.error(
            f"Failed step: {step_name} - {error}",
            category,
            operation=operation,
            step=step_name,
            error_code=error_code,
            metadata={'step_status': 'failed', 'error_details': error}
        )

    def log_section_result(
        self,
        section_key: str,
        success: bool,
        record_count: int = 0,
        error: Optional[str] = None
    ):
        """Log the outcome of importing one section."""
        if success:
            self.debug(
                f"Imported section {section_key}: {record_count} record(s)",
                LogCategory.IMPORT,
                section_key=section_key,
                metadata={'record_count': record_count}
            )
        else:
            self.warning(
                f"Failed to import section {section_key}: {error}",
                LogCategory.IMPORT,
                section_key=section_key,
                error_code="SectionImportError",
                metadata={'error_details': error}
            )

    def log_validation_result(self, check_name: str, passed: bool, reason: Optional[str] = None):
        """Log the outcome of a validation check."""
        message = f"Validation {check_name}: {'passed' if passed else 'failed'}"
        if reason:
            message = f"{message} ({reason})"
        self.debug(
            message,
            LogCategory.VALIDATION,
            step=check_name,
            metadata={'validation_passed': passed}
        )
