################################################################################
# File Name: logging_config.py
# Purpose/Description: Structured logging configuration and utilities
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Per-run log files, secret masking, stage context
# ================================================================================
################################################################################

"""
Logging configuration module.

Provides structured logging with:
- Configurable log levels
- Console output plus an append-only, timestamped log file per run
- Masking of registered secrets and PII patterns
- Stage context attached to every record emitted inside a LogContext

Usage:
    from common.logging_config import setupLogging, getLogger, LogContext

    setupLogging(level='INFO', logFile=buildRunLogPath('/var/log/db_backups'))
    registerSecret(password)

    logger = getLogger(__name__)
    with LogContext(stage='dumping'):
        logger.info("Starting dump")   # ... | stage=dumping
"""

import logging
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

# Default log format
DEFAULT_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s | %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Per-run log file name: backup_YYYYmmdd_HHMMSS.log
RUN_LOG_FILENAME_FORMAT = 'backup_{timestamp}.log'

SECRET_MASK = '[SECRET_MASKED]'

# Secrets shorter than this are not masked (too likely to collide with normal text)
MIN_SECRET_LENGTH = 4

# PII patterns for masking
PII_PATTERNS = {
    'email': re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b'),
    'phone': re.compile(r'\b\d{3}[-.]?\d{3}[-.]?\d{4}\b'),
}

_registeredSecrets: set[str] = set()


def registerSecret(value: str | None) -> None:
    """
    Register a secret value that must never appear in log output.

    Args:
        value: Secret value (ignored when empty or very short)
    """
    if value and len(value) >= MIN_SECRET_LENGTH:
        _registeredSecrets.add(value)


def clearSecrets() -> None:
    """Forget all registered secrets."""
    _registeredSecrets.clear()


class SecretMaskingFilter(logging.Filter):
    """
    Logging filter that masks secrets and PII in log messages.

    Registered secrets (passwords, storage keys) are replaced first,
    longest value first so that overlapping secrets mask completely.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Filter and mask sensitive values in a log record.

        The message is rendered with its arguments before masking so that
        secrets passed as %-style arguments are masked too.

        Args:
            record: Log record to filter

        Returns:
            True (always allows record, but modifies it)
        """
        if isinstance(record.msg, str):
            message = record.getMessage() if record.args else record.msg
            record.msg = self._mask(message)
            record.args = None

        return True

    def _mask(self, message: str) -> str:
        for secret in sorted(_registeredSecrets, key=len, reverse=True):
            message = message.replace(secret, SECRET_MASK)

        for name, pattern in PII_PATTERNS.items():
            message = pattern.sub(f'[{name.upper()}_MASKED]', message)

        return message


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter for structured logging.

    Appends the record's context fields (set by LogContext) as key=value pairs.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        extra = getattr(record, 'extra', None)
        if extra and isinstance(extra, dict):
            extraStr = ' | ' + ' '.join(f'{k}={v}' for k, v in extra.items())
            message += extraStr

        return message


def buildRunLogPath(logDir: str | Path, timestamp: datetime | None = None) -> Path:
    """
    Build the log file path for a single run.

    Args:
        logDir: Directory that holds run logs
        timestamp: Run start time (defaults to now)

    Returns:
        Path like <logDir>/backup_20261019_031500.log
    """
    timestamp = timestamp or datetime.now()
    filename = RUN_LOG_FILENAME_FORMAT.format(timestamp=timestamp.strftime('%Y%m%d_%H%M%S'))
    return Path(logDir) / filename


def setupLogging(
    level: str = 'INFO',
    logFormat: str | None = None,
    logFile: str | Path | None = None,
    enableMasking: bool = True
) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        logFormat: Custom format string
        logFile: Optional file path for log output (opened in append mode)
        enableMasking: Whether to mask secrets and PII in logs

    Returns:
        Root logger instance

    Raises:
        OSError: If the log file directory cannot be created or opened
    """
    rootLogger = logging.getLogger()
    rootLogger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(rootLogger.handlers):
        rootLogger.removeHandler(handler)
        handler.close()

    formatter = StructuredFormatter(
        fmt=logFormat or DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT
    )

    consoleHandler = logging.StreamHandler(sys.stdout)
    consoleHandler.setFormatter(formatter)
    if enableMasking:
        consoleHandler.addFilter(SecretMaskingFilter())
    rootLogger.addHandler(consoleHandler)

    if logFile:
        logPath = Path(logFile)
        logPath.parent.mkdir(parents=True, exist_ok=True)

        fileHandler = logging.FileHandler(logPath, mode='a', encoding='utf-8')
        fileHandler.setFormatter(formatter)
        if enableMasking:
            fileHandler.addFilter(SecretMaskingFilter())
        rootLogger.addHandler(fileHandler)

    rootLogger.info(f"Logging configured | level={level} | file={logFile or '-'}")

    return rootLogger


def getLogger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class LogContext:
    """
    Context manager for adding context to all log messages.

    Nested contexts merge their fields, the innermost value winning.

    Usage:
        with LogContext(stage='uploading'):
            logger.info("Uploading")  # Includes stage=uploading
    """

    def __init__(self, **context: Any):
        """
        Initialize log context.

        Args:
            **context: Context fields to add to logs
        """
        self.context = context
        self._oldFactory = None

    def __enter__(self) -> 'LogContext':
        """Enter context and add fields to log records."""
        self._oldFactory = logging.getLogRecordFactory()

        oldFactory = self._oldFactory
        context = self.context

        def recordFactory(*args: Any, **kwargs: Any) -> logging.LogRecord:
            record = oldFactory(*args, **kwargs)
            merged = dict(getattr(record, 'extra', None) or {})
            merged.update(context)
            record.extra = merged
            return record

        logging.setLogRecordFactory(recordFactory)
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context and restore original factory."""
        if self._oldFactory:
            logging.setLogRecordFactory(self._oldFactory)
