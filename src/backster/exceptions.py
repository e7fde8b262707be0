################################################################################
# File Name: exceptions.py
# Purpose/Description: Backup job exceptions
# Author: Ralph Agent
# Creation Date: 2026-10-19
# Copyright: (c) 2026 Backster Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-19    | Ralph Agent  | Initial creation
# ================================================================================
################################################################################
"""
Backup job exceptions.

Every fatal condition of a job has its own class. Each class carries the
stage it belongs to and the process exit code it maps to, so that the
first fatal error decides the exit status and is distinguishable in logs.

Exception hierarchy:
    common.error_handler.BaseError
    └── BackupError
        ├── ConfigError
        ├── ConcurrencyError
        ├── ConnectivityError
        ├── DumpError
        │   └── DumpTimeoutError
        ├── IntegrityError
        ├── TransformError
        ├── UploadError
        ├── UploadUnconfirmedError
        └── JobInterruptedError
"""

from typing import Any

from common.error_handler import BaseError, ErrorCategory

from .types import (
    EXIT_CONCURRENCY_ERROR,
    EXIT_CONFIG_ERROR,
    EXIT_CONNECTIVITY_ERROR,
    EXIT_DUMP_ERROR,
    EXIT_DUMP_TIMEOUT,
    EXIT_INTEGRITY_ERROR,
    EXIT_INTERRUPTED,
    EXIT_RUNTIME_ERROR,
    EXIT_TRANSFORM_ERROR,
    EXIT_UPLOAD_ERROR,
    EXIT_UPLOAD_UNCONFIRMED,
    JobState,
)


class BackupError(BaseError):
    """
    Base exception for backup job errors.

    Attributes:
        message: Human-readable error message
        details: Additional error context (never contains secrets)
        stage: Job state the error originated in
        exitCode: Process exit code for this error
    """

    stage: JobState = JobState.FAILED
    exitCode: int = EXIT_RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        stage: JobState | None = None
    ):
        super().__init__(message, details)
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message

    def toDict(self) -> dict[str, Any]:
        data = super().toDict()
        data['stage'] = self.stage.value
        data['exitCode'] = self.exitCode
        return data


class ConfigError(BackupError):
    """Missing or conflicting settings, raised before any side effect."""

    category = ErrorCategory.CONFIGURATION
    stage = JobState.VALIDATING
    exitCode = EXIT_CONFIG_ERROR


class ConcurrencyError(BackupError):
    """Another live run holds the lock marker for this database."""

    category = ErrorCategory.CONCURRENCY
    stage = JobState.LOCKING
    exitCode = EXIT_CONCURRENCY_ERROR


class ConnectivityError(BackupError):
    """The database did not answer the connectivity probe."""

    category = ErrorCategory.RETRYABLE
    stage = JobState.DUMPING
    exitCode = EXIT_CONNECTIVITY_ERROR


class DumpError(BackupError):
    """The dump command could not run or exited unsuccessfully."""

    stage = JobState.DUMPING
    exitCode = EXIT_DUMP_ERROR


class DumpTimeoutError(DumpError):
    """The dump exceeded its hard wall-clock ceiling. Never retried."""

    exitCode = EXIT_DUMP_TIMEOUT


class IntegrityError(BackupError):
    """The dump is undersized or lacks table definitions."""

    category = ErrorCategory.DATA
    stage = JobState.VERIFYING
    exitCode = EXIT_INTEGRITY_ERROR


class TransformError(BackupError):
    """Compression or encryption failed."""

    stage = JobState.COMPRESSING
    exitCode = EXIT_TRANSFORM_ERROR


class UploadError(BackupError):
    """An upload attempt failed, or all attempts were exhausted."""

    category = ErrorCategory.RETRYABLE
    stage = JobState.UPLOADING
    exitCode = EXIT_UPLOAD_ERROR


class UploadUnconfirmedError(BackupError):
    """The uploaded object could not be found at its destination."""

    stage = JobState.CONFIRMING_UPLOAD
    exitCode = EXIT_UPLOAD_UNCONFIRMED


class JobInterruptedError(BackupError):
    """The process received SIGINT or SIGTERM while the job was running."""

    exitCode = EXIT_INTERRUPTED
