################################################################################
# File Name: types.py
# Purpose/Description: Backup job types, enums, constants and dataclasses
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
Backup job types, enums, and dataclasses.

This module contains all type definitions for the backup pipeline:
- JobState enum for the per-job state machine
- ArtifactStage enum for raw / compressed / encrypted artifacts
- BackupSettings: the immutable configuration built once at startup
- BackupJob, Artifact, LockMarker, UploadAttempt, NotificationEvent, BackupResult

All types have zero project dependencies (stdlib only) to avoid circular imports.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

# ================================================================================
# Constants
# ================================================================================

COMPRESSION_GZIP = 'gzip'
ENCRYPTION_AGE = 'age'

RAW_EXTENSION = '.sql'
COMPRESSED_SUFFIX = '.gz'
ENCRYPTED_SUFFIX = '.age'
PARTIAL_SUFFIX = '.part'

# Artifact base name timestamp, second resolution
TIMESTAMP_FORMAT = '%Y%m%d%H%M%S'

DEFAULT_FILENAME_PREFIX = 'backup'
DEFAULT_DB_PORT = 3306
DEFAULT_DUMP_TIMEOUT = 7200
DEFAULT_MIN_BACKUP_SIZE = 1000
DEFAULT_UPLOAD_MAX_RETRIES = 3
DEFAULT_UPLOAD_RETRY_DELAY = 5
DEFAULT_TEMP_DIR = '/tmp/backups'
DEFAULT_LOCK_DIR = '/tmp'
DEFAULT_LOG_DIR = '/var/log/db_backups'
DEFAULT_SLACK_CHANNEL = '#server-alerts'
DEFAULT_SLACK_USERNAME = 'Backup Bot'

# Non-locking, consistent snapshot
DEFAULT_MYSQLDUMP_PARAMS = (
    '--single-transaction',
    '--quick',
    '--no-tablespaces',
    '--skip-lock-tables',
    '--skip-add-locks',
)

# Evidence that table definitions were emitted
STRUCTURE_MARKER = b'CREATE TABLE'

# Process exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_RUNTIME_ERROR = 2
EXIT_CONCURRENCY_ERROR = 3
EXIT_CONNECTIVITY_ERROR = 4
EXIT_DUMP_ERROR = 5
EXIT_DUMP_TIMEOUT = 6
EXIT_INTEGRITY_ERROR = 7
EXIT_TRANSFORM_ERROR = 8
EXIT_UPLOAD_ERROR = 9
EXIT_UPLOAD_UNCONFIRMED = 10
EXIT_INTERRUPTED = 130


# ================================================================================
# Enums
# ================================================================================

class JobState(Enum):
    """
    States of a single backup job.

    VALIDATING -> LOCKING -> DUMPING -> VERIFYING -> COMPRESSING? -> ENCRYPTING?
    -> UPLOADING -> CONFIRMING_UPLOAD -> SUCCEEDED, with FAILED reachable from
    any working state and FINALIZED terminal after either outcome.
    """

    VALIDATING = "validating"
    LOCKING = "locking"
    DUMPING = "dumping"
    VERIFYING = "verifying"
    COMPRESSING = "compressing"
    ENCRYPTING = "encrypting"
    UPLOADING = "uploading"
    CONFIRMING_UPLOAD = "confirming_upload"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    FINALIZED = "finalized"


class ArtifactStage(Enum):
    """Logical stage of the current backup artifact."""

    RAW = "raw"
    COMPRESSED = "compressed"
    ENCRYPTED = "encrypted"


class NotificationStatus(Enum):
    """Outcome reported to the notification channel."""

    SUCCESS = "success"
    FAILURE = "failure"


# ================================================================================
# Configuration
# ================================================================================

@dataclass(frozen=True)
class BackupSettings:
    """
    Immutable, validated configuration for a backup run.

    Built once by backster.config.buildSettings() and passed explicitly to
    every component. Secret fields are excluded from repr().
    """

    dbName: str
    dbHost: str
    dbUsername: str
    dbPassword: str = field(repr=False)
    s3Host: str
    s3AccessKey: str = field(repr=False)
    s3SecretKey: str = field(repr=False)
    s3Bucket: str
    dbPort: int = DEFAULT_DB_PORT
    s3PathPrefix: str = ''
    filenamePrefix: str = DEFAULT_FILENAME_PREFIX
    compression: bool = False
    encryption: bool = False
    encryptionKey: str | None = field(default=None, repr=False)
    encryptionFile: Path | None = None
    slackEnabled: bool = False
    slackWebhookUrl: str | None = field(default=None, repr=False)
    slackChannel: str = DEFAULT_SLACK_CHANNEL
    slackUsername: str = DEFAULT_SLACK_USERNAME
    slackNotifyOnSuccess: bool = False
    dumpParameters: tuple[str, ...] = DEFAULT_MYSQLDUMP_PARAMS
    dumpTimeout: int = DEFAULT_DUMP_TIMEOUT
    minBackupSize: int = DEFAULT_MIN_BACKUP_SIZE
    uploadMaxRetries: int = DEFAULT_UPLOAD_MAX_RETRIES
    uploadRetryDelay: int = DEFAULT_UPLOAD_RETRY_DELAY
    tempDir: Path = Path(DEFAULT_TEMP_DIR)
    lockDir: Path = Path(DEFAULT_LOCK_DIR)
    logDir: Path = Path(DEFAULT_LOG_DIR)
    logLevel: str = 'INFO'

    @property
    def secrets(self) -> list[str]:
        """Values that must never reach a log line."""
        return [
            value for value in (self.dbPassword, self.s3AccessKey, self.s3SecretKey)
            if value
        ]

    def toDict(self) -> dict[str, Any]:
        """
        Convert to a dictionary for logging, secrets excluded.

        Returns:
            Dictionary representation of the non-secret settings
        """
        return {
            'dbName': self.dbName,
            'dbHost': self.dbHost,
            'dbPort': self.dbPort,
            's3Host': self.s3Host,
            's3Bucket': self.s3Bucket,
            's3PathPrefix': self.s3PathPrefix,
            'filenamePrefix': self.filenamePrefix,
            'compression': self.compression,
            'encryption': self.encryption,
            'slackEnabled': self.slackEnabled,
            'slackNotifyOnSuccess': self.slackNotifyOnSuccess,
            'dumpTimeout': self.dumpTimeout,
            'uploadMaxRetries': self.uploadMaxRetries,
            'uploadRetryDelay': self.uploadRetryDelay,
        }


# ================================================================================
# Job Data Classes
# ================================================================================

@dataclass
class BackupJob:
    """
    Identity of one backup run.

    Lives for the duration of the process and is never persisted.

    Attributes:
        settings: Validated settings for this run
        startedAt: Wall-clock start of the run
        startMonotonic: Monotonic clock reading at start, for durations
        logFile: Path of this run's log file, if any
    """

    settings: BackupSettings
    startedAt: datetime
    startMonotonic: float
    logFile: Path | None = None

    @classmethod
    def create(
        cls,
        settings: BackupSettings,
        logFile: Path | None = None,
        now: datetime | None = None
    ) -> 'BackupJob':
        """Create a job stamped with the current time."""
        return cls(
            settings=settings,
            startedAt=now or datetime.now(),
            startMonotonic=time.monotonic(),
            logFile=logFile,
        )

    @property
    def baseName(self) -> str:
        """<filenamePrefix>_<db>_<YYYYmmddHHMMSS>"""
        timestamp = self.startedAt.strftime(TIMESTAMP_FORMAT)
        return f"{self.settings.filenamePrefix}_{self.settings.dbName}_{timestamp}"

    @property
    def rawFilename(self) -> str:
        return self.baseName + RAW_EXTENSION

    @property
    def rawPath(self) -> Path:
        return self.settings.tempDir / self.rawFilename

    def artifactCandidates(self) -> list[Path]:
        """
        Every local artifact variant this job may create.

        Includes in-flight .part files of each transform.
        """
        raw = self.rawPath
        names = [
            raw.name,
            raw.name + COMPRESSED_SUFFIX,
            raw.name + COMPRESSED_SUFFIX + ENCRYPTED_SUFFIX,
            raw.name + ENCRYPTED_SUFFIX,
        ]
        paths = [raw.with_name(name) for name in names]
        paths.extend(raw.with_name(name + PARTIAL_SUFFIX) for name in names)
        return paths

    def elapsedSeconds(self) -> float:
        return time.monotonic() - self.startMonotonic


@dataclass(frozen=True)
class Artifact:
    """
    The backup file at one stage of transformation.

    Attributes:
        path: Location on local disk
        stage: Logical stage (raw, compressed, encrypted)
    """

    path: Path
    stage: ArtifactStage

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def size(self) -> int:
        """Current size in bytes (0 if the file is gone)."""
        try:
            return self.path.stat().st_size
        except FileNotFoundError:
            return 0

    def exists(self) -> bool:
        return self.path.is_file()


@dataclass(frozen=True)
class LockMarker:
    """
    Mutual-exclusion record for one database identifier.

    Attributes:
        path: Marker file location
        pid: Owning process identifier
        createdAt: When the marker was written
    """

    path: Path
    pid: int
    createdAt: datetime

    def serialize(self) -> str:
        return f"{self.pid}\n{self.createdAt.isoformat()}\n"


@dataclass
class UploadAttempt:
    """
    Retry state of one upload.

    Attributes:
        maxAttempts: Upper bound on attempts
        count: Attempts made so far
        lastError: Error message of the most recent failed attempt
        remoteUri: Destination URI
    """

    maxAttempts: int
    remoteUri: str
    count: int = 0
    lastError: str | None = None

    @property
    def exhausted(self) -> bool:
        return self.count >= self.maxAttempts


@dataclass(frozen=True)
class NotificationEvent:
    """
    Outcome record sent to the notification channel.

    Attributes:
        status: Success or failure
        message: Human-readable multi-line message
        timestamp: When the event was produced
        durationSeconds: Elapsed job time
        location: Remote artifact location (success only)
    """

    status: NotificationStatus
    message: str
    timestamp: datetime
    durationSeconds: float
    location: str | None = None


@dataclass
class BackupResult:
    """
    Result of a backup job.

    Attributes:
        success: Whether the job succeeded
        exitCode: Process exit code for this outcome
        state: Last working state reached before finalization
        durationSeconds: Total elapsed wall-clock duration
        artifactName: Final artifact name (None if no artifact)
        size: Final artifact size in bytes
        remoteUri: Remote location (None unless uploaded)
        uploadAttempts: Number of upload attempts made
        error: Error message if the job failed
        errorType: Exception class name if the job failed
    """

    success: bool
    exitCode: int
    state: JobState
    durationSeconds: float = 0.0
    artifactName: str | None = None
    size: int | None = None
    remoteUri: str | None = None
    uploadAttempts: int = 0
    error: str | None = None
    errorType: str | None = None

    def toDict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            'success': self.success,
            'exitCode': self.exitCode,
            'state': self.state.value,
            'durationSeconds': round(self.durationSeconds, 3),
            'artifactName': self.artifactName,
            'size': self.size,
            'remoteUri': self.remoteUri,
            'uploadAttempts': self.uploadAttempts,
            'error': self.error,
            'errorType': self.errorType,
        }
