################################################################################
# File Name: __init__.py
# Purpose/Description: Backup job package initialization
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
Backup job package.

Scheduled logical backups of one MySQL database to S3-compatible storage:

    lock -> dump -> verify -> compress? -> encrypt? -> upload -> confirm
    -> cleanup + notify

Usage:
    from backster import BackupManager, loadSettings

    settings = loadSettings(envPath='.env')
    result = BackupManager(settings).run()
"""

from .backup_manager import BackupManager
from .config import buildSettings, loadSettings
from .dump import MysqlDumper
from .exceptions import (
    BackupError,
    ConcurrencyError,
    ConfigError,
    ConnectivityError,
    DumpError,
    DumpTimeoutError,
    IntegrityError,
    JobInterruptedError,
    TransformError,
    UploadError,
    UploadUnconfirmedError,
)
from .lock import LockManager
from .notifier import WebhookNotifier
from .transform import ArtifactTransformer
from .types import (
    Artifact,
    ArtifactStage,
    BackupJob,
    BackupResult,
    BackupSettings,
    JobState,
    NotificationEvent,
    NotificationStatus,
)
from .uploader import S3Uploader
from .verifier import verifyDump

__all__ = [
    # Orchestration
    'BackupManager',
    # Configuration
    'buildSettings',
    'loadSettings',
    # Stages
    'LockManager',
    'MysqlDumper',
    'verifyDump',
    'ArtifactTransformer',
    'S3Uploader',
    'WebhookNotifier',
    # Types
    'Artifact',
    'ArtifactStage',
    'BackupJob',
    'BackupResult',
    'BackupSettings',
    'JobState',
    'NotificationEvent',
    'NotificationStatus',
    # Exceptions
    'BackupError',
    'ConfigError',
    'ConcurrencyError',
    'ConnectivityError',
    'DumpError',
    'DumpTimeoutError',
    'IntegrityError',
    'TransformError',
    'UploadError',
    'UploadUnconfirmedError',
    'JobInterruptedError',
]
