################################################################################
# File Name: config.py
# Purpose/Description: Build validated, immutable backup settings
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
Configuration loading and validation for backup jobs.

Turns a flat mapping of environment-style keys into a frozen BackupSettings,
rejecting missing or conflicting settings before any side effect occurs.

Usage:
    from backster.config import loadSettings

    settings = loadSettings(envPath='.env')
"""

import logging
import shlex
from pathlib import Path
from typing import Any, Mapping

from common.config_validator import ConfigValidationError, ConfigValidator
from common.secrets_loader import loadEnvFile, readEnvironment

from .exceptions import ConfigError
from .types import (
    COMPRESSION_GZIP,
    DEFAULT_MYSQLDUMP_PARAMS,
    ENCRYPTION_AGE,
    BackupSettings,
)

logger = logging.getLogger(__name__)

TRUE_VALUES = {'true', '1', 'yes', 'on'}
FALSE_VALUES = {'false', '0', 'no', 'off', ''}

# Integer options and the smallest value each accepts
INTEGER_OPTIONS: dict[str, int] = {
    'DB_PORT': 1,
    'DUMP_TIMEOUT': 1,
    'MIN_BACKUP_SIZE': 1,
    'UPLOAD_MAX_RETRIES': 1,
    'UPLOAD_RETRY_DELAY': 0,
}


def parseBool(key: str, value: Any) -> bool:
    """
    Parse a boolean toggle.

    Raises:
        ConfigError: If the value is not a recognised boolean
    """
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ConfigError(f"{key} must be true or false, got '{value}'")


def parseInt(key: str, value: Any, minimum: int) -> int:
    """
    Parse an integer option with a lower bound.

    Raises:
        ConfigError: If the value is not an integer or is below minimum
    """
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got '{value}'") from None
    if number < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {number}")
    return number


def _parseToggle(key: str, value: str, enabledValue: str) -> bool:
    normalized = value.strip().lower()
    if not normalized:
        return False
    if normalized == enabledValue:
        return True
    raise ConfigError(f"{key} must be '{enabledValue}' or empty, got '{value}'")


def _validateEncryption(config: Mapping[str, Any]) -> tuple[bool, str | None, Path | None]:
    encryption = _parseToggle('ENCRYPTION', config['ENCRYPTION'], ENCRYPTION_AGE)
    key = config['ENCRYPTION_KEY'] or None
    keyFile = config['ENCRYPTION_FILE'] or None

    if not encryption:
        return False, None, None

    if key is None and keyFile is None:
        raise ConfigError(
            "ENCRYPTION_KEY or ENCRYPTION_FILE must be provided when ENCRYPTION is 'age'",
            details={'field': 'encryption'}
        )
    if key is not None and keyFile is not None:
        raise ConfigError(
            "ENCRYPTION_KEY and ENCRYPTION_FILE are mutually exclusive",
            details={'field': 'encryption'}
        )

    recipientsFile = Path(keyFile) if keyFile else None
    if recipientsFile is not None and not recipientsFile.is_file():
        raise ConfigError(f"ENCRYPTION_FILE not found: {recipientsFile}")

    return True, key, recipientsFile


def buildSettings(rawConfig: Mapping[str, Any]) -> BackupSettings:
    """
    Validate a flat configuration mapping and build BackupSettings.

    Validation order: database group, storage group, toggles, encryption
    exclusivity, notification target, numeric options.

    Args:
        rawConfig: Environment-style keys (DB_NAME, S3_BUCKET, ...)

    Returns:
        Immutable BackupSettings

    Raises:
        ConfigError: On the first missing or conflicting setting
    """
    try:
        config = ConfigValidator().validate(dict(rawConfig))
    except ConfigValidationError as e:
        raise ConfigError(
            str(e),
            details={'group': e.group, 'missing': e.missingFields}
        ) from e

    compression = _parseToggle('COMPRESSION', config['COMPRESSION'], COMPRESSION_GZIP)
    encryption, encryptionKey, encryptionFile = _validateEncryption(config)

    slackEnabled = parseBool('SLACK_ENABLED', config['SLACK_ENABLED'])
    if slackEnabled and not config['SLACK_WEBHOOK_URL']:
        raise ConfigError("SLACK_WEBHOOK_URL must be provided when SLACK_ENABLED is true")

    numbers = {
        key: parseInt(key, config[key], minimum)
        for key, minimum in INTEGER_OPTIONS.items()
    }

    dumpParameters = DEFAULT_MYSQLDUMP_PARAMS
    if config['MYSQLDUMP_PARAMETERS']:
        try:
            dumpParameters = tuple(shlex.split(config['MYSQLDUMP_PARAMETERS']))
        except ValueError as e:
            raise ConfigError(f"MYSQLDUMP_PARAMETERS cannot be parsed: {e}") from e

    settings = BackupSettings(
        dbName=config['DB_NAME'],
        dbHost=config['DB_HOST'],
        dbUsername=config['DB_USERNAME'],
        dbPassword=config['DB_PASSWORD'],
        dbPort=numbers['DB_PORT'],
        s3Host=config['S3_HOST'],
        s3AccessKey=config['S3_ACCESS_KEY'],
        s3SecretKey=config['S3_SECRET_KEY'],
        s3Bucket=config['S3_BUCKET'].strip('/'),
        s3PathPrefix=config['S3_PATH_PREFIX'].strip('/'),
        filenamePrefix=config['FILENAME_PREFIX'],
        compression=compression,
        encryption=encryption,
        encryptionKey=encryptionKey,
        encryptionFile=encryptionFile,
        slackEnabled=slackEnabled,
        slackWebhookUrl=config['SLACK_WEBHOOK_URL'] or None,
        slackChannel=config['SLACK_CHANNEL'],
        slackUsername=config['SLACK_USERNAME'],
        slackNotifyOnSuccess=parseBool('SLACK_NOTIFY_ON_SUCCESS', config['SLACK_NOTIFY_ON_SUCCESS']),
        dumpParameters=dumpParameters,
        dumpTimeout=numbers['DUMP_TIMEOUT'],
        minBackupSize=numbers['MIN_BACKUP_SIZE'],
        uploadMaxRetries=numbers['UPLOAD_MAX_RETRIES'],
        uploadRetryDelay=numbers['UPLOAD_RETRY_DELAY'],
        tempDir=Path(config['TEMP_DIR']),
        lockDir=Path(config['LOCK_DIR']),
        logDir=Path(config['LOG_DIR']),
        logLevel=config['LOG_LEVEL'].upper(),
    )

    logger.debug(f"Settings built | {settings.toDict()}")
    return settings


def loadSettings(
    envPath: str | None = None,
    environ: Mapping[str, str] | None = None
) -> BackupSettings:
    """
    Load the .env file, read the environment and build BackupSettings.

    Args:
        envPath: Optional .env file (existing variables win)
        environ: Source mapping (defaults to os.environ)

    Returns:
        Immutable BackupSettings

    Raises:
        ConfigError: If configuration is missing or conflicting
    """
    if environ is None:
        loadEnvFile(envPath)
    rawConfig = readEnvironment(ConfigValidator().knownKeys, environ)
    return buildSettings(rawConfig)
