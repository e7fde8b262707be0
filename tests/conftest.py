################################################################################
# File Name: conftest.py
# Purpose/Description: Pytest fixtures and configuration
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | Ralph Agent  | Backup environment and settings fixtures
# ================================================================================
################################################################################

"""
Pytest configuration and shared fixtures.

Fixtures defined here are available to all test files automatically.

Usage:
    def test_something(settings, envVars):
        # settings and envVars are automatically injected
        pass
"""

import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, Generator
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
srcPath = Path(__file__).parent.parent / 'src'
if str(srcPath) not in sys.path:
    sys.path.insert(0, str(srcPath))

from backster.types import BackupSettings
from common.config_validator import ConfigValidator
from common.logging_config import clearSecrets


# ================================================================================
# Configuration Fixtures
# ================================================================================

@pytest.fixture
def baseConfig(tmp_path: Path) -> Dict[str, str]:
    """
    Provide a complete, valid environment-style configuration.

    Returns:
        Dictionary with every required key set and paths under tmp_path
    """
    return {
        'DB_NAME': 'shop',
        'DB_HOST': 'db.internal',
        'DB_USERNAME': 'backup',
        'DB_PASSWORD': 'db-password-123',
        'S3_HOST': 's3.example.com',
        'S3_ACCESS_KEY': 'access-key-123',
        'S3_SECRET_KEY': 'secret-key-123',
        'S3_BUCKET': 'backups',
        'TEMP_DIR': str(tmp_path / 'work'),
        'LOCK_DIR': str(tmp_path / 'locks'),
        'LOG_DIR': str(tmp_path / 'logs'),
    }


@pytest.fixture
def settings(tmp_path: Path) -> BackupSettings:
    """
    Provide BackupSettings with fast retries and tmp_path directories.

    Returns:
        Settings with compression and encryption off
    """
    workDir = tmp_path / 'work'
    workDir.mkdir()
    return BackupSettings(
        dbName='shop',
        dbHost='db.internal',
        dbUsername='backup',
        dbPassword='db-password-123',
        s3Host='s3.example.com',
        s3AccessKey='access-key-123',
        s3SecretKey='secret-key-123',
        s3Bucket='backups',
        uploadRetryDelay=0,
        tempDir=workDir,
        lockDir=tmp_path / 'locks',
        logDir=tmp_path / 'logs',
    )


@pytest.fixture
def fullSettings(settings: BackupSettings) -> BackupSettings:
    """
    Provide settings with compression, encryption and notifications enabled.
    """
    return replace(
        settings,
        compression=True,
        encryption=True,
        encryptionKey='age1testrecipient',
        slackEnabled=True,
        slackWebhookUrl='https://hooks.example.com/services/T000/B000/XXXX',
        slackNotifyOnSuccess=True,
    )


# ================================================================================
# Environment Fixtures
# ================================================================================

@pytest.fixture
def cleanEnv() -> Generator[None, None, None]:
    """
    Ensure clean environment with no backup variables.

    Removes every known configuration key before test, restores after.
    """
    saved = {}
    for var in ConfigValidator().knownKeys:
        saved[var] = os.environ.pop(var, None)

    yield

    for var in ConfigValidator().knownKeys:
        os.environ.pop(var, None)
    for var, value in saved.items():
        if value is not None:
            os.environ[var] = value


@pytest.fixture
def envVars(cleanEnv: None, baseConfig: Dict[str, str]) -> Dict[str, str]:
    """
    Set up a valid backup environment.

    Returns:
        Dictionary of environment variables that were set

    Cleanup is handled by cleanEnv.
    """
    for key, value in baseConfig.items():
        os.environ[key] = value
    return baseConfig


@pytest.fixture
def tempEnvFile(tmp_path: Path, baseConfig: Dict[str, str]) -> Path:
    """
    Create a temporary .env file holding baseConfig.

    Returns:
        Path to temporary .env file
    """
    envFile = tmp_path / '.env'
    with open(envFile, 'w') as f:
        for key, value in baseConfig.items():
            f.write(f'{key}={value}\n')

    return envFile


# ================================================================================
# Mock Fixtures
# ================================================================================

@pytest.fixture
def mockNotifier() -> MagicMock:
    """
    Provide a mock notifier recording success/failure events.
    """
    notifier = MagicMock()
    notifier.notifySuccess.return_value = True
    notifier.notifyFailure.return_value = True
    return notifier


# ================================================================================
# Logging Isolation
# ================================================================================

@pytest.fixture(autouse=True)
def isolateLogging() -> Generator[None, None, None]:
    """
    Restore root logger handlers, record factory and secrets after each test.
    """
    rootLogger = logging.getLogger()
    handlers = list(rootLogger.handlers)
    level = rootLogger.level
    factory = logging.getLogRecordFactory()

    yield

    for handler in list(rootLogger.handlers):
        if handler not in handlers:
            rootLogger.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in rootLogger.handlers:
            rootLogger.addHandler(handler)
    rootLogger.setLevel(level)
    logging.setLogRecordFactory(factory)
    clearSecrets()


# ================================================================================
# Pytest Configuration
# ================================================================================

def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
