################################################################################
# File Name: config_validator.py
# Purpose/Description: Configuration validation with required groups and defaults
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Flat environment keys, required key groups
# ================================================================================
################################################################################

"""
Configuration validation module.

Provides validation of flat configuration mappings (one key per environment
variable) with:
- Required key groups, every missing member of a group reported together
- Default value application for optional keys
- Clear error messages for missing fields

Usage:
    from common.config_validator import ConfigValidator

    validator = ConfigValidator()
    config = validator.validate(rawConfig)
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(
        self,
        message: str,
        missingFields: list[str] | None = None,
        group: str | None = None
    ):
        super().__init__(message)
        self.missingFields = missingFields or []
        self.group = group


# Required configuration keys, validated group by group in this order
REQUIRED_GROUPS: dict[str, list[str]] = {
    'database': ['DB_NAME', 'DB_HOST', 'DB_USERNAME', 'DB_PASSWORD'],
    'storage': ['S3_HOST', 'S3_ACCESS_KEY', 'S3_SECRET_KEY', 'S3_BUCKET'],
}

# Default values for optional settings
DEFAULTS: dict[str, Any] = {
    'DB_PORT': '3306',
    'S3_PATH_PREFIX': '',
    'FILENAME_PREFIX': 'backup',
    'COMPRESSION': '',
    'ENCRYPTION': '',
    'ENCRYPTION_KEY': '',
    'ENCRYPTION_FILE': '',
    'SLACK_ENABLED': 'false',
    'SLACK_WEBHOOK_URL': '',
    'SLACK_CHANNEL': '#server-alerts',
    'SLACK_USERNAME': 'Backup Bot',
    'SLACK_NOTIFY_ON_SUCCESS': 'false',
    'MYSQLDUMP_PARAMETERS': '',
    'DUMP_TIMEOUT': '7200',
    'MIN_BACKUP_SIZE': '1000',
    'UPLOAD_MAX_RETRIES': '3',
    'UPLOAD_RETRY_DELAY': '5',
    'TEMP_DIR': '/tmp/backups',
    'LOCK_DIR': '/tmp',
    'LOG_DIR': '/var/log/db_backups',
    'LOG_LEVEL': 'INFO',
}


class ConfigValidator:
    """
    Validates flat configuration dictionaries.

    Attributes:
        requiredGroups: Named groups of required keys
        defaults: Default values for optional keys
    """

    def __init__(
        self,
        requiredGroups: dict[str, list[str]] | None = None,
        defaults: dict[str, Any] | None = None
    ):
        """
        Initialize the validator.

        Args:
            requiredGroups: Mapping of group name to its required keys
            defaults: Dictionary of default values for optional keys
        """
        self.requiredGroups = REQUIRED_GROUPS if requiredGroups is None else requiredGroups
        self.defaults = DEFAULTS if defaults is None else defaults

    @property
    def knownKeys(self) -> list[str]:
        """All keys this validator knows about (required first)."""
        keys = [key for group in self.requiredGroups.values() for key in group]
        keys.extend(key for key in self.defaults if key not in keys)
        return keys

    def validate(self, config: dict[str, Any]) -> dict[str, Any]:
        """
        Validate and enhance configuration.

        Args:
            config: Raw configuration dictionary

        Returns:
            New configuration dictionary with defaults applied

        Raises:
            ConfigValidationError: If any member of a required group is missing
        """
        for groupName, keys in self.requiredGroups.items():
            missingFields = self._validateRequired(config, keys)
            if missingFields:
                fieldList = ', '.join(missingFields)
                raise ConfigValidationError(
                    f"Missing required {groupName} configuration: {fieldList}",
                    missingFields=missingFields,
                    group=groupName
                )

        validated = self._applyDefaults(dict(config))

        logger.info("Configuration validated successfully")
        return validated

    def _validateRequired(self, config: dict[str, Any], keys: list[str]) -> list[str]:
        """
        Check a group of required keys.

        Empty strings count as missing.

        Returns:
            List of missing key names (empty if all present)
        """
        return [key for key in keys if not config.get(key)]

    def _applyDefaults(self, config: dict[str, Any]) -> dict[str, Any]:
        for key, defaultValue in self.defaults.items():
            if config.get(key) in (None, ''):
                config[key] = defaultValue
                logger.debug(f"Applied default for {key}: {defaultValue}")

        return config
