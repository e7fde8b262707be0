################################################################################
# File Name: test_config_validator.py
# Purpose/Description: Tests for configuration validation
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | Ralph Agent  | Required groups and flat defaults
# ================================================================================
################################################################################

"""
Tests for the config_validator module.

Run with:
    pytest tests/test_config_validator.py -v
"""

import sys
from pathlib import Path

import pytest

srcPath = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(srcPath))

from common.config_validator import (
    DEFAULTS,
    REQUIRED_GROUPS,
    ConfigValidationError,
    ConfigValidator,
)


class TestConfigValidatorRequired:
    """Tests for required group validation."""

    def test_validate_completeConfig_returnsConfig(self, baseConfig):
        """
        Given: All required keys present
        When: validate() is called
        Then: The configuration is returned with its values
        """
        result = ConfigValidator().validate(baseConfig)

        assert result['DB_NAME'] == 'shop'
        assert result['S3_BUCKET'] == 'backups'

    def test_validate_missingDatabaseKey_raisesWithGroup(self, baseConfig):
        """
        Given: DB_PASSWORD missing
        When: validate() is called
        Then: ConfigValidationError names the database group and the key
        """
        del baseConfig['DB_PASSWORD']

        with pytest.raises(ConfigValidationError) as exc:
            ConfigValidator().validate(baseConfig)

        assert exc.value.group == 'database'
        assert exc.value.missingFields == ['DB_PASSWORD']
        assert 'DB_PASSWORD' in str(exc.value)

    def test_validate_emptyValue_countsAsMissing(self, baseConfig):
        """
        Given: S3_SECRET_KEY set to an empty string
        When: validate() is called
        Then: It is reported as missing
        """
        baseConfig['S3_SECRET_KEY'] = ''

        with pytest.raises(ConfigValidationError) as exc:
            ConfigValidator().validate(baseConfig)

        assert exc.value.group == 'storage'
        assert exc.value.missingFields == ['S3_SECRET_KEY']

    def test_validate_bothGroupsIncomplete_reportsDatabaseFirst(self):
        """
        Given: Keys missing from both groups
        When: validate() is called
        Then: The database group is reported, with all its missing keys
        """
        with pytest.raises(ConfigValidationError) as exc:
            ConfigValidator().validate({'DB_NAME': 'shop'})

        assert exc.value.group == 'database'
        assert exc.value.missingFields == ['DB_HOST', 'DB_USERNAME', 'DB_PASSWORD']

    def test_validate_customGroups_usesThem(self):
        """
        Given: A validator with a custom required group
        When: validate() is called without that key
        Then: The custom group is enforced
        """
        validator = ConfigValidator(requiredGroups={'api': ['API_KEY']}, defaults={})

        with pytest.raises(ConfigValidationError) as exc:
            validator.validate({})

        assert exc.value.group == 'api'


class TestConfigValidatorDefaults:
    """Tests for default value application."""

    def test_validate_unsetOptional_appliesDefault(self, baseConfig):
        """
        Given: No optional keys set
        When: validate() is called
        Then: Defaults are filled in
        """
        result = ConfigValidator().validate(baseConfig)

        assert result['DB_PORT'] == '3306'
        assert result['FILENAME_PREFIX'] == 'backup'
        assert result['UPLOAD_MAX_RETRIES'] == '3'
        assert result['SLACK_CHANNEL'] == '#server-alerts'

    def test_validate_emptyOptional_appliesDefault(self, baseConfig):
        """
        Given: DUMP_TIMEOUT set to an empty string
        When: validate() is called
        Then: The default replaces it
        """
        baseConfig['DUMP_TIMEOUT'] = ''

        result = ConfigValidator().validate(baseConfig)

        assert result['DUMP_TIMEOUT'] == '7200'

    def test_validate_setOptional_keepsValue(self, baseConfig):
        """
        Given: DB_PORT set explicitly
        When: validate() is called
        Then: The explicit value is kept
        """
        baseConfig['DB_PORT'] = '3307'

        result = ConfigValidator().validate(baseConfig)

        assert result['DB_PORT'] == '3307'

    def test_validate_doesNotMutateInput(self, baseConfig):
        """
        Given: A configuration mapping
        When: validate() is called
        Then: The input mapping is unchanged
        """
        original = dict(baseConfig)

        ConfigValidator().validate(baseConfig)

        assert baseConfig == original


class TestConfigValidatorKnownKeys:
    """Tests for the knownKeys property."""

    def test_knownKeys_includesRequiredAndOptional(self):
        """
        Given: The default validator
        When: knownKeys is read
        Then: Every required and optional key is listed once, required first
        """
        keys = ConfigValidator().knownKeys

        requiredKeys = [key for group in REQUIRED_GROUPS.values() for key in group]
        assert keys[:len(requiredKeys)] == requiredKeys
        assert set(DEFAULTS).issubset(keys)
        assert len(keys) == len(set(keys))
