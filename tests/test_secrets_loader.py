################################################################################
# File Name: test_secrets_loader.py
# Purpose/Description: Tests for environment loading
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | Ralph Agent  | python-dotenv loading and flat environment reads
# ================================================================================
################################################################################

"""
Tests for the secrets_loader module.

Run with:
    pytest tests/test_secrets_loader.py -v
"""

import os
import sys
from pathlib import Path

srcPath = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(srcPath))

from common.secrets_loader import loadEnvFile, maskSecret, readEnvironment


class TestLoadEnvFile:
    """Tests for loadEnvFile()."""

    def test_loadEnvFile_validFile_setsVariables(self, cleanEnv, tempEnvFile):
        """
        Given: A .env file with backup keys
        When: loadEnvFile() is called
        Then: The keys are in os.environ and reported without values
        """
        loaded = loadEnvFile(str(tempEnvFile))

        assert os.environ['DB_NAME'] == 'shop'
        assert loaded['DB_PASSWORD'] == '[LOADED]'

    def test_loadEnvFile_existingVariable_isNotOverridden(self, cleanEnv, tempEnvFile):
        """
        Given: DB_NAME already set in the environment
        When: loadEnvFile() is called
        Then: The existing value wins
        """
        os.environ['DB_NAME'] = 'from-process'

        loaded = loadEnvFile(str(tempEnvFile))

        assert os.environ['DB_NAME'] == 'from-process'
        assert 'DB_NAME' not in loaded

    def test_loadEnvFile_missingFile_returnsEmpty(self, tmp_path):
        """
        Given: A path with no file
        When: loadEnvFile() is called
        Then: Nothing is loaded
        """
        assert loadEnvFile(str(tmp_path / 'absent.env')) == {}

    def test_loadEnvFile_quotedValue_isUnquoted(self, cleanEnv, tmp_path):
        """
        Given: A .env value in quotes
        When: loadEnvFile() is called
        Then: The quotes are stripped
        """
        envFile = tmp_path / '.env'
        envFile.write_text('SLACK_USERNAME="Backup Bot"\n')

        loadEnvFile(str(envFile))

        assert os.environ['SLACK_USERNAME'] == 'Backup Bot'


class TestReadEnvironment:
    """Tests for readEnvironment()."""

    def test_readEnvironment_presentKeys_strippedValues(self):
        """
        Given: A mapping with padded values
        When: readEnvironment() is called
        Then: Only requested keys are returned, stripped
        """
        environ = {'DB_NAME': '  shop ', 'OTHER': 'x'}

        assert readEnvironment(['DB_NAME', 'DB_HOST'], environ) == {'DB_NAME': 'shop'}

    def test_readEnvironment_defaultSource_usesOsEnviron(self, cleanEnv):
        """
        Given: A variable in os.environ
        When: readEnvironment() is called without a mapping
        Then: It is read from os.environ
        """
        os.environ['DB_HOST'] = 'db.internal'

        assert readEnvironment(['DB_HOST']) == {'DB_HOST': 'db.internal'}


class TestSecretHelpers:
    """Tests for maskSecret()."""

    def test_maskSecret_longValue_showsPrefix(self):
        """
        Given: A long secret
        When: maskSecret() is called
        Then: Only the first 4 characters are visible
        """
        assert maskSecret('abcdefgh') == 'abcd****'

    def test_maskSecret_emptyValue_returnsPlaceholder(self):
        """
        Given: An empty value
        When: maskSecret() is called
        Then: [EMPTY] is returned
        """
        assert maskSecret('') == '[EMPTY]'
