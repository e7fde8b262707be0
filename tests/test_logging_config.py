################################################################################
# File Name: test_logging_config.py
# Purpose/Description: Tests for logging configuration, masking and context
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | Ralph Agent  | Registered secrets, run log files, stage context
# ================================================================================
################################################################################

"""
Tests for the logging_config module.

Run with:
    pytest tests/test_logging_config.py -v
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

srcPath = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(srcPath))

from common.logging_config import (
    SECRET_MASK,
    LogContext,
    SecretMaskingFilter,
    StructuredFormatter,
    buildRunLogPath,
    clearSecrets,
    registerSecret,
    setupLogging,
)


def makeRecord(msg: str, args: tuple = ()) -> logging.LogRecord:
    return logging.LogRecord('test', logging.INFO, __file__, 1, msg, args, None)


class TestSecretMaskingFilter:
    """Tests for SecretMaskingFilter."""

    def test_filter_registeredSecret_isMasked(self):
        """
        Given: A registered password
        When: A message containing it is filtered
        Then: The password is replaced by the mask
        """
        registerSecret('hunter2-password')
        record = makeRecord("connecting with hunter2-password now")

        SecretMaskingFilter().filter(record)

        assert record.getMessage() == f"connecting with {SECRET_MASK} now"

    def test_filter_secretInArgs_isMasked(self):
        """
        Given: A registered secret passed as a %-style argument
        When: The record is filtered
        Then: The rendered message is masked and args are cleared
        """
        registerSecret('AKIA-SECRET-KEY')
        record = makeRecord("key=%s", ('AKIA-SECRET-KEY',))

        SecretMaskingFilter().filter(record)

        assert SECRET_MASK in record.getMessage()
        assert 'AKIA-SECRET-KEY' not in record.getMessage()
        assert record.args is None

    def test_filter_overlappingSecrets_longestMaskedFirst(self):
        """
        Given: Two registered secrets where one contains the other
        When: A message with the longer one is filtered
        Then: No fragment of the longer secret survives
        """
        registerSecret('abcd')
        registerSecret('abcdefgh')
        record = makeRecord("value abcdefgh")

        SecretMaskingFilter().filter(record)

        assert record.getMessage() == f"value {SECRET_MASK}"

    def test_filter_shortValue_isNotRegistered(self):
        """
        Given: A secret shorter than the minimum length
        When: A message containing it is filtered
        Then: It is left alone
        """
        registerSecret('ab')
        record = makeRecord("tab table")

        SecretMaskingFilter().filter(record)

        assert record.getMessage() == "tab table"

    def test_filter_email_isMasked(self):
        """
        Given: A message containing an email address
        When: It is filtered
        Then: The address is masked
        """
        record = makeRecord("notify ops@example.com")

        SecretMaskingFilter().filter(record)

        assert record.getMessage() == "notify [EMAIL_MASKED]"

    def test_clearSecrets_forgetsValues(self):
        """
        Given: A registered secret that is then cleared
        When: A message containing it is filtered
        Then: It is no longer masked
        """
        registerSecret('temporary-secret')
        clearSecrets()
        record = makeRecord("temporary-secret")

        SecretMaskingFilter().filter(record)

        assert record.getMessage() == "temporary-secret"


class TestStructuredFormatterAndContext:
    """Tests for StructuredFormatter and LogContext."""

    def test_format_withExtra_appendsFields(self):
        """
        Given: A record carrying extra context
        When: It is formatted
        Then: The context is appended as key=value
        """
        record = makeRecord("Uploading")
        record.extra = {'stage': 'uploading'}

        text = StructuredFormatter('%(message)s').format(record)

        assert text == "Uploading | stage=uploading"

    def test_logContext_setsExtraOnRecords(self):
        """
        Given: An active LogContext
        When: A record is created
        Then: It carries the context fields
        """
        with LogContext(stage='dumping'):
            record = logging.getLogRecordFactory()(
                'test', logging.INFO, __file__, 1, 'msg', (), None
            )

        assert record.extra == {'stage': 'dumping'}

    def test_logContext_nested_innermostWins(self):
        """
        Given: Nested LogContexts with the same key
        When: A record is created inside the inner one
        Then: Fields merge and the inner value wins
        """
        with LogContext(stage='uploading', db='shop'):
            with LogContext(stage='confirming_upload'):
                record = logging.getLogRecordFactory()(
                    'test', logging.INFO, __file__, 1, 'msg', (), None
                )

        assert record.extra == {'stage': 'confirming_upload', 'db': 'shop'}

    def test_logContext_exit_restoresFactory(self):
        """
        Given: A LogContext that has exited
        When: The record factory is read
        Then: It is the original one
        """
        original = logging.getLogRecordFactory()

        with LogContext(stage='locking'):
            pass

        assert logging.getLogRecordFactory() is original


class TestRunLogFile:
    """Tests for buildRunLogPath() and setupLogging()."""

    def test_buildRunLogPath_timestamp_formatsName(self, tmp_path):
        """
        Given: A log directory and a timestamp
        When: buildRunLogPath() is called
        Then: The file name is backup_YYYYmmdd_HHMMSS.log
        """
        path = buildRunLogPath(tmp_path, datetime(2026, 10, 19, 3, 15, 0))

        assert path == tmp_path / 'backup_20261019_031500.log'

    def test_setupLogging_withFile_writesMaskedLines(self, tmp_path):
        """
        Given: setupLogging with a log file and a registered secret
        When: A message containing the secret is logged
        Then: The file exists and holds the masked line
        """
        logFile = tmp_path / 'logs' / 'backup_run.log'
        setupLogging(level='INFO', logFile=logFile)
        registerSecret('db-password-123')

        logging.getLogger('backster.test').info("password is db-password-123")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = logFile.read_text()
        assert 'db-password-123' not in content
        assert SECRET_MASK in content

    def test_setupLogging_appendsToExistingFile(self, tmp_path):
        """
        Given: An existing log file
        When: setupLogging opens it
        Then: Earlier content is kept
        """
        logFile = tmp_path / 'backup_run.log'
        logFile.write_text("earlier line\n")

        setupLogging(level='INFO', logFile=logFile)
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert logFile.read_text().startswith("earlier line\n")
