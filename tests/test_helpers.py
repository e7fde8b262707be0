################################################################################
# File Name: test_helpers.py
# Purpose/Description: Tests for duration, size and key formatting helpers
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
Tests for backster.helpers.

Run with:
    pytest tests/test_helpers.py -v
"""

import sys
from pathlib import Path

import pytest

srcPath = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(srcPath))

from backster.helpers import buildObjectKey, formatDuration, formatSize


class TestFormatDuration:
    """Tests for formatDuration()."""

    @pytest.mark.parametrize('seconds, expected', [
        (0, '00:00:00'),
        (59.9, '00:00:59'),
        (3723, '01:02:03'),
        (90061, '25:01:01'),
        (-5, '00:00:00'),
    ])
    def test_formatDuration_values_formatsHhMmSs(self, seconds, expected):
        """
        Given: A number of seconds
        When: formatDuration() is called
        Then: HH:MM:SS is returned
        """
        assert formatDuration(seconds) == expected


class TestFormatSize:
    """Tests for formatSize()."""

    @pytest.mark.parametrize('size, expected', [
        (512, '512B'),
        (1536, '1.5K'),
        (5 * 1024 * 1024, '5.0M'),
        (3 * 1024 ** 3, '3.0G'),
    ])
    def test_formatSize_values_humanReadable(self, size, expected):
        """
        Given: A byte count
        When: formatSize() is called
        Then: A human-readable size is returned
        """
        assert formatSize(size) == expected


class TestBuildObjectKey:
    """Tests for buildObjectKey()."""

    def test_buildObjectKey_withPrefix_joinsParts(self):
        """
        Given: Bucket, prefix and file name
        When: buildObjectKey() is called
        Then: They are joined with single slashes
        """
        key = buildObjectKey('backups', '/mysql/shop/', 'backup_shop_20261019031500.sql.gz')

        assert key == 'backups/mysql/shop/backup_shop_20261019031500.sql.gz'

    def test_buildObjectKey_emptyPrefix_omitsIt(self):
        """
        Given: An empty prefix
        When: buildObjectKey() is called
        Then: The file sits at the bucket root
        """
        assert buildObjectKey('backups', '', 'a.sql') == 'backups/a.sql'
