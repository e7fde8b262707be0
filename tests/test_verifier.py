################################################################################
# File Name: test_verifier.py
# Purpose/Description: Tests for dump integrity verification
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
Tests for backster.verifier.

Run with:
    pytest tests/test_verifier.py -v
"""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

srcPath = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(srcPath))

from backster.exceptions import IntegrityError
from backster.types import Artifact, ArtifactStage
from backster.verifier import containsMarker, verifyDump


def writeDump(path: Path, content: bytes) -> Artifact:
    path.write_bytes(content)
    return Artifact(path=path, stage=ArtifactStage.RAW)


class TestContainsMarker:
    """Tests for containsMarker()."""

    def test_containsMarker_markerAcrossChunkBoundary_isFound(self, tmp_path):
        """
        Given: A marker split across two read chunks
        When: containsMarker() is called
        Then: It is found
        """
        path = tmp_path / 'dump.sql'
        path.write_bytes(b'x' * 10 + b'CREATE TABLE')

        with patch('backster.verifier.READ_CHUNK_BYTES', 16):
            assert containsMarker(path) is True

    def test_containsMarker_absent_returnsFalse(self, tmp_path):
        """
        Given: A file without the marker
        When: containsMarker() is called
        Then: False is returned
        """
        path = tmp_path / 'dump.sql'
        path.write_bytes(b'INSERT INTO t VALUES (1);\n' * 100)

        assert containsMarker(path) is False


class TestVerifyDump:
    """Tests for verifyDump()."""

    def test_verifyDump_validDump_returnsSize(self, tmp_path):
        """
        Given: A dump above the floor containing CREATE TABLE
        When: verifyDump() is called
        Then: Its size is returned
        """
        content = b'-- MySQL dump\nCREATE TABLE `orders` (id int);\n' + b'-- pad\n' * 200
        artifact = writeDump(tmp_path / 'dump.sql', content)

        assert verifyDump(artifact, minSize=1000) == len(content)

    def test_verifyDump_belowFloor_raisesIntegrityError(self, tmp_path):
        """
        Given: A 20-byte dump with a 1000-byte floor
        When: verifyDump() is called
        Then: IntegrityError reports it as suspiciously small
        """
        artifact = writeDump(tmp_path / 'dump.sql', b'CREATE TABLE x (a);\n')

        with pytest.raises(IntegrityError) as exc:
            verifyDump(artifact, minSize=1000)

        assert 'suspiciously small' in exc.value.message

    def test_verifyDump_noTableDefinitions_raisesIntegrityError(self, tmp_path):
        """
        Given: A large dump without CREATE TABLE
        When: verifyDump() is called
        Then: IntegrityError is raised
        """
        artifact = writeDump(tmp_path / 'dump.sql', b'-- empty dump\n' * 200)

        with pytest.raises(IntegrityError) as exc:
            verifyDump(artifact, minSize=1000)

        assert 'table definitions' in exc.value.message

    def test_verifyDump_missingFile_raisesIntegrityError(self, tmp_path):
        """
        Given: No dump file
        When: verifyDump() is called
        Then: IntegrityError is raised
        """
        artifact = Artifact(path=tmp_path / 'absent.sql', stage=ArtifactStage.RAW)

        with pytest.raises(IntegrityError):
            verifyDump(artifact, minSize=1)
