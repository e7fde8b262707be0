################################################################################
# File Name: transform.py
# Purpose/Description: Compression and encryption stages for backup artifacts
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
Transform pipeline for backup artifacts.

Each stage takes ownership of the current artifact and hands back the next
one:

    <base>.sql --compress--> <base>.sql.gz --encrypt--> <base>.sql.gz.age

A stage writes to a sibling '.part' file, checks that it is non-empty,
renames it into place and only then deletes the previous artifact. On
failure the '.part' file is removed and the previous artifact stays the
authoritative one.

Usage:
    transformer = ArtifactTransformer(settings)
    artifact = transformer.compress(artifact)
    artifact = transformer.encrypt(artifact)
"""

import gzip
import logging
import os
import shutil
import subprocess
from pathlib import Path

from .exceptions import TransformError
from .helpers import formatSize
from .types import (
    COMPRESSED_SUFFIX,
    ENCRYPTED_SUFFIX,
    PARTIAL_SUFFIX,
    Artifact,
    ArtifactStage,
    BackupSettings,
    JobState,
)

logger = logging.getLogger(__name__)

AGE_BINARY = 'age'

COPY_BUFFER_BYTES = 1024 * 1024


def _removeQuietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove {path}: {e}")


class ArtifactTransformer:
    """
    Applies the optional compression and encryption stages.

    Compression always precedes encryption; the caller decides which stages
    run from BackupSettings.compression / BackupSettings.encryption.
    """

    def __init__(self, settings: BackupSettings):
        self._settings = settings

    # ================================================================================
    # Availability
    # ================================================================================

    def isAgeInstalled(self) -> bool:
        """Check that the age binary is on PATH."""
        return shutil.which(AGE_BINARY) is not None

    # ================================================================================
    # Stages
    # ================================================================================

    def compress(self, artifact: Artifact) -> Artifact:
        """
        Gzip the artifact to <name>.gz.

        Args:
            artifact: Current artifact (consumed on success)

        Returns:
            The compressed artifact

        Raises:
            TransformError: If compression fails
        """
        logger.info("Compressing backup file...")
        finalPath = artifact.path.with_name(artifact.name + COMPRESSED_SUFFIX)
        partPath = finalPath.with_name(finalPath.name + PARTIAL_SUFFIX)

        try:
            with open(artifact.path, 'rb') as source, gzip.open(partPath, 'wb') as dest:
                shutil.copyfileobj(source, dest, COPY_BUFFER_BYTES)
        except OSError as e:
            _removeQuietly(partPath)
            raise TransformError(
                f"Compression failed: {e}",
                details={'operation': 'compress', 'artifact': artifact.name},
                stage=JobState.COMPRESSING
            ) from e

        compressed = self._promote(artifact, partPath, finalPath, ArtifactStage.COMPRESSED,
                                   JobState.COMPRESSING)
        logger.info(f"Compression completed: {compressed.name} ({formatSize(compressed.size)})")
        return compressed

    def encrypt(self, artifact: Artifact) -> Artifact:
        """
        Encrypt the artifact with age to <name>.age.

        Recipients come either from the inline key (fed on stdin) or from the
        recipients file; configuration guarantees exactly one is set.

        Args:
            artifact: Current artifact (consumed on success)

        Returns:
            The encrypted artifact

        Raises:
            TransformError: If age is missing or encryption fails
        """
        logger.info("Encrypting backup file...")
        if not self.isAgeInstalled():
            raise TransformError(
                f"{AGE_BINARY} is not installed",
                details={'operation': 'encrypt'},
                stage=JobState.ENCRYPTING
            )

        finalPath = artifact.path.with_name(artifact.name + ENCRYPTED_SUFFIX)
        partPath = finalPath.with_name(finalPath.name + PARTIAL_SUFFIX)

        if self._settings.encryptionKey:
            cmd = [AGE_BINARY, '-R', '-', '-o', str(partPath), str(artifact.path)]
            stdin = self._settings.encryptionKey + '\n'
        else:
            cmd = [AGE_BINARY, '-R', str(self._settings.encryptionFile), '-o', str(partPath),
                   str(artifact.path)]
            stdin = None

        try:
            result = subprocess.run(cmd, input=stdin, capture_output=True, text=True)
        except OSError as e:
            _removeQuietly(partPath)
            raise TransformError(
                f"Encryption failed: {e}",
                details={'operation': 'encrypt', 'artifact': artifact.name},
                stage=JobState.ENCRYPTING
            ) from e
        except BaseException:
            _removeQuietly(partPath)
            raise

        if result.returncode != 0:
            _removeQuietly(partPath)
            raise TransformError(
                f"Encryption failed with exit code {result.returncode}",
                details={
                    'operation': 'encrypt',
                    'artifact': artifact.name,
                    'stderr': (result.stderr or '').strip(),
                },
                stage=JobState.ENCRYPTING
            )

        encrypted = self._promote(artifact, partPath, finalPath, ArtifactStage.ENCRYPTED,
                                  JobState.ENCRYPTING)
        logger.info(f"Encryption completed: {encrypted.name} ({formatSize(encrypted.size)})")
        return encrypted

    # ================================================================================
    # Ownership transfer
    # ================================================================================

    def _promote(
        self,
        previous: Artifact,
        partPath: Path,
        finalPath: Path,
        stage: ArtifactStage,
        jobState: JobState
    ) -> Artifact:
        """
        Make the stage output current, then drop the previous artifact.

        Raises:
            TransformError: If the output is missing or empty
        """
        try:
            size = partPath.stat().st_size
        except FileNotFoundError:
            size = -1

        if size <= 0:
            _removeQuietly(partPath)
            raise TransformError(
                f"{stage.value.capitalize()} output is missing or empty",
                details={'operation': 'promote', 'artifact': finalPath.name},
                stage=jobState
            )

        try:
            os.replace(partPath, finalPath)
        except OSError as e:
            _removeQuietly(partPath)
            raise TransformError(
                f"Could not move {partPath.name} into place: {e}",
                details={'operation': 'promote'},
                stage=jobState
            ) from e

        _removeQuietly(previous.path)
        return Artifact(path=finalPath, stage=stage)
