################################################################################
# File Name: verifier.py
# Purpose/Description: Structural sanity checks on a produced dump
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
Integrity verifier for raw dumps.

A dump is rejected when it is smaller than the size floor or when it does
not contain the CREATE TABLE marker. Both checks run before any transform.
"""

import logging
from pathlib import Path

from .exceptions import IntegrityError
from .helpers import formatSize
from .types import STRUCTURE_MARKER, Artifact

logger = logging.getLogger(__name__)

READ_CHUNK_BYTES = 1024 * 1024


def containsMarker(path: Path, marker: bytes = STRUCTURE_MARKER) -> bool:
    """
    Scan a file for a byte marker without loading it into memory.

    Chunks overlap by len(marker) - 1 bytes so a marker split across a
    chunk boundary is still found.
    """
    overlap = len(marker) - 1
    tail = b''
    with open(path, 'rb') as f:
        while True:
            chunk = f.read(READ_CHUNK_BYTES)
            if not chunk:
                return False
            window = tail + chunk
            if marker in window:
                return True
            tail = window[-overlap:] if overlap > 0 else b''


def verifyDump(
    artifact: Artifact,
    minSize: int,
    marker: bytes = STRUCTURE_MARKER
) -> int:
    """
    Verify a raw dump before it is transformed.

    Args:
        artifact: The raw dump artifact
        minSize: Minimum acceptable size in bytes
        marker: Structural marker that must appear in the dump

    Returns:
        Verified size in bytes

    Raises:
        IntegrityError: If the dump is missing, too small or lacks the marker
    """
    logger.info("Verifying backup integrity...")

    if not artifact.exists():
        raise IntegrityError(
            f"Backup file is missing: {artifact.name}",
            details={'operation': 'verifyDump'}
        )

    size = artifact.size
    if size < minSize:
        raise IntegrityError(
            f"Backup file is suspiciously small ({size} bytes)",
            details={'operation': 'verifyDump', 'size': size, 'minSize': minSize}
        )

    if not containsMarker(artifact.path, marker):
        raise IntegrityError(
            "Backup doesn't contain table definitions",
            details={'operation': 'verifyDump', 'marker': marker.decode('ascii', errors='replace')}
        )

    logger.info(f"Backup integrity verified: {artifact.name} ({formatSize(size)})")
    return size
