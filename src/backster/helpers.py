################################################################################
# File Name: helpers.py
# Purpose/Description: Formatting helpers for backup reporting
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
Formatting helpers for durations, sizes and remote locations.
"""

SIZE_UNITS = ['B', 'K', 'M', 'G', 'T', 'P']


def formatDuration(seconds: float) -> str:
    """
    Format a duration as HH:MM:SS.

    Args:
        seconds: Elapsed seconds (negative values are treated as 0)

    Returns:
        Duration string, e.g. '01:02:03'
    """
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def formatSize(sizeBytes: int | float) -> str:
    """
    Format a byte count in human-readable form.

    Args:
        sizeBytes: Size in bytes

    Returns:
        Size string, e.g. '512B', '1.5K', '3.2G'
    """
    size = float(sizeBytes)
    for unit in SIZE_UNITS:
        if size < 1024 or unit == SIZE_UNITS[-1]:
            if unit == 'B':
                return f"{int(size)}B"
            return f"{size:.1f}{unit}"
        size /= 1024
    return f"{size:.1f}{SIZE_UNITS[-1]}"


def buildObjectKey(bucket: str, pathPrefix: str, filename: str) -> str:
    """
    Build the destination key: bucket[/prefix]/filename.

    Args:
        bucket: Bucket name
        pathPrefix: Optional path prefix (slashes at either end are ignored)
        filename: Artifact file name

    Returns:
        Key such as 'backups/nightly/backup_shop_20261019031500.sql.gz'
    """
    parts = [bucket.strip('/')]
    prefix = pathPrefix.strip('/')
    if prefix:
        parts.append(prefix)
    parts.append(filename)
    return '/'.join(parts)
