################################################################################
# File Name: lock.py
# Purpose/Description: Single-instance-per-database lock marker
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
Concurrency guard for backup runs.

A lock marker file (<lockDir>/db_backup_<db>.lock) records the owning PID.
It is created with O_CREAT | O_EXCL so the check and the create are a single
atomic step. A marker whose owner is no longer alive is stale: it is logged,
renamed aside, deleted and the create is attempted again.

Usage:
    lockManager = LockManager(Path('/tmp'), 'shop')
    lockManager.acquire()      # raises ConcurrencyError if a live run exists
    try:
        ...
    finally:
        lockManager.release()
"""

import logging
import os
from datetime import datetime
from pathlib import Path

from .exceptions import ConcurrencyError
from .types import LockMarker

logger = logging.getLogger(__name__)

LOCK_FILENAME_FORMAT = 'db_backup_{dbName}.lock'

# A marker younger than this with unreadable content is still being written
LOCK_WRITE_GRACE_SECONDS = 5.0

# Attempts at the exclusive create (each retry follows a stale discard)
MAX_ACQUIRE_ATTEMPTS = 3


def isProcessAlive(pid: int) -> bool:
    """
    Check whether a process exists.

    Args:
        pid: Process identifier

    Returns:
        True if the process exists (even if owned by another user)
    """
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    except OSError:
        return False
    return True


def _readPid(path: Path) -> int | None:
    try:
        content = path.read_text(encoding='utf-8')
    except OSError:
        return None

    firstLine = content.strip().splitlines()[0] if content.strip() else ''
    try:
        return int(firstLine)
    except ValueError:
        return None


class LockManager:
    """
    Owns the lock marker for one database identifier.

    The manager only ever deletes a marker that records its own PID, or one
    whose owner it has verified to be dead.
    """

    def __init__(self, lockDir: Path, dbName: str):
        self._lockDir = Path(lockDir)
        self._dbName = dbName
        self._marker: LockMarker | None = None
        self._markerInode: int | None = None

    @property
    def path(self) -> Path:
        return self._lockDir / LOCK_FILENAME_FORMAT.format(dbName=self._dbName)

    @property
    def isHeld(self) -> bool:
        """True while this manager owns the marker."""
        return self._marker is not None

    def acquire(self) -> LockMarker:
        """
        Create the lock marker for this process.

        Returns:
            The marker now owned by this process

        Raises:
            ConcurrencyError: If a live process already owns the marker
        """
        self._lockDir.mkdir(parents=True, exist_ok=True)

        for _ in range(MAX_ACQUIRE_ATTEMPTS):
            marker = LockMarker(path=self.path, pid=os.getpid(), createdAt=datetime.now())
            try:
                fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
            except FileExistsError:
                self._handleExisting()
                continue

            # Owned from the moment of creation, before the PID is written
            self._marker = marker
            self._markerInode = os.fstat(fd).st_ino
            with os.fdopen(fd, 'w', encoding='utf-8') as lockFile:
                lockFile.write(marker.serialize())

            logger.info(f"Lock acquired | path={self.path} | pid={marker.pid}")
            return marker

        raise ConcurrencyError(
            f"Could not acquire lock for {self._dbName} after {MAX_ACQUIRE_ATTEMPTS} attempts",
            details={'lockFile': str(self.path)}
        )

    def _handleExisting(self) -> None:
        """
        Decide what to do about a marker that already exists.

        Raises:
            ConcurrencyError: If the marker belongs to a live process
        """
        ownerPid = self.readOwnerPid()

        if ownerPid is None:
            if self._markerAge() < LOCK_WRITE_GRACE_SECONDS:
                raise ConcurrencyError(
                    f"Another backup of {self._dbName} is starting",
                    details={'lockFile': str(self.path)}
                )
        elif ownerPid != os.getpid() and isProcessAlive(ownerPid):
            logger.error(f"Another backup process (PID: {ownerPid}) is already running")
            raise ConcurrencyError(
                f"Another backup process (PID: {ownerPid}) is already running",
                details={'pid': ownerPid, 'lockFile': str(self.path)}
            )

        logger.warning(
            f"Found stale lock file (PID: {ownerPid}). Previous backup may have failed."
        )
        self._discardStale(ownerPid)

    def _discardStale(self, ownerPid: int | None) -> None:
        """
        Move the stale marker aside, then delete it if it is still the stale one.

        A marker another run created after the stale one was inspected is
        linked back in place (same inode), unless yet another run has taken
        the lock in the meantime.
        """
        asidePath = self.path.with_name(f"{self.path.name}.stale-{os.getpid()}")
        try:
            os.rename(self.path, asidePath)
        except FileNotFoundError:
            return

        if _readPid(asidePath) == ownerPid:
            asidePath.unlink()
            return

        logger.warning(f"Lock marker changed owner while being discarded | path={self.path}")
        try:
            os.link(asidePath, self.path)
        except FileExistsError:
            pass
        asidePath.unlink()

    def _markerAge(self) -> float:
        try:
            return datetime.now().timestamp() - self.path.stat().st_mtime
        except FileNotFoundError:
            return LOCK_WRITE_GRACE_SECONDS

    def readOwnerPid(self) -> int | None:
        """
        Read the PID recorded in the marker.

        Returns:
            PID, or None if the marker is missing or unreadable
        """
        return _readPid(self.path)

    def _ownsMarker(self) -> bool:
        try:
            inode = self.path.stat().st_ino
        except FileNotFoundError:
            return False
        if inode != self._markerInode:
            return False
        return self.readOwnerPid() in (self._marker.pid, None)

    def release(self) -> bool:
        """
        Remove the marker if this process owns it. Safe to call repeatedly.

        Returns:
            True if a marker was removed
        """
        if self._marker is None:
            return False

        removed = False
        if self._ownsMarker():
            try:
                self.path.unlink()
                removed = True
                logger.info(f"Lock released | path={self.path}")
            except FileNotFoundError:
                pass
        else:
            logger.warning(f"Lock marker no longer owned by this process | path={self.path}")

        self._marker = None
        self._markerInode = None
        return removed
