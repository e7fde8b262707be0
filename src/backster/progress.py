################################################################################
# File Name: progress.py
# Purpose/Description: Observational progress reporting for a running dump
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
Dump progress monitor.

Runs in a daemon thread and periodically logs how many bytes of the dump
file have been written against the estimated database size. It only stats
the output file; it never reads from or writes to the dump stream.
"""

import logging
import threading
from pathlib import Path

from .helpers import formatSize

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_INTERVAL = 10.0


class DumpProgressMonitor:
    """
    Logs dump progress until stopped.

    Example:
        with DumpProgressMonitor(path, expectedBytes=512 * 1024 * 1024):
            runDump()
    """

    def __init__(
        self,
        path: Path,
        expectedBytes: int,
        interval: float = DEFAULT_PROGRESS_INTERVAL
    ):
        self._path = Path(path)
        self._expectedBytes = max(expectedBytes, 1)
        self._interval = interval
        self._stopEvent = threading.Event()
        self._thread: threading.Thread | None = None
        self.reports = 0

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run,
            name='dump-progress',
            daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stopEvent.set()
        if self._thread is not None:
            self._thread.join(timeout=self._interval + 1.0)
            self._thread = None

    def __enter__(self) -> 'DumpProgressMonitor':
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()

    def _run(self) -> None:
        while not self._stopEvent.wait(self._interval):
            self.report()

    def report(self) -> float | None:
        """
        Log the current progress.

        Returns:
            Percentage written (capped at 100), or None if the file is missing
        """
        try:
            written = self._path.stat().st_size
        except FileNotFoundError:
            return None

        percent = min(100.0, written * 100.0 / self._expectedBytes)
        self.reports += 1
        logger.info(
            f"Dump progress: {formatSize(written)} of ~{formatSize(self._expectedBytes)} "
            f"({percent:.1f}%)"
        )
        return percent
