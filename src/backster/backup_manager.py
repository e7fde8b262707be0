################################################################################
# File Name: backup_manager.py
# Purpose/Description: BackupManager class orchestrating one backup job
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
BackupManager class for backup job orchestration.

Runs the stages of one job in order:

    LOCKING -> DUMPING -> VERIFYING -> COMPRESSING? -> ENCRYPTING?
    -> UPLOADING -> CONFIRMING_UPLOAD -> SUCCEEDED

Any stage failure moves the job to FAILED and skips the remaining stages.
Either way the finalizer runs exactly once. If this job holds the lock it
deletes every local artifact variant and the storage credential file, then
releases the lock; a job stopped by another live run touches neither. It
always records the duration and sends the notification. SIGINT/SIGTERM are
turned into JobInterruptedError so they reach the same finalizer.

Usage:
    manager = BackupManager(settings, logFile=logPath)
    result = manager.run()
    sys.exit(result.exitCode)
"""

import logging
import signal
import threading
from typing import Any, Optional

from common.error_handler import formatError
from common.logging_config import LogContext

from .dump import MysqlDumper
from .exceptions import BackupError, ConcurrencyError, JobInterruptedError
from .helpers import formatDuration, formatSize
from .lock import LockManager
from .notifier import WebhookNotifier, buildEvent
from .transform import ArtifactTransformer
from .types import (
    EXIT_SUCCESS,
    Artifact,
    BackupJob,
    BackupResult,
    BackupSettings,
    JobState,
    NotificationStatus,
)
from .uploader import S3Uploader
from .verifier import verifyDump

logger = logging.getLogger(__name__)

WORKSPACE_MODE = 0o700


class BackupManager:
    """
    Orchestrates one backup job.

    Collaborators can be injected for testing; by default they are built
    from the settings.

    Example:
        manager = BackupManager(settings)
        result = manager.run()
        if not result.success:
            print(result.error)
    """

    def __init__(
        self,
        settings: BackupSettings,
        logFile: Optional[Any] = None,
        lockManager: Optional[LockManager] = None,
        dumper: Optional[MysqlDumper] = None,
        transformer: Optional[ArtifactTransformer] = None,
        uploader: Optional[S3Uploader] = None,
        notifier: Optional[WebhookNotifier] = None
    ):
        """
        Initialize the backup manager.

        Args:
            settings: Validated, immutable settings
            logFile: This run's log file, referenced in failure reports
            lockManager: Concurrency guard (default: LockManager on settings.lockDir)
            dumper: Dump stage (default: MysqlDumper)
            transformer: Compression/encryption stages (default: ArtifactTransformer)
            uploader: Upload stage (default: S3Uploader)
            notifier: Notification channel (default: WebhookNotifier)
        """
        self._settings = settings
        self._logFile = logFile
        self._lockManager = lockManager or LockManager(settings.lockDir, settings.dbName)
        self._dumper = dumper or MysqlDumper(settings)
        self._transformer = transformer or ArtifactTransformer(settings)
        self._uploader = uploader or S3Uploader(settings)
        self._notifier = notifier or WebhookNotifier(settings)

        self._state = JobState.VALIDATING
        self._job: Optional[BackupJob] = None
        self._artifact: Optional[Artifact] = None
        self._remoteUri: Optional[str] = None
        self._finalized = False
        self._finalizing = False
        self._originalHandlers: dict[int, Any] = {}

    # ================================================================================
    # Status
    # ================================================================================

    def getState(self) -> JobState:
        return self._state

    def getJob(self) -> Optional[BackupJob]:
        return self._job

    def _transition(self, state: JobState) -> None:
        logger.debug(f"State {self._state.value} -> {state.value}")
        self._state = state

    # ================================================================================
    # Signal handling
    # ================================================================================

    def registerSignalHandlers(self) -> None:
        """
        Route SIGINT/SIGTERM into the job's error path.

        Only possible from the main thread; elsewhere this is a no-op.
        """
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in (signal.SIGINT, getattr(signal, 'SIGTERM', None)):
            if signum is not None:
                self._originalHandlers[signum] = signal.signal(signum, self._handleSignal)
        logger.debug("Signal handlers registered")

    def restoreSignalHandlers(self) -> None:
        for signum, handler in self._originalHandlers.items():
            signal.signal(signum, handler)
        self._originalHandlers.clear()
        logger.debug("Signal handlers restored")

    def _handleSignal(self, signum: int, frame: Optional[Any]) -> None:
        signalName = signal.Signals(signum).name
        if self._finalizing:
            logger.warning(f"Received signal {signalName} during cleanup, finishing cleanup first")
            return
        logger.warning(f"Received signal {signalName} during {self._state.value}")
        raise JobInterruptedError(
            f"Backup interrupted by {signalName}",
            details={'signal': signalName},
            stage=self._state
        )

    # ================================================================================
    # Job execution
    # ================================================================================

    def run(self) -> BackupResult:
        """
        Run the whole job and finalize it.

        Returns:
            BackupResult with the outcome and exit code; never raises for
            job failures
        """
        self._job = BackupJob.create(self._settings, logFile=self._logFile)
        self._artifact = None
        self._remoteUri = None
        self._finalized = False
        self._finalizing = False
        error: Optional[BackupError] = None
        attempts = 0

        logger.info("====== Database Backup Started ======")
        self.registerSignalHandlers()
        try:
            try:
                attempts = self._execute(self._job)
                self._transition(JobState.SUCCEEDED)
            except BackupError as e:
                error = e
            except Exception as e:
                error = BackupError(
                    f"Unexpected error: {e}",
                    details={'exception': type(e).__name__},
                    stage=self._state
                )
                error.__cause__ = e
                logger.exception(f"Unexpected error during {self._state.value}")
            self._finalizing = True
            if error is not None:
                self._logFailure(error)
                self._transition(JobState.FAILED)
            return self._finalize(self._job, error, attempts)
        finally:
            self.restoreSignalHandlers()

    def _execute(self, job: BackupJob) -> int:
        """
        Run the stages in order.

        Returns:
            Number of upload attempts made

        Raises:
            BackupError: On the first stage failure
        """
        settings = self._settings

        with LogContext(stage=JobState.LOCKING.value):
            self._transition(JobState.LOCKING)
            self._lockManager.acquire()
            self._prepareWorkspace()

        with LogContext(stage=JobState.DUMPING.value):
            self._transition(JobState.DUMPING)
            self._dumper.checkConnection()
            estimatedMb = self._dumper.estimateSizeMb()
            self._artifact = self._dumper.dump(job.rawPath, estimatedMb)

        with LogContext(stage=JobState.VERIFYING.value):
            self._transition(JobState.VERIFYING)
            verifyDump(self._artifact, settings.minBackupSize)

        if settings.compression:
            with LogContext(stage=JobState.COMPRESSING.value):
                self._transition(JobState.COMPRESSING)
                self._artifact = self._transformer.compress(self._artifact)

        if settings.encryption:
            with LogContext(stage=JobState.ENCRYPTING.value):
                self._transition(JobState.ENCRYPTING)
                self._artifact = self._transformer.encrypt(self._artifact)

        with LogContext(stage=JobState.UPLOADING.value):
            self._transition(JobState.UPLOADING)
            attempt = self._uploader.upload(self._artifact)

        with LogContext(stage=JobState.CONFIRMING_UPLOAD.value):
            self._transition(JobState.CONFIRMING_UPLOAD)
            self._uploader.confirm(attempt.remoteUri)

        self._remoteUri = attempt.remoteUri
        return attempt.count

    def _prepareWorkspace(self) -> None:
        tempDir = self._settings.tempDir
        tempDir.mkdir(parents=True, exist_ok=True)
        tempDir.chmod(WORKSPACE_MODE)

    def _logFailure(self, error: BackupError) -> None:
        operation = error.details.get('operation') if error.details else None
        location = f" in {operation}" if operation else ""
        logger.error(
            f"ERROR: Backup failed at stage {error.stage.value}{location} "
            f"(exit code {error.exitCode}): {formatError(error)}"
        )

    # ================================================================================
    # Finalizer
    # ================================================================================

    def _finalize(
        self,
        job: BackupJob,
        error: Optional[BackupError],
        attempts: int
    ) -> BackupResult:
        """
        Release resources, account for the run and notify. Runs once per job.
        """
        if self._finalized:
            raise RuntimeError("Job already finalized")
        self._finalized = True
        self._finalizing = True
        lastState = self._state

        with LogContext(stage=JobState.FINALIZED.value):
            finalName = self._artifact.name if self._artifact else None
            finalSize = self._artifact.size if self._artifact and self._artifact.exists() else None

            # Local files exist only once the lock is ours; names can collide
            # with a concurrent run started in the same second
            removed = 0
            if self._lockManager.isHeld:
                removed = self._removeLocalFiles(job)
                self._lockManager.release()
            elif isinstance(error, ConcurrencyError):
                logger.info("Leaving the other run's lock marker and files in place")

            duration = job.elapsedSeconds()
            self._transition(JobState.FINALIZED)

            if error is None:
                remoteUri = self._remoteUri
                result = BackupResult(
                    success=True,
                    exitCode=EXIT_SUCCESS,
                    state=lastState,
                    durationSeconds=duration,
                    artifactName=finalName,
                    size=finalSize,
                    remoteUri=remoteUri,
                    uploadAttempts=attempts,
                )
                logger.info(
                    f"Backup process completed successfully in {formatDuration(duration)}"
                )
                self._notifier.notifySuccess(buildEvent(
                    NotificationStatus.SUCCESS,
                    self._buildSuccessMessage(result),
                    duration,
                    location=remoteUri,
                ))
            else:
                result = BackupResult(
                    success=False,
                    exitCode=error.exitCode,
                    state=error.stage,
                    durationSeconds=duration,
                    artifactName=finalName,
                    size=finalSize,
                    uploadAttempts=attempts,
                    error=error.message,
                    errorType=type(error).__name__,
                )
                self._notifier.notifyFailure(buildEvent(
                    NotificationStatus.FAILURE,
                    self._buildFailureMessage(result),
                    duration,
                ))

            logger.info(f"Removed {removed} local file(s) | result={result.toDict()}")
            logger.info("====== Database Backup Finished ======")
            return result

    def _removeLocalFiles(self, job: BackupJob) -> int:
        removed = 0
        for path in job.artifactCandidates():
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.error(f"Could not remove {path}: {e}")
        if self._uploader.removeConfig():
            removed += 1
        return removed

    # ================================================================================
    # Reporting
    # ================================================================================

    def _buildSuccessMessage(self, result: BackupResult) -> str:
        size = formatSize(result.size) if result.size is not None else 'unknown'
        return (
            "Backup completed successfully\n"
            f"• Database: {self._settings.dbName}\n"
            f"• Backup file: {result.artifactName}\n"
            f"• Size: {size}\n"
            f"• Duration: {formatDuration(result.durationSeconds)}\n"
            f"• S3 Location: {result.remoteUri}"
        )

    def _buildFailureMessage(self, result: BackupResult) -> str:
        logPointer = str(self._logFile) if self._logFile else 'the server logs'
        return (
            f"Backup FAILED for {self._settings.dbName}\n"
            f"• Error: {result.errorType} at stage {result.state.value}: {result.error}\n"
            f"• Exit code: {result.exitCode}\n"
            f"• Duration: {formatDuration(result.durationSeconds)}\n"
            f"• Please check {logPointer} for details."
        )
