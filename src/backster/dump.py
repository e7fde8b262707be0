################################################################################
# File Name: dump.py
# Purpose/Description: MySQL connectivity probe, size estimate and dump
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
Dump stage: produces a consistent logical snapshot of the database.

Drives the mysql and mysqldump client binaries via subprocess:
- checkConnection(): trivial query before committing to a full dump
- estimateSizeMb(): best-effort size from information_schema
- dump(): non-locking dump streamed straight into the raw artifact file,
  bounded by a hard wall-clock timeout

The password only reaches the children through MYSQL_PWD in their
environment, never through argv.

Usage:
    dumper = MysqlDumper(settings)
    dumper.checkConnection()
    artifact = dumper.dump(job.rawPath, estimatedMb=dumper.estimateSizeMb())
"""

import logging
import os
import subprocess
from pathlib import Path

from .exceptions import ConnectivityError, DumpError, DumpTimeoutError
from .helpers import formatSize
from .progress import DumpProgressMonitor
from .types import Artifact, ArtifactStage, BackupSettings

logger = logging.getLogger(__name__)

MYSQL_BINARY = 'mysql'
MYSQLDUMP_BINARY = 'mysqldump'

# Timeout for the probe and the size query (seconds)
PROBE_TIMEOUT = 30

SIZE_ESTIMATE_QUERY = (
    "SELECT ROUND(SUM(data_length + index_length) / 1024 / 1024, 2) "
    "FROM information_schema.tables "
    "WHERE table_schema = '{dbName}' "
    "GROUP BY table_schema;"
)

# Lines of stderr kept in error details
STDERR_TAIL_LINES = 5


def _stderrTail(stderr: str | bytes | None) -> str:
    if not stderr:
        return ''
    if isinstance(stderr, bytes):
        stderr = stderr.decode('utf-8', errors='replace')
    lines = [line.strip() for line in stderr.strip().splitlines() if line.strip()]
    return '\n'.join(lines[-STDERR_TAIL_LINES:])


class MysqlDumper:
    """
    Runs the MySQL client tools for one database.

    Attributes:
        progressInterval: Seconds between progress reports while dumping
    """

    def __init__(self, settings: BackupSettings, progressInterval: float = 10.0):
        self._settings = settings
        self.progressInterval = progressInterval

    # ================================================================================
    # Command construction
    # ================================================================================

    def _connectionArgs(self) -> list[str]:
        return [
            '-h', self._settings.dbHost,
            '-P', str(self._settings.dbPort),
            '-u', self._settings.dbUsername,
        ]

    def _childEnv(self) -> dict[str, str]:
        env = dict(os.environ)
        env['MYSQL_PWD'] = self._settings.dbPassword
        return env

    def buildDumpCommand(self) -> list[str]:
        return [
            MYSQLDUMP_BINARY,
            *self._connectionArgs(),
            *self._settings.dumpParameters,
            self._settings.dbName,
        ]

    # ================================================================================
    # Probe and estimate
    # ================================================================================

    def checkConnection(self) -> None:
        """
        Verify the database answers a trivial query.

        Raises:
            ConnectivityError: If the probe fails for any reason
        """
        logger.info("Verifying database connection...")
        cmd = [MYSQL_BINARY, *self._connectionArgs(), '-e', 'SELECT 1', self._settings.dbName]

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=PROBE_TIMEOUT,
                env=self._childEnv(),
            )
        except FileNotFoundError as e:
            raise ConnectivityError(
                f"{MYSQL_BINARY} client not installed",
                details={'operation': 'checkConnection'}
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ConnectivityError(
                f"Database connection check timed out after {PROBE_TIMEOUT}s",
                details={'operation': 'checkConnection', 'host': self._settings.dbHost}
            ) from e

        if result.returncode != 0:
            raise ConnectivityError(
                "Could not connect to database. Please check credentials and connectivity.",
                details={
                    'operation': 'checkConnection',
                    'host': self._settings.dbHost,
                    'stderr': _stderrTail(result.stderr),
                }
            )

        logger.info(f"Database {self._settings.dbName} on {self._settings.dbHost} is reachable")

    def estimateSizeMb(self) -> float | None:
        """
        Estimate the dataset size.

        Returns:
            Size in megabytes, or None when no estimate is available
        """
        logger.info("Estimating database size...")
        query = SIZE_ESTIMATE_QUERY.format(dbName=self._settings.dbName.replace("'", "''"))
        cmd = [MYSQL_BINARY, *self._connectionArgs(), '-N', '-e', query, self._settings.dbName]

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=PROBE_TIMEOUT,
                env=self._childEnv(),
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"Size estimate unavailable: {e}")
            return None

        if result.returncode != 0:
            logger.warning(f"Size estimate query failed: {_stderrTail(result.stderr)}")
            return None

        output = result.stdout.strip()
        try:
            sizeMb = float(output.splitlines()[0]) if output else None
        except ValueError:
            sizeMb = None

        if sizeMb is None:
            logger.info("Estimated database size: unknown")
        else:
            logger.info(f"Estimated database size: {sizeMb} MB")
        return sizeMb

    # ================================================================================
    # Dump
    # ================================================================================

    def dump(self, outputPath: Path, estimatedMb: float | None = None) -> Artifact:
        """
        Dump the database into outputPath.

        Args:
            outputPath: Raw artifact path (<base>.sql)
            estimatedMb: Size estimate; enables progress reporting when set

        Returns:
            The raw Artifact

        Raises:
            DumpTimeoutError: If the dump exceeds the configured timeout
            DumpError: If mysqldump is missing or exits unsuccessfully
        """
        outputPath = Path(outputPath)
        timeout = self._settings.dumpTimeout
        cmd = self.buildDumpCommand()

        logger.info(
            f"Starting backup of database {self._settings.dbName} from {self._settings.dbHost}..."
        )

        monitor = None
        if estimatedMb:
            monitor = DumpProgressMonitor(
                outputPath,
                expectedBytes=int(estimatedMb * 1024 * 1024),
                interval=self.progressInterval,
            )

        with open(outputPath, 'wb') as outputFile:
            try:
                process = subprocess.Popen(
                    cmd,
                    stdout=outputFile,
                    stderr=subprocess.PIPE,
                    env=self._childEnv(),
                )
            except FileNotFoundError as e:
                raise DumpError(
                    f"{MYSQLDUMP_BINARY} not installed",
                    details={'operation': 'dump'}
                ) from e

            if monitor is not None:
                monitor.start()
            try:
                _, stderr = process.communicate(timeout=timeout)
            except subprocess.TimeoutExpired as e:
                process.kill()
                process.communicate()
                raise DumpTimeoutError(
                    f"Database dump exceeded the {timeout}s timeout",
                    details={'operation': 'dump', 'timeout': timeout}
                ) from e
            except BaseException:
                # Interrupted by a signal: do not leave mysqldump running
                process.kill()
                process.wait()
                raise
            finally:
                if monitor is not None:
                    monitor.stop()

        if process.returncode != 0:
            raise DumpError(
                f"{MYSQLDUMP_BINARY} failed with exit code {process.returncode}",
                details={'operation': 'dump', 'stderr': _stderrTail(stderr)}
            )

        artifact = Artifact(path=outputPath, stage=ArtifactStage.RAW)
        logger.info(f"Database dump completed: {artifact.name} ({formatSize(artifact.size)})")
        return artifact
