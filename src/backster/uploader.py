################################################################################
# File Name: uploader.py
# Purpose/Description: Object storage upload via s3cmd with bounded retries
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
Upload stage: transfers the final artifact to S3-compatible object storage.

Uses the s3cmd CLI driven by a transient, owner-only config file that
enforces HTTPS with certificate and hostname validation. The transfer is
attempted up to uploadMaxRetries times with a fixed delay in between, and a
reported success only counts once an independent listing finds the object.

Usage:
    uploader = S3Uploader(settings, configPath=job.settings.tempDir / '.s3cfg-shop-42')
    attempt = uploader.upload(artifact)
    uploader.confirm(attempt.remoteUri)
    uploader.removeConfig()
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path

from common.error_handler import retry

from .exceptions import UploadError, UploadUnconfirmedError
from .helpers import buildObjectKey, formatSize
from .types import Artifact, BackupSettings, UploadAttempt

logger = logging.getLogger(__name__)

S3CMD_BINARY = 's3cmd'

# Timeout for the post-upload listing (seconds)
S3CMD_LIST_TIMEOUT = 60

S3CFG_TEMPLATE = """[default]
host_base = {host}
host_bucket = {host}/{bucket}
access_key = {accessKey}
secret_key = {secretKey}
use_https = True
check_ssl_certificate = True
check_ssl_hostname = True
signature_v2 = False
"""


def _parseS3cmdError(stderr: str | None) -> str:
    """
    Extract a meaningful error message from s3cmd stderr.

    Returns:
        The last line mentioning an error, else the last non-empty line
    """
    if not stderr:
        return "Unknown s3cmd error"

    lines = [line.strip() for line in stderr.strip().split('\n') if line.strip()]
    if not lines:
        return "Unknown s3cmd error"
    errorLines = [line for line in lines if 'error' in line.lower() or 'failed' in line.lower()]
    return errorLines[-1] if errorLines else lines[-1]


class S3Uploader:
    """
    Uploads artifacts to one bucket.

    Attributes:
        configPath: Location of the transient s3cmd config file
    """

    def __init__(self, settings: BackupSettings, configPath: Path | None = None):
        """
        Initialize the uploader.

        Args:
            settings: Validated settings (storage endpoint, keys, bucket, retries)
            configPath: Where to write the s3cmd config
                (defaults to <tempDir>/.s3cfg-<db>-<pid>)
        """
        self._settings = settings
        self.configPath = Path(configPath) if configPath else (
            settings.tempDir / f".s3cfg-{settings.dbName}-{os.getpid()}"
        )

    # ================================================================================
    # Configuration file
    # ================================================================================

    def isS3cmdInstalled(self) -> bool:
        return shutil.which(S3CMD_BINARY) is not None

    def writeConfig(self) -> Path:
        """
        Write the s3cmd config with mode 0600.

        Returns:
            Path of the written config
        """
        logger.info("Configuring S3 client...")
        self.configPath.parent.mkdir(parents=True, exist_ok=True)
        content = S3CFG_TEMPLATE.format(
            host=self._settings.s3Host,
            bucket=self._settings.s3Bucket,
            accessKey=self._settings.s3AccessKey,
            secretKey=self._settings.s3SecretKey,
        )
        fd = os.open(self.configPath, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, 0o600)
        with os.fdopen(fd, 'w', encoding='utf-8') as configFile:
            configFile.write(content)
        os.chmod(self.configPath, 0o600)
        return self.configPath

    def removeConfig(self) -> bool:
        """
        Delete the credential file if present.

        Returns:
            True if a file was removed
        """
        try:
            self.configPath.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Could not remove s3cmd config {self.configPath}: {e}")
            return False

    # ================================================================================
    # Destination
    # ================================================================================

    def buildRemoteUri(self, filename: str) -> str:
        """s3://bucket[/prefix]/filename"""
        key = buildObjectKey(self._settings.s3Bucket, self._settings.s3PathPrefix, filename)
        return f"s3://{key}"

    # ================================================================================
    # Primitive operations
    # ================================================================================

    def put(self, localPath: Path, remoteUri: str) -> None:
        """
        Run a single s3cmd put.

        Raises:
            UploadError: If the transfer fails
        """
        cmd = [S3CMD_BINARY, '-c', str(self.configPath), 'put', str(localPath), remoteUri]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise UploadError(f"Upload error: {e}", details={'operation': 'put'}) from e

        if result.returncode != 0:
            raise UploadError(
                _parseS3cmdError(result.stderr),
                details={'operation': 'put', 'exitCode': result.returncode}
            )

    def exists(self, remoteUri: str) -> bool:
        """
        Check that an object is listed at remoteUri.

        Returns:
            True only if the listing succeeds and contains the object
        """
        cmd = [S3CMD_BINARY, '-c', str(self.configPath), 'ls', remoteUri]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=S3CMD_LIST_TIMEOUT
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"Listing {remoteUri} failed: {e}")
            return False

        if result.returncode != 0:
            logger.warning(f"Listing {remoteUri} failed: {_parseS3cmdError(result.stderr)}")
            return False

        return any(line.rstrip().endswith(remoteUri) for line in result.stdout.splitlines())

    # ================================================================================
    # Stage operations
    # ================================================================================

    def upload(self, artifact: Artifact) -> UploadAttempt:
        """
        Upload the artifact with bounded, fixed-delay retries.

        Args:
            artifact: Final artifact

        Returns:
            UploadAttempt describing the successful transfer

        Raises:
            UploadError: If s3cmd is missing or every attempt failed
        """
        maxAttempts = self._settings.uploadMaxRetries
        attempt = UploadAttempt(maxAttempts=maxAttempts, remoteUri=self.buildRemoteUri(artifact.name))

        if not self.isS3cmdInstalled():
            raise UploadError(f"{S3CMD_BINARY} is not installed", details={'operation': 'upload'})

        self.writeConfig()
        logger.info(
            f"Uploading backup to {attempt.remoteUri} ({formatSize(artifact.size)})..."
        )

        @retry(
            maxRetries=maxAttempts - 1,
            initialDelay=self._settings.uploadRetryDelay,
            backoffMultiplier=1.0,
            retryableExceptions=[UploadError]
        )
        def putObject() -> None:
            attempt.count += 1
            try:
                self.put(artifact.path, attempt.remoteUri)
            except UploadError as e:
                attempt.lastError = e.message
                logger.warning(
                    f"Upload failed (attempt {attempt.count} of {maxAttempts}): {e.message}"
                )
                if not attempt.exhausted:
                    logger.info(f"Retrying in {self._settings.uploadRetryDelay} seconds...")
                raise

        try:
            putObject()
        except UploadError as e:
            raise UploadError(
                f"Upload failed after {attempt.count} attempts",
                details={
                    'operation': 'upload',
                    'attempts': attempt.count,
                    'lastError': attempt.lastError,
                }
            ) from e

        logger.info(f"Upload completed successfully (attempt {attempt.count} of {maxAttempts})")
        return attempt

    def confirm(self, remoteUri: str) -> None:
        """
        Independently confirm the object exists at its destination.

        Raises:
            UploadUnconfirmedError: If the object cannot be found
        """
        logger.info("Verifying uploaded file...")
        if not self.exists(remoteUri):
            raise UploadUnconfirmedError(
                f"Cannot verify uploaded file on S3: {remoteUri}",
                details={'operation': 'confirm'}
            )
        logger.info(f"Upload verified: {remoteUri}")
