################################################################################
# File Name: main.py
# Purpose/Description: Main application entry point
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | Ralph Agent  | Run one database backup job per invocation
# ================================================================================
################################################################################

"""
Main application entry point.

Runs a single backup job and exits with the code of its first fatal error:
- CLI argument parsing
- .env loading and per-run log file setup
- Configuration validation (no side effects before it passes)
- Backup job execution via BackupManager

Intended to be invoked by an external scheduler (cron, systemd timer).

Usage:
    python src/main.py --help
    python src/main.py --env-file /etc/backster/shop.env
    python src/main.py --dry-run
"""

import argparse
import os
import sys
from pathlib import Path

# Resolve project paths relative to this script (not CWD)
srcPath = Path(__file__).resolve().parent
projectRoot = srcPath.parent
if str(srcPath) not in sys.path:
    sys.path.insert(0, str(srcPath))

DEFAULT_ENV = str(projectRoot / '.env')

from backster.backup_manager import BackupManager
from backster.config import loadSettings
from backster.exceptions import ConfigError
from backster.types import (
    DEFAULT_LOG_DIR,
    EXIT_CONFIG_ERROR,
    EXIT_INTERRUPTED,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    BackupSettings,
)
from common.error_handler import handleError
from common.logging_config import buildRunLogPath, getLogger, registerSecret, setupLogging
from common.secrets_loader import loadEnvFile

__version__ = '1.0.0'


def parseArgs(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='Back up one MySQL database to S3-compatible object storage',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py                          Run with .env from the project root
  python main.py --env-file shop.env      Run with a specific environment file
  python main.py --dry-run                Validate configuration only
  python main.py --verbose                Run with debug logging
        '''
    )

    parser.add_argument(
        '--env-file', '-e',
        default=DEFAULT_ENV,
        help='Path to environment file (default: .env)'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Validate configuration and exit without running the backup'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose (debug) logging'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(argv)


def configureLogging(verbose: bool = False) -> Path | None:
    """
    Set up console logging plus this run's log file.

    The level and log directory come from LOG_LEVEL / LOG_DIR in the
    environment; they are read before full validation so that validation
    failures are logged too. If the log directory is unusable, logging falls
    back to the console only.

    Returns:
        Path of the run log file, or None when only console logging is active
    """
    level = 'DEBUG' if verbose else os.environ.get('LOG_LEVEL', 'INFO') or 'INFO'
    logFile = buildRunLogPath(os.environ.get('LOG_DIR') or DEFAULT_LOG_DIR)

    try:
        setupLogging(level=level, logFile=logFile)
        return logFile
    except OSError as e:
        setupLogging(level=level)
        getLogger(__name__).warning(f"Cannot write log file {logFile}: {e}. Logging to console only")
        return None


def loadConfiguration(envPath: str | None = None) -> BackupSettings:
    """
    Load and validate configuration.

    Args:
        envPath: Path to environment file (already-set variables win)

    Returns:
        Validated BackupSettings

    Raises:
        ConfigError: If configuration is missing or conflicting
    """
    logger = getLogger(__name__)

    if envPath is not None:
        loadEnvFile(envPath)
    settings = loadSettings(environ=os.environ)
    for secret in settings.secrets:
        registerSecret(secret)
    registerSecret(settings.encryptionKey)
    registerSecret(settings.slackWebhookUrl)

    logger.info(
        f"Configuration loaded | database={settings.dbName} | host={settings.dbHost} "
        f"| bucket={settings.s3Bucket}"
    )
    return settings


def runBackup(settings: BackupSettings, logFile: Path | None = None, dryRun: bool = False) -> int:
    """
    Execute one backup job.

    Args:
        settings: Validated settings
        logFile: This run's log file, referenced in failure notifications
        dryRun: If True, stop after configuration validation

    Returns:
        Exit code of the job
    """
    logger = getLogger(__name__)

    if dryRun:
        logger.info("DRY RUN MODE - Configuration is valid, backup not started")
        return EXIT_SUCCESS

    manager = BackupManager(settings, logFile=logFile)
    result = manager.run()
    return result.exitCode


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = parseArgs(argv)

    loadEnvFile(args.env_file)
    logFile = configureLogging(args.verbose)
    logger = getLogger(__name__)

    try:
        settings = loadConfiguration()
        exitCode = runBackup(settings, logFile=logFile, dryRun=args.dry_run)

        if exitCode == EXIT_SUCCESS:
            logger.info("Backup job completed successfully")
        else:
            logger.warning(f"Backup job completed with exit code {exitCode}")
        return exitCode

    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    except KeyboardInterrupt:
        logger.warning("Backup interrupted by user")
        return EXIT_INTERRUPTED

    except Exception as e:
        handleError(e, context={'operation': 'main'}, reraise=False)
        logger.error(f"Unexpected error: {e}")
        return EXIT_RUNTIME_ERROR


if __name__ == '__main__':
    sys.exit(main())
