#!/usr/bin/env python3
################################################################################
# File Name: validate_config.py
# Purpose/Description: Validate backup configuration and tooling before running
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | Ralph Agent  | Check backup settings and external tools
# ================================================================================
################################################################################

"""
Configuration validation script.

Run this script to check a backup configuration before scheduling it.
Nothing is locked, dumped or uploaded.

Usage:
    python validate_config.py
    python validate_config.py --env-file /etc/backster/shop.env
    python validate_config.py --verbose
"""

import argparse
import os
import shutil
import sys
from pathlib import Path

# Add src to path
srcPath = Path(__file__).parent / 'src'
if str(srcPath) not in sys.path:
    sys.path.insert(0, str(srcPath))

from backster.config import loadSettings
from backster.exceptions import ConfigError
from backster.types import BackupSettings
from common.secrets_loader import loadEnvFile, maskSecret

REQUIRED_TOOLS = ['mysql', 'mysqldump', 's3cmd']
ENCRYPTION_TOOL = 'age'


def printHeader(message: str) -> None:
    """Print a section header."""
    print()
    print("=" * 60)
    print(f"  {message}")
    print("=" * 60)


def printStatus(label: str, status: bool, details: str = "") -> None:
    """Print a status line with check mark or X."""
    icon = "[OK]" if status else "[X]"
    detail = f" - {details}" if details else ""
    print(f"  {icon} {label}{detail}")


def validateEnvironment(envPath: str) -> bool:
    """Load the .env file if present."""
    printHeader("Environment File")

    if not Path(envPath).is_file():
        printStatus(f"{envPath} exists", False, "using process environment only")
        print()
        print("  To fix: cp .env.example .env")
        print("  Then edit .env with your values")
        return True

    loaded = loadEnvFile(envPath)
    printStatus(f"{envPath} exists", True, f"{len(loaded)} variables loaded")
    return True


def validateSettings(verbose: bool = False) -> BackupSettings | None:
    """Validate the backup configuration."""
    printHeader("Configuration")

    try:
        settings = loadSettings(environ=os.environ)
    except ConfigError as e:
        printStatus("Configuration valid", False, e.message)
        missing = e.details.get('missing') if e.details else None
        if missing:
            print()
            print("  Missing fields:")
            for field in missing:
                print(f"    - {field}")
        return None

    printStatus("Configuration valid", True)
    printStatus("Compression", True, "gzip" if settings.compression else "off")
    printStatus("Encryption", True, "age" if settings.encryption else "off")
    printStatus("Notifications", True, "on" if settings.slackEnabled else "off")

    if verbose:
        print()
        print("  Settings:")
        for key, value in settings.toDict().items():
            print(f"    - {key}: {value}")
        print(f"    - s3AccessKey: {maskSecret(settings.s3AccessKey)}")

    return settings


def validateDependencies() -> bool:
    """Validate Python dependencies are installed."""
    printHeader("Dependencies")

    requiredPackages = [
        ('python-dotenv', 'dotenv'),
        ('pydantic', 'pydantic'),
        ('requests', 'requests'),
    ]

    allInstalled = True

    for packageName, importName in requiredPackages:
        try:
            __import__(importName)
            printStatus(packageName, True)
        except ImportError:
            printStatus(packageName, False, "not installed")
            allInstalled = False

    if not allInstalled:
        print()
        print("  To fix: pip install -e .")

    return allInstalled


def validateTools(settings: BackupSettings | None) -> bool:
    """Check that the external binaries are on PATH."""
    printHeader("External Tools")

    tools = list(REQUIRED_TOOLS)
    if settings is not None and settings.encryption:
        tools.append(ENCRYPTION_TOOL)

    allFound = True
    for tool in tools:
        location = shutil.which(tool)
        printStatus(tool, location is not None, location or "not found on PATH")
        if location is None:
            allFound = False

    return allFound


def main(argv: list[str] | None = None) -> int:
    """Run all validations."""
    parser = argparse.ArgumentParser(description='Validate backup configuration')
    parser.add_argument('--env-file', '-e', default='.env',
                        help='Path to environment file')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Show detailed output')
    args = parser.parse_args(argv)

    print()
    print("Configuration Validation")
    print("========================")

    results = []

    results.append(('Environment', validateEnvironment(args.env_file)))
    results.append(('Dependencies', validateDependencies()))
    settings = validateSettings(args.verbose)
    results.append(('Configuration', settings is not None))
    results.append(('External Tools', validateTools(settings)))

    # Summary
    printHeader("Summary")

    allPassed = True
    for name, passed in results:
        printStatus(name, passed)
        if not passed:
            allPassed = False

    print()
    if allPassed:
        print("All validations passed! Ready to run.")
        return 0
    else:
        print("Some validations failed. Please fix the issues above.")
        return 1


if __name__ == '__main__':
    sys.exit(main())
