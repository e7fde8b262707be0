################################################################################
# File Name: secrets_loader.py
# Purpose/Description: Secure loading of environment variables and secrets
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Switched .env parsing to python-dotenv
# ================================================================================
################################################################################

"""
Secrets management module.

Provides secure loading of configuration from the environment:
- Loads environment variables from a .env file (python-dotenv)
- Never overrides variables already set in the process environment
- Reads a fixed set of keys into a flat configuration mapping
- Never logs or exposes secret values

Usage:
    from common.secrets_loader import loadEnvFile, readEnvironment

    loadEnvFile('.env')
    rawConfig = readEnvironment(['DB_NAME', 'DB_PASSWORD'])
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Mapping

from dotenv import dotenv_values

logger = logging.getLogger(__name__)


def loadEnvFile(envPath: str | None = None) -> dict[str, str]:
    """
    Load environment variables from a .env file.

    Args:
        envPath: Path to .env file. Defaults to .env in current directory.

    Returns:
        Dictionary of loaded variable names mapped to '[LOADED]'

    Note:
        Does not override existing environment variables.
    """
    if envPath is None:
        envPath = '.env'

    loadedVars: dict[str, str] = {}
    envFile = Path(envPath)

    if not envFile.is_file():
        logger.debug(f".env file not found at {envPath}")
        return loadedVars

    for key, value in dotenv_values(envFile).items():
        if value is None or key in os.environ:
            continue
        os.environ[key] = value
        loadedVars[key] = '[LOADED]'  # Don't log actual value

    logger.info(f"Loaded {len(loadedVars)} variables from {envPath}")
    return loadedVars


def readEnvironment(
    keys: Iterable[str],
    environ: Mapping[str, str] | None = None
) -> dict[str, str]:
    """
    Collect the given keys from the environment into a flat mapping.

    Unset keys are omitted, surrounding whitespace is stripped.

    Args:
        keys: Variable names to read
        environ: Source mapping (defaults to os.environ)

    Returns:
        Dictionary of key to value for the keys that are set
    """
    source = os.environ if environ is None else environ
    return {key: source[key].strip() for key in keys if key in source}


def maskSecret(value: str, showChars: int = 4) -> str:
    """
    Mask a secret value for display.

    Args:
        value: Secret value to mask
        showChars: Number of characters to show at start

    Returns:
        Masked string (e.g., "secr***")
    """
    if not value:
        return '[EMPTY]'

    if len(value) <= showChars:
        return '*' * len(value)

    return value[:showChars] + '*' * (len(value) - showChars)
