################################################################################
# File Name: __init__.py
# Purpose/Description: Common utilities package initialization
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Exports for environment-driven configuration
# ================================================================================
################################################################################

"""
Common utilities package.

This package provides shared functionality used across the application:
- Configuration validation
- Environment and secrets loading
- Logging configuration
- Error handling

Usage:
    from common.config_validator import ConfigValidator
    from common.secrets_loader import loadEnvFile, readEnvironment
    from common.logging_config import getLogger
    from common.error_handler import RetryableError
"""

from .config_validator import ConfigValidationError, ConfigValidator
from .error_handler import (
    BaseError,
    ErrorCategory,
    RetryableError,
    formatError,
    handleError,
    retry,
)
from .logging_config import LogContext, getLogger, registerSecret, setupLogging
from .secrets_loader import loadEnvFile, maskSecret, readEnvironment

__all__ = [
    'ConfigValidator',
    'ConfigValidationError',
    'loadEnvFile',
    'readEnvironment',
    'maskSecret',
    'getLogger',
    'setupLogging',
    'registerSecret',
    'LogContext',
    'BaseError',
    'ErrorCategory',
    'RetryableError',
    'formatError',
    'handleError',
    'retry',
]
