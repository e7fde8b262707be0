################################################################################
# File Name: error_handler.py
# Purpose/Description: Centralized error handling with classification and retry
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Attempt-bounded retry with fixed delay support
# ================================================================================
################################################################################

"""
Error handling module.

Provides centralized error handling with:
- A base exception carrying a message and structured details
- Error classification (retryable, config, data, concurrency, system)
- Retry decorator with bounded attempts and optional backoff
- Structured error reporting

Usage:
    from common.error_handler import RetryableError, retry, handleError

    @retry(maxRetries=2, initialDelay=5.0, backoffMultiplier=1.0)
    def putObject():
        # Code that might fail transiently
        pass

    try:
        result = operation()
    except Exception as e:
        handleError(e, reraise=False)
"""

import functools
import logging
import time
import traceback
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ErrorCategory(Enum):
    """Categories of errors for classification."""
    RETRYABLE = 'retryable'       # Transient, may be retried
    CONFIGURATION = 'config'      # Config errors, fail fast
    CONCURRENCY = 'concurrency'   # Another run owns the resource
    DATA = 'data'                 # Produced data failed validation
    SYSTEM = 'system'             # Unexpected or environmental errors


# ================================================================================
# Custom Exception Classes
# ================================================================================

class BaseError(Exception):
    """Base exception for all custom errors."""

    category: ErrorCategory = ErrorCategory.SYSTEM

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def toDict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            'type': self.__class__.__name__,
            'category': self.category.value,
            'message': self.message,
            'details': self.details
        }


class RetryableError(BaseError):
    """Error that should be retried (network timeout, transfer failure, etc.)."""
    category = ErrorCategory.RETRYABLE


# ================================================================================
# Error Classification
# ================================================================================

def classifyError(error: Exception) -> ErrorCategory:
    """
    Classify an error into a category.

    Args:
        error: Exception to classify

    Returns:
        ErrorCategory for the error
    """
    if isinstance(error, BaseError):
        return error.category

    errorType = type(error).__name__.lower()
    errorMessage = str(error).lower()

    if any(term in errorType for term in ['timeout', 'connection', 'network']):
        return ErrorCategory.RETRYABLE

    if any(term in errorMessage for term in ['config', 'missing', 'required']):
        return ErrorCategory.CONFIGURATION

    if any(term in errorMessage for term in ['validation', 'invalid', 'parse']):
        return ErrorCategory.DATA

    return ErrorCategory.SYSTEM


# ================================================================================
# Retry Decorator
# ================================================================================

def retry(
    maxRetries: int = 3,
    initialDelay: float = 1.0,
    backoffMultiplier: float = 2.0,
    retryableExceptions: list[type[Exception]] | None = None
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator that retries a function, sleeping between attempts.

    The wrapped function runs at most maxRetries + 1 times. A backoffMultiplier
    of 1.0 gives a fixed delay between attempts.

    Args:
        maxRetries: Maximum number of retry attempts after the first call
        initialDelay: Delay in seconds before the first retry
        backoffMultiplier: Multiplier applied to the delay after each retry
        retryableExceptions: Exception types to retry (default: RetryableError)

    Returns:
        Decorated function

    Example:
        @retry(maxRetries=2, initialDelay=5.0, backoffMultiplier=1.0)
        def putObject():
            ...
    """
    if retryableExceptions is None:
        retryableExceptions = [RetryableError]

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            lastError: Exception | None = None
            delay = initialDelay

            for attempt in range(maxRetries + 1):
                try:
                    return func(*args, **kwargs)

                except tuple(retryableExceptions) as e:
                    lastError = e
                    if attempt < maxRetries:
                        logger.warning(
                            f"Retry {attempt + 1}/{maxRetries} for {func.__name__} "
                            f"after {delay}s | error={e}"
                        )
                        time.sleep(delay)
                        delay *= backoffMultiplier
                    else:
                        logger.error(
                            f"Max retries ({maxRetries}) exceeded for {func.__name__}"
                        )

                except Exception as e:
                    logger.error(f"Non-retryable error in {func.__name__}: {e}")
                    raise

            if lastError:
                raise lastError
            raise RuntimeError(f"Unexpected state in retry for {func.__name__}")

        return wrapper
    return decorator


# ================================================================================
# Error Handling
# ================================================================================

def handleError(
    error: Exception,
    context: dict[str, Any] | None = None,
    reraise: bool = True
) -> dict[str, Any]:
    """
    Handle an error with logging and classification.

    Args:
        error: Exception that occurred
        context: Additional context information
        reraise: Whether to re-raise the exception

    Returns:
        Error details dictionary

    Raises:
        The original exception if reraise is True
    """
    category = classifyError(error)
    context = context or {}

    errorDetails = {
        'type': type(error).__name__,
        'category': category.value,
        'message': str(error),
        'context': context,
        'traceback': traceback.format_exc()
    }

    if category == ErrorCategory.CONFIGURATION:
        logger.error(f"Configuration error: {error}")
    elif category in (ErrorCategory.DATA, ErrorCategory.CONCURRENCY):
        logger.error(f"{category.value.capitalize()} error: {error}")
    elif category == ErrorCategory.RETRYABLE:
        logger.warning(f"Retryable error: {error}")
    else:
        logger.error(f"Error: {error}", exc_info=True)

    if reraise:
        raise error

    return errorDetails


def formatError(error: Exception) -> str:
    """
    Format an error for display/logging.

    Args:
        error: Exception to format

    Returns:
        Formatted error string, e.g. "[DATA] IntegrityError: Backup is too small"
    """
    category = classifyError(error)

    if isinstance(error, BaseError):
        details = f" | details={error.details}" if error.details else ""
        return f"[{category.value.upper()}] {type(error).__name__}: {error.message}{details}"

    return f"[{category.value.upper()}] {type(error).__name__}: {error}"
