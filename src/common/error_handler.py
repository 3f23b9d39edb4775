################################################################################
# File Name: error_handler.py
# Purpose/Description: Centralized error handling with classification
# Author: Michael Cornelison
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | M. Cornelison | Initial implementation
# 2026-10-15    | Ralph Agent  | US-DS-011: Added STATE category, feed/permission
#               |              | classification, ErrorCollector.getErrors
# 2026-10-17    | M. Cornelison | US-DS-019: Removed unused DataError
# ================================================================================
################################################################################

"""
Error handling module.

Provides centralized error handling with:
- Custom exception classes by error type
- Error classification (retryable, config, data, state, system)
- Structured error reporting
- Error collection for multi-step operations (e.g. teardown)

Usage:
    from common.error_handler import ErrorCollector, handleError

    collector = ErrorCollector()
    for step in teardownSteps:
        try:
            step()
        except Exception as e:
            collector.add(e, step=step.__name__)
    collector.report()
"""

import logging
import traceback
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of errors for classification."""
    RETRYABLE = 'retryable'       # Transient (feed hiccup, permission pending)
    CONFIGURATION = 'config'      # Config errors, fail fast
    DATA = 'data'                 # Data validation, log and skip
    STATE = 'state'               # Illegal transition, caller bug
    SYSTEM = 'system'             # Unexpected errors


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

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def toDict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            'type': self.__class__.__name__,
            'category': self.category.value,
            'message': self.message,
            'details': self.details
        }


class RetryableError(BaseError):
    """Error that may clear on its own (feed outage, permission pending)."""
    category = ErrorCategory.RETRYABLE


class ConfigurationError(BaseError):
    """Configuration validation failure."""
    category = ErrorCategory.CONFIGURATION


class StateError(BaseError):
    """Operation attempted in a state that does not allow it."""
    category = ErrorCategory.STATE


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

    # Hardware and OS level outages
    if any(term in errorType for term in ['timeout', 'connection', 'permission']):
        return ErrorCategory.RETRYABLE

    if any(term in errorMessage for term in ['unavailable', 'permission denied', 'not authorized']):
        return ErrorCategory.RETRYABLE

    if any(term in errorMessage for term in ['config', 'missing', 'required']):
        return ErrorCategory.CONFIGURATION

    if isinstance(error, (ValueError, TypeError, KeyError)):
        return ErrorCategory.DATA

    if any(term in errorMessage for term in ['validation', 'invalid', 'parse']):
        return ErrorCategory.DATA

    return ErrorCategory.SYSTEM


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
    elif category == ErrorCategory.DATA:
        logger.warning(f"Data error: {error}")
    elif category == ErrorCategory.RETRYABLE:
        logger.warning(f"Retryable error: {error}")
    elif category == ErrorCategory.STATE:
        logger.error(f"State error: {error}")
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
        Formatted error string, e.g. "[STATE] Session already active"
    """
    category = classifyError(error)

    if isinstance(error, BaseError):
        details = f" | details={error.details}" if error.details else ""
        return f"[{category.value.upper()}] {error.message}{details}"

    return f"[{category.value.upper()}] {type(error).__name__}: {error}"


class ErrorCollector:
    """
    Collects multiple errors during a multi-step operation.

    Useful when every step must be attempted and failures reported at the end.

    Example:
        collector = ErrorCollector()
        for feed in feeds:
            try:
                feed.stop()
            except Exception as e:
                collector.add(e, feed=feed)

        if collector.hasErrors():
            collector.report()
    """

    def __init__(self):
        self.errors: list[dict[str, Any]] = []

    def add(self, error: Exception, **context: Any) -> None:
        """Add an error to the collection."""
        self.errors.append({
            'error': error,
            'category': classifyError(error).value,
            'message': str(error),
            'context': context
        })

    def hasErrors(self) -> bool:
        """Check if any errors were collected."""
        return len(self.errors) > 0

    def count(self) -> int:
        """Get number of collected errors."""
        return len(self.errors)

    def getErrors(self) -> list[Exception]:
        """Get the collected exceptions in the order they were added."""
        return [err['error'] for err in self.errors]

    def report(self) -> None:
        """Log all collected errors."""
        if not self.errors:
            return

        logger.error(f"Collected {len(self.errors)} errors:")
        for i, err in enumerate(self.errors, 1):
            logger.error(f"  {i}. [{err['category']}] {err['message']} | {err['context']}")

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()
