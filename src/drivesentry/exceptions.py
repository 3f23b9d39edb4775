################################################################################
# File Name: exceptions.py
# Purpose/Description: Exception classes for driving-session detection
# Author: Ralph Agent
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | Ralph Agent  | Initial implementation (US-DS-001)
# ================================================================================
################################################################################
"""
Exception classes for DriveSentry.

Contains custom exceptions for error handling in the detection engine:
- DriveSentryError: Base exception for all DriveSentry errors
- InvalidStateError: Illegal session or orchestrator transition
- FeedUnavailableError: Location/Bluetooth feed hardware or permission failure
- DriveSentryConfigError: Configuration-related errors

Each one sits on the common error hierarchy so classifyError() and
formatError() report the right category.
"""

from typing import Any, Dict, List, Optional

from common.error_handler import (
    BaseError,
    ConfigurationError,
    RetryableError,
    StateError,
)


class DriveSentryError(BaseError):
    """
    Base exception for DriveSentry errors.

    Attributes:
        message: Human-readable error message
        details: Dictionary with additional error context
    """
    pass


class InvalidStateError(DriveSentryError, StateError):
    """
    Illegal session or orchestrator transition.

    Always surfaced to the caller; it signals an ordering bug.

    Example:
        raise InvalidStateError(
            "Cannot start new session while one is active",
            details={'sessionId': 'session_1700000000000_ab12cd3', 'status': 'active'}
        )
    """
    pass


class FeedUnavailableError(DriveSentryError, RetryableError):
    """
    A location or Bluetooth feed could not be used.

    Example:
        raise FeedUnavailableError(
            "Location permission denied",
            details={'feed': 'location'}
        )
    """
    pass


class DriveSentryConfigError(DriveSentryError, ConfigurationError):
    """
    Error in DriveSentry configuration.

    Attributes:
        invalidFields: Dot-notation names of the offending fields
    """

    def __init__(
        self,
        message: str,
        invalidFields: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.invalidFields = invalidFields or []
