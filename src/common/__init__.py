################################################################################
# File Name: __init__.py
# Purpose/Description: Common utilities package initialization
# Author: Michael Cornelison
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | M. Cornelison | Initial implementation
# 2026-10-15    | Ralph Agent  | US-DS-011: Export ErrorCollector, StateError
# ================================================================================
################################################################################

"""
Common utilities package.

This package provides shared functionality used across the application:
- Configuration validation (required keys, defaults)
- .env loading and placeholder resolution
- Logging configuration
- Error handling

Usage:
    from common.config_validator import ConfigValidator
    from common.secrets_loader import loadConfigWithSecrets
    from common.logging_config import getLogger
    from common.error_handler import ErrorCollector
"""

from .config_validator import ConfigValidationError, ConfigValidator
from .error_handler import (
    ConfigurationError,
    ErrorCollector,
    RetryableError,
    StateError,
    handleError,
)
from .logging_config import getLogger, setupLogging
from .secrets_loader import loadConfigWithSecrets

__all__ = [
    'ConfigValidator',
    'ConfigValidationError',
    'loadConfigWithSecrets',
    'getLogger',
    'setupLogging',
    'RetryableError',
    'ConfigurationError',
    'StateError',
    'ErrorCollector',
    'handleError'
]
