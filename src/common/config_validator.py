################################################################################
# File Name: config_validator.py
# Purpose/Description: Configuration validation with required fields and defaults
# Author: Michael Cornelison
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | M. Cornelison | Initial implementation
# 2026-10-15    | Ralph Agent  | US-DS-011: Error derives from ConfigurationError,
#               |              | defaults merged over project defaults
# ================================================================================
################################################################################

"""
Configuration validation module.

Provides validation of configuration dictionaries with:
- Required field checking (dot notation)
- Default value application for missing fields
- Nested configuration support

Type and range checks belong to the package that owns the section
(see drivesentry.config); this module only guarantees shape.

Usage:
    from common.config_validator import ConfigValidator

    validator = ConfigValidator(defaults={'detection.minSpeed': 5.0})
    config = validator.validate(rawConfig)
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from .error_handler import ConfigurationError

logger = logging.getLogger(__name__)


class ConfigValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, missingFields: Optional[List[str]] = None):
        super().__init__(message, details={'missingFields': missingFields or []})
        self.missingFields = missingFields or []


# Keys every application config must carry
REQUIRED_KEYS: List[str] = []

# Defaults shared by every application
DEFAULTS: Dict[str, Any] = {
    'application.name': 'DriveSentry',
    'application.version': '1.0.0',
    'logging.level': 'INFO',
    'logging.file': None,
    'logging.maskPII': True,
}


class ConfigValidator:
    """
    Validates configuration dictionaries.

    Attributes:
        requiredKeys: Required configuration keys (dot notation)
        defaults: Default values for optional fields (dot notation); merged
            over the shared DEFAULTS
    """

    def __init__(
        self,
        requiredKeys: Optional[List[str]] = None,
        defaults: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the validator.

        Args:
            requiredKeys: Required keys in dot notation (e.g., 'database.path')
            defaults: Default values in dot notation
        """
        self.requiredKeys = requiredKeys if requiredKeys is not None else list(REQUIRED_KEYS)
        self.defaults = dict(DEFAULTS)
        self.defaults.update(defaults or {})

    def validate(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Check required fields and apply defaults.

        The input is not modified; a deep copy is returned.

        Args:
            config: Raw configuration dictionary

        Returns:
            Configuration with defaults applied

        Raises:
            ConfigValidationError: If required fields are missing
        """
        missingFields = [
            key for key in self.requiredKeys
            if getNestedValue(config, key) is None
        ]
        if missingFields:
            raise ConfigValidationError(
                f"Missing required configuration fields: {', '.join(missingFields)}",
                missingFields=missingFields
            )

        config = copy.deepcopy(config)
        for key, defaultValue in self.defaults.items():
            if not hasNestedKey(config, key):
                setNestedValue(config, key, copy.deepcopy(defaultValue))
                logger.debug(f"Applied default for {key}: {defaultValue}")

        logger.info("Configuration validated successfully")
        return config


# ================================================================================
# Dot-notation helpers
# ================================================================================

def getNestedValue(config: Dict[str, Any], key: str, default: Any = None) -> Any:
    """
    Get a value from a nested dictionary using dot notation.

    Args:
        config: Configuration dictionary
        key: Dot-notation key (e.g., 'detection.minSpeed')
        default: Returned when the key is absent

    Returns:
        Value if found, default otherwise
    """
    value: Any = config
    for part in key.split('.'):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return default
    return value


def hasNestedKey(config: Dict[str, Any], key: str) -> bool:
    """Check whether a dot-notation key is present (even if its value is None)."""
    value: Any = config
    for part in key.split('.'):
        if not isinstance(value, dict) or part not in value:
            return False
        value = value[part]
    return True


def setNestedValue(config: Dict[str, Any], key: str, value: Any) -> None:
    """
    Set a value in a nested dictionary using dot notation.

    Intermediate dictionaries are created as needed.
    """
    parts = key.split('.')
    current = config
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value
