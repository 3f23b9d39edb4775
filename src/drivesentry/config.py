################################################################################
# File Name: config.py
# Purpose/Description: DriveSentry configuration loading and validation
# Author: Ralph Agent
# Creation Date: 2026-10-15
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-15    | Ralph Agent  | Initial implementation (US-DS-011)
# ================================================================================
################################################################################

"""
DriveSentry configuration loader.

Loading happens in layers:
1. .env file loaded into the environment (python-dotenv)
2. JSON file read and ${VAR:default} placeholders resolved
3. Required keys checked and defaults applied (ConfigValidator)
4. Each section validated against its pydantic model

Every invalid field across all sections is reported at once in a single
DriveSentryConfigError.

Usage:
    from drivesentry.config import loadDriveSentryConfig, getDrivingConditions

    try:
        config = loadDriveSentryConfig('drivesentry_config.json', envPath='.env')
    except DriveSentryConfigError as e:
        print(f"Configuration error: {e} | fields={e.invalidFields}")
        sys.exit(1)

    conditions = getDrivingConditions(config)
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from common.config_validator import ConfigValidationError, ConfigValidator
from common.secrets_loader import loadConfigWithSecrets

from .exceptions import DriveSentryConfigError
from .types import (
    DEFAULT_MAX_STATIONARY_TIME,
    DEFAULT_MIN_DISTANCE,
    DEFAULT_MIN_DURATION,
    DEFAULT_MIN_SPEED,
    DEFAULT_SESSION_END_TIMEOUT,
    DrivingConditions,
)

logger = logging.getLogger(__name__)


# ================================================================================
# Constants
# ================================================================================

DRIVESENTRY_REQUIRED_FIELDS: List[str] = [
    'database.path',
]

DRIVESENTRY_DEFAULTS: Dict[str, Any] = {
    # Application
    'application.name': 'DriveSentry',
    'application.version': '1.0.0',

    # Detection
    'detection.minSpeed': DEFAULT_MIN_SPEED,
    'detection.minDuration': DEFAULT_MIN_DURATION,
    'detection.minDistance': DEFAULT_MIN_DISTANCE,
    'detection.maxStationaryTime': DEFAULT_MAX_STATIONARY_TIME,
    'detection.sessionEndTimeout': DEFAULT_SESSION_END_TIMEOUT,

    # Bluetooth
    'bluetooth.extraCarPatterns': [],

    # Database
    'database.walMode': True,

    # Simulator
    'simulator.scenario': 'commute',
    'simulator.sampleIntervalSeconds': 5.0,
    'simulator.startLatitude': 37.7749,
    'simulator.startLongitude': -122.4194,
    'simulator.carDeviceId': '00:1A:7D:DA:71:13',
    'simulator.carDeviceName': 'Honda HandsFreeLink',

    # Logging
    'logging.level': 'INFO',
    'logging.file': None,
    'logging.maskPII': True,
}


# ================================================================================
# Section Models
# ================================================================================

class DetectionSettings(BaseModel):
    """Thresholds for driving detection (seconds, meters, m/s)."""
    model_config = ConfigDict(extra='forbid')

    minSpeed: float = Field(DEFAULT_MIN_SPEED, gt=0)
    minDuration: float = Field(DEFAULT_MIN_DURATION, ge=0)
    minDistance: float = Field(DEFAULT_MIN_DISTANCE, ge=0)
    maxStationaryTime: float = Field(DEFAULT_MAX_STATIONARY_TIME, ge=0)
    sessionEndTimeout: float = Field(DEFAULT_SESSION_END_TIMEOUT, ge=0)

    @model_validator(mode='after')
    def _timeoutAfterPause(self) -> 'DetectionSettings':
        # A session can only time out once it has been paused
        if self.sessionEndTimeout < self.maxStationaryTime:
            raise ValueError(
                'sessionEndTimeout must be greater than or equal to maxStationaryTime'
            )
        return self


class BluetoothSettings(BaseModel):
    """Car device matching settings."""
    model_config = ConfigDict(extra='forbid')

    extraCarPatterns: List[str] = Field(default_factory=list)

    @field_validator('extraCarPatterns')
    @classmethod
    def _patternsCompile(cls, patterns: List[str]) -> List[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid regex '{pattern}': {e}")
        return patterns


class DatabaseSettings(BaseModel):
    """SQLite storage settings."""
    model_config = ConfigDict(extra='forbid')

    path: str = Field(min_length=1)
    walMode: bool = True


class SimulatorSettings(BaseModel):
    """Scenario runner settings."""
    model_config = ConfigDict(extra='forbid')

    scenario: str = Field('commute', min_length=1)
    sampleIntervalSeconds: float = Field(5.0, gt=0)
    startLatitude: float = Field(37.7749, ge=-90, le=90)
    startLongitude: float = Field(-122.4194, ge=-180, le=180)
    carDeviceId: str = Field('00:1A:7D:DA:71:13', min_length=1)
    carDeviceName: str = 'Honda HandsFreeLink'


class LoggingSettings(BaseModel):
    """Logging settings."""
    model_config = ConfigDict(extra='forbid')

    level: Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'] = 'INFO'
    file: Optional[str] = None
    maskPII: bool = True

    @field_validator('level', mode='before')
    @classmethod
    def _upperLevel(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


SECTION_MODELS: Dict[str, Type[BaseModel]] = {
    'detection': DetectionSettings,
    'bluetooth': BluetoothSettings,
    'database': DatabaseSettings,
    'simulator': SimulatorSettings,
    'logging': LoggingSettings,
}


# ================================================================================
# Public API
# ================================================================================

def loadDriveSentryConfig(
    configPath: str,
    envPath: Optional[str] = None
) -> Dict[str, Any]:
    """
    Load and validate DriveSentry configuration from file.

    Args:
        configPath: Path to the JSON configuration file
        envPath: Optional path to a .env file

    Returns:
        Validated configuration dictionary with defaults applied

    Raises:
        DriveSentryConfigError: If the file cannot be loaded or validation fails
    """
    logger.info(f"Loading DriveSentry configuration from: {configPath}")

    if not Path(configPath).exists():
        raise DriveSentryConfigError(
            f"Configuration file not found: {configPath}",
            invalidFields=['configFile']
        )

    try:
        config = loadConfigWithSecrets(configPath, envPath)
    except json.JSONDecodeError as e:
        raise DriveSentryConfigError(
            f"Invalid JSON in configuration file: {configPath} "
            f"(line {e.lineno}, column {e.colno}: {e.msg})",
            invalidFields=['configFile']
        ) from e
    except OSError as e:
        raise DriveSentryConfigError(
            f"Cannot read configuration file: {configPath}: {e}",
            invalidFields=['configFile']
        ) from e

    config = validateDriveSentryConfig(config)

    logger.info("DriveSentry configuration loaded and validated successfully")
    return config


def validateDriveSentryConfig(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply defaults and validate every section.

    Validated sections are replaced by their normalized form (numbers as
    floats, log level upper-cased).

    Args:
        config: Raw configuration dictionary

    Returns:
        Validated configuration

    Raises:
        DriveSentryConfigError: Listing every invalid field
    """
    validator = ConfigValidator(
        requiredKeys=DRIVESENTRY_REQUIRED_FIELDS,
        defaults=DRIVESENTRY_DEFAULTS
    )

    try:
        config = validator.validate(config)
    except ConfigValidationError as e:
        raise DriveSentryConfigError(
            f"Configuration validation failed: {e.message}",
            invalidFields=e.missingFields
        ) from e

    invalidFields: List[str] = []
    messages: List[str] = []

    for section, model in SECTION_MODELS.items():
        try:
            settings = model.model_validate(config.get(section) or {})
        except ValidationError as e:
            for error in e.errors():
                location = '.'.join(str(part) for part in error['loc'])
                fieldName = f"{section}.{location}" if location else section
                invalidFields.append(fieldName)
                messages.append(f"{fieldName}: {error['msg']}")
            continue
        config[section] = settings.model_dump()

    if invalidFields:
        raise DriveSentryConfigError(
            f"Invalid configuration: {'; '.join(messages)}",
            invalidFields=invalidFields
        )

    return config


def getDrivingConditions(config: Dict[str, Any]) -> DrivingConditions:
    """
    Build DrivingConditions from the detection section.

    Missing values fall back to the defaults.

    Args:
        config: Configuration dictionary

    Returns:
        DrivingConditions
    """
    detection = config.get('detection', {})
    return DrivingConditions(
        minSpeed=float(detection.get('minSpeed', DEFAULT_MIN_SPEED)),
        minDuration=float(detection.get('minDuration', DEFAULT_MIN_DURATION)),
        minDistance=float(detection.get('minDistance', DEFAULT_MIN_DISTANCE)),
        maxStationaryTime=float(
            detection.get('maxStationaryTime', DEFAULT_MAX_STATIONARY_TIME)
        ),
        sessionEndTimeout=float(
            detection.get('sessionEndTimeout', DEFAULT_SESSION_END_TIMEOUT)
        ),
    )
