################################################################################
# File Name: secrets_loader.py
# Purpose/Description: Loading of .env files and resolution of config placeholders
# Author: Michael Cornelison
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | M. Cornelison | Initial implementation
# 2026-10-15    | Ralph Agent  | US-DS-011: .env parsing via python-dotenv,
#               |              | typed placeholder values
# 2026-10-17    | M. Cornelison | US-DS-019: Removed unused maskSecret
# ================================================================================
################################################################################

"""
Secrets and environment module.

Provides:
- Loading environment variables from a .env file (python-dotenv)
- Resolution of ${VAR_NAME} placeholders in configuration
- Default values: ${VAR_NAME:default}

A string that is exactly one placeholder resolves to a number or boolean
when the resolved text looks like one, so "${DS_MIN_SPEED:5}" yields 5.

Usage:
    from common.secrets_loader import loadConfigWithSecrets

    config = loadConfigWithSecrets('drivesentry_config.json', envPath='.env')
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

# Pattern to match ${VAR_NAME} or ${VAR_NAME:default}
PLACEHOLDER_PATTERN = re.compile(r'\$\{([^}:]+)(?::([^}]*))?\}')


def loadEnvFile(envPath: Optional[str] = None) -> Dict[str, str]:
    """
    Load environment variables from a .env file.

    Existing environment variables are never overridden.

    Args:
        envPath: Path to .env file. Defaults to .env in current directory.

    Returns:
        Names of the variables that were set, mapped to '[LOADED]'
    """
    envFile = Path(envPath or '.env')
    loadedVars: Dict[str, str] = {}

    if not envFile.exists():
        logger.debug(f".env file not found at {envFile}")
        return loadedVars

    for key, value in dotenv_values(envFile).items():
        if value is None or key in os.environ:
            continue
        os.environ[key] = value
        loadedVars[key] = '[LOADED]'

    logger.info(f"Loaded {len(loadedVars)} variables from {envFile}")
    return loadedVars


def resolveSecrets(config: Any) -> Any:
    """
    Recursively resolve ${VAR_NAME} placeholders in configuration.

    Args:
        config: Configuration value (dict, list, str, or other)

    Returns:
        Configuration with placeholders resolved
    """
    if isinstance(config, dict):
        return {key: resolveSecrets(value) for key, value in config.items()}

    elif isinstance(config, list):
        return [resolveSecrets(item) for item in config]

    elif isinstance(config, str):
        return _resolveString(config)

    else:
        return config


def _resolveString(value: str) -> Any:
    """
    Resolve placeholders in a string value.

    Args:
        value: String potentially containing ${VAR} placeholders

    Returns:
        Resolved string, or a number/bool when the whole value was a
        single placeholder
    """
    def replacer(match: re.Match) -> str:
        varName = match.group(1)
        defaultValue = match.group(2)

        envValue = os.environ.get(varName)

        if envValue is not None:
            logger.debug(f"Resolved {varName} from environment")
            return envValue
        elif defaultValue is not None:
            logger.debug(f"Using default for {varName}")
            return defaultValue
        else:
            logger.warning(f"Environment variable {varName} not set and no default")
            return match.group(0)

    resolved = PLACEHOLDER_PATTERN.sub(replacer, value)

    if PLACEHOLDER_PATTERN.fullmatch(value) and resolved != value:
        return _coerceScalar(resolved)
    return resolved


def _coerceScalar(text: str) -> Any:
    """Turn 'true'/'false'/numeric text into bool/int/float; leave others."""
    lowered = text.strip().lower()
    if lowered in ('true', 'false'):
        return lowered == 'true'
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def loadConfigWithSecrets(
    configPath: str,
    envPath: Optional[str] = None
) -> Dict[str, Any]:
    """
    Load a JSON configuration file and resolve all placeholders.

    Args:
        configPath: Path to configuration JSON file
        envPath: Optional path to .env file

    Returns:
        Configuration dictionary with placeholders resolved

    Raises:
        FileNotFoundError: If config file doesn't exist
        json.JSONDecodeError: If config file is invalid JSON
    """
    loadEnvFile(envPath)

    configFile = Path(configPath)
    if not configFile.exists():
        raise FileNotFoundError(f"Configuration file not found: {configPath}")

    logger.info(f"Loading configuration from {configPath}")

    with open(configFile, 'r', encoding='utf-8') as f:
        config = json.load(f)

    config = resolveSecrets(config)

    logger.info("Configuration loaded and placeholders resolved")
    return config
