################################################################################
# File Name: logging_config.py
# Purpose/Description: Structured logging configuration and utilities
# Author: Michael Cornelison
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | M. Cornelison | Initial implementation
# 2026-10-15    | Ralph Agent  | US-DS-013: Mask location coordinates, quiet
#               |              | third-party loggers
# ================================================================================
################################################################################

"""
Logging configuration module.

Provides structured logging with:
- Configurable log levels
- Console and optional file output
- PII masking (email, phone, latitude/longitude pairs)
- Consistent pipe-delimited formatting

Location samples are personal data: with masking on, any "lat, lon" pair
or latitude=/longitude= field in a message is replaced before output.

Usage:
    from common.logging_config import setupLogging, getLogger

    setupLogging(level='INFO', logFile='logs/drivesentry.log')
    logger = getLogger(__name__)
    logger.info("SESSION STARTED | id=session_1 | trigger=gps")
"""

import logging
import re
import sys
from pathlib import Path
from typing import Any

# Default log format
DEFAULT_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s | %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# PII patterns for masking, applied in order
PII_PATTERNS = {
    'email': re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'),
    'phone': re.compile(r'\b\d{3}[-.]\d{3}[-.]\d{4}\b'),
    'coordinates': re.compile(
        r"(?:'?(?:latitude|longitude|lat|lon)'?\s*[=:]\s*-?\d{1,3}\.\d+)"
        r"|(?:-?\d{1,2}\.\d{3,}\s*,\s*-?\d{1,3}\.\d{3,})",
        re.IGNORECASE
    ),
}

# Libraries that are noisy at DEBUG
QUIET_LOGGERS = ['urllib3', 'asyncio']


class PIIMaskingFilter(logging.Filter):
    """
    Logging filter that masks PII in log messages.

    Detects and masks:
    - Email addresses
    - Phone numbers
    - Latitude/longitude values
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Mask PII in the record's message.

        Arguments are merged into the message first so values passed with
        %-style formatting are masked too.

        Args:
            record: Log record to filter

        Returns:
            True (always allows record, but modifies it)
        """
        if isinstance(record.msg, str):
            if record.args:
                record.msg = record.getMessage()
                record.args = None
            record.msg = maskPII(record.msg)

        return True


def maskPII(message: str) -> str:
    """
    Mask PII patterns in a message.

    Args:
        message: Log message to mask

    Returns:
        Message with PII masked
    """
    for name, pattern in PII_PATTERNS.items():
        message = pattern.sub(f'[{name.upper()}_MASKED]', message)

    return message


class StructuredFormatter(logging.Formatter):
    """
    Formatter that appends an `extra` dict as key=value pairs.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        extra = getattr(record, 'extra', None)
        if extra and isinstance(extra, dict):
            message += ' | ' + ' | '.join(f'{k}={v}' for k, v in extra.items())

        return message


def setupLogging(
    level: str = 'INFO',
    logFormat: str | None = None,
    logFile: str | None = None,
    enablePIIMasking: bool = True
) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        logFormat: Custom format string
        logFile: Optional file path for log output
        enablePIIMasking: Whether to mask PII in logs

    Returns:
        Root logger instance
    """
    rootLogger = logging.getLogger()
    rootLogger.setLevel(getattr(logging, level.upper(), logging.INFO))

    rootLogger.handlers.clear()

    formatter = StructuredFormatter(
        fmt=logFormat or DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT
    )

    consoleHandler = logging.StreamHandler(sys.stdout)
    consoleHandler.setFormatter(formatter)
    if enablePIIMasking:
        consoleHandler.addFilter(PIIMaskingFilter())
    rootLogger.addHandler(consoleHandler)

    if logFile:
        logPath = Path(logFile)
        logPath.parent.mkdir(parents=True, exist_ok=True)

        fileHandler = logging.FileHandler(logFile, encoding='utf-8')
        fileHandler.setFormatter(formatter)
        if enablePIIMasking:
            fileHandler.addFilter(PIIMaskingFilter())
        rootLogger.addHandler(fileHandler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    rootLogger.info(f"Logging configured | level={level} | piiMasking={enablePIIMasking}")

    return rootLogger


def getLogger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def logWithContext(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: Any
) -> None:
    """
    Log a message with key=value context appended.

    Args:
        logger: Logger instance
        level: Log level
        message: Log message
        **context: Additional context fields
    """
    logFunc = getattr(logger, level.lower(), logger.info)

    if context:
        logFunc(message + ' | ' + ' | '.join(f'{k}={v}' for k, v in context.items()))
    else:
        logFunc(message)
