################################################################################
# File Name: conftest.py
# Purpose/Description: Pytest fixtures and configuration
# Author: Michael Cornelison
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | M. Cornelison | Initial implementation
# 2026-10-16    | Ralph Agent  | US-DS-017: Simulated feed, clock and sample fixtures
# ================================================================================
################################################################################

"""
Pytest configuration and shared fixtures.

Fixtures defined here are available to all test files automatically.

Usage:
    def test_something(orchestrator, locationFeed, makeSample):
        orchestrator.initialize()
        orchestrator.start()
        locationFeed.pushSample(makeSample(seconds=0, speed=10.0))
"""

import json
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List, Optional

import pytest

# Add src to path for imports
srcPath = Path(__file__).parent.parent / 'src'
if str(srcPath) not in sys.path:
    sys.path.insert(0, str(srcPath))

from drivesentry.events import DriveSentryEvent, EventType
from drivesentry.orchestrator import DriveSentryOrchestrator
from drivesentry.simulator import (
    SimulatedBluetoothFeed,
    SimulatedClock,
    SimulatedLocationFeed,
)
from drivesentry.storage import DriveSentryDatabase
from drivesentry.types import BluetoothDevice, DrivingConditions, LocationSample

# Fixed start for simulated time
BASE_TIME = datetime(2026, 10, 16, 8, 0, 0)
BASE_TIMESTAMP_MS = BASE_TIME.timestamp() * 1000.0

BASE_LATITUDE = 37.7749
BASE_LONGITUDE = -122.4194


# ================================================================================
# Configuration Fixtures
# ================================================================================

@pytest.fixture
def sampleConfig(tmp_path: Path) -> Dict[str, Any]:
    """
    Provide a complete DriveSentry configuration for tests.

    Returns:
        Dictionary with test configuration values
    """
    return {
        'application': {
            'name': 'DriveSentryTest',
            'version': '1.0.0',
        },
        'detection': {
            'minSpeed': 5.0,
            'minDuration': 60,
            'minDistance': 200,
            'maxStationaryTime': 120,
            'sessionEndTimeout': 300,
        },
        'bluetooth': {
            'extraCarPatterns': ['head ?unit'],
        },
        'database': {
            'path': str(tmp_path / 'drivesentry.db'),
            'walMode': False,
        },
        'simulator': {
            'scenario': 'commute',
            'sampleIntervalSeconds': 5,
            'startLatitude': BASE_LATITUDE,
            'startLongitude': BASE_LONGITUDE,
            'carDeviceId': '00:1A:7D:DA:71:13',
            'carDeviceName': 'Honda HandsFreeLink',
        },
        'logging': {
            'level': 'DEBUG',
            'file': None,
            'maskPII': True,
        },
    }


@pytest.fixture
def minimalConfig(tmp_path: Path) -> Dict[str, Any]:
    """
    Provide minimal configuration for testing defaults.

    Returns:
        Dictionary with only the required database path
    """
    return {
        'database': {
            'path': str(tmp_path / 'minimal.db'),
        }
    }


@pytest.fixture
def tempConfigFile(tmp_path: Path, sampleConfig: Dict[str, Any]) -> Path:
    """
    Create temporary config file for testing.

    Returns:
        Path to temporary config file
    """
    configFile = tmp_path / 'drivesentry_config.json'
    with open(configFile, 'w') as f:
        json.dump(sampleConfig, f)

    return configFile


# ================================================================================
# Environment Fixtures
# ================================================================================

@pytest.fixture
def cleanEnv() -> Generator[None, None, None]:
    """
    Ensure clean environment with no test variables.

    Removes the variables used by the tests before each test, restores after.
    """
    varsToRemove = [
        'DRIVESENTRY_MIN_SPEED', 'DRIVESENTRY_DB_PATH', 'LOG_LEVEL',
        'TEST_VAR', 'TEST_FLAG', 'TEST_NUMBER',
    ]

    saved = {}
    for var in varsToRemove:
        saved[var] = os.environ.pop(var, None)

    yield

    for var, value in saved.items():
        if value is not None:
            os.environ[var] = value
        else:
            os.environ.pop(var, None)


# ================================================================================
# Simulation Fixtures
# ================================================================================

@pytest.fixture
def clock() -> SimulatedClock:
    """Simulated clock starting at BASE_TIME."""
    return SimulatedClock(BASE_TIME)


@pytest.fixture
def locationFeed() -> SimulatedLocationFeed:
    return SimulatedLocationFeed()


@pytest.fixture
def bluetoothFeed() -> SimulatedBluetoothFeed:
    return SimulatedBluetoothFeed()


@pytest.fixture
def conditions() -> DrivingConditions:
    """Default detection thresholds."""
    return DrivingConditions()


@pytest.fixture
def orchestrator(
    locationFeed: SimulatedLocationFeed,
    bluetoothFeed: SimulatedBluetoothFeed,
    conditions: DrivingConditions,
    clock: SimulatedClock
) -> DriveSentryOrchestrator:
    """Orchestrator wired to simulated feeds (not yet initialized)."""
    return DriveSentryOrchestrator(
        locationFeed=locationFeed,
        bluetoothFeed=bluetoothFeed,
        conditions=conditions,
        clock=clock,
    )


@pytest.fixture
def events(orchestrator: DriveSentryOrchestrator) -> List[DriveSentryEvent]:
    """Every event the orchestrator emits, in order."""
    received: List[DriveSentryEvent] = []
    orchestrator.subscribe(received.append)
    return received


@pytest.fixture
def makeSample() -> Callable[..., LocationSample]:
    """
    Factory for location samples at an offset from BASE_TIME.

    Each successive sample moves a little east so distances are non-zero.

    Usage:
        sample = makeSample(seconds=30, speed=12.0)
    """
    def factory(
        seconds: float,
        speed: Optional[float] = 0.0,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None
    ) -> LocationSample:
        return LocationSample(
            latitude=BASE_LATITUDE if latitude is None else latitude,
            longitude=(BASE_LONGITUDE + seconds * 0.0001) if longitude is None else longitude,
            timestamp=BASE_TIMESTAMP_MS + seconds * 1000.0,
            accuracy=5.0,
            speed=speed,
        )

    return factory


@pytest.fixture
def carDevice() -> BluetoothDevice:
    """A device whose name matches the car patterns."""
    return BluetoothDevice(id='00:1A:7D:DA:71:13', name='Honda HandsFreeLink')


@pytest.fixture
def phoneHeadset() -> BluetoothDevice:
    """A device that is not a car."""
    return BluetoothDevice(id='AA:BB:CC:DD:EE:FF', name='Pixel Buds Pro')


@pytest.fixture
def eventTypes(events: List[DriveSentryEvent]) -> Callable[..., List[EventType]]:
    """
    Event types received so far, optionally without LOCATION_UPDATE.

    Usage:
        assert eventTypes() == [EventType.DRIVING_DETECTED, ...]
    """
    def getter(includeLocation: bool = False) -> List[EventType]:
        return [
            e.eventType for e in events
            if includeLocation or e.eventType != EventType.LOCATION_UPDATE
        ]

    return getter


# ================================================================================
# Storage Fixtures
# ================================================================================

@pytest.fixture
def database(tmp_path: Path) -> DriveSentryDatabase:
    """Initialized database in a temp directory."""
    db = DriveSentryDatabase(str(tmp_path / 'test.db'), walMode=False)
    db.initialize()
    return db


# ================================================================================
# Pytest Configuration
# ================================================================================

def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
