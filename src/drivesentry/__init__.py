################################################################################
# File Name: __init__.py
# Purpose/Description: DriveSentry driving-session detection engine package
# Author: Ralph Agent
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | Ralph Agent  | Initial package creation (US-DS-001)
# 2026-10-16    | Ralph Agent  | Added exports for orchestrator, storage, config
# ================================================================================
################################################################################
"""
DriveSentry Package.

Detects when a trip begins, pauses and ends from two independent signal
streams (location samples and Bluetooth connections) and records it as a
drive session with distance, duration and speed statistics.

Components (leaves first):
- CarDeviceMatcher: Is this Bluetooth device a car?
- DrivingDetector: Debounced driving state from location samples
- SessionManager: The single current trip and its waypoints
- DriveSentryOrchestrator: Fuses both feeds and emits typed events

Usage:
    from drivesentry import (
        DriveSentryOrchestrator, EventType, SimulatedLocationFeed,
        SimulatedBluetoothFeed,
    )

    orchestrator = DriveSentryOrchestrator(
        SimulatedLocationFeed(), SimulatedBluetoothFeed()
    )
    orchestrator.subscribe(
        lambda event: print(event.eventType.value)
    )
    orchestrator.initialize()
    orchestrator.start()
"""

# Config
from .config import (
    DRIVESENTRY_DEFAULTS,
    getDrivingConditions,
    loadDriveSentryConfig,
    validateDriveSentryConfig,
)

# Components
from .detector import DetectorStats, DrivingDetector

# Events
from .events import DriveSentryEvent, EventBus, EventType

# Exceptions
from .exceptions import (
    DriveSentryConfigError,
    DriveSentryError,
    FeedUnavailableError,
    InvalidStateError,
)

# Feed contracts
from .feeds import (
    TRACKING_MODE_PROFILES,
    BluetoothFeed,
    DeviceTagStore,
    LocationFeed,
    SessionRepository,
)
from .geo import haversineDistance, pathDistance
from .matcher import CAR_DEVICE_PATTERNS, CarDeviceMatcher
from .orchestrator import (
    DriveSentryOrchestrator,
    OrchestratorState,
    createOrchestratorFromConfig,
)
from .session import SessionManager, generateSessionId

# Simulator
from .simulator import (
    DriveScenarioRunner,
    SimulatedBluetoothFeed,
    SimulatedClock,
    SimulatedLocationFeed,
    getBuiltInScenario,
)

# Storage
from .storage import (
    DriveSentryDatabase,
    SessionRecorder,
    SqliteDeviceTagStore,
    SqliteSessionRepository,
    StorageError,
    createDatabaseFromConfig,
)

# Types
from .types import (
    BluetoothDevice,
    CarDevice,
    DetectionResult,
    DetectorState,
    DriveSession,
    DrivingConditions,
    LocationSample,
    OrchestratorStatus,
    SessionStatus,
    SessionTrigger,
    TagOrigin,
    TrackingMode,
    TriggerType,
    Waypoint,
)

__all__ = [
    # Types - Enums
    'DetectorState',
    'SessionStatus',
    'OrchestratorStatus',
    'TrackingMode',
    'TriggerType',
    'TagOrigin',
    # Types - Records
    'LocationSample',
    'BluetoothDevice',
    'CarDevice',
    'SessionTrigger',
    'DriveSession',
    'Waypoint',
    'DrivingConditions',
    'DetectionResult',
    # Components
    'CarDeviceMatcher',
    'CAR_DEVICE_PATTERNS',
    'DrivingDetector',
    'DetectorStats',
    'SessionManager',
    'generateSessionId',
    'DriveSentryOrchestrator',
    'OrchestratorState',
    'createOrchestratorFromConfig',
    # Events
    'EventType',
    'DriveSentryEvent',
    'EventBus',
    # Feed contracts
    'LocationFeed',
    'BluetoothFeed',
    'DeviceTagStore',
    'SessionRepository',
    'TRACKING_MODE_PROFILES',
    # Geo
    'haversineDistance',
    'pathDistance',
    # Storage
    'DriveSentryDatabase',
    'SqliteDeviceTagStore',
    'SqliteSessionRepository',
    'SessionRecorder',
    'StorageError',
    'createDatabaseFromConfig',
    # Simulator
    'SimulatedClock',
    'SimulatedLocationFeed',
    'SimulatedBluetoothFeed',
    'DriveScenarioRunner',
    'getBuiltInScenario',
    # Config
    'DRIVESENTRY_DEFAULTS',
    'loadDriveSentryConfig',
    'validateDriveSentryConfig',
    'getDrivingConditions',
    # Exceptions
    'DriveSentryError',
    'InvalidStateError',
    'FeedUnavailableError',
    'DriveSentryConfigError',
]
