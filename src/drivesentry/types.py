################################################################################
# File Name: types.py
# Purpose/Description: Type definitions for driving-session detection
# Author: Ralph Agent
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | Ralph Agent  | Initial implementation (US-DS-001)
# 2026-10-14    | Ralph Agent  | US-DS-006: Added distanceTraveled to DetectionResult
# ================================================================================
################################################################################
"""
Type definitions for driving-session detection.

Contains enums and dataclasses shared by all DriveSentry components:
- LocationSample: One reading from the location feed
- BluetoothDevice / CarDevice: Bluetooth peers and user-tagged car devices
- SessionTrigger: Evidence credited with starting or ending a session
- DriveSession / Waypoint: A trip and its recorded positions
- DrivingConditions: Detection thresholds
- DetectionResult: Per-sample output of the DrivingDetector
- DetectorState, SessionStatus, OrchestratorStatus, TrackingMode: enums

Records are frozen; components that need to change one build a new copy
with dataclasses.replace(). These types have no dependencies on other
project modules.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


# ================================================================================
# Constants
# ================================================================================

# Default thresholds
DEFAULT_MIN_SPEED = 5.0                 # m/s (~18 km/h)
DEFAULT_MIN_DURATION = 60.0             # seconds of sustained speed
DEFAULT_MIN_DISTANCE = 200.0            # meters
DEFAULT_MAX_STATIONARY_TIME = 120.0     # seconds below speed before stationary
DEFAULT_SESSION_END_TIMEOUT = 300.0     # seconds paused before session end

# Rolling window kept by the detector (milliseconds)
HISTORY_HORIZON_MS = 5 * 60 * 1000


# ================================================================================
# Enums
# ================================================================================

class DetectorState(Enum):
    """
    State of the driving detector.

    States:
        IDLE: No movement evidence yet
        DETECTING: Moving, waiting for minDuration of sustained speed
        DRIVING: Driving confirmed
        STATIONARY: Below speed threshold for maxStationaryTime
    """
    IDLE = "idle"
    DETECTING = "detecting"
    DRIVING = "driving"
    STATIONARY = "stationary"


class SessionStatus(Enum):
    """Lifecycle status of a drive session."""
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class OrchestratorStatus(Enum):
    """
    Overall posture of the orchestrator.

    States:
        IDLE: Not monitoring
        MONITORING: Listening for triggers
        DETECTING: Possible drive (car connected), gathering data
        DRIVING: Confirmed driving, recording a session
        PAUSED: Temporarily stopped (traffic, errand)
        ERROR: A feed failed
    """
    IDLE = "idle"
    MONITORING = "monitoring"
    DETECTING = "detecting"
    DRIVING = "driving"
    PAUSED = "paused"
    ERROR = "error"


class TrackingMode(Enum):
    """Accuracy/interval mode requested from the location feed."""
    MONITORING = "monitoring"
    DRIVING = "driving"
    PAUSED = "paused"


class TriggerType(Enum):
    """Kind of evidence behind a session start or end."""
    BLUETOOTH = "bluetooth"
    GPS = "gps"
    MANUAL = "manual"


class TagOrigin(Enum):
    """How a car device was identified."""
    AUTO = "auto"
    MANUAL = "manual"


# ================================================================================
# Location
# ================================================================================

@dataclass(frozen=True)
class LocationSample:
    """
    A single location reading.

    Attributes:
        latitude: Degrees
        longitude: Degrees
        timestamp: Milliseconds (epoch or monotonic)
        altitude: Meters (optional)
        accuracy: Horizontal accuracy in meters (optional)
        speed: Meters per second (optional, absent is treated as 0)
        heading: Degrees 0-360 (optional)
    """
    latitude: float
    longitude: float
    timestamp: float
    altitude: Optional[float] = None
    accuracy: Optional[float] = None
    speed: Optional[float] = None
    heading: Optional[float] = None

    def effectiveSpeed(self) -> float:
        """Get speed in m/s, 0 when the feed did not report one."""
        return self.speed if self.speed is not None else 0.0

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            'latitude': self.latitude,
            'longitude': self.longitude,
            'altitude': self.altitude,
            'accuracy': self.accuracy,
            'speed': self.speed,
            'heading': self.heading,
            'timestamp': self.timestamp,
        }

    @staticmethod
    def fromDict(data: Dict[str, Any]) -> "LocationSample":
        """Create a LocationSample from a dictionary."""
        return LocationSample(
            latitude=float(data['latitude']),
            longitude=float(data['longitude']),
            timestamp=float(data['timestamp']),
            altitude=data.get('altitude'),
            accuracy=data.get('accuracy'),
            speed=data.get('speed'),
            heading=data.get('heading'),
        )


@dataclass(frozen=True)
class Waypoint:
    """
    A location sample recorded as part of a session.

    Attributes:
        id: Ordinal within the session, starting at 1
        sessionId: Owning session
        sample: The recorded location sample
    """
    id: int
    sessionId: str
    sample: LocationSample

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        result = self.sample.toDict()
        result['id'] = self.id
        result['sessionId'] = self.sessionId
        return result


# ================================================================================
# Bluetooth
# ================================================================================

@dataclass(frozen=True)
class BluetoothDevice:
    """
    A Bluetooth peer reported by the Bluetooth feed.

    Attributes:
        id: Device identifier (MAC address or platform id)
        name: Advertised device name
        isCarDevice: Whether the device was classified as a car
        signalStrength: RSSI in dBm (optional)
        lastSeen: When the feed last saw the device
    """
    id: str
    name: str
    isCarDevice: bool = False
    signalStrength: Optional[int] = None
    lastSeen: Optional[datetime] = None

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            'id': self.id,
            'name': self.name,
            'isCarDevice': self.isCarDevice,
            'signalStrength': self.signalStrength,
            'lastSeen': self.lastSeen.isoformat() if self.lastSeen else None,
        }


@dataclass(frozen=True)
class CarDevice:
    """
    A Bluetooth device known to belong to a car.

    Attributes:
        id: Device identifier
        name: Device name when tagged
        origin: How the device was tagged (auto or manual)
        createdAt: When the tag was created
        lastConnected: When the device last connected (None if never)
    """
    id: str
    name: str
    origin: TagOrigin
    createdAt: datetime
    lastConnected: Optional[datetime] = None

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            'id': self.id,
            'name': self.name,
            'origin': self.origin.value,
            'createdAt': self.createdAt.isoformat(),
            'lastConnected': self.lastConnected.isoformat() if self.lastConnected else None,
        }


# ================================================================================
# Sessions
# ================================================================================

@dataclass(frozen=True)
class SessionTrigger:
    """
    Evidence credited with starting or ending a session.

    Use the factory methods rather than the constructor:
        SessionTrigger.bluetooth(device)
        SessionTrigger.gps(sample)
        SessionTrigger.manual()

    Attributes:
        triggerType: bluetooth, gps or manual
        deviceId: Bluetooth device id (bluetooth only)
        deviceName: Bluetooth device name (bluetooth only)
        sample: Triggering location sample (gps only)
    """
    triggerType: TriggerType
    deviceId: Optional[str] = None
    deviceName: Optional[str] = None
    sample: Optional[LocationSample] = None

    @classmethod
    def bluetooth(cls, device: BluetoothDevice) -> "SessionTrigger":
        return cls(TriggerType.BLUETOOTH, deviceId=device.id, deviceName=device.name)

    @classmethod
    def gps(cls, sample: LocationSample) -> "SessionTrigger":
        return cls(TriggerType.GPS, sample=sample)

    @classmethod
    def manual(cls) -> "SessionTrigger":
        return cls(TriggerType.MANUAL)

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        result: Dict[str, Any] = {'type': self.triggerType.value}
        if self.triggerType == TriggerType.BLUETOOTH:
            result['deviceId'] = self.deviceId
            result['deviceName'] = self.deviceName
        elif self.triggerType == TriggerType.GPS and self.sample is not None:
            result['location'] = self.sample.toDict()
        return result

    @staticmethod
    def fromDict(data: Dict[str, Any]) -> "SessionTrigger":
        """Create a SessionTrigger from a dictionary produced by toDict()."""
        triggerType = TriggerType(data['type'])
        location = data.get('location')
        return SessionTrigger(
            triggerType=triggerType,
            deviceId=data.get('deviceId'),
            deviceName=data.get('deviceName'),
            sample=LocationSample.fromDict(location) if location else None,
        )


@dataclass(frozen=True)
class DriveSession:
    """
    A single trip.

    Statistics are computed when the session completes.

    Attributes:
        id: Unique session id
        startTime: When the session started
        status: active, paused or completed
        startTrigger: What started the session
        endTime: When the session ended (None until completed)
        endTrigger: What ended the session (None until completed)
        totalDistance: Meters
        totalDuration: Seconds
        averageSpeed: m/s
        maxSpeed: m/s
        waypointCount: Number of waypoints recorded
    """
    id: str
    startTime: datetime
    status: SessionStatus
    startTrigger: SessionTrigger
    endTime: Optional[datetime] = None
    endTrigger: Optional[SessionTrigger] = None
    totalDistance: float = 0.0
    totalDuration: float = 0.0
    averageSpeed: float = 0.0
    maxSpeed: float = 0.0
    waypointCount: int = 0

    def isCompleted(self) -> bool:
        """Check if this session has completed."""
        return self.status == SessionStatus.COMPLETED

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            'id': self.id,
            'startTime': self.startTime.isoformat(),
            'endTime': self.endTime.isoformat() if self.endTime else None,
            'status': self.status.value,
            'startTrigger': self.startTrigger.toDict(),
            'endTrigger': self.endTrigger.toDict() if self.endTrigger else None,
            'totalDistance': self.totalDistance,
            'totalDuration': self.totalDuration,
            'averageSpeed': self.averageSpeed,
            'maxSpeed': self.maxSpeed,
            'waypointCount': self.waypointCount,
        }


# ================================================================================
# Detection
# ================================================================================

@dataclass
class DrivingConditions:
    """
    Thresholds for driving detection.

    Attributes:
        minSpeed: Speed (m/s) at or above which the device is moving
        minDuration: Seconds of sustained movement before driving is confirmed
        minDistance: Meters; reported alongside results, does not gate state
        maxStationaryTime: Seconds below minSpeed before stationary
        sessionEndTimeout: Seconds paused before a session is ended
    """
    minSpeed: float = DEFAULT_MIN_SPEED
    minDuration: float = DEFAULT_MIN_DURATION
    minDistance: float = DEFAULT_MIN_DISTANCE
    maxStationaryTime: float = DEFAULT_MAX_STATIONARY_TIME
    sessionEndTimeout: float = DEFAULT_SESSION_END_TIMEOUT

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            'minSpeed': self.minSpeed,
            'minDuration': self.minDuration,
            'minDistance': self.minDistance,
            'maxStationaryTime': self.maxStationaryTime,
            'sessionEndTimeout': self.sessionEndTimeout,
        }


@dataclass(frozen=True)
class DetectionResult:
    """
    Output of DrivingDetector.processLocation() for one sample.

    Attributes:
        state: Detector state after the sample
        confidence: 0-1 confidence that the user is driving
        currentSpeed: Speed of the sample (m/s)
        averageSpeed: Mean of positive speeds in the window (m/s)
        distanceTraveled: Meters covered by the samples in the window
        drivingDuration: Seconds since sustained movement began
        stationaryDuration: Seconds since the device stopped moving
    """
    state: DetectorState
    confidence: float
    currentSpeed: float
    averageSpeed: float
    distanceTraveled: float
    drivingDuration: float
    stationaryDuration: float

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            'state': self.state.value,
            'confidence': round(self.confidence, 3),
            'currentSpeed': self.currentSpeed,
            'averageSpeed': round(self.averageSpeed, 2),
            'distanceTraveled': round(self.distanceTraveled, 1),
            'drivingDuration': self.drivingDuration,
            'stationaryDuration': self.stationaryDuration,
        }
