################################################################################
# File Name: drive_scenario.py
# Purpose/Description: Scripted drive scenarios replayed through simulated feeds
# Author: Michael Cornelison
# Creation Date: 2026-10-16
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-16    | M. Cornelison | Initial implementation for US-DS-017
# ================================================================================
################################################################################

"""
Drive scenario module for the DriveSentry simulator.

Provides:
- ScenarioPhase dataclass for individual phase definitions
- DriveScenario dataclass for complete scenario definitions
- DriveScenarioRunner class that turns a scenario into location samples and
  Bluetooth events on the simulated feeds
- Built-in scenarios: commute, traffic_stop, short_hop

A phase holds a target speed and heading for a duration. The runner emits
one sample every sampleIntervalSeconds, ramping speed toward the phase
target at a fixed acceleration and moving the position along the heading.
A phase may connect or disconnect the car's Bluetooth device as it begins.

Usage:
    from drivesentry.simulator import DriveScenarioRunner, getBuiltInScenario

    runner = DriveScenarioRunner(
        getBuiltInScenario('commute'), locationFeed, bluetoothFeed, clock
    )
    runner.onPhaseStart = lambda phase: print(f"Starting: {phase.name}")
    runner.runToCompletion()
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..exceptions import DriveSentryError
from ..geo import destinationPoint
from ..types import BluetoothDevice, LocationSample
from .simulated_feeds import SimulatedBluetoothFeed, SimulatedClock, SimulatedLocationFeed

logger = logging.getLogger(__name__)


# ================================================================================
# Constants
# ================================================================================

DEFAULT_SAMPLE_INTERVAL_SECONDS = 5.0
DEFAULT_ACCELERATION_MPS2 = 3.0
DEFAULT_SAMPLE_ACCURACY_M = 5.0

DEFAULT_START_LATITUDE = 37.7749
DEFAULT_START_LONGITUDE = -122.4194

DEFAULT_CAR_DEVICE = BluetoothDevice(id='00:1A:7D:DA:71:13', name='Honda HandsFreeLink')

VALID_BLUETOOTH_ACTIONS = ('connect', 'disconnect')


# ================================================================================
# Enums
# ================================================================================

class ScenarioState(Enum):
    """State of scenario execution."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


# ================================================================================
# Exceptions
# ================================================================================

class DriveScenarioError(DriveSentryError):
    """Base exception for drive scenario errors."""
    pass


class ScenarioLoadError(DriveScenarioError):
    """Error loading a scenario."""
    pass


class ScenarioValidationError(DriveScenarioError):
    """Scenario validation failed."""

    def __init__(self, message: str, invalidFields: Optional[List[str]] = None) -> None:
        super().__init__(message, details={'invalidFields': invalidFields or []})
        self.invalidFields = invalidFields or []


# ================================================================================
# Data Classes
# ================================================================================

@dataclass
class ScenarioPhase:
    """
    A single phase within a drive scenario.

    Attributes:
        name: Human-readable name for the phase
        durationSeconds: How long the phase lasts
        speedMps: Target speed in m/s
        headingDegrees: Direction of travel, 0 = north
        bluetooth: 'connect' or 'disconnect' the car device as the phase
            begins (None = no change)
        description: Optional longer description of the phase
    """
    name: str
    durationSeconds: float
    speedMps: float = 0.0
    headingDegrees: float = 0.0
    bluetooth: Optional[str] = None
    description: Optional[str] = None

    def toDict(self) -> Dict[str, Any]:
        """Convert phase to dictionary."""
        result: Dict[str, Any] = {
            "name": self.name,
            "durationSeconds": self.durationSeconds,
            "speedMps": self.speedMps,
            "headingDegrees": self.headingDegrees,
        }
        if self.bluetooth is not None:
            result["bluetooth"] = self.bluetooth
        if self.description is not None:
            result["description"] = self.description
        return result

    @staticmethod
    def fromDict(data: Dict[str, Any]) -> "ScenarioPhase":
        """
        Create ScenarioPhase from dictionary.

        Raises:
            ScenarioValidationError: If required fields are missing
        """
        invalidFields = [key for key in ("name", "durationSeconds") if key not in data]
        if invalidFields:
            raise ScenarioValidationError(
                f"Missing required fields in phase: {invalidFields}",
                invalidFields=invalidFields
            )

        return ScenarioPhase(
            name=data["name"],
            durationSeconds=float(data["durationSeconds"]),
            speedMps=float(data.get("speedMps", 0.0)),
            headingDegrees=float(data.get("headingDegrees", 0.0)),
            bluetooth=data.get("bluetooth"),
            description=data.get("description"),
        )


@dataclass
class DriveScenario:
    """
    A complete drive scenario consisting of multiple phases.

    Attributes:
        name: Scenario name
        description: What the scenario represents
        phases: Ordered list of phases
    """
    name: str
    description: str
    phases: List[ScenarioPhase] = field(default_factory=list)

    def toDict(self) -> Dict[str, Any]:
        """Convert scenario to dictionary."""
        return {
            "name": self.name,
            "description": self.description,
            "phases": [phase.toDict() for phase in self.phases],
        }

    @staticmethod
    def fromDict(data: Dict[str, Any]) -> "DriveScenario":
        """
        Create DriveScenario from dictionary.

        Raises:
            ScenarioValidationError: If required fields are missing
        """
        invalidFields = [
            key for key in ("name", "description", "phases") if key not in data
        ]
        if invalidFields:
            raise ScenarioValidationError(
                f"Missing required fields in scenario: {invalidFields}",
                invalidFields=invalidFields
            )

        return DriveScenario(
            name=data["name"],
            description=data["description"],
            phases=[ScenarioPhase.fromDict(p) for p in data["phases"]],
        )

    def getTotalDuration(self) -> float:
        """Total duration in seconds."""
        return sum(phase.durationSeconds for phase in self.phases)

    def validate(self) -> List[str]:
        """
        Validate the scenario.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.name:
            errors.append("Scenario name is required")
        if not self.description:
            errors.append("Scenario description is required")
        if not self.phases:
            errors.append("Scenario must have at least one phase")

        for i, phase in enumerate(self.phases):
            if phase.durationSeconds <= 0:
                errors.append(f"Phase {i} ({phase.name}): duration must be positive")
            if phase.speedMps < 0:
                errors.append(f"Phase {i} ({phase.name}): speedMps cannot be negative")
            if phase.bluetooth is not None and phase.bluetooth not in VALID_BLUETOOTH_ACTIONS:
                errors.append(
                    f"Phase {i} ({phase.name}): bluetooth must be one of "
                    f"{', '.join(VALID_BLUETOOTH_ACTIONS)}"
                )

        return errors


# ================================================================================
# DriveScenarioRunner Class
# ================================================================================

class DriveScenarioRunner:
    """
    Replays a DriveScenario through simulated feeds.

    Time is driven by a SimulatedClock so a half-hour scenario runs
    instantly and sessions still get realistic start/end times.

    Callbacks:
        onPhaseStart: Called when a phase begins (receives ScenarioPhase)
        onPhaseEnd: Called when a phase ends (receives ScenarioPhase)
        onScenarioComplete: Called when the last phase ends (no args)

    Example:
        runner = DriveScenarioRunner(scenario, locationFeed, bluetoothFeed, clock)
        runner.start()
        while runner.isRunning():
            runner.step()
    """

    def __init__(
        self,
        scenario: DriveScenario,
        locationFeed: SimulatedLocationFeed,
        bluetoothFeed: SimulatedBluetoothFeed,
        clock: Optional[SimulatedClock] = None,
        sampleIntervalSeconds: float = DEFAULT_SAMPLE_INTERVAL_SECONDS,
        startLatitude: float = DEFAULT_START_LATITUDE,
        startLongitude: float = DEFAULT_START_LONGITUDE,
        carDevice: BluetoothDevice = DEFAULT_CAR_DEVICE,
        accelerationMps2: float = DEFAULT_ACCELERATION_MPS2,
    ) -> None:
        """
        Initialize scenario runner.

        Args:
            scenario: DriveScenario to execute
            locationFeed: Feed that receives generated samples
            bluetoothFeed: Feed that receives connect/disconnect events
            clock: Time source advanced per sample (a new one when omitted)
            sampleIntervalSeconds: Seconds between samples
            startLatitude: Starting latitude
            startLongitude: Starting longitude
            carDevice: Device connected/disconnected by phases
            accelerationMps2: Rate speed ramps toward each phase target
        """
        self.scenario = scenario
        self.locationFeed = locationFeed
        self.bluetoothFeed = bluetoothFeed
        self.clock = clock or SimulatedClock()
        self.sampleIntervalSeconds = sampleIntervalSeconds
        self.carDevice = carDevice
        self.accelerationMps2 = accelerationMps2

        self._startLatitude = startLatitude
        self._startLongitude = startLongitude

        # Execution state
        self.state = ScenarioState.IDLE
        self.currentPhaseIndex = 0
        self.phaseElapsedSeconds = 0.0
        self.totalElapsedSeconds = 0.0
        self.samplesEmitted = 0

        # Vehicle state
        self.latitude = startLatitude
        self.longitude = startLongitude
        self.currentSpeed = 0.0

        # Callbacks
        self.onPhaseStart: Optional[Callable[[ScenarioPhase], None]] = None
        self.onPhaseEnd: Optional[Callable[[ScenarioPhase], None]] = None
        self.onScenarioComplete: Optional[Callable[[], None]] = None

        logger.debug(f"DriveScenarioRunner initialized with scenario: {scenario.name}")

    # ==========================================================================
    # Execution Control
    # ==========================================================================

    def start(self) -> bool:
        """
        Start scenario execution.

        Returns:
            True if started successfully
        """
        if self.state == ScenarioState.RUNNING:
            logger.warning("Scenario already running")
            return False

        errors = self.scenario.validate()
        if errors:
            logger.error(f"Scenario validation failed: {errors}")
            self.state = ScenarioState.ERROR
            return False

        self.currentPhaseIndex = 0
        self.phaseElapsedSeconds = 0.0
        self.totalElapsedSeconds = 0.0
        self.samplesEmitted = 0
        self.latitude = self._startLatitude
        self.longitude = self._startLongitude
        self.currentSpeed = 0.0
        self.state = ScenarioState.RUNNING

        self._beginPhase(0)

        logger.info(f"Started scenario: {self.scenario.name}")
        return True

    def stop(self) -> None:
        """Stop scenario execution."""
        if self.state == ScenarioState.IDLE:
            return

        logger.info(f"Stopping scenario: {self.scenario.name}")
        self.state = ScenarioState.IDLE

    def isRunning(self) -> bool:
        """Check if scenario is currently running."""
        return self.state == ScenarioState.RUNNING

    def isCompleted(self) -> bool:
        """Check if scenario has completed."""
        return self.state == ScenarioState.COMPLETED

    def getCurrentPhase(self) -> Optional[ScenarioPhase]:
        """Get the phase being executed, if any."""
        if self.state != ScenarioState.RUNNING:
            return None
        return self.scenario.phases[self.currentPhaseIndex]

    def getProgress(self) -> float:
        """Scenario progress, 0.0-1.0."""
        total = self.scenario.getTotalDuration()
        if self.state == ScenarioState.COMPLETED or total <= 0:
            return 1.0 if self.state == ScenarioState.COMPLETED else 0.0
        return min(1.0, self.totalElapsedSeconds / total)

    # ==========================================================================
    # Sample Generation
    # ==========================================================================

    def step(self) -> Optional[LocationSample]:
        """
        Advance by one sample interval and emit a location sample.

        Returns:
            The emitted sample, or None when not running
        """
        phase = self.getCurrentPhase()
        if phase is None:
            return None

        dt = self.sampleIntervalSeconds
        previousSpeed = self.currentSpeed
        self._rampSpeed(phase.speedMps, dt)

        distance = (previousSpeed + self.currentSpeed) / 2.0 * dt
        if distance > 0:
            self.latitude, self.longitude = destinationPoint(
                self.latitude, self.longitude, phase.headingDegrees, distance
            )

        self.clock.advance(dt)
        sample = LocationSample(
            latitude=self.latitude,
            longitude=self.longitude,
            timestamp=self.clock.timestampMs(),
            accuracy=DEFAULT_SAMPLE_ACCURACY_M,
            speed=self.currentSpeed,
            heading=phase.headingDegrees,
        )
        self.locationFeed.pushSample(sample)
        self.samplesEmitted += 1

        self.phaseElapsedSeconds += dt
        self.totalElapsedSeconds += dt
        if self.phaseElapsedSeconds >= phase.durationSeconds - 1e-9:
            self._endCurrentPhase()

        return sample

    def runToCompletion(self) -> int:
        """
        Run the whole scenario.

        Returns:
            Number of samples emitted
        """
        if self.state != ScenarioState.RUNNING and not self.start():
            return 0

        while self.isRunning():
            self.step()

        return self.samplesEmitted

    def _rampSpeed(self, targetSpeed: float, dt: float) -> None:
        """Move current speed toward the target at the configured acceleration."""
        maxChange = self.accelerationMps2 * dt
        delta = targetSpeed - self.currentSpeed
        if abs(delta) <= maxChange:
            self.currentSpeed = targetSpeed
        else:
            self.currentSpeed += maxChange if delta > 0 else -maxChange

    # ==========================================================================
    # Phase Management
    # ==========================================================================

    def _beginPhase(self, phaseIndex: int) -> None:
        phase = self.scenario.phases[phaseIndex]
        self.currentPhaseIndex = phaseIndex
        self.phaseElapsedSeconds = 0.0

        logger.debug(f"Beginning phase {phaseIndex}: {phase.name}")

        if phase.bluetooth == 'connect':
            self.bluetoothFeed.connectDevice(self.carDevice)
        elif phase.bluetooth == 'disconnect':
            self.bluetoothFeed.disconnectDevice(self.carDevice)

        if self.onPhaseStart:
            try:
                self.onPhaseStart(phase)
            except Exception as e:
                logger.error(f"onPhaseStart callback error: {e}")

    def _endCurrentPhase(self) -> None:
        phase = self.scenario.phases[self.currentPhaseIndex]
        logger.debug(f"Ending phase {self.currentPhaseIndex}: {phase.name}")

        if self.onPhaseEnd:
            try:
                self.onPhaseEnd(phase)
            except Exception as e:
                logger.error(f"onPhaseEnd callback error: {e}")

        nextIndex = self.currentPhaseIndex + 1
        if nextIndex < len(self.scenario.phases):
            self._beginPhase(nextIndex)
        else:
            self._completeScenario()

    def _completeScenario(self) -> None:
        logger.info(
            f"Scenario complete: {self.scenario.name} "
            f"({self.samplesEmitted} samples, {self.totalElapsedSeconds:.0f}s)"
        )
        self.state = ScenarioState.COMPLETED

        if self.onScenarioComplete:
            try:
                self.onScenarioComplete()
            except Exception as e:
                logger.error(f"onScenarioComplete callback error: {e}")


# ================================================================================
# Loading Functions
# ================================================================================

def loadScenario(path: str) -> DriveScenario:
    """
    Load a scenario from a JSON file.

    Raises:
        ScenarioLoadError: If file cannot be loaded or parsed
        ScenarioValidationError: If scenario is invalid
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ScenarioLoadError(f"Scenario file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in scenario file: {e}") from e

    scenario = DriveScenario.fromDict(data)

    errors = scenario.validate()
    if errors:
        raise ScenarioValidationError(
            f"Scenario validation failed: {errors}",
            invalidFields=errors
        )

    logger.debug(f"Loaded scenario '{scenario.name}' from {path}")
    return scenario


def listBuiltInScenarios() -> List[str]:
    """Names of the built-in scenarios."""
    return sorted(BUILT_IN_SCENARIOS)


def getBuiltInScenario(name: str) -> DriveScenario:
    """
    Get a built-in scenario by name.

    Raises:
        ScenarioLoadError: If no built-in scenario has that name
    """
    factory = BUILT_IN_SCENARIOS.get(name)
    if factory is None:
        raise ScenarioLoadError(
            f"Built-in scenario not found: {name}",
            details={'available': listBuiltInScenarios()}
        )
    return factory()


# ================================================================================
# Built-in Scenario Definitions
# ================================================================================

def getCommuteScenario() -> DriveScenario:
    """
    Car connects, drive is confirmed, car disconnects on arrival.

    Expected: one session, started and ended by the Bluetooth device.
    """
    return DriveScenario(
        name="commute",
        description="Morning commute with the car's hands-free kit connected",
        phases=[
            ScenarioPhase(
                name="parked",
                durationSeconds=10.0,
                speedMps=0.0,
                bluetooth="connect",
                description="Phone connects to the car"
            ),
            ScenarioPhase(
                name="pull_out",
                durationSeconds=30.0,
                speedMps=8.0,
                headingDegrees=90.0,
            ),
            ScenarioPhase(
                name="arterial",
                durationSeconds=120.0,
                speedMps=15.0,
                headingDegrees=90.0,
            ),
            ScenarioPhase(
                name="red_light",
                durationSeconds=40.0,
                speedMps=0.0,
                headingDegrees=90.0,
                description="Short stop, below maxStationaryTime"
            ),
            ScenarioPhase(
                name="highway",
                durationSeconds=300.0,
                speedMps=28.0,
                headingDegrees=45.0,
            ),
            ScenarioPhase(
                name="exit",
                durationSeconds=60.0,
                speedMps=10.0,
                headingDegrees=0.0,
            ),
            ScenarioPhase(
                name="arrive",
                durationSeconds=20.0,
                speedMps=0.0,
            ),
            ScenarioPhase(
                name="park",
                durationSeconds=30.0,
                speedMps=0.0,
                bluetooth="disconnect",
                description="Engine off, hands-free kit disconnects"
            ),
            ScenarioPhase(
                name="walk_away",
                durationSeconds=60.0,
                speedMps=1.4,
                headingDegrees=180.0,
            ),
        ],
    )


def getTrafficStopScenario() -> DriveScenario:
    """
    GPS-only trip with a long stop and a final park.

    Expected: one session that pauses, resumes, pauses again and is ended
    by the stationary timeout.
    """
    return DriveScenario(
        name="traffic_stop",
        description="GPS-only drive with a long stop and a timed-out park",
        phases=[
            ScenarioPhase(
                name="drive",
                durationSeconds=180.0,
                speedMps=12.0,
                headingDegrees=270.0,
            ),
            ScenarioPhase(
                name="long_stop",
                durationSeconds=150.0,
                speedMps=0.0,
                description="Longer than maxStationaryTime, session pauses"
            ),
            ScenarioPhase(
                name="drive_on",
                durationSeconds=120.0,
                speedMps=12.0,
                headingDegrees=270.0,
            ),
            ScenarioPhase(
                name="parked",
                durationSeconds=330.0,
                speedMps=0.0,
                description="Longer than sessionEndTimeout, session ends"
            ),
        ],
    )


def getShortHopScenario() -> DriveScenario:
    """
    Movement shorter than minDuration.

    Expected: no session.
    """
    return DriveScenario(
        name="short_hop",
        description="Brief movement that never confirms driving",
        phases=[
            ScenarioPhase(
                name="roll",
                durationSeconds=45.0,
                speedMps=10.0,
                headingDegrees=0.0,
            ),
            ScenarioPhase(
                name="stop",
                durationSeconds=60.0,
                speedMps=0.0,
            ),
        ],
    )


BUILT_IN_SCENARIOS: Dict[str, Callable[[], DriveScenario]] = {
    'commute': getCommuteScenario,
    'traffic_stop': getTrafficStopScenario,
    'short_hop': getShortHopScenario,
}
