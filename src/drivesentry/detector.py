################################################################################
# File Name: detector.py
# Purpose/Description: Sliding-window driving detection over location samples
# Author: Michael Cornelison
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | M. Cornelison | Initial implementation for US-DS-004
# 2026-10-14    | Ralph Agent  | US-DS-006: Report distance over the window
# 2026-10-17    | M. Cornelison | US-DS-019: Re-detect after stationary
# ================================================================================
################################################################################

"""
Driving detection for the DriveSentry engine.

Provides:
- Classification of movement as idle/detecting/driving/stationary
- Debounced transitions driven by configurable speed and duration thresholds
- A confidence score for the driving decision
- Rolling 5-minute window statistics (average speed, distance)

The detector knows nothing about sessions. The orchestrator watches the
state it reports and decides when sessions start, pause and end.

Usage:
    from drivesentry.detector import DrivingDetector

    detector = DrivingDetector(DrivingConditions(minSpeed=5, minDuration=60))

    for sample in samples:
        result = detector.processLocation(sample)
        if result.state == DetectorState.DRIVING:
            print(f"Driving | confidence={result.confidence:.2f}")
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .geo import pathDistance
from .types import (
    HISTORY_HORIZON_MS,
    DetectionResult,
    DetectorState,
    DrivingConditions,
    LocationSample,
)

logger = logging.getLogger(__name__)


# ================================================================================
# Data Classes
# ================================================================================

@dataclass
class DetectorStats:
    """
    Statistics about detector operation.

    Attributes:
        samplesProcessed: Total number of samples processed
        drivingConfirmations: Times the detector entered DRIVING
        stationaryDetections: Times the detector entered STATIONARY
        lastStateChange: When the state last changed
    """
    samplesProcessed: int = 0
    drivingConfirmations: int = 0
    stationaryDetections: int = 0
    lastStateChange: Optional[datetime] = None

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            'samplesProcessed': self.samplesProcessed,
            'drivingConfirmations': self.drivingConfirmations,
            'stationaryDetections': self.stationaryDetections,
            'lastStateChange': (
                self.lastStateChange.isoformat() if self.lastStateChange else None
            ),
        }


# ================================================================================
# Driving Detector Class
# ================================================================================

class DrivingDetector:
    """
    Determines whether the user is driving from location samples.

    Detection algorithm, evaluated per sample:
    1. Keep the last 5 minutes of samples (relative to the newest timestamp)
    2. Speed >= minSpeed counts as moving
    3. Moving: start the driving timer if not running (DETECTING); once it
       has run for minDuration the state becomes DRIVING
    4. Not moving: start the stationary timer if not running; once it has
       run for maxStationaryTime the state becomes STATIONARY

    Entering STATIONARY clears the driving timer, so leaving it goes
    through DETECTING and needs a fresh minDuration of movement.

    Timing uses sample timestamps, never the wall clock, so replayed or
    batched samples classify the same as live ones.
    """

    def __init__(self, conditions: Optional[DrivingConditions] = None):
        """
        Initialize the driving detector.

        Args:
            conditions: Detection thresholds (defaults apply when omitted)
        """
        self._conditions = conditions or DrivingConditions()

        # State tracking
        self._state = DetectorState.IDLE
        self._history: List[LocationSample] = []

        # Threshold timing (sample timestamps, ms)
        self._drivingStartTime: Optional[float] = None
        self._stationaryStartTime: Optional[float] = None

        # Statistics
        self._stats = DetectorStats()

        # Callbacks
        self._onStateChange: Optional[Callable[[DetectorState, DetectorState], None]] = None

        # Thread safety
        self._lock = threading.Lock()

    # ================================================================================
    # Configuration
    # ================================================================================

    def getConditions(self) -> DrivingConditions:
        """Get current detection thresholds."""
        return self._conditions

    def registerCallbacks(
        self,
        onStateChange: Optional[Callable[[DetectorState, DetectorState], None]] = None
    ) -> None:
        """
        Register callbacks for detector events.

        Args:
            onStateChange: Called on state change (oldState, newState)
        """
        self._onStateChange = onStateChange

    # ================================================================================
    # State
    # ================================================================================

    def getState(self) -> DetectorState:
        """Get current detector state."""
        return self._state

    def isDriving(self) -> bool:
        """Check if driving is currently confirmed."""
        return self._state == DetectorState.DRIVING

    def getHistorySize(self) -> int:
        """Get number of samples in the rolling window."""
        return len(self._history)

    # ================================================================================
    # Sample Processing
    # ================================================================================

    def processLocation(self, sample: LocationSample) -> DetectionResult:
        """
        Process a location sample and update detector state.

        Args:
            sample: Latest location sample

        Returns:
            DetectionResult describing the state after this sample
        """
        with self._lock:
            self._stats.samplesProcessed += 1

            self._history.append(sample)
            cutoff = sample.timestamp - HISTORY_HORIZON_MS
            self._history = [s for s in self._history if s.timestamp > cutoff]

            speed = sample.effectiveSpeed()
            isMoving = speed >= self._conditions.minSpeed

            if isMoving:
                self._processMoving(sample)
            else:
                self._processStationary(sample)

            return self._buildResult(sample)

    def _processMoving(self, sample: LocationSample) -> None:
        """
        Handle a sample at or above the speed threshold.

        Args:
            sample: Current sample
        """
        self._stationaryStartTime = None

        if self._drivingStartTime is None:
            self._drivingStartTime = sample.timestamp
            self._transitionState(DetectorState.DETECTING)
            logger.debug(
                f"Speed above threshold, starting timer | speed={sample.effectiveSpeed()}"
            )

        elapsed = (sample.timestamp - self._drivingStartTime) / 1000.0
        if elapsed >= self._conditions.minDuration:
            self._transitionState(DetectorState.DRIVING)

    def _processStationary(self, sample: LocationSample) -> None:
        """
        Handle a sample below the speed threshold.

        Args:
            sample: Current sample
        """
        if self._stationaryStartTime is None:
            self._stationaryStartTime = sample.timestamp
            logger.debug(
                f"Speed below threshold, starting timer | speed={sample.effectiveSpeed()}"
            )

        elapsed = (sample.timestamp - self._stationaryStartTime) / 1000.0
        if elapsed >= self._conditions.maxStationaryTime:
            self._drivingStartTime = None
            self._transitionState(DetectorState.STATIONARY)

    def _transitionState(self, newState: DetectorState) -> None:
        """
        Transition to a new detector state.

        Args:
            newState: The new state to transition to
        """
        oldState = self._state
        if oldState == newState:
            return

        self._state = newState
        self._stats.lastStateChange = datetime.now()
        if newState == DetectorState.DRIVING:
            self._stats.drivingConfirmations += 1
        elif newState == DetectorState.STATIONARY:
            self._stats.stationaryDetections += 1

        logger.debug(f"Detector state: {oldState.value} -> {newState.value}")

        if self._onStateChange:
            try:
                self._onStateChange(oldState, newState)
            except Exception as e:
                logger.error(f"onStateChange callback error: {e}")

    def _buildResult(self, sample: LocationSample) -> DetectionResult:
        """
        Build the result for the latest sample.

        Args:
            sample: Latest sample

        Returns:
            DetectionResult
        """
        drivingDuration = 0.0
        if self._drivingStartTime is not None:
            drivingDuration = (sample.timestamp - self._drivingStartTime) / 1000.0

        stationaryDuration = 0.0
        if self._stationaryStartTime is not None:
            stationaryDuration = (sample.timestamp - self._stationaryStartTime) / 1000.0

        speeds = [s.speed for s in self._history if s.speed is not None and s.speed > 0]
        averageSpeed = sum(speeds) / len(speeds) if speeds else 0.0

        minDuration = self._conditions.minDuration
        confidence = 0.0
        if self._state == DetectorState.DRIVING:
            confidence = 1.0 if minDuration <= 0 else min(1.0, drivingDuration / (2 * minDuration))
        elif self._state == DetectorState.DETECTING:
            confidence = 1.0 if minDuration <= 0 else min(1.0, drivingDuration / minDuration)

        return DetectionResult(
            state=self._state,
            confidence=confidence,
            currentSpeed=sample.effectiveSpeed(),
            averageSpeed=averageSpeed,
            distanceTraveled=pathDistance(self._history),
            drivingDuration=drivingDuration,
            stationaryDuration=stationaryDuration,
        )

    # ================================================================================
    # Statistics
    # ================================================================================

    def getStats(self) -> DetectorStats:
        """
        Get detector statistics.

        Returns:
            DetectorStats copy
        """
        with self._lock:
            return DetectorStats(
                samplesProcessed=self._stats.samplesProcessed,
                drivingConfirmations=self._stats.drivingConfirmations,
                stationaryDetections=self._stats.stationaryDetections,
                lastStateChange=self._stats.lastStateChange,
            )

    def reset(self) -> None:
        """Clear timers and history, returning to IDLE."""
        with self._lock:
            self._state = DetectorState.IDLE
            self._history = []
            self._drivingStartTime = None
            self._stationaryStartTime = None
            logger.debug("Driving detector reset")
