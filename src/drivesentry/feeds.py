################################################################################
# File Name: feeds.py
# Purpose/Description: Contracts for location/Bluetooth feeds and persistence
# Author: Ralph Agent
# Creation Date: 2026-10-13
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-13    | Ralph Agent  | Initial creation (US-DS-008)
# 2026-10-17    | M. Cornelison | US-DS-019: Record tracking mode after it applies
# ================================================================================
################################################################################
"""
Abstract collaborators consumed by the orchestrator.

The orchestrator never touches hardware, permissions or storage directly.
Platform code provides implementations of:
- LocationFeed: delivers LocationSamples, switchable accuracy mode
- BluetoothFeed: delivers connect/disconnect of Bluetooth devices
- DeviceTagStore: persists manually tagged car devices
- SessionRepository: persists completed sessions

In-memory implementations live in drivesentry.simulator and SQLite-backed
stores in drivesentry.storage.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from .types import BluetoothDevice, CarDevice, DriveSession, LocationSample, TrackingMode

logger = logging.getLogger(__name__)

SampleCallback = Callable[[LocationSample], None]
DeviceCallback = Callable[[BluetoothDevice], None]
ErrorCallback = Callable[[Exception], None]


# Accuracy/interval requested from the platform per tracking mode
TRACKING_MODE_PROFILES: Dict[TrackingMode, Dict[str, Any]] = {
    TrackingMode.MONITORING: {
        'accuracyMeters': 3000,         # significant changes only
        'intervalMs': None,
        'distanceFilterMeters': None,
    },
    TrackingMode.DRIVING: {
        'accuracyMeters': 10,
        'intervalMs': 5000,
        'distanceFilterMeters': 10,
    },
    TrackingMode.PAUSED: {
        'accuracyMeters': 100,
        'intervalMs': 30000,
        'distanceFilterMeters': None,
    },
}


# ================================================================================
# Feeds
# ================================================================================

class LocationFeed(ABC):
    """
    Abstract base class for location feeds.

    Subclasses implement:
    - start(): Begin delivering samples
    - stop(): Stop delivering samples
    - _applyMode(): Push a tracking mode to the platform

    Subclasses deliver samples with _deliverSample() and report
    unrecoverable failures with _reportError().
    """

    def __init__(self):
        self._onSample: Optional[SampleCallback] = None
        self._onError: Optional[ErrorCallback] = None
        self._mode = TrackingMode.MONITORING
        self._running = False

    def initialize(self) -> None:
        """Prepare the feed (permissions, platform tasks). Default: nothing."""
        pass

    def subscribe(
        self,
        onSample: SampleCallback,
        onError: Optional[ErrorCallback] = None
    ) -> None:
        """
        Register the sample consumer.

        Args:
            onSample: Called with each LocationSample
            onError: Called when the feed fails
        """
        self._onSample = onSample
        self._onError = onError

    def setMode(self, mode: TrackingMode) -> None:
        """
        Change accuracy/interval mode.

        The mode is recorded only once the platform has accepted it.

        Args:
            mode: Requested tracking mode
        """
        if mode == self._mode:
            return
        logger.debug(f"Tracking mode: {self._mode.value} -> {mode.value}")
        self._applyMode(mode, TRACKING_MODE_PROFILES[mode])
        self._mode = mode

    def getMode(self) -> TrackingMode:
        """Get the current tracking mode."""
        return self._mode

    def isRunning(self) -> bool:
        """Check if the feed is delivering samples."""
        return self._running

    @abstractmethod
    def start(self) -> None:
        """
        Begin delivering samples.

        Raises:
            FeedUnavailableError: If location hardware/permission is unavailable
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering samples. Must be safe to call when not running."""
        pass

    @abstractmethod
    def _applyMode(self, mode: TrackingMode, profile: Dict[str, Any]) -> None:
        """
        Apply a tracking mode to the platform.

        Args:
            mode: New mode
            profile: Entry from TRACKING_MODE_PROFILES
        """
        pass

    def _deliverSample(self, sample: LocationSample) -> None:
        """Hand a sample to the subscriber."""
        if self._onSample is not None:
            self._onSample(sample)

    def _reportError(self, error: Exception) -> None:
        """Hand a feed failure to the subscriber."""
        logger.error(f"Location feed error: {error}")
        if self._onError is not None:
            self._onError(error)


class BluetoothFeed(ABC):
    """
    Abstract base class for Bluetooth feeds.

    Scan errors are the feed's problem: log them and keep scanning. Only
    failures that leave the feed unusable go to _reportError().
    """

    def __init__(self):
        self._onConnect: Optional[DeviceCallback] = None
        self._onDisconnect: Optional[DeviceCallback] = None
        self._onError: Optional[ErrorCallback] = None
        self._running = False

    def initialize(self) -> None:
        """Prepare the feed (adapter state, permissions). Default: nothing."""
        pass

    def subscribe(
        self,
        onConnect: DeviceCallback,
        onDisconnect: DeviceCallback,
        onError: Optional[ErrorCallback] = None
    ) -> None:
        """
        Register the connect/disconnect consumers.

        Args:
            onConnect: Called with a device that connected
            onDisconnect: Called with a device that disconnected
            onError: Called when the feed fails
        """
        self._onConnect = onConnect
        self._onDisconnect = onDisconnect
        self._onError = onError

    def isRunning(self) -> bool:
        """Check if the feed is delivering events."""
        return self._running

    @abstractmethod
    def start(self) -> None:
        """
        Begin delivering events.

        Raises:
            FeedUnavailableError: If the adapter/permission is unavailable
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering events. Must be safe to call when not running."""
        pass

    def _deliverConnect(self, device: BluetoothDevice) -> None:
        if self._onConnect is not None:
            self._onConnect(device)

    def _deliverDisconnect(self, device: BluetoothDevice) -> None:
        if self._onDisconnect is not None:
            self._onDisconnect(device)

    def _reportError(self, error: Exception) -> None:
        logger.error(f"Bluetooth feed error: {error}")
        if self._onError is not None:
            self._onError(error)


# ================================================================================
# Persistence
# ================================================================================

class DeviceTagStore(ABC):
    """Persists manually tagged car devices across restarts."""

    @abstractmethod
    def loadTaggedDevices(self) -> List[CarDevice]:
        """Load every tagged device."""
        pass

    @abstractmethod
    def save(self, device: CarDevice) -> None:
        """Insert or replace a tagged device."""
        pass

    @abstractmethod
    def delete(self, deviceId: str) -> bool:
        """Remove a tagged device. Returns True if it existed."""
        pass


class SessionRepository(ABC):
    """Persists completed sessions."""

    @abstractmethod
    def save(self, session: DriveSession) -> None:
        """Insert or replace a completed session."""
        pass
