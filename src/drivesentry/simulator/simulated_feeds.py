################################################################################
# File Name: simulated_feeds.py
# Purpose/Description: In-memory location/Bluetooth feeds and a controllable clock
# Author: Ralph Agent
# Creation Date: 2026-10-16
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-16    | Ralph Agent  | Initial implementation (US-DS-017)
# ================================================================================
################################################################################

"""
Simulated feeds for development and testing without hardware.

Provides:
- SimulatedClock: Manually advanced time source
- SimulatedLocationFeed: LocationFeed that delivers pushed samples
- SimulatedBluetoothFeed: BluetoothFeed driven by connect/disconnect calls

Both feeds can be told to fail their next start() to exercise
FeedUnavailableError handling, and to report a runtime failure.

Usage:
    from drivesentry.simulator import SimulatedLocationFeed, SimulatedBluetoothFeed

    locationFeed = SimulatedLocationFeed()
    bluetoothFeed = SimulatedBluetoothFeed()
    orchestrator = DriveSentryOrchestrator(locationFeed, bluetoothFeed)
    orchestrator.initialize()
    orchestrator.start()

    bluetoothFeed.connectDevice(BluetoothDevice('00:1A', 'Toyota Camry'))
    locationFeed.pushSample(sample)
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..exceptions import FeedUnavailableError
from ..feeds import BluetoothFeed, LocationFeed
from ..types import BluetoothDevice, LocationSample, TrackingMode

logger = logging.getLogger(__name__)


# ================================================================================
# Clock
# ================================================================================

class SimulatedClock:
    """
    Time source that only moves when advanced.

    Callable, so it can be passed wherever a `clock` is accepted.

    Example:
        clock = SimulatedClock(datetime(2026, 10, 16, 8, 0, 0))
        clock.advance(5)
        sample = LocationSample(0.0, 0.0, timestamp=clock.timestampMs())
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime.now().replace(microsecond=0)

    def __call__(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> datetime:
        """Move time forward and return the new time."""
        self._now = self._now + timedelta(seconds=seconds)
        return self._now

    def timestampMs(self) -> float:
        """Current time as epoch milliseconds."""
        return self._now.timestamp() * 1000.0


# ================================================================================
# Location Feed
# ================================================================================

class SimulatedLocationFeed(LocationFeed):
    """
    LocationFeed that delivers whatever is pushed into it.

    Samples pushed while the feed is stopped are dropped, like a platform
    feed that is not delivering.

    Attributes:
        modeHistory: Every mode applied, in order
        samplesDelivered: Number of samples handed to the subscriber
    """

    def __init__(self):
        super().__init__()
        self.modeHistory: List[TrackingMode] = []
        self.samplesDelivered = 0
        self.startCount = 0
        self.stopCount = 0
        self._pendingStartError: Optional[Exception] = None
        self._pendingStopError: Optional[Exception] = None

    def failNextStart(self, error: Optional[Exception] = None) -> None:
        """Make the next start() raise (FeedUnavailableError by default)."""
        self._pendingStartError = error or FeedUnavailableError(
            "Location permission denied", details={'feed': 'location'}
        )

    def failNextStop(self, error: Optional[Exception] = None) -> None:
        """Make the next stop() raise after stopping delivery."""
        self._pendingStopError = error or RuntimeError("Location feed stop failed")

    def start(self) -> None:
        if self._pendingStartError is not None:
            error, self._pendingStartError = self._pendingStartError, None
            raise error

        self.startCount += 1
        self._running = True
        logger.debug("Simulated location feed started")

    def stop(self) -> None:
        self.stopCount += 1
        self._running = False

        if self._pendingStopError is not None:
            error, self._pendingStopError = self._pendingStopError, None
            raise error

    def _applyMode(self, mode: TrackingMode, profile: Dict[str, Any]) -> None:
        self.modeHistory.append(mode)
        logger.debug(f"Simulated location mode | mode={mode.value} | profile={profile}")

    def pushSample(self, sample: LocationSample) -> bool:
        """
        Deliver a sample to the subscriber.

        Returns:
            True if delivered, False if the feed is not running
        """
        if not self._running:
            logger.debug("Location feed not running, sample dropped")
            return False

        self.samplesDelivered += 1
        self._deliverSample(sample)
        return True

    def failRuntime(self, error: Optional[Exception] = None) -> None:
        """Report an unrecoverable failure while running."""
        self._running = False
        self._reportError(error or FeedUnavailableError(
            "Location services disabled", details={'feed': 'location'}
        ))


# ================================================================================
# Bluetooth Feed
# ================================================================================

class SimulatedBluetoothFeed(BluetoothFeed):
    """
    BluetoothFeed driven by explicit connect/disconnect calls.

    Attributes:
        scanErrors: Scan errors reported (logged, never propagated)
    """

    def __init__(self):
        super().__init__()
        self.scanErrors = 0
        self.startCount = 0
        self.stopCount = 0
        self._connected: Dict[str, BluetoothDevice] = {}
        self._pendingStartError: Optional[Exception] = None

    def failNextStart(self, error: Optional[Exception] = None) -> None:
        """Make the next start() raise (FeedUnavailableError by default)."""
        self._pendingStartError = error or FeedUnavailableError(
            "Bluetooth adapter powered off", details={'feed': 'bluetooth'}
        )

    def start(self) -> None:
        if self._pendingStartError is not None:
            error, self._pendingStartError = self._pendingStartError, None
            raise error

        self.startCount += 1
        self._running = True
        logger.debug("Simulated Bluetooth feed started")

    def stop(self) -> None:
        self.stopCount += 1
        self._running = False
        self._connected.clear()

    def getConnectedDevices(self) -> List[BluetoothDevice]:
        """Devices currently connected."""
        return list(self._connected.values())

    def connectDevice(self, device: BluetoothDevice) -> bool:
        """
        Connect a device and notify the subscriber.

        Returns:
            True if delivered, False if the feed is not running
        """
        if not self._running:
            logger.debug(f"Bluetooth feed not running, connect dropped | id={device.id}")
            return False

        self._connected[device.id] = device
        self._deliverConnect(device)
        return True

    def disconnectDevice(self, device: BluetoothDevice) -> bool:
        """
        Disconnect a device and notify the subscriber.

        Returns:
            True if delivered, False if not running or not connected
        """
        if not self._running or self._connected.pop(device.id, None) is None:
            return False

        self._deliverDisconnect(device)
        return True

    def reportScanError(self, error: Exception) -> None:
        """A transient scan failure: logged and skipped."""
        self.scanErrors += 1
        logger.warning(f"Bluetooth scan error (ignored): {error}")

    def failRuntime(self, error: Optional[Exception] = None) -> None:
        """Report an unrecoverable failure while running."""
        self._running = False
        self._reportError(error or FeedUnavailableError(
            "Bluetooth permission revoked", details={'feed': 'bluetooth'}
        ))
