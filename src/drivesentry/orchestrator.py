################################################################################
# File Name: orchestrator.py
# Purpose/Description: Fuses location and Bluetooth feeds into drive sessions
# Author: Ralph Agent
# Creation Date: 2026-10-14
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-14    | Ralph Agent  | Initial implementation for US-DS-010
# 2026-10-15    | Ralph Agent  | US-DS-012: Resume paused sessions, wire
#               |              | sessionEndTimeout auto-end, feed error reporting
# 2026-10-16    | M. Cornelison | US-DS-014: Teardown collects sub-step failures
#               |              | and reports them as ERROR events
# 2026-10-17    | M. Cornelison | US-DS-019: Drop samples while stopped, skip
#               |              | failing samples, defer re-entrant subscriber calls
# ================================================================================
################################################################################

"""
DriveSentry orchestrator.

Top-level coordinator of the detection engine. It handles:

- Feed lifecycle (initialize, start, stop)
- Routing location samples into the DrivingDetector
- Routing Bluetooth connects/disconnects through the CarDeviceMatcher
- Driving SessionManager transitions from the states it observes
- Switching the location feed's tracking mode
- Emitting a typed event stream to subscribers

Every handler runs under one re-entrant lock, so samples and Bluetooth
events are applied one at a time in arrival order. Feed start/stop calls
run outside the lock. Subscribers are called under the lock; a lifecycle
or handler call made from inside a subscriber is queued and runs once the
current handler has finished.

Status machine:
    idle -> monitoring -> detecting -> driving <-> paused
    driving/paused -> monitoring when a session ends
    any -> error on a feed failure

Usage:
    from drivesentry.orchestrator import DriveSentryOrchestrator

    orchestrator = DriveSentryOrchestrator(locationFeed, bluetoothFeed, tagStore)
    orchestrator.subscribe(lambda event: print(event.eventType.value))

    orchestrator.initialize()
    orchestrator.start()
    ...
    orchestrator.stop()
"""

import functools
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Tuple

from common.error_handler import ErrorCollector

from .config import getDrivingConditions
from .detector import DrivingDetector
from .events import DriveSentryEvent, EventBus, EventHandler, EventType
from .exceptions import FeedUnavailableError, InvalidStateError
from .feeds import BluetoothFeed, DeviceTagStore, LocationFeed
from .matcher import CarDeviceMatcher
from .session import SessionManager
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
    TrackingMode,
)

logger = logging.getLogger(__name__)


# ================================================================================
# Data Classes
# ================================================================================

@dataclass(frozen=True)
class OrchestratorState:
    """
    Snapshot of the orchestrator for status displays.

    Attributes:
        status: Current OrchestratorStatus
        trackingMode: Mode last requested from the location feed
        currentSession: Snapshot of the non-completed session, if any
        connectedCarDevices: Car devices currently connected
        lastError: Most recent feed/teardown error
        detectorState: Current DrivingDetector state
    """
    status: OrchestratorStatus
    trackingMode: TrackingMode
    currentSession: Optional[DriveSession] = None
    connectedCarDevices: List[BluetoothDevice] = field(default_factory=list)
    lastError: Optional[Exception] = None
    detectorState: DetectorState = DetectorState.IDLE

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            'status': self.status.value,
            'trackingMode': self.trackingMode.value,
            'currentSession': self.currentSession.toDict() if self.currentSession else None,
            'connectedCarDevices': [d.toDict() for d in self.connectedCarDevices],
            'lastError': str(self.lastError) if self.lastError else None,
            'detectorState': self.detectorState.value,
        }


# ================================================================================
# DriveSentryOrchestrator Class
# ================================================================================

class DriveSentryOrchestrator:
    """
    Coordinates feeds, detection and the session lifecycle.

    The orchestrator is the only writer of the SessionManager's current
    session and the only owner of OrchestratorStatus.

    Example:
        orchestrator = DriveSentryOrchestrator(
            locationFeed=SimulatedLocationFeed(),
            bluetoothFeed=SimulatedBluetoothFeed(),
            conditions=DrivingConditions(minDuration=30),
        )
        orchestrator.initialize()
        orchestrator.start()
    """

    def __init__(
        self,
        locationFeed: LocationFeed,
        bluetoothFeed: BluetoothFeed,
        tagStore: Optional[DeviceTagStore] = None,
        conditions: Optional[DrivingConditions] = None,
        matcher: Optional[CarDeviceMatcher] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            locationFeed: Source of location samples
            bluetoothFeed: Source of Bluetooth connect/disconnect events
            tagStore: Persistence for manually tagged car devices (optional)
            conditions: Detection thresholds (defaults apply when omitted)
            matcher: Car device matcher (a default one is built when omitted)
            clock: Time source for session and tag timestamps
        """
        self._locationFeed = locationFeed
        self._bluetoothFeed = bluetoothFeed
        self._tagStore = tagStore

        self._matcher = matcher or CarDeviceMatcher(clock=clock)
        self._detector = DrivingDetector(conditions)
        self._sessionManager = SessionManager(clock=clock)
        self._eventBus = EventBus()

        # State
        self._status = OrchestratorStatus.IDLE
        self._initialized = False
        self._running = False
        self._connectedDevices: Dict[str, BluetoothDevice] = {}
        self._lastError: Optional[Exception] = None

        # Serializes every event handler
        self._lock = threading.RLock()

        # Calls made by subscribers while an event is being dispatched
        self._dispatchDepth = 0
        self._deferred: Deque[Tuple[str, Callable[[], Any]]] = deque()

    # ================================================================================
    # Properties
    # ================================================================================

    @property
    def detector(self) -> DrivingDetector:
        """Get the driving detector."""
        return self._detector

    @property
    def sessionManager(self) -> SessionManager:
        """Get the session manager."""
        return self._sessionManager

    @property
    def matcher(self) -> CarDeviceMatcher:
        """Get the car device matcher."""
        return self._matcher

    # ================================================================================
    # State Methods
    # ================================================================================

    def getStatus(self) -> OrchestratorStatus:
        """Get the current orchestrator status."""
        return self._status

    def isInitialized(self) -> bool:
        """Check if initialize() has completed."""
        return self._initialized

    def isRunning(self) -> bool:
        """Check if the feeds have been started and not stopped."""
        return self._running

    def getState(self) -> OrchestratorState:
        """
        Get a snapshot of the orchestrator.

        Returns:
            OrchestratorState
        """
        with self._lock:
            return OrchestratorState(
                status=self._status,
                trackingMode=self._locationFeed.getMode(),
                currentSession=self._sessionManager.getCurrentSession(),
                connectedCarDevices=self._getConnectedCarDevices(),
                lastError=self._lastError,
                detectorState=self._detector.getState(),
            )

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """
        Subscribe to the event stream.

        Handlers run synchronously while the orchestrator holds its lock.
        A handler may call start(), stop() or any handle* method; the call
        is queued and runs after the handler that emitted the event has
        finished its update, so it never observes a half-applied transition.

        Args:
            handler: Called synchronously with each DriveSentryEvent

        Returns:
            Function that removes the subscription
        """
        return self._eventBus.subscribe(handler)

    # ================================================================================
    # Lifecycle Methods
    # ================================================================================

    def initialize(self) -> None:
        """
        Prepare feeds, load tagged devices and register as feed consumer.

        Calling it again is a no-op.

        Raises:
            FeedUnavailableError: If a feed cannot be prepared
        """
        try:
            with self._lock:
                if self._initialized:
                    logger.warning("Orchestrator already initialized")
                    return

                logger.info("Initializing DriveSentryOrchestrator...")
                self._loadTaggedDevices()

                for source, feed in (
                    ('location', self._locationFeed),
                    ('bluetooth', self._bluetoothFeed),
                ):
                    try:
                        feed.initialize()
                    except Exception as e:
                        feedError = self._failFeed(source, e)
                        if feedError is e:
                            raise
                        raise feedError from e

                self._locationFeed.subscribe(
                    self.handleLocationSample,
                    onError=lambda error: self.handleFeedError('location', error),
                )
                self._bluetoothFeed.subscribe(
                    self.handleDeviceConnected,
                    self.handleDeviceDisconnected,
                    onError=lambda error: self.handleFeedError('bluetooth', error),
                )

                self._initialized = True
                logger.info("DriveSentryOrchestrator initialized")
        finally:
            self._runDeferred()

    def start(self) -> None:
        """
        Start both feeds and begin monitoring.

        A second call while running is a no-op.

        Raises:
            InvalidStateError: If initialize() has not been called
            FeedUnavailableError: If a feed fails to start
        """
        try:
            self._start()
        finally:
            self._runDeferred()

    def _start(self) -> None:
        with self._lock:
            if self._deferIfDispatching('start', self.start):
                return
            if not self._initialized:
                raise InvalidStateError("Orchestrator must be initialized before start")
            if self._running:
                logger.warning(f"Orchestrator already running | status={self._status.value}")
                return

            self._running = True
            self._lastError = None
            self._setStatus(OrchestratorStatus.MONITORING)
            self._setTrackingMode(TrackingMode.MONITORING)

        logger.info("Starting feeds...")
        started: List[LocationFeed] = []
        try:
            self._locationFeed.start()
            started.append(self._locationFeed)
            self._bluetoothFeed.start()
        except Exception as e:
            for feed in started:
                try:
                    feed.stop()
                except Exception as stopError:
                    logger.warning(f"Could not stop feed after failed start: {stopError}")

            source = 'bluetooth' if started else 'location'
            with self._lock:
                self._running = False
                feedError = self._failFeed(source, e)
            if feedError is e:
                raise
            raise feedError from e

        logger.info("DriveSentryOrchestrator started | status=monitoring")

    def stop(self) -> None:
        """
        End any active session, stop the feeds and return to idle.

        Safe to call at any time and more than once. Every teardown step is
        attempted; failures are emitted as ERROR events rather than raised.
        """
        self._stop()
        self._runDeferred()

    def _stop(self) -> None:
        collector = ErrorCollector()

        with self._lock:
            if self._deferIfDispatching('stop', self.stop):
                return
            if (
                not self._running
                and self._status == OrchestratorStatus.IDLE
                and not self._sessionManager.isSessionActive()
            ):
                logger.debug("Orchestrator not running, nothing to stop")
                return

            logger.info("Stopping DriveSentryOrchestrator...")

            if self._sessionManager.isSessionActive():
                try:
                    self._endSession(SessionTrigger.manual())
                except Exception as e:
                    collector.add(e, step='endSession')

            wasRunning = self._running
            self._running = False

        if wasRunning:
            for source, feed in (
                ('location', self._locationFeed),
                ('bluetooth', self._bluetoothFeed),
            ):
                try:
                    feed.stop()
                except Exception as e:
                    collector.add(e, step=f'{source}Feed.stop')

        with self._lock:
            try:
                self._detector.reset()
            except Exception as e:
                collector.add(e, step='detector.reset')

            self._connectedDevices.clear()
            self._setStatus(OrchestratorStatus.IDLE)

            if collector.hasErrors():
                collector.report()
                for error in collector.getErrors():
                    self._lastError = error
                    self._emit(EventType.ERROR, error=error)

        logger.info(f"DriveSentryOrchestrator stopped | teardownErrors={collector.count()}")

    # ================================================================================
    # Location Handling
    # ================================================================================

    def handleLocationSample(self, sample: LocationSample) -> Optional[DetectionResult]:
        """
        Process one location sample.

        Emits LOCATION_UPDATE, feeds the detector, then applies the session
        transition implied by the detector state. Samples arriving while
        the orchestrator is not running are dropped. A sample whose
        processing raises is reported as an ERROR event and skipped.

        Args:
            sample: Sample from the location feed

        Returns:
            DetectionResult for the sample, or None if it was not processed
        """
        with self._lock:
            if self._deferIfDispatching(
                'handleLocationSample', functools.partial(self.handleLocationSample, sample)
            ):
                return None
            result = self._processSample(sample)

        self._runDeferred()
        return result

    def processLocationSamples(
        self,
        samples: Iterable[LocationSample]
    ) -> List[Optional[DetectionResult]]:
        """
        Process a batch of samples (background delivery) in the order given.

        Args:
            samples: Samples in arrival order

        Returns:
            One entry per processed sample; empty if the batch was dropped
            or queued
        """
        samples = list(samples)

        with self._lock:
            if self._deferIfDispatching(
                'processLocationSamples', functools.partial(self.processLocationSamples, samples)
            ):
                return []
            if not self._running:
                logger.debug(f"Orchestrator not running, dropping {len(samples)} samples")
                return []
            results = [self._processSample(sample) for sample in samples]

        self._runDeferred()
        return results

    def _processSample(self, sample: LocationSample) -> Optional[DetectionResult]:
        """Apply one sample under the lock."""
        if not self._running:
            logger.debug(
                f"Orchestrator not running, dropping sample | timestamp={sample.timestamp}"
            )
            return None

        try:
            self._emit(EventType.LOCATION_UPDATE, sample=sample)

            result = self._detector.processLocation(sample)

            if result.state == DetectorState.DRIVING:
                self._handleDriving(sample)
            elif result.state == DetectorState.STATIONARY:
                self._handleStationary(sample, result)

            return result

        except Exception as e:
            logger.error(f"Location sample skipped | timestamp={sample.timestamp} | error={e}")
            self._lastError = e
            self._emit(EventType.ERROR, sample=sample, error=e)
            return None

    def _handleDriving(self, sample: LocationSample) -> None:
        """Apply a detector DRIVING result."""
        session = self._sessionManager.getCurrentSession()

        if session is None:
            self._beginSession(sample)
        elif session.status == SessionStatus.PAUSED:
            self._resumeSession()
        else:
            if self._status != OrchestratorStatus.DRIVING:
                self._setStatus(OrchestratorStatus.DRIVING)
            self._sessionManager.addWaypoint(sample)

    def _handleStationary(self, sample: LocationSample, result: DetectionResult) -> None:
        """Apply a detector STATIONARY result."""
        if self._status == OrchestratorStatus.DRIVING and self._sessionManager.isSessionActive():
            session = self._sessionManager.pauseSession()
            self._setStatus(OrchestratorStatus.PAUSED)
            self._emit(EventType.DRIVING_PAUSED, sample=sample, session=session)
            self._setTrackingMode(TrackingMode.PAUSED)

        elif (
            self._status == OrchestratorStatus.PAUSED
            and result.stationaryDuration >= self._detector.getConditions().sessionEndTimeout
        ):
            logger.info(
                f"Stationary timeout reached | stationary={result.stationaryDuration:.0f}s"
            )
            self._endSession(SessionTrigger.gps(sample))

    def _beginSession(self, sample: LocationSample) -> None:
        """Start a session for newly confirmed driving."""
        self._setStatus(OrchestratorStatus.DRIVING)
        self._emit(EventType.DRIVING_DETECTED, sample=sample)

        carDevices = self._getConnectedCarDevices()
        if carDevices:
            trigger = SessionTrigger.bluetooth(carDevices[0])
        else:
            trigger = SessionTrigger.gps(sample)

        session = self._sessionManager.startSession(trigger)
        self._emit(EventType.SESSION_STARTED, session=session)
        self._setTrackingMode(TrackingMode.DRIVING)

    def _resumeSession(self) -> None:
        """Resume a paused session once driving is confirmed again."""
        session = self._sessionManager.resumeSession()
        self._setStatus(OrchestratorStatus.DRIVING)
        self._emit(EventType.DRIVING_RESUMED, session=session)
        self._setTrackingMode(TrackingMode.DRIVING)

    def _endSession(self, trigger: SessionTrigger) -> DriveSession:
        """
        Complete the current session and return to monitoring.

        The detector is reset so the next trip has to be detected afresh.
        """
        session = self._sessionManager.endSession(trigger)
        self._detector.reset()
        self._setStatus(OrchestratorStatus.MONITORING)
        self._emit(EventType.SESSION_ENDED, session=session)
        self._setTrackingMode(TrackingMode.MONITORING)
        return session

    # ================================================================================
    # Bluetooth Handling
    # ================================================================================

    def handleDeviceConnected(self, device: BluetoothDevice) -> None:
        """
        Process a Bluetooth connect.

        A car device connecting while monitoring (or idle) moves the status
        to detecting and upgrades tracking accuracy ahead of confirmation.

        Args:
            device: Device reported by the Bluetooth feed
        """
        with self._lock:
            if self._deferIfDispatching(
                'handleDeviceConnected', functools.partial(self.handleDeviceConnected, device)
            ):
                return
            device = self._matcher.classify(device)
            self._connectedDevices[device.id] = device

            if device.isCarDevice:
                self._recordConnection(device.id)

            logger.info(
                f"Bluetooth connected | id={device.id} | name={device.name} | "
                f"car={device.isCarDevice}"
            )
            self._emit(EventType.BLUETOOTH_CONNECTED, device=device)

            if device.isCarDevice and self._status in (
                OrchestratorStatus.MONITORING,
                OrchestratorStatus.IDLE,
            ):
                self._setStatus(OrchestratorStatus.DETECTING)
                self._setTrackingMode(TrackingMode.DRIVING)

        self._runDeferred()

    def handleDeviceDisconnected(self, device: BluetoothDevice) -> None:
        """
        Process a Bluetooth disconnect.

        A car device disconnecting while driving ends the session.

        Args:
            device: Device reported by the Bluetooth feed
        """
        with self._lock:
            if self._deferIfDispatching(
                'handleDeviceDisconnected',
                functools.partial(self.handleDeviceDisconnected, device),
            ):
                return
            self._applyDisconnect(device)

        self._runDeferred()

    def _applyDisconnect(self, device: BluetoothDevice) -> None:
        known = self._connectedDevices.pop(device.id, None)
        device = self._matcher.classify(device)
        isCar = device.isCarDevice or (known is not None and known.isCarDevice)

        logger.info(
            f"Bluetooth disconnected | id={device.id} | name={device.name} | car={isCar}"
        )
        self._emit(EventType.BLUETOOTH_DISCONNECTED, device=device)

        if not isCar:
            return

        if (
            self._status == OrchestratorStatus.DRIVING
            and self._sessionManager.isSessionActive()
        ):
            self._endSession(SessionTrigger.bluetooth(device))

        elif (
            self._status == OrchestratorStatus.DETECTING
            and not self._getConnectedCarDevices()
        ):
            self._setStatus(OrchestratorStatus.MONITORING)
            self._setTrackingMode(TrackingMode.MONITORING)

    def _getConnectedCarDevices(self) -> List[BluetoothDevice]:
        """Connected car devices in connection order."""
        return [d for d in self._connectedDevices.values() if d.isCarDevice]

    def _recordConnection(self, deviceId: str) -> None:
        """Stamp lastConnected on a tagged device and persist it."""
        carDevice = self._matcher.markConnected(deviceId)
        if carDevice is None or self._tagStore is None:
            return
        try:
            self._tagStore.save(carDevice)
        except Exception as e:
            logger.warning(f"Could not persist connection time | id={deviceId} | error={e}")

    # ================================================================================
    # Feed Errors
    # ================================================================================

    def handleFeedError(self, source: str, error: Exception) -> None:
        """
        Report an unrecoverable feed failure.

        Emits ERROR and moves status to error. Any session is left as is;
        the next driving sample picks it back up.

        Args:
            source: 'location' or 'bluetooth'
            error: Failure reported by the feed
        """
        with self._lock:
            if self._deferIfDispatching(
                'handleFeedError', functools.partial(self.handleFeedError, source, error)
            ):
                return
            self._failFeed(source, error)

        self._runDeferred()

    def _failFeed(self, source: str, error: Exception) -> FeedUnavailableError:
        """Record a feed failure and return it as a FeedUnavailableError."""
        if isinstance(error, FeedUnavailableError):
            feedError = error
        else:
            feedError = FeedUnavailableError(
                f"{source} feed unavailable: {error}",
                details={'feed': source},
            )

        logger.error(f"Feed failure | feed={source} | error={error}")
        self._lastError = feedError
        self._setStatus(OrchestratorStatus.ERROR)
        self._emit(EventType.ERROR, error=feedError)
        return feedError

    # ================================================================================
    # Device Tagging
    # ================================================================================

    def tagDevice(self, device: BluetoothDevice) -> CarDevice:
        """
        Manually tag a device as a car and persist the tag.

        Only future classification changes; a connected device is
        re-classified in place.

        Args:
            device: Device to tag

        Returns:
            The stored CarDevice
        """
        carDevice = self._matcher.tagAsCarDevice(device)
        if self._tagStore is not None:
            self._tagStore.save(carDevice)

        with self._lock:
            connected = self._connectedDevices.get(device.id)
            if connected is not None:
                self._connectedDevices[device.id] = self._matcher.classify(connected)

        return carDevice

    def untagDevice(self, deviceId: str) -> bool:
        """
        Remove a manual tag and delete it from the store.

        Args:
            deviceId: Id of the device to untag

        Returns:
            True if a tag existed
        """
        removed = self._matcher.untagCarDevice(deviceId)
        if self._tagStore is not None:
            self._tagStore.delete(deviceId)

        with self._lock:
            connected = self._connectedDevices.get(deviceId)
            if connected is not None:
                self._connectedDevices[deviceId] = self._matcher.classify(connected)

        return removed

    # ================================================================================
    # Internals
    # ================================================================================

    def _loadTaggedDevices(self) -> None:
        """Load tags from the store; a failing store leaves the map empty."""
        try:
            self._matcher.loadTaggedDevices(self._tagStore)
        except Exception as e:
            logger.error(f"Could not load tagged car devices: {e}")
            self._lastError = e
            self._emit(EventType.ERROR, error=e)

    def _setStatus(self, status: OrchestratorStatus) -> None:
        if status == self._status:
            return
        logger.debug(f"Orchestrator status: {self._status.value} -> {status.value}")
        self._status = status

    def _setTrackingMode(self, mode: TrackingMode) -> None:
        try:
            self._locationFeed.setMode(mode)
        except Exception as e:
            logger.error(f"Could not set tracking mode | mode={mode.value} | error={e}")
            self._lastError = e
            self._emit(EventType.ERROR, error=e)

    def _emit(self, eventType: EventType, **payload: Any) -> None:
        self._dispatchDepth += 1
        try:
            self._eventBus.emit(DriveSentryEvent(eventType, **payload))
        finally:
            self._dispatchDepth -= 1

    def _deferIfDispatching(self, name: str, call: Callable[[], Any]) -> bool:
        """
        Queue a call made from inside a subscriber.

        Caller holds the lock. Only the dispatching thread can see a
        non-zero depth while holding it.

        Returns:
            True if the call was queued and the caller should return
        """
        if self._dispatchDepth == 0:
            return False
        logger.debug(f"Deferring {name} until the current event dispatch completes")
        self._deferred.append((name, call))
        return True

    def _runDeferred(self) -> None:
        """Run queued subscriber calls, outside the lock, in the order made."""
        while True:
            with self._lock:
                if self._dispatchDepth > 0 or not self._deferred:
                    return
                name, call = self._deferred.popleft()

            try:
                call()
            except Exception as e:
                logger.error(f"Deferred {name} failed: {e}")


# ================================================================================
# Factory Functions
# ================================================================================

def createOrchestratorFromConfig(
    config: Dict[str, Any],
    locationFeed: LocationFeed,
    bluetoothFeed: BluetoothFeed,
    tagStore: Optional[DeviceTagStore] = None,
    clock: Optional[Callable[[], datetime]] = None
) -> DriveSentryOrchestrator:
    """
    Create a DriveSentryOrchestrator from configuration.

    Args:
        config: Configuration dictionary (see drivesentry.config)
        locationFeed: Source of location samples
        bluetoothFeed: Source of Bluetooth events
        tagStore: Persistence for tagged car devices (optional)
        clock: Time source for session timestamps (optional)

    Returns:
        Configured DriveSentryOrchestrator instance

    Example:
        config = loadDriveSentryConfig('drivesentry_config.json')
        orchestrator = createOrchestratorFromConfig(config, locationFeed, bluetoothFeed)
        orchestrator.initialize()
    """
    extraPatterns = config.get('bluetooth', {}).get('extraCarPatterns', [])
    matcher = CarDeviceMatcher(extraPatterns=extraPatterns, clock=clock)

    return DriveSentryOrchestrator(
        locationFeed=locationFeed,
        bluetoothFeed=bluetoothFeed,
        tagStore=tagStore,
        conditions=getDrivingConditions(config),
        matcher=matcher,
        clock=clock,
    )


__all__ = [
    'DriveSentryOrchestrator',
    'OrchestratorState',
    'createOrchestratorFromConfig',
]
