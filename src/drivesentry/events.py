################################################################################
# File Name: events.py
# Purpose/Description: Typed event stream emitted by the orchestrator
# Author: Ralph Agent
# Creation Date: 2026-10-13
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-13    | Ralph Agent  | Initial implementation (US-DS-007)
# ================================================================================
################################################################################
"""
Typed events and the bus that delivers them.

Every handler is called in its own try/except: a failing handler is logged
and skipped, and delivery continues with the next one.

Usage:
    from drivesentry.events import EventBus, EventType

    bus = EventBus()
    unsubscribe = bus.subscribe(lambda event: print(event.eventType.value))
    bus.emit(DriveSentryEvent(EventType.DRIVING_DETECTED))
    unsubscribe()
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .types import BluetoothDevice, DriveSession, LocationSample

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Kinds of events emitted by the orchestrator."""
    BLUETOOTH_CONNECTED = "BLUETOOTH_CONNECTED"
    BLUETOOTH_DISCONNECTED = "BLUETOOTH_DISCONNECTED"
    LOCATION_UPDATE = "LOCATION_UPDATE"
    DRIVING_DETECTED = "DRIVING_DETECTED"
    DRIVING_PAUSED = "DRIVING_PAUSED"
    DRIVING_RESUMED = "DRIVING_RESUMED"
    SESSION_STARTED = "SESSION_STARTED"
    SESSION_ENDED = "SESSION_ENDED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class DriveSentryEvent:
    """
    A single emitted event.

    Only the payload field matching the event type is set:
        device: BLUETOOTH_CONNECTED / BLUETOOTH_DISCONNECTED
        sample: LOCATION_UPDATE
        session: SESSION_STARTED / SESSION_ENDED (and DRIVING_* when known)
        error: ERROR
    """
    eventType: EventType
    device: Optional[BluetoothDevice] = None
    sample: Optional[LocationSample] = None
    session: Optional[DriveSession] = None
    error: Optional[Exception] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            'type': self.eventType.value,
            'timestamp': self.timestamp.isoformat(),
            'device': self.device.toDict() if self.device else None,
            'location': self.sample.toDict() if self.sample else None,
            'session': self.session.toDict() if self.session else None,
            'error': str(self.error) if self.error else None,
        }


EventHandler = Callable[[DriveSentryEvent], None]


class EventBus:
    """
    Delivers events synchronously to every current subscriber.

    The subscriber list is copied before delivery, so handlers may
    subscribe or unsubscribe while an event is being delivered.
    """

    def __init__(self):
        self._handlers: List[EventHandler] = []
        self._lock = threading.Lock()
        self._handlerErrors = 0

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """
        Add a subscriber.

        Args:
            handler: Called with each DriveSentryEvent

        Returns:
            Function that removes this subscription
        """
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)

        return lambda: self.unsubscribe(handler)

    def unsubscribe(self, handler: EventHandler) -> bool:
        """
        Remove a subscriber.

        Returns:
            True if the handler was subscribed
        """
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)
                return True
        return False

    def emit(self, event: DriveSentryEvent) -> None:
        """
        Deliver an event to all subscribers.

        Args:
            event: Event to deliver
        """
        with self._lock:
            handlers = list(self._handlers)

        logger.debug(f"Emitting {event.eventType.value} | subscribers={len(handlers)}")

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self._handlerErrors += 1
                logger.error(
                    f"Event handler error | event={event.eventType.value} | "
                    f"handler={getattr(handler, '__qualname__', repr(handler))} | "
                    f"error={e}"
                )

    def getSubscriberCount(self) -> int:
        """Get the number of current subscribers."""
        with self._lock:
            return len(self._handlers)

    def getHandlerErrorCount(self) -> int:
        """Get the number of handler failures since creation."""
        return self._handlerErrors
