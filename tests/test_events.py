################################################################################
# File Name: test_events.py
# Purpose/Description: Tests for event types and synchronous delivery
# Author: Ralph Agent
# Creation Date: 2026-10-14
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-14    | Ralph Agent  | Initial implementation (US-DS-009)
# ================================================================================
################################################################################

"""
Tests for DriveSentryEvent and EventBus.

Run with:
    pytest tests/test_events.py -v
"""

from drivesentry.events import DriveSentryEvent, EventBus, EventType
from drivesentry.exceptions import FeedUnavailableError
from drivesentry.types import BluetoothDevice


class TestEventBus:
    """Tests for subscribe/emit/unsubscribe."""

    def test_emit_deliversToAllSubscribersInOrder(self):
        """
        Given: Two subscribers
        When: An event is emitted
        Then: Both receive it, in subscription order
        """
        # Arrange
        bus = EventBus()
        received = []
        bus.subscribe(lambda e: received.append(('first', e.eventType)))
        bus.subscribe(lambda e: received.append(('second', e.eventType)))

        # Act
        bus.emit(DriveSentryEvent(EventType.SESSION_STARTED))

        # Assert
        assert received == [
            ('first', EventType.SESSION_STARTED),
            ('second', EventType.SESSION_STARTED),
        ]

    def test_subscribe_returnsUnsubscribe(self):
        bus = EventBus()
        received = []
        unsubscribe = bus.subscribe(received.append)

        unsubscribe()
        bus.emit(DriveSentryEvent(EventType.ERROR))

        assert received == []
        assert bus.getSubscriberCount() == 0

    def test_subscribe_sameHandlerTwice_deliveredOnce(self):
        bus = EventBus()
        received = []
        bus.subscribe(received.append)
        bus.subscribe(received.append)

        bus.emit(DriveSentryEvent(EventType.LOCATION_UPDATE))

        assert len(received) == 1

    def test_emit_handlerRaises_othersStillReceive(self):
        """
        Given: A failing subscriber ahead of a working one
        When: An event is emitted
        Then: The working subscriber still receives it and the failure is counted
        """
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("subscriber failure")

        bus.subscribe(broken)
        bus.subscribe(received.append)

        bus.emit(DriveSentryEvent(EventType.SESSION_ENDED))

        assert len(received) == 1
        assert bus.getHandlerErrorCount() == 1

    def test_emit_handlerUnsubscribesDuringDelivery(self):
        bus = EventBus()
        received = []
        unsubscribers = []

        def once(event):
            received.append(event)
            unsubscribers[0]()

        unsubscribers.append(bus.subscribe(once))

        bus.emit(DriveSentryEvent(EventType.LOCATION_UPDATE))
        bus.emit(DriveSentryEvent(EventType.LOCATION_UPDATE))

        assert len(received) == 1

    def test_unsubscribe_unknownHandler_returnsFalse(self):
        assert EventBus().unsubscribe(lambda e: None) is False


class TestDriveSentryEvent:

    def test_toDict_bluetoothEvent(self):
        device = BluetoothDevice(id='00:1A', name='Toyota Camry', isCarDevice=True)
        event = DriveSentryEvent(EventType.BLUETOOTH_CONNECTED, device=device)

        result = event.toDict()

        assert result['type'] == 'BLUETOOTH_CONNECTED'
        assert result['device']['name'] == 'Toyota Camry'
        assert result['session'] is None
        assert result['error'] is None

    def test_toDict_errorEvent_stringifiesError(self):
        error = FeedUnavailableError("Location permission denied")
        event = DriveSentryEvent(EventType.ERROR, error=error)

        assert event.toDict()['error'] == "Location permission denied"
