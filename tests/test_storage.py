################################################################################
# File Name: test_storage.py
# Purpose/Description: Tests for SQLite tag store and session repository
# Author: Ralph Agent
# Creation Date: 2026-10-15
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-15    | Ralph Agent  | Initial implementation (US-DS-013)
# ================================================================================
################################################################################

"""
Tests for drivesentry.storage.

Test coverage includes:
- Schema creation and statistics
- Tagged device save/load/delete
- Completed session save, lookup and listing
- SessionRecorder subscriber behaviour
- End-to-end: orchestrator -> recorder -> database

Run with:
    pytest tests/test_storage.py -v
"""

import sqlite3
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from drivesentry.events import DriveSentryEvent, EventType
from drivesentry.orchestrator import DriveSentryOrchestrator
from drivesentry.storage import (
    DriveSentryDatabase,
    SessionRecorder,
    SqliteDeviceTagStore,
    SqliteSessionRepository,
    StorageError,
    createDatabaseFromConfig,
)
from drivesentry.types import (
    BluetoothDevice,
    CarDevice,
    DriveSession,
    LocationSample,
    SessionStatus,
    SessionTrigger,
    TagOrigin,
    TriggerType,
)

START = datetime(2026, 10, 15, 8, 0, 0)


def completedSession(sessionId: str = 'session_1', start: datetime = START) -> DriveSession:
    sample = LocationSample(37.7749, -122.4194, timestamp=1_700_000_000_000, speed=0.0)
    return DriveSession(
        id=sessionId,
        startTime=start,
        endTime=start + timedelta(minutes=20),
        status=SessionStatus.COMPLETED,
        startTrigger=SessionTrigger.bluetooth(BluetoothDevice(id='00:1A', name='Toyota Camry')),
        endTrigger=SessionTrigger.gps(sample),
        totalDistance=12_500.0,
        totalDuration=1200.0,
        averageSpeed=10.4,
        maxSpeed=27.8,
        waypointCount=240,
    )


class TestDatabase:
    """Tests for DriveSentryDatabase."""

    def test_initialize_createsTables(self, database):
        assert set(database.getTableNames()) == {'car_devices', 'drive_sessions'}
        assert database.isInitialized() is True

    def test_initialize_twice_isSafe(self, database):
        database.initialize()

        assert set(database.getTableNames()) == {'car_devices', 'drive_sessions'}

    def test_initialize_createsParentDirectory(self, tmp_path):
        db = DriveSentryDatabase(str(tmp_path / 'nested' / 'dir' / 'ds.db'), walMode=False)

        db.initialize()

        assert (tmp_path / 'nested' / 'dir' / 'ds.db').exists()

    def test_walMode_enabled(self, tmp_path):
        db = DriveSentryDatabase(str(tmp_path / 'wal.db'), walMode=True)
        db.initialize()

        assert db.getStats()['wal_mode'] is True

    def test_getStats_countsRows(self, database):
        SqliteSessionRepository(database).save(completedSession())

        stats = database.getStats()

        assert stats['table_counts'] == {'car_devices': 0, 'drive_sessions': 1}
        assert stats['file_size_bytes'] > 0

    def test_connect_sqliteError_wrappedAndRolledBack(self, database):
        """
        Given: A write followed by a failing statement in one connection
        When: The context exits with the error
        Then: StorageError is raised and the write is rolled back
        """
        with pytest.raises(StorageError):
            with database.connect() as conn:
                conn.execute(
                    "INSERT INTO car_devices (id, name, origin, created_at) "
                    "VALUES ('x', 'y', 'manual', '2026-10-15T08:00:00')"
                )
                conn.execute('SELECT * FROM missing_table')

        assert database.getStats()['table_counts']['car_devices'] == 0

    def test_createDatabaseFromConfig(self, sampleConfig):
        db = createDatabaseFromConfig(sampleConfig)

        assert db.dbPath == sampleConfig['database']['path']
        assert db.walMode is False


class TestDeviceTagStore:
    """Tests for SqliteDeviceTagStore."""

    def test_save_thenLoad_returnsDevice(self, database):
        store = SqliteDeviceTagStore(database)
        device = CarDevice(
            id='AA:00', name='Dashcam', origin=TagOrigin.MANUAL,
            createdAt=START, lastConnected=START + timedelta(hours=2),
        )

        store.save(device)

        assert store.loadTaggedDevices() == [device]

    def test_save_neverConnected_loadsNone(self, database):
        store = SqliteDeviceTagStore(database)
        store.save(CarDevice(id='AA:01', name='Dashcam', origin=TagOrigin.AUTO, createdAt=START))

        assert store.loadTaggedDevices()[0].lastConnected is None

    def test_save_sameId_replaces(self, database):
        store = SqliteDeviceTagStore(database)
        store.save(CarDevice(id='AA:02', name='Old', origin=TagOrigin.MANUAL, createdAt=START))

        store.save(CarDevice(id='AA:02', name='New', origin=TagOrigin.MANUAL, createdAt=START))

        devices = store.loadTaggedDevices()
        assert len(devices) == 1
        assert devices[0].name == 'New'

    def test_delete_existing_returnsTrue(self, database):
        store = SqliteDeviceTagStore(database)
        store.save(CarDevice(id='AA:03', name='Dashcam', origin=TagOrigin.MANUAL, createdAt=START))

        assert store.delete('AA:03') is True
        assert store.loadTaggedDevices() == []

    def test_delete_missing_returnsFalse(self, database):
        assert SqliteDeviceTagStore(database).delete('nobody') is False


class TestSessionRepository:
    """Tests for SqliteSessionRepository."""

    def test_save_thenGet_returnsEqualSession(self, database):
        repository = SqliteSessionRepository(database)
        session = completedSession()

        repository.save(session)

        assert repository.getSession('session_1') == session

    def test_save_activeSession_raisesStorageError(self, database):
        repository = SqliteSessionRepository(database)
        active = DriveSession(
            id='session_2', startTime=START, status=SessionStatus.ACTIVE,
            startTrigger=SessionTrigger.manual(),
        )

        with pytest.raises(StorageError):
            repository.save(active)

        assert repository.countSessions() == 0

    def test_getSession_unknownId_returnsNone(self, database):
        assert SqliteSessionRepository(database).getSession('missing') is None

    def test_listSessions_newestFirstWithLimit(self, database):
        repository = SqliteSessionRepository(database)
        for day in range(3):
            repository.save(completedSession(f'session_{day}', START + timedelta(days=day)))

        sessions = repository.listSessions(limit=2)

        assert [s.id for s in sessions] == ['session_2', 'session_1']
        assert repository.countSessions() == 3

    def test_save_manualTrigger_roundTripsTriggerType(self, database):
        repository = SqliteSessionRepository(database)
        session = DriveSession(
            id='session_m', startTime=START, endTime=START, status=SessionStatus.COMPLETED,
            startTrigger=SessionTrigger.manual(), endTrigger=SessionTrigger.manual(),
        )

        repository.save(session)

        loaded = repository.getSession('session_m')
        assert loaded.startTrigger.triggerType == TriggerType.MANUAL
        assert loaded.endTrigger.triggerType == TriggerType.MANUAL


class TestSessionRecorder:
    """Tests for the SESSION_ENDED subscriber."""

    def test_sessionEnded_saves(self):
        repository = MagicMock()
        recorder = SessionRecorder(repository)
        session = completedSession()

        recorder(DriveSentryEvent(EventType.SESSION_ENDED, session=session))

        repository.save.assert_called_once_with(session)
        assert recorder.savedCount == 1

    def test_otherEvents_ignored(self):
        repository = MagicMock()
        recorder = SessionRecorder(repository)

        recorder(DriveSentryEvent(EventType.SESSION_STARTED, session=completedSession()))
        recorder(DriveSentryEvent(EventType.LOCATION_UPDATE))

        repository.save.assert_not_called()

    def test_saveFails_countedNotRaised(self):
        repository = MagicMock()
        repository.save.side_effect = StorageError("disk full")
        recorder = SessionRecorder(repository)

        recorder(DriveSentryEvent(EventType.SESSION_ENDED, session=completedSession()))

        assert recorder.failedCount == 1
        assert recorder.savedCount == 0


@pytest.mark.integration
class TestStorageIntegration:
    """Orchestrator sessions flowing into SQLite."""

    def test_orchestratorSession_persistedOnEnd(
        self, database, locationFeed, bluetoothFeed, clock, makeSample, carDevice
    ):
        """
        Given: An orchestrator with a SessionRecorder subscribed
        When: A Bluetooth-credited trip is driven and the car disconnects
        Then: The completed session is in the database with both triggers
        """
        # Arrange
        repository = SqliteSessionRepository(database)
        orchestrator = DriveSentryOrchestrator(
            locationFeed, bluetoothFeed,
            tagStore=SqliteDeviceTagStore(database), clock=clock,
        )
        orchestrator.subscribe(SessionRecorder(repository))
        orchestrator.initialize()
        orchestrator.start()

        # Act
        bluetoothFeed.connectDevice(carDevice)
        for t in range(0, 120, 5):
            clock.advance(5)
            locationFeed.pushSample(makeSample(seconds=t, speed=15.0))
        bluetoothFeed.disconnectDevice(carDevice)

        # Assert
        sessions = repository.listSessions()
        assert len(sessions) == 1
        assert sessions[0].startTrigger.triggerType == TriggerType.BLUETOOTH
        assert sessions[0].endTrigger.triggerType == TriggerType.BLUETOOTH
        assert sessions[0].waypointCount == 11
        assert sessions[0].totalDuration == pytest.approx(55.0)

    def test_tagsSurviveRestart(self, database, locationFeed, bluetoothFeed):
        first = DriveSentryOrchestrator(
            locationFeed, bluetoothFeed, tagStore=SqliteDeviceTagStore(database)
        )
        first.initialize()
        first.tagDevice(BluetoothDevice(id='AA:10', name='Dashcam'))

        second = DriveSentryOrchestrator(
            locationFeed, bluetoothFeed, tagStore=SqliteDeviceTagStore(database)
        )
        second.initialize()

        assert second.matcher.isCarDevice(BluetoothDevice(id='AA:10', name='Dashcam'))
