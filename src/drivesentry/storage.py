################################################################################
# File Name: storage.py
# Purpose/Description: SQLite persistence for tagged devices and drive sessions
# Author: Michael Cornelison
# Creation Date: 2026-10-15
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-15    | M. Cornelison | Initial implementation for US-DS-015
# 2026-10-16    | Ralph Agent  | US-DS-016: SessionRecorder event subscriber
# ================================================================================
################################################################################

"""
SQLite storage for DriveSentry.

Provides:
- Database initialization with all required tables
- WAL mode configuration
- Connection management with context managers
- DeviceTagStore and SessionRepository implementations
- SessionRecorder, an event subscriber that saves completed sessions

Tables:
- car_devices: Manually tagged car Bluetooth devices
- drive_sessions: Completed drive sessions and their statistics

Timestamps are stored as ISO-8601 text.

Usage:
    from drivesentry.storage import DriveSentryDatabase, SqliteSessionRepository

    db = DriveSentryDatabase('./data/drivesentry.db')
    db.initialize()

    repository = SqliteSessionRepository(db)
    orchestrator.subscribe(SessionRecorder(repository))
"""

import json
import logging
import os
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from .events import DriveSentryEvent, EventType
from .exceptions import DriveSentryError
from .feeds import DeviceTagStore, SessionRepository
from .types import CarDevice, DriveSession, SessionStatus, SessionTrigger, TagOrigin

logger = logging.getLogger(__name__)


# ================================================================================
# Custom Exceptions
# ================================================================================

class StorageError(DriveSentryError):
    """Error reading or writing the DriveSentry database."""
    pass


# ================================================================================
# Schema Definitions
# ================================================================================

SCHEMA_CAR_DEVICES = """
CREATE TABLE IF NOT EXISTS car_devices (
    -- Bluetooth device id (MAC or platform id)
    id TEXT PRIMARY KEY,

    name TEXT NOT NULL,
    origin TEXT NOT NULL CHECK (origin IN ('auto', 'manual')),
    last_connected TEXT,

    -- Audit columns
    created_at TEXT NOT NULL
);
"""

SCHEMA_DRIVE_SESSIONS = """
CREATE TABLE IF NOT EXISTS drive_sessions (
    id TEXT PRIMARY KEY,

    start_time TEXT NOT NULL,
    end_time TEXT,
    status TEXT NOT NULL,

    -- JSON-encoded SessionTrigger.toDict()
    start_trigger_json TEXT NOT NULL,
    end_trigger_json TEXT,

    -- Statistics
    total_distance REAL NOT NULL DEFAULT 0,
    total_duration REAL NOT NULL DEFAULT 0,
    average_speed REAL NOT NULL DEFAULT 0,
    max_speed REAL NOT NULL DEFAULT 0,
    waypoint_count INTEGER NOT NULL DEFAULT 0,

    saved_at TEXT NOT NULL
);
"""

INDEX_DRIVE_SESSIONS_START = """
CREATE INDEX IF NOT EXISTS IX_drive_sessions_start_time
ON drive_sessions(start_time);
"""

ALL_SCHEMAS = [
    ('car_devices', SCHEMA_CAR_DEVICES),
    ('drive_sessions', SCHEMA_DRIVE_SESSIONS),
]

ALL_INDEXES = [
    ('IX_drive_sessions_start_time', INDEX_DRIVE_SESSIONS_START),
]


# ================================================================================
# Database Class
# ================================================================================

class DriveSentryDatabase:
    """
    SQLite database manager for DriveSentry.

    Attributes:
        dbPath: Path to the SQLite database file
        walMode: Whether to use WAL (Write-Ahead Logging) mode

    Example:
        db = DriveSentryDatabase('./data/drivesentry.db', walMode=True)
        db.initialize()

        with db.connect() as conn:
            rows = conn.execute('SELECT * FROM drive_sessions').fetchall()
    """

    def __init__(self, dbPath: str, walMode: bool = True):
        """
        Initialize database manager.

        Args:
            dbPath: Path to the SQLite database file
            walMode: Enable WAL mode (default: True)
        """
        self.dbPath = dbPath
        self.walMode = walMode
        self._initialized = False

    @contextmanager
    def connect(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Context manager for database connections.

        Commits on successful exit, rolls back on error.

        Yields:
            sqlite3.Connection: Database connection

        Raises:
            StorageError: If a database operation fails
        """
        conn = None
        try:
            conn = self._getConnection()
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            raise StorageError(
                f"Database error: {e}",
                details={'path': self.dbPath, 'error': str(e)}
            ) from e
        finally:
            if conn:
                conn.close()

    def _getConnection(self) -> sqlite3.Connection:
        dbDir = os.path.dirname(self.dbPath)
        if dbDir:
            Path(dbDir).mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.dbPath, timeout=30.0)
        conn.row_factory = sqlite3.Row

        if self.walMode:
            conn.execute('PRAGMA journal_mode = WAL')
            conn.execute('PRAGMA synchronous = NORMAL')

        return conn

    def initialize(self) -> bool:
        """
        Create all tables and indexes if they don't exist.

        Safe to call multiple times.

        Returns:
            True if initialization succeeded

        Raises:
            StorageError: If schema creation fails
        """
        logger.info(f"Initializing database at {self.dbPath}")

        with self.connect() as conn:
            for tableName, schema in ALL_SCHEMAS:
                logger.debug(f"Creating table: {tableName}")
                conn.execute(schema)

            for indexName, indexSql in ALL_INDEXES:
                logger.debug(f"Creating index: {indexName}")
                conn.execute(indexSql)

        self._initialized = True
        logger.info("Database initialization complete")
        return True

    def isInitialized(self) -> bool:
        """Check if initialize() has completed."""
        return self._initialized

    def getTableNames(self) -> list[str]:
        """Get the names of all tables in the database."""
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT name FROM sqlite_master "
                "WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            ).fetchall()
            return [row[0] for row in rows]

    def getStats(self) -> dict[str, Any]:
        """
        Get database statistics.

        Returns:
            Dictionary with file_size_bytes, table_counts and wal_mode
        """
        stats: dict[str, Any] = {
            'file_size_bytes': 0,
            'table_counts': {},
            'wal_mode': False
        }

        if os.path.exists(self.dbPath):
            stats['file_size_bytes'] = os.path.getsize(self.dbPath)

        with self.connect() as conn:
            journalMode = conn.execute('PRAGMA journal_mode').fetchone()[0]
            stats['wal_mode'] = journalMode.lower() == 'wal'

            for tableName, _ in ALL_SCHEMAS:
                count = conn.execute(f'SELECT COUNT(*) FROM {tableName}').fetchone()[0]
                stats['table_counts'][tableName] = count

        return stats


# ================================================================================
# Device Tag Store
# ================================================================================

class SqliteDeviceTagStore(DeviceTagStore):
    """DeviceTagStore backed by the car_devices table."""

    def __init__(self, database: DriveSentryDatabase):
        self._database = database

    def loadTaggedDevices(self) -> list[CarDevice]:
        """Load every tagged device."""
        with self._database.connect() as conn:
            rows = conn.execute(
                'SELECT id, name, origin, last_connected, created_at '
                'FROM car_devices ORDER BY created_at'
            ).fetchall()

        devices = [
            CarDevice(
                id=row['id'],
                name=row['name'],
                origin=TagOrigin(row['origin']),
                createdAt=datetime.fromisoformat(row['created_at']),
                lastConnected=_parseTime(row['last_connected']),
            )
            for row in rows
        ]
        logger.debug(f"Loaded {len(devices)} tagged devices")
        return devices

    def save(self, device: CarDevice) -> None:
        """Insert or replace a tagged device."""
        with self._database.connect() as conn:
            conn.execute(
                'INSERT OR REPLACE INTO car_devices '
                '(id, name, origin, last_connected, created_at) '
                'VALUES (?, ?, ?, ?, ?)',
                (
                    device.id,
                    device.name,
                    device.origin.value,
                    _formatTime(device.lastConnected),
                    device.createdAt.isoformat(),
                )
            )

    def delete(self, deviceId: str) -> bool:
        """Remove a tagged device. Returns True if it existed."""
        with self._database.connect() as conn:
            cursor = conn.execute('DELETE FROM car_devices WHERE id = ?', (deviceId,))
            return cursor.rowcount > 0


# ================================================================================
# Session Repository
# ================================================================================

class SqliteSessionRepository(SessionRepository):
    """
    SessionRepository backed by the drive_sessions table.

    Only completed sessions are accepted.
    """

    def __init__(self, database: DriveSentryDatabase):
        self._database = database

    def save(self, session: DriveSession) -> None:
        """
        Insert or replace a completed session.

        Raises:
            StorageError: If the session is not completed
        """
        if not session.isCompleted():
            raise StorageError(
                "Only completed sessions can be saved",
                details={'sessionId': session.id, 'status': session.status.value}
            )

        with self._database.connect() as conn:
            conn.execute(
                'INSERT OR REPLACE INTO drive_sessions ('
                'id, start_time, end_time, status, start_trigger_json, end_trigger_json, '
                'total_distance, total_duration, average_speed, max_speed, '
                'waypoint_count, saved_at'
                ') VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)',
                (
                    session.id,
                    session.startTime.isoformat(),
                    _formatTime(session.endTime),
                    session.status.value,
                    json.dumps(session.startTrigger.toDict()),
                    json.dumps(session.endTrigger.toDict()) if session.endTrigger else None,
                    session.totalDistance,
                    session.totalDuration,
                    session.averageSpeed,
                    session.maxSpeed,
                    session.waypointCount,
                    datetime.now().isoformat(),
                )
            )

        logger.info(f"Session saved | id={session.id}")

    def getSession(self, sessionId: str) -> DriveSession | None:
        """Get a saved session by id."""
        with self._database.connect() as conn:
            row = conn.execute(
                'SELECT * FROM drive_sessions WHERE id = ?', (sessionId,)
            ).fetchone()
        return _rowToSession(row) if row else None

    def listSessions(self, limit: int | None = None) -> list[DriveSession]:
        """
        List saved sessions, most recent first.

        Args:
            limit: Maximum number of sessions (None for all)
        """
        sql = 'SELECT * FROM drive_sessions ORDER BY start_time DESC'
        params: tuple[Any, ...] = ()
        if limit is not None:
            sql += ' LIMIT ?'
            params = (limit,)

        with self._database.connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_rowToSession(row) for row in rows]

    def countSessions(self) -> int:
        """Get the number of saved sessions."""
        with self._database.connect() as conn:
            return conn.execute('SELECT COUNT(*) FROM drive_sessions').fetchone()[0]


# ================================================================================
# Session Recorder
# ================================================================================

class SessionRecorder:
    """
    Event subscriber that saves each completed session.

    Save failures are logged and counted, never raised, so persistence
    problems cannot disturb event delivery.

    Example:
        recorder = SessionRecorder(SqliteSessionRepository(db))
        orchestrator.subscribe(recorder)
    """

    def __init__(self, repository: SessionRepository):
        self._repository = repository
        self.savedCount = 0
        self.failedCount = 0

    def __call__(self, event: DriveSentryEvent) -> None:
        if event.eventType != EventType.SESSION_ENDED or event.session is None:
            return

        try:
            self._repository.save(event.session)
            self.savedCount += 1
        except Exception as e:
            self.failedCount += 1
            logger.error(f"Could not save session | id={event.session.id} | error={e}")


# ================================================================================
# Helper Functions
# ================================================================================

def _formatTime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parseTime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _rowToSession(row: sqlite3.Row) -> DriveSession:
    endTrigger = row['end_trigger_json']
    return DriveSession(
        id=row['id'],
        startTime=datetime.fromisoformat(row['start_time']),
        endTime=_parseTime(row['end_time']),
        status=SessionStatus(row['status']),
        startTrigger=SessionTrigger.fromDict(json.loads(row['start_trigger_json'])),
        endTrigger=SessionTrigger.fromDict(json.loads(endTrigger)) if endTrigger else None,
        totalDistance=row['total_distance'],
        totalDuration=row['total_duration'],
        averageSpeed=row['average_speed'],
        maxSpeed=row['max_speed'],
        waypointCount=row['waypoint_count'],
    )


def createDatabaseFromConfig(config: dict[str, Any]) -> DriveSentryDatabase:
    """
    Create a DriveSentryDatabase from configuration.

    Args:
        config: Configuration dictionary with a 'database' section

    Returns:
        DriveSentryDatabase (not yet initialized)
    """
    dbConfig = config.get('database', {})
    return DriveSentryDatabase(
        dbConfig.get('path', './data/drivesentry.db'),
        walMode=dbConfig.get('walMode', True),
    )
