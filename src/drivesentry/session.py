################################################################################
# File Name: session.py
# Purpose/Description: Drive session lifecycle and statistics
# Author: Michael Cornelison
# Creation Date: 2026-10-13
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-13    | M. Cornelison | Initial implementation for US-DS-005
# ================================================================================
################################################################################

"""
Drive session management.

Owns the single current trip and its waypoints:
- Session lifecycle: active -> paused -> active -> completed
- Waypoint accumulation while the session is active
- Final statistics (distance, duration, average/max speed) on completion

At most one non-completed session exists at a time. Callers only ever see
DriveSession snapshots; the manager keeps the current one to itself.

Usage:
    from drivesentry.session import SessionManager

    manager = SessionManager()
    session = manager.startSession(SessionTrigger.manual())

    manager.addWaypoint(sample)
    completed = manager.endSession(SessionTrigger.manual())
    print(f"Drove {completed.totalDistance:.0f}m in {completed.totalDuration:.0f}s")
"""

import logging
import time
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from .exceptions import InvalidStateError
from .geo import pathDistance
from .types import (
    DriveSession,
    LocationSample,
    SessionStatus,
    SessionTrigger,
    Waypoint,
)

logger = logging.getLogger(__name__)


def generateSessionId() -> str:
    """Generate a unique session id, e.g. session_1700000000000_3f9a1c2."""
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:7]}"


class SessionManager:
    """
    Manages the lifecycle of the current drive session.

    Not thread-safe on its own; the orchestrator serializes every call.

    Example:
        manager = SessionManager(clock=datetime.now)
        manager.startSession(SessionTrigger.gps(sample))
        manager.pauseSession()
        manager.resumeSession()
        completed = manager.endSession(SessionTrigger.manual())
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        idFactory: Optional[Callable[[], str]] = None
    ):
        """
        Initialize the session manager.

        Args:
            clock: Time source for start/end times (defaults to datetime.now)
            idFactory: Session id generator (defaults to generateSessionId)
        """
        self._clock = clock or datetime.now
        self._idFactory = idFactory or generateSessionId
        self._currentSession: Optional[DriveSession] = None
        self._waypoints: List[Waypoint] = []

    # ================================================================================
    # Queries
    # ================================================================================

    def getCurrentSession(self) -> Optional[DriveSession]:
        """
        Get the current session.

        Returns:
            Snapshot of the current session, or None
        """
        return self._currentSession

    def isSessionActive(self) -> bool:
        """Check if a non-completed session exists (active or paused)."""
        return (
            self._currentSession is not None
            and self._currentSession.status != SessionStatus.COMPLETED
        )

    def getWaypoints(self) -> List[Waypoint]:
        """Get a copy of the current session's waypoints, in arrival order."""
        return list(self._waypoints)

    def getWaypointCount(self) -> int:
        """Get the number of waypoints recorded for the current session."""
        return len(self._waypoints)

    # ================================================================================
    # Lifecycle
    # ================================================================================

    def startSession(self, trigger: SessionTrigger) -> DriveSession:
        """
        Start a new session.

        Args:
            trigger: What started the session

        Returns:
            The new session

        Raises:
            InvalidStateError: If a non-completed session already exists
        """
        if self.isSessionActive():
            raise InvalidStateError(
                "Cannot start new session while one is active",
                details={
                    'sessionId': self._currentSession.id,
                    'status': self._currentSession.status.value,
                }
            )

        session = DriveSession(
            id=self._idFactory(),
            startTime=self._clock(),
            status=SessionStatus.ACTIVE,
            startTrigger=trigger,
        )
        self._currentSession = session
        self._waypoints = []

        logger.info(
            f"SESSION STARTED | id={session.id} | "
            f"trigger={trigger.triggerType.value}"
        )
        return session

    def pauseSession(self) -> DriveSession:
        """
        Pause the active session.

        Returns:
            The paused session

        Raises:
            InvalidStateError: If there is no active session
        """
        self._requireStatus(SessionStatus.ACTIVE, "No active session to pause")
        self._currentSession = replace(self._currentSession, status=SessionStatus.PAUSED)
        logger.info(f"Session paused | id={self._currentSession.id}")
        return self._currentSession

    def resumeSession(self) -> DriveSession:
        """
        Resume a paused session.

        Returns:
            The resumed session

        Raises:
            InvalidStateError: If there is no paused session
        """
        self._requireStatus(SessionStatus.PAUSED, "No paused session to resume")
        self._currentSession = replace(self._currentSession, status=SessionStatus.ACTIVE)
        logger.info(f"Session resumed | id={self._currentSession.id}")
        return self._currentSession

    def endSession(self, trigger: SessionTrigger) -> DriveSession:
        """
        Complete the current session and compute its statistics.

        Clears the current session and waypoints so a new session can start.

        Args:
            trigger: What ended the session

        Returns:
            The completed session

        Raises:
            InvalidStateError: If there is no session
        """
        if self._currentSession is None:
            raise InvalidStateError("No session to end")

        session = replace(
            self._currentSession,
            endTime=self._clock(),
            endTrigger=trigger,
            status=SessionStatus.COMPLETED,
            waypointCount=len(self._waypoints),
        )
        session = self._calculateStats(session)

        self._currentSession = None
        self._waypoints = []

        logger.info(
            f"SESSION ENDED | id={session.id} | "
            f"trigger={trigger.triggerType.value} | "
            f"distance={session.totalDistance:.1f}m | "
            f"duration={session.totalDuration:.1f}s | "
            f"waypoints={session.waypointCount}"
        )
        return session

    def addWaypoint(self, sample: LocationSample) -> Optional[Waypoint]:
        """
        Record a location sample on the active session.

        Ignored unless the session status is exactly ACTIVE.

        Args:
            sample: Location sample to record

        Returns:
            The recorded Waypoint, or None if ignored
        """
        session = self._currentSession
        if session is None or session.status != SessionStatus.ACTIVE:
            return None

        waypoint = Waypoint(
            id=len(self._waypoints) + 1,
            sessionId=session.id,
            sample=sample,
        )
        self._waypoints.append(waypoint)

        speed = sample.effectiveSpeed()
        if speed > session.maxSpeed:
            self._currentSession = replace(session, maxSpeed=speed)

        return waypoint

    # ================================================================================
    # Internals
    # ================================================================================

    def _requireStatus(self, status: SessionStatus, message: str) -> None:
        """Raise InvalidStateError unless the current session has the given status."""
        if self._currentSession is None or self._currentSession.status != status:
            raise InvalidStateError(
                message,
                details={
                    'status': (
                        self._currentSession.status.value
                        if self._currentSession else None
                    ),
                }
            )

    def _calculateStats(self, session: DriveSession) -> DriveSession:
        """
        Compute final distance, duration and average speed.

        Needs at least two waypoints; otherwise the zeroed statistics stand.

        Args:
            session: Completed session with endTime set

        Returns:
            Session with statistics filled in
        """
        if len(self._waypoints) < 2 or session.endTime is None:
            return session

        duration = (session.endTime - session.startTime).total_seconds()
        distance = pathDistance(waypoint.sample for waypoint in self._waypoints)
        averageSpeed = distance / duration if duration > 0 else 0.0

        return replace(
            session,
            totalDuration=duration,
            totalDistance=distance,
            averageSpeed=averageSpeed,
        )
