################################################################################
# File Name: geo.py
# Purpose/Description: Great-circle distance helpers
# Author: Ralph Agent
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | Ralph Agent  | Initial implementation (US-DS-003)
# 2026-10-16    | Ralph Agent  | US-DS-017: destinationPoint for scenario runner
# 2026-10-17    | M. Cornelison | US-DS-019: Clamp haversine term for antipodal points
# ================================================================================
################################################################################
"""
Geodesic helpers for session statistics.

Distances use the haversine formula on a sphere of mean Earth radius;
destinationPoint() is its inverse, used by the scenario runner to move a
simulated vehicle.
"""

import math
from typing import Iterable, Tuple

from .types import LocationSample

# Mean Earth radius in meters
EARTH_RADIUS_M = 6_371_000.0


def haversineDistance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Compute the great-circle distance in meters between two points.

    Args:
        lat1: Latitude 1 in degrees
        lon1: Longitude 1 in degrees
        lat2: Latitude 2 in degrees
        lon2: Longitude 2 in degrees

    Returns:
        Distance in meters
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    deltaPhi = math.radians(lat2 - lat1)
    deltaLambda = math.radians(lon2 - lon1)

    a = (
        math.sin(deltaPhi / 2.0) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(deltaLambda / 2.0) ** 2
    )
    # Rounding can push a just past 1 for near-antipodal points
    a = min(1.0, max(0.0, a))
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def sampleDistance(first: LocationSample, second: LocationSample) -> float:
    """Distance in meters between two location samples."""
    return haversineDistance(
        first.latitude, first.longitude, second.latitude, second.longitude
    )


def pathDistance(samples: Iterable[LocationSample]) -> float:
    """
    Sum the distance between each consecutive pair of samples.

    Samples are taken in the order given; timestamps are not consulted.

    Args:
        samples: Location samples in arrival order

    Returns:
        Total distance in meters (0 for fewer than two samples)
    """
    total = 0.0
    previous = None
    for sample in samples:
        if previous is not None:
            total += sampleDistance(previous, sample)
        previous = sample
    return total


def destinationPoint(
    latitude: float,
    longitude: float,
    bearingDegrees: float,
    distanceMeters: float
) -> Tuple[float, float]:
    """
    Point reached by travelling a distance along a bearing.

    Args:
        latitude: Start latitude in degrees
        longitude: Start longitude in degrees
        bearingDegrees: Initial bearing, 0 = north, clockwise
        distanceMeters: Distance to travel

    Returns:
        (latitude, longitude) in degrees, longitude normalized to [-180, 180)
    """
    angular = distanceMeters / EARTH_RADIUS_M
    bearing = math.radians(bearingDegrees)
    phi1 = math.radians(latitude)
    lambda1 = math.radians(longitude)

    phi2 = math.asin(
        math.sin(phi1) * math.cos(angular)
        + math.cos(phi1) * math.sin(angular) * math.cos(bearing)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(bearing) * math.sin(angular) * math.cos(phi1),
        math.cos(angular) - math.sin(phi1) * math.sin(phi2)
    )

    longitude2 = (math.degrees(lambda2) + 540.0) % 360.0 - 180.0
    return math.degrees(phi2), longitude2
