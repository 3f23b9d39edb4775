################################################################################
# File Name: test_geo.py
# Purpose/Description: Tests for great-circle distance helpers
# Author: Ralph Agent
# Creation Date: 2026-10-13
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-13    | Ralph Agent  | Initial implementation (US-DS-006)
# 2026-10-16    | Ralph Agent  | US-DS-017: destinationPoint tests
# 2026-10-17    | M. Cornelison | US-DS-019: Antipodal distance
# ================================================================================
################################################################################

"""
Tests for drivesentry.geo.

Run with:
    pytest tests/test_geo.py -v
"""

import math

import pytest

from drivesentry.geo import (
    EARTH_RADIUS_M,
    destinationPoint,
    haversineDistance,
    pathDistance,
    sampleDistance,
)
from drivesentry.types import LocationSample


class TestHaversine:

    def test_samePoint_isZero(self):
        assert haversineDistance(37.7749, -122.4194, 37.7749, -122.4194) == 0.0

    def test_oneDegreeLatitude_about111km(self):
        assert haversineDistance(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_195, rel=1e-3)

    def test_symmetric(self):
        forward = haversineDistance(37.7749, -122.4194, 34.0522, -118.2437)
        backward = haversineDistance(34.0522, -118.2437, 37.7749, -122.4194)

        assert forward == pytest.approx(backward)
        # San Francisco to Los Angeles
        assert forward == pytest.approx(559_000, rel=0.01)

    def test_acrossAntimeridian_isShort(self):
        assert haversineDistance(0.0, 179.999, 0.0, -179.999) == pytest.approx(222.4, rel=1e-2)

    @pytest.mark.parametrize('lat1,lon1,lat2,lon2', [
        (-78.1264, -51.5333, 78.1264, 128.4667),
        (0.0, 0.0, 0.0, 180.0),
        (90.0, 0.0, -90.0, 0.0),
    ])
    def test_antipodalPoints_halfCircumference(self, lat1, lon1, lat2, lon2):
        distance = haversineDistance(lat1, lon1, lat2, lon2)

        assert distance == pytest.approx(math.pi * EARTH_RADIUS_M, rel=1e-6)


class TestPathDistance:

    def test_fewerThanTwoSamples_isZero(self):
        assert pathDistance([]) == 0.0
        assert pathDistance([LocationSample(0.0, 0.0, timestamp=0)]) == 0.0

    def test_sumsConsecutivePairs(self):
        samples = [
            LocationSample(0.0, 0.0, timestamp=0),
            LocationSample(0.01, 0.0, timestamp=1000),
            LocationSample(0.0, 0.0, timestamp=2000),
        ]

        assert pathDistance(samples) == pytest.approx(
            2 * sampleDistance(samples[0], samples[1])
        )

    def test_acceptsGenerator(self):
        samples = (LocationSample(lat, 0.0, timestamp=0) for lat in (0.0, 0.01))

        assert pathDistance(samples) == pytest.approx(1111.95, rel=1e-3)


class TestDestinationPoint:

    def test_north_increasesLatitude(self):
        latitude, longitude = destinationPoint(0.0, 0.0, 0.0, 1111.95)

        assert latitude == pytest.approx(0.01, abs=1e-5)
        assert longitude == pytest.approx(0.0, abs=1e-9)

    def test_roundTripsWithHaversine(self):
        """
        Given: A start point, bearing and distance
        When: The destination is computed
        Then: Haversine distance back to the start matches
        """
        latitude, longitude = destinationPoint(37.7749, -122.4194, 45.0, 500.0)

        assert haversineDistance(37.7749, -122.4194, latitude, longitude) == pytest.approx(
            500.0, rel=1e-6
        )

    def test_normalizesLongitude(self):
        _, longitude = destinationPoint(0.0, 179.9999, 90.0, 1000.0)

        assert -180.0 <= longitude < 180.0
