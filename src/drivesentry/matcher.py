################################################################################
# File Name: matcher.py
# Purpose/Description: Car Bluetooth device classification
# Author: Ralph Agent
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | Ralph Agent  | Initial implementation (US-DS-002)
# 2026-10-15    | Ralph Agent  | US-DS-009: Extra patterns from config, markConnected
# ================================================================================
################################################################################
"""
Car Bluetooth device matching.

Classifies a Bluetooth device as car-like:
1. Manually tagged device ids win unconditionally
2. Otherwise the device name is checked against an ordered rule table

Usage:
    from drivesentry.matcher import CarDeviceMatcher

    matcher = CarDeviceMatcher()
    matcher.loadTaggedDevices(tagStore)

    if matcher.isCarDevice(device):
        print(f"{device.name} looks like a car")

    matcher.tagAsCarDevice(headUnit)
"""

import logging
import re
import threading
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Pattern

from .types import BluetoothDevice, CarDevice, TagOrigin

logger = logging.getLogger(__name__)


# ================================================================================
# Rule Table
# ================================================================================

# Keywords common to car head units and hands-free kits
CAR_KEYWORD_PATTERNS: List[str] = [
    r'car',
    r'auto',
    r'sync',
    r'carplay',
    r'android auto',
    r'handsfree',
    r'vehicle',
]

# Manufacturer names that show up in head-unit Bluetooth names
CAR_MANUFACTURER_PATTERNS: List[str] = [
    r'honda',
    r'toyota',
    r'ford',
    r'bmw',
    r'mercedes',
    r'audi',
    r'volkswagen',
    r'chevrolet',
    r'nissan',
    r'hyundai',
    r'kia',
    r'mazda',
    r'subaru',
    r'lexus',
    r'jeep',
    r'tesla',
]

CAR_DEVICE_PATTERNS: List[Pattern[str]] = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in CAR_KEYWORD_PATTERNS + CAR_MANUFACTURER_PATTERNS
]


# ================================================================================
# CarDeviceMatcher Class
# ================================================================================

class CarDeviceMatcher:
    """
    Identifies car Bluetooth devices.

    The manual tag map is guarded by its own lock so tags can be added or
    removed while the orchestrator is processing events; tags only affect
    future classification.
    """

    def __init__(
        self,
        extraPatterns: Optional[Iterable[str]] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the matcher.

        Args:
            extraPatterns: Additional case-insensitive regexes checked after
                the built-in table
            clock: Time source for tag timestamps (defaults to datetime.now)
        """
        self._patterns: List[Pattern[str]] = list(CAR_DEVICE_PATTERNS)
        for pattern in extraPatterns or []:
            self._patterns.append(re.compile(pattern, re.IGNORECASE))

        self._clock = clock or datetime.now
        self._taggedDevices: Dict[str, CarDevice] = {}
        self._lock = threading.Lock()

    # ================================================================================
    # Classification
    # ================================================================================

    def isCarDevice(self, device: BluetoothDevice) -> bool:
        """
        Check if a device belongs to a car.

        Args:
            device: Bluetooth device to classify

        Returns:
            True if manually tagged or the name matches a car pattern
        """
        with self._lock:
            if device.id in self._taggedDevices:
                return True

        return self.matchesCarPattern(device.name)

    def matchesCarPattern(self, deviceName: Optional[str]) -> bool:
        """Check if a device name matches any car pattern."""
        if not deviceName:
            return False
        return any(pattern.search(deviceName) for pattern in self._patterns)

    def classify(self, device: BluetoothDevice) -> BluetoothDevice:
        """Return a copy of the device with isCarDevice set."""
        return replace(device, isCarDevice=self.isCarDevice(device))

    # ================================================================================
    # Manual Tags
    # ================================================================================

    def tagAsCarDevice(self, device: BluetoothDevice) -> CarDevice:
        """
        Manually tag a device as a car, replacing any existing tag.

        Args:
            device: Device to tag

        Returns:
            The new CarDevice record
        """
        now = self._clock()
        carDevice = CarDevice(
            id=device.id,
            name=device.name,
            origin=TagOrigin.MANUAL,
            createdAt=now,
            lastConnected=now,
        )

        with self._lock:
            self._taggedDevices[device.id] = carDevice

        logger.info(f"Device tagged as car | id={device.id} | name={device.name}")
        return carDevice

    def untagCarDevice(self, deviceId: str) -> bool:
        """
        Remove a manual tag.

        Args:
            deviceId: Id of the device to untag

        Returns:
            True if a tag existed
        """
        with self._lock:
            removed = self._taggedDevices.pop(deviceId, None)

        if removed is not None:
            logger.info(f"Device untagged | id={deviceId}")
        return removed is not None

    def getTaggedDevices(self) -> List[CarDevice]:
        """Get all tagged car devices."""
        with self._lock:
            return list(self._taggedDevices.values())

    def getTaggedDevice(self, deviceId: str) -> Optional[CarDevice]:
        """Get the tag for a device id, if any."""
        with self._lock:
            return self._taggedDevices.get(deviceId)

    def markConnected(self, deviceId: str) -> Optional[CarDevice]:
        """
        Record a connection time on a tagged device.

        Args:
            deviceId: Id of the connected device

        Returns:
            Updated CarDevice, or None if the device is not tagged
        """
        with self._lock:
            carDevice = self._taggedDevices.get(deviceId)
            if carDevice is None:
                return None
            carDevice = replace(carDevice, lastConnected=self._clock())
            self._taggedDevices[deviceId] = carDevice
            return carDevice

    def loadTaggedDevices(self, store: Any) -> int:
        """
        Replace the tag map with the devices held by a DeviceTagStore.

        Args:
            store: DeviceTagStore (None leaves the map empty)

        Returns:
            Number of devices loaded
        """
        devices = store.loadTaggedDevices() if store is not None else []

        with self._lock:
            self._taggedDevices = {device.id: device for device in devices}
            count = len(self._taggedDevices)

        logger.info(f"Tagged car devices loaded | count={count}")
        return count
