################################################################################
# File Name: __init__.py
# Purpose/Description: Simulator subpackage for hardware-free DriveSentry runs
# Author: Ralph Agent
# Creation Date: 2026-10-16
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-16    | Ralph Agent  | Initial subpackage creation (US-DS-017)
# ================================================================================
################################################################################
"""
Simulator Subpackage.

This subpackage lets DriveSentry run without location or Bluetooth hardware:
- Simulated feeds implementing the LocationFeed/BluetoothFeed contracts
- A manually advanced clock
- Scripted drive scenarios and the runner that replays them

Usage:
    from drivesentry.simulator import (
        SimulatedClock, SimulatedLocationFeed, SimulatedBluetoothFeed,
        DriveScenarioRunner, getBuiltInScenario,
    )

    clock = SimulatedClock()
    locationFeed = SimulatedLocationFeed()
    bluetoothFeed = SimulatedBluetoothFeed()
    ...
    runner = DriveScenarioRunner(
        getBuiltInScenario('traffic_stop'), locationFeed, bluetoothFeed, clock
    )
    runner.runToCompletion()
"""

from .drive_scenario import (
    BUILT_IN_SCENARIOS,
    DEFAULT_CAR_DEVICE,
    DEFAULT_SAMPLE_INTERVAL_SECONDS,
    DriveScenario,
    DriveScenarioError,
    DriveScenarioRunner,
    ScenarioLoadError,
    ScenarioPhase,
    ScenarioState,
    ScenarioValidationError,
    getBuiltInScenario,
    listBuiltInScenarios,
    loadScenario,
)
from .simulated_feeds import (
    SimulatedBluetoothFeed,
    SimulatedClock,
    SimulatedLocationFeed,
)

__all__ = [
    # Feeds
    'SimulatedClock',
    'SimulatedLocationFeed',
    'SimulatedBluetoothFeed',
    # Scenarios
    'ScenarioPhase',
    'DriveScenario',
    'DriveScenarioRunner',
    'ScenarioState',
    'BUILT_IN_SCENARIOS',
    'DEFAULT_CAR_DEVICE',
    'DEFAULT_SAMPLE_INTERVAL_SECONDS',
    'getBuiltInScenario',
    'listBuiltInScenarios',
    'loadScenario',
    # Exceptions
    'DriveScenarioError',
    'ScenarioLoadError',
    'ScenarioValidationError',
]
