################################################################################
# File Name: main.py
# Purpose/Description: Main application entry point
# Author: Michael Cornelison
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | M. Cornelison | Initial implementation
# 2026-10-16    | Ralph Agent  | US-DS-018: Run simulated scenarios through the
#               |              | orchestrator with SQLite persistence
# 2026-10-17    | M. Cornelison | US-DS-019: Categorized error messages on exit
# ================================================================================
################################################################################

"""
Main application entry point.

This module provides the main entry point for DriveSentry with:
- CLI argument parsing
- Configuration loading and validation
- A simulated drive (built-in or JSON scenario) replayed through the
  orchestrator, with completed sessions saved to SQLite
- Error handling and exit codes

Usage:
    python src/main.py --help
    python src/main.py --config path/to/drivesentry_config.json
    python src/main.py --scenario traffic_stop
    python src/main.py --list-scenarios
    python src/main.py --dry-run
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Resolve project paths relative to this script (not CWD)
srcPath = Path(__file__).resolve().parent
projectRoot = srcPath.parent
if str(srcPath) not in sys.path:
    sys.path.insert(0, str(srcPath))

DEFAULT_CONFIG = str(srcPath / 'drivesentry_config.json')
DEFAULT_ENV = str(projectRoot / '.env')

from common.error_handler import formatError, handleError
from common.logging_config import getLogger, logWithContext, setupLogging
from drivesentry.config import loadDriveSentryConfig
from drivesentry.events import DriveSentryEvent, EventType
from drivesentry.exceptions import DriveSentryConfigError, DriveSentryError
from drivesentry.orchestrator import createOrchestratorFromConfig
from drivesentry.simulator import (
    DriveScenario,
    DriveScenarioRunner,
    SimulatedBluetoothFeed,
    SimulatedClock,
    SimulatedLocationFeed,
    getBuiltInScenario,
    listBuiltInScenarios,
    loadScenario,
)
from drivesentry.storage import (
    SessionRecorder,
    SqliteDeviceTagStore,
    SqliteSessionRepository,
    createDatabaseFromConfig,
)
from drivesentry.types import BluetoothDevice, DriveSession

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_RUNTIME_ERROR = 2
EXIT_UNKNOWN_ERROR = 3

# Events worth a log line during a run
LOGGED_EVENTS = {
    EventType.BLUETOOTH_CONNECTED,
    EventType.BLUETOOTH_DISCONNECTED,
    EventType.DRIVING_DETECTED,
    EventType.DRIVING_PAUSED,
    EventType.DRIVING_RESUMED,
    EventType.SESSION_STARTED,
    EventType.SESSION_ENDED,
    EventType.ERROR,
}


def parseArgs(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='DriveSentry - driving session detection',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py                          Run the configured scenario
  python main.py --scenario short_hop     Run a built-in scenario
  python main.py --scenario trip.json     Run a scenario file
  python main.py --list-scenarios         Show built-in scenarios
  python main.py --dry-run                Validate config only
        '''
    )

    parser.add_argument(
        '--config', '-c',
        default=DEFAULT_CONFIG,
        help='Path to configuration file (default: src/drivesentry_config.json)'
    )

    parser.add_argument(
        '--env-file', '-e',
        default=DEFAULT_ENV,
        help='Path to environment file (default: .env)'
    )

    parser.add_argument(
        '--scenario', '-s',
        default=None,
        help='Built-in scenario name or path to a scenario JSON file '
             '(default: simulator.scenario from config)'
    )

    parser.add_argument(
        '--list-scenarios',
        action='store_true',
        help='List built-in scenarios and exit'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Validate configuration without running a scenario'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose (debug) logging'
    )

    parser.add_argument(
        '--version',
        action='version',
        version='%(prog)s 1.0.0'
    )

    return parser.parse_args(argv)


def resolveScenario(nameOrPath: str) -> DriveScenario:
    """
    Get a scenario by built-in name, or load it from a JSON file.

    Raises:
        ScenarioLoadError: If the scenario cannot be found or parsed
    """
    if nameOrPath.endswith('.json'):
        return loadScenario(nameOrPath)
    return getBuiltInScenario(nameOrPath)


def logEvent(event: DriveSentryEvent) -> None:
    """Event subscriber that logs meaningful transitions."""
    if event.eventType not in LOGGED_EVENTS:
        return

    logger = getLogger(__name__)
    context: Dict[str, Any] = {}
    if event.device is not None:
        context['device'] = event.device.name
    if event.session is not None:
        context['session'] = event.session.id
    if event.error is not None:
        context['error'] = event.error

    level = 'error' if event.eventType == EventType.ERROR else 'info'
    logWithContext(logger, level, f"EVENT {event.eventType.value}", **context)


def runWorkflow(
    config: Dict[str, Any],
    scenarioName: Optional[str] = None,
    dryRun: bool = False
) -> int:
    """
    Replay a scenario through the orchestrator and report the sessions.

    Args:
        config: Validated configuration dictionary
        scenarioName: Scenario override (name or JSON path)
        dryRun: If True, stop after validating the scenario

    Returns:
        Exit code
    """
    logger = getLogger(__name__)
    simConfig = config['simulator']

    scenario = resolveScenario(scenarioName or simConfig['scenario'])
    errors = scenario.validate()
    if errors:
        logger.error(f"Scenario '{scenario.name}' is invalid: {errors}")
        return EXIT_CONFIG_ERROR

    if dryRun:
        logger.info("DRY RUN MODE - Configuration and scenario are valid")
        logger.info(
            f"Scenario: {scenario.name} | phases={len(scenario.phases)} | "
            f"duration={scenario.getTotalDuration():.0f}s"
        )
        return EXIT_SUCCESS

    database = createDatabaseFromConfig(config)
    database.initialize()
    repository = SqliteSessionRepository(database)
    recorder = SessionRecorder(repository)

    clock = SimulatedClock()
    locationFeed = SimulatedLocationFeed()
    bluetoothFeed = SimulatedBluetoothFeed()

    orchestrator = createOrchestratorFromConfig(
        config,
        locationFeed,
        bluetoothFeed,
        tagStore=SqliteDeviceTagStore(database),
        clock=clock,
    )

    completed: List[DriveSession] = []

    def collectCompleted(event: DriveSentryEvent) -> None:
        if event.eventType == EventType.SESSION_ENDED and event.session is not None:
            completed.append(event.session)

    orchestrator.subscribe(logEvent)
    orchestrator.subscribe(recorder)
    orchestrator.subscribe(collectCompleted)

    runner = DriveScenarioRunner(
        scenario,
        locationFeed,
        bluetoothFeed,
        clock=clock,
        sampleIntervalSeconds=simConfig['sampleIntervalSeconds'],
        startLatitude=simConfig['startLatitude'],
        startLongitude=simConfig['startLongitude'],
        carDevice=BluetoothDevice(
            id=simConfig['carDeviceId'],
            name=simConfig['carDeviceName'],
        ),
    )

    logger.info(f"Running scenario: {scenario.name} ({scenario.description})")

    orchestrator.initialize()
    try:
        orchestrator.start()
        samples = runner.runToCompletion()
    finally:
        orchestrator.stop()

    logger.info(f"Scenario finished | samples={samples} | sessions={len(completed)}")
    for session in completed:
        logWithContext(
            logger, 'info', "SESSION",
            id=session.id,
            start=session.startTrigger.triggerType.value,
            end=session.endTrigger.triggerType.value if session.endTrigger else None,
            distance=f"{session.totalDistance:.0f}m",
            duration=f"{session.totalDuration:.0f}s",
            avgSpeed=f"{session.averageSpeed:.1f}m/s",
            maxSpeed=f"{session.maxSpeed:.1f}m/s",
            waypoints=session.waypointCount,
        )

    if recorder.failedCount:
        logger.warning(f"{recorder.failedCount} sessions could not be saved")
        return EXIT_RUNTIME_ERROR

    return EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = parseArgs(argv)

    setupLogging(level='DEBUG' if args.verbose else 'INFO')
    logger = getLogger(__name__)

    if args.list_scenarios:
        for name in listBuiltInScenarios():
            scenario = getBuiltInScenario(name)
            print(f"{name:<14} {scenario.getTotalDuration():>6.0f}s  {scenario.description}")
        return EXIT_SUCCESS

    logger.info("=" * 60)
    logger.info("DriveSentry starting...")
    logger.info("=" * 60)

    try:
        config = loadDriveSentryConfig(args.config, args.env_file)

        logConfig = config['logging']
        setupLogging(
            level='DEBUG' if args.verbose else logConfig['level'],
            logFile=logConfig['file'],
            enablePIIMasking=logConfig['maskPII'],
        )

        exitCode = runWorkflow(config, scenarioName=args.scenario, dryRun=args.dry_run)

        if exitCode == EXIT_SUCCESS:
            logger.info("DriveSentry completed successfully")
        else:
            logger.warning(f"DriveSentry completed with exit code {exitCode}")

        return exitCode

    except DriveSentryConfigError as e:
        logger.error(f"Configuration error: {formatError(e)}")
        return EXIT_CONFIG_ERROR

    except DriveSentryError as e:
        logger.error(f"Runtime error: {formatError(e)}")
        return EXIT_RUNTIME_ERROR

    except KeyboardInterrupt:
        logger.warning("Application interrupted by user")
        return EXIT_RUNTIME_ERROR

    except Exception as e:
        handleError(e, reraise=False)
        logger.error(f"Unexpected error: {e}")
        return EXIT_UNKNOWN_ERROR

    finally:
        logger.info("=" * 60)
        logger.info("DriveSentry finished")
        logger.info("=" * 60)


if __name__ == '__main__':
    sys.exit(main())
