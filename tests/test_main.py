################################################################################
# File Name: test_main.py
# Purpose/Description: Tests for main application entry point
# Author: Michael Cornelison
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-12    | M. Cornelison | Initial implementation
# 2026-10-16    | Ralph Agent  | US-DS-018: Scenario runs and exit codes
# 2026-10-17    | M. Cornelison | US-DS-019: Categorized error log lines
# ================================================================================
################################################################################

"""
Tests for the main module.

Logging setup is patched out in main() tests so the root logger keeps
pytest's capture handlers.

Run with:
    pytest tests/test_main.py -v
"""

import json
import logging
from unittest.mock import patch

import pytest

from drivesentry.config import validateDriveSentryConfig
from drivesentry.exceptions import InvalidStateError
from drivesentry.storage import (
    SqliteSessionRepository,
    StorageError,
    createDatabaseFromConfig,
)
from drivesentry.types import TriggerType
from main import (
    DEFAULT_CONFIG,
    EXIT_CONFIG_ERROR,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_UNKNOWN_ERROR,
    main,
    parseArgs,
    resolveScenario,
    runWorkflow,
)


@pytest.fixture
def validConfig(sampleConfig):
    return validateDriveSentryConfig(sampleConfig)


@pytest.fixture
def noLoggingSetup():
    with patch('main.setupLogging') as mockSetup:
        yield mockSetup


def savedSessions(config):
    return SqliteSessionRepository(createDatabaseFromConfig(config)).listSessions()


# ================================================================================
# CLI Argument Parsing Tests
# ================================================================================

class TestParseArgs:
    """Tests for command line argument parsing."""

    def test_parseArgs_noArgs_usesDefaults(self):
        """
        Given: No command line arguments
        When: parseArgs() is called
        Then: Returns defaults for all options
        """
        args = parseArgs([])

        assert args.config == DEFAULT_CONFIG
        assert args.scenario is None
        assert args.dry_run is False
        assert args.verbose is False
        assert args.list_scenarios is False

    def test_parseArgs_shortFlags_setAllOptions(self):
        args = parseArgs(['-c', 'my.json', '-e', 'my.env', '-s', 'short_hop', '-v'])

        assert args.config == 'my.json'
        assert args.env_file == 'my.env'
        assert args.scenario == 'short_hop'
        assert args.verbose is True

    def test_parseArgs_versionFlag_exitsWithZero(self, capsys):
        with pytest.raises(SystemExit) as exc:
            parseArgs(['--version'])

        assert exc.value.code == 0
        assert '1.0.0' in capsys.readouterr().out

    def test_parseArgs_unknownArg_exitsWithError(self, capsys):
        with pytest.raises(SystemExit) as exc:
            parseArgs(['--simulate'])

        assert exc.value.code == 2


class TestResolveScenario:

    def test_resolveScenario_builtInName(self):
        assert resolveScenario('traffic_stop').name == 'traffic_stop'

    def test_resolveScenario_jsonPath_loadsFile(self, tmp_path):
        scenarioFile = tmp_path / 'trip.json'
        scenarioFile.write_text(json.dumps({
            'name': 'trip',
            'description': 'Test trip',
            'phases': [{'name': 'cruise', 'durationSeconds': 60, 'speedMps': 12}],
        }), encoding='utf-8')

        scenario = resolveScenario(str(scenarioFile))

        assert scenario.name == 'trip'
        assert scenario.phases[0].speedMps == 12.0


# ================================================================================
# Workflow Tests
# ================================================================================

class TestRunWorkflow:
    """Tests for runWorkflow()."""

    def test_runWorkflow_dryRun_createsNoDatabase(self, validConfig, tmp_path):
        exitCode = runWorkflow(validConfig, dryRun=True)

        assert exitCode == EXIT_SUCCESS
        assert not (tmp_path / 'drivesentry.db').exists()

    def test_runWorkflow_trafficStop_savesOneSession(self, validConfig):
        """
        Given: The traffic_stop scenario
        When: The workflow runs to completion
        Then: One GPS-started session is saved to the configured database
        """
        exitCode = runWorkflow(validConfig, scenarioName='traffic_stop')

        assert exitCode == EXIT_SUCCESS
        sessions = savedSessions(validConfig)
        assert len(sessions) == 1
        assert sessions[0].startTrigger.triggerType == TriggerType.GPS

    def test_runWorkflow_commute_creditsCarDevice(self, validConfig):
        runWorkflow(validConfig, scenarioName='commute')

        sessions = savedSessions(validConfig)
        assert len(sessions) == 1
        assert sessions[0].startTrigger.triggerType == TriggerType.BLUETOOTH
        assert sessions[0].startTrigger.deviceName == 'Honda HandsFreeLink'

    def test_runWorkflow_shortHop_savesNothing(self, validConfig):
        assert runWorkflow(validConfig, scenarioName='short_hop') == EXIT_SUCCESS
        assert savedSessions(validConfig) == []

    def test_runWorkflow_saveFails_returnsRuntimeError(self, validConfig):
        with patch.object(
            SqliteSessionRepository, 'save', side_effect=StorageError("disk full")
        ):
            exitCode = runWorkflow(validConfig, scenarioName='traffic_stop')

        assert exitCode == EXIT_RUNTIME_ERROR

    def test_runWorkflow_invalidBuiltInScenario_returnsConfigError(self, validConfig):
        with patch('main.resolveScenario') as mockResolve:
            mockResolve.return_value.validate.return_value = ['Scenario must have at least one phase']
            mockResolve.return_value.name = 'empty'

            exitCode = runWorkflow(validConfig)

        assert exitCode == EXIT_CONFIG_ERROR


# ================================================================================
# Main Tests
# ================================================================================

class TestMain:
    """Tests for main()."""

    def test_main_listScenarios_printsAndSucceeds(self, noLoggingSetup, capsys):
        exitCode = main(['--list-scenarios'])

        output = capsys.readouterr().out
        assert exitCode == EXIT_SUCCESS
        for name in ('commute', 'short_hop', 'traffic_stop'):
            assert name in output

    def test_main_missingConfig_returnsConfigError(self, noLoggingSetup, tmp_path):
        exitCode = main(['--config', str(tmp_path / 'missing.json')])

        assert exitCode == EXIT_CONFIG_ERROR

    def test_main_missingConfig_logsCategorizedError(self, noLoggingSetup, tmp_path, caplog):
        with caplog.at_level(logging.ERROR):
            main(['--config', str(tmp_path / 'missing.json')])

        assert 'Configuration error: [CONFIGURATION]' in caplog.text

    def test_main_driveSentryError_logsCategorizedError(
        self, noLoggingSetup, tempConfigFile, caplog
    ):
        """
        Given: A workflow that fails with an InvalidStateError
        When: main() runs
        Then: The runtime exit code is returned and the log line names the category
        """
        error = InvalidStateError("Session already active", details={'sessionId': 's1'})

        with patch('main.runWorkflow', side_effect=error), caplog.at_level(logging.ERROR):
            exitCode = main(['--config', str(tempConfigFile)])

        assert exitCode == EXIT_RUNTIME_ERROR
        assert (
            "Runtime error: [STATE] Session already active | details={'sessionId': 's1'}"
            in caplog.text
        )

    def test_main_dryRun_returnsSuccess(self, noLoggingSetup, tempConfigFile, tmp_path):
        exitCode = main([
            '--config', str(tempConfigFile),
            '--env-file', str(tmp_path / 'none.env'),
            '--dry-run',
        ])

        assert exitCode == EXIT_SUCCESS

    def test_main_fullRun_appliesLoggingSectionAndSaves(
        self, noLoggingSetup, tempConfigFile, tmp_path, sampleConfig
    ):
        """
        Given: A valid configuration file
        When: main() runs the traffic_stop scenario
        Then: Logging is reconfigured from the file and the session is saved
        """
        # Act
        exitCode = main([
            '--config', str(tempConfigFile),
            '--env-file', str(tmp_path / 'none.env'),
            '--scenario', 'traffic_stop',
        ])

        # Assert
        assert exitCode == EXIT_SUCCESS
        noLoggingSetup.assert_called_with(level='DEBUG', logFile=None, enablePIIMasking=True)
        assert len(savedSessions(validateDriveSentryConfig(sampleConfig))) == 1

    def test_main_unknownScenario_returnsRuntimeError(
        self, noLoggingSetup, tempConfigFile, tmp_path
    ):
        exitCode = main([
            '--config', str(tempConfigFile),
            '--env-file', str(tmp_path / 'none.env'),
            '--scenario', 'moon_landing',
        ])

        assert exitCode == EXIT_RUNTIME_ERROR

    def test_main_keyboardInterrupt_returnsRuntimeError(self, noLoggingSetup, tempConfigFile):
        with patch('main.runWorkflow', side_effect=KeyboardInterrupt):
            exitCode = main(['--config', str(tempConfigFile)])

        assert exitCode == EXIT_RUNTIME_ERROR

    def test_main_unexpectedException_returnsUnknownError(self, noLoggingSetup, tempConfigFile):
        with patch('main.runWorkflow', side_effect=RuntimeError("boom")):
            exitCode = main(['--config', str(tempConfigFile)])

        assert exitCode == EXIT_UNKNOWN_ERROR

    def test_main_verboseFlag_forcesDebug(self, noLoggingSetup, tempConfigFile, sampleConfig):
        with patch('main.runWorkflow', return_value=EXIT_SUCCESS) as mockRun:
            main(['--config', str(tempConfigFile), '--verbose', '--dry-run'])

        noLoggingSetup.assert_any_call(level='DEBUG')
        mockRun.assert_called_once()
        assert mockRun.call_args.kwargs['dryRun'] is True
