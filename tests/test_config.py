################################################################################
# File Name: test_config.py
# Purpose/Description: Tests for DriveSentry configuration loading
# Author: Ralph Agent
# Creation Date: 2026-10-15
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-15    | Ralph Agent  | Initial implementation (US-DS-011)
# ================================================================================
################################################################################

"""
Tests for drivesentry.config.

Test coverage includes:
- Loading from file (missing file, invalid JSON, .env placeholders)
- Defaults for optional sections
- Per-section validation with every invalid field reported
- DrivingConditions construction

Run with:
    pytest tests/test_config.py -v
"""

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from drivesentry.config import (
    getDrivingConditions,
    loadDriveSentryConfig,
    validateDriveSentryConfig,
)
from drivesentry.exceptions import DriveSentryConfigError
from drivesentry.types import DrivingConditions


def writeConfig(tmp_path: Path, config: Dict[str, Any]) -> str:
    configFile = tmp_path / 'config.json'
    configFile.write_text(json.dumps(config), encoding='utf-8')
    return str(configFile)


# ================================================================================
# Loading
# ================================================================================

class TestLoadDriveSentryConfig:
    """Tests for loadDriveSentryConfig()."""

    def test_load_validFile_returnsValidatedConfig(self, tempConfigFile, tmp_path, cleanEnv):
        """
        Given: A complete configuration file
        When: loadDriveSentryConfig() is called
        Then: Sections are validated and numbers normalized to floats
        """
        config = loadDriveSentryConfig(str(tempConfigFile), envPath=str(tmp_path / 'none.env'))

        assert config['detection']['minDuration'] == 60.0
        assert isinstance(config['detection']['minDuration'], float)
        assert config['bluetooth']['extraCarPatterns'] == ['head ?unit']
        assert config['application']['name'] == 'DriveSentryTest'

    def test_load_missingFile_raisesWithConfigFileField(self, tmp_path):
        with pytest.raises(DriveSentryConfigError) as exc:
            loadDriveSentryConfig(str(tmp_path / 'missing.json'))

        assert 'not found' in str(exc.value)
        assert exc.value.invalidFields == ['configFile']

    def test_load_invalidJson_raisesWithPosition(self, tmp_path, cleanEnv):
        configFile = tmp_path / 'broken.json'
        configFile.write_text('{"detection": {', encoding='utf-8')

        with pytest.raises(DriveSentryConfigError) as exc:
            loadDriveSentryConfig(str(configFile), envPath=str(tmp_path / 'none.env'))

        assert 'Invalid JSON' in str(exc.value)
        assert 'line 1' in str(exc.value)

    def test_load_placeholderDefault_coercedToNumber(self, tmp_path, minimalConfig, cleanEnv):
        """
        Given: minSpeed set to a placeholder whose variable is unset
        When: The file is loaded
        Then: The placeholder default is used as a number
        """
        minimalConfig['detection'] = {'minSpeed': '${DRIVESENTRY_MIN_SPEED:7.5}'}
        configPath = writeConfig(tmp_path, minimalConfig)

        config = loadDriveSentryConfig(configPath, envPath=str(tmp_path / 'none.env'))

        assert config['detection']['minSpeed'] == 7.5

    def test_load_envFileOverridesPlaceholderDefault(self, tmp_path, minimalConfig, cleanEnv):
        # Arrange
        envFile = tmp_path / '.env'
        envFile.write_text('DRIVESENTRY_MIN_SPEED=9\nLOG_LEVEL=warning\n', encoding='utf-8')
        minimalConfig['detection'] = {'minSpeed': '${DRIVESENTRY_MIN_SPEED:5.0}'}
        minimalConfig['logging'] = {'level': '${LOG_LEVEL:INFO}'}
        configPath = writeConfig(tmp_path, minimalConfig)

        # Act
        config = loadDriveSentryConfig(configPath, envPath=str(envFile))

        # Assert
        assert config['detection']['minSpeed'] == 9.0
        assert config['logging']['level'] == 'WARNING'


# ================================================================================
# Validation
# ================================================================================

class TestValidateDriveSentryConfig:
    """Tests for validateDriveSentryConfig()."""

    def test_validate_minimalConfig_appliesDefaults(self, minimalConfig):
        config = validateDriveSentryConfig(minimalConfig)

        assert config['detection'] == {
            'minSpeed': 5.0,
            'minDuration': 60.0,
            'minDistance': 200.0,
            'maxStationaryTime': 120.0,
            'sessionEndTimeout': 300.0,
        }
        assert config['database']['walMode'] is True
        assert config['bluetooth']['extraCarPatterns'] == []
        assert config['simulator']['scenario'] == 'commute'
        assert config['logging']['maskPII'] is True

    def test_validate_doesNotModifyInput(self, minimalConfig):
        validateDriveSentryConfig(minimalConfig)

        assert 'detection' not in minimalConfig

    def test_validate_missingDatabasePath_raises(self):
        with pytest.raises(DriveSentryConfigError) as exc:
            validateDriveSentryConfig({'detection': {'minSpeed': 5.0}})

        assert exc.value.invalidFields == ['database.path']

    def test_validate_severalInvalidFields_allReported(self, sampleConfig):
        """
        Given: Invalid values in three different sections
        When: The configuration is validated
        Then: One error lists every offending field
        """
        sampleConfig['detection']['minSpeed'] = 0
        sampleConfig['simulator']['startLatitude'] = 123.0
        sampleConfig['logging']['level'] = 'CHATTY'

        with pytest.raises(DriveSentryConfigError) as exc:
            validateDriveSentryConfig(sampleConfig)

        assert set(exc.value.invalidFields) == {
            'detection.minSpeed',
            'simulator.startLatitude',
            'logging.level',
        }

    def test_validate_timeoutShorterThanPause_raises(self, sampleConfig):
        sampleConfig['detection']['maxStationaryTime'] = 400
        sampleConfig['detection']['sessionEndTimeout'] = 300

        with pytest.raises(DriveSentryConfigError) as exc:
            validateDriveSentryConfig(sampleConfig)

        assert 'sessionEndTimeout' in str(exc.value)
        assert exc.value.invalidFields == ['detection']

    def test_validate_timeoutEqualToPause_accepted(self, sampleConfig):
        sampleConfig['detection']['maxStationaryTime'] = 300

        config = validateDriveSentryConfig(sampleConfig)

        assert config['detection']['sessionEndTimeout'] == 300.0

    def test_validate_unknownKey_rejected(self, sampleConfig):
        sampleConfig['detection']['minSped'] = 3.0

        with pytest.raises(DriveSentryConfigError) as exc:
            validateDriveSentryConfig(sampleConfig)

        assert exc.value.invalidFields == ['detection.minSped']

    def test_validate_badCarPattern_rejected(self, sampleConfig):
        sampleConfig['bluetooth']['extraCarPatterns'] = ['sync(']

        with pytest.raises(DriveSentryConfigError) as exc:
            validateDriveSentryConfig(sampleConfig)

        assert exc.value.invalidFields == ['bluetooth.extraCarPatterns']
        assert 'invalid regex' in str(exc.value)

    def test_validate_lowercaseLevel_upperCased(self, sampleConfig):
        sampleConfig['logging']['level'] = 'debug'

        config = validateDriveSentryConfig(sampleConfig)

        assert config['logging']['level'] == 'DEBUG'

    @pytest.mark.parametrize('field,value', [
        ('minDuration', -1),
        ('minDistance', -0.5),
        ('maxStationaryTime', -10),
    ])
    def test_validate_negativeDetectionValue_rejected(self, sampleConfig, field, value):
        sampleConfig['detection'][field] = value

        with pytest.raises(DriveSentryConfigError) as exc:
            validateDriveSentryConfig(sampleConfig)

        assert f'detection.{field}' in exc.value.invalidFields


# ================================================================================
# Driving Conditions
# ================================================================================

class TestGetDrivingConditions:

    def test_fromValidatedConfig(self, sampleConfig):
        config = validateDriveSentryConfig(sampleConfig)

        conditions = getDrivingConditions(config)

        assert conditions == DrivingConditions(
            minSpeed=5.0, minDuration=60.0, minDistance=200.0,
            maxStationaryTime=120.0, sessionEndTimeout=300.0,
        )

    def test_missingSection_usesDefaults(self):
        assert getDrivingConditions({}) == DrivingConditions()
