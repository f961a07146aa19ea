"""
Unit tests for pipeline configuration.
"""

import json
from decimal import Decimal

import pytest

from payroll.config import (
    ENV_DISCARD_UNLABELED,
    ENV_MAX_WORKERS,
    ENV_TOLERANCE,
    PayrollConfiguration,
    load_configuration,
)
from payroll.exceptions import ConfigurationError


class TestPayrollConfiguration:
    """Test cases for PayrollConfiguration."""

    def test_defaults(self):
        config = PayrollConfiguration()

        assert config.tolerance == Decimal('1.00')
        assert config.max_workers == 4
        assert config.discard_unlabeled_values is False
        assert config.presence_fallback_x == 500

    def test_tolerance_coerced_to_decimal(self):
        config = PayrollConfiguration(tolerance='0.5')

        assert config.tolerance == Decimal('0.5')

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            PayrollConfiguration(tolerance=Decimal('-1'))

        assert exc_info.value.key == 'tolerance'

    def test_zero_workers_rejected(self):
        with pytest.raises(ConfigurationError):
            PayrollConfiguration(max_workers=0)

    def test_from_dict(self):
        config = PayrollConfiguration.from_dict({'tolerance': '2', 'discard_unlabeled_values': 'yes'})

        assert config.tolerance == Decimal('2')
        assert config.discard_unlabeled_values is True

    def test_from_dict_rejects_unknown_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            PayrollConfiguration.from_dict({'database': 'payroll.db'})

        assert exc_info.value.details['key'] == 'database'

    def test_from_file(self, tmp_path):
        config_file = tmp_path / 'payroll.json'
        config_file.write_text(json.dumps({'max_workers': 2, 'tolerance': 0.25}))

        config = PayrollConfiguration.from_file(config_file)

        assert config.max_workers == 2
        assert config.tolerance == Decimal('0.25')

    def test_from_file_invalid_json(self, tmp_path):
        config_file = tmp_path / 'payroll.json'
        config_file.write_text('{not json')

        with pytest.raises(ConfigurationError) as exc_info:
            PayrollConfiguration.from_file(config_file)

        assert str(config_file) in str(exc_info.value)

    def test_from_file_requires_object(self, tmp_path):
        config_file = tmp_path / 'payroll.json'
        config_file.write_text('[1, 2]')

        with pytest.raises(ConfigurationError):
            PayrollConfiguration.from_file(config_file)

    def test_env_overrides(self):
        environ = {ENV_TOLERANCE: '0.10', ENV_MAX_WORKERS: '8', ENV_DISCARD_UNLABELED: 'true'}

        config = PayrollConfiguration().with_env_overrides(environ)

        assert config.tolerance == Decimal('0.10')
        assert config.max_workers == 8
        assert config.discard_unlabeled_values is True

    def test_env_without_overrides_returns_same_config(self):
        config = PayrollConfiguration()

        assert config.with_env_overrides({}) is config

    def test_invalid_env_value(self):
        with pytest.raises(ConfigurationError) as exc_info:
            PayrollConfiguration().with_env_overrides({ENV_DISCARD_UNLABELED: 'maybe'})

        assert exc_info.value.key == 'discard_unlabeled_values'

    def test_to_dict(self):
        assert PayrollConfiguration().to_dict() == {
            'tolerance': '1.00',
            'max_workers': 4,
            'discard_unlabeled_values': False,
            'presence_fallback_x': 500,
        }


class TestLoadConfiguration:
    """Test cases for layered configuration loading."""

    def test_environment_overrides_file(self, tmp_path):
        config_file = tmp_path / 'payroll.json'
        config_file.write_text(json.dumps({'tolerance': '5', 'max_workers': 2}))

        config = load_configuration(config_file, environ={ENV_TOLERANCE: '0.5'})

        assert config.tolerance == Decimal('0.5')
        assert config.max_workers == 2

    def test_defaults_without_file(self):
        assert load_configuration(environ={}) == PayrollConfiguration()
