"""
Configuration for the payroll extraction pipeline.

Values come from, in increasing precedence: the dataclass defaults, an
optional JSON configuration file, and ``PAYROLL_*`` environment variables.
The CLI applies its own command options on top.
"""

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .exceptions import ConfigurationError


logger = logging.getLogger(__name__)

ENV_TOLERANCE = 'PAYROLL_TOLERANCE'
ENV_MAX_WORKERS = 'PAYROLL_MAX_WORKERS'
ENV_DISCARD_UNLABELED = 'PAYROLL_DISCARD_UNLABELED'

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}


@dataclass
class PayrollConfiguration:
    """
    Pipeline settings.

    Attributes:
        tolerance: Absolute amount two compared totals may differ by
        max_workers: Number of documents loaded concurrently
        discard_unlabeled_values: Drop numeric values of documents whose
            header zone resolved no columns instead of keeping them unlabeled
        presence_fallback_x: Position given to presence-only header rules
            when the field-code token itself cannot be isolated
    """
    tolerance: Decimal = Decimal("1.00")
    max_workers: int = 4
    discard_unlabeled_values: bool = False
    presence_fallback_x: int = 500

    def __post_init__(self):
        if not isinstance(self.tolerance, Decimal):
            self.tolerance = _to_decimal(self.tolerance, 'tolerance')
        if self.tolerance < 0:
            raise ConfigurationError("tolerance must not be negative", key='tolerance')
        self.max_workers = _to_int(self.max_workers, 'max_workers')
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1", key='max_workers')

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> 'PayrollConfiguration':
        """Build a configuration from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        for key in values:
            if key not in known:
                raise ConfigurationError(f"Unknown configuration key: {key}", key=key)
        kwargs = dict(values)
        if 'discard_unlabeled_values' in kwargs:
            kwargs['discard_unlabeled_values'] = _to_bool(
                kwargs['discard_unlabeled_values'], 'discard_unlabeled_values')
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'PayrollConfiguration':
        """Load a configuration from a JSON file."""
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                values = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file: {e}", source=str(path)) from e

        if not isinstance(values, dict):
            raise ConfigurationError("Configuration file must contain a JSON object", source=str(path))

        logger.debug(f"Loaded configuration from {path}")
        return cls.from_dict(values)

    def with_env_overrides(self, environ: Optional[Mapping[str, str]] = None) -> 'PayrollConfiguration':
        """Return a copy with ``PAYROLL_*`` environment variables applied."""
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        if environ.get(ENV_TOLERANCE):
            overrides['tolerance'] = _to_decimal(environ[ENV_TOLERANCE], 'tolerance')
        if environ.get(ENV_MAX_WORKERS):
            overrides['max_workers'] = _to_int(environ[ENV_MAX_WORKERS], 'max_workers')
        if environ.get(ENV_DISCARD_UNLABELED):
            overrides['discard_unlabeled_values'] = _to_bool(
                environ[ENV_DISCARD_UNLABELED], 'discard_unlabeled_values')

        if overrides:
            logger.debug(f"Applying environment overrides: {sorted(overrides)}")
            return replace(self, **overrides)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tolerance': str(self.tolerance),
            'max_workers': self.max_workers,
            'discard_unlabeled_values': self.discard_unlabeled_values,
            'presence_fallback_x': self.presence_fallback_x,
        }


def load_configuration(config_file: Optional[Union[str, Path]] = None,
                       environ: Optional[Mapping[str, str]] = None) -> PayrollConfiguration:
    """
    Resolve the effective configuration.

    Args:
        config_file: Optional JSON configuration file
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        PayrollConfiguration with file values and environment overrides applied
    """
    config = PayrollConfiguration.from_file(config_file) if config_file else PayrollConfiguration()
    return config.with_env_overrides(environ)


def _to_decimal(value: Any, key: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ConfigurationError(f"Invalid decimal for {key}: {value!r}", key=key) from e


def _to_int(value: Any, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid integer for {key}: {value!r}", key=key) from e


def _to_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {key}: {value!r}", key=key)
