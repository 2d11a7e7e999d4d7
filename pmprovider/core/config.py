"""
pmprovider Configuration Loader
===============================

Builds :class:`ProviderSettings` from explicit overrides, an optional YAML
file and the environment, in that order of precedence.

YAML keys mirror the provider arguments::

    pm_api_url: https://pve.example.com:8006/api2/json
    pm_user: terraform@pve
    pm_password: ...
    pm_parallel: 4
    pm_tls_insecure: false

Environment fallbacks: ``PM_API_URL``, ``PM_USER``, ``PM_PASS``.  The YAML
path itself may be given via ``PM_CONFIG``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError

DEFAULT_PARALLEL = 4

# setting key -> environment variable
ENV_DEFAULTS = {
    'pm_api_url': 'PM_API_URL',
    'pm_user': 'PM_USER',
    'pm_password': 'PM_PASS',
}

_KNOWN_KEYS = ('pm_api_url', 'pm_user', 'pm_password', 'pm_parallel', 'pm_tls_insecure')


@dataclass(frozen=True)
class ProviderSettings:
    """Connection parameters and concurrency ceiling for one provider process."""
    api_url: str
    user: str
    password: str = field(repr=False)
    parallel: int = DEFAULT_PARALLEL
    tls_insecure: bool = False


def load_yaml(path: str) -> Dict[str, Any]:
    """Load a YAML file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {path}")
    return data


def _coerce_parallel(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"pm_parallel must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ConfigurationError(f"pm_parallel must be an integer, got {value!r}")
    try:
        parallel = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"pm_parallel must be an integer, got {value!r}") from exc
    if parallel < 1:
        raise ConfigurationError(f"pm_parallel must be >= 1, got {parallel}")
    return parallel


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ('true', '1', 'yes'):
        return True
    if isinstance(value, str) and value.strip().lower() in ('false', '0', 'no', ''):
        return False
    raise ConfigurationError(f"pm_tls_insecure must be a boolean, got {value!r}")


def load_settings(
    path: Optional[str] = None,
    *,
    overrides: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ProviderSettings:
    """
    Resolve provider settings.

    Args:
        path: YAML file to read. Falls back to ``PM_CONFIG``; when neither is
            set no file is read.
        overrides: Explicit ``pm_*`` values, highest precedence. ``None``
            values are ignored.
        env: Environment mapping, defaults to ``os.environ``.

    Returns:
        Validated ProviderSettings

    Raises:
        ConfigurationError: on a missing file, unknown key, missing required
            value or a value of the wrong type.
    """
    env = os.environ if env is None else env
    path = path or env.get('PM_CONFIG')

    values: Dict[str, Any] = {}
    for key, var in ENV_DEFAULTS.items():
        if env.get(var):
            values[key] = env[var]

    if path:
        if not Path(path).exists():
            raise ConfigurationError(f"Config file not found: {path}")
        file_values = load_yaml(path)
        unknown = sorted(set(file_values) - set(_KNOWN_KEYS))
        if unknown:
            raise ConfigurationError(f"Unknown settings in {path}: {', '.join(unknown)}")
        values.update({k: v for k, v in file_values.items() if v is not None})

    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})

    missing = [k for k in ('pm_api_url', 'pm_user', 'pm_password') if not values.get(k)]
    if missing:
        hints = ', '.join(f"{k} (env {ENV_DEFAULTS[k]})" for k in missing)
        raise ConfigurationError(f"Missing required settings: {hints}")

    return ProviderSettings(
        api_url=str(values['pm_api_url']),
        user=str(values['pm_user']),
        password=str(values['pm_password']),
        parallel=_coerce_parallel(values.get('pm_parallel', DEFAULT_PARALLEL)),
        tls_insecure=_coerce_bool(values.get('pm_tls_insecure', False)),
    )
