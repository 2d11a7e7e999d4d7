"""
Tests for provider settings resolution.

Precedence: overrides > YAML file > environment.
"""

from __future__ import annotations

import pytest

from pmprovider.core.config import DEFAULT_PARALLEL, load_settings
from pmprovider.core.errors import ConfigurationError

ENV = {
    "PM_API_URL": "https://env.example.com:8006/api2/json",
    "PM_USER": "env@pam",
    "PM_PASS": "env-pass",
}


def _write(tmp_path, text):
    path = tmp_path / "provider.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_environment_only():
    settings = load_settings(env=ENV)
    assert settings.api_url == ENV["PM_API_URL"]
    assert settings.user == "env@pam"
    assert settings.password == "env-pass"
    assert settings.parallel == DEFAULT_PARALLEL == 4
    assert settings.tls_insecure is False


def test_file_beats_environment(tmp_path):
    path = _write(tmp_path, "pm_user: file@pve\npm_parallel: 2\npm_tls_insecure: true\n")
    settings = load_settings(path, env=ENV)
    assert settings.user == "file@pve"
    assert settings.password == "env-pass"
    assert settings.parallel == 2
    assert settings.tls_insecure is True


def test_overrides_beat_file(tmp_path):
    path = _write(tmp_path, "pm_parallel: 2\n")
    settings = load_settings(
        path, overrides={"pm_parallel": 8, "pm_tls_insecure": None}, env=ENV
    )
    assert settings.parallel == 8
    assert settings.tls_insecure is False


def test_config_path_from_environment(tmp_path):
    path = _write(tmp_path, "pm_parallel: 6\n")
    settings = load_settings(env={**ENV, "PM_CONFIG": path})
    assert settings.parallel == 6


def test_missing_required_values():
    with pytest.raises(ConfigurationError, match="pm_password .env PM_PASS."):
        load_settings(env={"PM_API_URL": ENV["PM_API_URL"], "PM_USER": "u"})


@pytest.mark.parametrize("value", [0, -1, "many", True, 2.7])
def test_bad_parallel(value):
    with pytest.raises(ConfigurationError, match="pm_parallel"):
        load_settings(overrides={"pm_parallel": value}, env=ENV)


def test_string_flags_from_yaml(tmp_path):
    path = _write(tmp_path, "pm_parallel: '3'\npm_tls_insecure: 'yes'\n")
    settings = load_settings(path, env=ENV)
    assert settings.parallel == 3
    assert settings.tls_insecure is True


def test_bad_tls_flag():
    with pytest.raises(ConfigurationError, match="pm_tls_insecure"):
        load_settings(overrides={"pm_tls_insecure": "maybe"}, env=ENV)


def test_unknown_key_rejected(tmp_path):
    path = _write(tmp_path, "pm_paralel: 3\n")
    with pytest.raises(ConfigurationError, match="pm_paralel"):
        load_settings(path, env=ENV)


def test_missing_file():
    with pytest.raises(ConfigurationError, match="not found"):
        load_settings("/nonexistent/provider.yaml", env=ENV)


def test_password_hidden_from_repr():
    settings = load_settings(env=ENV)
    assert "env-pass" not in repr(settings)


def test_whole_float_parallel_accepted(tmp_path):
    path = _write(tmp_path, "pm_parallel: 3.0\n")
    assert load_settings(path, env=ENV).parallel == 3


def test_fractional_parallel_from_yaml(tmp_path):
    path = _write(tmp_path, "pm_parallel: 2.7\n")
    with pytest.raises(ConfigurationError, match="pm_parallel"):
        load_settings(path, env=ENV)


def test_malformed_yaml(tmp_path):
    path = _write(tmp_path, "pm_user: [unclosed\n")
    with pytest.raises(ConfigurationError, match="Cannot read config file"):
        load_settings(path, env=ENV)


def test_unreadable_path(tmp_path):
    with pytest.raises(ConfigurationError, match="Cannot read config file"):
        load_settings(str(tmp_path), env=ENV)
