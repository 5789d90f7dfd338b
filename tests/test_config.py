from __future__ import annotations

import pytest

from config import DEFAULT_CONFIG_PATH, get_config_value, load_config
from monitor.context import MonitorConfig


def test_default_config_matches_monitor_defaults(monkeypatch) -> None:
    monkeypatch.delenv('UIHEALTH_CONFIG', raising=False)
    config = load_config()

    assert MonitorConfig.from_dict(config['monitor']) == MonitorConfig()
    assert config['github']['repo'] == 'proteaNirav/multilingual-pa'


def test_explicit_path_and_environment(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / 'env.yaml'
    env_file.write_text("monitor:\n  max_auto_fix_attempts: 5\n")
    explicit = tmp_path / 'explicit.yaml'
    explicit.write_text("monitor:\n  health_check_interval: 1\n")
    monkeypatch.setenv('UIHEALTH_CONFIG', str(env_file))

    assert load_config()['monitor'] == {'max_auto_fix_attempts': 5}
    assert load_config(str(explicit))['monitor'] == {'health_check_interval': 1}


def test_missing_or_empty_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / 'nope.yaml'))

    empty = tmp_path / 'empty.yaml'
    empty.write_text("")
    assert load_config(str(empty)) == {}


def test_partial_monitor_section_keeps_defaults() -> None:
    config = MonitorConfig.from_dict({
        'enable_auto_fix': False,
        'watched_elements': ['chatFab'],
    })

    assert config.enable_auto_fix is False
    assert config.watched_elements == ('chatFab',)
    assert config.max_auto_fix_attempts == 3
    assert config.required_capabilities == ('openSettings', 'closeSettings')
    assert MonitorConfig.from_dict(None) == MonitorConfig()


def test_get_config_value() -> None:
    config = {'monitor': {'health_check_interval': 5.0}, 'github': None}

    assert get_config_value(config, 'monitor.health_check_interval') == 5.0
    assert get_config_value(config, 'monitor.missing', 'x') == 'x'
    assert get_config_value(config, 'github.token') is None
    assert DEFAULT_CONFIG_PATH.name == 'default.yaml'
