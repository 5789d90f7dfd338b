from __future__ import annotations

import json
import logging

import pytest

from monitor.cli import main


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch):
    monkeypatch.delenv('UIHEALTH_CONFIG', raising=False)
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


def read_stats(output: str) -> dict:
    lines = output.splitlines()
    start = len(lines) - 1 - lines[::-1].index('{')
    return json.loads("\n".join(lines[start:]))


def test_healthy_simulation(capsys) -> None:
    assert main(['simulate', '--clicks', '2']) == 0

    stats = read_stats(capsys.readouterr().out)
    assert stats['total_interactions'] == 8
    assert stats['verified_interactions'] == 8
    assert stats['auto_fix_attempts'] == {}
    assert stats['issues_created'] == []
    assert stats['restart_requested'] is False


def test_broken_settings_gives_up_after_three_attempts(capsys) -> None:
    assert main(['simulate', '--break', 'settings']) == 0

    stats = read_stats(capsys.readouterr().out)
    assert stats['auto_fix_attempts'] == {'settingsButton': 3}
    assert stats['issues_created'] == [
        '[Auto-Detected] Settings button not working after auto-fix attempts',
    ]


def test_fixable_handler_loss_is_repaired(capsys) -> None:
    assert main(['simulate', '--break', 'settings-handler', '--clicks', '2']) == 0

    stats = read_stats(capsys.readouterr().out)
    assert stats['auto_fix_attempts'] == {'settingsButton': 0}
    assert stats['issues_created'] == []


def test_missing_capability_prompts_restart(capsys) -> None:
    assert main(['simulate', '--break', 'capability', '--restart']) == 0

    out = capsys.readouterr().out
    stats = read_stats(out)
    assert stats['critical_error_count'] >= 3
    assert stats['restart_prompted'] is True
    assert stats['restart_requested'] is True
    assert '[prompt] answer: yes' in out
    assert '[Auto-Detected] Core function missing: closeSettings' in stats['issues_created']


def test_check_reports_issues(capsys) -> None:
    assert main(['check', '--break', 'capability']) == 1
    assert '  - closeSettings function is not defined' in capsys.readouterr().out

    assert main(['check']) == 0
    assert 'all systems operational' in capsys.readouterr().out


def test_check_sees_delayed_removal(capsys) -> None:
    assert main(['check', '--break', 'remove-modal']) == 1
    assert 'Missing element: settingsModal' in capsys.readouterr().out


def test_log_file_and_missing_config(tmp_path, capsys) -> None:
    log_file = tmp_path / 'uihealth.log'
    assert main(['--log-file', str(log_file), 'check']) == 0
    assert log_file.exists()

    assert main(['--config', str(tmp_path / 'missing.yaml'), 'check']) == 2
    assert 'Configuration file not found' in capsys.readouterr().err
