from __future__ import annotations

import pytest

from monitor.context import MonitorConfig
from tests.conftest import break_settings, strip_handlers


def test_successful_click_is_verified_without_remediation(monitor, surface, scheduler) -> None:
    surface.click('settingsFab')
    scheduler.advance(0.5)

    stats = monitor.get_statistics()
    assert stats['total_interactions'] == 1
    assert stats['verified_interactions'] == 1
    assert stats['auto_fix_attempts'] == {}
    assert stats['remediation_history'] == []


def test_check_waits_for_verification_delay(monitor, surface, scheduler) -> None:
    surface.click('chatFab')
    surface.set_active('chatPanel', False)
    scheduler.advance(0.4)
    # Panel opens late but still within the delay
    surface.set_active('chatPanel', True)
    scheduler.advance(0.1)

    assert monitor.get_statistics()['verified_interactions'] == 1
    assert monitor.context.fix_attempts == {}


def test_failed_chat_click_repairs_chat_button(monitor, surface, scheduler) -> None:
    strip_handlers(surface, 'chatFab')

    surface.click('chatFab')
    scheduler.advance(0.5)

    assert monitor.context.fix_attempts == {'chatButton': 1}
    assert monitor.get_statistics()['verified_interactions'] == 0

    # The rebuilt button works, and verifying it clears the counter
    surface.click('chatFab')
    scheduler.advance(0.5)
    assert surface.is_active('chatPanel')
    assert monitor.context.fix_attempts == {'chatButton': 0}
    assert monitor.get_statistics()['verified_interactions'] == 1


def test_connection_test_checked_after_longer_delay(monitor, surface, scheduler) -> None:
    surface.set_text('dbTestResult', '')
    surface.define_capability('dbTestConnection', lambda: None)

    surface.click('testConnectionBtn')
    scheduler.advance(0.5)
    assert monitor.context.fix_attempts == {}

    # Result arrives asynchronously before the 2s follow-up check
    surface.set_text('dbTestResult', 'Connection successful')
    scheduler.advance(2.0)

    assert monitor.get_statistics()['verified_interactions'] == 1
    assert monitor.context.fix_attempts == {}


def test_connection_test_without_result_is_remediated(monitor, surface, scheduler) -> None:
    surface.define_capability('dbTestConnection', lambda: None)

    surface.click('testConnectionBtn')
    scheduler.advance(2.5)

    assert monitor.context.fix_attempts == {'testConnection': 1}
    assert monitor.context.remediation_history[0].located is True


def test_settings_save_closes_modal(monitor, surface, scheduler) -> None:
    surface.click('settingsFab')
    scheduler.advance(0.5)
    surface.click('saveSettingsBtn')
    scheduler.advance(1.5)

    assert monitor.get_statistics()['verified_interactions'] == 2


def test_settings_save_with_modal_still_open_is_only_a_warning(monitor, surface, scheduler, tracker, caplog) -> None:
    surface.define_capability('closeSettings', lambda: None)
    surface.click('settingsFab')
    scheduler.advance(0.5)

    surface.click('saveSettingsBtn')
    scheduler.advance(1.5)

    stats = monitor.get_statistics()
    assert stats['verified_interactions'] == 1
    assert stats['auto_fix_attempts'] == {}
    assert stats['critical_error_count'] == 0
    assert tracker.created == []
    assert "modal still open" in caplog.text


def test_unrecognized_category_is_not_verified(monitor, surface, scheduler) -> None:
    pending_before = scheduler.pending()
    surface.click('app')

    assert scheduler.pending() == pending_before
    assert monitor.get_statistics()['total_interactions'] == 1


@pytest.mark.parametrize('config', [MonitorConfig(max_interactions=1)])
def test_evicted_interaction_is_not_checked(monitor, surface, scheduler) -> None:
    break_settings(surface)

    surface.click('settingsFab')
    surface.click('chatFab')
    scheduler.advance(0.5)

    assert 'settingsButton' not in monitor.context.fix_attempts
    assert monitor.get_statistics()['verified_interactions'] == 1
