from __future__ import annotations

from host.surface import StructuralChange


def test_removing_watched_element_is_critical(monitor, surface, tracker) -> None:
    surface.remove_element('settingsModal')

    assert monitor.get_statistics()['critical_error_count'] == 1
    assert [i['title'] for i in tracker.created] == ['[Auto-Detected] Critical UI element removed: settingsModal']


def test_removing_ancestor_reports_each_watched_descendant(monitor, surface, tracker) -> None:
    surface.remove_element('app')

    assert monitor.get_statistics()['critical_error_count'] == 2
    titles = sorted(i['title'] for i in tracker.created)
    assert titles == [
        '[Auto-Detected] Critical UI element removed: settingsFab',
        '[Auto-Detected] Critical UI element removed: settingsModal',
    ]


def test_unwatched_removal_is_ignored(monitor, surface) -> None:
    surface.remove_element('chatPanel')
    surface.remove_element('dbTestResult')

    assert monitor.get_statistics()['critical_error_count'] == 0


def test_replacement_in_same_batch_is_not_a_removal(monitor) -> None:
    removed = monitor.watcher.on_structure_change(
        StructuralChange(added=['settingsFab'], removed=['settingsFab', 'settingsModal'])
    )

    assert removed == ['settingsModal']
    assert monitor.get_statistics()['critical_error_count'] == 1
