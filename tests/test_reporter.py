from __future__ import annotations

import asyncio
import time

import httpx
import pytest

from host.memory import build_demo_surface
from host.timers import AsyncioScheduler, ManualScheduler
from issues.github import GitHubIssueTracker
from issues.tracker import DryRunIssueTracker
from monitor.context import MonitorConfig, MonitorContext
from monitor.monitor import UIHealthMonitor
from monitor.reporter import ISSUE_LABELS, IssueReporter
from tests.conftest import FailingTracker, FakeShell


def make_reporter(tracker=None, **config) -> IssueReporter:
    context = MonitorContext(config=MonitorConfig(**config), scheduler=ManualScheduler())
    return IssueReporter(context, tracker or DryRunIssueTracker(), FakeShell())


def test_titles_sharing_first_50_characters_are_one_issue() -> None:
    reporter = make_reporter()
    prefix = 'A' * 50

    assert reporter.report_issue(prefix + ' first variant') is True
    assert reporter.report_issue(prefix + ' second variant') is False
    assert reporter.report_issue('B' * 50) is True

    assert len(reporter.tracker.created) == 2
    assert list(reporter.context.reported_issues) == [prefix, 'B' * 50]


def test_issue_is_prefixed_labelled_and_carries_state() -> None:
    reporter = make_reporter()
    reporter.context.fix_attempts['settingsButton'] = 2
    reporter.health_snapshot = lambda: ['Settings button has no click handler']

    reporter.report_issue('Settings button not working', {'attempts': 2})

    issue = reporter.tracker.created[0]
    assert issue['title'] == '[Auto-Detected] Settings button not working'
    assert issue['labels'] == ISSUE_LABELS
    body = issue['body']
    assert '**Title:** Settings button not working' in body
    assert '"attempts": 2' in body
    assert '"Settings button has no click handler"' in body
    assert '**Host:** test-app/2.3.4 (linux; Python 3.12.0)' in body
    assert '**App Version:** 2.3.4' in body
    assert '**Auto-Fix Attempts:** settingsButton: 2' in body


def test_empty_state_renders_none() -> None:
    reporter = make_reporter()

    reporter.report_issue('Something broke')

    body = reporter.tracker.created[0]['body']
    assert '**Auto-Fix Attempts:** None' in body
    assert '```json\n{}\n```' in body
    assert '```json\n[]\n```' in body


def test_failed_forward_is_not_retried(caplog) -> None:
    tracker = FailingTracker()
    reporter = make_reporter(tracker=tracker)

    assert reporter.report_issue('Chat button not working') is True
    assert reporter.report_issue('Chat button not working') is False

    assert tracker.calls == 1
    assert 'Chat button not working' in reporter.context.reported_issues
    assert "Failed to auto-report issue 'Chat button not working': GitHub token not configured" in caplog.text


def test_reporting_disabled_records_nothing() -> None:
    reporter = make_reporter(enable_auto_reporting=False)

    assert reporter.report_issue('Anything') is False

    assert reporter.tracker.created == []
    assert reporter.context.reported_issues == {}


@pytest.mark.parametrize('title', ['', 'x'])
def test_short_titles_are_their_own_key(title) -> None:
    reporter = make_reporter()

    assert reporter.report_issue(title) is True
    assert title in reporter.context.reported_issues


def test_slow_tracker_does_not_stall_event_loop() -> None:
    requests = []

    def slow_github(request: httpx.Request) -> httpx.Response:
        time.sleep(0.6)
        requests.append(request)
        return httpx.Response(201, json={'number': 7, 'html_url': 'https://github.com/o/r/issues/7'})

    async def run() -> list:
        scheduler = AsyncioScheduler()
        tracker = GitHubIssueTracker(
            repo='o/r',
            token='secret',
            client=httpx.Client(transport=httpx.MockTransport(slow_github)),
        )
        monitor = UIHealthMonitor(
            surface=build_demo_surface(),
            shell=FakeShell(),
            tracker=tracker,
            scheduler=scheduler,
        )
        monitor.initialize()

        ticks = []
        handle = scheduler.call_every(0.05, lambda: ticks.append(time.monotonic()))
        monitor.escalator.handle_critical_error("Core function missing: closeSettings")
        await asyncio.sleep(0.9)
        handle.cancel()
        monitor.stop()
        return ticks

    ticks = asyncio.run(run())

    gaps = [later - earlier for earlier, later in zip(ticks, ticks[1:])]
    assert len(ticks) >= 8
    assert max(gaps) < 0.3
    assert len(requests) == 1
