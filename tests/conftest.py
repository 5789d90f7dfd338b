from __future__ import annotations

from typing import Any, Dict, List

import pytest

from host.memory import MemorySurface, build_demo_surface
from host.shell import AppShell
from host.surface import HostError
from host.timers import ManualScheduler
from issues.tracker import DryRunIssueTracker, IssueReceipt, IssueTracker, IssueTrackerError
from monitor.context import MonitorConfig
from monitor.monitor import UIHealthMonitor


class FakeShell(AppShell):
    def __init__(self, answer: bool = False) -> None:
        self.answer = answer
        self.prompts: List[str] = []
        self.restarts = 0
        self.errors: List[HostError] = []

    def app_info(self) -> Dict[str, Any]:
        return {'name': 'test-app', 'version': '2.3.4', 'platform': 'linux', 'python_version': '3.12.0'}

    def confirm(self, message: str) -> bool:
        self.prompts.append(message)
        return self.answer

    def restart(self) -> None:
        self.restarts += 1

    def report_error(self, error: HostError) -> None:
        self.errors.append(error)


class FailingTracker(IssueTracker):
    def __init__(self) -> None:
        self.calls = 0

    def create_issue(self, title: str, body: str, labels: List[str]) -> IssueReceipt:
        self.calls += 1
        raise IssueTrackerError("GitHub token not configured")


def break_settings(surface: MemorySurface) -> None:
    """openSettings exists but never opens the modal."""
    surface.define_capability('openSettings', lambda: None)


def strip_handlers(surface: MemorySurface, element_id: str) -> None:
    element = surface.get(element_id)
    element.handlers.clear()
    element.has_click_listener = False


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def surface() -> MemorySurface:
    return build_demo_surface()


@pytest.fixture
def shell() -> FakeShell:
    return FakeShell()


@pytest.fixture
def tracker() -> DryRunIssueTracker:
    return DryRunIssueTracker()


@pytest.fixture
def config() -> MonitorConfig:
    return MonitorConfig()


@pytest.fixture
def monitor(surface, shell, tracker, scheduler, config) -> UIHealthMonitor:
    monitor = UIHealthMonitor(
        surface=surface,
        shell=shell,
        tracker=tracker,
        scheduler=scheduler,
        config=config,
    )
    monitor.initialize()
    return monitor
