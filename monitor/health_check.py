"""Periodic UI health checks.

On a fixed interval the checker walks a checklist: critical elements are
present, the settings and chat buttons still have their click handlers,
and the core settings functions are defined. Repairable issues go to the remediation
engine; a missing core function can't be repaired and is always
escalated as a critical error.
"""

import logging
import re
from typing import Dict, List, Optional, TYPE_CHECKING

from utils.string_utils import first_match

if TYPE_CHECKING:
    from host.surface import HostSurface
    from host.timers import TimerHandle
    from monitor.context import MonitorContext
    from monitor.escalation import CriticalErrorEscalator
    from monitor.remediation import RemediationEngine

logger = logging.getLogger(__name__)

# Trigger element id -> name used in the no-handler issue
HANDLER_CHECKS: Dict[str, str] = {
    'settingsFab': 'Settings button',
    'chatFab': 'Chat button',
}
NO_HANDLER_ISSUE = 'Settings button has no click handler'
CHAT_NO_HANDLER_ISSUE = 'Chat button has no click handler'

# Issue text pattern -> remediation target
ISSUE_TARGETS: Dict[str, str] = {
    r'Settings button': 'settingsButton',
    r'Chat button': 'chatButton',
}

_MISSING_CAPABILITY = re.compile(r'^(\w+) function is not defined$')


class HealthChecker:
    """Runs the health checklist once or on a repeating timer."""

    def __init__(
        self,
        context: 'MonitorContext',
        surface: 'HostSurface',
        remediation: 'RemediationEngine',
        escalator: 'CriticalErrorEscalator',
    ):
        self.context = context
        self.surface = surface
        self.remediation = remediation
        self.escalator = escalator
        self._timer: Optional['TimerHandle'] = None

    def start(self) -> None:
        """Start periodic checks. Does nothing if already started."""
        if self._timer is not None:
            logger.warning("Health checks already running")
            return

        interval = self.context.config.health_check_interval
        self._timer = self.context.scheduler.call_every(
            interval, self.perform_health_check, name="health-check"
        )
        logger.info(f"Periodic health checks enabled (every {interval:g}s)")

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.info("Periodic health checks stopped")

    def is_running(self) -> bool:
        return self._timer is not None

    def collect_issues(self) -> List[str]:
        """Run the checklist without acting on the results.

        Returns:
            Issue descriptions, in checklist order.
        """
        issues = []

        for element_id in self.context.config.critical_elements:
            if not self.surface.exists(element_id):
                issues.append(f"Missing element: {element_id}")

        # Handler presence is a flag set on attach; it can't be introspected
        for element_id, name in HANDLER_CHECKS.items():
            descriptor = self.surface.describe(element_id)
            if descriptor is not None and not descriptor.has_listener:
                issues.append(f"{name} has no click handler")

        for name in self.context.config.required_capabilities:
            if not self.surface.has_capability(name):
                issues.append(f"{name} function is not defined")

        return issues

    def perform_health_check(self) -> List[str]:
        """Run the checklist and act on what it finds.

        Returns:
            The full issue list.
        """
        issues = self.collect_issues()

        if not issues:
            logger.debug("Health check passed - all systems operational")
            return issues

        for issue in issues:
            logger.error(f"Health check failed: {issue}")
        logger.warning(f"Health check found {len(issues)} issues")

        self._handle_issues(issues)
        return issues

    def verify_critical_elements(self) -> bool:
        """Startup check that every critical element is present.

        Returns:
            True if all are present. Otherwise a critical error has been
            raised.
        """
        all_present = True

        for element_id, name in self.context.config.critical_elements.items():
            if self.surface.exists(element_id):
                logger.info(f"Critical element found: {name}")
            else:
                logger.error(f"Critical element missing: {name} ({element_id})")
                all_present = False

        if not all_present:
            self.escalator.handle_critical_error('Some critical UI elements are missing on page load')

        return all_present

    def _handle_issues(self, issues: List[str]) -> None:
        auto_fix = self.context.config.enable_auto_fix
        if auto_fix:
            logger.info(f"Attempting auto-fix for {len(issues)} issues")

        for issue in issues:
            match = _MISSING_CAPABILITY.match(issue)
            if match:
                self.escalator.handle_critical_error(f"Core function missing: {match.group(1)}")
                continue

            if not auto_fix:
                continue

            pattern = first_match(issue, ISSUE_TARGETS)
            if pattern is not None:
                self.remediation.attempt_fix(ISSUE_TARGETS[pattern])
