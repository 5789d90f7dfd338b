"""Bounded automatic repair of broken UI controls.

Each remediation target has its own named repair procedure and its own
attempt counter. The counter goes up before every attempt and back to
zero only when a later verification shows the control working again.
Once a target has used up its attempts it is reported and left alone.
"""

from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Dict, TYPE_CHECKING

if TYPE_CHECKING:
    from host.surface import HostSurface
    from monitor.context import MonitorContext
    from monitor.reporter import IssueReporter

logger = logging.getLogger(__name__)


@dataclass
class RemediationAttempt:
    """Record of one repair attempt.

    Attributes:
        target: Remediation target name.
        attempt: Counter value after the increment (1-based).
        located: Whether the procedure found its element.
        timestamp: When the attempt was made.
    """
    target: str
    attempt: int
    located: bool
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            'target': self.target,
            'attempt': self.attempt,
            'located': self.located,
            'timestamp': self.timestamp.isoformat(),
        }


class RemediationEngine:
    """Applies per-target repair procedures with a bounded retry budget.

    Adding a monitored control means adding an entry to PROCEDURES (and
    its element and gave-up title), never editing existing procedures.

    Example:
        engine = RemediationEngine(context, surface, reporter)
        if not engine.attempt_fix('settingsButton'):
            ...  # element missing, or attempts exhausted and reported
    """

    # Mapping of remediation targets to handler methods
    PROCEDURES: Dict[str, str] = {
        'settingsButton': '_fix_settings_button',
        'chatButton': '_fix_chat_button',
        'testConnection': '_fix_test_connection',
    }

    TARGET_ELEMENTS: Dict[str, str] = {
        'settingsButton': 'settingsFab',
        'chatButton': 'chatFab',
        'testConnection': 'testConnectionBtn',
    }

    GAVE_UP_TITLES: Dict[str, str] = {
        'settingsButton': 'Settings button not working after auto-fix attempts',
        'chatButton': 'Chat button not working after auto-fix attempts',
        'testConnection': 'Test connection not producing results after auto-fix attempts',
    }

    def __init__(
        self,
        context: 'MonitorContext',
        surface: 'HostSurface',
        reporter: 'IssueReporter',
    ):
        self.context = context
        self.surface = surface
        self.reporter = reporter

    @property
    def max_attempts(self) -> int:
        return self.context.config.max_auto_fix_attempts

    def attempts(self, target: str) -> int:
        return self.context.fix_attempts.get(target, 0)

    def attempt_fix(self, target: str) -> bool:
        """Try to repair a target.

        Args:
            target: Remediation target name (e.g. 'settingsButton').

        Returns:
            True if the repair procedure located and rebuilt its element.
            False if the element was missing, the procedure failed, the
            target is unknown, or its attempts are exhausted.
        """
        handler_name = self.PROCEDURES.get(target)
        if handler_name is None:
            logger.warning(f"No remediation procedure for target '{target}'")
            return False

        attempts = self.attempts(target)
        if attempts >= self.max_attempts:
            logger.error(f"Auto-fix for {target} failed after {attempts} attempts - giving up")
            self._report_gave_up(target, attempts)
            return False

        attempts += 1
        self.context.fix_attempts[target] = attempts
        logger.info(f"Attempting auto-fix for {target} (attempt {attempts}/{self.max_attempts})")

        try:
            located = bool(getattr(self, handler_name)())
        except Exception as e:
            logger.error(f"Auto-fix for {target} raised: {e}", exc_info=True)
            located = False

        self.context.remediation_history.append(
            RemediationAttempt(target=target, attempt=attempts, located=located)
        )

        if attempts >= self.max_attempts:
            logger.error(f"Auto-fix budget for {target} exhausted ({attempts} attempts)")
            self._report_gave_up(target, attempts)

        return located

    def record_success(self, target: str) -> None:
        """Reset a target's counter after its control was verified working."""
        if self.context.fix_attempts.get(target):
            logger.info(f"{target} verified working, resetting auto-fix counter")
            self.context.fix_attempts[target] = 0

    def _report_gave_up(self, target: str, attempts: int) -> None:
        self.reporter.report_issue(
            self.GAVE_UP_TITLES[target],
            {'attempts': attempts, 'element': self.TARGET_ELEMENTS[target]},
        )

    def _fix_settings_button(self) -> bool:
        """Rebind the settings button to the openSettings capability."""

        def open_settings() -> None:
            logger.info("Settings button clicked via auto-fixed handler")
            if self.surface.has_capability('openSettings'):
                self.surface.invoke_capability('openSettings')
            else:
                logger.error("openSettings function not found")

        if not self.surface.replace_element('settingsFab', open_settings):
            logger.error("Settings button element not found - cannot fix")
            return False

        logger.info("Settings button rebuilt with a fresh click handler")
        return True

    def _fix_chat_button(self) -> bool:
        """Rebind the chat button to open the chat panel directly."""

        def open_chat() -> None:
            logger.info("Chat button clicked via auto-fixed handler")
            if not self.surface.set_active('chatPanel', True):
                logger.error("chatPanel not found")

        if not self.surface.replace_element('chatFab', open_chat):
            logger.error("Chat button element not found - cannot fix")
            return False

        logger.info("Chat button rebuilt with a fresh click handler")
        return True

    def _fix_test_connection(self) -> bool:
        """Connection tests may just be slow; record only."""
        logger.warning("Test connection appears broken - logging for investigation")
        if not self.surface.has_capability('dbTestConnection'):
            logger.warning("dbTestConnection function is not defined")
        return self.surface.exists('testConnectionBtn')
