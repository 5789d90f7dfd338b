"""Critical error escalation.

Counts critical errors for the whole process lifetime. Each one is
reported (when auto-reporting is on), and when the count reaches the
threshold the user is offered a restart. The count is a cumulative
fatigue signal and is only cleared by restarting.
"""

import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

from utils.string_utils import first_match

if TYPE_CHECKING:
    from host.shell import AppShell
    from host.surface import HostError
    from monitor.context import MonitorContext
    from monitor.reporter import IssueReporter

logger = logging.getLogger(__name__)

CRITICAL_ERROR_PATTERNS = [
    r'openSettings is not a function',
    r'closeSettings is not a function',
    r'Cannot read property.*settingsModal',
    r'settingsModal is null',
    r'critical.*missing',
]


class CriticalErrorEscalator:
    """Counts critical errors and offers a restart past the threshold."""

    def __init__(
        self,
        context: 'MonitorContext',
        reporter: 'IssueReporter',
        shell: 'AppShell',
    ):
        self.context = context
        self.reporter = reporter
        self.shell = shell

    def handle_critical_error(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Record a critical error, report it and maybe offer a restart.

        Args:
            message: Description of the error; also the issue title.
            details: Extra context for the issue report.
        """
        self.context.critical_error_count += 1
        count = self.context.critical_error_count
        logger.error(f"CRITICAL ERROR #{count}: {message}")

        if self.context.config.enable_auto_reporting:
            self.reporter.report_issue(message, details or {})

        threshold = self.context.config.critical_error_threshold
        if count >= threshold and not self.context.restart_prompted:
            logger.error("Critical error threshold reached - recommending restart")
            self.context.restart_prompted = True
            self._offer_restart(count)

    def handle_error(self, error: 'HostError') -> None:
        """Handle an uncaught host error.

        Errors whose message matches a critical pattern are escalated.
        With telemetry enabled every error is also sent to the shell.
        """
        logger.error(f"Error caught: {error.message} at {error.source}:{error.line}")

        if is_critical_error(error.message):
            self.handle_critical_error(error.message, error.to_dict())

        if self.context.config.enable_telemetry:
            try:
                self.shell.report_error(error)
            except Exception as e:
                logger.warning(f"Failed to send error telemetry: {e}")

    def _offer_restart(self, count: int) -> None:
        message = (
            f"The app has encountered {count} critical errors.\n\n"
            "Would you like to restart the app to recover?"
        )
        if self.context.config.enable_auto_reporting:
            message += "\n\n(A bug report has been automatically created)"

        try:
            should_restart = self.shell.confirm(message)
        except Exception as e:
            logger.error(f"Restart prompt failed: {e}")
            return

        if should_restart:
            logger.warning("User accepted restart")
            self.shell.restart()
        else:
            logger.info("User declined restart")


def is_critical_error(message: str) -> bool:
    """Check whether an error message matches a critical pattern."""
    return first_match(message or '', CRITICAL_ERROR_PATTERNS) is not None
