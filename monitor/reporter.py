"""Deduplicated issue reporting.

Failures that cannot be handled locally end up here. Each distinct issue
(by the first 50 characters of its title) is forwarded to the issue
tracker at most once per process, with a snapshot of the monitor's state
attached. Forwarding is a single best-effort attempt.
"""

from dataclasses import dataclass, field
from datetime import datetime
import json
import logging
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from host.shell import host_identification
from utils.string_utils import dedup_key

if TYPE_CHECKING:
    from host.shell import AppShell
    from issues.tracker import IssueTracker
    from monitor.context import MonitorContext

logger = logging.getLogger(__name__)

ISSUE_TITLE_PREFIX = "[Auto-Detected] "
ISSUE_LABELS = ['auto-detected', 'ui-health-monitor', 'bug']


@dataclass
class IssueReport:
    """Everything sent to the tracker for one issue.

    Attributes:
        title: Issue title, without the auto-detected prefix.
        details: Free-form details supplied by the caller.
        health_issues: Fresh health-check results.
        host: Host identification string.
        app_version: Application version.
        fix_attempts: Remediation counters at report time.
        timestamp: When the report was built.
    """
    title: str
    details: Dict[str, Any]
    health_issues: List[str]
    host: str
    app_version: str
    fix_attempts: Dict[str, int]
    timestamp: datetime = field(default_factory=datetime.now)

    def to_markdown(self) -> str:
        if self.fix_attempts:
            attempts = ", ".join(f"{k}: {v}" for k, v in self.fix_attempts.items())
        else:
            attempts = "None"

        lines = [
            "## Auto-Detected Issue",
            "",
            f"**Title:** {self.title}",
            "",
            "**Details:**",
            "```json",
            json.dumps(self.details, indent=2, default=str),
            "```",
            "",
            "**Health Check Results:**",
            "```json",
            json.dumps(self.health_issues, indent=2),
            "```",
            "",
            f"**Host:** {self.host}",
            "",
            f"**App Version:** {self.app_version}",
            "",
            f"**Timestamp:** {self.timestamp.isoformat()}",
            "",
            f"**Auto-Fix Attempts:** {attempts}",
            "",
            "---",
            "",
            "*This issue was automatically detected and reported by the UI Health Monitor*",
        ]
        return "\n".join(lines)


class IssueReporter:
    """Forwards deduplicated issues to an issue tracker.

    The dedup key is recorded before the tracker is called and is never
    removed, so a failed forward is not retried for the same key.
    """

    def __init__(
        self,
        context: 'MonitorContext',
        tracker: 'IssueTracker',
        shell: 'AppShell',
        health_snapshot: Optional[Callable[[], List[str]]] = None,
    ):
        """Initialize the reporter.

        Args:
            context: Shared monitor state.
            tracker: Where issues are sent.
            shell: Source of app info for the report.
            health_snapshot: Returns current health-check issues without
                side effects. Wired by the composition root.
        """
        self.context = context
        self.tracker = tracker
        self.shell = shell
        self.health_snapshot = health_snapshot

    def report_issue(self, title: str, details: Optional[Dict[str, Any]] = None) -> bool:
        """Report an issue unless an issue with the same key was reported.

        The report is built on the calling thread; the tracker call runs
        through the scheduler's background runner so a slow tracker never
        stalls the event loop.

        Args:
            title: Issue title.
            details: Extra context included in the report.

        Returns:
            True if the issue was handed to the tracker. Tracker failures
            are logged by the forwarding job and not retried.
        """
        key = dedup_key(title)
        if key in self.context.reported_issues:
            logger.info(f"Issue already reported, skipping duplicate: {key}")
            return False

        if not self.context.config.enable_auto_reporting:
            logger.info(f"Auto-reporting disabled, not reporting: {title}")
            return False

        self.context.reported_issues[key] = self.context.scheduler.now()

        try:
            body = self.build_report(title, details or {}).to_markdown()
        except Exception as e:
            logger.error(f"Failed to build report for '{title}': {e}", exc_info=True)
            return False

        self.context.scheduler.run_in_background(
            lambda: self._forward(title, body),
            name=f"report:{key}",
        )
        return True

    def _forward(self, title: str, body: str) -> None:
        """Send one report to the tracker. Runs off the event loop."""
        try:
            receipt = self.tracker.create_issue(
                ISSUE_TITLE_PREFIX + title,
                body,
                list(ISSUE_LABELS),
            )
        except Exception as e:
            logger.error(f"Failed to auto-report issue '{title}': {e}")
            return

        logger.info(f"Issue reported as #{receipt.issue_number}: {receipt.issue_url}")

    def build_report(self, title: str, details: Dict[str, Any]) -> IssueReport:
        info = self.shell.app_info()
        health_issues = self.health_snapshot() if self.health_snapshot else []

        return IssueReport(
            title=title,
            details=details,
            health_issues=health_issues,
            host=host_identification(info),
            app_version=str(info.get('version', 'unknown')),
            fix_attempts=dict(self.context.fix_attempts),
        )
