"""UI health monitor composition root.

Builds the shared context and every component, wires them to the host
feeds, and exposes start/stop and statistics. One monitor per host
surface; nothing here is global.
"""

import logging
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from monitor.context import MonitorConfig, MonitorContext
from monitor.escalation import CriticalErrorEscalator
from monitor.health_check import HealthChecker
from monitor.recorder import InteractionRecorder, classify
from monitor.remediation import RemediationEngine
from monitor.reporter import IssueReporter
from monitor.verifier import VerificationEngine
from monitor.watcher import StructuralWatcher

if TYPE_CHECKING:
    from host.shell import AppShell
    from host.surface import HostSurface, InteractionEvent
    from host.timers import Scheduler
    from issues.tracker import IssueTracker

logger = logging.getLogger(__name__)


class UIHealthMonitor:
    """Watches a host surface, verifies interactions and repairs the UI.

    Example:
        async def run_ui(surface, config):
            monitor = UIHealthMonitor(
                surface=surface,
                shell=ConsoleShell(),
                tracker=create_github_tracker(config),
                scheduler=AsyncioScheduler(),  # needs the running loop
                config=MonitorConfig.from_dict(config.get('monitor')),
            )
            monitor.initialize()
            ...
            print(monitor.get_statistics())
    """

    def __init__(
        self,
        surface: 'HostSurface',
        shell: 'AppShell',
        tracker: 'IssueTracker',
        scheduler: 'Scheduler',
        config: Optional[MonitorConfig] = None,
    ):
        """Initialize the monitor and its components.

        Args:
            surface: Host UI surface to watch.
            shell: Application shell (app info, prompts, restart).
            tracker: Issue tracker for reports.
            scheduler: Timer facility on the host's event loop.
            config: Monitor configuration. Defaults apply when omitted.
        """
        self.surface = surface
        self.shell = shell
        self.context = MonitorContext(config=config or MonitorConfig(), scheduler=scheduler)

        self.recorder = InteractionRecorder(self.context)
        self.reporter = IssueReporter(self.context, tracker, shell)
        self.escalator = CriticalErrorEscalator(self.context, self.reporter, shell)
        self.remediation = RemediationEngine(self.context, surface, self.reporter)
        self.verifier = VerificationEngine(self.context, surface, self.recorder, self.remediation)
        self.watcher = StructuralWatcher(self.context, self.escalator)
        self.health_checker = HealthChecker(self.context, surface, self.remediation, self.escalator)

        self.reporter.health_snapshot = self.health_checker.collect_issues

        self._initialized = False
        logger.info("UI Health Monitor created")

    @property
    def config(self) -> MonitorConfig:
        return self.context.config

    def initialize(self) -> None:
        """Subscribe to host feeds, start health checks and verify the UI.

        Calling it again is a no-op.
        """
        if self._initialized:
            logger.info("UI Health Monitor already initialized")
            return

        logger.info("Initializing UI Health Monitor...")

        self.surface.subscribe_interactions(self.on_interaction)
        logger.info("Click monitoring enabled")

        self.surface.subscribe_structure(self.watcher.on_structure_change)
        logger.info("Structural change monitoring enabled")

        self.surface.subscribe_errors(self.escalator.handle_error)
        logger.info("Error monitoring enabled")

        self.health_checker.start()
        self.health_checker.verify_critical_elements()

        self._initialized = True
        logger.info("UI Health Monitor initialized successfully")

    def stop(self) -> None:
        """Stop periodic health checks. Pending verifications still run."""
        self.health_checker.stop()

    def on_interaction(self, event: 'InteractionEvent') -> str:
        """Record an interaction and schedule its verification.

        Returns:
            The interaction id.
        """
        target = event.target
        logger.debug(f"{event.kind.capitalize()} detected on {target.description}")

        category = classify(target)
        interaction_id = self.recorder.record_interaction(category, target)
        self.verifier.schedule_verification(interaction_id, category, target)
        return interaction_id

    def perform_health_check(self) -> List[str]:
        return self.health_checker.perform_health_check()

    def get_statistics(self) -> Dict[str, Any]:
        """Get monitoring statistics.

        Returns:
            Dictionary with interaction counts, remediation counters and
            history, critical error count and reported issue keys.
        """
        return self.context.snapshot()


def create_monitor(
    config: Dict[str, Any],
    surface: 'HostSurface',
    scheduler: 'Scheduler',
    shell: Optional['AppShell'] = None,
    tracker: Optional['IssueTracker'] = None,
) -> UIHealthMonitor:
    """Factory function to create a UIHealthMonitor from configuration.

    Args:
        config: Full configuration dictionary.
        surface: Host UI surface to watch.
        scheduler: Timer facility.
        shell: Application shell. Defaults to a ConsoleShell.
        tracker: Issue tracker. Defaults to a GitHub tracker built from
            the 'github' section.

    Returns:
        An uninitialized UIHealthMonitor.
    """
    from host.shell import ConsoleShell
    from issues.github import create_github_tracker

    monitor_config = MonitorConfig.from_dict(config.get('monitor'))

    if shell is None:
        shell = ConsoleShell()
    if tracker is None:
        tracker = create_github_tracker(config)
        if not tracker.token:
            logger.warning("GitHub token not set - issue reports will fail and be logged")

    return UIHealthMonitor(
        surface=surface,
        shell=shell,
        tracker=tracker,
        scheduler=scheduler,
        config=monitor_config,
    )
