"""UI Health Monitor.

Observes user interactions with a rendered interface, verifies that each
one had its expected effect, repairs broken controls a bounded number of
times, reports what it cannot fix to an issue tracker, and offers a
restart when critical errors pile up.

Components:
    - InteractionRecorder: Records every observed interaction
    - VerificationEngine: Delayed per-category checks of interaction effects
    - StructuralWatcher: Escalates removal of critical elements
    - HealthChecker: Periodic checklist of elements and capabilities
    - RemediationEngine: Bounded per-target repair procedures
    - CriticalErrorEscalator: Cumulative critical error count and restart prompt
    - IssueReporter: Deduplicated reports to the issue tracker
    - UIHealthMonitor: Wires everything to a host surface

Example:
    from host import AsyncioScheduler
    from monitor import create_monitor

    async def main(config, surface):
        monitor = create_monitor(config, surface, AsyncioScheduler())
        monitor.initialize()
        ...
"""

from monitor.context import (
    MonitorConfig,
    MonitorContext,
)

from monitor.recorder import (
    InteractionCategory,
    InteractionRecord,
    InteractionRecorder,
    classify,
)

from monitor.verifier import (
    VerificationEngine,
)

from monitor.watcher import (
    StructuralWatcher,
)

from monitor.health_check import (
    HealthChecker,
)

from monitor.remediation import (
    RemediationAttempt,
    RemediationEngine,
)

from monitor.escalation import (
    CriticalErrorEscalator,
    is_critical_error,
)

from monitor.reporter import (
    IssueReport,
    IssueReporter,
)

from monitor.monitor import (
    UIHealthMonitor,
    create_monitor,
)


__all__ = [
    # Context
    'MonitorConfig',
    'MonitorContext',
    # Recorder
    'InteractionCategory',
    'InteractionRecord',
    'InteractionRecorder',
    'classify',
    # Verification
    'VerificationEngine',
    'StructuralWatcher',
    'HealthChecker',
    # Remediation
    'RemediationAttempt',
    'RemediationEngine',
    # Escalation and reporting
    'CriticalErrorEscalator',
    'is_critical_error',
    'IssueReport',
    'IssueReporter',
    # Monitor
    'UIHealthMonitor',
    'create_monitor',
]
