"""Configuration and shared state for the UI health monitor.

All process-wide monitor state lives in one MonitorContext owned by the
composition root and handed to every component. Tests build a fresh
context per test instead of resetting globals.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from host.timers import Scheduler
    from monitor.recorder import InteractionRecord
    from monitor.remediation import RemediationAttempt


DEFAULT_CRITICAL_ELEMENTS = {
    'settingsFab': 'Settings button',
    'settingsModal': 'Settings modal',
    'chatFab': 'Chat button',
    'chatPanel': 'Chat panel',
}


@dataclass(frozen=True)
class MonitorConfig:
    """Monitor configuration, read-only once built.

    Attributes:
        verification_delay: Seconds between an interaction and its check.
        connection_test_delay: Extra seconds before checking a connection test.
        settings_save_delay: Extra seconds before checking a settings save.
        health_check_interval: Seconds between periodic health checks.
        max_auto_fix_attempts: Repair attempts per target before giving up.
        critical_error_threshold: Critical errors before a restart is offered.
        enable_auto_fix: Whether health-check issues trigger repairs.
        enable_telemetry: Whether host errors are forwarded to the shell.
        enable_auto_reporting: Whether issues are sent to the tracker.
        max_interactions: Cap on retained interaction records.
        interaction_ttl_seconds: Age after which records are dropped.
        critical_elements: Element id -> human name for the checklist.
        watched_elements: Ids whose removal is a critical error.
        required_capabilities: Global functions that must be defined.
    """
    verification_delay: float = 0.5
    connection_test_delay: float = 2.0
    settings_save_delay: float = 1.0
    health_check_interval: float = 5.0
    max_auto_fix_attempts: int = 3
    critical_error_threshold: int = 3
    enable_auto_fix: bool = True
    enable_telemetry: bool = True
    enable_auto_reporting: bool = True
    max_interactions: int = 500
    interaction_ttl_seconds: float = 600.0
    critical_elements: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CRITICAL_ELEMENTS))
    watched_elements: Tuple[str, ...] = ('settingsModal', 'settingsFab')
    required_capabilities: Tuple[str, ...] = ('openSettings', 'closeSettings')

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'MonitorConfig':
        """Create config from the 'monitor' section of the config file.

        Args:
            data: Configuration dictionary (may be None).

        Returns:
            MonitorConfig instance.
        """
        if not data:
            return cls()

        defaults = cls()
        return cls(
            verification_delay=float(data.get('verification_delay', defaults.verification_delay)),
            connection_test_delay=float(data.get('connection_test_delay', defaults.connection_test_delay)),
            settings_save_delay=float(data.get('settings_save_delay', defaults.settings_save_delay)),
            health_check_interval=float(data.get('health_check_interval', defaults.health_check_interval)),
            max_auto_fix_attempts=int(data.get('max_auto_fix_attempts', defaults.max_auto_fix_attempts)),
            critical_error_threshold=int(data.get('critical_error_threshold', defaults.critical_error_threshold)),
            enable_auto_fix=bool(data.get('enable_auto_fix', True)),
            enable_telemetry=bool(data.get('enable_telemetry', True)),
            enable_auto_reporting=bool(data.get('enable_auto_reporting', True)),
            max_interactions=int(data.get('max_interactions', defaults.max_interactions)),
            interaction_ttl_seconds=float(data.get('interaction_ttl_seconds', defaults.interaction_ttl_seconds)),
            critical_elements=dict(data.get('critical_elements') or DEFAULT_CRITICAL_ELEMENTS),
            watched_elements=tuple(data.get('watched_elements') or defaults.watched_elements),
            required_capabilities=tuple(data.get('required_capabilities') or defaults.required_capabilities),
        )


@dataclass
class MonitorContext:
    """Mutable monitor state shared by all components.

    Attributes:
        config: Monitor configuration.
        scheduler: Timer facility every component schedules on.
        interactions: Live interaction records, oldest first.
        fix_attempts: Remediation target -> current attempt count.
        remediation_history: Every repair attempt made, in order.
        reported_issues: Dedup key -> scheduler time it was reported.
        critical_error_count: Critical errors seen this process lifetime.
        restart_prompted: Whether the restart prompt has been shown.
    """
    config: MonitorConfig
    scheduler: 'Scheduler'
    interactions: 'OrderedDict[str, InteractionRecord]' = field(default_factory=OrderedDict)
    fix_attempts: Dict[str, int] = field(default_factory=dict)
    remediation_history: List['RemediationAttempt'] = field(default_factory=list)
    reported_issues: Dict[str, float] = field(default_factory=dict)
    critical_error_count: int = 0
    restart_prompted: bool = False

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the counters, for reports and statistics."""
        return {
            'total_interactions': len(self.interactions),
            'verified_interactions': sum(1 for r in self.interactions.values() if r.verified),
            'auto_fix_attempts': dict(self.fix_attempts),
            'remediation_history': [a.to_dict() for a in self.remediation_history],
            'critical_error_count': self.critical_error_count,
            'issues_reported': list(self.reported_issues),
            'restart_prompted': self.restart_prompted,
        }
