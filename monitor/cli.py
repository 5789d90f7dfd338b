#!/usr/bin/env python3
"""
UI Health Monitor - Simulation CLI

Runs the monitor against the built-in demo interface on a virtual clock,
optionally breaking part of the interface first, and prints what the
monitor did.

Usage:
    uihealth simulate                           # Healthy interface
    uihealth simulate --break settings          # Settings modal never opens
    uihealth simulate --break chat --clicks 2   # Chat button loses its handler
    uihealth simulate --break capability        # closeSettings is undefined
    uihealth check --break remove-modal         # One-off health check
"""

import argparse
import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from config import get_config_value, load_config
from host.memory import MemorySurface, build_demo_surface
from host.shell import ConsoleShell
from host.timers import ManualScheduler
from issues.tracker import DryRunIssueTracker
from monitor.monitor import UIHealthMonitor, create_monitor


logger = logging.getLogger(__name__)

BREAKAGES = ['settings-handler', 'settings', 'chat', 'capability', 'remove-modal']


class SimulationShell(ConsoleShell):
    """Console shell that answers the restart prompt from the command line."""

    def __init__(self, accept_restart: bool = False):
        super().__init__(name="uihealth-simulation")
        self.accept_restart = accept_restart
        self.restart_requested = False

    def confirm(self, message: str) -> bool:
        print(f"\n[prompt] {message}\n[prompt] answer: {'yes' if self.accept_restart else 'no'}")
        return self.accept_restart

    def restart(self) -> None:
        logger.warning("Restart requested (simulation - not restarting)")
        self.restart_requested = True

    def report_error(self, error) -> None:
        logger.info(f"Telemetry: {error.kind}: {error.message}")


def setup_logging(logging_config: Dict[str, Any], log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Configure the root logger.

    Args:
        logging_config: The 'logging' section of the config.
        log_file: Log file path. No file handler when empty.
        verbose: Force DEBUG level.
    """
    log_level = 'DEBUG' if verbose else logging_config.get('level', 'INFO')
    log_format = logging_config.get('format', '%(asctime)s %(levelname)s [%(name)s] %(message)s')
    date_format = logging_config.get('date_format', '%Y-%m-%d %H:%M:%S')
    formatter = logging.Formatter(log_format, date_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=logging_config.get('max_bytes', 10485760),
            backupCount=logging_config.get('backup_count', 5),
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def apply_breakage(surface: MemorySurface, scheduler: ManualScheduler, breakage: Optional[str]) -> None:
    """Break part of the demo interface."""
    if breakage is None:
        return

    if breakage == 'settings-handler':
        # Fixable: the button lost its handler but openSettings still works
        button = surface.get('settingsFab')
        button.handlers.clear()
        button.has_click_listener = False
    elif breakage == 'settings':
        # Not fixable: openSettings exists but does nothing
        surface.define_capability('openSettings', lambda: None)
    elif breakage == 'chat':
        button = surface.get('chatFab')
        button.handlers.clear()
        button.has_click_listener = False
    elif breakage == 'capability':
        surface.remove_capability('closeSettings')
    elif breakage == 'remove-modal':
        scheduler.call_later(1.0, lambda: surface.remove_element('settingsModal'), name="break")
    else:
        raise ValueError(f"Unknown breakage: {breakage}")


def run_session(monitor: UIHealthMonitor, surface: MemorySurface, scheduler: ManualScheduler, clicks: int) -> None:
    """Scripted user session: open settings, test and save, open chat."""
    interval = monitor.config.health_check_interval

    for _ in range(clicks):
        for element_id in ('settingsFab', 'testConnectionBtn', 'saveSettingsBtn', 'chatFab'):
            if surface.exists(element_id):
                surface.click(element_id)
            scheduler.advance(3.0)
        surface.set_active('chatPanel', False)
        surface.set_active('settingsModal', False)
        if surface.exists('dbTestResult'):
            surface.set_text('dbTestResult', '')

    scheduler.advance(interval * 2)


def cmd_simulate(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    scheduler = ManualScheduler()
    surface = build_demo_surface()
    shell = SimulationShell(accept_restart=args.restart)

    tracker = None if args.github else DryRunIssueTracker()
    monitor = create_monitor(config, surface, scheduler, shell=shell, tracker=tracker)
    monitor.initialize()

    apply_breakage(surface, scheduler, args.breakage)
    run_session(monitor, surface, scheduler, args.clicks)
    monitor.stop()

    stats = monitor.get_statistics()
    stats['restart_requested'] = shell.restart_requested
    if isinstance(tracker, DryRunIssueTracker):
        stats['issues_created'] = [issue['title'] for issue in tracker.created]

    print(json.dumps(stats, indent=2))
    return 0


def cmd_check(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    scheduler = ManualScheduler()
    surface = build_demo_surface()
    apply_breakage(surface, scheduler, args.breakage)
    scheduler.advance(1.0)

    monitor = create_monitor(config, surface, scheduler, tracker=DryRunIssueTracker())
    issues = monitor.health_checker.collect_issues()

    if not issues:
        print("Health check passed - all systems operational")
        return 0

    print(f"Health check found {len(issues)} issues:")
    for issue in issues:
        print(f"  - {issue}")
    return 1


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog='uihealth',
        description="Exercise the UI health monitor against a simulated interface.",
    )
    parser.add_argument('--config', help="Path to config YAML (default: bundled default.yaml)")
    parser.add_argument('--log-file', help="Also log to this file")
    parser.add_argument('-v', '--verbose', action='store_true', help="Debug logging")

    subparsers = parser.add_subparsers(dest='command', required=True)

    simulate = subparsers.add_parser('simulate', help="Run a scripted session")
    simulate.add_argument('--break', dest='breakage', choices=BREAKAGES,
                          help="Break part of the interface first")
    simulate.add_argument('--clicks', type=int, default=3,
                          help="Number of passes through the session (default: 3)")
    simulate.add_argument('--restart', action='store_true',
                          help="Answer yes to the restart prompt")
    simulate.add_argument('--github', action='store_true',
                          help="Send issues to GitHub instead of logging them")

    check = subparsers.add_parser('check', help="Run one health check")
    check.add_argument('--break', dest='breakage', choices=BREAKAGES,
                       help="Break part of the interface first")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    setup_logging(
        config.get('logging', {}),
        log_file=args.log_file or get_config_value(config, 'logging.file'),
        verbose=args.verbose,
    )
    logger.debug(f"Verification delay: {get_config_value(config, 'monitor.verification_delay', 0.5)}s")

    if args.command == 'simulate':
        return cmd_simulate(args, config)
    return cmd_check(args, config)


if __name__ == '__main__':
    sys.exit(main())
