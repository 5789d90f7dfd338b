"""Application shell capabilities used by the monitor.

The shell is the process around the UI: it knows the application version,
can ask the user a yes/no question, can restart the process, and keeps a
record of errors reported to it.
"""

from abc import ABC, abstractmethod
from datetime import datetime
import json
import logging
import os
import platform
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from host.surface import HostError


logger = logging.getLogger(__name__)


class AppShell(ABC):
    """Abstract base class for the application shell."""

    @abstractmethod
    def app_info(self) -> Dict[str, Any]:
        """Return application info; must include a 'version' key."""
        pass

    @abstractmethod
    def confirm(self, message: str) -> bool:
        """Ask the user a yes/no question and return the answer."""
        pass

    @abstractmethod
    def restart(self) -> None:
        """Tear down and relaunch the application process."""
        pass

    @abstractmethod
    def report_error(self, error: HostError) -> None:
        """Record an error for telemetry."""
        pass


class ConsoleShell(AppShell):
    """Shell for an application running in a terminal.

    Confirmation reads from stdin, restart re-executes the current
    interpreter with the same arguments, and reported errors are appended
    to a JSON-lines file.
    """

    def __init__(
        self,
        name: str = "ui-health-monitor",
        version: str = "1.0.0",
        error_log: Optional[Path] = None,
        input_func: Callable[[str], str] = input,
    ):
        """Initialize the shell.

        Args:
            name: Application name.
            version: Application version reported in issues.
            error_log: JSON-lines file for reported errors. Defaults to
                ~/.uihealth/errors.jsonl.
            input_func: Function used to prompt the user.
        """
        self.name = name
        self.version = version
        self.error_log = Path(error_log) if error_log else Path.home() / ".uihealth" / "errors.jsonl"
        self._input = input_func

    def app_info(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'version': self.version,
            'platform': sys.platform,
            'python_version': platform.python_version(),
        }

    def confirm(self, message: str) -> bool:
        try:
            answer = self._input(f"{message}\n[y/N] ")
        except EOFError:
            return False
        return answer.strip().lower() in ('y', 'yes')

    def restart(self) -> None:
        logger.warning("Restarting application process")
        os.execv(sys.executable, [sys.executable] + sys.argv)

    def report_error(self, error: HostError) -> None:
        self.error_log.parent.mkdir(parents=True, exist_ok=True)
        entry = dict(error.to_dict(), timestamp=datetime.now().isoformat())
        with open(self.error_log, 'a', encoding='utf-8') as f:
            f.write(json.dumps(entry) + "\n")
        logger.debug(f"Error recorded in {self.error_log}")


def host_identification(info: Dict[str, Any]) -> str:
    """Build the host identification string included in issue reports.

    Example: 'ui-health-monitor/1.0.0 (linux; Python 3.12.1)'
    """
    name = info.get('name', 'app')
    version = info.get('version', 'unknown')
    details = [str(info.get('platform', sys.platform))]
    if info.get('python_version'):
        details.append(f"Python {info['python_version']}")
    return f"{name}/{version} ({'; '.join(details)})"
