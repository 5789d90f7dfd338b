"""Structural watcher.

Listens to the host's structural change feed and escalates the removal of
any watched critical element. A node removed and re-inserted in the same
batch is a replacement (e.g. an auto-fix rebuilding a button) and is not
reported.
"""

import logging
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from host.surface import StructuralChange
    from monitor.context import MonitorContext
    from monitor.escalation import CriticalErrorEscalator

logger = logging.getLogger(__name__)


class StructuralWatcher:
    """Turns removals of watched elements into critical errors."""

    def __init__(
        self,
        context: 'MonitorContext',
        escalator: 'CriticalErrorEscalator',
    ):
        self.context = context
        self.escalator = escalator

    def on_structure_change(self, change: 'StructuralChange') -> List[str]:
        """Inspect one change batch.

        Returns:
            Ids of watched elements that were removed.
        """
        readded = set(change.added)
        removed = [
            node_id for node_id in change.removed
            if node_id in self.context.config.watched_elements and node_id not in readded
        ]

        for node_id in removed:
            logger.error(f"Critical element removed from tree: {node_id}")
            self.escalator.handle_critical_error(f"Critical UI element removed: {node_id}")

        return removed
