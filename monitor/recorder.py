"""Interaction recording.

Every observed user action gets an InteractionRecord with a unique id and
a category derived from the element acted upon. The verification engine
later flips the record's verified flag if the action had its effect.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import itertools
import logging
import secrets
import time
from typing import Optional, TYPE_CHECKING

from host.surface import TargetDescriptor

if TYPE_CHECKING:
    from monitor.context import MonitorContext

logger = logging.getLogger(__name__)


class InteractionCategory(Enum):
    """What an interaction was expected to do.

    Values:
        SETTINGS_OPEN: Open the settings modal.
        CHAT_OPEN: Open the chat panel.
        CONNECTION_TEST: Run the database connection test.
        SETTINGS_SAVE: Save settings and close the modal.
        OTHER: Not verified.
    """
    SETTINGS_OPEN = "settings_open"
    CHAT_OPEN = "chat_open"
    CONNECTION_TEST = "connection_test"
    SETTINGS_SAVE = "settings_save"
    OTHER = "other"


def classify(target: TargetDescriptor) -> InteractionCategory:
    """Map an element to the interaction category it triggers.

    Save is tested before the generic settings match, since a "Save
    Settings" button would otherwise count as opening settings.
    """
    text = target.text
    description = target.description

    if 'Save' in text and 'Settings' in text:
        return InteractionCategory.SETTINGS_SAVE
    if 'Test Connection' in text:
        return InteractionCategory.CONNECTION_TEST
    if target.element_id == 'settingsFab' or 'Settings' in description:
        return InteractionCategory.SETTINGS_OPEN
    if target.element_id == 'chatFab' or 'Chat' in description:
        return InteractionCategory.CHAT_OPEN
    return InteractionCategory.OTHER


@dataclass
class InteractionRecord:
    """A single observed interaction.

    Attributes:
        interaction_id: Process-unique id.
        category: Expected effect of the interaction.
        target: Element acted upon.
        timestamp: Wall-clock time of the interaction.
        recorded_at: Scheduler time of the interaction, used for retention.
        verified: Whether the expected effect was observed. Only ever
            goes from False to True.
    """
    interaction_id: str
    category: InteractionCategory
    target: TargetDescriptor
    timestamp: datetime = field(default_factory=datetime.now)
    recorded_at: float = 0.0
    verified: bool = False


class InteractionRecorder:
    """Creates and holds interaction records.

    Records live in the context's interactions mapping. Retention is
    bounded by age and count; both limits are applied on every insert.
    """

    def __init__(self, context: 'MonitorContext'):
        self.context = context
        self._sequence = itertools.count(1)

    def new_id(self) -> str:
        """Time-based id with a monotonic sequence and a random suffix."""
        millis = int(time.time() * 1000)
        return f"{millis:x}-{next(self._sequence)}-{secrets.token_hex(4)}"

    def record_interaction(
        self,
        category: InteractionCategory,
        target: TargetDescriptor,
    ) -> str:
        """Record an interaction.

        Args:
            category: Expected effect of the interaction.
            target: Element acted upon.

        Returns:
            The new interaction id.
        """
        interaction_id = self.new_id()
        record = InteractionRecord(
            interaction_id=interaction_id,
            category=category,
            target=target,
            recorded_at=self.context.scheduler.now(),
        )
        self.context.interactions[interaction_id] = record
        self._evict()

        logger.debug(f"Interaction {interaction_id}: {category.value} on {target.description}")
        return interaction_id

    def get(self, interaction_id: str) -> Optional[InteractionRecord]:
        return self.context.interactions.get(interaction_id)

    def mark_verified(self, interaction_id: str) -> bool:
        """Set the verified flag.

        Returns:
            True if the record exists (whether or not it was already verified).
        """
        record = self.context.interactions.get(interaction_id)
        if record is None:
            return False
        record.verified = True
        return True

    def _evict(self) -> None:
        config = self.context.config
        interactions = self.context.interactions
        cutoff = self.context.scheduler.now() - config.interaction_ttl_seconds

        while interactions:
            oldest = next(iter(interactions.values()))
            if oldest.recorded_at >= cutoff and len(interactions) <= config.max_interactions:
                break
            interactions.popitem(last=False)
