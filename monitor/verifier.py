"""Delayed verification of user interactions.

After an interaction, a timer gives the UI time to react; then a
category-specific predicate checks the host state. Failures go to the
remediation engine, successes mark the record verified. Categories
without a predicate are not verified.
"""

import logging
from typing import Dict, Optional, TYPE_CHECKING

from monitor.recorder import InteractionCategory

if TYPE_CHECKING:
    from host.surface import HostSurface, TargetDescriptor
    from monitor.context import MonitorContext
    from monitor.recorder import InteractionRecorder
    from monitor.remediation import RemediationEngine

logger = logging.getLogger(__name__)


class VerificationEngine:
    """Schedules and runs post-interaction checks.

    Checks are timer callbacks, never blocking waits. There is no way to
    cancel a scheduled check; a stale check simply runs against whatever
    the UI looks like by then.
    """

    CATEGORY_TARGETS: Dict[InteractionCategory, str] = {
        InteractionCategory.SETTINGS_OPEN: 'settingsButton',
        InteractionCategory.CHAT_OPEN: 'chatButton',
        InteractionCategory.CONNECTION_TEST: 'testConnection',
    }

    SETTINGS_MODAL = 'settingsModal'
    CHAT_PANEL = 'chatPanel'
    TEST_RESULT = 'dbTestResult'

    def __init__(
        self,
        context: 'MonitorContext',
        surface: 'HostSurface',
        recorder: 'InteractionRecorder',
        remediation: 'RemediationEngine',
    ):
        self.context = context
        self.surface = surface
        self.recorder = recorder
        self.remediation = remediation

    def schedule_verification(
        self,
        interaction_id: str,
        category: InteractionCategory,
        target: 'TargetDescriptor',
    ) -> None:
        """Schedule the check for an interaction.

        Args:
            interaction_id: Record to update on success.
            category: Decides which predicate runs.
            target: Element acted upon, for log messages.
        """
        if category is InteractionCategory.OTHER:
            return

        self.context.scheduler.call_later(
            self.context.config.verification_delay,
            lambda: self.verify(interaction_id, category, target),
            name=f"verify-{category.value}",
        )

    def verify(
        self,
        interaction_id: str,
        category: InteractionCategory,
        target: 'TargetDescriptor',
    ) -> None:
        """Run the first stage of a check; some categories wait longer."""
        if self.recorder.get(interaction_id) is None:
            logger.debug(f"Interaction {interaction_id} no longer tracked, skipping check")
            return

        config = self.context.config

        if category is InteractionCategory.SETTINGS_OPEN:
            self._check_active(
                interaction_id, self.SETTINGS_MODAL, category,
                failure="Settings button clicked but modal did not open!",
                success="Settings modal opened successfully",
            )
        elif category is InteractionCategory.CHAT_OPEN:
            self._check_active(
                interaction_id, self.CHAT_PANEL, category,
                failure="Chat button clicked but panel did not open!",
                success="Chat panel opened successfully",
            )
        elif category is InteractionCategory.CONNECTION_TEST:
            self.context.scheduler.call_later(
                config.connection_test_delay,
                lambda: self._check_connection_test(interaction_id),
                name="verify-connection-result",
            )
        elif category is InteractionCategory.SETTINGS_SAVE:
            self.context.scheduler.call_later(
                config.settings_save_delay,
                lambda: self._check_settings_save(interaction_id),
                name="verify-settings-saved",
            )
        else:
            logger.debug(f"No verification for {category.value} on {target.description}")

    def _check_active(
        self,
        interaction_id: str,
        region: str,
        category: InteractionCategory,
        failure: str,
        success: str,
    ) -> None:
        if self.surface.is_active(region):
            logger.info(success)
            self._succeed(interaction_id, category)
        else:
            logger.error(failure)
            self._fail(category)

    def _check_connection_test(self, interaction_id: str) -> None:
        if self.recorder.get(interaction_id) is None:
            return

        if self.surface.text_of(self.TEST_RESULT).strip():
            logger.info("Test connection executed successfully")
            self._succeed(interaction_id, InteractionCategory.CONNECTION_TEST)
        else:
            logger.error("Test connection clicked but no result shown!")
            self._fail(InteractionCategory.CONNECTION_TEST)

    def _check_settings_save(self, interaction_id: str) -> None:
        if self.recorder.get(interaction_id) is None:
            return

        if self.surface.is_active(self.SETTINGS_MODAL):
            # Validation rejection also leaves the modal open
            logger.warning("Save button clicked but modal still open (save may have failed)")
            return

        logger.info("Settings saved and modal closed")
        self.recorder.mark_verified(interaction_id)

    def _succeed(self, interaction_id: str, category: InteractionCategory) -> None:
        self.recorder.mark_verified(interaction_id)
        target = self.CATEGORY_TARGETS.get(category)
        if target:
            self.remediation.record_success(target)

    def _fail(self, category: InteractionCategory) -> Optional[bool]:
        target = self.CATEGORY_TARGETS.get(category)
        if target is None:
            return None
        return self.remediation.attempt_fix(target)
