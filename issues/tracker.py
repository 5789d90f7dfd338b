"""Issue tracker interface.

The monitor forwards deduplicated failure reports through an IssueTracker.
Concrete trackers live beside this module.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import itertools
import logging
from typing import List, Optional


logger = logging.getLogger(__name__)


class IssueTrackerError(Exception):
    """Exception raised when an issue cannot be created."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize the error.

        Args:
            message: Error description.
            status_code: HTTP status returned by the tracker, if any.
        """
        self.status_code = status_code
        super().__init__(message)


@dataclass
class IssueReceipt:
    """Identity of a created issue.

    Attributes:
        issue_number: Tracker-assigned issue number.
        issue_url: Browser URL of the issue.
    """
    issue_number: int
    issue_url: str


class IssueTracker(ABC):
    """Abstract base class for issue trackers."""

    @abstractmethod
    def create_issue(self, title: str, body: str, labels: List[str]) -> IssueReceipt:
        """Create an issue.

        Args:
            title: Issue title.
            body: Markdown body.
            labels: Labels to apply.

        Returns:
            IssueReceipt for the created issue.

        Raises:
            IssueTrackerError: If the issue could not be created.
        """
        pass


class DryRunIssueTracker(IssueTracker):
    """Tracker that logs issues instead of sending them anywhere.

    Created issues are kept in memory so callers can inspect them.
    """

    def __init__(self, base_url: str = "dryrun://issues"):
        self.base_url = base_url
        self.created: List[dict] = []
        self._numbers = itertools.count(1)

    def create_issue(self, title: str, body: str, labels: List[str]) -> IssueReceipt:
        number = next(self._numbers)
        self.created.append({'number': number, 'title': title, 'body': body, 'labels': list(labels)})
        logger.info(f"[dry-run] Issue #{number}: {title} (labels: {', '.join(labels)})")
        return IssueReceipt(issue_number=number, issue_url=f"{self.base_url}/{number}")
