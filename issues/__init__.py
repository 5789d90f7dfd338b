"""Issue tracker integrations for the UI health monitor."""

from issues.tracker import (
    IssueTracker,
    IssueReceipt,
    IssueTrackerError,
    DryRunIssueTracker,
)
from issues.github import (
    GitHubIssueTracker,
    create_github_tracker,
)

__all__ = [
    'IssueTracker',
    'IssueReceipt',
    'IssueTrackerError',
    'DryRunIssueTracker',
    'GitHubIssueTracker',
    'create_github_tracker',
]
