"""GitHub issue tracker.

Creates issues through the GitHub REST API (POST /repos/{repo}/issues).
A personal access token is required; without one every call fails with
IssueTrackerError so the caller can log it and move on.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from issues.tracker import IssueReceipt, IssueTracker, IssueTrackerError
from utils.string_utils import truncate


logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_REPO = "proteaNirav/multilingual-pa"


class GitHubIssueTracker(IssueTracker):
    """Creates issues in a GitHub repository.

    Example:
        tracker = GitHubIssueTracker(repo="owner/name", token=os.environ["GITHUB_TOKEN"])
        receipt = tracker.create_issue("Broken button", "Details...", ["bug"])
        print(receipt.issue_url)
    """

    def __init__(
        self,
        repo: str = DEFAULT_REPO,
        token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        user_agent: str = "UI-Health-Monitor",
        client: Optional[httpx.Client] = None,
    ):
        """Initialize the tracker.

        Args:
            repo: Repository in 'owner/name' form.
            token: GitHub token. Issues cannot be created without one.
            api_url: API base URL (GitHub Enterprise installs differ).
            timeout: Request timeout in seconds.
            user_agent: User-Agent header value.
            client: Preconfigured httpx client, mainly for tests.
        """
        self.repo = repo
        self.token = token
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.user_agent = user_agent
        self._client = client

    def create_issue(self, title: str, body: str, labels: List[str]) -> IssueReceipt:
        if not self.token:
            raise IssueTrackerError("GitHub token not configured")

        url = f"{self.api_url}/repos/{self.repo}/issues"
        payload = {'title': title, 'body': body, 'labels': list(labels)}
        headers = {
            'Authorization': f"token {self.token}",
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': self.user_agent,
        }

        logger.info(f"Creating GitHub issue in {self.repo}: {title}")

        try:
            if self._client is not None:
                response = self._client.post(url, json=payload, headers=headers, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise IssueTrackerError(f"GitHub request failed: {e}") from e

        if response.status_code != 201:
            raise IssueTrackerError(
                f"GitHub API returned {response.status_code}: {truncate(response.text, 200)}",
                status_code=response.status_code,
            )

        data = response.json()
        receipt = IssueReceipt(issue_number=data['number'], issue_url=data['html_url'])
        logger.info(f"GitHub issue created: #{receipt.issue_number}")
        return receipt


def create_github_tracker(config: Optional[Dict[str, Any]] = None) -> GitHubIssueTracker:
    """Factory function to create a GitHub tracker from configuration.

    The GITHUB_TOKEN environment variable takes precedence over the
    'github.token' config value.

    Args:
        config: Full configuration dictionary.

    Returns:
        A GitHubIssueTracker instance.
    """
    config = config or {}
    github_config = config.get('github') or {}

    return GitHubIssueTracker(
        repo=github_config.get('repo', DEFAULT_REPO),
        token=os.environ.get('GITHUB_TOKEN') or github_config.get('token'),
        api_url=github_config.get('api_url', DEFAULT_API_URL),
        timeout=github_config.get('timeout', 10.0),
    )
