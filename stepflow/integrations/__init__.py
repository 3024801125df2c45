"""External collaborators consumed by flow steps."""

from .github import (
    GitHubClient,
    IssueRef,
    IssueTrackerClient,
    IssueWithComments,
    parse_github_issue_url,
)

__all__ = [
    "GitHubClient",
    "IssueRef",
    "IssueTrackerClient",
    "IssueWithComments",
    "parse_github_issue_url",
]
