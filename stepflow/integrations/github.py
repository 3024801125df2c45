"""
github.py - Issue-tracker collaborator for the read-github-issue step.

Provides:
- IssueTrackerClient: the contract the engine consumes
- GitHubClient: httpx implementation against the GitHub REST API
- parse_github_issue_url: owner/repo/number extraction

The engine never retries a failed fetch. The client itself retries exactly
once, unauthenticated, when an authenticated request is rejected with 401,
so public issues stay readable with a stale token.
"""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from stepflow.config.runtime_config import (
    get_github_api_url,
    get_github_timeout,
    get_github_token,
)
from stepflow.errors import CollaboratorError, InvalidIssueUrlError, IssueNotFoundError

logger = logging.getLogger(__name__)

_ISSUE_URL = re.compile(r"github\.com/([^/]+)/([^/]+)/issues/(\d+)")

# Comments page size (GitHub maximum)
COMMENTS_PER_PAGE = 100


@dataclass(frozen=True)
class IssueRef:
    """Parsed issue coordinates."""
    owner: str
    repo: str
    issue_number: int


@dataclass
class IssueWithComments:
    """Raw issue payload plus its comments, as returned by the tracker."""
    issue: Dict[str, Any]
    comments: List[Dict[str, Any]] = field(default_factory=list)


def parse_github_issue_url(url: str) -> IssueRef:
    """Parse a GitHub issue URL.

    Args:
        url: e.g. "https://github.com/octo/repo/issues/42".

    Returns:
        IssueRef(owner="octo", repo="repo", issue_number=42).

    Raises:
        InvalidIssueUrlError: If the URL does not match the issue pattern.
    """
    match = _ISSUE_URL.search(url or "")
    if not match:
        raise InvalidIssueUrlError(url)
    owner, repo, number = match.groups()
    return IssueRef(owner=owner, repo=repo, issue_number=int(number))


class IssueTrackerClient(ABC):
    """Contract for fetching an issue together with its comments."""

    @abstractmethod
    async def get_issue_with_comments(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        token: Optional[str] = None,
    ) -> IssueWithComments:
        """Fetch one issue and its comments.

        Args:
            owner: Repository owner.
            repo: Repository name.
            issue_number: Issue number.
            token: Optional auth token overriding the client's own.

        Raises:
            IssueNotFoundError: The issue does not exist.
            CollaboratorError: Any other transport or API failure.
        """
        ...


class GitHubClient(IssueTrackerClient):
    """GitHub REST client built on httpx.AsyncClient."""

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._token = token
        self._api_url = (api_url or get_github_api_url()).rstrip("/")
        self._timeout = timeout if timeout is not None else get_github_timeout()
        self._transport = transport

    def _headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _fetch(
        self, owner: str, repo: str, issue_number: int, token: Optional[str]
    ) -> IssueWithComments:
        path = f"/repos/{owner}/{repo}/issues/{issue_number}"
        async with httpx.AsyncClient(
            base_url=self._api_url,
            headers=self._headers(token),
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            # Both requests finish before the client closes; the first failure wins
            results = await asyncio.gather(
                client.get(path),
                client.get(f"{path}/comments", params={"per_page": COMMENTS_PER_PAGE}),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            issue_resp, comments_resp = results
            issue_resp.raise_for_status()
            comments_resp.raise_for_status()
            return IssueWithComments(issue=issue_resp.json(), comments=comments_resp.json())

    async def get_issue_with_comments(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        token: Optional[str] = None,
    ) -> IssueWithComments:
        auth_token = token or self._token or get_github_token()

        try:
            return await self._fetch(owner, repo, issue_number, auth_token)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 401 and auth_token:
                logger.warning(
                    "GitHub rejected token for %s/%s#%d; retrying unauthenticated",
                    owner,
                    repo,
                    issue_number,
                )
                try:
                    return await self._fetch(owner, repo, issue_number, None)
                except httpx.HTTPError as retry_error:
                    raise CollaboratorError(
                        "GitHub authentication failed and repository is not public. "
                        "Please check your github_token configuration.",
                        context={"owner": owner, "repo": repo, "issue_number": issue_number},
                    ) from retry_error
            if status == 404:
                raise IssueNotFoundError(
                    f"GitHub issue #{issue_number} not found in {owner}/{repo}",
                    context={"owner": owner, "repo": repo, "issue_number": issue_number},
                ) from e
            raise CollaboratorError(
                f"GitHub API error: {status} - {e.response.text}",
                context={"status": status, "owner": owner, "repo": repo},
            ) from e
        except httpx.HTTPError as e:
            raise CollaboratorError(
                f"GitHub request failed: {e}",
                context={"owner": owner, "repo": repo, "issue_number": issue_number},
            ) from e
