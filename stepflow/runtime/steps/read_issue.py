"""
read_issue.py - ReadIssueStep: load a GitHub issue into the context.

Errors from URL parsing or the issue tracker propagate unwrapped and are not
logged here; the session records and reports them. Context is only written
after a successful fetch, so a failure leaves it untouched.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from stepflow.config.runtime_config import get_github_token
from stepflow.integrations.github import (
    IssueTrackerClient,
    IssueWithComments,
    parse_github_issue_url,
)
from stepflow.logging_utils import with_metadata
from stepflow.runtime.context import Context
from stepflow.spec.types import ReadIssueStepConfig

from .base import Step

ISSUE_KEY_PREFIX = "github.issue"
ISSUE_URL_KEY = f"{ISSUE_KEY_PREFIX}.url"
ISSUE_NUMBER_KEY = f"{ISSUE_KEY_PREFIX}.number"
ISSUE_TITLE_KEY = f"{ISSUE_KEY_PREFIX}.title"
ISSUE_AUTHOR_KEY = f"{ISSUE_KEY_PREFIX}.author"
ISSUE_BODY_KEY = f"{ISSUE_KEY_PREFIX}.body"
ISSUE_STATE_KEY = f"{ISSUE_KEY_PREFIX}.state"
ISSUE_CREATED_AT_KEY = f"{ISSUE_KEY_PREFIX}.created_at"
ISSUE_UPDATED_AT_KEY = f"{ISSUE_KEY_PREFIX}.updated_at"
ISSUE_COMMENTS_COUNT_KEY = f"{ISSUE_KEY_PREFIX}.comments_count"
ISSUE_COMMENTS_KEY = f"{ISSUE_KEY_PREFIX}.comments"


class ReadIssueStep(Step):
    """External fetch step.

    The issue URL comes from the context key ``github.issue.url`` when set,
    otherwise from the step config. The auth token comes from the step config,
    otherwise from GITHUB_TOKEN / GH_TOKEN.
    """

    def __init__(
        self,
        config: ReadIssueStepConfig,
        client: IssueTrackerClient,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(config.id, config.next_step_id, logger)
        self.config = config
        self.client = client

    @property
    def token(self) -> Optional[str]:
        return self.config.github_token or get_github_token()

    async def execute(
        self,
        context: Context,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Optional[str]:
        override = context.get(ISSUE_URL_KEY)
        issue_url = str(override) if override else self.config.issue_url
        self.logger.info("Executing ReadIssueStep: %s", issue_url)

        ref = parse_github_issue_url(issue_url)
        self.logger.info(
            "ReadIssueStep: Reading issue #%d from %s/%s", ref.issue_number, ref.owner, ref.repo
        )

        result = await self.client.get_issue_with_comments(
            ref.owner, ref.repo, ref.issue_number, token=self.token
        )

        for key, value in self.issue_context_values(result, issue_url, ref.issue_number).items():
            context.set(key, value)

        self.logger.info(
            "Successfully loaded GitHub issue #%d from %s/%s",
            ref.issue_number,
            ref.owner,
            ref.repo,
        )
        self.logger.debug(
            "ReadIssueStep completed successfully",
            extra=with_metadata({
                "issueUrl": issue_url,
                "issueNumber": ref.issue_number,
                "commentsCount": len(result.comments),
            }),
        )
        return self.resolve_next_step(context)

    def issue_context_values(
        self, result: IssueWithComments, issue_url: str, issue_number: int
    ) -> Dict[str, str]:
        """Map a fetched issue onto the fixed set of context keys."""
        issue: Dict[str, Any] = result.issue or {}
        user = issue.get("user") or {}
        values = {
            ISSUE_NUMBER_KEY: str(issue_number),
            ISSUE_TITLE_KEY: str(issue.get("title") or ""),
            ISSUE_AUTHOR_KEY: str(user.get("login") or "unknown"),
            ISSUE_BODY_KEY: str(issue.get("body") or ""),
            ISSUE_STATE_KEY: str(issue.get("state") or ""),
            ISSUE_CREATED_AT_KEY: str(issue.get("created_at") or ""),
            ISSUE_UPDATED_AT_KEY: str(issue.get("updated_at") or ""),
            ISSUE_URL_KEY: issue_url,
            ISSUE_COMMENTS_COUNT_KEY: str(len(result.comments)),
        }
        if self.config.include_comments:
            values[ISSUE_COMMENTS_KEY] = json.dumps(result.comments)
        return values
