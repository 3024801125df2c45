"""
Test fixtures and utilities for the stepflow engine tests.

Provides an in-memory issue tracker, stub language model providers, a
configured StepFactory, temporary flow directories and isolation of the
runtime configuration from the developer's environment.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

_REPO_ROOT = Path(__file__).resolve().parent.parent
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from stepflow.config.runtime_config import reset_config
from stepflow.integrations.github import IssueTrackerClient, IssueWithComments
from stepflow.providers.stub import build_stub_providers
from stepflow.runtime.step_factory import StepFactory

_ENV_VARS = (
    "STEPFLOW_FLOWS_DIR",
    "STEPFLOW_MAX_STEPS",
    "STEPFLOW_LOG_LEVEL",
    "STEPFLOW_GITHUB_API_URL",
    "STEPFLOW_GITHUB_TIMEOUT",
    "GITHUB_TOKEN",
    "GH_TOKEN",
)


def run(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


SAMPLE_ISSUE: Dict[str, Any] = {
    "number": 42,
    "title": "Add dark mode",
    "body": "Users want a dark theme.",
    "state": "open",
    "user": {"login": "octocat"},
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-02T00:00:00Z",
}

SAMPLE_COMMENTS: List[Dict[str, Any]] = [
    {"id": 1, "body": "+1", "user": {"login": "hubot"}},
    {"id": 2, "body": "Would love this", "user": {"login": "monalisa"}},
]

SAMPLE_ISSUE_URL = "https://github.com/octo/widgets/issues/42"


class FakeIssueClient(IssueTrackerClient):
    """In-memory issue tracker that records every call."""

    def __init__(
        self,
        issue: Optional[Dict[str, Any]] = None,
        comments: Optional[List[Dict[str, Any]]] = None,
        error: Optional[Exception] = None,
    ):
        self.issue = dict(SAMPLE_ISSUE if issue is None else issue)
        self.comments = list(SAMPLE_COMMENTS if comments is None else comments)
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def get_issue_with_comments(self, owner, repo, issue_number, token=None):
        self.calls.append({
            "owner": owner,
            "repo": repo,
            "issue_number": issue_number,
            "token": token,
        })
        if self.error is not None:
            raise self.error
        return IssueWithComments(issue=self.issue, comments=self.comments)


# ============================================================================
# Environment Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_runtime_config(monkeypatch):
    """Clear stepflow/GitHub env vars and the cached runtime config."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()


# ============================================================================
# Collaborator Fixtures
# ============================================================================


@pytest.fixture
def issue_client():
    return FakeIssueClient()


@pytest.fixture
def providers():
    return build_stub_providers(response="1. Overview\n2. Steps")


@pytest.fixture
def factory(providers, issue_client):
    return StepFactory(providers=providers, issue_client=issue_client)


# ============================================================================
# Flow Definition Fixtures
# ============================================================================


def hello_definition() -> Dict[str, Any]:
    """A small valid flow touching action, decision and log steps."""
    return {
        "id": "hello",
        "name": "Hello",
        "steps": [
            {
                "id": "set-greeting",
                "type": "action",
                "operation": "setContext",
                "key": "greeting",
                "value": "hello",
                "nextStepId": {"default": "check"},
            },
            {
                "id": "check",
                "type": "decision",
                "condition": "equals",
                "contextKey": "greeting",
                "trueValue": "hello",
                "falseValue": "other",
                "nextStepId": {"true": "say-hello", "false": "say-other"},
            },
            {
                "id": "say-hello",
                "type": "log",
                "level": "info",
                "message": "Greeting is {{context.greeting}}",
                "nextStepId": {},
            },
            {
                "id": "say-other",
                "type": "log",
                "level": "warn",
                "message": "Unexpected greeting",
                "nextStepId": {},
            },
        ],
    }


def plan_definition() -> Dict[str, Any]:
    """Read an issue, generate a plan, log a summary."""
    return {
        "id": "plan-issue",
        "steps": [
            {
                "id": "read",
                "type": "read-github-issue",
                "issueUrl": SAMPLE_ISSUE_URL,
                "nextStepId": {"default": "plan"},
            },
            {
                "id": "plan",
                "type": "plan-generation",
                "llm_provider": "openai",
                "nextStepId": {"default": "done"},
            },
            {
                "id": "done",
                "type": "log",
                "level": "info",
                "message": "Planned #{{context.github.issue.number}}",
                "nextStepId": {},
            },
        ],
    }


@pytest.fixture
def flows_dir(tmp_path):
    """A flows directory holding hello.yaml, plan-issue.json and a hidden file."""
    import yaml

    directory = tmp_path / "flows"
    directory.mkdir()
    (directory / "hello.yaml").write_text(yaml.safe_dump(hello_definition()), encoding="utf-8")
    (directory / "plan-issue.json").write_text(json.dumps(plan_definition()), encoding="utf-8")
    (directory / "_draft.yaml").write_text(yaml.safe_dump(hello_definition()), encoding="utf-8")
    (directory / "notes.txt").write_text("not a flow", encoding="utf-8")
    return directory
