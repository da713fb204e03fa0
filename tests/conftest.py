from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional

import pytest

from deploy_card.config import RunInfo, Settings
from deploy_card.github import ChangedFile, Commit, CommitAuthor, WorkflowRunStatus

SHA = "abcdef0123456789abcdef0123456789abcdef01"
FIXED_NOW = datetime(2024, 3, 4, 13, 5, 9, tzinfo=timezone.utc)


@pytest.fixture
def run_info() -> RunInfo:
    return RunInfo(
        repository="octo-org/octo-repo",
        server_url="https://github.com",
        ref="refs/heads/main",
        sha=SHA,
        run_id="1234",
        run_number="56",
        job="build",
        event_name="push",
        before="1111111111111111111111111111111111111111",
        after=SHA,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(webhook_uri="https://example.webhook.office.com/hook")


def make_commit(
    message: str = "Fix bug\n\nDetailed explanation.",
    sha: str = SHA,
    files: Optional[List[ChangedFile]] = None,
    author: Optional[CommitAuthor] = CommitAuthor(
        login="octocat",
        html_url="https://github.com/octocat",
        avatar_url="https://avatars.githubusercontent.com/u/583231",
    ),
) -> Commit:
    return Commit(
        sha=sha,
        html_url=f"https://github.com/octo-org/octo-repo/commit/{sha}",
        message=message,
        author=author,
        files=files or [],
    )


@pytest.fixture
def commit() -> Commit:
    return make_commit()


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def raise_for_status(self) -> None:
        import requests

        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    """Records requests instead of performing network I/O."""

    def __init__(self, responses: Optional[dict] = None, post_response: Optional[FakeResponse] = None):
        self.headers: dict = {}
        self.responses = responses or {}
        self.post_response = post_response or FakeResponse(200, text="1")
        self.gets: List[str] = []
        self.posts: List[dict] = []

    def get(self, url: str, params=None, timeout=None) -> FakeResponse:
        self.gets.append(url)
        for suffix, response in self.responses.items():
            if url.endswith(suffix):
                return response
        return FakeResponse(404)

    def post(self, url: str, data=None, headers=None, timeout=None) -> FakeResponse:
        self.posts.append({"url": url, "data": data, "headers": headers})
        if isinstance(self.post_response, Exception):
            raise self.post_response
        return self.post_response


class FakeGitHubClient:
    def __init__(self, commit: Commit, commits: Optional[List[Commit]] = None,
                 status: Optional[WorkflowRunStatus] = None) -> None:
        self.commit = commit
        self.commits = commits or []
        self.status = status or WorkflowRunStatus("success", 42)
        self.compare_calls = 0

    def get_commit(self, owner: str, repo: str, ref: str) -> Commit:
        return self.commit

    def compare_commits(self, owner, repo, before, after) -> List[Commit]:
        self.compare_calls += 1
        return self.commits

    def get_workflow_run_status(self, run: RunInfo) -> WorkflowRunStatus:
        return self.status
