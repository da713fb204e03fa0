"""Client for the GitHub REST API endpoints the notifier relies on."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional

import requests

from .config import DEFAULT_API_URL, RunInfo

LOGGER = logging.getLogger(__name__)

NULL_SHA = "0" * 40
STOPPED_CONCLUSIONS = frozenset({"failure", "timed_out", "cancelled", "action_required"})


class GitHubError(RuntimeError):
    """Raised when a GitHub API call fails."""


@dataclass(slots=True)
class CommitAuthor:
    """The GitHub account associated with a commit."""

    login: str
    html_url: str
    avatar_url: str = ""


@dataclass(slots=True)
class ChangedFile:
    """A file touched by a commit."""

    filename: str
    blob_url: str
    changes: int = 0


@dataclass(slots=True)
class Commit:
    """Structured representation of a commit returned by the API."""

    sha: str
    html_url: str
    message: str
    author: Optional[CommitAuthor] = None
    files: List[ChangedFile] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Commit":
        """Build a commit from a ``repos/{owner}/{repo}/commits`` payload."""

        author_data = data.get("author")
        author = None
        if isinstance(author_data, Mapping) and author_data.get("login"):
            author = CommitAuthor(
                login=author_data["login"],
                html_url=author_data.get("html_url", ""),
                avatar_url=author_data.get("avatar_url", ""),
            )
        files = [
            ChangedFile(
                filename=item.get("filename", ""),
                blob_url=item.get("blob_url", ""),
                changes=int(item.get("changes") or 0),
            )
            for item in data.get("files") or []
        ]
        return cls(
            sha=data.get("sha", ""),
            html_url=data.get("html_url", ""),
            message=(data.get("commit") or {}).get("message", ""),
            author=author,
            files=files,
        )


@dataclass(slots=True)
class WorkflowRunStatus:
    """Outcome of the current job, used for the ``exit`` notification."""

    conclusion: Optional[str]
    elapsed_seconds: Optional[int]


class GitHubClient:
    """Thin wrapper over the handful of REST calls needed per run."""

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        session: Optional[requests.Session] = None,
        timeout: int = 20,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "User-Agent": "deploy-card-notifier",
            }
        )
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        url = f"{self.api_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise GitHubError(f"GitHub API request to {url} failed: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubError(f"GitHub API returned invalid JSON for {url}") from exc

    def get_commit(self, owner: str, repo: str, ref: str) -> Commit:
        """Fetch a single commit including its changed files."""

        return Commit.from_api(self._get(f"/repos/{owner}/{repo}/commits/{ref}"))

    def compare_commits(
        self, owner: str, repo: str, before: Optional[str], after: Optional[str]
    ) -> List[Commit]:
        """Return the commits between ``before`` and ``after``, oldest first."""

        if not before or not after or before == NULL_SHA:
            return []
        data = self._get(f"/repos/{owner}/{repo}/compare/{before}...{after}")
        return [Commit.from_api(item) for item in data.get("commits") or []]

    def get_workflow_run_status(self, run: RunInfo) -> WorkflowRunStatus:
        """Determine the conclusion and duration of the running job."""

        data = self._get(
            f"/repos/{run.owner}/{run.repo}/actions/runs/{run.run_id or 1}/jobs"
        )
        job = next(
            (item for item in data.get("jobs") or [] if item.get("name") == run.job),
            None,
        )
        if job is None:
            LOGGER.warning("Job %s not found in workflow run %s", run.job, run.run_id)
            return WorkflowRunStatus(conclusion=None, elapsed_seconds=None)

        last_step = find_last_step(job.get("steps") or [])
        started = parse_iso8601(job.get("started_at"))
        completed = parse_iso8601(last_step.get("completed_at")) if last_step else None
        elapsed = None
        if started and completed:
            elapsed = int((completed - started).total_seconds())
        return WorkflowRunStatus(
            conclusion=last_step.get("conclusion") if last_step else None,
            elapsed_seconds=elapsed,
        )


def find_last_step(steps: List[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """Pick the step whose outcome represents the job.

    The first step that stopped the job wins; otherwise the last completed,
    non-skipped step.
    """

    for step in steps:
        if step.get("conclusion") in STOPPED_CONCLUSIONS:
            return step
    for step in reversed(steps):
        if step.get("status") == "completed" and step.get("conclusion") != "skipped":
            return step
    return None


def parse_iso8601(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitHub timestamp such as ``2024-01-01T10:00:00Z``."""

    if not value:
        return None
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
