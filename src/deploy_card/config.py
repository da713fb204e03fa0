"""Configuration helpers for the deployment card notifier."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_SERVER_URL = "https://github.com"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_START_LAYOUT = "compact"
DEFAULT_EXIT_LAYOUT = "complete"
DEFAULT_TIMEZONE = "UTC"
DEFAULT_ALLOWED_FILE_LEN = 7
DEFAULT_VIEW_STATUS_TEXT = "View build/deploy status"
DEFAULT_REVIEW_DIFFS_TEXT = "Review commit diffs"

load_dotenv()


@dataclass(slots=True)
class Settings:
    """User-supplied options, read from ``INPUT_*`` environment variables."""

    webhook_uri: Optional[str] = None
    github_token: Optional[str] = None
    card_layout_start: str = DEFAULT_START_LAYOUT
    card_layout_exit: str = DEFAULT_EXIT_LAYOUT
    environment: str = ""
    timezone: str = DEFAULT_TIMEZONE
    include_files: bool = False
    allowed_file_len: int = DEFAULT_ALLOWED_FILE_LEN
    custom_actions: str = ""
    enable_view_status_action: bool = True
    view_status_action_text: str = DEFAULT_VIEW_STATUS_TEXT
    enable_review_diffs_action: bool = True
    review_diffs_action_text: str = DEFAULT_REVIEW_DIFFS_TEXT

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""

        return cls(
            webhook_uri=_get_input("webhook-uri") or None,
            github_token=_get_input("github-token") or os.getenv("GITHUB_TOKEN"),
            card_layout_start=_get_input("card-layout-start", DEFAULT_START_LAYOUT),
            card_layout_exit=_get_input("card-layout-exit", DEFAULT_EXIT_LAYOUT),
            environment=_get_input("environment"),
            timezone=_get_input("timezone", DEFAULT_TIMEZONE),
            include_files=_get_bool("include-files", False),
            allowed_file_len=_get_int("allowed-file-len", DEFAULT_ALLOWED_FILE_LEN),
            custom_actions=_get_input("custom-actions"),
            enable_view_status_action=_get_bool("enable-view-status-action", True),
            view_status_action_text=_get_input(
                "view-status-action-text", DEFAULT_VIEW_STATUS_TEXT
            ),
            enable_review_diffs_action=_get_bool("enable-review-diffs-action", True),
            review_diffs_action_text=_get_input(
                "review-diffs-action-text", DEFAULT_REVIEW_DIFFS_TEXT
            ),
        )

    def layout_for(self, state: str) -> str:
        """Return the layout key configured for the ``start`` or ``exit`` state."""

        return self.card_layout_start if state == "start" else self.card_layout_exit


@dataclass(frozen=True, slots=True)
class RunInfo:
    """Snapshot of the workflow run the notification is about."""

    repository: str = ""
    server_url: str = DEFAULT_SERVER_URL
    api_url: str = DEFAULT_API_URL
    ref: str = ""
    sha: Optional[str] = None
    run_id: Optional[str] = None
    run_number: Optional[str] = None
    job: Optional[str] = None
    event_name: str = ""
    before: Optional[str] = None
    after: Optional[str] = None

    @classmethod
    def from_env(cls) -> "RunInfo":
        """Create the run snapshot from the GitHub Actions environment."""

        before, after = _read_push_range(os.getenv("GITHUB_EVENT_PATH"))
        return cls(
            repository=os.getenv("GITHUB_REPOSITORY", ""),
            server_url=os.getenv("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL,
            api_url=os.getenv("GITHUB_API_URL") or DEFAULT_API_URL,
            ref=os.getenv("GITHUB_REF", ""),
            sha=os.getenv("GITHUB_SHA") or None,
            run_id=os.getenv("GITHUB_RUN_ID") or None,
            run_number=os.getenv("GITHUB_RUN_NUMBER") or None,
            job=os.getenv("GITHUB_JOB") or None,
            event_name=os.getenv("GITHUB_EVENT_NAME", ""),
            before=before,
            after=after,
        )

    @property
    def owner(self) -> str:
        return self.repository.partition("/")[0]

    @property
    def repo(self) -> str:
        return self.repository.partition("/")[2]

    @property
    def branch(self) -> str:
        return self.ref.replace("refs/heads/", "")

    @property
    def repo_url(self) -> str:
        return f"{self.server_url}/{self.repository}"

    @property
    def branch_url(self) -> str:
        return f"{self.repo_url}/tree/{self.branch}"

    @property
    def run_link(self) -> str:
        return f"{self.repo_url}/actions/runs/{self.run_id}"

    @property
    def short_sha(self) -> str:
        return (self.sha or "")[:7]

    def as_dict(self) -> dict[str, Optional[str]]:
        """Summary used when logging the run information."""

        return {
            "branch": self.branch,
            "branchUrl": self.branch_url,
            "owner": self.owner,
            "ref": self.sha,
            "repo": self.repo,
            "repoUrl": self.repo_url,
            "runId": self.run_id,
            "runLink": self.run_link,
            "runNum": self.run_number,
            "shortSha": self.short_sha,
        }


def _get_input(name: str, default: str = "") -> str:
    """Read an action option, which GitHub exposes as ``INPUT_<NAME>``."""

    value = os.getenv(f"INPUT_{name.replace(' ', '_').upper()}", "").strip()
    return value or default


def _get_bool(name: str, default: bool) -> bool:
    """Read a ``true``/``false`` option, falling back to ``default`` when unset."""

    raw_value = _get_input(name)
    if not raw_value:
        return default
    return raw_value.lower() == "true"


def _get_int(name: str, default: int) -> int:
    """Read an integer option, falling back to ``default``."""

    raw_value = _get_input(name)
    if not raw_value:
        return default
    try:
        value = int(raw_value)
    except ValueError:
        return default
    return max(0, value)


def _read_push_range(event_path: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Return the ``before``/``after`` SHAs of the triggering push event."""

    if not event_path:
        return None, None
    try:
        with open(event_path, encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, ValueError):
        return None, None
    if not isinstance(payload, dict):
        return None, None
    return payload.get("before") or None, payload.get("after") or None
