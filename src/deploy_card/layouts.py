"""Card layouts: which facts, images and links a notification carries."""

from __future__ import annotations

import enum
import logging
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from .config import RunInfo, Settings
from .github import ChangedFile, Commit
from .markdown import escape_markdown_tokens
from .models import CardSection, ChangelogItem, Fact, PotentialAction, WebhookBody

LOGGER = logging.getLogger(__name__)

CONCLUSION_THEMES: Dict[str, str] = {
    "success": "2cbe4e",
    "cancelled": "ffc107",
    "failure": "cb2431",
}
DEFAULT_THEME_COLOR = "957DAD"
OCTOCAT_LOGO_URL = "https://github.githubassets.com/images/modules/logos_page/Octocat.png"

_URL_PATTERN = re.compile(r"https?://\S+")


class UnknownLayoutError(ValueError):
    """Raised when the configured layout key matches no layout."""


class Layout(str, enum.Enum):
    COMPACT = "compact"
    COZY = "cozy"
    COMPLETE = "complete"
    CHANGELOG = "changelog"

    @classmethod
    def parse(cls, key: str) -> "Layout":
        try:
            return cls(key)
        except ValueError:
            raise UnknownLayoutError(f"Invalid card layout: {key}") from None


def theme_color(conclusion: str) -> str:
    """Return the hex colour for a run conclusion."""

    return CONCLUSION_THEMES.get(conclusion, DEFAULT_THEME_COLOR)


def status_labels(
    conclusion: str, elapsed_seconds: Optional[int], environment: str = ""
) -> str:
    """Build the inline-code status label, e.g. ``SUCCESS [42s]`` ``ENV:PROD``."""

    status = conclusion.upper()
    if elapsed_seconds:
        status = f"{status} [{elapsed_seconds}s]"
    labels = f"`{status}`"
    if environment.strip():
        labels += f" `ENV:{environment.strip().upper()}`"
    return labels


def parse_custom_actions(raw: str) -> List[PotentialAction]:
    """Parse the YAML ``custom-actions`` option into actions.

    Entries without text or without an http(s) URL are skipped. A value that
    is not valid YAML is reported as a warning and yields no actions.
    """

    if not raw or raw.strip().lower() == "null":
        return []
    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError:
        LOGGER.warning("Invalid custom-actions value.")
        return []

    if not isinstance(parsed, list):
        LOGGER.warning("Invalid custom-actions value.")
        return []

    actions: List[PotentialAction] = []
    for item in parsed:
        if not isinstance(item, dict):
            continue
        text, url = item.get("text"), item.get("url")
        if text is None or url is None or not _URL_PATTERN.search(str(url)):
            continue
        actions.append(PotentialAction(str(text), (str(url),)))
    LOGGER.info("Added %d custom actions.", len(actions))
    return actions


def render_actions(status_url: str, diff_url: str, settings: Settings) -> List[PotentialAction]:
    """Default actions enabled by configuration followed by custom actions."""

    actions: List[PotentialAction] = []
    if settings.enable_view_status_action:
        actions.append(PotentialAction(settings.view_status_action_text, (status_url,)))
    if settings.enable_review_diffs_action:
        actions.append(PotentialAction(settings.review_diffs_action_text, (diff_url,)))
    actions.extend(parse_custom_actions(settings.custom_actions))
    return actions


def format_timestamp(timezone: str, now: Optional[datetime] = None) -> str:
    """Human readable time such as ``Monday, March 4th 2024, 1:05:09 pm UTC``."""

    try:
        zone = ZoneInfo(timezone or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        zone = ZoneInfo("UTC")
    moment = (now or datetime.now(zone)).astimezone(zone)
    hour = moment.hour % 12 or 12
    meridiem = "am" if moment.hour < 12 else "pm"
    return (
        f"{moment:%A, %B} {moment.day}{_ordinal_suffix(moment.day)} {moment.year}, "
        f"{hour}:{moment:%M:%S} {meridiem} {moment.tzname()}"
    )


def _ordinal_suffix(day: int) -> str:
    if day in (1, 21, 31):
        return "st"
    if day in (2, 22):
        return "nd"
    if day in (3, 23):
        return "rd"
    return "th"


def build_section(
    commit: Commit,
    conclusion: str,
    elapsed_seconds: Optional[int],
    run: RunInfo,
    settings: Settings,
    now: Optional[datetime] = None,
    actions: Optional[List[PotentialAction]] = None,
) -> CardSection:
    """Common section skeleton every detailed layout starts from."""

    author = commit.author
    labels = status_labels(conclusion, elapsed_seconds)
    timestamp = format_timestamp(settings.timezone, now)
    if actions is None:
        actions = render_actions(run.run_link, commit.html_url, settings)

    facts = [
        Fact("Event type:", f"`{run.event_name.upper()}`"),
        Fact("Status:", labels),
        Fact("Commit message:", escape_markdown_tokens(commit.message)),
        Fact("Repository & branch:", f"[{run.branch_url}]({run.branch_url})"),
    ]
    if settings.environment.strip():
        facts.insert(1, Fact("Environment:", f"`{settings.environment.strip().upper()}`"))

    activity_text = status_labels(conclusion, elapsed_seconds, settings.environment)
    activity_text += "".join(
        f" &nbsp; &nbsp; [{action.name}]({action.url})" for action in actions
    )

    return CardSection(
        activity_title=(
            f"**CI #{run.run_number} (commit [{run.short_sha}]({commit.html_url}))** "
            f"on [{run.repository}]({run.repo_url})"
        ),
        activity_subtitle=(
            f"by [@{author.login}]({author.html_url}) on {timestamp}" if author else timestamp
        ),
        activity_image=(author.avatar_url if author and author.avatar_url else OCTOCAT_LOGO_URL),
        activity_text=activity_text,
        facts=facts,
        potential_action=actions,
    )


def format_compact_layout(
    commit: Commit,
    conclusion: str,
    elapsed_seconds: Optional[int] = None,
    *,
    run: RunInfo,
    settings: Settings,
    **_: Any,
) -> WebhookBody:
    """Single line card: status label, run, commit, repository and author."""

    labels = status_labels(conclusion, elapsed_seconds, settings.environment)
    text = (
        f"{labels} &nbsp; CI [#{run.run_number}]({run.run_link}) "
        f"(commit [{run.short_sha}]({commit.html_url})) on [{run.repository}]({run.repo_url})"
    )
    if commit.author:
        text += f" by [@{commit.author.login}]({commit.author.html_url})"
    return WebhookBody(text=text, theme_color=theme_color(conclusion))


def format_cozy_layout(
    commit: Commit,
    conclusion: str,
    elapsed_seconds: Optional[int] = None,
    *,
    run: RunInfo,
    settings: Settings,
    now: Optional[datetime] = None,
    **_: Any,
) -> WebhookBody:
    section = build_section(commit, conclusion, elapsed_seconds, run, settings, now)
    return WebhookBody(theme_color=theme_color(conclusion), sections=[section])


def format_files_to_display(
    files: Sequence[ChangedFile], allowed_length: int, html_url: str
) -> str:
    """Markdown bullet list of changed files, capped at ``allowed_length``."""

    if not files:
        return "*No files changed.*"
    lines = [
        f"[{escape_markdown_tokens(item.filename)}]({item.blob_url}) ({item.changes} changes)"
        for item in files[:allowed_length]
    ]
    remaining = len(files) - allowed_length
    if remaining > 0:
        lines.append(f"[and {remaining} more files changed]({html_url})")
    return "* " + "\n\n* ".join(lines)


def format_complete_layout(
    commit: Commit,
    conclusion: str,
    elapsed_seconds: Optional[int] = None,
    *,
    run: RunInfo,
    settings: Settings,
    now: Optional[datetime] = None,
    **_: Any,
) -> WebhookBody:
    """Detailed card: facts, status/diff actions and optionally changed files."""

    actions = [
        PotentialAction(settings.view_status_action_text, (run.run_link,)),
        PotentialAction(settings.review_diffs_action_text, (commit.html_url,)),
    ]
    section = build_section(
        commit, conclusion, elapsed_seconds, run, settings, now, actions=actions
    )
    section.activity_text = None
    if settings.include_files:
        section.facts = (section.facts or []) + [
            Fact(
                "Files changed:",
                format_files_to_display(commit.files, settings.allowed_file_len, commit.html_url),
            )
        ]
    return WebhookBody(theme_color=theme_color(conclusion), sections=[section])


def split_commit_message(message: str) -> tuple[str, str]:
    """Split a commit message into its title and the blank-line separated body."""

    title, *paragraphs = message.split("\n\n")
    return title, "\n\n".join(paragraphs)


def format_changelog_layout(
    commit: Commit,
    conclusion: str,
    elapsed_seconds: Optional[int] = None,
    *,
    run: RunInfo,
    settings: Settings,
    commits: Optional[Sequence[Commit]] = None,
    now: Optional[datetime] = None,
    **_: Any,
) -> WebhookBody:
    """One changelog entry per commit of the pushed range."""

    section = build_section(commit, conclusion, elapsed_seconds, run, settings, now)
    section.activity_text = None
    section.facts = []
    section.changelog = []
    for item in commits or []:
        title, description = split_commit_message(item.message)
        section.changelog.append(ChangelogItem(title, item.sha[:7], description))
    return WebhookBody(theme_color=theme_color(conclusion), sections=[section])


LayoutFormatter = Callable[..., WebhookBody]

LAYOUT_FORMATTERS: Dict[Layout, LayoutFormatter] = {
    Layout.COMPACT: format_compact_layout,
    Layout.COZY: format_cozy_layout,
    Layout.COMPLETE: format_complete_layout,
    Layout.CHANGELOG: format_changelog_layout,
}


def format_layout(
    layout: Layout,
    commit: Commit,
    conclusion: str,
    elapsed_seconds: Optional[int] = None,
    **kwargs: Any,
) -> WebhookBody:
    """Invoke the formatter registered for ``layout``."""

    try:
        formatter = LAYOUT_FORMATTERS[layout]
    except KeyError:
        raise UnknownLayoutError(f"Invalid card layout: {layout}") from None
    return formatter(commit, conclusion, elapsed_seconds, **kwargs)
