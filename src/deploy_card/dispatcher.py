"""Selects a layout, renders the card and delivers it."""

from __future__ import annotations

import json
import logging
from typing import List, Optional

import requests

from . import layouts, notifier, serializer
from .config import RunInfo, Settings
from .github import Commit, GitHubClient

LOGGER = logging.getLogger(__name__)

WEBHOOK_BODY_OUTPUT = "webhook-body"


def format_and_notify(
    state: str,
    conclusion: str = "in_progress",
    elapsed_seconds: Optional[int] = None,
    *,
    settings: Settings,
    run: RunInfo,
    client: GitHubClient,
    session: Optional[requests.Session] = None,
) -> Optional[str]:
    """Render the card for ``state`` and post it.

    Returns the serialized payload when it was delivered, ``None`` when there
    was nothing to send or delivery failed. Raises
    :class:`layouts.UnknownLayoutError` for an unrecognized layout key.
    """

    layout = layouts.Layout.parse(settings.layout_for(state))
    LOGGER.info("Workflow run information: %s", json.dumps(run.as_dict(), indent=2))
    commit = client.get_commit(run.owner, run.repo, run.sha or "")

    commits: List[Commit] = []
    if layout is layouts.Layout.CHANGELOG:
        commits = client.compare_commits(run.owner, run.repo, run.before, run.after)
        if not commits:
            LOGGER.info("No commits found")
            return None

    webhook_body = layouts.format_layout(
        layout,
        commit,
        conclusion,
        elapsed_seconds,
        run=run,
        settings=settings,
        commits=commits,
    )
    payload = serializer.serialize(webhook_body)

    try:
        notifier.submit_notification(payload, settings.webhook_uri, session=session)
    except notifier.NotificationError as exc:
        LOGGER.error("Failed to deliver notification: %s", exc)
        return None

    notifier.set_output(WEBHOOK_BODY_OUTPUT, payload)
    LOGGER.info(payload)
    return payload
