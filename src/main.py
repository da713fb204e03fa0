"""Entry point posting a deployment card for the current workflow run."""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from deploy_card import config, dispatcher, github, layouts

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
LOGGER = logging.getLogger(__name__)


def run_notification(state: str, settings: config.Settings, run: config.RunInfo) -> Optional[str]:
    """Collect the run outcome for ``state`` and send the notification."""

    client = github.GitHubClient(settings.github_token, run.api_url)
    if state == "start":
        return dispatcher.format_and_notify(
            "start", "in_progress", settings=settings, run=run, client=client
        )

    status = client.get_workflow_run_status(run)
    return dispatcher.format_and_notify(
        "exit",
        status.conclusion or "in_progress",
        status.elapsed_seconds,
        settings=settings,
        run=run,
        client=client,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    state = args[0] if args else "exit"
    if state not in ("start", "exit"):
        LOGGER.error("Unknown state %r, expected 'start' or 'exit'", state)
        return 2

    settings = config.Settings.from_env()
    run = config.RunInfo.from_env()
    try:
        run_notification(state, settings, run)
    except (layouts.UnknownLayoutError, github.GitHubError) as exc:
        LOGGER.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    sys.exit(main())
