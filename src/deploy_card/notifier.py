"""Delivery of serialized cards to the chat webhook."""

from __future__ import annotations

import os
import uuid
from typing import Optional

import requests


class NotificationError(RuntimeError):
    """Raised when the webhook call fails."""


def submit_notification(
    payload: str,
    webhook_url: Optional[str],
    session: Optional[requests.Session] = None,
    timeout: int = 10,
) -> requests.Response:
    """POST the JSON payload to the configured webhook."""

    if not webhook_url:
        raise NotificationError("Webhook URL is not configured")

    sender = session or requests
    try:
        response = sender.post(
            webhook_url,
            data=payload.encode("utf-8"),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise NotificationError(f"Failed to send notification: {exc}") from exc
    if response.status_code >= 300:
        raise NotificationError(
            f"Failed to send notification: {response.status_code} {response.text}"
        )
    return response


def set_output(name: str, value: str, output_path: Optional[str] = None) -> None:
    """Expose ``value`` as a step output through the ``GITHUB_OUTPUT`` file."""

    path = output_path or os.getenv("GITHUB_OUTPUT")
    if not path:
        return
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
