"""Slack incoming-webhook notifications about sync runs."""

from __future__ import annotations

import logging
import socket
import time

import httpx

logger = logging.getLogger(__name__)

TITLE = "Claude Config Sync"
COLOR_OK = "#36a64f"
COLOR_INFO = "#439FE0"
COLOR_ERROR = "#d00000"
TIMEOUT_SECONDS = 10.0


def build_payload(message: str, color: str = COLOR_OK, host: str | None = None, ts: int | None = None) -> dict:
    return {
        "attachments": [
            {
                "color": color,
                "title": TITLE,
                "text": message,
                "footer": host or socket.gethostname(),
                "ts": ts if ts is not None else int(time.time()),
            }
        ]
    }


def notify(webhook_url: str | None, message: str, color: str = COLOR_OK) -> bool:
    """Post ``message`` to the webhook. Never raises; returns whether it was delivered."""
    if not webhook_url:
        return False

    try:
        response = httpx.post(webhook_url, json=build_payload(message, color), timeout=TIMEOUT_SECONDS)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("Slack notification failed: %s", e)
        return False
    logger.debug("Slack notification sent: %s", message.splitlines()[0] if message else "")
    return True
