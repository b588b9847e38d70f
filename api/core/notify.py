"""
Outbound notification delivery (password-reset messages).

- NOTIFY_WEBHOOK_URL set:   POST {"to", "subject", "body"} as JSON to that URL
- NOTIFY_WEBHOOK_URL unset: write the message to the application log

A failed delivery raises NotifyError; the caller decides what to roll back.
"""

from __future__ import annotations

import logging
import os
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)


class NotifyError(RuntimeError):
    pass


class Notifier(Protocol):
    async def send(self, *, to: str, subject: str, body: str) -> None:
        ...


def webhook_url() -> str:
    return os.environ.get("NOTIFY_WEBHOOK_URL", "").strip()


def webhook_timeout_s() -> float:
    raw = os.environ.get("NOTIFY_TIMEOUT_S", "").strip()
    try:
        return float(raw) if raw else 10.0
    except ValueError:
        return 10.0


class WebhookNotifier:
    def __init__(self, url: str, *, timeout_s: float = 10.0) -> None:
        url = (url or "").strip()
        if not url:
            raise NotifyError("Webhook URL is empty.")
        self.url = url
        self.timeout_s = timeout_s

    async def send(self, *, to: str, subject: str, body: str) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                resp = await client.post(self.url, json={"to": to, "subject": subject, "body": body})
        except httpx.HTTPError as exc:
            raise NotifyError(f"Notification request failed: {exc}") from exc

        if resp.status_code >= 300:
            # Avoid dumping huge bodies; include a small snippet.
            raise NotifyError(f"Notification request failed: {resp.status_code} {resp.text[:300]}")


class LogNotifier:
    async def send(self, *, to: str, subject: str, body: str) -> None:
        logger.info("notification to=%s subject=%s body=%r", to, subject, body)


def default_notifier() -> Notifier:
    url = webhook_url()
    if url:
        return WebhookNotifier(url, timeout_s=webhook_timeout_s())
    return LogNotifier()
