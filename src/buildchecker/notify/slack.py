"""Slack notifications about branch lock changes."""

from __future__ import annotations

from typing import Any

import httpx

from buildchecker.core.build import CommitInfo
from buildchecker.core.context import Context
from buildchecker.core.http import make_client, request_timeout
from buildchecker.core.log import logger
from buildchecker.core.result import CheckResults


def mention(info: CommitInfo) -> str:
    """Slack mention for the author, or the plain author string."""
    if info.author_chat_id:
        return f"<@{info.author_chat_id}>"
    return info.author or "unknown author"


def format_lock_message(
    branch: str,
    results: CheckResults,
    builds_url: str | None = None,
) -> dict[str, Any]:
    lines = [
        f":alert: *{branch} is now locked* after "
        f"{len(results.failed_commits)} consecutive failed builds.",
        "",
        "Failed commits:",
    ]
    for info in results.failed_commits:
        commit = info.commit[:12] if info.commit else "(no commit)"
        lines.append(f"• `{commit}` by {mention(info)}")
    lines.append("")
    lines.append(
        "Only the authors above and the owning team can push until a "
        "build passes."
    )
    if builds_url:
        lines.append(f"<{builds_url}|Recent builds>")

    text = "\n".join(lines)
    return {
        "text": text,
        "blocks": [
            {"type": "section", "text": {"type": "mrkdwn", "text": text}},
        ],
    }


def format_unlock_message(branch: str) -> dict[str, Any]:
    text = f":white_check_mark: *{branch} is unlocked*, builds are passing again."
    return {
        "text": text,
        "blocks": [
            {"type": "section", "text": {"type": "mrkdwn", "text": text}},
        ],
    }


class SlackNotifier:
    """Posts messages to an incoming webhook."""

    def __init__(
        self,
        webhook_url: str | None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.webhook_url = webhook_url
        self._client = make_client("", transport=transport)

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def post(self, ctx: Context, payload: dict[str, Any]) -> bool:
        """Send payload. Returns False when no webhook is configured.

        Raises:
            httpx.HTTPStatusError: If Slack rejects the message
        """
        if not self.enabled:
            logger.info(
                "No Slack webhook configured, skipping notification",
                text=payload.get("text", ""),
            )
            return False

        response = self._client.post(
            self.webhook_url, json=payload, timeout=request_timeout(ctx)
        )
        response.raise_for_status()
        return True

    def close(self):
        self._client.close()
