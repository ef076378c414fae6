"""Telegram Bot API notification adapter.

Sends a short report to a bot chat every time a reply was issued.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.request

from fixbot.adapters.notification_formatting import format_notification
from fixbot.core.models import DetectionResult


class TelegramBotNotifier:
    """Notifier adapter that sends messages via the Telegram Bot API."""

    def __init__(self, bot_token: str, chat_id: str, source_aliases: dict[str, str], timeout: float = 10.0) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._source_aliases = source_aliases
        self._timeout = timeout

    def _endpoint(self) -> str:
        # The Bot API endpoint is deterministic and derived from the token.
        return f"https://api.telegram.org/bot{self._bot_token}/sendMessage"

    def build_payload(self, result: DetectionResult, reply_text: str) -> dict:
        return {
            "chat_id": self._chat_id,
            "text": format_notification(result, reply_text, self._source_aliases),
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }

    def _post(self, payload: dict) -> None:
        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(self._endpoint(), data=data, method="POST")
        request.add_header("Content-Type", "application/json")
        try:
            with urllib.request.urlopen(request, timeout=self._timeout):
                pass
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Bot API error {e.code}: {body}") from e

    async def send(self, result: DetectionResult, reply_text: str) -> None:
        """Send the formatted notification via the Bot API."""

        await asyncio.to_thread(self._post, self.build_payload(result, reply_text))
