"""Reddit reply publisher implementing the core Publisher port."""

from __future__ import annotations

import asyncio

from fixbot.adapters.reddit_api import RedditApi
from fixbot.core.models import Message


class RedditPublisher:
    """Posts replies as comments under the original comment."""

    def __init__(self, api: RedditApi) -> None:
        self._api = api

    async def reply(self, message: Message, text: str) -> None:
        await asyncio.to_thread(self._api.post_comment, message.message_id, text)
