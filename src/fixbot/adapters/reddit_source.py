"""Polling comment source for Reddit.

Implements the core CommentSource port by reading the newest comments of a
subreddit on a fixed interval and yielding only the ones not seen before.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import AsyncIterator, Dict, List

from fixbot.adapters.reddit_api import RedditApi, RedditApiError
from fixbot.adapters.reddit_mapper import messages_from_listing
from fixbot.core.models import Message

LOGGER = logging.getLogger(__name__)


class _SeenCache:
    """Bounded set of comment ids, forgetting the oldest first."""

    def __init__(self, size: int) -> None:
        self._size = size
        self._ids: "OrderedDict[str, None]" = OrderedDict()

    def __contains__(self, message_id: str) -> bool:
        return message_id in self._ids

    def add(self, message_id: str) -> None:
        self._ids[message_id] = None
        self._ids.move_to_end(message_id)
        while len(self._ids) > self._size:
            self._ids.popitem(last=False)


class RedditCommentSource:
    """CommentSource backed by the Reddit listing API."""

    def __init__(
        self,
        api: RedditApi,
        poll_interval: float = 30.0,
        backlog_limit: int = 100,
        seen_cache_size: int = 1000,
    ) -> None:
        self._api = api
        self._poll_interval = poll_interval
        self._limit = backlog_limit
        self._seen_cache_size = seen_cache_size
        self._seen: Dict[str, _SeenCache] = {}

    def _cache(self, source_id: str) -> _SeenCache:
        key = source_id.lower()
        if key not in self._seen:
            self._seen[key] = _SeenCache(self._seen_cache_size)
        return self._seen[key]

    async def _fetch(self, source_id: str) -> List[Message]:
        payload = await asyncio.to_thread(self._api.get_new_comments, source_id, self._limit)
        return messages_from_listing(payload)

    def _unseen(self, source_id: str, messages: List[Message]) -> List[Message]:
        cache = self._cache(source_id)
        fresh: List[Message] = []
        for message in messages:
            if message.message_id in cache:
                continue
            cache.add(message.message_id)
            fresh.append(message)
        return fresh

    async def fetch_backlog(self, source_id: str) -> List[Message]:
        """Read the currently visible comments and mark them as seen."""

        return self._unseen(source_id, await self._fetch(source_id))

    async def subscribe(self, source_id: str) -> AsyncIterator[List[Message]]:
        """Yield batches of new comments, oldest first, until cancelled."""

        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                messages = await self._fetch(source_id)
            except RedditApiError as exc:
                LOGGER.warning("Polling r/%s failed, retrying next tick: %s", source_id, exc)
                continue
            except (OSError, ValueError):
                LOGGER.exception("Polling r/%s failed, retrying next tick", source_id)
                continue
            batch = self._unseen(source_id, messages)
            if batch:
                yield batch
