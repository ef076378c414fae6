"""Monitor loop: one task per configured source.

Each source is read independently. Within a source, batches are handled one
after another and every message runs through the processor, including the
publish call, before the next batch is pulled.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List

from fixbot.core.models import BotProfile, Message
from fixbot.core.ports import CommentSource
from fixbot.core.processor import CommentProcessor

LOGGER = logging.getLogger(__name__)


# Seconds to wait before re-subscribing to a source whose subscription failed.
RESTART_DELAY = 30.0


class Monitor:
    """Subscribes to every source of a bot profile and dispatches new comments."""

    def __init__(
        self,
        profile: BotProfile,
        source: CommentSource,
        processor: CommentProcessor,
        restart_delay: float = RESTART_DELAY,
    ) -> None:
        self._profile = profile
        self._source = source
        self._processor = processor
        self._restart_delay = restart_delay
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks.values())

    def start(self) -> List[asyncio.Task]:
        """Create one monitoring task per source id. Must run inside a loop."""

        for source_id in self._profile.source_ids:
            if source_id in self._tasks and not self._tasks[source_id].done():
                continue
            self._tasks[source_id] = asyncio.create_task(
                self._monitor_source(source_id),
                name=f"monitor:{source_id}",
            )
        return list(self._tasks.values())

    async def run(self) -> None:
        """Start monitoring and wait until every source task ends or is cancelled."""

        tasks = self.start()
        LOGGER.info("Started %s watching %s source(s)", self._profile.own_name, len(tasks))
        try:
            # One source ending with an error must not cancel the others.
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for task, result in zip(tasks, results):
                if isinstance(result, Exception):
                    LOGGER.error("Monitoring task %s ended: %r", task.get_name(), result)
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Stop accepting batches: cancel every source task and wait for it."""

        tasks = [task for task in self._tasks.values() if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    async def _monitor_source(self, source_id: str) -> None:
        # The backlog only establishes the cursor; it is never corrected.
        try:
            backlog = await self._source.fetch_backlog(source_id)
            LOGGER.debug("Skipped backlog of %s comments in r/%s", len(backlog), source_id)
        except asyncio.CancelledError:
            raise
        except Exception:
            LOGGER.exception("Failed to read backlog of r/%s", source_id)

        LOGGER.info("Started monitoring r/%s", source_id)
        while True:
            try:
                async for batch in self._source.subscribe(source_id):
                    await self._dispatch(source_id, batch)
                return
            except asyncio.CancelledError:
                raise
            except Exception:
                LOGGER.exception(
                    "Subscription to r/%s failed, restarting in %ss", source_id, self._restart_delay
                )
            await asyncio.sleep(self._restart_delay)

    async def _dispatch(self, source_id: str, batch: List[Message]) -> None:
        for message in batch:
            LOGGER.debug("New comment detected of u/%s in r/%s", message.author, source_id)
            try:
                await self._processor.handle(message)
            except asyncio.CancelledError:
                raise
            except Exception:
                LOGGER.exception("Error while processing comment %s", message.message_id)
