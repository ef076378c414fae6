"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for comment sources, reply publishers and
notification adapters so that the core can be reused with different
platforms.
"""

from __future__ import annotations

from typing import AsyncIterator, List, Protocol

from fixbot.core.models import DetectionResult, Message


class CommentSource(Protocol):
    """Delivers comments for a source id, in order, batch by batch."""

    async def fetch_backlog(self, source_id: str) -> List[Message]:
        ...

    def subscribe(self, source_id: str) -> AsyncIterator[List[Message]]:
        ...


class Publisher(Protocol):
    """Sends reply text under the original message. Raises PublishError."""

    async def reply(self, message: Message, text: str) -> None:
        ...


class NotifierPort(Protocol):
    """Notification operations for issued replies."""

    async def send(self, result: DetectionResult, reply_text: str) -> None:
        ...
