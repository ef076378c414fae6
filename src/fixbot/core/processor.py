"""Core comment processing pipeline.

This module is platform-agnostic. It only relies on ports for publishing and
notifications, enabling other comment platforms without changes here.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fixbot.core.errors import PublishError, PublishErrorKind
from fixbot.core.language import check_language, format_percentage
from fixbot.core.models import BotProfile, DetectionResult, LanguageProfile, Message
from fixbot.core.normalize import tokenize
from fixbot.core.ports import NotifierPort, Publisher
from fixbot.core.reply import compose_reply
from fixbot.core.selector import select_mistake

LOGGER = logging.getLogger(__name__)

# Messages with this many tokens or fewer are too short to classify.
MIN_TOKENS = 2


class CommentProcessor:
    """Orchestrates detection, reply composition, publishing and notification."""

    def __init__(
        self,
        profile: BotProfile,
        language: LanguageProfile,
        publisher: Publisher,
        notifier: Optional[NotifierPort] = None,
        publish_timeout: float = 15.0,
    ) -> None:
        self._profile = profile
        self._language = language
        self._publisher = publisher
        self._notifier = notifier
        self._publish_timeout = publish_timeout

    def detect(self, message: Message) -> DetectionResult:
        """Run the detection stages for one message without side effects."""

        if message.author.casefold() == self._profile.own_name.casefold():
            return DetectionResult(message=message, reason="own_message")

        tokens = tokenize(message.body)
        if len(tokens) <= MIN_TOKENS:
            return DetectionResult(message=message, reason="too_short")

        language = self._language
        passed, percentage = check_language(
            tokens, language.diagnostic_words, language.corrections, language.threshold_percent
        )
        if not passed:
            return DetectionResult(message=message, reason="language", percentage=percentage)

        LOGGER.debug(
            "Language detected with %s%% of %s words in r/%s, checking for grammar mistakes",
            format_percentage(percentage),
            len(tokens),
            message.source_id,
        )

        mistake = select_mistake(tokens, language.corrections)
        if mistake is None:
            LOGGER.debug("No grammar mistake found in %s", message.message_id)
            return DetectionResult(message=message, reason="no_mistake", percentage=percentage)

        LOGGER.debug("Grammar mistake found in %s: %s", message.message_id, mistake.wrong)
        return DetectionResult(message=message, reason="mistake", correction=mistake, percentage=percentage)

    def compose(self, result: DetectionResult) -> str:
        profile = self._profile
        return compose_reply(profile.reply_template, result.message.author, result.correction, profile.footer)

    async def handle(self, message: Message) -> Optional[str]:
        """Process one message; return the reply text when a reply was issued."""

        result = self.detect(message)
        if not result.applicable:
            return None

        reply_text = self.compose(result)
        try:
            await asyncio.wait_for(self._publisher.reply(message, reply_text), timeout=self._publish_timeout)
        except asyncio.TimeoutError:
            LOGGER.warning(
                "Reply to u/%s in r/%s dropped: %s",
                message.author,
                message.source_id,
                PublishError(PublishErrorKind.TIMEOUT, f"no answer within {self._publish_timeout}s"),
            )
            return None
        except PublishError as exc:
            LOGGER.warning("Reply to u/%s in r/%s dropped: %s", message.author, message.source_id, exc)
            return None

        LOGGER.info("Reply issued to u/%s in r/%s: %s", message.author, message.source_id, reply_text)

        if self._notifier is not None:
            try:
                await self._notifier.send(result, reply_text)
            except Exception:
                LOGGER.exception("Failed to send reply notification for %s", message.message_id)

        return reply_text
