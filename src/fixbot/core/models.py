"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any Reddit-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class Correction:
    """A known grammar mistake. Lower gravity means higher priority."""

    wrong: str
    right: str
    gravity: int


@dataclass(frozen=True)
class Message:
    """Minimal comment context used by the core processing pipeline."""

    message_id: str
    author: str
    body: str
    source_id: str
    permalink: Optional[str] = None
    created: Optional[datetime] = None


@dataclass(frozen=True)
class BotProfile:
    """Settings scoped to one running bot instance."""

    bot: str
    own_name: str
    reply_template: str
    footer: str
    source_ids: Tuple[str, ...]


@dataclass(frozen=True)
class LanguageProfile:
    """Word lists and threshold used to recognise the target language."""

    diagnostic_words: FrozenSet[str]
    corrections: Tuple[Correction, ...]
    threshold_percent: float


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of running one message through the detection pipeline.

    ``correction`` is None whenever the message is not applicable; ``reason``
    records which stage stopped it.
    """

    message: Message
    reason: str
    correction: Optional[Correction] = None
    percentage: Optional[float] = None

    @property
    def applicable(self) -> bool:
        return self.correction is not None
