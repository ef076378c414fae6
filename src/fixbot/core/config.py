"""Core configuration builders.

Config loading lives outside the core, but these builders define the shape
the core expects and turn the raw JSON blocks into immutable profiles.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from fixbot.core.errors import ConfigurationError
from fixbot.core.models import BotProfile, Correction, LanguageProfile
from fixbot.core.normalize import normalize_word


@dataclass(frozen=True)
class MonitorConfig:
    """Polling and delivery settings for the monitor loop."""

    poll_interval_seconds: float
    backlog_limit: int
    publish_timeout_seconds: float
    seen_cache_size: int


def build_monitor_config(config: dict) -> MonitorConfig:
    monitor = config.get("monitor", {}) or {}
    return MonitorConfig(
        poll_interval_seconds=float(monitor.get("poll_interval_seconds", 30)),
        backlog_limit=int(monitor.get("backlog_limit", 100)),
        publish_timeout_seconds=float(monitor.get("publish_timeout_seconds", 15)),
        seen_cache_size=int(monitor.get("seen_cache_size", 1000)),
    )


def build_bot_profile(config: dict, bot: str) -> BotProfile:
    """Return the enabled profile registered for ``bot``.

    Raises ConfigurationError when no such profile exists or when a required
    field is missing, so the bot is never started half-configured.
    """

    for entry in config.get("bots", []) or []:
        if entry.get("bot") != bot or not entry.get("enabled", True):
            continue
        own_name = entry.get("bot_name")
        template = entry.get("default_reply_message")
        if not own_name:
            raise ConfigurationError(f"Bot {bot} has no bot_name")
        if not template:
            raise ConfigurationError(f"Bot {bot} has no default_reply_message")
        sources = tuple(name for name in entry.get("subreddits", []) or [] if name)
        if not sources:
            raise ConfigurationError(f"Bot {bot} has no subreddits to monitor")
        return BotProfile(
            bot=bot,
            own_name=own_name,
            reply_template=template,
            footer=entry.get("message_footer", "") or "",
            source_ids=sources,
        )

    raise ConfigurationError(f"No bot settings found for {bot}")


def build_corrections(raw_corrections: Iterable[dict]) -> List[Correction]:
    """Normalize correction entries, keeping their configured order."""

    corrections: List[Correction] = []
    for index, raw in enumerate(raw_corrections):
        wrong = normalize_word(str(raw.get("wrong", "")))
        right = normalize_word(str(raw.get("right", "")))
        if not wrong or not right:
            raise ConfigurationError(f"Correction #{index} needs both wrong and right words")
        try:
            gravity = int(raw.get("gravity", 0))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Correction {wrong!r} has a non-integer gravity") from exc
        corrections.append(Correction(wrong=wrong, right=right, gravity=gravity))
    return corrections


def build_language_profile(config: dict) -> LanguageProfile:
    section = config.get("language_detection")
    if not section:
        raise ConfigurationError("language_detection settings are missing")

    words = frozenset(
        normalize_word(word) for word in section.get("words_to_detect_language", []) if normalize_word(word)
    )
    corrections = build_corrections(section.get("words_to_correct", []) or [])
    if not corrections:
        raise ConfigurationError("language_detection.words_to_correct is empty")

    try:
        threshold = float(section.get("language_detection_percentage"))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("language_detection_percentage must be a number") from exc
    if not 0 <= threshold < 100:
        raise ConfigurationError("language_detection_percentage must be within [0, 100)")

    return LanguageProfile(
        diagnostic_words=words,
        corrections=tuple(corrections),
        threshold_percent=threshold,
    )
