"""Shared notification formatting helpers.

Keeping formatting here prevents drift between adapters and keeps messages
consistent regardless of delivery channel.
"""

from __future__ import annotations

import html

from fixbot.core.language import format_percentage
from fixbot.core.models import DetectionResult

DIVIDER = "──────────────"


def format_source_label(source_id: str, source_aliases: dict[str, str]) -> str:
    """Return a human-friendly source label, using configured aliases."""

    label = f"r/{source_id}"
    alias = source_aliases.get(source_id) or source_aliases.get(source_id.lower())
    if not alias:
        return label
    return f"{alias} ({label})"


def _timestamp(result: DetectionResult) -> str:
    if result.message.created is None:
        return ""
    return result.message.created.astimezone().strftime("%H:%M:%S %d-%m-%Y").strip()


def _percentage(result: DetectionResult) -> str:
    if result.percentage is None:
        return "-"
    return f"{format_percentage(result.percentage)}%"


def _format_html(result: DetectionResult, reply_text: str, source_aliases: dict[str, str]) -> str:
    """Create the HTML notification body used by the Bot API adapter."""

    message = result.message
    correction = result.correction
    parts = [
        f"[{html.escape(_timestamp(result))}]",
        f"<b>Author:</b> u/{html.escape(message.author)}",
        f"<b>Source:</b> {html.escape(format_source_label(message.source_id, source_aliases))}",
        f"<b>Mistake:</b> {html.escape(correction.wrong)} → {html.escape(correction.right)}",
        f"<b>Language:</b> {html.escape(_percentage(result))}",
        DIVIDER,
        "",
        html.escape(message.body),
        "",
        "<b>Reply:</b>",
        html.escape(reply_text),
    ]
    if message.permalink:
        safe_link = html.escape(message.permalink)
        parts.extend(["", "<b>Link:</b>", f"<a href=\"{safe_link}\">{safe_link}</a>"])
    parts.append(DIVIDER)
    return "\n".join(parts)


def format_notification(result: DetectionResult, reply_text: str, source_aliases: dict[str, str]) -> str:
    """Return the HTML reply notification used by the Bot API adapter."""

    if result.correction is None:
        raise ValueError("Only detections with a correction can be notified")
    return _format_html(result, reply_text, source_aliases)
