"""Reddit-to-core message mapping adapter.

This keeps Reddit JSON details out of the core pipeline.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from fixbot.core.models import Message

REDDIT_BASE_URL = "https://www.reddit.com"


def message_from_listing_child(child: dict) -> Optional[Message]:
    """Build a Message from one ``t1`` entry of a Reddit listing."""

    if child.get("kind") != "t1":
        return None
    data = child.get("data") or {}

    fullname = data.get("name") or (f"t1_{data['id']}" if data.get("id") else None)
    if not fullname:
        return None

    permalink = data.get("permalink")
    if permalink and permalink.startswith("/"):
        permalink = f"{REDDIT_BASE_URL}{permalink}"

    created = None
    created_utc = data.get("created_utc")
    if created_utc is not None:
        created = datetime.fromtimestamp(float(created_utc), tz=timezone.utc)

    return Message(
        message_id=fullname,
        # Deleted accounts show up as "[deleted]"; keep the literal value.
        author=data.get("author") or "[deleted]",
        body=data.get("body") or "",
        source_id=data.get("subreddit") or "",
        permalink=permalink,
        created=created,
    )


def messages_from_listing(payload: dict) -> List[Message]:
    """Return the comments of a listing, oldest first.

    Reddit lists newest first; the monitor needs delivery order.
    """

    children = (payload.get("data") or {}).get("children") or []
    messages = [message_from_listing_child(child) for child in children]
    return [message for message in reversed(messages) if message is not None]
