"""Remote log sink.

Forwards log records as JSON to an HTTP endpoint guarded by an API key, and
keeps the most recent entries plus the time of the last one for status
views.
"""

from __future__ import annotations

import json
import logging
import queue
import urllib.request
from collections import deque
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
from typing import Deque, Optional, Tuple

# Number of entries kept in ``UrlLogHandler.recent``.
RECENT_LOGS = 50


def build_log_entry(record: logging.LogRecord, message: str) -> dict:
    return {
        "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "message": message,
    }


class UrlLogHandler(logging.Handler):
    """POST every record at or above ``level`` to ``url``."""

    def __init__(self, url: str, api_key: str, level: int = logging.DEBUG, timeout: float = 5.0) -> None:
        super().__init__(level=level)
        self._url = url
        self._api_key = api_key
        self._timeout = timeout
        self.recent: Deque[dict] = deque(maxlen=RECENT_LOGS)
        self.last_log_at: Optional[datetime] = None

    def _post(self, entry: dict) -> None:
        data = json.dumps(entry).encode("utf-8")
        request = urllib.request.Request(self._url, data=data, method="POST")
        request.add_header("Content-Type", "application/json")
        request.add_header("X-Api-Key", self._api_key)
        with urllib.request.urlopen(request, timeout=self._timeout):
            pass

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = build_log_entry(record, self.format(record))
            self.last_log_at = datetime.now(timezone.utc)
            # Debug chatter is forwarded but not kept in the recent list.
            if record.levelno > logging.DEBUG:
                self.recent.append(entry)
            self._post(entry)
        except Exception:
            self.handleError(record)


def queued(handler: logging.Handler) -> Tuple[QueueHandler, QueueListener]:
    """Wrap ``handler`` so records are posted from a listener thread.

    The caller starts the listener and must stop it at shutdown to flush
    pending records.
    """

    records: "queue.Queue[logging.LogRecord]" = queue.Queue(-1)
    queue_handler = QueueHandler(records)
    queue_handler.setLevel(handler.level)
    listener = QueueListener(records, handler, respect_handler_level=True)
    return queue_handler, listener
