from __future__ import annotations

import logging
import time

from fixbot.adapters.url_logger import RECENT_LOGS, UrlLogHandler, queued


def _logger(handler: logging.Handler) -> logging.Logger:
    logger = logging.getLogger("fixbot.tests.url_logger")
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger


def test_records_are_posted_and_recent_skips_debug(monkeypatch) -> None:
    handler = UrlLogHandler(url="https://logs.invalid/api", api_key="key")
    posted: list[dict] = []
    monkeypatch.setattr(handler, "_post", posted.append)
    logger = _logger(handler)

    logger.debug("checking %s", "t1_a")
    logger.info("Reply issued to %s", "ana")

    assert [entry["message"] for entry in posted] == ["checking t1_a", "Reply issued to ana"]
    assert posted[1]["level"] == "INFO"
    assert posted[1]["logger"] == "fixbot.tests.url_logger"
    assert [entry["message"] for entry in handler.recent] == ["Reply issued to ana"]
    assert handler.last_log_at is not None


def test_handler_level_filters_records(monkeypatch) -> None:
    handler = UrlLogHandler(url="https://logs.invalid/api", api_key="key", level=logging.WARNING)
    posted: list[dict] = []
    monkeypatch.setattr(handler, "_post", posted.append)
    logger = _logger(handler)

    logger.info("quiet")
    logger.warning("loud")

    assert [entry["message"] for entry in posted] == ["loud"]


def test_recent_is_bounded(monkeypatch) -> None:
    handler = UrlLogHandler(url="https://logs.invalid/api", api_key="key")
    monkeypatch.setattr(handler, "_post", lambda entry: None)
    logger = _logger(handler)

    for index in range(RECENT_LOGS + 5):
        logger.info("entry %s", index)

    assert len(handler.recent) == RECENT_LOGS
    assert handler.recent[0]["message"] == "entry 5"


def test_post_failures_do_not_raise(monkeypatch) -> None:
    handler = UrlLogHandler(url="https://logs.invalid/api", api_key="key")
    errors: list[logging.LogRecord] = []

    def _fail(entry: dict) -> None:
        raise OSError("unreachable")

    monkeypatch.setattr(handler, "_post", _fail)
    monkeypatch.setattr(handler, "handleError", errors.append)
    logger = _logger(handler)

    logger.error("still fine")

    assert len(errors) == 1


def test_queued_handler_posts_off_the_logging_thread(monkeypatch) -> None:
    handler = UrlLogHandler(url="https://logs.invalid/api", api_key="key")
    posted: list[dict] = []

    def _slow_post(entry: dict) -> None:
        time.sleep(0.2)
        posted.append(entry)

    monkeypatch.setattr(handler, "_post", _slow_post)
    queue_handler, listener = queued(handler)
    logger = _logger(queue_handler)

    listener.start()
    started = time.monotonic()
    for index in range(4):
        logger.debug("New comment %s", index)
    elapsed = time.monotonic() - started
    listener.stop()

    assert elapsed < 0.2
    assert [entry["message"] for entry in posted] == [f"New comment {index}" for index in range(4)]


def test_queued_handler_keeps_handler_level(monkeypatch) -> None:
    handler = UrlLogHandler(url="https://logs.invalid/api", api_key="key", level=logging.WARNING)
    posted: list[dict] = []
    monkeypatch.setattr(handler, "_post", posted.append)
    queue_handler, listener = queued(handler)
    logger = _logger(queue_handler)

    listener.start()
    logger.info("quiet")
    logger.warning("loud")
    listener.stop()

    assert queue_handler.level == logging.WARNING
    assert [entry["message"] for entry in posted] == ["loud"]
