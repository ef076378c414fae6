"""Application entry point for the fixbot watcher."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import QueueListener, RotatingFileHandler
from typing import Optional

from art import tprint

from fixbot import settings
from fixbot.adapters.reddit_api import RedditApi
from fixbot.adapters.reddit_publisher import RedditPublisher
from fixbot.adapters.reddit_source import RedditCommentSource
from fixbot.adapters.telegram_bot_notifier import TelegramBotNotifier
from fixbot.adapters.url_logger import UrlLogHandler, queued
from fixbot.core.config import build_bot_profile, build_language_profile, build_monitor_config
from fixbot.core.errors import ConfigurationError
from fixbot.core.language import format_percentage
from fixbot.core.models import Message
from fixbot.core.monitor import Monitor
from fixbot.core.processor import CommentProcessor

NAME = "FIXBOT"
FONT = "tarty-1"

# Exit code used when a bot profile cannot be built.
EXIT_CONFIGURATION = 2

_LEVEL_ALIASES = {"TRACE": logging.DEBUG, "WARN": logging.WARNING}


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _resolve_level(name: object, default: int = logging.INFO) -> int:
    level_name = str(name or "").upper()
    if level_name in _LEVEL_ALIASES:
        return _LEVEL_ALIASES[level_name]
    return getattr(logging, level_name, default)


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _require_url(url_cfg: dict) -> str:
    url = url_cfg.get("url")
    if not url:
        raise ConfigurationError("url_logger.url is required when url_logger is enabled")
    return url


def _configure_logging(config: dict) -> Optional[QueueListener]:
    logging_cfg = config.get("logging", {}) or {}
    if not logging_cfg.get("enabled", False):
        return None

    level = _resolve_level(logging_cfg.get("level", "INFO"))

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(logging_cfg)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if logging_cfg.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = logging_cfg.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/fixbot.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    listener: Optional[QueueListener] = None
    url_cfg = config.get("url_logger", {}) or {}
    if url_cfg.get("enabled", False):
        url_handler = UrlLogHandler(
            url=_require_url(url_cfg),
            api_key=settings.require_env(settings.URL_LOGGER_API_KEY),
            level=_resolve_level(url_cfg.get("level", "DEBUG"), logging.DEBUG),
        )
        url_handler.setFormatter(_RedactingFormatter(secrets, fmt="%(message)s"))
        # POSTs run on the listener thread so logging never blocks the event loop.
        queue_handler, listener = queued(url_handler)
        handlers.append(queue_handler)

    if not handlers:
        return None

    logging.basicConfig(level=min(handler.level for handler in handlers), handlers=handlers)
    if listener is not None:
        listener.start()
    return listener


def _build_notifier(config: dict):
    notifications = config.get("notifications", {}) or {}
    method = notifications.get("method", "none")
    if method == "none":
        return None
    if method == "bot":
        chat_id = notifications.get("bot_chat_id")
        if not chat_id:
            raise ConfigurationError("notifications.bot_chat_id is required for bot notifications")
        return TelegramBotNotifier(
            bot_token=settings.require_env(settings.BOT_API),
            chat_id=str(chat_id),
            source_aliases=notifications.get("source_aliases", {}) or {},
        )
    raise ConfigurationError("notifications.method must be 'none' or 'bot'")


def _run(bot: str) -> int:
    _print_banner()
    config = settings.load_config()
    try:
        listener = _configure_logging(config)
    except ConfigurationError as exc:
        logging.getLogger(__name__).error("Not starting %s: %s", bot, exc)
        return EXIT_CONFIGURATION

    try:
        return _start(bot, config)
    finally:
        if listener is not None:
            listener.stop()


def _start(bot: str, config: dict) -> int:
    logger = logging.getLogger(__name__)

    try:
        profile = build_bot_profile(config, bot)
        language = build_language_profile(config)
        notifier = _build_notifier(config)
        api = RedditApi(
            app_id=settings.require_env(settings.REDDIT_APP_ID),
            app_secret=settings.require_env(settings.REDDIT_APP_SECRET),
            refresh_token=settings.require_env(settings.REDDIT_REFRESH_TOKEN),
            user_agent=f"python:fixbot.{bot.lower()}:0.1 (by /u/{profile.own_name})",
        )
    except ConfigurationError as exc:
        logger.error("Not starting %s: %s", bot, exc)
        return EXIT_CONFIGURATION
    monitor_config = build_monitor_config(config)
    logger.info(
        "%s corrections and %s diagnostic words are loaded",
        len(language.corrections),
        len(language.diagnostic_words),
    )

    source = RedditCommentSource(
        api,
        poll_interval=monitor_config.poll_interval_seconds,
        backlog_limit=monitor_config.backlog_limit,
        seen_cache_size=monitor_config.seen_cache_size,
    )
    processor = CommentProcessor(
        profile=profile,
        language=language,
        publisher=RedditPublisher(api),
        notifier=notifier,
        publish_timeout=monitor_config.publish_timeout_seconds,
    )
    monitor = Monitor(profile, source, processor)

    logger.info("Starting %s as u/%s", bot, profile.own_name)
    try:
        asyncio.run(monitor.run())
    except KeyboardInterrupt:
        logger.info("Stopped %s", bot)
    return 0


class _DryRunPublisher:
    async def reply(self, message: Message, text: str) -> None:
        return None


def _check(text: str, bot: str, author: str) -> int:
    config = settings.load_config()
    try:
        profile = build_bot_profile(config, bot)
        language = build_language_profile(config)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}")
        return EXIT_CONFIGURATION

    processor = CommentProcessor(profile=profile, language=language, publisher=_DryRunPublisher())
    message = Message(message_id="t1_check", author=author, body=text, source_id="check")
    result = processor.detect(message)

    print(f"Decision: {result.reason}")
    if result.percentage is not None:
        print(f"Language: {format_percentage(result.percentage)}%")
    if result.applicable:
        print(f"Mistake:  {result.correction.wrong} -> {result.correction.right}")
        print("Reply:")
        print(processor.compose(result))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="fixbot")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Start watching the configured subreddits")
    run_parser.add_argument("--bot", default=settings.DEFAULT_BOT, help="Bot profile to start")

    check_parser = subparsers.add_parser("check", help="Run detection on a text without replying")
    check_parser.add_argument("text", help="Comment body to evaluate")
    check_parser.add_argument("--bot", default=settings.DEFAULT_BOT, help="Bot profile to use")
    check_parser.add_argument("--author", default="someone", help="Author of the comment")

    args = parser.parse_args(argv)
    if args.command == "check":
        return _check(args.text, args.bot, args.author)
    return _run(getattr(args, "bot", settings.DEFAULT_BOT))


if __name__ == "__main__":
    raise SystemExit(main())
