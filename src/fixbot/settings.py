"""Static configuration for fixbot.

All user-editable settings (bots, word lists, monitor, logging,
notifications) live in a single JSON file for quick edits without touching
Python. Secrets stay in the environment (.env).
"""

from __future__ import annotations

import json
import os
from typing import Optional

from dotenv import load_dotenv

from fixbot.core.errors import ConfigurationError

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")

# Bot profile used when the command line does not name one.
DEFAULT_BOT = "PapiamentoBot"

# Environment variables holding secrets.
REDDIT_APP_ID = "REDDIT_APP_ID"
REDDIT_APP_SECRET = "REDDIT_APP_SECRET"
REDDIT_REFRESH_TOKEN = "REDDIT_REFRESH_TOKEN"
BOT_API = "BOT_API"
URL_LOGGER_API_KEY = "URL_LOGGER_API_KEY"


def config_path() -> str:
    """Return the config location, honouring FIXBOT_CONFIG."""

    load_dotenv()
    path = os.getenv("FIXBOT_CONFIG") or DEFAULT_CONFIG_PATH
    if not os.path.isabs(path):
        path = os.path.join(PROJECT_ROOT, path)
    return path


def load_config(path: Optional[str] = None) -> dict:
    """Load config.json with a flat, user-friendly schema."""

    path = path or config_path()
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def require_env(name: str) -> str:
    load_dotenv()
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(f"Missing {name} in environment")
    return value
