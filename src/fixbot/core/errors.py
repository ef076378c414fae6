"""Error taxonomy shared by the core and the adapters."""

from __future__ import annotations

from enum import Enum


class FixbotError(Exception):
    """Base class for every error raised by fixbot."""


class ConfigurationError(FixbotError):
    """Raised when a bot or language profile is missing or invalid."""


class InvalidInput(FixbotError, ValueError):
    """Raised when a detection function receives input it cannot evaluate."""


class PublishErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class PublishError(FixbotError):
    """A reply could not be delivered. Never retried."""

    def __init__(self, kind: PublishErrorKind, detail: str = "") -> None:
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)
        self.kind = kind
        self.detail = detail
