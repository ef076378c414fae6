"""Language verification by lexical sampling (core domain)."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import AbstractSet, Iterable, Sequence, Tuple

from fixbot.core.errors import InvalidInput
from fixbot.core.models import Correction
from fixbot.core.normalize import normalize_word


def _known_words(diagnostic_words: AbstractSet[str], corrections: Iterable[Correction]) -> set[str]:
    known = set(diagnostic_words)
    for correction in corrections:
        known.add(normalize_word(correction.wrong))
        known.add(normalize_word(correction.right))
    return known


def language_percentage(
    tokens: Sequence[str],
    diagnostic_words: AbstractSet[str],
    corrections: Iterable[Correction],
) -> float:
    """Return the share of known tokens as an unrounded percentage.

    A token is known when its normalized form is a diagnostic word or the
    wrong/right form of any correction.
    """

    if not tokens:
        raise InvalidInput("cannot verify the language of a message without tokens")

    known = _known_words(diagnostic_words, corrections)
    matching = sum(1 for token in tokens if normalize_word(token) in known)
    return matching * 100 / len(tokens)


def check_language(
    tokens: Sequence[str],
    diagnostic_words: AbstractSet[str],
    corrections: Iterable[Correction],
    threshold_percent: float,
) -> Tuple[bool, float]:
    """Return ``(passed, percentage)``.

    The threshold is a strict lower bound: a share equal to it does not pass.
    """

    percentage = language_percentage(tokens, diagnostic_words, corrections)
    return percentage > threshold_percent, percentage


def verify_language(
    tokens: Sequence[str],
    diagnostic_words: AbstractSet[str],
    corrections: Iterable[Correction],
    threshold_percent: float,
) -> bool:
    """Return True when strictly more than ``threshold_percent`` tokens are known."""

    passed, _ = check_language(tokens, diagnostic_words, corrections, threshold_percent)
    return passed


def format_percentage(value: float) -> str:
    """Two-decimal display value, rounding halves away from zero.

    Only used for logs; decisions always use the unrounded value.
    """

    rounded = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{rounded:.2f}"
