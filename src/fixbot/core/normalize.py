"""Token normalization shared by every word-list comparison."""

from __future__ import annotations

from typing import List

# Characters trimmed from both ends of a token before comparison.
TRIM_CHARACTERS = "?.,! "


def normalize_word(token: str) -> str:
    """Trim punctuation and lower-case a token.

    ``str.lower`` does not depend on the process locale, so matching behaves
    the same on every deployment.
    """

    return token.strip(TRIM_CHARACTERS).lower()


def tokenize(body: str) -> List[str]:
    """Split a comment body on whitespace, dropping empty tokens."""

    return body.split()
