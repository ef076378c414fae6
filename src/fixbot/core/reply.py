"""Reply text composition."""

from __future__ import annotations

import re

from fixbot.core.models import Correction

_PLACEHOLDER = re.compile(r"\{([0-2])\}")


def compose_reply(template: str, author: str, correction: Correction, footer: str) -> str:
    """Fill ``{0}`` (author), ``{1}`` (wrong) and ``{2}`` (right), then append the footer.

    Anything that is not one of the three placeholders stays literal, so a
    malformed template never raises. The footer is appended as-is.
    """

    values = (author, correction.wrong, correction.right)
    body = _PLACEHOLDER.sub(lambda match: values[int(match.group(1))], template)
    return body + footer
