"""Grammar mistake selection (core domain)."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from fixbot.core.models import Correction
from fixbot.core.normalize import normalize_word


def select_mistake(tokens: Sequence[str], corrections: Iterable[Correction]) -> Optional[Correction]:
    """Return the most severe correction whose wrong form appears in ``tokens``.

    Matching logic:
    - Tokens and wrong forms are compared after normalization, whole word only.
    - The lowest gravity wins.
    - On equal gravity the correction listed first in the configuration is
      kept, whatever the order of the words in the message.
    """

    present = {normalize_word(token) for token in tokens}
    best: Optional[Correction] = None

    for correction in corrections:
        if normalize_word(correction.wrong) not in present:
            continue
        if best is None or correction.gravity < best.gravity:
            best = correction

    return best
