"""Token estimation.

Chunk budgets are expressed in tokens, but the core deliberately avoids a
tokenizer dependency: any monotonic ``Callable[[str], int]`` can be
injected wherever an estimator is accepted.
"""

from __future__ import annotations

import math
from collections.abc import Callable

TokenEstimator = Callable[[str], int]

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Rough token count: one token per four characters, rounded up.

    Blank text counts as zero tokens.
    """
    if not text or not text.strip():
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)
