"""Character-based token estimation."""

from __future__ import annotations

import math

from contextpack.config import RulesConfig


def estimate_tokens(text: str, rules: RulesConfig) -> int:
    """Estimate the token count of ``text`` as ceil(chars / chars-per-token)."""
    if not text:
        return 0
    return math.ceil(len(text) / rules.budget.token_chars_per_token)
