"""Task-text tokenization."""

from __future__ import annotations

import re

_WORD = re.compile(r"[A-Za-z0-9_]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z])")

MIN_TOKEN_LENGTH = 2


def split_camel_case(word: str) -> list[str]:
    """Split ``fooBarBaz`` into ``["foo", "bar", "baz"]``."""
    return [part.lower() for part in _CAMEL_BOUNDARY.split(word) if part]


def tokenize_task(task: str) -> list[str]:
    """Extract the de-duplicated, lower-cased token list from a task description.

    Tokens keep first-seen order so that scoring is reproducible.
    """
    tokens: dict[str, None] = {}
    for word in _WORD.findall(task):
        if len(word) >= MIN_TOKEN_LENGTH:
            tokens.setdefault(word.lower(), None)
        for part in split_camel_case(word):
            if len(part) >= MIN_TOKEN_LENGTH:
                tokens.setdefault(part, None)
    return list(tokens)
