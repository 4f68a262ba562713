"""Signature-tier extraction: declaration lines only."""

from __future__ import annotations

import posixpath
import re
from functools import lru_cache

from contextpack.config import RulesConfig

_LINE_SPLIT = re.compile(r"\r?\n")

SIGNATURE_GROUPS: dict[str, str] = {
    ".ts": "ts",
    ".tsx": "ts",
    ".js": "ts",
    ".jsx": "ts",
    ".mjs": "ts",
    ".cjs": "ts",
    ".py": "py",
    ".go": "go",
    ".rs": "rs",
    ".java": "java",
    ".kt": "kt",
}


def signature_group(rel_path: str) -> str:
    return SIGNATURE_GROUPS.get(posixpath.splitext(rel_path)[1].lower(), "default")


@lru_cache(maxsize=64)
def _compile(patterns: tuple[str, ...]) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern) for pattern in patterns)


def extract_signature(rel_path: str, content: str, rules: RulesConfig) -> str:
    """Keep lines matching the language's declaration patterns.

    Falls back to the first ``signature_max_lines`` lines when the language
    has no patterns configured or nothing matches.
    """
    max_lines = rules.budget.signature_max_lines
    lines = _LINE_SPLIT.split(content)
    patterns = _compile(tuple(rules.files.signature_patterns.get(signature_group(rel_path), ())))

    picked: list[str] = []
    if patterns:
        for line in lines:
            if any(pattern.search(line) for pattern in patterns):
                picked.append(line.strip())
                if len(picked) >= max_lines:
                    break

    if not picked:
        return "\n".join(lines[:max_lines])
    return "\n".join(picked)
