"""Individual relevance signals.

Each function inspects one aspect of a file and returns the ``Signal``
tuples it contributes; the ranker folds them into the file's score card.
"""

from __future__ import annotations

import posixpath
import re
from typing import NamedTuple

from contextpack.config import StructuralConfig, WeightsConfig

FILENAME_LABEL_PREFIX = "filename:"


class Signal(NamedTuple):
    """A labeled score delta with its human-readable reason."""

    label: str
    delta: int
    reason: str


def compile_token_patterns(tokens: list[str]) -> list[re.Pattern[str]]:
    """Whole-word patterns for content matching, one per token."""
    return [re.compile(rf"\b{re.escape(token)}\b") for token in tokens]


def path_signals(tokens: list[str], rel_path: str, weights: WeightsConfig) -> list[Signal]:
    """Filename matches, falling back to path matches, per task token."""
    lower_path = rel_path.lower()
    base_name = posixpath.basename(lower_path)
    signals: list[Signal] = []
    for token in tokens:
        if token in base_name:
            signals.append(Signal(
                f"{FILENAME_LABEL_PREFIX}{token}", weights.filename_match,
                f"filename matches '{token}'",
            ))
        elif token in lower_path:
            signals.append(Signal(
                f"path:{token}", weights.path_match, f"path matches '{token}'",
            ))
    return signals


def content_signal(
    patterns: list[re.Pattern[str]], content: str, weights: WeightsConfig
) -> Signal | None:
    lower_content = content.lower()
    hits = sum(1 for pattern in patterns if pattern.search(lower_content))
    if hits == 0:
        return None
    delta = min(hits * weights.content_match_per_token, weights.content_match_max)
    return Signal("content-match", delta, f"content matches {hits} task tokens")


def history_signal(touch_count: int, weights: WeightsConfig) -> Signal | None:
    if not touch_count:
        return None
    delta = min(touch_count, weights.git_history_max)
    return Signal("git-history", delta, f"touched in git history ({touch_count})")


def structural_signals(
    rel_path: str, structural: StructuralConfig, weights: WeightsConfig
) -> list[Signal]:
    """Entrypoint, config and manifest roles; independent and stackable."""
    signals: list[Signal] = []
    if rel_path in structural.entrypoints:
        signals.append(Signal("entrypoint", weights.structural_entrypoint, "entrypoint file"))
    if rel_path in structural.config_files:
        signals.append(Signal("config", weights.structural_config, "config file"))
    if rel_path in structural.manifests:
        signals.append(Signal("manifest", weights.structural_manifest, "manifest file"))
    return signals


def dir_proximity_signal(seed_count: int, weights: WeightsConfig) -> Signal | None:
    if seed_count <= 0:
        return None
    delta = min(seed_count, weights.dir_proximity_max)
    return Signal("dir-proximity", delta, f"same directory as {seed_count} matched file(s)")


def dependency_signal(linked_seed: str, weights: WeightsConfig) -> Signal:
    return Signal(
        "dependency-proximity", weights.dependency_proximity,
        f"imports/used by matched file ({linked_seed})",
    )


def recency_signal(weights: WeightsConfig) -> Signal:
    return Signal("git-recent", weights.git_recent_boost, "recently changed")


def cochange_signal(weights: WeightsConfig) -> Signal:
    return Signal("co-change", weights.cochange_boost, "changed in same commit as matched file")
