"""Multi-signal relevance ranking.

Scoring runs in passes over the scanned files:

  1. Lexical, history and structural signals per file. Any lexical hit
     (filename, path or content) marks the file as a seed.
  2. Directory and dependency proximity to seeds (needs the seed set and
     the import graph built from the contents read in pass 1).
  3. Recency: files touched in the most recent commits.
  4. Co-change: non-seed files changed in the same commit as a seed,
     once per qualifying commit.

Every contribution is recorded as a labeled delta plus a reason, so the
final score is fully explained by its breakdown.
"""

from __future__ import annotations

import logging
import os
import posixpath
import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import networkx as nx

from contextpack.config import RulesConfig
from contextpack.graph.builder import ImportGraphBuilder, linked_files
from contextpack.history.miner import GitHistory
from contextpack.models import FileEntry, RankedFile, ScoreItem
from contextpack.rank.signals import (
    FILENAME_LABEL_PREFIX,
    Signal,
    cochange_signal,
    compile_token_patterns,
    content_signal,
    dependency_signal,
    dir_proximity_signal,
    history_signal,
    path_signals,
    recency_signal,
    structural_signals,
)
from contextpack.rank.tokenize import tokenize_task
from contextpack.textfiles import is_probably_text, read_text

logger = logging.getLogger("contextpack.rank")


@dataclass
class ScoreCard:
    """Running score accumulator for one file."""

    entry: FileEntry
    rel_path: str
    score: int = 0
    reasons: list[str] = field(default_factory=list)
    breakdown: list[ScoreItem] = field(default_factory=list)
    is_seed: bool = False
    matched_filename: bool = False

    @property
    def directory(self) -> str:
        return posixpath.dirname(self.rel_path)

    def apply(self, signals: Iterable[Signal | None], lexical: bool = False) -> None:
        """Fold signals into the card. Lexical signals also mark the file as a seed."""
        for signal in signals:
            if signal is None:
                continue
            self.score += signal.delta
            self.breakdown.append(ScoreItem(label=signal.label, score=signal.delta))
            self.reasons.append(signal.reason)
            if lexical:
                self.is_seed = True
            if signal.label.startswith(FILENAME_LABEL_PREFIX):
                self.matched_filename = True

    def finalize(self) -> RankedFile:
        return RankedFile(
            path=self.entry.path,
            size_bytes=self.entry.size_bytes,
            score=self.score,
            reasons=list(self.reasons),
            score_breakdown=list(self.breakdown),
        )


class RelevanceRanker:
    """Ranks scanned files against a free-text task.

    Usage:
        ranker = RelevanceRanker(root, rules)
        ranked = ranker.rank("fix the login redirect", entries, history)
    """

    def __init__(self, root: str | Path, rules: RulesConfig) -> None:
        self.root = Path(root).resolve()
        self.rules = rules
        self.import_graph: nx.Graph = nx.Graph()
        self._contents: dict[str, str] = {}

    def rank(
        self,
        task: str,
        entries: list[FileEntry],
        history: GitHistory | None = None,
    ) -> list[RankedFile]:
        """Score and sort ``entries`` by relevance to ``task``.

        Args:
            task: Free-text task description.
            entries: Scanned files, as produced by ``scan_repo``.
            history: Mined git history; empty history disables the
                history-derived signals.

        Returns:
            Files sorted by descending score, ties broken by ascending size.
        """
        history = history or GitHistory()
        tokens = tokenize_task(task)
        self._contents = {}
        patterns = compile_token_patterns(tokens)

        # Pass 1: per-file lexical, history and structural signals
        cards = [self._score_file(entry, tokens, patterns, history) for entry in entries]
        seeds = {card.rel_path for card in cards if card.is_seed}

        # Pass 2: proximity to seeds
        self.import_graph = ImportGraphBuilder(self.rules).build(self.root, entries, self._contents)
        self._apply_proximity(cards, seeds)

        # Pass 3: recency
        if history.recent_files:
            for card in cards:
                if card.rel_path in history.recent_files:
                    card.apply([recency_signal(self.rules.weights)])

        # Pass 4: co-change with seeds
        if seeds:
            self._apply_cochange(cards, seeds, history)

        ranked = sorted(cards, key=lambda card: (-card.score, card.entry.size_bytes))
        logger.debug(
            "Ranked %d files for %d task tokens (%d seeds)", len(ranked), len(tokens), len(seeds),
        )
        return [card.finalize() for card in ranked]

    def _rel_path(self, entry: FileEntry) -> str:
        return Path(os.path.relpath(entry.path, self.root)).as_posix()

    def _score_file(
        self,
        entry: FileEntry,
        tokens: list[str],
        patterns: list[re.Pattern[str]],
        history: GitHistory,
    ) -> ScoreCard:
        weights = self.rules.weights
        card = ScoreCard(entry=entry, rel_path=self._rel_path(entry))

        card.apply(path_signals(tokens, card.rel_path, weights), lexical=True)

        content = self._read(entry)
        if content is not None and patterns:
            card.apply([content_signal(patterns, content, weights)], lexical=True)

        card.apply([history_signal(history.touch_counts.get(card.rel_path, 0), weights)])
        card.apply(structural_signals(card.rel_path, self.rules.structural, weights))
        return card

    def _read(self, entry: FileEntry) -> str | None:
        """Read and cache a text file's content; None for binary or unreadable files."""
        if entry.path in self._contents:
            return self._contents[entry.path]
        if not is_probably_text(entry.path, self.rules):
            return None
        try:
            content = read_text(entry.path)
        except OSError as e:
            logger.debug("Skipping content match for unreadable %s: %s", entry.path, e)
            return None
        self._contents[entry.path] = content
        return content

    def _apply_proximity(self, cards: list[ScoreCard], seeds: set[str]) -> None:
        weights = self.rules.weights
        dir_seed_counts = Counter(card.directory for card in cards if card.is_seed)

        for card in cards:
            if not card.matched_filename:
                card.apply([dir_proximity_signal(dir_seed_counts.get(card.directory, 0), weights)])

            linked = [path for path in linked_files(self.import_graph, card.rel_path) if path in seeds]
            if linked:
                card.apply([dependency_signal(linked[0], weights)])

    def _apply_cochange(self, cards: list[ScoreCard], seeds: set[str], history: GitHistory) -> None:
        weights = self.rules.weights
        by_rel = {card.rel_path: card for card in cards}
        for commit in history.commits:
            if not any(path in seeds for path in commit.files):
                continue
            for path in commit.files:
                card = by_rel.get(path)
                if card is not None and path not in seeds:
                    card.apply([cochange_signal(weights)])


def rank_files(
    repo_path: str | Path,
    task: str,
    entries: list[FileEntry],
    rules: RulesConfig,
    history: GitHistory | None = None,
) -> list[RankedFile]:
    """Convenience wrapper around ``RelevanceRanker.rank``."""
    return RelevanceRanker(repo_path, rules).rank(task, entries, history)
