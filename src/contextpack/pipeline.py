"""End-to-end pipeline: scan, mine history, rank, assemble."""

from __future__ import annotations

import logging
from pathlib import Path

import networkx as nx

from contextpack.bundle.assembler import build_bundle
from contextpack.config import RulesConfig
from contextpack.history.miner import GitHistory, mine_history
from contextpack.models import BundleResult, FileEntry, RankedFile
from contextpack.rank.ranker import RelevanceRanker
from contextpack.scan.scanner import scan_repo

logger = logging.getLogger("contextpack.pipeline")


class ContextPacker:
    """Facade over the context-selection pipeline for one repository.

    Scan results and mined history are computed once and reused, so
    ranking several tasks against the same repo only re-scores files.

    Usage:
        packer = ContextPacker("path/to/repo", load_rules())
        ranked = packer.rank("fix login redirect")
        bundle = packer.pack("fix login redirect", budget=8000)
    """

    def __init__(
        self,
        root: str | Path,
        rules: RulesConfig | None = None,
        include_tests: bool = False,
    ) -> None:
        self.root = Path(root).resolve()
        self.rules = rules or RulesConfig()
        self.include_tests = include_tests
        self.import_graph: nx.Graph = nx.Graph()
        self._entries: list[FileEntry] | None = None
        self._history: GitHistory | None = None

    def scan(self) -> list[FileEntry]:
        """Candidate files, scanned on first use."""
        if self._entries is None:
            self._entries = scan_repo(self.root, self.rules, self.include_tests)
            logger.debug("Scanned %d candidate files", len(self._entries))
        return self._entries

    def history(self) -> GitHistory:
        """Mined commit history, empty outside version control."""
        if self._history is None:
            self._history = mine_history(self.root, self.rules)
        return self._history

    def rank(self, task: str) -> list[RankedFile]:
        """Every scanned file, sorted by relevance to ``task``."""
        ranker = RelevanceRanker(self.root, self.rules)
        ranked = ranker.rank(task, self.scan(), self.history())
        self.import_graph = ranker.import_graph
        return ranked

    def pack(self, task: str, budget: int | None = None) -> BundleResult:
        """Rank and assemble a bundle within ``budget`` tokens.

        Args:
            task: Free-text task description.
            budget: Token budget; defaults to ``rules.budget.default_tokens``.
        """
        if budget is None:
            budget = self.rules.budget.default_tokens
        return build_bundle(self.root, task, self.rank(task), budget, self.rules)
