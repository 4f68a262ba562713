"""Budget-constrained bundle assembly with three fidelity tiers.

Files are consumed in rank order. For each one the assembler costs a full,
a trimmed and a signature rendition and keeps the highest-fidelity tier
that still fits the remaining budget. Selection is a single greedy pass:
an earlier choice is never revisited to make room for a later file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from contextpack.bundle.signature import extract_signature
from contextpack.config import RulesConfig
from contextpack.models import BundleFile, BundleMode, BundleResult, RankedFile
from contextpack.textfiles import is_probably_text, read_text
from contextpack.tokens import estimate_tokens

logger = logging.getLogger("contextpack.bundle")

DEFAULT_REASON = "selected by ranking"


@dataclass(frozen=True)
class TierCandidate:
    """One costed rendition of a file."""

    mode: BundleMode
    content: str
    tokens: int


def reason_text(reasons: list[str]) -> str:
    return "; ".join(reasons) if reasons else DEFAULT_REASON


def section_overhead(rel_path: str, reasons: list[str], rules: RulesConfig) -> int:
    """Tokens spent on a file's header, reason line and code fence."""
    header = f"## {rel_path}\nReason: {reason_text(reasons)}\n"
    fence = "```\n\n```\n"
    return estimate_tokens(header + fence, rules)


class BundleAssembler:
    """Packs ranked files into a token budget.

    Usage:
        assembler = BundleAssembler(root, rules)
        bundle = assembler.assemble("add retry to uploads", ranked, budget=14000)
    """

    def __init__(self, root: str | Path, rules: RulesConfig) -> None:
        self.root = Path(root).resolve()
        self.rules = rules

    def tiers(self, rel_path: str, content: str, overhead: int) -> list[TierCandidate]:
        """Full, trimmed and signature renditions, highest fidelity first."""
        trimmed = content[: self.rules.budget.trim_chars]
        signature = extract_signature(rel_path, content, self.rules)
        return [
            TierCandidate(BundleMode.FULL, content, estimate_tokens(content, self.rules) + overhead),
            TierCandidate(BundleMode.TRIMMED, trimmed, estimate_tokens(trimmed, self.rules) + overhead),
            TierCandidate(BundleMode.SIGNATURE, signature, estimate_tokens(signature, self.rules) + overhead),
        ]

    def choose(self, tiers: list[TierCandidate], remaining: int) -> TierCandidate | None:
        """Pick the first tier that fits; the full tier must also respect the per-file cap."""
        for tier in tiers:
            if tier.tokens > remaining:
                continue
            if tier.mode is BundleMode.FULL and tier.tokens > self.rules.budget.max_file_tokens:
                continue
            return tier
        return None

    def assemble(self, task: str, ranked: list[RankedFile], budget: int) -> BundleResult:
        """Build the bundle for ``ranked`` files within ``budget`` tokens.

        Binary or unreadable files, and files whose cheapest tier does not
        fit, are skipped and counted. Evaluation stops once an included file
        brings the running total to the budget; later files are not counted.
        """
        files: list[BundleFile] = []
        total = 0
        skipped = 0

        for ranked_file in ranked:
            rel_path = Path(os.path.relpath(ranked_file.path, self.root)).as_posix()

            if not is_probably_text(ranked_file.path, self.rules):
                logger.debug("Skipping binary file %s", rel_path)
                skipped += 1
                continue

            try:
                content = read_text(ranked_file.path)
            except OSError as e:
                logger.debug("Skipping unreadable file %s: %s", rel_path, e)
                skipped += 1
                continue

            overhead = section_overhead(rel_path, ranked_file.reasons, self.rules)
            chosen = self.choose(self.tiers(rel_path, content, overhead), budget - total)
            if chosen is None:
                logger.debug("Skipping %s: no tier fits %d remaining tokens", rel_path, budget - total)
                skipped += 1
                continue

            logger.debug("Including %s as %s (%d tokens)", rel_path, chosen.mode.value, chosen.tokens)
            files.append(
                BundleFile(
                    path=rel_path,
                    score=ranked_file.score,
                    reasons=list(ranked_file.reasons),
                    score_breakdown=list(ranked_file.score_breakdown),
                    estimated_tokens=chosen.tokens,
                    size_bytes=ranked_file.size_bytes,
                    mode=chosen.mode,
                    content=chosen.content,
                )
            )
            total += chosen.tokens
            if total >= budget:
                break

        logger.debug(
            "Bundle: %d files, %d/%d tokens, %d skipped", len(files), total, budget, skipped,
        )
        return BundleResult(
            task=task,
            budget=budget,
            files=files,
            estimated_tokens=total,
            skipped_files=skipped,
        )


def build_bundle(
    repo_path: str | Path,
    task: str,
    ranked: list[RankedFile],
    budget: int,
    rules: RulesConfig,
) -> BundleResult:
    """Convenience wrapper around ``BundleAssembler.assemble``."""
    return BundleAssembler(repo_path, rules).assemble(task, ranked, budget)
