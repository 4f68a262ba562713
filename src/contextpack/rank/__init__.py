"""Relevance ranking of scanned files against a task description."""

from contextpack.rank.ranker import RelevanceRanker, ScoreCard, rank_files
from contextpack.rank.signals import Signal
from contextpack.rank.tokenize import tokenize_task

__all__ = ["RelevanceRanker", "ScoreCard", "Signal", "rank_files", "tokenize_task"]
