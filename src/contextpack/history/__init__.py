"""Version-history mining for relevance signals."""

from contextpack.history.miner import GitHistory, load_commits, mine_history, parse_git_log

__all__ = ["GitHistory", "load_commits", "mine_history", "parse_git_log"]
