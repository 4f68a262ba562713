"""Mine a bounded window of git history for ranking signals.

Any failure (no repository, git missing, non-zero exit) yields empty
history: ranking still works, it just loses the history-derived signals.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from contextpack.config import RulesConfig
from contextpack.models import Commit
from contextpack.scan.scanner import is_git_repo

logger = logging.getLogger("contextpack.history")

_COMMIT_HASH = re.compile(r"^[0-9a-f]{40}(?:[0-9a-f]{24})?$")
GIT_LOG_TIMEOUT_SECONDS = 60


@dataclass
class GitHistory:
    """History-derived inputs for the ranker."""

    touch_counts: Counter[str] = field(default_factory=Counter)
    recent_files: frozenset[str] = frozenset()
    commits: list[Commit] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.commits


def parse_git_log(output: str) -> list[Commit]:
    """Parse ``git log --name-only --format=%H`` output into commits, newest first."""
    commits: list[Commit] = []
    current_id: str | None = None
    current_files: list[str] = []

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        if _COMMIT_HASH.match(line):
            if current_id is not None:
                commits.append(Commit(id=current_id, files=tuple(current_files)))
            current_id = line
            current_files = []
            continue
        if current_id is None:
            current_id = ""
        current_files.append(PurePath(line).as_posix())

    if current_id is not None:
        commits.append(Commit(id=current_id, files=tuple(current_files)))

    return commits


def load_commits(repo_path: str | Path, max_commits: int) -> list[Commit]:
    """Read the most recent ``max_commits`` commits and the files each changed."""
    root = Path(repo_path)
    if max_commits <= 0 or not is_git_repo(root):
        return []

    try:
        result = subprocess.run(
            ["git", "-C", str(root), "-c", "core.quotepath=off", "log",
             f"--max-count={max_commits}", "--name-only", "--relative", "--format=%H"],
            capture_output=True,
            text=True,
            timeout=GIT_LOG_TIMEOUT_SECONDS,
        )
    except (subprocess.SubprocessError, OSError) as e:
        logger.debug("git log failed in %s: %s", root, e)
        return []

    if result.returncode != 0:
        logger.debug("git log exited %d in %s: %s", result.returncode, root, result.stderr.strip())
        return []

    return parse_git_log(result.stdout)


def summarize_commits(commits: list[Commit], recent_window: int) -> GitHistory:
    """Derive touch counts and the recent-file set from an ordered commit list."""
    touch_counts: Counter[str] = Counter()
    for commit in commits:
        for file_path in set(commit.files):
            touch_counts[file_path] += 1

    recent: set[str] = set()
    for commit in commits[:recent_window]:
        recent.update(commit.files)

    return GitHistory(touch_counts=touch_counts, recent_files=frozenset(recent), commits=list(commits))


def mine_history(repo_path: str | Path, rules: RulesConfig) -> GitHistory:
    """Load and summarize history for ``repo_path`` within the configured limits."""
    commits = load_commits(repo_path, rules.limits.max_commits)
    history = summarize_commits(commits, rules.limits.recent_commits)
    logger.debug(
        "Mined %d commits (%d distinct files, %d recent)",
        len(history.commits), len(history.touch_counts), len(history.recent_files),
    )
    return history
