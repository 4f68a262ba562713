"""Tests for git history mining."""

from __future__ import annotations

from pathlib import Path

import pytest

from contextpack.config import RulesConfig
from contextpack.history.miner import (
    GitHistory,
    load_commits,
    mine_history,
    parse_git_log,
    summarize_commits,
)
from contextpack.models import Commit

SHA_A = "a" * 40
SHA_B = "b" * 40
SHA_256 = "c" * 64


class TestParseGitLog:
    def test_groups_files_under_hashes(self):
        output = f"{SHA_A}\n\nsrc/a.py\nsrc/b.py\n{SHA_B}\n\nsrc/a.py\n"
        commits = parse_git_log(output)
        assert commits == [
            Commit(id=SHA_A, files=("src/a.py", "src/b.py")),
            Commit(id=SHA_B, files=("src/a.py",)),
        ]

    def test_sha256_hashes(self):
        commits = parse_git_log(f"{SHA_256}\n\nREADME.md\n")
        assert commits[0].id == SHA_256

    def test_commit_without_files(self):
        commits = parse_git_log(f"{SHA_A}\n{SHA_B}\n\nx.py\n")
        assert commits[0].files == ()
        assert commits[1].files == ("x.py",)

    def test_empty_output(self):
        assert parse_git_log("") == []


class TestSummarizeCommits:
    def test_touch_counts_and_recent_window(self):
        commits = [
            Commit(id="3", files=("a.py", "b.py")),
            Commit(id="2", files=("a.py",)),
            Commit(id="1", files=("c.py",)),
        ]
        history = summarize_commits(commits, recent_window=2)
        assert history.touch_counts == {"a.py": 2, "b.py": 1, "c.py": 1}
        assert history.recent_files == frozenset({"a.py", "b.py"})
        assert history.commits == commits

    def test_repeated_path_in_one_commit_counts_once(self):
        history = summarize_commits([Commit(id="1", files=("a.py", "a.py"))], recent_window=5)
        assert history.touch_counts["a.py"] == 1


class TestDegradation:
    def test_non_repo_yields_empty_history(self, tmp_path: Path, no_git, rules: RulesConfig):
        history = mine_history(tmp_path, rules)
        assert history.is_empty
        assert not history.touch_counts
        assert not history.recent_files

    def test_zero_max_commits(self, tmp_path: Path):
        assert load_commits(tmp_path, 0) == []

    def test_git_failure_is_swallowed(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr("contextpack.history.miner.is_git_repo", lambda path: True)

        def boom(*args, **kwargs):
            raise FileNotFoundError("git")

        monkeypatch.setattr("contextpack.history.miner.subprocess.run", boom)
        assert load_commits(tmp_path, 10) == []

    def test_default_history_is_empty(self):
        assert GitHistory().is_empty


class TestMineHistory:
    def test_real_repository(self, make_repo, git, commit_all, rules: RulesConfig):
        root = make_repo({"a.py": "1", "b.py": "1"})
        git(root, "init", "-q")
        commit_all(root, "first")
        (root / "a.py").write_text("2")
        commit_all(root, "second")

        history = mine_history(root, rules)
        assert len(history.commits) == 2
        assert history.touch_counts["a.py"] == 2
        assert history.touch_counts["b.py"] == 1
        assert history.commits[0].files == ("a.py",)

    def test_max_commits_limit(self, make_repo, git, commit_all):
        root = make_repo({"a.py": "1"})
        git(root, "init", "-q")
        for i in range(3):
            (root / "a.py").write_text(str(i))
            commit_all(root, f"c{i}")

        assert len(load_commits(root, 2)) == 2
