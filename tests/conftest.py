"""Shared test fixtures for context-pack."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Callable

import pytest

from contextpack.config import RulesConfig


@pytest.fixture
def rules() -> RulesConfig:
    return RulesConfig()


@pytest.fixture
def make_repo(tmp_path: Path) -> Callable[[dict[str, str | bytes]], Path]:
    """Return a builder that writes ``{relative path: content}`` under a fresh repo dir."""

    def build(files: dict[str, str | bytes]) -> Path:
        root = (tmp_path / "repo").resolve()
        root.mkdir(exist_ok=True)
        for rel_path, content in files.items():
            target = root / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        return root

    return build


@pytest.fixture
def no_git(monkeypatch: pytest.MonkeyPatch) -> None:
    """Force walk mode and empty history, even if the temp dir sits inside a work tree."""
    monkeypatch.setattr("contextpack.scan.scanner.is_git_repo", lambda path: False)
    monkeypatch.setattr("contextpack.history.miner.is_git_repo", lambda path: False)


@pytest.fixture
def git() -> Callable[..., str]:
    """Run git in a repo with a throwaway identity; skips when git is unavailable."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    def run(root: Path, *args: str) -> str:
        result = subprocess.run(
            ["git", "-C", str(root),
             "-c", "user.name=Context Pack",
             "-c", "user.email=context-pack@example.com",
             "-c", "commit.gpgsign=false",
             "-c", "init.defaultBranch=main",
             *args],
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    return run


@pytest.fixture
def commit_all(git: Callable[..., str]) -> Callable[[Path, str], None]:
    """Stage everything under ``root`` and commit it."""

    def commit(root: Path, message: str) -> None:
        git(root, "add", "-A")
        git(root, "commit", "-q", "-m", message)

    return commit
