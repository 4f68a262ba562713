"""Repository scanning: list candidate files for ranking.

Git repositories are listed through ``git ls-files`` (tracked plus
untracked-but-not-ignored). Anything else is walked manually with an
explicit stack, each directory carrying the ignore layer it inherited.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from contextpack.config import RulesConfig
from contextpack.exceptions import ScanError
from contextpack.models import FileEntry
from contextpack.scan.ignore import IgnoreLayer, compile_patterns, load_ignore_lines, spec_matches

logger = logging.getLogger("contextpack.scan")

GIT_DIR = ".git"
GIT_TIMEOUT_SECONDS = 60


def is_git_repo(repo_path: str | Path) -> bool:
    """Check whether ``repo_path`` is inside a git work tree."""
    root = Path(repo_path)
    if (root / GIT_DIR).exists():
        return True

    try:
        result = subprocess.run(
            ["git", "-C", str(root), "rev-parse", "--is-inside-work-tree"],
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (subprocess.SubprocessError, OSError):
        return False

    return result.returncode == 0 and result.stdout.strip() == "true"


def git_ls_files(repo_path: Path) -> list[str]:
    """List tracked and untracked-but-not-ignored files, relative to ``repo_path``."""
    try:
        result = subprocess.run(
            ["git", "-C", str(repo_path), "ls-files", "-z",
             "--cached", "--others", "--exclude-standard"],
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (subprocess.SubprocessError, OSError) as e:
        raise ScanError(f"git ls-files failed: {e}") from e

    if result.returncode != 0:
        raise ScanError(f"git ls-files failed: {result.stderr.strip()}")

    return [item for item in (part.strip() for part in result.stdout.split("\0")) if item]


def _to_rel(repo_path: Path, full_path: Path | str) -> str:
    return Path(os.path.relpath(full_path, repo_path)).as_posix()


def walk_files(repo_path: Path, rules: RulesConfig, include_tests: bool) -> list[str]:
    """Walk ``repo_path`` honoring nested ignore files; returns sorted absolute paths."""
    default_spec = compile_patterns(rules.ignore.default)
    test_spec = compile_patterns([] if include_tests else rules.ignore.tests)

    results: list[str] = []
    # Each directory carries its inherited layer and whether it is itself
    # excluded (walked only because a negation targets something inside it).
    stack: list[tuple[Path, IgnoreLayer, bool]] = [(repo_path, IgnoreLayer(), False)]

    while stack:
        directory, inherited, dir_ignored = stack.pop()

        base_rel = "" if directory == repo_path else _to_rel(repo_path, directory)
        layer = inherited.extend(load_ignore_lines(directory), base_rel)

        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)

        for entry in entries:
            rel = f"{base_rel}/{entry.name}" if base_rel else entry.name

            if entry.is_dir(follow_symlinks=False):
                if entry.name == GIT_DIR:
                    continue
                if spec_matches(default_spec, rel, is_dir=True) or spec_matches(
                    test_spec, rel, is_dir=True
                ):
                    continue
                ignored = layer.ignores(rel, is_dir=True, parent_ignored=dir_ignored)
                if ignored and not layer.reincludes_under(rel):
                    continue
                stack.append((Path(entry.path), layer, ignored))
            elif entry.is_file():
                if spec_matches(default_spec, rel) or spec_matches(test_spec, rel):
                    continue
                if layer.ignores(rel, parent_ignored=dir_ignored):
                    continue
                results.append(entry.path)

    return sorted(results)


def _list_git_files(repo_path: Path, rules: RulesConfig, include_tests: bool) -> list[str]:
    default_spec = compile_patterns(rules.ignore.default)
    test_spec = compile_patterns([] if include_tests else rules.ignore.tests)

    files = []
    for rel in git_ls_files(repo_path):
        if spec_matches(default_spec, rel) or spec_matches(test_spec, rel):
            continue
        files.append(str(repo_path / rel))
    return sorted(files)


def scan_repo(repo_path: str | Path, rules: RulesConfig, include_tests: bool = False) -> list[FileEntry]:
    """Produce the sorted, size-capped list of candidate files for a repository.

    Files that disappear between listing and the size lookup are dropped;
    any other I/O error propagates.
    """
    root = Path(repo_path).resolve()

    if is_git_repo(root):
        files = _list_git_files(root, rules, include_tests)
        logger.debug("Listed %d files via git ls-files in %s", len(files), root)
    else:
        files = walk_files(root, rules, include_tests)
        logger.debug("Walked %d files in %s", len(files), root)

    entries: list[FileEntry] = []
    for file_path in files[: rules.limits.max_files]:
        try:
            size = os.stat(file_path).st_size
        except FileNotFoundError:
            logger.debug("File vanished before stat: %s", file_path)
            continue
        entries.append(FileEntry(path=file_path, size_bytes=size))

    if len(files) > rules.limits.max_files:
        logger.info("Capped scan at %d of %d files", rules.limits.max_files, len(files))

    return entries
