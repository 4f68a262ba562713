"""Layered ignore-rule resolution for manual repository walks.

Every directory's ``.gitignore`` is rewritten into root-relative gitignore
patterns and appended to the patterns inherited from its parent, so one
flat pattern list per directory decides what is excluded below it.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Iterable

import pathspec

GITIGNORE_FILE = ".gitignore"


def compile_patterns(patterns: Iterable[str]) -> pathspec.PathSpec:
    """Compile gitignore-syntax patterns into a matcher."""
    return pathspec.PathSpec.from_lines("gitignore", patterns)


def spec_matches(spec: pathspec.PathSpec, rel_path: str, is_dir: bool = False) -> bool:
    """Check a repo-relative path; directories are matched in their ``dir/`` form."""
    if is_dir:
        return spec.match_file(f"{rel_path}/")
    return spec.match_file(rel_path)


def load_ignore_lines(dir_path: Path) -> list[str]:
    """Read the raw lines of a directory's ignore file, if it has one."""
    ignore_file = dir_path / GITIGNORE_FILE
    if not ignore_file.is_file():
        return []
    return ignore_file.read_text(encoding="utf-8", errors="replace").splitlines()


def to_root_relative(pattern: str, base_rel: str) -> str | None:
    """Rewrite one ignore-file line from ``base_rel`` into a root-relative pattern.

    Returns None for blank lines and comments. Anchored patterns (leading
    slash, or a slash before the last character) are prefixed with the
    directory; unanchored ones become ``<dir>/**/<pattern>``.
    """
    raw = pattern.strip()
    if not raw or raw == "/":
        return None

    if raw.startswith("\\#"):
        raw = raw[1:]
    elif raw.startswith("#"):
        return None

    negated = False
    if raw.startswith("\\!"):
        raw = raw[1:]
    elif raw.startswith("!"):
        negated = True
        raw = raw[1:]

    if not raw or raw == "/":
        return None

    prefix = f"{base_rel}/" if base_rel else ""

    if raw.startswith("/"):
        converted = f"/{prefix}{raw[1:]}"
    elif "/" in raw[:-1]:
        converted = f"/{prefix}{raw}"
    else:
        converted = f"/{prefix}**/{raw}" if prefix else f"**/{raw}"

    return f"!{converted}" if negated else converted


@dataclass(frozen=True)
class IgnoreLayer:
    """The effective, append-only ignore patterns for one directory."""

    patterns: tuple[str, ...] = ()

    def extend(self, lines: Iterable[str], base_rel: str) -> IgnoreLayer:
        """Return a child layer with ``lines`` (read in ``base_rel``) appended."""
        converted = [p for p in (to_root_relative(line, base_rel) for line in lines) if p]
        if not converted:
            return self
        return IgnoreLayer(self.patterns + tuple(converted))

    @cached_property
    def _dir_spec(self) -> pathspec.PathSpec:
        return compile_patterns(self.patterns)

    @cached_property
    def _file_spec(self) -> pathspec.PathSpec:
        # Directory-only patterns never match a file itself.
        return compile_patterns(p for p in self.patterns if not p.endswith("/"))

    def verdict(self, rel_path: str, is_dir: bool = False) -> bool | None:
        """Sense of the last pattern matching ``rel_path``.

        True means excluded, False means re-included by a negation, and
        None means no pattern matched.
        """
        if not self.patterns:
            return None
        if is_dir:
            return self._dir_spec.check_file(f"{rel_path}/").include
        return self._file_spec.check_file(rel_path).include

    def ignores(self, rel_path: str, is_dir: bool = False, parent_ignored: bool = False) -> bool:
        """Whether the layer excludes ``rel_path`` (last matching pattern wins).

        Without a matching pattern, the path inherits ``parent_ignored``,
        the exclusion state of the directory it sits in.
        """
        verdict = self.verdict(rel_path, is_dir)
        if verdict is None:
            return parent_ignored
        return verdict

    def reincludes_under(self, rel_dir: str) -> bool:
        """Whether a negation pattern targets ``rel_dir`` or something inside it.

        Excluded directories are still walked when this holds, so that
        "exclude the directory but keep one file" rules work.
        """
        for pattern in self.patterns:
            if not pattern.startswith("!"):
                continue
            target = pattern[1:].lstrip("/")
            if target == rel_dir or target.startswith(f"{rel_dir}/"):
                return True
        return False
