"""Repository scanning with layered ignore rules."""

from contextpack.scan.ignore import IgnoreLayer, to_root_relative
from contextpack.scan.scanner import is_git_repo, scan_repo, walk_files

__all__ = ["IgnoreLayer", "is_git_repo", "scan_repo", "to_root_relative", "walk_files"]
