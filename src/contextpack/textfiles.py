"""Text/binary detection and file reading shared by ranking and assembly."""

from __future__ import annotations

from pathlib import Path

from contextpack.config import RulesConfig


def is_probably_text(file_path: str | Path, rules: RulesConfig) -> bool:
    """Decide whether a file is text.

    Extensions on the configured allow-list are always text. Anything else
    is sampled: a null byte in the first ``binary_sample_bytes`` bytes, or a
    failed read, marks the file as binary.
    """
    path = Path(file_path)
    if path.suffix.lower() in rules.files.text_extensions:
        return True

    try:
        with path.open("rb") as f:
            sample = f.read(rules.limits.binary_sample_bytes)
    except OSError:
        return False

    return b"\x00" not in sample


def read_text(file_path: str | Path) -> str:
    """Read a file as UTF-8, replacing undecodable bytes. Line endings are kept."""
    with open(file_path, encoding="utf-8", errors="replace", newline="") as f:
        return f.read()
