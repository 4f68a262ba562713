"""Data models flowing through the context-selection pipeline."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FileEntry(BaseModel):
    """A scanned file: absolute path plus its size on disk."""

    model_config = ConfigDict(frozen=True)

    path: str
    size_bytes: int


class Commit(BaseModel):
    """A commit and the repo-relative paths it changed, in log order."""

    model_config = ConfigDict(frozen=True)

    id: str
    files: tuple[str, ...] = ()


class ScoreItem(BaseModel):
    """One labeled contribution to a file's relevance score."""

    model_config = ConfigDict(frozen=True)

    label: str
    score: int


class RankedFile(FileEntry):
    """A scanned file with its relevance score and audit trail.

    The sum of ``score_breakdown`` deltas always equals ``score``.
    """

    score: int = 0
    reasons: list[str] = Field(default_factory=list)
    score_breakdown: list[ScoreItem] = Field(default_factory=list)


class BundleMode(str, Enum):
    """Fidelity tier a file was included at."""

    FULL = "full"  # Entire content
    TRIMMED = "trimmed"  # Leading character slice
    SIGNATURE = "signature"  # Declaration lines only


class BundleFile(BaseModel):
    """A file selected into the bundle at a specific fidelity tier."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    path: str  # repo-relative, forward slashes
    score: int
    reasons: list[str] = Field(default_factory=list)
    score_breakdown: list[ScoreItem] = Field(default_factory=list)
    estimated_tokens: int
    size_bytes: int
    mode: BundleMode
    content: str


class BundleResult(BaseModel):
    """The terminal artifact of the pipeline, handed to renderers."""

    task: str
    budget: int
    files: list[BundleFile] = Field(default_factory=list)
    estimated_tokens: int = 0
    skipped_files: int = 0

    @property
    def files_included(self) -> int:
        return len(self.files)
