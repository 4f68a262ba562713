"""Rules configuration for context-pack."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from contextpack.exceptions import ConfigError

OUTPUT_DIR = ".context-pack"
RULES_ENV_VAR = "CONTEXT_PACK_RULES"


class _RulesModel(BaseModel):
    """Base for rule sections: camelCase on disk, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BudgetConfig(_RulesModel):
    """Token budget and fidelity-tier parameters."""

    default_tokens: int = Field(default=14000, gt=0)
    token_chars_per_token: int = Field(default=4, gt=0)
    max_file_tokens: int = Field(default=4000, gt=0)
    trim_chars: int = Field(default=8000, gt=0)
    signature_max_lines: int = Field(default=200, gt=0)


class WeightsConfig(_RulesModel):
    """Additive weights and caps for each relevance signal."""

    filename_match: int = Field(default=6, ge=0)
    path_match: int = Field(default=3, ge=0)
    content_match_per_token: int = Field(default=2, ge=0)
    content_match_max: int = Field(default=12, ge=0)
    git_history_max: int = Field(default=20, ge=0)
    git_recent_boost: int = Field(default=8, ge=0)
    cochange_boost: int = Field(default=4, ge=0)
    dependency_proximity: int = Field(default=4, ge=0)
    dir_proximity_max: int = Field(default=3, ge=0)
    structural_entrypoint: int = Field(default=6, ge=0)
    structural_config: int = Field(default=5, ge=0)
    structural_manifest: int = Field(default=5, ge=0)


class LimitsConfig(_RulesModel):
    """Caps that bound the work done on large repositories."""

    max_commits: int = Field(default=200, ge=0)
    max_files: int = Field(default=5000, ge=0)
    recent_commits: int = Field(default=20, ge=0)
    binary_sample_bytes: int = Field(default=4096, gt=0)


class IgnoreConfig(_RulesModel):
    """Non-overridable ignore patterns (gitignore syntax)."""

    default: list[str] = Field(
        default_factory=lambda: [
            ".git/",
            ".hg/",
            ".svn/",
            ".context-pack/",
            "node_modules/",
            "bower_components/",
            "vendor/",
            "dist/",
            "build/",
            "out/",
            "target/",
            "coverage/",
            ".next/",
            ".nuxt/",
            ".cache/",
            ".venv/",
            "venv/",
            "__pycache__/",
            ".mypy_cache/",
            ".pytest_cache/",
            ".tox/",
            ".idea/",
            ".vscode/",
            "*.pyc",
            "*.pyo",
            "*.min.js",
            "*.min.css",
            "*.map",
            "*.lock",
            "package-lock.json",
            "pnpm-lock.yaml",
            ".DS_Store",
            ".env",
            ".env.*",
        ]
    )
    tests: list[str] = Field(
        default_factory=lambda: [
            "test/",
            "tests/",
            "__tests__/",
            "spec/",
            "*.test.*",
            "*.spec.*",
            "test_*.py",
            "*_test.py",
            "*_test.go",
            "conftest.py",
        ]
    )


class StructuralConfig(_RulesModel):
    """Repo-relative paths that get structural-role boosts."""

    entrypoints: list[str] = Field(
        default_factory=lambda: [
            "src/index.ts",
            "src/index.js",
            "src/main.ts",
            "src/main.js",
            "index.ts",
            "index.js",
            "main.py",
            "app.py",
            "__main__.py",
            "main.go",
            "src/main.rs",
            "src/lib.rs",
        ]
    )
    config_files: list[str] = Field(
        default_factory=lambda: [
            "tsconfig.json",
            "vite.config.ts",
            "webpack.config.js",
            ".eslintrc.json",
            "setup.cfg",
            "tox.ini",
            "Makefile",
            "Dockerfile",
            "docker-compose.yml",
        ]
    )
    manifests: list[str] = Field(
        default_factory=lambda: [
            "package.json",
            "pyproject.toml",
            "setup.py",
            "requirements.txt",
            "Cargo.toml",
            "go.mod",
            "pom.xml",
            "build.gradle",
            "build.gradle.kts",
        ]
    )


class DependencyConfig(_RulesModel):
    """File extensions that take part in import-graph construction."""

    extensions: list[str] = Field(
        default_factory=lambda: [
            ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs",
            ".py", ".go", ".rs", ".java", ".kt",
        ]
    )


class FilesConfig(_RulesModel):
    """Text detection and signature extraction settings."""

    text_extensions: list[str] = Field(
        default_factory=lambda: [
            ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".json",
            ".md", ".txt", ".yml", ".yaml", ".toml", ".ini", ".cfg",
            ".py", ".go", ".rs", ".java", ".kt", ".c", ".h", ".cpp", ".hpp",
            ".html", ".css", ".scss", ".sql", ".sh", ".rb", ".php", ".swift",
        ]
    )
    signature_patterns: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "ts": [
                r"^\s*export\s",
                r"^\s*(async\s+)?function\s",
                r"^\s*(abstract\s+)?class\s",
                r"^\s*interface\s",
                r"^\s*type\s+\w+",
            ],
            "py": [
                r"^\s*(async\s+)?def\s",
                r"^\s*class\s",
            ],
            "go": [
                r"^func\s",
                r"^type\s",
            ],
            "rs": [
                r"^\s*(pub(\([^)]*\))?\s+)?(async\s+)?(fn|struct|enum|trait|impl|mod|type)\b",
            ],
            "java": [
                r"^\s*(public|protected|private)?\s*(abstract\s+|static\s+|final\s+)*"
                r"(class|interface|enum|record)\s",
                r"^\s*(public|protected|private)\s+[\w<>\[\], ]+\s+\w+\s*\(",
            ],
            "kt": [
                r"^\s*((public|private|internal|protected|open|abstract|data|sealed)\s+)*"
                r"(fun|class|interface|object)\s",
            ],
        }
    )

    @field_validator("signature_patterns")
    @classmethod
    def _patterns_compile(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        for group, patterns in value.items():
            for pattern in patterns:
                try:
                    re.compile(pattern)
                except re.error as e:
                    raise ValueError(f"invalid signature pattern for {group!r}: {pattern!r} ({e})") from e
        return value


class RulesConfig(_RulesModel):
    """Full rule set consumed by the context-selection engine."""

    budget: BudgetConfig = Field(default_factory=BudgetConfig)
    weights: WeightsConfig = Field(default_factory=WeightsConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    ignore: IgnoreConfig = Field(default_factory=IgnoreConfig)
    structural: StructuralConfig = Field(default_factory=StructuralConfig)
    dependency: DependencyConfig = Field(default_factory=DependencyConfig)
    files: FilesConfig = Field(default_factory=FilesConfig)


def load_rules(rules_path: str | Path | None = None) -> RulesConfig:
    """Load rules from a JSON file, falling back to the built-in defaults.

    An explicit path must exist. Without one, the ``CONTEXT_PACK_RULES``
    environment variable is consulted before the defaults are used.
    Partial files are merged over the defaults section by section.
    """
    if rules_path is None:
        rules_path = os.environ.get(RULES_ENV_VAR) or None
    if rules_path is None:
        return RulesConfig()

    resolved = Path(rules_path).expanduser().resolve()
    if not resolved.is_file():
        raise ConfigError(f"Rules file not found: {resolved}")

    try:
        data = json.loads(resolved.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Rules file is not valid JSON: {resolved}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Rules file must contain a JSON object: {resolved}")

    try:
        return RulesConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid rules in {resolved}:\n{e}") from e


def dump_rules(rules: RulesConfig) -> str:
    """Serialize rules as camelCase JSON."""
    return json.dumps(rules.model_dump(by_alias=True), indent=2)
