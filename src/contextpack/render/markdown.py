"""Markdown renderers for bundle.md and explain.md."""

from __future__ import annotations

import posixpath

from contextpack.bundle.assembler import DEFAULT_REASON, reason_text
from contextpack.models import BundleResult

LANGUAGE_BY_EXT: dict[str, str] = {
    ".ts": "ts",
    ".tsx": "tsx",
    ".js": "js",
    ".jsx": "jsx",
    ".json": "json",
    ".md": "md",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".toml": "toml",
    ".py": "py",
    ".go": "go",
    ".rs": "rs",
    ".java": "java",
    ".kt": "kt",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".sql": "sql",
    ".sh": "bash",
    ".rb": "rb",
    ".php": "php",
    ".swift": "swift",
}


def guess_language(path: str) -> str:
    """Code-fence language tag for a path; ``text`` when unknown."""
    return LANGUAGE_BY_EXT.get(posixpath.splitext(path)[1].lower(), "text")


def _header(title: str, bundle: BundleResult) -> list[str]:
    return [
        f"# {title}",
        "",
        f"Task: {bundle.task}",
        f"Budget: {bundle.budget}",
        f"Estimated tokens: {bundle.estimated_tokens}",
        f"Files included: {bundle.files_included}",
        f"Files skipped: {bundle.skipped_files}",
        "",
    ]


def render_bundle_markdown(bundle: BundleResult) -> str:
    """Render the bundle as a single Markdown document for an agent to read."""
    lines = _header("context-pack bundle", bundle)

    lines.append("## Index")
    for file in bundle.files:
        reason = reason_text(file.reasons)
        lines.append(f"- {file.path} ({file.estimated_tokens} tokens, {file.mode.value}) - {reason}")
    lines.append("")

    for file in bundle.files:
        reason = reason_text(file.reasons)
        lines.append(f"## {file.path}")
        lines.append(f"Reason: {reason}")
        lines.append(f"Mode: {file.mode.value}")
        lines.append(f"```{guess_language(file.path)}")
        lines.append(file.content)
        lines.append("```")
        lines.append("")

    return "\n".join(lines)


def render_explain_markdown(bundle: BundleResult) -> str:
    """Render the per-file audit report: why each file made it in, and at what tier."""
    lines = _header("context-pack explain", bundle)
    total_included = bundle.files_included

    lines.append("## File explanations")
    for index, file in enumerate(bundle.files):
        lines.append(f"### {index + 1}. {file.path}")
        lines.append(f"Score: {file.score}")
        lines.append(f"Mode: {file.mode.value}")
        if file.reasons:
            lines.append("Reasons:")
            lines.extend(f"- {reason}" for reason in file.reasons)
        else:
            lines.append(f"Reasons: {DEFAULT_REASON}")
        if file.score_breakdown:
            lines.append("Score breakdown:")
            lines.extend(f"- {item.label}: +{item.score}" for item in file.score_breakdown)
        lines.append(
            f"Ranked above {total_included - index - 1} included files due to higher score order."
        )
        lines.append(
            f"Selected before {bundle.skipped_files} skipped files "
            "because budget would have been exceeded."
        )
        heuristics = ", ".join(file.reasons) if file.reasons else "ranking only"
        lines.append(f"Heuristics triggered: {heuristics}")
        lines.append("")

    return "\n".join(lines)
