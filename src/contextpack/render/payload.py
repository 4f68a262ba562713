"""bundle.json payload rendering, parsing and output writing."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from contextpack.exceptions import BundleError
from contextpack.models import BundleFile, BundleResult
from contextpack.render.markdown import render_bundle_markdown, render_explain_markdown

logger = logging.getLogger("contextpack.render")

BUNDLE_MARKDOWN = "bundle.md"
BUNDLE_JSON = "bundle.json"
EXPLAIN_MARKDOWN = "explain.md"


def render_bundle_payload(bundle: BundleResult) -> dict[str, Any]:
    """JSON-ready dict with camelCase keys."""
    return {
        "task": bundle.task,
        "budget": bundle.budget,
        "estimatedTokens": bundle.estimated_tokens,
        "filesIncluded": bundle.files_included,
        "filesSkipped": bundle.skipped_files,
        "files": [file.model_dump(mode="json", by_alias=True) for file in bundle.files],
    }


def parse_bundle_payload(data: Any) -> BundleResult:
    """Rebuild a ``BundleResult`` from a payload produced by ``render_bundle_payload``.

    Raises:
        BundleError: If required keys are missing or values are malformed.
    """
    if not isinstance(data, dict):
        raise BundleError("Bundle payload must be a JSON object")

    try:
        # Explain-only payloads may omit file contents.
        files = [
            BundleFile.model_validate({"content": "", **item} if isinstance(item, dict) else item)
            for item in data.get("files", [])
        ]
        return BundleResult(
            task=data["task"],
            budget=data["budget"],
            files=files,
            estimated_tokens=data.get("estimatedTokens", 0),
            skipped_files=data.get("filesSkipped", 0),
        )
    except KeyError as e:
        raise BundleError(f"Bundle payload is missing key: {e.args[0]}") from e
    except (TypeError, ValidationError) as e:
        raise BundleError(f"Bundle payload is malformed: {e}") from e


def load_bundle_json(bundle_path: str | Path) -> BundleResult:
    """Read and parse a bundle.json file."""
    path = Path(bundle_path)
    if not path.is_file():
        raise BundleError(f"Bundle JSON not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise BundleError(f"Bundle JSON is not valid JSON: {path}: {e}") from e

    return parse_bundle_payload(data)


def write_explain(bundle: BundleResult, out_path: str | Path) -> Path:
    path = Path(out_path)
    path.write_text(render_explain_markdown(bundle), encoding="utf-8")
    return path


def write_bundle_outputs(bundle: BundleResult, out_dir: str | Path) -> dict[str, Path]:
    """Write bundle.md, bundle.json and explain.md into ``out_dir``.

    Returns:
        Mapping of output file name to the written path.
    """
    directory = Path(out_dir)
    directory.mkdir(parents=True, exist_ok=True)

    written = {
        BUNDLE_MARKDOWN: directory / BUNDLE_MARKDOWN,
        BUNDLE_JSON: directory / BUNDLE_JSON,
        EXPLAIN_MARKDOWN: directory / EXPLAIN_MARKDOWN,
    }
    written[BUNDLE_MARKDOWN].write_text(render_bundle_markdown(bundle), encoding="utf-8")
    written[BUNDLE_JSON].write_text(
        json.dumps(render_bundle_payload(bundle), indent=2), encoding="utf-8"
    )
    write_explain(bundle, written[EXPLAIN_MARKDOWN])

    logger.debug("Wrote bundle outputs to %s", directory)
    return written
