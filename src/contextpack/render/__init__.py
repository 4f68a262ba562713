"""Bundle renderers: Markdown for agents, JSON for tooling, explain for humans."""

from contextpack.render.markdown import guess_language, render_bundle_markdown, render_explain_markdown
from contextpack.render.payload import (
    load_bundle_json,
    parse_bundle_payload,
    render_bundle_payload,
    write_bundle_outputs,
    write_explain,
)

__all__ = [
    "guess_language",
    "load_bundle_json",
    "parse_bundle_payload",
    "render_bundle_markdown",
    "render_bundle_payload",
    "render_explain_markdown",
    "write_bundle_outputs",
    "write_explain",
]
