"""Command-line interface for context-pack."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console as RichConsole
from rich.logging import RichHandler

from contextpack import __version__
from contextpack.config import OUTPUT_DIR, RulesConfig, dump_rules, load_rules
from contextpack.exceptions import ContextPackError
from contextpack.pipeline import ContextPacker
from contextpack.render.payload import (
    BUNDLE_JSON,
    EXPLAIN_MARKDOWN,
    load_bundle_json,
    write_bundle_outputs,
    write_explain,
)
from contextpack.ui.console import Console

console = Console()


def _configure_logging(verbose: bool) -> None:
    """Route package logs through Rich on stderr."""
    logger = logging.getLogger("contextpack")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=RichConsole(stderr=True), show_path=False))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _resolve_repo(repo: str) -> Path:
    """Resolve the repository path or exit."""
    root = Path(repo).resolve()
    if not root.is_dir():
        console.error(f"Repository path does not exist: {repo}")
        sys.exit(1)
    return root


def _load_rules_or_exit(rules_path: str | None) -> RulesConfig:
    try:
        return load_rules(rules_path)
    except ContextPackError as e:
        console.error(str(e))
        sys.exit(1)


def _note_missing_history(packer: ContextPacker) -> None:
    if packer.history().is_empty:
        console.info("No git history found, ranking without history signals.")


@click.group()
@click.version_option(version=__version__, prog_name="context-pack")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """context-pack - task-specific context bundles for coding agents."""
    _configure_logging(verbose)


@main.command()
@click.option("--task", "-t", required=True, help="Task description.")
@click.option("--repo", "-r", default=".", help="Repository path.")
@click.option("--budget", "-b", type=click.IntRange(min=1), default=None,
              help="Token budget (default: rules budget.defaultTokens).")
@click.option("--rules", "rules_path", default=None, help="Rules JSON file.")
@click.option("--include-tests", is_flag=True, help="Include test files.")
@click.option("--out", "-o", "out_dir", default=None,
              help=f"Output directory (default: <repo>/{OUTPUT_DIR}).")
def bundle(
    task: str,
    repo: str,
    budget: int | None,
    rules_path: str | None,
    include_tests: bool,
    out_dir: str | None,
):
    """Build bundle.md, bundle.json and explain.md for a task."""
    root = _resolve_repo(repo)
    rules = _load_rules_or_exit(rules_path)
    target = Path(out_dir).resolve() if out_dir else root / OUTPUT_DIR

    try:
        packer = ContextPacker(root, rules, include_tests=include_tests)
        result = packer.pack(task, budget)
        write_bundle_outputs(result, target)
    except (ContextPackError, OSError) as e:
        console.error(str(e))
        sys.exit(1)

    _note_missing_history(packer)
    console.show_bundle(result)
    console.success(f"Wrote bundle to {target}")


@main.command()
@click.option("--task", "-t", required=True, help="Task description.")
@click.option("--repo", "-r", default=".", help="Repository path.")
@click.option("--rules", "rules_path", default=None, help="Rules JSON file.")
@click.option("--limit", "-n", type=click.IntRange(min=1), default=50, help="Number of files to show.")
@click.option("--include-tests", is_flag=True, help="Include test files.")
def scan(task: str, repo: str, rules_path: str | None, limit: int, include_tests: bool):
    """Rank files for a task without building a bundle."""
    root = _resolve_repo(repo)
    rules = _load_rules_or_exit(rules_path)

    try:
        packer = ContextPacker(root, rules, include_tests=include_tests)
        ranked = packer.rank(task)
    except (ContextPackError, OSError) as e:
        console.error(str(e))
        sys.exit(1)

    _note_missing_history(packer)
    if not ranked:
        console.warning("No candidate files found.")
        return
    console.show_ranked(ranked, root, limit)


@main.command()
@click.option("--repo", "-r", default=".", help="Repository path.")
@click.option("--bundle", "bundle_path", default=None,
              help=f"Bundle JSON path (default: <repo>/{OUTPUT_DIR}/{BUNDLE_JSON}).")
def explain(repo: str, bundle_path: str | None):
    """Regenerate explain.md next to an existing bundle.json."""
    if bundle_path:
        source = Path(bundle_path).resolve()
    else:
        source = _resolve_repo(repo) / OUTPUT_DIR / BUNDLE_JSON

    try:
        written = write_explain(load_bundle_json(source), source.parent / EXPLAIN_MARKDOWN)
    except (ContextPackError, OSError) as e:
        console.error(str(e))
        sys.exit(1)

    console.success(f"Wrote explain to {written}")


@main.command()
@click.option("--rules", "rules_path", default=None, help="Rules JSON file.")
def rules(rules_path: str | None):
    """Print the effective rules as JSON."""
    click.echo(dump_rules(_load_rules_or_exit(rules_path)))


if __name__ == "__main__":
    main()
