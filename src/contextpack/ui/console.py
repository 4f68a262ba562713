"""Rich-powered console output for context-pack."""

from __future__ import annotations

import os
from pathlib import Path

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.table import Table

from contextpack.bundle.assembler import reason_text
from contextpack.models import BundleMode, BundleResult, RankedFile


class Console:
    """Terminal output for context-pack using Rich."""

    def __init__(self) -> None:
        self.console = RichConsole()

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {escape(message)}")

    def show_ranked(self, ranked: list[RankedFile], root: Path, limit: int) -> None:
        """Display the top ranked files, relative to ``root``, with scores and reasons."""
        table = Table(title=f"Top {min(limit, len(ranked))} files", border_style="cyan")
        table.add_column("#", justify="right", style="dim")
        table.add_column("File", style="bold")
        table.add_column("Score", justify="right", style="cyan")
        table.add_column("Reasons")

        for position, file in enumerate(ranked[:limit], 1):
            label = Path(os.path.relpath(file.path, root)).as_posix()
            table.add_row(str(position), escape(label), str(file.score), escape(reason_text(file.reasons)))

        self.console.print(table)

    def show_bundle(self, bundle: BundleResult) -> None:
        """Display a bundle summary: totals plus one row per included file."""
        table = Table(title="Context Bundle", border_style="cyan")
        table.add_column("File", style="bold")
        table.add_column("Mode")
        table.add_column("Tokens", justify="right", style="cyan")
        table.add_column("Score", justify="right")

        for file in bundle.files:
            mode_style = "green" if file.mode is BundleMode.FULL else "yellow"
            table.add_row(
                escape(file.path),
                f"[{mode_style}]{file.mode.value}[/{mode_style}]",
                f"{file.estimated_tokens:,}",
                str(file.score),
            )

        self.console.print(table)
        self.console.print(
            f"  Estimated tokens: [bold]{bundle.estimated_tokens:,}[/bold] / {bundle.budget:,}"
        )
        self.console.print(
            f"  Files included: {bundle.files_included}, skipped: {bundle.skipped_files}"
        )
