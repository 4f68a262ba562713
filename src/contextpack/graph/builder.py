"""Build the symmetric file-level import graph."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Iterable, Mapping

import networkx as nx

from contextpack.config import RulesConfig
from contextpack.graph.languages import DEFAULT_FAMILIES, LanguageFamily, family_for
from contextpack.models import FileEntry

logger = logging.getLogger("contextpack.graph")


class ImportGraphBuilder:
    """Builds an undirected graph of import relationships between files.

    Nodes are repo-relative paths (forward slashes). An edge A-B exists when
    either file imports the other, so adjacency is symmetric and deduplicated
    by construction. The graph is rebuilt from scratch on every call.
    """

    def __init__(
        self,
        rules: RulesConfig,
        families: Iterable[LanguageFamily] = DEFAULT_FAMILIES,
    ) -> None:
        self.rules = rules
        self.families = tuple(families)
        self.unresolved = 0

    def build(
        self,
        repo_path: str | Path,
        entries: list[FileEntry],
        contents: Mapping[str, str],
    ) -> nx.Graph:
        """Build the graph for ``entries``.

        Args:
            repo_path: Repository root the entry paths live under.
            entries: Scanned files (absolute paths).
            contents: Already-read file contents keyed by absolute path. Files
                missing from the mapping are treated as empty.

        Returns:
            An ``nx.Graph`` whose edges carry ``kind="imports"``.
        """
        root = Path(repo_path)
        extensions = set(self.rules.dependency.extensions)
        graph = nx.Graph()
        self.unresolved = 0

        rel_by_abs = {
            entry.path: Path(os.path.relpath(entry.path, root)).as_posix() for entry in entries
        }
        rel_paths = list(rel_by_abs.values())
        indices: dict[str, Any] = {
            family.name: family.build_index(rel_paths) for family in self.families
        }

        for entry in entries:
            rel_path = rel_by_abs[entry.path]
            if Path(rel_path).suffix not in extensions:
                continue
            family = family_for(rel_path, self.families)
            if family is None:
                continue

            content = contents.get(entry.path, "")
            for specifier in family.imports(content):
                resolved = family.resolve(rel_path, specifier, indices[family.name])
                if resolved is None:
                    self.unresolved += 1
                    continue
                if resolved != rel_path:
                    graph.add_edge(rel_path, resolved, kind="imports")

        logger.debug(
            "Import graph: %d files, %d edges, %d unresolved specifiers",
            graph.number_of_nodes(), graph.number_of_edges(), self.unresolved,
        )
        return graph


def linked_files(graph: nx.Graph, rel_path: str) -> list[str]:
    """Files importing or imported by ``rel_path``, sorted."""
    if rel_path not in graph:
        return []
    return sorted(graph.neighbors(rel_path))
