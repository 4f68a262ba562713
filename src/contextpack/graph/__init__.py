"""File-level import graph across languages."""

from contextpack.graph.builder import ImportGraphBuilder, linked_files
from contextpack.graph.languages import DEFAULT_FAMILIES, LanguageFamily, family_for

__all__ = ["DEFAULT_FAMILIES", "ImportGraphBuilder", "LanguageFamily", "family_for", "linked_files"]
