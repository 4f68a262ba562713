"""Pattern-based import parsing and resolution, one family per language group.

No parser is involved: each family strips comments with a best-effort
rule, pulls import specifiers out with regexes and resolves them against
an index of the scanned files. Three resolution strategies exist:

- relative-path (JS/TS, Go): ``./x`` is probed against a fixed candidate list
- module-path (Python, Rust): dotted module paths looked up in a forward index
- unresolved (Java, Kotlin): imports are parsed but never produce an edge
"""

from __future__ import annotations

import posixpath
import re
from abc import ABC, abstractmethod
from typing import Any, Iterable

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT = re.compile(r"//.*$", re.MULTILINE)
_WHOLE_LINE_COMMENT = re.compile(r"^\s*//.*$", re.MULTILINE)
_HASH_COMMENT = re.compile(r"#.*$", re.MULTILINE)


def _extension(path: str) -> str:
    return posixpath.splitext(path)[1].lower()


class LanguageFamily(ABC):
    """Parse import specifiers and resolve them to repo-relative paths."""

    name: str = ""
    extensions: tuple[str, ...] = ()

    def handles(self, rel_path: str) -> bool:
        return _extension(rel_path) in self.extensions

    def strip_comments(self, content: str) -> str:
        return content

    def build_index(self, rel_paths: Iterable[str]) -> Any:
        """Build the lookup structure ``resolve`` receives. Called once per graph."""
        return None

    @abstractmethod
    def parse(self, content: str) -> list[str]:
        """Extract raw import specifiers from already comment-stripped content."""

    @abstractmethod
    def resolve(self, from_path: str, specifier: str, index: Any) -> str | None:
        """Resolve a specifier imported by ``from_path``, or None."""

    def imports(self, content: str) -> list[str]:
        return self.parse(self.strip_comments(content))


# ---------------------------------------------------------------------------
# Relative-path families
# ---------------------------------------------------------------------------

class RelativePathFamily(LanguageFamily):
    """Resolve ``./`` and ``../`` specifiers by probing candidate files."""

    suffixes: tuple[str, ...] = ()
    index_names: tuple[str, ...] = ()

    def build_index(self, rel_paths: Iterable[str]) -> frozenset[str]:
        return frozenset(rel_paths)

    def candidates(self, base: str) -> list[str]:
        found = [base]
        found.extend(f"{base}{suffix}" for suffix in self.suffixes)
        found.extend(posixpath.join(base, name) for name in self.index_names)
        return found

    def resolve(self, from_path: str, specifier: str, index: frozenset[str]) -> str | None:
        if not specifier.startswith("."):
            return None

        joined = posixpath.normpath(posixpath.join(posixpath.dirname(from_path), specifier))
        if joined == ".." or joined.startswith("../"):
            return None

        for candidate in self.candidates(joined):
            if candidate in index:
                return candidate
        return None


class JavaScriptFamily(RelativePathFamily):
    name = "javascript"
    extensions = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")
    suffixes = (".ts", ".tsx", ".js", ".jsx", ".json")
    index_names = tuple(f"index{suffix}" for suffix in suffixes)

    _PATTERNS = (
        re.compile(r"""\bimport\s+(?:[\w*{}\s,$]+?\s+from\s+)?["']([^"']+)["']"""),
        re.compile(r"""\bexport\s+(?:type\s+)?(?:\*(?:\s+as\s+\w+)?|\{[^}]*\})\s*from\s*["']([^"']+)["']"""),
        re.compile(r"""\brequire\(\s*["']([^"']+)["']\s*\)"""),
        re.compile(r"""\bimport\(\s*["']([^"']+)["']\s*\)"""),
    )

    def strip_comments(self, content: str) -> str:
        return _WHOLE_LINE_COMMENT.sub("", _BLOCK_COMMENT.sub("", content))

    def parse(self, content: str) -> list[str]:
        specifiers: list[str] = []
        for pattern in self._PATTERNS:
            specifiers.extend(pattern.findall(content))
        return specifiers


class GoFamily(RelativePathFamily):
    name = "go"
    extensions = (".go",)
    suffixes = (".go",)
    index_names = ("main.go",)

    _IMPORT_BLOCK = re.compile(r"\bimport\s+(?:\([^)]*\)|(?:[\w.]+\s+)?\"[^\"]+\")")
    _QUOTED = re.compile(r"\"([^\"]+)\"")

    def strip_comments(self, content: str) -> str:
        return _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub("", content))

    def parse(self, content: str) -> list[str]:
        specifiers: list[str] = []
        for block in self._IMPORT_BLOCK.findall(content):
            specifiers.extend(self._QUOTED.findall(block))
        return specifiers


# ---------------------------------------------------------------------------
# Module-path families
# ---------------------------------------------------------------------------

class PythonFamily(LanguageFamily):
    """Dotted module paths, including ``from .. import`` relative forms."""

    name = "python"
    extensions = (".py",)

    _FROM_IMPORT = re.compile(r"^\s*from\s+(\.+[\w.]*|[\w.]+)\s+import\b", re.MULTILINE)
    _IMPORT = re.compile(r"^\s*import\s+([\w.]+(?:\s*,\s*[\w.]+)*)", re.MULTILINE)

    def strip_comments(self, content: str) -> str:
        return _HASH_COMMENT.sub("", content)

    def parse(self, content: str) -> list[str]:
        specifiers = list(self._FROM_IMPORT.findall(content))
        for group in self._IMPORT.findall(content):
            specifiers.extend(part.strip() for part in group.split(","))
        return specifiers

    def build_index(self, rel_paths: Iterable[str]) -> dict[str, str]:
        """Map dotted module paths to files; first occurrence wins.

        Packages are indexed under their directory. Modules under a top-level
        ``src/`` directory are also reachable without the ``src.`` prefix.
        """
        index: dict[str, str] = {}
        aliases: list[tuple[str, str]] = []

        for rel_path in rel_paths:
            if _extension(rel_path) != ".py":
                continue
            if posixpath.basename(rel_path) == "__init__.py":
                module = posixpath.dirname(rel_path).replace("/", ".")
            else:
                module = rel_path[: -len(".py")].replace("/", ".")
            if not module:
                continue
            index.setdefault(module, rel_path)
            if module.startswith("src."):
                aliases.append((module[len("src."):], rel_path))

        for module, rel_path in aliases:
            index.setdefault(module, rel_path)

        return index

    def resolve(self, from_path: str, specifier: str, index: dict[str, str]) -> str | None:
        if not specifier.startswith("."):
            return index.get(specifier)

        dots = len(specifier) - len(specifier.lstrip("."))
        remainder = specifier[dots:]
        parts = [part for part in posixpath.dirname(from_path).split("/") if part]
        if dots > 1:
            parts = parts[: max(0, len(parts) - (dots - 1))]
        if remainder:
            parts.append(remainder)

        module = ".".join(parts)
        return index.get(module) if module else None


class RustFamily(LanguageFamily):
    """``crate::``, ``super::`` and ``self::`` paths plus ``mod x;`` declarations."""

    name = "rust"
    extensions = (".rs",)

    _ROOT_FILES = ("mod.rs", "lib.rs", "main.rs")
    _CRATE_ROOT_FILES = ("lib.rs", "main.rs")
    _USE = re.compile(r"^\s*(?:pub(?:\([^)]*\))?\s+)?use\s+([\w:]+)", re.MULTILINE)
    _MOD = re.compile(r"^\s*(?:pub(?:\([^)]*\))?\s+)?mod\s+(\w+)\s*;", re.MULTILINE)

    def strip_comments(self, content: str) -> str:
        return _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub("", content))

    def parse(self, content: str) -> list[str]:
        specifiers = [spec.rstrip(":") for spec in self._USE.findall(content)]
        specifiers.extend(f"self::{name}" for name in self._MOD.findall(content))
        return specifiers

    @classmethod
    def module_path(cls, rel_path: str) -> str:
        """Dotted module path; ``mod.rs``/``lib.rs``/``main.rs`` map to their directory."""
        if posixpath.basename(rel_path) in cls._ROOT_FILES:
            return posixpath.dirname(rel_path).replace("/", ".")
        return rel_path[: -len(".rs")].replace("/", ".")

    def build_index(self, rel_paths: Iterable[str]) -> dict[str, Any]:
        modules: dict[str, str] = {}
        crate_roots: set[str] = set()
        for rel_path in rel_paths:
            if _extension(rel_path) != ".rs":
                continue
            if posixpath.basename(rel_path) in self._CRATE_ROOT_FILES:
                crate_roots.add(posixpath.dirname(rel_path))
            module = self.module_path(rel_path)
            if module:
                modules.setdefault(module, rel_path)
        return {"modules": modules, "crate_roots": crate_roots}

    @staticmethod
    def _crate_root(from_path: str, crate_roots: set[str]) -> str | None:
        directory = posixpath.dirname(from_path)
        while True:
            if directory in crate_roots:
                return directory
            if not directory:
                return None
            directory = posixpath.dirname(directory)

    def resolve(self, from_path: str, specifier: str, index: dict[str, Any]) -> str | None:
        modules: dict[str, str] = index["modules"]
        segments = [segment for segment in specifier.split("::") if segment]
        if not segments:
            return None

        head, rest = segments[0], segments[1:]
        if head == "crate":
            root = self._crate_root(from_path, index["crate_roots"])
            if root is None:
                return None
            base = [part for part in root.split("/") if part]
        elif head in ("self", "super"):
            base = [part for part in self.module_path(from_path).split(".") if part]
            if head == "super":
                base = base[:-1]
            while rest and rest[0] == "super":
                base = base[:-1]
                rest = rest[1:]
        else:
            return None

        if not rest:
            return modules.get(".".join(base))

        # Trailing segments may name items (types, functions) rather than modules.
        for end in range(len(rest), 0, -1):
            resolved = modules.get(".".join(base + rest[:end]))
            if resolved:
                return resolved
        return None


# ---------------------------------------------------------------------------
# Unresolved families
# ---------------------------------------------------------------------------

class JvmFamily(LanguageFamily):
    """Java and Kotlin imports are recognised but never mapped to files."""

    name = "jvm"
    extensions = (".java", ".kt")

    _IMPORT = re.compile(r"^\s*import\s+(?:static\s+)?([\w.]+(?:\.\*)?)", re.MULTILINE)

    def strip_comments(self, content: str) -> str:
        return _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub("", content))

    def parse(self, content: str) -> list[str]:
        return self._IMPORT.findall(content)

    def resolve(self, from_path: str, specifier: str, index: Any) -> str | None:
        return None


DEFAULT_FAMILIES: tuple[LanguageFamily, ...] = (
    JavaScriptFamily(),
    GoFamily(),
    PythonFamily(),
    RustFamily(),
    JvmFamily(),
)


def family_for(rel_path: str, families: Iterable[LanguageFamily] = DEFAULT_FAMILIES) -> LanguageFamily | None:
    """Return the family handling ``rel_path``'s extension, if any."""
    for family in families:
        if family.handles(rel_path):
            return family
    return None
