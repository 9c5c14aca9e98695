"""
ast_parser.py - Tree-sitter frontend producing normalized Node trees.

Responsibilities:
- Load and cache tree-sitter Language objects and parsers per language.
- Parse files or in-memory sources.
- Convert tree-sitter trees into the Node model and compress them the same
  way ANTLR trees are compressed.
- Enumerate source files under a directory.

Tree-sitter grammars label nodes differently from the ANTLR grammars the
function-info extractors are written against; trees from this frontend are
meant for flattening and storage.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import tree_sitter_cpp as tscpp
import tree_sitter_java as tsjava
import tree_sitter_php as tsphp
import tree_sitter_python as tspython
import tree_sitter_rust as tsrust
import tree_sitter_typescript as tsts
from tree_sitter import Language, Parser, Tree
from tree_sitter import Node as TSNode

from ast_mine.conversion import ERROR_LABEL, compress_tree, simplify_tree
from ast_mine.models import NodeRange, Position
from ast_mine.node import Node

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Extension → Language mapping
# ---------------------------------------------------------------------------

EXT_TO_LANG: dict[str, str] = {
    ".java": "java",
    ".py": "python",
    ".php": "php",
    ".cpp": "cpp", ".cxx": "cpp", ".cc": "cpp", ".c": "cpp",
    ".hpp": "cpp", ".hxx": "cpp", ".hh": "cpp", ".h": "cpp",
    ".rs": "rust",
    ".ts": "typescript", ".tsx": "typescript",
}

TREE_MODES = ("compress", "simplify")


class ParserManager:
    """Loads and caches tree-sitter parsers per language.

    Usage::

        pm = ParserManager()
        root = pm.parse_file("/path/to/Foo.java")   # compressed Node tree
    """

    def __init__(
        self,
        tree_mode: str = "compress",
        ext_to_lang: Optional[dict[str, str]] = None,
    ) -> None:
        if tree_mode not in TREE_MODES:
            raise ValueError(f"Unknown tree mode '{tree_mode}', expected one of {TREE_MODES}")
        self.tree_mode = tree_mode
        self._ext_to_lang = ext_to_lang if ext_to_lang is not None else EXT_TO_LANG
        self._parsers: dict[str, Parser] = {}
        self._init_languages()

    def _init_languages(self) -> None:
        """Load tree-sitter Language objects from pre-built bindings."""
        lang_defs = {
            "java":       Language(tsjava.language()),
            "python":     Language(tspython.language()),
            "php":        Language(tsphp.language_php()),
            "cpp":        Language(tscpp.language()),
            "rust":       Language(tsrust.language()),
            "typescript": Language(tsts.language_typescript()),
        }
        for name, lang in lang_defs.items():
            self._parsers[name] = Parser(lang)

    @property
    def languages(self) -> list[str]:
        return sorted(self._parsers)

    def detect_language(self, file_path: str) -> Optional[str]:
        """Return the language key for a file, or None if unsupported."""
        ext = Path(file_path).suffix.lower()
        return self._ext_to_lang.get(ext)

    def parse_source(self, source: bytes, lang: str) -> Node:
        """Parse ``source`` as ``lang`` and return the normalized tree."""
        parser = self._parsers.get(lang)
        if parser is None:
            raise ValueError(f"Unsupported language '{lang}'")
        tree = parser.parse(source)
        return self.normalize(convert_tree_sitter_tree(tree, source))

    def parse_file(self, file_path: str) -> Optional[Node]:
        """Parse a source file; None if it is unsupported or unreadable."""
        lang = self.detect_language(file_path)
        if lang is None:
            return None
        try:
            with open(file_path, "rb") as fh:
                source = fh.read()
        except OSError as exc:
            logger.error("Cannot read '%s': %s", file_path, exc)
            return None
        return self.parse_source(source, lang)

    def normalize(self, root: Node) -> Node:
        if self.tree_mode == "simplify":
            return simplify_tree(root)
        return compress_tree(root)


# ---------------------------------------------------------------------------
# Tree-sitter conversion
# ---------------------------------------------------------------------------

def convert_tree_sitter_tree(tree: Tree, source: bytes) -> Node:
    """Convert a tree-sitter tree into an uncompressed Node tree.

    ``ERROR`` subtrees and the zero-width ``MISSING`` nodes tree-sitter
    inserts during error recovery both become leaves labeled ``Error``.
    """
    root, expand = _convert_ts_node(tree.root_node, source, None)
    stack: list[tuple[TSNode, Node]] = [(tree.root_node, root)] if expand else []
    while stack:
        ts_node, current = stack.pop()
        children: list[Node] = []
        for ts_child in ts_node.children:
            child, expand = _convert_ts_node(ts_child, source, current)
            children.append(child)
            if expand:
                stack.append((ts_child, child))
        current.replace_children(children)
    return root


def _convert_ts_node(ts_node: TSNode, source: bytes, parent: Optional[Node]) -> tuple[Node, bool]:
    """Return the converted node and whether its children still need converting."""
    if ts_node.type == "ERROR" or ts_node.is_missing:
        return Node(ERROR_LABEL, _node_text(ts_node, source), _ts_range(ts_node), parent), False
    if ts_node.child_count == 0:
        return Node(ts_node.type, _node_text(ts_node, source), _ts_range(ts_node), parent), False
    return Node(ts_node.type, None, _ts_range(ts_node), parent), True


def _node_text(node: TSNode, source: bytes) -> str:
    """Extract the UTF-8 text for a tree-sitter node."""
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def _ts_range(node: TSNode) -> NodeRange:
    start_row, start_col = node.start_point[0], node.start_point[1]
    end_row, end_col = node.end_point[0], node.end_point[1]
    start = Position(line=start_row + 1, column=start_col)
    if (end_row, end_col) == (start_row, start_col):
        # zero-width (MISSING) node
        return NodeRange(start=start, end=start)
    return NodeRange(
        start=start,
        # tree-sitter end points are exclusive
        end=Position(line=end_row + 1, column=max(end_col - 1, 0)),
    )


# ---------------------------------------------------------------------------
# File enumeration
# ---------------------------------------------------------------------------

def walk_source_files(
    root: str,
    exclude_dirs: Optional[list[str]] = None,
    ext_to_lang: Optional[dict[str, str]] = None,
) -> list[tuple[str, str]]:
    """Recursively enumerate all source files under root.

    Returns a sorted list of (absolute_file_path, language) tuples.
    """
    if exclude_dirs is None:
        exclude_dirs = [
            ".git", "__pycache__", "node_modules", "target", "build",
            "dist", ".gradle", ".idea", ".vscode",
        ]
    if ext_to_lang is None:
        ext_to_lang = EXT_TO_LANG
    result: list[tuple[str, str]] = []
    for dirpath, dirnames, filenames in os.walk(os.path.abspath(root)):
        # Prune excluded directories in-place
        dirnames[:] = [
            d for d in dirnames
            if d not in exclude_dirs and not d.startswith(".")
        ]
        for fname in filenames:
            lang = ext_to_lang.get(Path(fname).suffix.lower())
            if lang:
                result.append((os.path.join(dirpath, fname), lang))
    return sorted(result)


def extensions_to_languages(language_extensions: dict[str, list[str]]) -> dict[str, str]:
    """Invert a ``{language: [extensions]}`` config table."""
    return {
        ext.lower(): lang
        for lang, exts in language_extensions.items()
        for ext in exts
    }
