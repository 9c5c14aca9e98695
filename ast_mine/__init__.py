"""
ast_mine - Parse-tree normalization and function metadata mining.

Converts grammar-driven parse trees (ANTLR, tree-sitter) into compact
path-compressed ASTs, extracts function declarations from Java, Python and
PHP trees, and flattens trees into JSON-lines datasets.
"""

__version__ = "0.1.0"
__author__ = "ast-mine contributors"
