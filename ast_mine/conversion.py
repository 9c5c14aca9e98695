"""
conversion.py - ANTLR parse tree → Node tree, plus path compression.

Responsibilities:
- Convert an ANTLR runtime parse tree (rule contexts, terminal nodes, error
  nodes) into a Node tree, labeling rules by name and terminals by their
  symbolic name.
- Collapse single-child chains, either into compound ``a|b|c`` labels
  (``compress_tree``) or by dropping the intermediate layers entirely
  (``simplify_tree``).

The two compression variants are not interchangeable: compound labels keep
the grammar provenance the function-info extractors rely on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from antlr4 import ParserRuleContext, Token
from antlr4.tree.Tree import ErrorNode, TerminalNode

from ast_mine.models import NodeRange, Position
from ast_mine.node import LABEL_SEPARATOR, Node

logger = logging.getLogger(__name__)

ERROR_LABEL = "Error"
EOF_LABEL = "EOF"
_INVALID_NAME = "<INVALID>"


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Vocabulary:
    """Token type → symbolic / literal name lookup of a generated grammar."""
    symbolic_names: Sequence[Optional[str]] = field(default_factory=tuple)
    literal_names: Sequence[Optional[str]] = field(default_factory=tuple)

    @classmethod
    def from_parser(cls, parser: Any) -> "Vocabulary":
        """Build from a generated ANTLR parser (or lexer) instance or class."""
        return cls(
            symbolic_names=tuple(getattr(parser, "symbolicNames", ())),
            literal_names=tuple(getattr(parser, "literalNames", ())),
        )

    def get_symbolic_name(self, token_type: int) -> Optional[str]:
        if token_type == Token.EOF:
            return EOF_LABEL
        return _lookup(self.symbolic_names, token_type)

    def get_literal_name(self, token_type: int) -> Optional[str]:
        return _lookup(self.literal_names, token_type)

    def get_display_name(self, token_type: int) -> str:
        literal = self.get_literal_name(token_type)
        if literal is not None:
            return literal.strip("'")
        symbolic = self.get_symbolic_name(token_type)
        if symbolic is not None:
            return symbolic
        return str(token_type)


def _lookup(names: Sequence[Optional[str]], token_type: int) -> Optional[str]:
    if 0 <= token_type < len(names):
        name = names[token_type]
        if name and name != _INVALID_NAME:
            return name
    return None


# ---------------------------------------------------------------------------
# ANTLR conversion
# ---------------------------------------------------------------------------

def convert_antlr_tree(
    tree: ParserRuleContext,
    rule_names: Sequence[str],
    vocabulary: Vocabulary,
) -> Node:
    """Convert an ANTLR parse tree and compress it."""
    return compress_tree(build_antlr_tree(tree, rule_names, vocabulary))


def build_antlr_tree(
    tree: ParserRuleContext,
    rule_names: Sequence[str],
    vocabulary: Vocabulary,
) -> Node:
    """Convert an ANTLR parse tree without compressing it."""
    root = _rule_node(tree, rule_names, None)
    stack: list[tuple[ParserRuleContext, Node]] = [(tree, root)]
    while stack:
        rule_context, current = stack.pop()
        children: list[Node] = []
        for child in rule_context.getChildren():
            # ErrorNode is a TerminalNode in the runtime, check it first
            if isinstance(child, ErrorNode):
                children.append(_convert_error_node(child, current))
            elif isinstance(child, TerminalNode):
                children.append(_convert_terminal(child, current, vocabulary))
            else:
                node = _rule_node(child, rule_names, current)
                children.append(node)
                stack.append((child, node))
        current.replace_children(children)
    return root


def _rule_node(
    rule_context: ParserRuleContext,
    rule_names: Sequence[str],
    parent: Optional[Node],
) -> Node:
    type_label = rule_names[rule_context.getRuleIndex()]
    return Node(type_label, None, _rule_range(rule_context), parent)


def _convert_terminal(terminal: TerminalNode, parent: Node, vocabulary: Vocabulary) -> Node:
    symbol = terminal.getSymbol()
    token_type = symbol.type if symbol is not None else Token.INVALID_TYPE
    label = vocabulary.get_symbolic_name(token_type) or vocabulary.get_display_name(token_type)
    text = symbol.text if symbol is not None else terminal.getText()
    return Node(label, text, _token_range(symbol), parent)


def _convert_error_node(error_node: ErrorNode, parent: Node) -> Node:
    return Node(ERROR_LABEL, error_node.getText(), _token_range(error_node.getSymbol()), parent)


def _rule_range(rule_context: ParserRuleContext) -> Optional[NodeRange]:
    start, stop = rule_context.start, rule_context.stop
    if start is None or stop is None or start.line is None or stop.line is None:
        return None
    return NodeRange(
        start=Position(line=start.line, column=start.column),
        end=Position(line=stop.line, column=stop.column + stop.stop - stop.start),
    )


def _token_range(symbol: Optional[Token]) -> Optional[NodeRange]:
    if symbol is None or symbol.line is None:
        return None
    return NodeRange(
        start=Position(line=symbol.line, column=symbol.column),
        end=Position(line=symbol.line, column=symbol.column + symbol.stop - symbol.start),
    )


# ---------------------------------------------------------------------------
# Compression
# ---------------------------------------------------------------------------

def compress_tree(root: Node) -> Node:
    """Fold every single-child chain into one node with a compound label.

    The folded node keeps the outer node's range and parent, takes the token
    of the fully compressed inner node, and adopts its children.
    """

    def fold(node: Node, children: list[Node]) -> Node:
        if len(children) == 1:
            inner = children[0]
            folded = Node(
                node.type_label + LABEL_SEPARATOR + inner.type_label,
                inner.token,
                node.range,
                node.parent,
            )
            folded.replace_children(inner.children)
            return folded
        node.replace_children(children)
        return node

    return _rebuild_post_order(root, fold)


def simplify_tree(root: Node) -> Node:
    """Replace every single-child chain by its innermost node."""

    def drop_chain(node: Node, children: list[Node]) -> Node:
        if len(children) == 1:
            inner = children[0]
            inner.parent = node.parent
            return inner
        node.replace_children(children)
        return node

    return _rebuild_post_order(root, drop_chain)


def _rebuild_post_order(root: Node, rebuild: Callable[[Node, list[Node]], Node]) -> Node:
    # generated code can nest deeper than the interpreter recursion limit
    rebuilt: dict[int, Node] = {}
    stack: list[tuple[Node, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if not expanded:
            stack.append((node, True))
            stack.extend((child, False) for child in node.children)
            continue
        children = [rebuilt.pop(id(child)) for child in node.children]
        rebuilt[id(node)] = rebuild(node, children)
    return rebuilt[id(root)]
