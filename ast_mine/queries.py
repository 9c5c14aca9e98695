"""
queries.py - Structural queries over compressed Node trees.

All functions are pure and total: they never mutate the tree and report
absence as ``None`` or an empty list, never as an exception.

Child lookups (``child_of_type`` / ``children_of_type``) match a child by the
FIRST atom of its label: after compression a child labeled
``typeTypeOrVoid|typeType|primitiveType|INT`` is still "the typeTypeOrVoid
child" of its parent. Self checks (``self_or_children_of_type``) match by the
LAST atom, i.e. what the node has been folded down to.
"""

from __future__ import annotations

from typing import Callable, Collection, Optional

from ast_mine.node import Node, split_label


def decompose(type_label: str) -> list[str]:
    """Split a compound label into atomic labels, outermost first."""
    return list(split_label(type_label))


def last_atom_is(node: Node, label: str) -> bool:
    return node.atoms[-1] == label


def last_atom_in(node: Node, labels: Collection[str]) -> bool:
    return node.atoms[-1] in labels


def first_atom_is(node: Node, label: str) -> bool:
    return node.atoms[0] == label


def first_atom_in(node: Node, labels: Collection[str]) -> bool:
    return node.atoms[0] in labels


def children_of_type(node: Node, label: str) -> list[Node]:
    """All direct children whose label chain starts with ``label``."""
    return [child for child in node.children if child.atoms[0] == label]


def child_of_type(node: Node, label: str) -> Optional[Node]:
    """First direct child whose label chain starts with ``label``."""
    for child in node.children:
        if child.atoms[0] == label:
            return child
    return None


def self_or_children_of_type(node: Node, label: str) -> list[Node]:
    """``[node]`` if the node itself was folded down to ``label``.

    Compression may have merged what was structurally a child into the node
    itself, so both places have to be checked.
    """
    if last_atom_is(node, label):
        return [node]
    return children_of_type(node, label)


def tokens_from_subtree(node: Node) -> str:
    """Concatenate leaf tokens of the subtree in pre-order, no separator."""
    return "".join(n.token or "" for n in node.pre_order() if n.is_leaf())


def find_enclosing_by(node: Node, predicate: Callable[[Node], bool]) -> Optional[Node]:
    """Nearest proper ancestor satisfying ``predicate``, or None."""
    current = node.parent
    while current is not None:
        if predicate(current):
            return current
        current = current.parent
    return None
