"""
node.py - The normalized tree entity shared by every frontend.

A Node owns its children (ordered, grammar production order) and holds a
weak back-reference to its parent. Labels produced by path compression are
'|'-joined chains of atomic grammar labels, outermost first; the split form
is computed once per node and cached in ``atoms``.
"""

from __future__ import annotations

import weakref
from functools import lru_cache
from typing import Iterable, Iterator, Optional

from ast_mine.models import NodeRange

LABEL_SEPARATOR = "|"


@lru_cache(maxsize=4096)
def split_label(type_label: str) -> tuple[str, ...]:
    """Split a (possibly compound) label into its atomic labels."""
    return tuple(type_label.split(LABEL_SEPARATOR))


class Node:
    """Single node of a parsed and (usually) compressed tree."""

    __slots__ = ("_type_label", "_atoms", "token", "range", "_children", "_parent", "__weakref__")

    def __init__(
        self,
        type_label: str,
        token: Optional[str] = None,
        range: Optional[NodeRange] = None,
        parent: Optional[Node] = None,
    ) -> None:
        self._type_label = type_label
        self._atoms = split_label(type_label)
        self.token = token
        self.range = range
        self._children: list[Node] = []
        self._parent: Optional[weakref.ref[Node]] = None
        self.parent = parent

    # ------------------------------------------------------------------
    # Label
    # ------------------------------------------------------------------

    @property
    def type_label(self) -> str:
        return self._type_label

    @property
    def atoms(self) -> tuple[str, ...]:
        """Atomic labels of this node, outermost rule first."""
        return self._atoms

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Optional[Node]:
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, value: Optional[Node]) -> None:
        self._parent = weakref.ref(value) if value is not None else None

    @property
    def children(self) -> list[Node]:
        return self._children

    def replace_children(self, children: Iterable[Node]) -> None:
        """Replace the children and point each of them back at this node."""
        self._children = list(children)
        for child in self._children:
            child.parent = self

    def is_leaf(self) -> bool:
        return not self._children

    def pre_order(self) -> Iterator[Node]:
        """Yield this node and all of its descendants in pre-order."""
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node._children))

    def __repr__(self) -> str:
        if self.token is not None:
            return f"Node({self._type_label!r}, token={self.token!r})"
        return f"Node({self._type_label!r}, children={len(self._children)})"
