"""
flatten.py - Pre-order enumeration of a finished tree for serialization.

Ids start at 0 on every call and equal the node's index in the returned
list, so a parent's id is always smaller than any of its descendants'.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ast_mine.models import OutputNode
from ast_mine.node import Node


@dataclass
class EnumeratedNode:
    """A node together with its id and the ids of its direct children."""
    id: int
    node: Node
    children: list[int] = field(default_factory=list)

    def to_output_node(self, with_range: bool = False) -> OutputNode:
        return OutputNode(
            token=self.node.token or "",
            type_label=self.node.type_label,
            range=self.node.range if with_range else None,
            children=list(self.children),
        )


class TreeFlattener:
    """Gives ids to all nodes of a tree and flattens it.

    Holds no state between calls; the id counter is local to ``flatten``.
    """

    def flatten(self, root: Node) -> list[EnumeratedNode]:
        result: list[EnumeratedNode] = []
        stack: list[tuple[Node, Optional[EnumeratedNode]]] = [(root, None)]
        while stack:
            node, parent_record = stack.pop()
            record = EnumeratedNode(id=len(result), node=node)
            result.append(record)
            if parent_record is not None:
                parent_record.children.append(record.id)
            for child in reversed(node.children):
                stack.append((child, record))
        return result


def flatten_tree(root: Node) -> list[EnumeratedNode]:
    return TreeFlattener().flatten(root)
