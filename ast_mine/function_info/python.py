"""
python.py - Function info for trees produced by the ANTLR Python 3 grammar.

Parameter types and return annotations are ``test`` subtrees; after
compression their labels read ``test|or_test|and_test|...|atom|NAME``, so
matching on the first atom is enough to find them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ast_mine.errors import Extraction, ExtractionError, InvariantViolation
from ast_mine.function_info.base import (
    EnclosingElement,
    FunctionInfo,
    extract_with_logger,
    unwrap_or_none,
)
from ast_mine.models import EnclosingElementKind, FunctionInfoParameter
from ast_mine.node import Node
from ast_mine.queries import (
    child_of_type,
    children_of_type,
    find_enclosing_by,
    first_atom_is,
    last_atom_in,
    last_atom_is,
    tokens_from_subtree,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PythonLabels:
    function: str = "funcdef"
    function_name: str = "NAME"
    return_arrow: str = "ARROW"
    return_type: str = "test"

    class_declaration: str = "classdef"
    class_name: str = "NAME"
    constructor_name: str = "__init__"

    method_parameters: str = "parameters"
    method_parameter_list: str = "typedargslist"
    single_parameter: str = "tfpdef"
    parameter_name: str = "NAME"
    parameter_type: str = "test"

    body: str = "suite"
    blank_statements: tuple[str, ...] = ("pass", "...")

    @property
    def possible_enclosing_elements(self) -> tuple[str, ...]:
        return (self.class_declaration, self.function)


class PythonFunctionInfoExtractor:
    """Extracts ``FunctionInfo`` from Python function definitions."""

    language = "python"

    def __init__(self, labels: PythonLabels = PythonLabels()) -> None:
        self.labels = labels

    def find_function_roots(self, tree: Node) -> list[Node]:
        return [n for n in tree.pre_order() if last_atom_is(n, self.labels.function)]

    def extract(self, root: Node, file_path: str) -> FunctionInfo:
        name_node = child_of_type(root, self.labels.function_name)
        body = child_of_type(root, self.labels.body)
        return FunctionInfo(
            root=root,
            file_path=file_path,
            name_node=name_node,
            parameters=unwrap_or_none(logger, self._collect_parameters(root), file_path, "parameters"),
            return_type=self._collect_return_type(root),
            enclosing_element=extract_with_logger(
                logger, file_path, "enclosing element", lambda: self._collect_enclosing_element(root)
            ),
            is_constructor=(
                name_node is not None and name_node.token == self.labels.constructor_name
            ),
            body=body,
            is_blank=self._is_blank(body),
        )

    def _collect_return_type(self, root: Node) -> Optional[str]:
        after_arrow = False
        for child in root.children:
            if after_arrow and first_atom_is(child, self.labels.return_type):
                return tokens_from_subtree(child)
            after_arrow = last_atom_is(child, self.labels.return_arrow)
        return None

    def _is_blank(self, body: Optional[Node]) -> bool:
        if body is None:
            return True
        return tokens_from_subtree(body).strip() in self.labels.blank_statements

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def _collect_parameters(self, root: Node) -> Extraction[list[FunctionInfoParameter]]:
        parameters_root = child_of_type(root, self.labels.method_parameters)
        if parameters_root is None:
            return Extraction.ok([])
        inner_root = child_of_type(parameters_root, self.labels.method_parameter_list)
        if inner_root is None:
            return Extraction.ok([])

        has_only_one_parameter = last_atom_in(
            inner_root, (self.labels.single_parameter, self.labels.parameter_name)
        )
        if has_only_one_parameter:
            parameter_nodes = [inner_root]
        else:
            parameter_nodes = children_of_type(inner_root, self.labels.single_parameter)
        try:
            return Extraction.ok([self._parameter_info(node) for node in parameter_nodes])
        except ExtractionError as exc:
            return Extraction.failed(f"{exc} (near '{inner_root.type_label}')")

    def _parameter_info(self, parameter_node: Node) -> FunctionInfoParameter:
        # a bare name without default or annotation is folded into the node
        if last_atom_is(parameter_node, self.labels.parameter_name):
            name_node: Optional[Node] = parameter_node
        else:
            name_node = child_of_type(parameter_node, self.labels.parameter_name)
        if name_node is None or not name_node.token:
            raise ExtractionError("Parameter name was not found")

        type_node = child_of_type(parameter_node, self.labels.parameter_type)
        return FunctionInfoParameter(
            name=name_node.token,
            type=tokens_from_subtree(type_node) if type_node is not None else None,
        )

    # ------------------------------------------------------------------
    # Enclosing element
    # ------------------------------------------------------------------

    def _collect_enclosing_element(self, root: Node) -> Optional[EnclosingElement]:
        enclosing = find_enclosing_by(
            root, lambda n: last_atom_in(n, self.labels.possible_enclosing_elements)
        )
        if enclosing is None:
            return None
        if last_atom_is(enclosing, self.labels.class_declaration):
            kind = EnclosingElementKind.CLASS
            name_node = child_of_type(enclosing, self.labels.class_name)
        elif last_atom_is(enclosing, self.labels.function):
            kind = EnclosingElementKind.METHOD if self._is_method(enclosing) else EnclosingElementKind.FUNCTION
            name_node = child_of_type(enclosing, self.labels.function_name)
        else:
            raise InvariantViolation("Enclosing node can only be function or class")
        return EnclosingElement(
            kind=kind,
            name=name_node.token if name_node is not None else None,
            root=enclosing,
        )

    def _is_method(self, function_node: Node) -> bool:
        outer_body = function_node.parent
        if outer_body is None or outer_body.type_label != self.labels.body:
            return False
        enclosing = outer_body.parent
        if enclosing is None:
            raise InvariantViolation("Found body without enclosing element")
        return last_atom_is(enclosing, self.labels.class_declaration)
