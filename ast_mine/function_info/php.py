"""
php.py - Function info for trees produced by the ANTLR PHP grammar.

Functions, methods and closures all carry a ``Function_`` (or, for arrow
functions, ``LambdaFn``) token as a direct child, which is how they are
recognised. A closure assigned to a variable (``$x = function() {};``) gets
the assignment as its enclosing element, named after the variable.

Parameters have the following structure (children order may vary)::

    formalParameterList -> formalParameter -> Ampersand
                                           | -> typeHint
                                           | -> Ellipsis
                                           | -> variableInitializer -> VarName
                                                                    | -> Eq
                                                                    | -> default value
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
    find_enclosing_by,
    first_atom_in,
    first_atom_is,
    last_atom_is,
    self_or_children_of_type,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhpLabels:
    parameter_list: str = "formalParameterList"
    parameter: str = "formalParameter"
    type_hint: str = "typeHint"
    parameter_name: str = "VarName"
    class_member: str = "classStatement"
    function_name: str = "identifier"
    class_declaration: str = "classDeclaration"
    var_declaration: str = "variableInitializer"
    ellipsis: str = "Ellipsis"
    expression: str = "expression"
    assign_op: str = "assignmentOperator"
    lambda_token: str = "LambdaFn"
    function_token: str = "Function_"
    reference: str = "Ampersand"

    bodies: tuple[str, ...] = ("blockStatement", "methodBody")
    statement_list: str = "innerStatementList"
    variable_sigil: str = "$"


class PhpFunctionInfoExtractor:
    """Extracts ``FunctionInfo`` from PHP functions, methods and closures."""

    language = "php"

    def __init__(self, labels: PhpLabels = PhpLabels()) -> None:
        self.labels = labels

    def find_function_roots(self, tree: Node) -> list[Node]:
        return [n for n in tree.pre_order() if self._is_function(n)]

    def extract(self, root: Node, file_path: str) -> FunctionInfo:
        name_node = child_of_type(root, self.labels.function_name)
        function_name = name_node.token if name_node is not None else None
        body = self._collect_body(root)
        return FunctionInfo(
            root=root,
            file_path=file_path,
            name_node=name_node,
            parameters=unwrap_or_none(
                logger, self._collect_parameters(root, file_path, function_name), file_path, "parameters"
            ),
            return_type=self._element_type(root),
            enclosing_element=extract_with_logger(
                logger,
                file_path,
                f"enclosing element for {function_name}",
                lambda: self._collect_enclosing_element(root),
            ),
            is_constructor=False,
            body=body,
            is_blank=self._is_blank(body),
        )

    def _element_type(self, element: Node) -> Optional[str]:
        type_node = child_of_type(element, self.labels.type_hint)
        return type_node.token if type_node is not None else None

    def _collect_body(self, root: Node) -> Optional[Node]:
        for child in root.children:
            if first_atom_in(child, self.labels.bodies):
                return child
        return None

    def _is_blank(self, body: Optional[Node]) -> bool:
        if body is None:
            return True
        statements = next(
            (child for child in body.children if first_atom_is(child, self.labels.statement_list)),
            None,
        )
        # a single empty statement (';') folds into a childless list as well
        return statements is None or statements.is_leaf()

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def _collect_parameters(
        self, root: Node, file_path: str, function_name: Optional[str]
    ) -> Extraction[list[FunctionInfoParameter]]:
        parameter_list = child_of_type(root, self.labels.parameter_list)
        if parameter_list is None:
            return Extraction.ok([])

        # Only one parameter without ellipsis, type hint or default value
        if last_atom_is(parameter_list, self.labels.parameter_name) or last_atom_is(
            parameter_list, self.labels.var_declaration
        ):
            try:
                return Extraction.ok([self._assemble_parameter(parameter_list)])
            except ExtractionError as exc:
                return Extraction.failed(str(exc))

        parameters: list[FunctionInfoParameter] = []
        for parameter_node in self_or_children_of_type(parameter_list, self.labels.parameter):
            try:
                parameters.append(self._assemble_parameter(parameter_node))
            except ExtractionError as exc:
                logger.warning(
                    "Error during collecting parameters for %s in %s: %s",
                    function_name, file_path, exc,
                )
        return Extraction.ok(parameters)

    def _assemble_parameter(self, parameter_node: Node) -> FunctionInfoParameter:
        return FunctionInfoParameter(
            name=self._parameter_name(parameter_node),
            type=self._element_type(parameter_node),
        )

    def _parameter_name(self, parameter_node: Node) -> str:
        if last_atom_is(parameter_node, self.labels.parameter_name):
            if not parameter_node.token:
                raise ExtractionError("No name was found for a parameter")
            return parameter_node.token

        # "...$args" in php equivalent to *args in python
        is_splatted = child_of_type(parameter_node, self.labels.ellipsis) is not None
        is_by_reference = child_of_type(parameter_node, self.labels.reference) is not None

        var_inits = self_or_children_of_type(parameter_node, self.labels.var_declaration)
        if not var_inits:
            raise ExtractionError(f"No variable initializer in '{parameter_node.type_label}'")
        names = self_or_children_of_type(var_inits[0], self.labels.parameter_name)
        if not names or not names[0].token:
            raise ExtractionError("No name was found for a parameter")

        return ("&" if is_by_reference else "") + ("..." if is_splatted else "") + names[0].token

    # ------------------------------------------------------------------
    # Enclosing element
    # ------------------------------------------------------------------

    def _collect_enclosing_element(self, root: Node) -> Optional[EnclosingElement]:
        enclosing = find_enclosing_by(root, self._is_possible_enclosing)
        if enclosing is None:
            return None
        return EnclosingElement(
            kind=self._enclosing_kind(enclosing),
            name=self._enclosing_name(enclosing),
            root=enclosing,
        )

    def _enclosing_kind(self, enclosing: Node) -> EnclosingElementKind:
        if self._is_method(enclosing):
            return EnclosingElementKind.METHOD
        if self._is_function(enclosing):
            return EnclosingElementKind.FUNCTION
        if self._is_class(enclosing):
            return EnclosingElementKind.CLASS
        if self._is_assign_expression(enclosing):
            return EnclosingElementKind.VARIABLE_DECLARATION
        raise InvariantViolation(f"No kind can be associated with '{enclosing.type_label}'")

    def _enclosing_name(self, enclosing: Node) -> Optional[str]:
        if self._is_function(enclosing) or self._is_class(enclosing):
            name_node = child_of_type(enclosing, self.labels.function_name)
            return name_node.token if name_node is not None else None
        if self._is_assign_expression(enclosing):
            variable = next(
                (c for c in enclosing.children if last_atom_is(c, self.labels.parameter_name)),
                None,
            )
            if variable is None or variable.token is None:
                return None
            return variable.token.lstrip(self.labels.variable_sigil)
        raise InvariantViolation(f"No name can be associated with '{enclosing.type_label}'")

    # No separate check for methods: a method is a function
    def _is_possible_enclosing(self, node: Node) -> bool:
        return self._is_function(node) or self._is_class(node) or self._is_assign_expression(node)

    def _is_method(self, node: Node) -> bool:
        return self._is_function(node) and first_atom_is(node, self.labels.class_member)

    def _is_function(self, node: Node) -> bool:
        return (
            child_of_type(node, self.labels.lambda_token) is not None
            or child_of_type(node, self.labels.function_token) is not None
        )

    def _is_assign_expression(self, node: Node) -> bool:
        return (
            first_atom_is(node, self.labels.expression)
            and child_of_type(node, self.labels.assign_op) is not None
        )

    def _is_class(self, node: Node) -> bool:
        return last_atom_is(node, self.labels.class_declaration)
