"""
java.py - Function info for trees produced by the ANTLR Java grammar.

Shape of a method after compression (no modifiers)::

    classBodyDeclaration|memberDeclaration|methodDeclaration
        typeTypeOrVoid|typeType|primitiveType|INT     "int"
        IDENTIFIER                                    "m"
        formalParameters
            LPAREN
            formalParameterList|formalParameter
                typeType|classOrInterfaceType|IDENTIFIER   "String"
                variableDeclaratorId|IDENTIFIER            "s"
            RPAREN
        methodBody|block
            LBRACE  blockStatement|statement ...  RBRACE

With modifiers the method stays under ``memberDeclaration`` and its
``modifier`` siblings live in the parent ``classBodyDeclaration``.
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
    last_atom_in,
    last_atom_is,
    tokens_from_subtree,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JavaLabels:
    method_declaration: str = "methodDeclaration"
    method_return_type: str = "typeTypeOrVoid"
    method_name: str = "IDENTIFIER"
    method_modifier: str = "modifier"
    method_annotation: str = "annotation"
    annotation_name: str = "qualifiedName"
    method_body: str = "methodBody"

    class_declaration: str = "classDeclaration"
    enum_declaration: str = "enumDeclaration"
    enclosing_name: str = "IDENTIFIER"

    method_parameters: str = "formalParameters"
    method_parameter_list: str = "formalParameterList"
    single_parameters: tuple[str, ...] = ("formalParameter", "lastFormalParameter")
    parameter_type: str = "typeType"
    parameter_name: str = "variableDeclaratorId"

    # '{' and '}' of an empty block
    blank_body_children: int = 2

    @property
    def possible_enclosing_elements(self) -> tuple[str, ...]:
        return (self.class_declaration, self.enum_declaration)


class JavaFunctionInfoExtractor:
    """Extracts ``FunctionInfo`` from Java method declarations."""

    language = "java"

    def __init__(self, labels: JavaLabels = JavaLabels()) -> None:
        self.labels = labels

    def find_function_roots(self, tree: Node) -> list[Node]:
        return [n for n in tree.pre_order() if last_atom_is(n, self.labels.method_declaration)]

    def extract(self, root: Node, file_path: str) -> FunctionInfo:
        body = self._collect_body(root)
        return FunctionInfo(
            root=root,
            file_path=file_path,
            name_node=child_of_type(root, self.labels.method_name),
            parameters=unwrap_or_none(logger, self._collect_parameters(root), file_path, "parameters"),
            return_type=self._collect_return_type(root),
            modifiers=self._collect_modifiers(root),
            annotations=self._collect_annotations(root),
            enclosing_element=extract_with_logger(
                logger, file_path, "enclosing class", lambda: self._collect_enclosing_class(root)
            ),
            is_constructor=False,
            body=body,
            is_blank=body is None or len(body.children) <= self.labels.blank_body_children,
        )

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def _collect_return_type(self, root: Node) -> Optional[str]:
        return_type_node = child_of_type(root, self.labels.method_return_type)
        if return_type_node is None:
            return None
        return tokens_from_subtree(return_type_node)

    def _collect_body(self, root: Node) -> Optional[Node]:
        for child in root.children:
            if first_atom_is(child, self.labels.method_body):
                return child
        return None

    def _collect_modifiers(self, root: Node) -> Optional[list[str]]:
        parent = root.parent
        if parent is None:
            return None
        return [
            child.token
            for child in parent.children
            if first_atom_is(child, self.labels.method_modifier)
            and not last_atom_is(child, self.labels.method_annotation)
            and child.token is not None
        ]

    def _collect_annotations(self, root: Node) -> Optional[list[str]]:
        parent = root.parent
        if parent is None:
            return None
        annotations: list[str] = []
        for child in parent.children:
            if not last_atom_is(child, self.labels.method_annotation):
                continue
            name_node = child_of_type(child, self.labels.annotation_name)
            if name_node is not None and name_node.token is not None:
                annotations.append(name_node.token)
        return annotations

    def _collect_enclosing_class(self, root: Node) -> Optional[EnclosingElement]:
        enclosing = find_enclosing_by(
            root, lambda n: last_atom_in(n, self.labels.possible_enclosing_elements)
        )
        if enclosing is None:
            return None
        if last_atom_is(enclosing, self.labels.class_declaration):
            kind = EnclosingElementKind.CLASS
        elif last_atom_is(enclosing, self.labels.enum_declaration):
            kind = EnclosingElementKind.ENUM
        else:
            raise InvariantViolation(f"No enclosing element kind for '{enclosing.type_label}'")
        name_node = child_of_type(enclosing, self.labels.enclosing_name)
        return EnclosingElement(
            kind=kind,
            name=name_node.token if name_node is not None else None,
            root=enclosing,
        )

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

        # A single parameter is folded into the parameter list itself
        if last_atom_in(inner_root, self.labels.single_parameters):
            single_nodes = [inner_root]
        else:
            single_nodes = [
                child for child in inner_root.children
                if first_atom_in(child, self.labels.single_parameters)
            ]
        try:
            return Extraction.ok([self._parameter_info(node) for node in single_nodes])
        except ExtractionError as exc:
            return Extraction.failed(f"{exc} (near '{inner_root.type_label}')")

    def _parameter_info(self, parameter_node: Node) -> FunctionInfoParameter:
        type_node = child_of_type(parameter_node, self.labels.parameter_type)
        name_node = child_of_type(parameter_node, self.labels.parameter_name)
        if name_node is None:
            raise ExtractionError("Parameter name wasn't found")
        name = tokens_from_subtree(name_node)
        if not name:
            raise ExtractionError("Parameter name is empty")
        return FunctionInfoParameter(
            name=name,
            type=tokens_from_subtree(type_node) if type_node is not None else None,
        )
