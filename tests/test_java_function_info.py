"""
test_java_function_info.py - Function info extraction for the Java grammar.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from ast_mine.conversion import convert_antlr_tree
from ast_mine.errors import InvariantViolation
from ast_mine.function_info import JavaFunctionInfoExtractor, extract_all, get_extractor
from ast_mine.function_info.base import extract_with_logger
from ast_mine.models import EnclosingElementKind, FunctionInfoParameter
from trees import AntlrFixture, R, T, chain, compressed, java_class_a

FILE = "src/A.java"


def _method(name: str, *, params=None, body=None, return_type=None):
    children = [
        return_type or chain(["typeTypeOrVoid"], T("VOID", "void")),
        T("IDENTIFIER", name),
        R("formalParameters", T("LPAREN", "("), *([params] if params else []), T("RPAREN", ")")),
        body or chain(["methodBody"], R("block", T("LBRACE", "{"), T("RBRACE", "}"))),
    ]
    return R("methodDeclaration", *children)


def _parameter(type_name: str, name: str):
    return R(
        "formalParameter",
        chain(["typeType", "classOrInterfaceType"], T("IDENTIFIER", type_name)),
        chain(["variableDeclaratorId"], T("IDENTIFIER", name)),
    )


def _class(name: str, *body_declarations, keyword="class", declaration="classDeclaration"):
    return R(
        "compilationUnit",
        chain(["typeDeclaration"], R(
            declaration,
            T(keyword.upper(), keyword),
            T("IDENTIFIER", name),
            R("classBody", T("LBRACE", "{"), *body_declarations, T("RBRACE", "}")),
        )),
        T("EOF", "<EOF>"),
    )


def _member(method, *modifiers):
    return R("classBodyDeclaration", *modifiers, R("memberDeclaration", method))


def _extract_single(spec):
    tree = compressed(spec)
    infos = extract_all(JavaFunctionInfoExtractor(), tree, FILE)
    assert len(infos) == 1
    return tree, infos[0]


class TestJavaScenario:

    def test_class_a_method_m(self):
        fixture = AntlrFixture()
        tree = convert_antlr_tree(fixture.build(java_class_a()), fixture.rule_names, fixture.vocabulary)
        [info] = extract_all(get_extractor("java"), tree, FILE)

        assert info.name_node is not None
        assert info.name_node.token == "m"
        assert info.name == "m"
        assert info.return_type == "int"
        assert info.parameters == [FunctionInfoParameter(name="s", type="String")]
        assert info.enclosing_element is not None
        assert info.enclosing_element.kind is EnclosingElementKind.CLASS
        assert info.enclosing_element.name == "A"
        assert info.is_blank is False
        assert info.is_constructor is False
        assert info.file_path == FILE


class TestJavaParameters:

    def test_no_parameters_is_empty_list(self):
        _, info = _extract_single(_class("C", _member(_method("run"))))
        assert info.parameters == []

    def test_several_parameters(self):
        params = R("formalParameterList", _parameter("int", "a"), T("COMMA", ","), _parameter("String", "b"))
        _, info = _extract_single(_class("C", _member(_method("run", params=params))))
        assert info.parameters == [
            FunctionInfoParameter(name="a", type="int"),
            FunctionInfoParameter(name="b", type="String"),
        ]

    def test_varargs_last_parameter(self):
        last = R(
            "lastFormalParameter",
            chain(["typeType", "classOrInterfaceType"], T("IDENTIFIER", "String")),
            T("ELLIPSIS", "..."),
            chain(["variableDeclaratorId"], T("IDENTIFIER", "rest")),
        )
        params = R("formalParameterList", _parameter("int", "a"), T("COMMA", ","), last)
        _, info = _extract_single(_class("C", _member(_method("run", params=params))))
        assert [p.name for p in info.parameters] == ["a", "rest"]

    def test_missing_parameter_name_degrades_to_none(self, caplog):
        broken = R(
            "formalParameter",
            chain(["typeType", "classOrInterfaceType"], T("IDENTIFIER", "String")),
            T("Error", "?"),
        )
        params = R("formalParameterList", _parameter("int", "a"), T("COMMA", ","), broken)
        with caplog.at_level(logging.WARNING):
            _, info = _extract_single(_class("C", _member(_method("run", params=params))))
        assert info.parameters is None
        assert info.name == "run"
        assert info.enclosing_element.name == "C"
        assert "Parameter name wasn't found" in caplog.text
        assert FILE in caplog.text


class TestJavaModifiers:

    def test_modifiers_and_annotations(self):
        public = chain(["modifier", "classOrInterfaceModifier"], T("PUBLIC", "public"))
        static = chain(["modifier", "classOrInterfaceModifier"], T("STATIC", "static"))
        override = chain(["modifier", "classOrInterfaceModifier"], R(
            "annotation", T("AT", "@"), chain(["qualifiedName"], T("IDENTIFIER", "Override")),
        ))
        _, info = _extract_single(_class("C", _member(_method("run"), override, public, static)))
        assert info.modifiers == ["public", "static"]
        assert info.annotations == ["Override"]

    def test_no_modifiers(self):
        _, info = _extract_single(_class("C", _member(_method("run"))))
        assert info.modifiers == []
        assert info.annotations == []

    def test_void_return_type(self):
        _, info = _extract_single(_class("C", _member(_method("run"))))
        assert info.return_type == "void"

    def test_generic_return_type_is_reconstructed(self):
        return_type = chain(["typeTypeOrVoid", "typeType"], R(
            "classOrInterfaceType",
            T("IDENTIFIER", "List"),
            R("typeArguments", T("LT", "<"), chain(["typeArgument", "typeType", "classOrInterfaceType"],
                                                   T("IDENTIFIER", "String")), T("GT", ">")),
        ))
        _, info = _extract_single(_class("C", _member(_method("names", return_type=return_type))))
        assert info.return_type == "List<String>"


class TestJavaBodyAndEnclosing:

    def test_empty_body_is_blank(self):
        _, info = _extract_single(_class("C", _member(_method("run"))))
        assert info.body is not None
        assert info.is_blank is True

    def test_abstract_method_is_blank(self):
        _, info = _extract_single(_class("C", _member(_method("run", body=chain(["methodBody"], T("SEMI", ";"))))))
        assert info.is_blank is True

    def test_enum_enclosing_element(self):
        body = R("enumBodyDeclarations", T("SEMI", ";"), _member(_method("label")), _member(_method("other")))
        spec = R(
            "compilationUnit",
            chain(["typeDeclaration"], R(
                "enumDeclaration",
                T("ENUM", "enum"), T("IDENTIFIER", "Color"),
                T("LBRACE", "{"), chain(["enumConstants", "enumConstant"], T("IDENTIFIER", "RED")),
                body, T("RBRACE", "}"),
            )),
            T("EOF", "<EOF>"),
        )
        tree = compressed(spec)
        infos = extract_all(JavaFunctionInfoExtractor(), tree, FILE)
        assert [i.name for i in infos] == ["label", "other"]
        assert all(i.enclosing_element.kind is EnclosingElementKind.ENUM for i in infos)
        assert all(i.enclosing_element.name == "Color" for i in infos)

    def test_method_without_enclosing_class(self):
        tree = compressed(R("snippet", _method("loose"), T("EOF", "<EOF>")))
        [info] = extract_all(JavaFunctionInfoExtractor(), tree, FILE)
        assert info.enclosing_element is None
        assert info.modifiers is not None

    def test_invariant_violation_is_contained(self, caplog):
        def collect():
            raise InvariantViolation("no kind")

        with caplog.at_level(logging.ERROR):
            assert extract_with_logger(logging.getLogger("test"), FILE, "enclosing class", collect) is None
        assert "no kind" in caplog.text
