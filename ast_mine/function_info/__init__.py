"""
Per-grammar function-info extractors.

Each extractor is a variant of ``FunctionInfoExtractor`` driven by its own
label table; adding a language means adding a module and registering it here.
"""

from __future__ import annotations

from ast_mine.function_info.base import (
    EnclosingElement,
    FunctionInfo,
    FunctionInfoExtractor,
    extract_all,
)
from ast_mine.function_info.java import JavaFunctionInfoExtractor, JavaLabels
from ast_mine.function_info.php import PhpFunctionInfoExtractor, PhpLabels
from ast_mine.function_info.python import PythonFunctionInfoExtractor, PythonLabels

EXTRACTORS: dict[str, FunctionInfoExtractor] = {
    "java": JavaFunctionInfoExtractor(),
    "python": PythonFunctionInfoExtractor(),
    "php": PhpFunctionInfoExtractor(),
}


def get_extractor(language: str) -> FunctionInfoExtractor:
    """Return the extractor registered for ``language``."""
    try:
        return EXTRACTORS[language]
    except KeyError:
        raise ValueError(
            f"No function-info extractor for '{language}' (supported: {', '.join(EXTRACTORS)})"
        ) from None


__all__ = [
    "EXTRACTORS",
    "EnclosingElement",
    "FunctionInfo",
    "FunctionInfoExtractor",
    "JavaFunctionInfoExtractor",
    "JavaLabels",
    "PhpFunctionInfoExtractor",
    "PhpLabels",
    "PythonFunctionInfoExtractor",
    "PythonLabels",
    "extract_all",
    "get_extractor",
]
