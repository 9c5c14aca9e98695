"""
base.py - Language-neutral function descriptor and the extractor protocol.

Every grammar gets one extractor class configured by a frozen table of that
grammar's label constants. Extractors fill a ``FunctionInfo`` eagerly; each
field is computed independently so a failure in one (say, parameters) never
prevents the others from being populated.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ast_mine.errors import AstMineError, Extraction, InvariantViolation
from ast_mine.models import EnclosingElementKind, FunctionInfoParameter
from ast_mine.node import Node

T = TypeVar("T")

logger = logging.getLogger(__name__)


class EnclosingElement(BaseModel):
    """Nearest construct that structurally contains a function."""
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    kind: EnclosingElementKind
    name: Optional[str] = None
    root: Node


class FunctionInfo(BaseModel):
    """Metadata recovered from one function declaration subtree.

    ``parameters`` is None when parameter extraction failed, which is not the
    same as an empty list (a function declared without parameters).
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    root: Node
    file_path: str
    name_node: Optional[Node] = None
    parameters: Optional[list[FunctionInfoParameter]] = None
    return_type: Optional[str] = None
    modifiers: Optional[list[str]] = None
    annotations: Optional[list[str]] = None
    enclosing_element: Optional[EnclosingElement] = None
    is_constructor: bool = False
    body: Optional[Node] = None
    is_blank: bool = Field(default=True)

    @property
    def name(self) -> Optional[str]:
        if self.name_node is None:
            return None
        return self.name_node.token


class FunctionInfoExtractor(Protocol):
    """What every per-grammar extractor provides."""
    language: str

    def find_function_roots(self, tree: Node) -> list[Node]:
        ...

    def extract(self, root: Node, file_path: str) -> FunctionInfo:
        ...


# ---------------------------------------------------------------------------
# Failure containment helpers
# ---------------------------------------------------------------------------

def extract_with_logger(
    logger: logging.Logger,
    file_path: str,
    what: str,
    collect: Callable[[], Optional[T]],
) -> Optional[T]:
    """Run ``collect`` and degrade any extraction error to None."""
    try:
        return collect()
    except InvariantViolation as exc:
        logger.error("Internal error while collecting %s in %s: %s", what, file_path, exc)
    except AstMineError as exc:
        logger.warning("Failed to collect %s in %s: %s", what, file_path, exc)
    return None


def unwrap_or_none(
    logger: logging.Logger,
    extraction: Extraction[T],
    file_path: str,
    what: str,
) -> Optional[T]:
    """Value of a successful extraction; logs and returns None on failure."""
    if extraction.is_failed:
        logger.warning("Failed to collect %s in %s: %s", what, file_path, extraction.reason)
    return extraction.value


def extract_all(extractor: FunctionInfoExtractor, tree: Node, file_path: str) -> list[FunctionInfo]:
    """Extract every function the extractor finds in ``tree``.

    A function whose extraction raises is skipped with a warning; the
    remaining functions of the file are still returned.
    """
    result: list[FunctionInfo] = []
    for root in extractor.find_function_roots(tree):
        try:
            result.append(extractor.extract(root, file_path))
        except AstMineError as exc:
            logger.warning(
                "Skipping function at '%s' in %s: %s", root.type_label, file_path, exc
            )
    return result
