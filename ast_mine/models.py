"""
models.py - Pydantic v2 data models for ast-mine.

Defines data structures for:
- Source positions and ranges carried by tree nodes
- Enumerations shared by the function-info extractors
- Function parameter descriptors
- Flattened records handed to the storage sink
- System configuration

Models that hold live references into a Node tree (FunctionInfo,
EnclosingElement, LabeledResult) live next to the code that builds them.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------

class Position(BaseModel):
    """1-based line, 0-based column."""
    model_config = ConfigDict(frozen=True)

    line: int
    column: int


class NodeRange(BaseModel):
    """Source span of a node; ``end`` points at the last character."""
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class EnclosingElementKind(str, Enum):
    """Constructs that can structurally contain a function declaration."""
    CLASS = "Class"
    ENUM = "Enum"
    METHOD = "Method"
    FUNCTION = "Function"
    VARIABLE_DECLARATION = "VariableDeclaration"


class Holdout(str, Enum):
    """Dataset partitions written independently by the storage sink."""
    TRAIN = "train"
    VALIDATION = "val"
    TEST = "test"
    NONE = "data"

    @property
    def dir_name(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Function metadata
# ---------------------------------------------------------------------------

class FunctionInfoParameter(BaseModel):
    """A declared parameter; ``type`` is the raw declared type text, if any."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    type: Optional[str] = None


# ---------------------------------------------------------------------------
# Flattened output records
# ---------------------------------------------------------------------------

class OutputNode(BaseModel):
    """One flattened node as written to a JSON-lines file."""
    model_config = ConfigDict(populate_by_name=True)

    token: str
    type_label: str = Field(serialization_alias="typeLabel")
    range: Optional[NodeRange] = None
    children: list[int] = Field(default_factory=list)


class LabeledAst(BaseModel):
    """One line of an ``asts.jsonl`` file."""
    label: str
    path: Optional[str] = None
    ast: list[OutputNode] = Field(default_factory=list)

    def to_json_line(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------

class StorageConfig(BaseModel):
    output_dir: str = "output"
    with_paths: bool = False      # write each tree's source file path
    with_ranges: bool = False     # write each node's source range


class ProjectConfig(BaseModel):
    """Top-level configuration for ast-mine."""
    storage: StorageConfig = Field(default_factory=StorageConfig)
    # "compress" keeps grammar provenance in compound labels,
    # "simplify" keeps only the innermost node of every single-child chain.
    tree_mode: Literal["compress", "simplify"] = "compress"
    # Extensions to scan; key = language name, value = list of file extensions
    language_extensions: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "java": [".java"],
            "python": [".py"],
            "php": [".php"],
            "cpp": [".cpp", ".cxx", ".cc", ".c", ".hpp", ".hxx", ".hh", ".h"],
            "rust": [".rs"],
            "typescript": [".ts", ".tsx"],
        }
    )
    # Directories / patterns to exclude when walking
    exclude_patterns: list[str] = Field(
        default_factory=lambda: [
            ".git", "__pycache__", "node_modules", "target", "build", "dist",
            ".gradle", ".idea", ".vscode", "venv", ".venv",
        ]
    )
