"""
storage.py - JSON-lines sink for labeled, flattened trees.

Layout::

    <output_dir>/
        train/asts.jsonl
        val/asts.jsonl
        test/asts.jsonl
        data/asts.jsonl

Each line is one ``LabeledAst`` object. Writers are opened lazily, one per
holdout, and stay open until ``close()``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Optional

from pydantic import BaseModel, ConfigDict

from ast_mine.flatten import TreeFlattener
from ast_mine.models import Holdout, LabeledAst
from ast_mine.node import Node

logger = logging.getLogger(__name__)

AST_FILE_NAME = "asts.jsonl"


class LabeledResult(BaseModel):
    """A finished tree together with its label and originating file."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    root: Node
    label: str
    file_path: Optional[str] = None


class JsonAstStorage:
    """Writes each labeled tree as one JSON object per line.

    Usage::

        with JsonAstStorage("out", with_paths=True) as storage:
            storage.store(LabeledResult(root=tree, label="Foo", file_path=p), Holdout.TRAIN)
    """

    def __init__(
        self,
        output_directory: str,
        with_paths: bool = False,
        with_ranges: bool = False,
    ) -> None:
        self.output_directory = Path(output_directory)
        self.with_paths = with_paths
        self.with_ranges = with_ranges
        self._flattener = TreeFlattener()
        self._writers: dict[Holdout, IO[str]] = {}
        self.output_directory.mkdir(parents=True, exist_ok=True)

    def to_labeled_ast(self, labeled_result: LabeledResult) -> LabeledAst:
        nodes = [
            enumerated.to_output_node(with_range=self.with_ranges)
            for enumerated in self._flattener.flatten(labeled_result.root)
        ]
        path = labeled_result.file_path if self.with_paths else None
        return LabeledAst(label=labeled_result.label, path=path, ast=nodes)

    def store(self, labeled_result: LabeledResult, holdout: Holdout = Holdout.NONE) -> None:
        line = self.to_labeled_ast(labeled_result).to_json_line()
        writer = self._writers.get(holdout)
        if writer is None:
            writer = self._open_holdout(holdout)
            self._writers[holdout] = writer
        writer.write(line + "\n")

    def close(self) -> None:
        for writer in self._writers.values():
            writer.close()
        self._writers.clear()

    def _open_holdout(self, holdout: Holdout) -> IO[str]:
        holdout_dir = self.output_directory / holdout.dir_name
        holdout_dir.mkdir(parents=True, exist_ok=True)
        ast_file = holdout_dir / AST_FILE_NAME
        logger.debug("Opening %s for holdout '%s'", ast_file, holdout.value)
        return open(ast_file, "w", encoding="utf-8")

    def __enter__(self) -> "JsonAstStorage":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
