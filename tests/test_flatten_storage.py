"""
test_flatten_storage.py - Tree flattening and the JSON-lines sink.

Tests:
    1. Flattening yields N records with ids 0..N-1 in pre-order.
    2. Child ids are greater than their parent's id and in child order.
    3. Ids restart at 0 on every call and are reproducible.
    4. JsonAstStorage writes one object per line per holdout, with optional
       paths and ranges.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from ast_mine.conversion import convert_antlr_tree
from ast_mine.flatten import TreeFlattener, flatten_tree
from ast_mine.models import Holdout
from ast_mine.node import Node
from ast_mine.storage import AST_FILE_NAME, JsonAstStorage, LabeledResult
from trees import AntlrFixture, R, T, compressed, java_class_a


def _small_tree() -> Node:
    return compressed(R("root", R("left", T("A", "a"), T("B", "b")), T("C", "c")))


class TestTreeFlattener:

    def test_ids_are_contiguous_and_match_positions(self):
        tree = compressed(java_class_a())
        records = flatten_tree(tree)
        assert len(records) == sum(1 for _ in tree.pre_order())
        assert [r.id for r in records] == list(range(len(records)))

    def test_pre_order_and_child_ids(self):
        records = flatten_tree(_small_tree())
        assert [r.node.type_label for r in records] == ["root", "left", "A", "B", "C"]
        assert records[0].children == [1, 4]
        assert records[1].children == [2, 3]
        assert records[2].children == []

    def test_children_ids_are_greater_than_parent(self):
        for record in flatten_tree(compressed(java_class_a())):
            assert all(child_id > record.id for child_id in record.children)

    def test_counter_restarts_per_call(self):
        flattener = TreeFlattener()
        first = flattener.flatten(_small_tree())
        second = flattener.flatten(_small_tree())
        assert [r.id for r in first] == [r.id for r in second]
        assert [(r.node.type_label, r.children) for r in first] == \
               [(r.node.type_label, r.children) for r in second]

    def test_output_node_uses_empty_token_when_absent(self):
        records = flatten_tree(_small_tree())
        output = records[0].to_output_node()
        assert output.token == ""
        assert output.type_label == "root"
        assert output.range is None


class TestJsonAstStorage:

    def test_store_writes_json_line_per_tree(self, tmp_path):
        with JsonAstStorage(str(tmp_path)) as storage:
            storage.store(LabeledResult(root=_small_tree(), label="first", file_path="a.java"), Holdout.TRAIN)
            storage.store(LabeledResult(root=_small_tree(), label="second"), Holdout.TRAIN)

        lines = (tmp_path / "train" / AST_FILE_NAME).read_text().splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["label"] == "first"
        assert "path" not in first
        assert first["ast"][0] == {"token": "", "typeLabel": "root", "children": [1, 4]}
        assert first["ast"][2] == {"token": "a", "typeLabel": "A", "children": []}

    def test_holdouts_are_written_to_separate_directories(self, tmp_path):
        with JsonAstStorage(str(tmp_path)) as storage:
            storage.store(LabeledResult(root=_small_tree(), label="t"), Holdout.TEST)
            storage.store(LabeledResult(root=_small_tree(), label="v"), Holdout.VALIDATION)
            storage.store(LabeledResult(root=_small_tree(), label="d"))

        assert (tmp_path / "test" / AST_FILE_NAME).exists()
        assert (tmp_path / "val" / AST_FILE_NAME).exists()
        assert (tmp_path / "data" / AST_FILE_NAME).exists()
        assert not (tmp_path / "train").exists()

    def test_paths_and_ranges_when_requested(self, tmp_path):
        fixture = AntlrFixture()
        tree = convert_antlr_tree(
            fixture.build(R("pair", T("NAME", "a"), T("NAME", "b"))),
            fixture.rule_names,
            fixture.vocabulary,
        )
        with JsonAstStorage(str(tmp_path), with_paths=True, with_ranges=True) as storage:
            storage.store(LabeledResult(root=tree, label="pair", file_path="src/Pair.java"))

        record = json.loads((tmp_path / "data" / AST_FILE_NAME).read_text())
        assert record["path"] == "src/Pair.java"
        assert record["ast"][1]["range"] == {
            "start": {"line": 1, "column": 0},
            "end": {"line": 1, "column": 0},
        }
