"""
cli.py - Typer-based CLI for ast-mine.

Commands:
  parse <path>    Parse every supported file and store normalized ASTs as JSON lines
  show  <file>    Print the normalized AST of one file
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree as RichTree

from ast_mine.ast_parser import ParserManager, extensions_to_languages, walk_source_files
from ast_mine.models import Holdout, ProjectConfig
from ast_mine.node import Node
from ast_mine.storage import JsonAstStorage, LabeledResult

app = typer.Typer(
    name="ast-mine",
    help="Normalize parse trees into compact ASTs and store them for mining.",
    add_completion=False,
)
console = Console()

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration helpers
# ---------------------------------------------------------------------------


def _load_config(config_path: Optional[str] = None) -> ProjectConfig:
    """Load project config from JSON file or return defaults."""
    if config_path and Path(config_path).exists():
        return ProjectConfig.model_validate_json(Path(config_path).read_text())
    # Check for ast_mine_config.json in CWD
    default = Path("ast_mine_config.json")
    if default.exists():
        return ProjectConfig.model_validate_json(default.read_text())
    return ProjectConfig()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# parse command
# ---------------------------------------------------------------------------


@app.command()
def parse(
    path: str = typer.Argument(..., help="Root directory (or single file) to parse"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output directory"),
    holdout: Holdout = typer.Option(Holdout.NONE, "--holdout", help="Dataset partition to write"),
    with_paths: Optional[bool] = typer.Option(None, "--with-paths/--no-paths", help="Store source file paths"),
    with_ranges: Optional[bool] = typer.Option(None, "--with-ranges/--no-ranges", help="Store node ranges"),
    simplify: bool = typer.Option(False, "--simplify", help="Drop single-child chains instead of folding them"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Parse all supported files under PATH and store their ASTs."""
    _setup_logging(verbose)
    cfg = _load_config(config)
    ext_to_lang = extensions_to_languages(cfg.language_extensions)
    pm = ParserManager(
        tree_mode="simplify" if simplify else cfg.tree_mode,
        ext_to_lang=ext_to_lang,
    )

    root = os.path.abspath(path)
    if os.path.isfile(root):
        lang = pm.detect_language(root)
        files = [(root, lang)] if lang else []
    else:
        files = walk_source_files(root, exclude_dirs=cfg.exclude_patterns, ext_to_lang=ext_to_lang)
    console.print(f"Found [bold]{len(files)}[/bold] source files.")

    output_dir = output or cfg.storage.output_dir
    stored = 0
    skipped = 0
    with JsonAstStorage(
        output_dir,
        with_paths=cfg.storage.with_paths if with_paths is None else with_paths,
        with_ranges=cfg.storage.with_ranges if with_ranges is None else with_ranges,
    ) as storage:
        with console.status(f"Parsing {len(files)} files...") as status:
            for i, (fp, lang) in enumerate(files):
                status.update(f"Parsing [{i + 1}/{len(files)}] {os.path.basename(fp)}")
                try:
                    tree = pm.parse_file(fp)
                    if tree is not None:
                        storage.store(
                            LabeledResult(root=tree, label=Path(fp).stem, file_path=fp),
                            holdout,
                        )
                except Exception as exc:
                    logger.warning("Skipping '%s': %s", fp, exc)
                    tree = None
                if tree is None:
                    skipped += 1
                    continue
                stored += 1

    console.print(
        f"[green]Stored {stored} trees[/green] in "
        f"[bold]{os.path.join(output_dir, holdout.dir_name)}[/bold]"
        + (f" ({skipped} skipped)" if skipped else "")
    )


# ---------------------------------------------------------------------------
# show command
# ---------------------------------------------------------------------------


@app.command()
def show(
    file: str = typer.Argument(..., help="Source file to parse"),
    simplify: bool = typer.Option(False, "--simplify", help="Drop single-child chains instead of folding them"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Print the normalized AST of FILE."""
    _setup_logging(verbose)
    pm = ParserManager(tree_mode="simplify" if simplify else "compress")
    tree = pm.parse_file(file)
    if tree is None:
        console.print(f"[red]Cannot parse '{file}' (unsupported or unreadable).[/red]")
        raise typer.Exit(code=1)
    console.print(_to_rich_tree(tree))


def _to_rich_tree(root: Node) -> RichTree:
    rich_root = RichTree(_describe(root))
    stack: list[tuple[Node, RichTree]] = [(child, rich_root) for child in reversed(root.children)]
    while stack:
        node, rich_parent = stack.pop()
        branch = rich_parent.add(_describe(node))
        stack.extend((child, branch) for child in reversed(node.children))
    return rich_root


def _describe(node: Node) -> str:
    label = f"[bold]{escape(node.type_label)}[/bold]"
    if node.token is not None:
        return f"{label} [green]{escape(repr(node.token))}[/green]"
    return label
