"""Click CLI for the MML converter.

Commands:
    render     — Full MML → HTML/.docx conversion
    inspect    — Parse MML to tree JSON (for debugging)
    toc        — Print a document's table of contents
    from-tree  — Render a saved tree JSON file
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from mml_converter.config import Config, load_article_index
from mml_converter.exceptions import MmlConverterError
from mml_converter.ir.schema import TocNode
from mml_converter.pipeline import Pipeline
from mml_converter.renderers import RENDERER_FORMATS


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to a YAML configuration file.",
)
@click.option(
    "--articles",
    "articles_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML article index used to resolve [[object links]].",
)
@click.pass_context
def main(
    ctx: click.Context, verbose: bool, config_path: Path | None, articles_path: Path | None
) -> None:
    """MML markup converter."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = Config.load(config_path)
        articles = load_article_index(articles_path) if articles_path else {}
    except MmlConverterError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)
    if verbose:
        config.verbose = True

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["pipeline"] = Pipeline(config, articles)


@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.argument("output_file", type=click.Path(path_type=Path), required=False)
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(RENDERER_FORMATS),
    default="html",
    show_default=True,
    help="Output format.",
)
@click.option("--save-tree", is_flag=True, help="Save tree JSON checkpoint alongside output.")
@click.option(
    "--tree-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Custom path for the tree JSON file.",
)
@click.option("--report", is_flag=True, help="Save document report JSON alongside output.")
@click.option(
    "--report-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Custom path for the report JSON file.",
)
@click.pass_context
def render(
    ctx: click.Context,
    input_file: Path,
    output_file: Path | None,
    fmt: str,
    save_tree: bool,
    tree_path: Path | None,
    report: bool,
    report_path: Path | None,
) -> None:
    """Render an MML document to HTML or Word."""
    pipeline: Pipeline = ctx.obj["pipeline"]

    try:
        result = pipeline.convert(
            input_file,
            output_file,
            fmt=fmt,
            save_tree=save_tree,
            tree_path=tree_path,
            save_report=report,
            report_path=report_path,
        )
        click.echo(f"Generated: {result}")

        if report and pipeline.last_report:
            rpt = pipeline.last_report
            click.echo(
                f"Report: {rpt.header_count} headers, "
                f"{rpt.table_count} tables, {rpt.reference_count} references, "
                f"{len(rpt.warnings)} warnings"
            )
    except MmlConverterError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)


@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def inspect(ctx: click.Context, input_file: Path) -> None:
    """Parse an MML document and output its tree as JSON (for debugging)."""
    pipeline: Pipeline = ctx.obj["pipeline"]

    try:
        click.echo(pipeline.inspect(input_file))
    except MmlConverterError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)


@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def toc(ctx: click.Context, input_file: Path) -> None:
    """Print the table of contents of an MML document."""
    pipeline: Pipeline = ctx.obj["pipeline"]

    try:
        root = pipeline.toc(input_file)
    except MmlConverterError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)

    for line in _toc_lines(root, depth=0):
        click.echo(line)


def _toc_lines(node: TocNode, depth: int) -> list[str]:
    lines = []
    for child in node.children:
        lines.append(f"{'  ' * depth}{child.title} (#{child.anchor_id})")
        lines.extend(_toc_lines(child, depth + 1))
    return lines


@main.command("from-tree")
@click.argument("tree_json", type=click.Path(exists=True, path_type=Path))
@click.argument("output_file", type=click.Path(path_type=Path))
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(RENDERER_FORMATS),
    default="html",
    show_default=True,
    help="Output format.",
)
@click.pass_context
def from_tree(ctx: click.Context, tree_json: Path, output_file: Path, fmt: str) -> None:
    """Render a saved tree JSON file."""
    pipeline: Pipeline = ctx.obj["pipeline"]

    try:
        result = pipeline.from_tree(tree_json, output_file, fmt)
        click.echo(f"Generated: {result}")
    except MmlConverterError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)
