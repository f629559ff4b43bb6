"""Pipeline orchestrator: parse → (optional tree save) → derive → render.

Coordinates the conversion stages and provides convenience methods for
partial workflows (parse-only, TOC-only, render-from-tree).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from mml_converter.bibliography import resolve_document
from mml_converter.config import Config
from mml_converter.exceptions import GenerationError, ParseError
from mml_converter.ir.report import DocumentReport
from mml_converter.ir.schema import ArticleRef, BibliographyEntry, Document, TocNode
from mml_converter.parsers.factory import create_parser
from mml_converter.renderers import create_renderer
from mml_converter.toc import build_toc

logger = logging.getLogger(__name__)

OUTPUT_SUFFIXES = {"html": ".html", "docx": ".docx"}


@dataclass
class ProcessedDocument:
    """A parsed document together with its derived side tables."""

    document: Document
    toc: TocNode
    bibliography: list[BibliographyEntry]


class Pipeline:
    """Orchestrates MML → tree → HTML/Word conversion."""

    def __init__(
        self,
        config: Config | None = None,
        articles: Optional[dict[str, ArticleRef]] = None,
    ):
        self.config = config or Config.default()
        self.articles = dict(articles or {})
        self.last_report: DocumentReport | None = None

    def convert(
        self,
        input_path: Path,
        output_path: Path | None = None,
        fmt: str = "html",
        save_tree: bool = False,
        tree_path: Path | None = None,
        save_report: bool = False,
        report_path: Path | None = None,
    ) -> Path:
        """Full pipeline: MML → tree → output file.

        Args:
            input_path: Input MML file.
            output_path: Output file. Defaults to the input path with the
                format's suffix.
            fmt: Output format ('html' or 'docx').
            save_tree: Whether to save the parsed tree as a JSON checkpoint.
            tree_path: Custom path for tree JSON. Defaults to {output_stem}.tree.json.
            save_report: Whether to save a document report JSON.
            report_path: Custom path for report JSON. Defaults to {output_stem}.report.json.

        Returns:
            Path to the generated file.
        """
        input_path = Path(input_path)
        if output_path is None:
            output_path = input_path.with_suffix(OUTPUT_SUFFIXES.get(fmt, f".{fmt}"))
        output_path = Path(output_path)

        # Stage 1: Parse
        t0 = time.monotonic()
        document = self.parse(input_path)
        t1 = time.monotonic()

        # Optional: save tree checkpoint
        if save_tree:
            if tree_path is None:
                tree_path = output_path.with_suffix(".tree.json")
            self.save_tree(document, tree_path)

        # Stage 2: Derive side tables and render
        t2 = time.monotonic()
        result = self.write(self.process(document), output_path, fmt)
        t3 = time.monotonic()

        # Build report
        report = DocumentReport.from_document(document, source_file=str(input_path))
        report.output_format = fmt
        report.parse_time_seconds = t1 - t0
        report.render_time_seconds = t3 - t2
        report.total_time_seconds = t3 - t0
        self.last_report = report

        # Optional: save report
        if save_report:
            if report_path is None:
                report_path = output_path.with_suffix(".report.json")
            Path(report_path).write_text(report.to_json(), encoding="utf-8")
            logger.info("Saved report to %s", report_path)

        return result

    def parse(self, input_path: Path) -> Document:
        """Stage 1: Parse an MML file to a document tree."""
        input_path = Path(input_path)
        logger.info("Parsing %s", input_path)

        parser = create_parser(self.config)
        return parser.parse_file(input_path)

    def parse_text(self, text: str) -> Document:
        """Parse MML source held in memory."""
        parser = create_parser(self.config)
        return parser.parse(text)

    def process(self, document: Document) -> ProcessedDocument:
        """Build the TOC and resolve the bibliography of a parsed document."""
        toc = build_toc(document, self.config.html.bibliography_title)
        bibliography = resolve_document(document)
        return ProcessedDocument(document=document, toc=toc, bibliography=bibliography)

    def render(self, processed: ProcessedDocument, fmt: str = "html") -> Any:
        """Stage 2: Render a processed document.

        Returns:
            An HTML string for 'html', a python-docx Document for 'docx'.
        """
        renderer = create_renderer(fmt, self.config, self.articles)
        return renderer.render(processed.document, processed.toc, processed.bibliography)

    def write(self, processed: ProcessedDocument, output_path: Path, fmt: str = "html") -> Path:
        """Render a processed document and write it to ``output_path``."""
        output_path = Path(output_path)
        logger.info("Generating %s", output_path)

        rendered = self.render(processed, fmt)
        try:
            if isinstance(rendered, str):
                output_path.write_text(rendered, encoding="utf-8")
            else:
                rendered.save(str(output_path))
        except OSError as exc:
            raise GenerationError(f"Failed to write {output_path}: {exc}") from exc
        return output_path

    def inspect(self, input_path: Path) -> str:
        """Parse an MML file and return its tree as formatted JSON."""
        document = self.parse(input_path)
        return document.to_json()

    def toc(self, input_path: Path) -> TocNode:
        """Parse an MML file and return its table of contents."""
        return build_toc(self.parse(input_path), self.config.html.bibliography_title)

    def from_tree(self, tree_path: Path, output_path: Path, fmt: str = "html") -> Path:
        """Render a saved tree JSON file.

        Args:
            tree_path: Path to the tree JSON file.
            output_path: Output file path.
            fmt: Output format.

        Returns:
            Path to the generated file.
        """
        tree_path = Path(tree_path)

        logger.info("Loading tree from %s", tree_path)
        try:
            document = Document.from_json(tree_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise ParseError(f"Tree file not found: {tree_path}")
        except ValueError as exc:
            raise ParseError(f"Failed to load tree from {tree_path}: {exc}") from exc

        return self.write(self.process(document), output_path, fmt)

    @staticmethod
    def save_tree(document: Document, path: Path) -> Path:
        """Save a parsed tree to a JSON file."""
        path = Path(path)
        logger.info("Saving tree to %s", path)
        path.write_text(document.to_json(), encoding="utf-8")
        return path
