"""Document report — diagnostics and statistics from a conversion run."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from mml_converter.ir.schema import (
    Citation,
    CodeBlock,
    Document,
    Element,
    Header,
    List,
    Math,
    ObjectLink,
    Paragraph,
    Table,
)
from mml_converter.ir.walk import iter_nodes

logger = logging.getLogger(__name__)


@dataclass
class DocumentReport:
    """Summary of one MML document and its conversion."""

    # Source info
    source_file: str = ""
    output_format: str = ""
    character_count: int = 0

    # Timing
    parse_time_seconds: float = 0.0
    render_time_seconds: float = 0.0
    total_time_seconds: float = 0.0

    # Node counts
    header_count: int = 0
    paragraph_count: int = 0
    list_count: int = 0
    table_count: int = 0
    code_block_count: int = 0
    element_count: int = 0
    math_count: int = 0
    object_link_count: int = 0

    # Heading level distribution: {level: count}
    headers_by_level: dict[int, int] = field(default_factory=dict)

    # Bibliography
    citation_count: int = 0
    reference_count: int = 0
    uncited_references: list[str] = field(default_factory=list)

    # Warnings collected during conversion
    warnings: list[str] = field(default_factory=list)

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self._to_dict(), indent=indent)

    def _to_dict(self) -> dict:
        """Convert to a plain dict for JSON serialization."""
        return {
            "source_file": self.source_file,
            "output_format": self.output_format,
            "character_count": self.character_count,
            "timing": {
                "parse_seconds": round(self.parse_time_seconds, 3),
                "render_seconds": round(self.render_time_seconds, 3),
                "total_seconds": round(self.total_time_seconds, 3),
            },
            "node_counts": {
                "headers": self.header_count,
                "paragraphs": self.paragraph_count,
                "lists": self.list_count,
                "tables": self.table_count,
                "code_blocks": self.code_block_count,
                "elements": self.element_count,
                "math": self.math_count,
                "object_links": self.object_link_count,
            },
            "headers_by_level": {
                str(k): v for k, v in sorted(self.headers_by_level.items())
            },
            "bibliography": {
                "citations": self.citation_count,
                "references": self.reference_count,
                "uncited": self.uncited_references,
            },
            "warnings": self.warnings,
        }

    @classmethod
    def from_document(cls, document: Document, source_file: str = "") -> DocumentReport:
        """Build a report by walking a document tree."""
        report = cls(source_file=source_file, character_count=len(document.source))
        cited: set[str] = set()

        for node in iter_nodes(document.children):
            if isinstance(node, Header):
                report.header_count += 1
                report.headers_by_level[node.level] = (
                    report.headers_by_level.get(node.level, 0) + 1
                )
            elif isinstance(node, Paragraph):
                report.paragraph_count += 1
            elif isinstance(node, List):
                report.list_count += 1
            elif isinstance(node, Table):
                report.table_count += 1
            elif isinstance(node, CodeBlock):
                report.code_block_count += 1
            elif isinstance(node, Element):
                report.element_count += 1
            elif isinstance(node, Math):
                report.math_count += 1
            elif isinstance(node, ObjectLink):
                report.object_link_count += 1
            elif isinstance(node, Citation):
                report.citation_count += 1
                cited.add(node.ref_id)

        report.reference_count = len(document.references)
        for reference in sorted(document.references.values(), key=lambda r: r.ordinal):
            if reference.id not in cited:
                report.uncited_references.append(reference.id)
                report.warnings.append(f"Reference '{reference.id}' is never cited")

        for warning in report.warnings:
            logger.warning(warning)
        return report
