"""Segment extraction: flatten text-bearing parts into an ordered segment list.

The document is not modelled in a custom structure. Each content paragraph
becomes one Segment carrying its text and a locator (container, index) that
the rewrite stage looks up again in the re-walked container.
"""

from __future__ import annotations

from lxml import etree

from dtp.core.events import EventCallback, make_emitter
from dtp.core.models import DocumentInfo, Segment, UnitLocator
from dtp.ooxml.markup import MarkupDialect, qn
from dtp.ooxml.package import OfficePackage

_PIC_NS = "http://schemas.openxmlformats.org/drawingml/2006/picture"


def extract_segments(
    parts: dict[str, etree._Element],
    dialect: MarkupDialect,
    on_event: EventCallback | None = None,
) -> list[Segment]:
    """Extract content paragraphs from every container, in container order.

    Segment ids are dense and follow document order across containers.
    """
    emit = make_emitter("extract", on_event)
    segments: list[Segment] = []
    total = len(parts) or 1

    for n, (container, root) in enumerate(parts.items(), 1):
        for index, unit in enumerate(dialect.content_units(root)):
            segments.append(
                Segment(
                    id=len(segments),
                    text=dialect.unit_text(unit),
                    container_path=container,
                    location=UnitLocator(container, index),
                )
            )
        emit("extract-file", n / total, f"{container}: {len(segments)} segments so far")

    emit("segments", 1.0, f"{len(segments)} text segments extracted", count=len(segments))
    return segments


def document_info(package: OfficePackage) -> DocumentInfo:
    """Summarize a document for display. Purely informational."""
    dialect = package.dialect
    info = DocumentInfo(kind=package.kind)

    if package.kind == "pptx":
        info.slide_count = len(package.parts)
        info.has_notes = bool(package.notes_parts)
        for root in package.parts.values():
            info.shape_count += len(dialect.shapes(root))
            info.paragraph_count += len(dialect.content_units(root))
        return info

    body = package.parts["word/document.xml"]
    info.paragraph_count = len(dialect.content_units(body))
    for name in package.parts:
        info.has_headers |= "header" in name
        info.has_footers |= "footer" in name
        info.has_footnotes |= "footnote" in name
    info.has_tables = next(body.iter(qn("w:tbl")), None) is not None
    info.has_images = (
        next(body.iter(qn("w:drawing")), None) is not None
        or next(body.iter(f"{{{_PIC_NS}}}pic"), None) is not None
    )
    return info

