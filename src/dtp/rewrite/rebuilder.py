"""Rewrite engine: put mapped translations back into the parsed parts.

The original trees are modified in place. Only text nodes are written, plus a
highlight on the runs of paragraphs that received no translation, so styles,
relationships and media are untouched.

Paragraphs are paired with segments per container by one of two strategies:

- ``index``: the locator's position among the container's content paragraphs.
- ``verify``: the next paragraph whose text still equals the segment's text,
  for trees that may have drifted since extraction.
"""

from __future__ import annotations

from typing import Callable

from lxml import etree

from dtp.align.similarity import normalize
from dtp.core.config import RewriteConfig
from dtp.core.events import EventCallback, make_emitter
from dtp.core.models import Mapping, RewriteReport, Segment
from dtp.ooxml.markup import MarkupDialect
from dtp.rewrite.runs import flag_unit, replace_unit_text
from dtp.utils.console import console

Pairs = list[tuple[etree._Element, Segment]]


def pair_by_index(
    dialect: MarkupDialect, units: list[etree._Element], segments: list[Segment]
) -> Pairs:
    """Resolve each segment's locator against the re-derived paragraph list."""
    return [(units[seg.location.index], seg) for seg in segments if seg.location.index < len(units)]


def pair_by_text(
    dialect: MarkupDialect, units: list[etree._Element], segments: list[Segment]
) -> Pairs:
    """Pair in order, only where paragraph text matches segment text.

    A segment with no matching paragraph ahead of the cursor is left unpaired
    and the cursor stays put for the next segment.
    """
    texts = [normalize(dialect.unit_text(unit)) for unit in units]
    pairs: Pairs = []
    cursor = 0
    for seg in segments:
        wanted = normalize(seg.text)
        for j in range(cursor, len(units)):
            if texts[j] == wanted:
                pairs.append((units[j], seg))
                cursor = j + 1
                break
    return pairs


PAIRINGS: dict[str, Callable[[MarkupDialect, list[etree._Element], list[Segment]], Pairs]] = {
    "index": pair_by_index,
    "verify": pair_by_text,
}


def rewrite(
    parts: dict[str, etree._Element],
    dialect: MarkupDialect,
    segments: list[Segment],
    mapping: Mapping,
    config: RewriteConfig | None = None,
    on_event: EventCallback | None = None,
) -> RewriteReport:
    """Write translations into the parsed parts, in place.

    Args:
        parts: Parsed text-bearing parts, keyed by archive path.
        dialect: Markup dialect of the document.
        segments: Segments from extraction (their locators point into ``parts``).
        mapping: Segment id -> translated text. Read only.
        config: Pairing strategy and highlight settings.
        on_event: Optional callback for rewrite-start / rewrite-file / rewrite-done.

    Returns:
        RewriteReport with counts of replaced, flagged and skipped segments.
    """
    config = config or RewriteConfig()
    emit = make_emitter("rewrite", on_event)
    pair = PAIRINGS[config.pairing]
    color = config.docx_highlight if dialect.name == "docx" else config.pptx_highlight

    by_container: dict[str, list[Segment]] = {}
    for seg in segments:
        by_container.setdefault(seg.container_path, []).append(seg)

    report = RewriteReport()
    emit("rewrite-start", 0.0, "Rebuilding document...")

    total = len(by_container) or 1
    for container, root in parts.items():
        container_segments = by_container.get(container)
        if not container_segments:
            continue

        # Collected before any mutation so that order matches extraction
        units = dialect.content_units(root)
        if len(units) != len(container_segments):
            console.print(
                f"[yellow]{container}: {len(units)} content paragraphs "
                f"for {len(container_segments)} segments[/yellow]"
            )

        pairs = pair(dialect, units, container_segments)
        report.skipped += len(container_segments) - len(pairs)

        for unit, seg in pairs:
            text = mapping.get(seg.id)
            if text is not None:
                if replace_unit_text(dialect, unit, text):
                    report.replaced += 1
                else:
                    report.skipped += 1
            elif config.flag_unmatched:
                flag_unit(dialect, unit, color)
                report.flagged += 1

        report.containers.append(container)
        emit(
            "rewrite-file",
            len(report.containers) / total,
            f"{container} updated ({report.replaced} segments)",
            container=container,
        )

    emit(
        "rewrite-done",
        1.0,
        f"Done: {report.replaced} segments replaced",
        replaced=report.replaced,
    )
    return report
