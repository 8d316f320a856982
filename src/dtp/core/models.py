"""Shared data models for DocTransplant."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

Mapping = dict[int, str]
"""Segment id -> translated text."""


@dataclass(frozen=True)
class UnitLocator:
    """Handle to a content unit: its container and its position among the
    container's content units. Resolved again against the tree at rewrite time."""

    container_path: str
    index: int


@dataclass(frozen=True)
class Segment:
    """One extracted paragraph-equivalent with stable identity and order."""

    id: int
    text: str
    container_path: str
    location: UnitLocator


@dataclass(frozen=True)
class TranslatedParagraph:
    """A trimmed, non-empty line of the translation text."""

    index: int
    text: str


@dataclass
class MatchStats:
    """Counters describing how a mapping was produced."""

    total: int = 0
    matched: int = 0
    fuzzy: int = 0
    unmatched: int = 0
    method: str = ""


@dataclass
class AlignmentResult:
    """Output from the alignment engine."""

    mapping: Mapping
    unmatched: list[Segment]
    stats: MatchStats
    sources: dict[int, list[int]] = field(default_factory=dict)  # segment id -> paragraph indices


@dataclass
class RewriteReport:
    """Output from the rewrite engine."""

    replaced: int = 0
    flagged: int = 0
    skipped: int = 0
    containers: list[str] = field(default_factory=list)


@dataclass
class DocumentInfo:
    """Informational summary of a source document."""

    kind: str
    paragraph_count: int = 0
    has_headers: bool = False
    has_footers: bool = False
    has_footnotes: bool = False
    has_tables: bool = False
    has_images: bool = False
    slide_count: int = 0
    shape_count: int = 0
    has_notes: bool = False


@dataclass
class PipelineResult:
    """Everything produced by one document-translation run."""

    output_path: Path
    segments: list[Segment]
    alignment: AlignmentResult
    rewrite: RewriteReport
    info: DocumentInfo | None = None
