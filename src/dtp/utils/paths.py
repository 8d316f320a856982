"""Input/output path conventions and file helpers."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from dtp.core.errors import TranslationError
from dtp.core.models import AlignmentResult, Segment

SUPPORTED_SUFFIXES = (".docx", ".docm", ".pptx", ".pptm")


def output_path_for(source: Path, suffix: str = "translated") -> Path:
    """Default output next to the source: report.docx -> report.translated.docx."""
    source = Path(source)
    return source.with_name(f"{source.stem}.{suffix}{source.suffix}")


def translation_for(source: Path) -> Path | None:
    """Find the translation that sits next to a source document.

    Looks for <stem>.txt first, then <stem>.<anything>.txt (e.g. report.fr.txt).
    Returns None if nothing is found.
    """
    source = Path(source)
    exact = source.with_suffix(".txt")
    if exact.is_file():
        return exact
    candidates = sorted(source.parent.glob(f"{source.stem}.*.txt"))
    return candidates[0] if candidates else None


def read_translation(path: Path) -> str:
    """Read a plain-text translation as UTF-8, dropping a leading BOM."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise TranslationError(
            f"Not valid UTF-8 (byte offset {e.start}): {path}; re-save it as UTF-8"
        ) from e


def save_report(
    path: Path,
    segments: list[Segment],
    alignment: AlignmentResult,
    **kwargs: object,
) -> Path:
    """Save the segment list, mapping and stats as JSON for later review."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    unmatched_ids = {seg.id for seg in alignment.unmatched}
    data = {
        "created_at": datetime.now(timezone.utc).isoformat(),
        "stats": {
            "total": alignment.stats.total,
            "matched": alignment.stats.matched,
            "fuzzy": alignment.stats.fuzzy,
            "unmatched": alignment.stats.unmatched,
            "method": alignment.stats.method,
        },
        "segments": [
            {
                "id": seg.id,
                "container": seg.container_path,
                "source": seg.text,
                "translation": alignment.mapping.get(seg.id),
                "paragraphs": alignment.sources.get(seg.id, []),
                "unmatched": seg.id in unmatched_ids,
            }
            for seg in segments
        ],
    }
    data.update({k: str(v) if isinstance(v, Path) else v for k, v in kwargs.items()})

    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path
