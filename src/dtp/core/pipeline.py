"""Pipeline orchestrator: open, extract, align, review, rewrite, save."""

from __future__ import annotations

from pathlib import Path

from dtp.core.config import DTPConfig
from dtp.core.errors import RunAborted
from dtp.core.events import EventCallback, PipelineEvent
from dtp.core.models import PipelineResult
from dtp.core.review import ReviewCallback, apply_review
from dtp.utils.console import console
from dtp.utils.paths import output_path_for, read_translation


def run_pipeline(
    source_path: Path,
    translation: Path | str,
    config: DTPConfig,
    output_path: Path | None = None,
    review: ReviewCallback | None = None,
    on_event: EventCallback | None = None,
) -> PipelineResult:
    """Translate a .docx/.pptx by transplanting a plain-text translation into it.

    Args:
        source_path: The source document.
        translation: Path to the translation .txt, or the translation text itself.
        config: Full application config.
        output_path: Where to write the result. Defaults to
            <stem>.<output.suffix>.<ext> next to the source.
        review: Called with the unmatched segments and the mapping when
            alignment leaves segments unmatched. Nothing is modified before it
            returns; an abort raises RunAborted.
        on_event: Optional callback for streaming progress events.

    Returns:
        PipelineResult with the output path, segments, alignment and rewrite report.
    """
    from dtp.align.matcher import align, match_summary
    from dtp.extract.segments import document_info, extract_segments
    from dtp.ooxml.package import OfficePackage
    from dtp.rewrite.rebuilder import rewrite

    def emit(stage: str, progress: float, message: str, data: dict | None = None) -> None:
        if on_event:
            on_event(PipelineEvent(stage=stage, progress=progress, message=message, data=data))

    source_path = Path(source_path)

    # Step 1: Open the archive and parse text-bearing parts
    emit("open", 0.0, f"Opening {source_path.name}")
    package = OfficePackage.open(source_path)
    info = document_info(package)
    console.print(
        f"[bold]Opened:[/bold] {source_path.name} "
        f"({package.kind}, {len(package.parts)} text parts)"
    )
    emit("open", 1.0, "Archive parsed", data={"parts": list(package.parts)})

    # Step 2: Extract segments
    segments = extract_segments(package.parts, package.dialect, on_event=on_event)
    console.print(f"[bold]Segments:[/bold] {len(segments)}")

    # Step 3: Align
    if isinstance(translation, Path):
        translation_text = read_translation(translation)
    else:
        translation_text = translation
    alignment = align(segments, translation_text, config.align, on_event=on_event)
    console.print(match_summary(alignment.stats))

    # Step 4: Review barrier, nothing has been modified yet
    if alignment.unmatched and review is not None:
        emit("review", 0.0, f"{len(alignment.unmatched)} segments need review")
        outcome = review(alignment.unmatched, alignment.mapping)
        if not apply_review(alignment.mapping, outcome):
            emit("review", 1.0, "Run aborted at review")
            raise RunAborted("Run aborted at review; no output written")
        emit("review", 1.0, f"Review resolved: {outcome.decision.value}")

    # Step 5: Rewrite in place
    report = rewrite(
        package.parts,
        package.dialect,
        segments,
        alignment.mapping,
        config.rewrite,
        on_event=on_event,
    )
    if report.flagged:
        console.print(f"[yellow]Flagged untranslated:[/yellow] {report.flagged} paragraphs")

    # Step 6: Save
    if output_path is None:
        output_path = output_path_for(source_path, config.output.suffix)
    dest = Path(output_path)
    emit("save", 0.0, f"Writing {dest.name}")
    package.save(dest, changed=report.containers)
    console.print(f"[green]Saved:[/green] {dest}")
    emit("save", 1.0, "Done", data={"output": str(dest)})

    return PipelineResult(
        output_path=dest,
        segments=segments,
        alignment=alignment,
        rewrite=report,
        info=info,
    )
