"""dtp match command: dry-run the alignment and show how segments map."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from dtp.core.config import load_config
from dtp.utils.console import console


def match(
    source: Annotated[
        Path,
        typer.Argument(help="Source document (.docx or .pptx)."),
    ],
    translation: Annotated[
        Path,
        typer.Argument(help="Plain-text translation (.txt)."),
    ],
    strategy: Annotated[
        Optional[str],
        typer.Option("--strategy", "-s", help="Alignment strategy: adaptive or strict."),
    ] = None,
    show_all: Annotated[
        bool,
        typer.Option("--all", help="List every segment with its translation."),
    ] = False,
    report: Annotated[
        Optional[Path],
        typer.Option("--report", help="Write a JSON report of segments and mapping."),
    ] = None,
) -> None:
    """Align a translation against a document without writing anything."""
    from dtp.align.matcher import align, match_summary
    from dtp.cli.review import show_unmatched
    from dtp.cli.utils import preview
    from dtp.core.errors import DTPError
    from dtp.extract.segments import extract_segments
    from dtp.ooxml.package import OfficePackage
    from dtp.utils.paths import read_translation, save_report

    try:
        config = load_config(**{"align.strategy": strategy})
    except ValueError as e:
        console.print(f"[red]Invalid option:[/red] {e}")
        raise typer.Exit(1)

    try:
        package = OfficePackage.open(source)
        text = read_translation(translation)
    except (DTPError, FileNotFoundError) as e:
        console.print(f"[red]Failed:[/red] {e}")
        raise typer.Exit(1)

    segments = extract_segments(package.parts, package.dialect)
    result = align(segments, text, config.align)
    console.print(match_summary(result.stats))

    if show_all:
        table = Table(title=f"Alignment ({result.stats.method})")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Source")
        table.add_column("Translation")
        for seg in segments:
            mapped = result.mapping.get(seg.id)
            table.add_row(
                str(seg.id + 1),
                preview(seg.text, 60),
                preview(mapped, 60) if mapped is not None else "[red]-[/red]",
            )
        console.print(table)
    elif result.unmatched:
        show_unmatched(result.unmatched)

    if report is not None:
        save_report(report, segments, result, source=source, translation=translation)
        console.print(f"[green]Saved:[/green] {report}")
