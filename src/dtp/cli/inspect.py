"""dtp inspect command: show what a document contains."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from dtp.utils.console import console


def inspect(
    source: Annotated[
        Path,
        typer.Argument(help="Source document (.docx or .pptx)."),
    ],
    segments: Annotated[
        bool,
        typer.Option("--segments", help="List the extracted text segments."),
    ] = False,
) -> None:
    """Summarize a document's structure and extractable text."""
    from dtp.cli.utils import preview
    from dtp.core.errors import DTPError
    from dtp.extract.segments import document_info, extract_segments
    from dtp.ooxml.package import OfficePackage

    try:
        package = OfficePackage.open(source)
    except (DTPError, FileNotFoundError) as e:
        console.print(f"[red]Failed:[/red] {e}")
        raise typer.Exit(1)

    info = document_info(package)
    extracted = extract_segments(package.parts, package.dialect)

    table = Table(title=source.name, show_header=False)
    table.add_column("Property", style="bold cyan")
    table.add_column("Value")
    table.add_row("Type", info.kind)
    table.add_row("Text parts", str(len(package.parts)))
    table.add_row("Segments", str(len(extracted)))
    if info.kind == "pptx":
        table.add_row("Slides", str(info.slide_count))
        table.add_row("Text shapes", str(info.shape_count))
        table.add_row("Presenter notes", "yes (kept as is)" if info.has_notes else "no")
    else:
        table.add_row("Body paragraphs", str(info.paragraph_count))
        table.add_row("Headers", "yes" if info.has_headers else "no")
        table.add_row("Footers", "yes" if info.has_footers else "no")
        table.add_row("Footnotes", "yes" if info.has_footnotes else "no")
        table.add_row("Tables", "yes" if info.has_tables else "no")
        table.add_row("Images", "yes" if info.has_images else "no")
    console.print(table)

    if segments:
        seg_table = Table(title=f"Segments ({len(extracted)})")
        seg_table.add_column("#", justify="right", style="dim")
        seg_table.add_column("Part", style="cyan", no_wrap=True)
        seg_table.add_column("Text")
        for seg in extracted:
            seg_table.add_row(str(seg.id + 1), seg.container_path, preview(seg.text, 100))
        console.print(seg_table)
