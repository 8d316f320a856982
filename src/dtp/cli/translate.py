"""dtp translate command: transplant a plain-text translation into a document."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer

from dtp.core.config import load_config
from dtp.utils.console import console


def translate(
    source: Annotated[
        Path,
        typer.Argument(help="Source document (.docx or .pptx)."),
    ],
    translation: Annotated[
        Path,
        typer.Argument(help="Plain-text translation (.txt, one paragraph per line)."),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file path."),
    ] = None,
    strategy: Annotated[
        Optional[str],
        typer.Option("--strategy", "-s", help="Alignment strategy: adaptive or strict."),
    ] = None,
    pairing: Annotated[
        Optional[str],
        typer.Option(help="Paragraph pairing at rewrite: index or verify."),
    ] = None,
    review: Annotated[
        Optional[bool],
        typer.Option("--review/--no-review", help="Prompt for unmatched segments before writing."),
    ] = None,
    highlight: Annotated[
        Optional[str],
        typer.Option(help="Highlight for untranslated .docx paragraphs (e.g. red, yellow)."),
    ] = None,
    report: Annotated[
        Optional[Path],
        typer.Option("--report", help="Also write a JSON report of segments and mapping."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Print every progress checkpoint."),
    ] = False,
) -> None:
    """Replace a document's text with its translation, keeping all formatting."""
    from dtp.cli.review import prompt_review
    from dtp.cli.utils import print_event
    from dtp.core.errors import DTPError, RunAborted
    from dtp.core.pipeline import run_pipeline
    from dtp.utils.paths import save_report

    for path in (source, translation):
        if not path.is_file():
            console.print(f"[red]File not found:[/red] {path}")
            raise typer.Exit(1)

    overrides = {
        "align.strategy": strategy,
        "rewrite.pairing": pairing,
        "rewrite.docx_highlight": highlight,
        "output.review": review,
    }
    try:
        config = load_config(**overrides)
    except ValueError as e:
        console.print(f"[red]Invalid option:[/red] {e}")
        raise typer.Exit(1)

    try:
        result = run_pipeline(
            source,
            translation,
            config,
            output_path=output,
            review=prompt_review if config.output.review else None,
            on_event=print_event if verbose else None,
        )
    except RunAborted:
        console.print("[yellow]Aborted, no file written.[/yellow]")
        raise typer.Exit(1)
    except (DTPError, FileNotFoundError) as e:
        console.print(f"[red]Failed:[/red] {e}")
        raise typer.Exit(1)

    if report is not None:
        save_report(
            report, result.segments, result.alignment, source=source, output=result.output_path
        )
        console.print(f"[green]Saved:[/green] {report}")
