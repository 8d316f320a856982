"""dtp batch command: translate many documents, each with its sibling .txt."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from dtp.cli.utils import expand_inputs
from dtp.core.config import load_config


def batch(
    inputs: Annotated[
        list[str],
        typer.Argument(help="Documents, glob patterns, or .list files. Accepts multiple inputs."),
    ],
    strategy: Annotated[
        Optional[str],
        typer.Option("--strategy", "-s", help="Alignment strategy: adaptive or strict."),
    ] = None,
    pairing: Annotated[
        Optional[str],
        typer.Option(help="Paragraph pairing at rewrite: index or verify."),
    ] = None,
    suffix: Annotated[
        Optional[str],
        typer.Option(help="Output name suffix (report.<suffix>.docx)."),
    ] = None,
) -> None:
    """Translate several documents in one go.

    Each document is paired with <stem>.txt (or <stem>.<lang>.txt) in the same
    directory. Unmatched segments are kept and highlighted; there is no
    interactive review in batch mode.
    """
    from dtp.core.pipeline import run_pipeline
    from dtp.core.review import accept_partial
    from dtp.utils.console import console as _console
    from dtp.utils.paths import translation_for

    try:
        config = load_config(
            **{"align.strategy": strategy, "rewrite.pairing": pairing, "output.suffix": suffix}
        )
    except ValueError as e:
        _console.print(f"[red]Invalid option:[/red] {e}")
        raise typer.Exit(1)

    expanded = expand_inputs(inputs)
    if not expanded:
        _console.print("[red]No inputs resolved. Check your paths or patterns.[/red]")
        raise typer.Exit(1)

    # (input, status, detail)
    results: list[tuple[str, str, str]] = []
    _console.print(f"[bold]Batch processing {len(expanded)} documents...[/bold]\n")

    for i, input_path in enumerate(expanded, 1):
        _console.rule(f"[bold][{i}/{len(expanded)}] {input_path}[/bold]")
        source = Path(input_path)
        translation = translation_for(source)
        if translation is None:
            _console.print(f"[yellow]No translation found for[/yellow] {source}")
            results.append((input_path, "skipped", "no .txt translation"))
            continue
        try:
            result = run_pipeline(source, translation, config, review=accept_partial)
            stats = result.alignment.stats
            results.append(
                (input_path, "success", f"{result.output_path} ({stats.matched}/{stats.total})")
            )
        except Exception as e:
            _console.print(f"[red]Failed:[/red] {e}")
            results.append((input_path, "failed", str(e)))

    # Summary table
    _console.print()
    table = Table(title=f"Batch Results ({len(expanded)} files)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Input", max_width=50, no_wrap=True)
    table.add_column("Status")
    table.add_column("Output", max_width=60, no_wrap=True)

    styles = {"success": "green", "skipped": "yellow", "failed": "red"}
    succeeded = 0
    for i, (inp, status, detail) in enumerate(results, 1):
        style = styles[status]
        table.add_row(str(i), inp, f"[{style}]{status}[/{style}]", detail)
        if status == "success":
            succeeded += 1

    _console.print(table)
    _console.print(f"\n[bold]{succeeded}/{len(expanded)} succeeded[/bold]")
    if succeeded < len(expanded):
        raise typer.Exit(1)
