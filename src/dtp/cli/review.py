"""Interactive review of unmatched segments at the terminal."""

from __future__ import annotations

import typer
from rich.table import Table

from dtp.cli.utils import preview
from dtp.core.models import Mapping, Segment
from dtp.core.review import ReviewDecision, ReviewOutcome
from dtp.utils.console import console


def show_unmatched(unmatched: list[Segment]) -> None:
    table = Table(title=f"Unmatched segments ({len(unmatched)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Part", style="cyan", no_wrap=True)
    table.add_column("Source text")
    for seg in unmatched:
        table.add_row(str(seg.id + 1), seg.container_path, preview(seg.text, 100))
    console.print(table)


def prompt_review(unmatched: list[Segment], mapping: Mapping) -> ReviewOutcome:
    """Ask the user how to handle unmatched segments.

    [p]roceed keeps the original text (highlighted), [s]upply asks for a
    translation per segment (empty input skips it), [a]bort writes nothing.
    """
    show_unmatched(unmatched)
    choice = typer.prompt(
        "Proceed with original text [p], supply translations [s], or abort [a]?",
        default="p",
    ).strip().lower()

    if choice.startswith("a"):
        return ReviewOutcome(ReviewDecision.ABORT)
    if not choice.startswith("s"):
        return ReviewOutcome(ReviewDecision.PROCEED_PARTIAL)

    supplied: dict[int, str] = {}
    for seg in unmatched:
        console.print(f"\n[bold]Segment #{seg.id + 1}[/bold] [dim]{seg.container_path}[/dim]")
        console.print(seg.text)
        text = typer.prompt("Translation", default="", show_default=False)
        if text.strip():
            supplied[seg.id] = text
    return ReviewOutcome(ReviewDecision.PROCEED_WITH_TRANSLATIONS, supplied)
