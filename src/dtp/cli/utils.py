"""Shared CLI utilities."""

from __future__ import annotations

from pathlib import Path

from dtp.core.events import PipelineEvent
from dtp.core.models import Segment


def expand_inputs(inputs: list[str]) -> list[str]:
    """Expand glob patterns and list files into individual document paths."""
    expanded = []
    for inp in inputs:
        path = Path(inp)

        # .list file: one document path per line
        if path.suffix == ".list" and path.is_file():
            for line in path.read_text().splitlines():
                line = line.strip()
                if line and not line.startswith("#"):
                    expanded.append(line)
            continue

        # Try as glob pattern if it contains wildcards
        if any(c in inp for c in "*?["):
            matches = sorted(Path(".").glob(inp))
            if matches:
                expanded.extend(str(m) for m in matches)
                continue

        # Regular file/path
        expanded.append(inp)

    return expanded


def preview(text: str, width: int = 80) -> str:
    """Shorten text to one display line."""
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 3] + "..."


def describe_segment(seg: Segment) -> str:
    return f"#{seg.id + 1} [{seg.container_path}] {preview(seg.text)}"


def print_event(event: PipelineEvent) -> None:
    """Event callback for --verbose: one dim line per checkpoint."""
    from dtp.utils.console import console

    step = f" {event.step}" if event.step else ""
    console.print(f"[dim]{event.stage}{step} ({event.progress:.0%}): {event.message}[/dim]")
