"""Pipeline event system for streaming progress to external consumers.

Provides a lightweight callback mechanism that the pipeline emits events through.
Consumers (CLI progress display, a review UI) register a callback to receive
real-time updates without modifying pipeline logic. Callbacks are invoked
synchronously and never influence control flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable


@dataclass
class PipelineEvent:
    """A progress event emitted during pipeline execution.

    Attributes:
        stage: Pipeline stage name (open, extract, match, review, rewrite, save).
        progress: Progress within this stage, 0.0 to 1.0.
        message: Human-readable status message.
        data: Optional payload (e.g. checkpoint name, counts, file paths).
    """

    stage: str
    progress: float
    message: str
    data: dict | None = field(default=None)

    @property
    def step(self) -> str | None:
        """Named checkpoint (e.g. "match-start"), if the emitter set one."""
        if self.data:
            return self.data.get("step")
        return None


EventCallback = Callable[[PipelineEvent], None]


def make_emitter(stage: str, on_event: EventCallback | None) -> Callable[..., None]:
    """Bind a stage name to an optional callback.

    The returned function takes (step, progress, message, **data) and is a
    no-op when no callback is registered.
    """

    def emit(step: str, progress: float, message: str, **data: object) -> None:
        if on_event:
            on_event(
                PipelineEvent(
                    stage=stage,
                    progress=progress,
                    message=message,
                    data={"step": step, **data},
                )
            )

    return emit
