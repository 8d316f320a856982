"""Review barrier between alignment and rewrite.

When some segments could not be aligned, a reviewer (a person at a prompt, a
UI, a script) decides how to continue before anything is written:

- proceed with a partial mapping (unmatched paragraphs keep their text and
  are flagged),
- proceed with translations supplied for some or all unmatched segments,
- abort, leaving the source untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from dtp.core.models import Mapping, Segment


class ReviewDecision(str, Enum):
    PROCEED_PARTIAL = "proceed"
    PROCEED_WITH_TRANSLATIONS = "supply"
    ABORT = "abort"


@dataclass
class ReviewOutcome:
    decision: ReviewDecision
    supplied: dict[int, str] = field(default_factory=dict)


ReviewCallback = Callable[[list[Segment], Mapping], ReviewOutcome]


def apply_review(mapping: Mapping, outcome: ReviewOutcome) -> bool:
    """Merge reviewer-supplied translations into the mapping.

    Blank entries are ignored. Returns False if the run should be aborted.
    """
    if outcome.decision is ReviewDecision.ABORT:
        return False
    if outcome.decision is ReviewDecision.PROCEED_WITH_TRANSLATIONS:
        for seg_id, text in outcome.supplied.items():
            text = text.strip()
            if text:
                mapping[seg_id] = text
    return True


def accept_partial(unmatched: list[Segment], mapping: Mapping) -> ReviewOutcome:
    """Non-interactive reviewer: keep original text for every unmatched segment."""
    return ReviewOutcome(ReviewDecision.PROCEED_PARTIAL)
