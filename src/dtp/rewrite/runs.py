"""Run-level text replacement that keeps each run's formatting.

A paragraph's new text is spread over its original runs in proportion to how
much of the original text each run carried. Cuts are made on word boundaries,
so a run may end up a little longer or shorter than its exact share.
"""

from __future__ import annotations

import math
import re

from lxml import etree

from dtp.ooxml.markup import MarkupDialect

OVERSHOOT = 1.3  # a non-last run may grow to 1.3x its target to reach a word boundary

_TOKEN_RE = re.compile(r"(\s+)")


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def tokenize(text: str) -> list[str]:
    """Split into words and whitespace separators; "".join() restores the input."""
    return [token for token in _TOKEN_RE.split(text) if token]


def distribute_text(run_lengths: list[int], new_text: str) -> list[str]:
    """Split ``new_text`` into one chunk per run, proportional to ``run_lengths``.

    Each non-last run takes whole tokens until it reaches its target length,
    refusing a token that would push a non-empty chunk past ``OVERSHOOT`` times
    the target. The last run takes everything left, so the chunks always
    concatenate back to ``new_text``.
    """
    if not run_lengths:
        return []
    if len(run_lengths) == 1:
        return [new_text]

    total = sum(run_lengths)
    tokens = tokenize(new_text)
    if total <= 0:
        return [""] * (len(run_lengths) - 1) + [new_text]

    targets = [_round_half_up(length / total * len(new_text)) for length in run_lengths]
    chunks: list[str] = []
    pos = 0

    for target in targets[:-1]:
        chunk = ""
        while pos < len(tokens):
            token = tokens[pos]
            if chunk and len(chunk) + len(token) > target * OVERSHOOT:
                break
            chunk += token
            pos += 1
            if len(chunk) >= target and pos < len(tokens):
                break
        chunks.append(chunk)

    chunks.append("".join(tokens[pos:]))
    return chunks


def _write_run(dialect: MarkupDialect, text_nodes: list[etree._Element], text: str) -> None:
    """Put text in the first text node and blank the rest (nodes are kept)."""
    dialect.set_text(text_nodes[0], text)
    for node in text_nodes[1:]:
        node.text = ""


def replace_unit_text(dialect: MarkupDialect, unit: etree._Element, new_text: str) -> bool:
    """Replace a paragraph's text, keeping run formatting.

    Runs without text (tabs, breaks, drawings) are left alone and take no part
    in the distribution. Returns False when the paragraph has no text run to
    write into.
    """
    text_runs = []
    for run in dialect.runs(unit):
        nodes = dialect.text_nodes(run)
        length = len(dialect.run_text(run))
        if nodes and length > 0:
            text_runs.append((nodes, length))

    if not text_runs:
        return False

    chunks = distribute_text([length for _, length in text_runs], new_text)
    for (nodes, _), chunk in zip(text_runs, chunks):
        _write_run(dialect, nodes, chunk)
    return True


def flag_unit(dialect: MarkupDialect, unit: etree._Element, color: str) -> int:
    """Mark every run of a paragraph as untranslated. Returns the number of runs flagged."""
    runs = dialect.runs(unit)
    for run in runs:
        dialect.flag_untranslated(run, color)
    return len(runs)
