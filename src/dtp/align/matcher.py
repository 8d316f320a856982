"""Segment alignment: decide which translated paragraph belongs to which segment.

Two named strategies share one interface:

- ``adaptive``: a cascade of tiers, each only attempted for the work the
  previous one left undone.
    1. structure-1:1: same paragraph count, map index-for-index.
    2. sequential-flex: walk segments in order, scoring a small forward window
       of translated paragraphs by anchors, position and length.
    3. residual-anchor: match what is left against every unused paragraph by
       anchors and string similarity.
- ``strict``: index-for-index with no scoring. Extra segments stay unmatched,
  extra paragraphs are merged into the last segment.

Alignment never fails: segments that cannot be placed are returned as
``unmatched`` for the review step or to keep their original text.
"""

from __future__ import annotations

from typing import Callable

from dtp.align.similarity import anchor_score, normalize, similarity, split_into_paragraphs
from dtp.core.config import AlignConfig
from dtp.core.events import EventCallback, make_emitter
from dtp.core.models import AlignmentResult, MatchStats, Segment, TranslatedParagraph

Emit = Callable[..., None]


def _noop(*args: object, **kwargs: object) -> None:
    pass


class Aligner:
    """Base class for alignment strategies."""

    name = ""

    def __init__(self, config: AlignConfig | None = None) -> None:
        self.config = config or AlignConfig()

    def align(
        self,
        segments: list[Segment],
        paragraphs: list[TranslatedParagraph],
        emit: Emit = _noop,
    ) -> AlignmentResult:
        raise NotImplementedError


class AdaptiveAligner(Aligner):
    """Exact structure match, then sequential window match, then residual match."""

    name = "adaptive"

    def align(
        self,
        segments: list[Segment],
        paragraphs: list[TranslatedParagraph],
        emit: Emit = _noop,
    ) -> AlignmentResult:
        stats = MatchStats(total=len(segments))

        # Tier 1: same count -> 1:1
        if len(segments) == len(paragraphs):
            stats.method = "structure-1:1"
            stats.matched = len(segments)
            return AlignmentResult(
                mapping={seg.id: para.text for seg, para in zip(segments, paragraphs)},
                unmatched=[],
                stats=stats,
                sources={seg.id: [para.index] for seg, para in zip(segments, paragraphs)},
            )

        if not segments or not paragraphs:
            stats.method = "empty"
            stats.unmatched = len(segments)
            return AlignmentResult(mapping={}, unmatched=list(segments), stats=stats)

        result = AlignmentResult(mapping={}, unmatched=[], stats=stats)
        stats.method = "sequential-flex"
        used: set[int] = set()

        deferred = self._sequential(segments, paragraphs, result, used)
        emit(
            "match-tier",
            0.5,
            f"Sequential pass: {stats.matched} matched, {len(deferred)} left",
            tier="sequential-flex",
        )

        if deferred:
            rescued = self._residual(deferred, paragraphs, result, used)
            if rescued:
                stats.method += "+residual-anchor"
            emit(
                "match-tier",
                0.8,
                f"Residual pass: {rescued} recovered, {len(result.unmatched)} unmatched",
                tier="residual-anchor",
            )

        stats.unmatched = len(result.unmatched)
        return result

    def _window_score(self, source: str, candidate: str, slot: int) -> float:
        cfg = self.config
        anchors = anchor_score(source, candidate)
        position = 1 - slot * cfg.position_decay
        longest = max(len(source), len(candidate))
        ratio = min(len(source), len(candidate)) / longest if longest else 0.0
        length = ratio * cfg.length_scale if ratio > cfg.length_floor else 0.0
        return (
            anchors * cfg.anchor_weight
            + position * cfg.position_weight
            + length * cfg.length_weight
        )

    def _sequential(
        self,
        segments: list[Segment],
        paragraphs: list[TranslatedParagraph],
        result: AlignmentResult,
        used: set[int],
    ) -> list[Segment]:
        """Tier 2. Returns the segments it had no paragraph left for."""
        cfg = self.config
        stats = result.stats
        deferred: list[Segment] = []
        pointer = 0

        for segment in segments:
            source = normalize(segment.text)
            best, best_score = -1, 0.0

            window = min(cfg.window_size, len(paragraphs) - pointer)
            for slot in range(window):
                idx = pointer + slot
                if idx in used:
                    continue
                score = self._window_score(source, normalize(paragraphs[idx].text), slot)
                if score > best_score:
                    best, best_score = idx, score

            if best >= 0 and best_score > cfg.accept_threshold:
                self._assign(result, segment, paragraphs[best], used)
                pointer = best + 1
                if best_score < cfg.confident_threshold:
                    stats.fuzzy += 1
            elif pointer < len(paragraphs) and pointer not in used:
                # Positional fallback: take the next paragraph regardless of content
                self._assign(result, segment, paragraphs[pointer], used)
                pointer += 1
                stats.fuzzy += 1
            else:
                deferred.append(segment)

        return deferred

    def _residual(
        self,
        deferred: list[Segment],
        paragraphs: list[TranslatedParagraph],
        result: AlignmentResult,
        used: set[int],
    ) -> int:
        """Tier 3. Fills ``result.unmatched`` and returns how many were rescued."""
        cfg = self.config
        pool = [para for para in paragraphs if para.index not in used]
        rescued = 0

        for segment in deferred:
            source_prefix = normalize(segment.text)[: cfg.residual_prefix]
            best: TranslatedParagraph | None = None
            best_score = 0.0

            for candidate in pool:
                sim = similarity(
                    source_prefix,
                    normalize(candidate.text)[: cfg.residual_prefix],
                    long_text_limit=cfg.long_text_limit,
                    length_gap_cutoff=cfg.length_gap_cutoff,
                )
                score = (
                    anchor_score(segment.text, candidate.text) * cfg.residual_anchor_weight
                    + sim * cfg.residual_similarity_weight
                )
                if score > best_score and score > cfg.residual_threshold:
                    best, best_score = candidate, score

            if best is None:
                result.unmatched.append(segment)
                continue

            pool.remove(best)
            self._assign(result, segment, best, used)
            result.stats.fuzzy += 1
            rescued += 1

        return rescued

    @staticmethod
    def _assign(
        result: AlignmentResult,
        segment: Segment,
        paragraph: TranslatedParagraph,
        used: set[int],
    ) -> None:
        result.mapping[segment.id] = paragraph.text
        result.sources[segment.id] = [paragraph.index]
        result.stats.matched += 1
        used.add(paragraph.index)


class StrictAligner(Aligner):
    """Index-for-index mapping for translators that keep paragraph structure.

    Surplus segments keep their original text (unmatched). Surplus paragraphs
    are joined with single spaces onto the last segment; each merged paragraph
    counts as one fuzzy match.
    """

    name = "strict"

    def align(
        self,
        segments: list[Segment],
        paragraphs: list[TranslatedParagraph],
        emit: Emit = _noop,
    ) -> AlignmentResult:
        stats = MatchStats(total=len(segments), method="strict-positional")
        count = min(len(segments), len(paragraphs))

        mapping = {segments[i].id: paragraphs[i].text for i in range(count)}
        sources = {segments[i].id: [paragraphs[i].index] for i in range(count)}
        stats.matched = count

        overflow = paragraphs[len(segments) :] if segments else []
        if overflow:
            last = segments[-1]
            mapping[last.id] = " ".join([mapping[last.id]] + [para.text for para in overflow])
            sources[last.id].extend(para.index for para in overflow)
            stats.fuzzy = len(overflow)
            emit("match-tier", 0.5, f"Merged {len(overflow)} extra paragraphs into last segment")

        unmatched = list(segments[count:])
        stats.unmatched = len(unmatched)
        return AlignmentResult(mapping=mapping, unmatched=unmatched, stats=stats, sources=sources)


ALIGNERS: dict[str, type[Aligner]] = {
    AdaptiveAligner.name: AdaptiveAligner,
    StrictAligner.name: StrictAligner,
}


def get_aligner(config: AlignConfig | None = None) -> Aligner:
    """Instantiate the strategy named by ``config.strategy``."""
    config = config or AlignConfig()
    try:
        return ALIGNERS[config.strategy](config)
    except KeyError:
        raise ValueError(
            f"Unknown alignment strategy '{config.strategy}'. Choose from: {', '.join(ALIGNERS)}"
        ) from None


def align(
    segments: list[Segment],
    translation_text: str,
    config: AlignConfig | None = None,
    on_event: EventCallback | None = None,
) -> AlignmentResult:
    """Map source segments to paragraphs of a plain-text translation.

    Args:
        segments: Dense, ordered segments from extraction.
        translation_text: Newline-delimited translation.
        config: Strategy and tuning constants. Defaults to the adaptive cascade.
        on_event: Optional callback for match-start / match-tier / match-done events.

    Returns:
        AlignmentResult with the mapping, the unmatched segments and stats.
    """
    emit = make_emitter("match", on_event)
    aligner = get_aligner(config)
    paragraphs = split_into_paragraphs(translation_text)

    emit(
        "match-start",
        0.0,
        f"{len(segments)} source segments, {len(paragraphs)} translated paragraphs",
        strategy=aligner.name,
    )

    result = aligner.align(segments, paragraphs, emit)
    stats = result.stats

    if stats.method == "structure-1:1":
        message = f"Exact 1:1 correspondence ({stats.matched} segments)"
    else:
        message = (
            f"{stats.matched} segments mapped, {stats.fuzzy} approximate, "
            f"{stats.unmatched} unmatched"
        )
    emit("match-done", 1.0, message, method=stats.method)
    return result


def match_summary(stats: MatchStats) -> str:
    """Format match statistics for display."""
    lines = [
        "Match result:",
        f"  Total segments : {stats.total}",
        f"  Matched        : {stats.matched}",
    ]
    if stats.fuzzy > 0:
        lines.append(f"  Approximate    : {stats.fuzzy}")
    if stats.unmatched > 0:
        lines.append(f"  Unmatched      : {stats.unmatched}")
    lines.append(f"  Method         : {stats.method}")
    return "\n".join(lines)
