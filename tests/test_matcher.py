"""Tests for segment alignment strategies."""

import random

import pytest

from dtp.align.matcher import (
    AdaptiveAligner,
    StrictAligner,
    align,
    get_aligner,
    match_summary,
)
from dtp.core.config import AlignConfig
from dtp.core.models import MatchStats, Segment, UnitLocator

STRICT = AlignConfig(strategy="strict")


def _make_segments(*texts: str, container: str = "word/document.xml") -> list[Segment]:
    return [
        Segment(id=i, text=text, container_path=container, location=UnitLocator(container, i))
        for i, text in enumerate(texts)
    ]


def _check_invariants(segments, result):
    stats = result.stats
    assert stats.total == len(segments)
    assert stats.matched + stats.unmatched == stats.total
    assert len(result.mapping) == stats.matched
    assert len(result.unmatched) == stats.unmatched
    assert not set(result.mapping) & {seg.id for seg in result.unmatched}


class TestStructureOneToOne:
    def test_hello_world(self):
        segments = _make_segments("Hello world", "Second line")
        result = align(segments, "Bonjour le monde\nDeuxième ligne")

        assert result.mapping == {0: "Bonjour le monde", 1: "Deuxième ligne"}
        assert result.stats.method == "structure-1:1"
        assert result.unmatched == []
        assert result.stats.matched == 2
        assert result.stats.fuzzy == 0

    @pytest.mark.parametrize("count", [1, 3, 12])
    def test_identity_mapping_in_order(self, count):
        segments = _make_segments(*(f"Source {i}" for i in range(count)))
        # Deliberately unrelated text: tier 1 never compares content
        lines = [f"zzz {count - i}" for i in range(count)]
        result = align(segments, "\n\n".join(lines))

        assert result.mapping == {i: lines[i] for i in range(count)}
        assert result.sources == {i: [i] for i in range(count)}
        assert result.stats.method == "structure-1:1"
        assert result.stats.unmatched == 0

    def test_blank_lines_do_not_count(self):
        segments = _make_segments("One", "Two")
        result = align(segments, "\n  Un  \n\n\r\nDeux\n\n")
        assert result.mapping == {0: "Un", 1: "Deux"}


class TestDegenerateInputs:
    def test_both_empty(self):
        result = align([], "")
        assert result.mapping == {}
        assert result.unmatched == []
        assert result.stats == MatchStats(method="structure-1:1")

    def test_empty_translation(self):
        segments = _make_segments("A", "B")
        result = align(segments, "  \n\n")
        assert result.mapping == {}
        assert result.unmatched == segments
        assert result.stats.method == "empty"
        _check_invariants(segments, result)

    def test_no_segments(self):
        result = align([], "Un\nDeux")
        assert result.mapping == {}
        assert result.stats.total == 0
        assert result.stats.unmatched == 0


class TestSequentialFlex:
    def test_anchors_skip_an_inserted_paragraph(self):
        segments = _make_segments("Meeting on 14 May", "Budget 3,500 EUR")
        translation = "Note du traducteur\nRéunion le 14 mai\nBudget 3,500 EUR"
        result = align(segments, translation)

        assert result.mapping == {0: "Réunion le 14 mai", 1: "Budget 3,500 EUR"}
        assert result.sources == {0: [1], 1: [2]}
        assert result.stats.method == "sequential-flex"
        assert result.stats.fuzzy == 0
        _check_invariants(segments, result)

    def test_low_confidence_matches_count_as_fuzzy(self):
        segments = _make_segments("Alpha", "Beta 7", "Gamma")
        result = align(segments, "Alfa\nBêta 7")

        assert result.mapping == {0: "Alfa", 1: "Bêta 7"}
        assert [seg.id for seg in result.unmatched] == [2]
        assert result.stats.method == "sequential-flex"
        # "Alfa" has no anchor and scores 0.372; "Bêta 7" shares its anchor and scores 0.79
        assert result.stats.fuzzy == 1
        _check_invariants(segments, result)

    def test_missing_date_anchor_lowers_window_score(self):
        aligner = AdaptiveAligner()
        # Equal lengths: position 1.0 * 0.3 plus length 1.0 * 0.3 * 0.3
        assert aligner._window_score("Due 2024-03-01", "Payable demain", 0) == pytest.approx(0.39)
        with_date = aligner._window_score("Due 2024-03-01", "Dû 2024-03-01!", 0)
        assert with_date == pytest.approx(0.79)

    def test_match_without_anchors_is_always_fuzzy(self):
        aligner = AdaptiveAligner()
        best = aligner._window_score("plain words here", "mots simples ici", 0)
        assert best < aligner.config.confident_threshold

    def test_nearer_paragraph_beats_length_match_further_ahead(self):
        segments = _make_segments("abcdefghij")
        # Slot 0 is half as long (0.345), slot 2 has the same length (0.33)
        result = align(segments, "abcde\nx\nklmnopqrst")

        assert result.sources == {0: [0]}
        assert result.stats.method == "sequential-flex"
        assert result.stats.fuzzy == 1

    def test_length_scale_is_configurable(self):
        segments = _make_segments("abcdefghij")
        result = align(segments, "abcde\nx\nklmnopqrst", AlignConfig(length_scale=1.0))
        assert result.sources == {0: [2]}

    def test_emits_tier_events(self):
        events = []
        segments = _make_segments("Alpha", "Beta", "Gamma")
        align(segments, "Alfa\nBêta", on_event=events.append)

        steps = [event.step for event in events]
        assert steps[0] == "match-start"
        assert steps[-1] == "match-done"
        assert "match-tier" in steps
        assert all(event.stage == "match" for event in events)


class TestResidualAnchor:
    def test_rescues_skipped_paragraph_by_anchor(self):
        segments = _make_segments("Order 4417 shipped", "Invoice 9921 paid", "Refund 3308 issued")
        # The refund line comes first, so the sequential pass skips over it
        translation = "Remboursement 3308 émis\nCommande 4417 expédiée"
        result = align(segments, translation)

        assert result.mapping == {0: "Commande 4417 expédiée", 2: "Remboursement 3308 émis"}
        assert result.sources == {0: [1], 2: [0]}
        assert [seg.id for seg in result.unmatched] == [1]
        assert result.stats.method == "sequential-flex+residual-anchor"
        assert result.stats.fuzzy == 1
        _check_invariants(segments, result)

    def test_threshold_is_configurable(self):
        segments = _make_segments("Order 4417 shipped", "Invoice 9921 paid", "Refund 3308 issued")
        translation = "Remboursement 3308 émis\nCommande 4417 expédiée"
        config = AlignConfig(residual_threshold=0.99)
        result = align(segments, translation, config)

        assert result.stats.method == "sequential-flex"
        assert [seg.id for seg in result.unmatched] == [1, 2]


class TestStrict:
    def test_overflow_merged_into_last_segment(self):
        segments = _make_segments("A", "B", "C")
        result = align(segments, "L1\nL2\nL3\nL4\nL5", STRICT)

        assert result.mapping == {0: "L1", 1: "L2", 2: "L3 L4 L5"}
        assert result.sources[2] == [2, 3, 4]
        assert result.stats.fuzzy == 2
        assert result.stats.matched == 3
        assert result.stats.method == "strict-positional"
        _check_invariants(segments, result)

    def test_surplus_segments_unmatched(self):
        segments = _make_segments("A", "B", "C")
        result = align(segments, "Un\nDeux", STRICT)

        assert result.mapping == {0: "Un", 1: "Deux"}
        assert result.unmatched == [segments[2]]
        assert result.stats.fuzzy == 0
        _check_invariants(segments, result)

    def test_no_paragraphs(self):
        segments = _make_segments("A", "B")
        result = StrictAligner().align(segments, [])
        assert result.unmatched == segments
        result = align(segments, "Un\nDeux", STRICT)
        assert result.mapping == {0: "Un", 1: "Deux"}


class TestProperties:
    @pytest.mark.parametrize("seed", range(8))
    @pytest.mark.parametrize("strategy", ["adaptive", "strict"])
    def test_completeness_and_no_double_use(self, seed, strategy):
        rng = random.Random(seed)
        words = ["alpha", "beta", "Gamma", "42", "delta", "2024", "epsilon", "x@y.io"]
        segments = _make_segments(
            *(" ".join(rng.choices(words, k=rng.randint(1, 8))) for _ in range(rng.randint(0, 15)))
        )
        lines = [
            " ".join(rng.choices(words, k=rng.randint(1, 8))) for _ in range(rng.randint(0, 15))
        ]
        result = align(segments, "\n".join(lines), AlignConfig(strategy=strategy))

        _check_invariants(segments, result)
        used = [index for indices in result.sources.values() for index in indices]
        assert len(used) == len(set(used))

    @pytest.mark.parametrize("seed", range(8))
    def test_sequential_pass_preserves_order(self, seed):
        rng = random.Random(seed)
        segments = _make_segments(*(f"Item {rng.randint(0, 99)} text" for _ in range(10)))
        lines = [f"Article {rng.randint(0, 99)} texte" for _ in range(rng.randint(3, 9))]
        result = align(segments, "\n".join(lines))

        if result.stats.method == "sequential-flex":
            consumed = [result.sources[seg.id][0] for seg in segments if seg.id in result.sources]
            assert consumed == sorted(consumed)


def test_get_aligner():
    assert isinstance(get_aligner(), AdaptiveAligner)
    assert isinstance(get_aligner(STRICT), StrictAligner)


def test_get_aligner_unknown_strategy():
    config = AlignConfig.model_construct(strategy="greedy")
    with pytest.raises(ValueError, match="Unknown alignment strategy"):
        get_aligner(config)


class TestMatchSummary:
    def test_exact(self):
        text = match_summary(MatchStats(total=3, matched=3, method="structure-1:1"))
        assert "Total segments : 3" in text
        assert "Method         : structure-1:1" in text
        assert "Approximate" not in text
        assert "Unmatched" not in text

    def test_partial(self):
        text = match_summary(MatchStats(total=4, matched=3, fuzzy=2, unmatched=1, method="x"))
        assert "Approximate    : 2" in text
        assert "Unmatched      : 1" in text
