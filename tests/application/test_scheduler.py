"""Tests for interval, stage and mastery derivation."""

import pytest

from nihongo_flow.application.scheduler import (
    classify_stage,
    compute_interval,
    item_history,
    item_progress,
    mastery_percent,
    progress_index,
)
from nihongo_flow.domain.models import Category, LearningStage, Outcome, percent

E, H, F, M = Outcome.EASY, Outcome.HARD, Outcome.FORGOT, Outcome.MASTERED


class TestComputeInterval:
    def test_empty_history(self):
        assert compute_interval([]) == 0

    def test_mastered_sentinel(self):
        assert compute_interval([M]) == 999

    @pytest.mark.parametrize(
        "history, expected",
        [
            ([E], 1),
            ([E, E], 2.5),
            ([E, E, E], 6.25),
            ([H], 0.5),
            ([H, H], 0.6),
            ([E, H], 1.2),
            ([H, E], 1.25),
        ],
    )
    def test_growth(self, history, expected):
        assert compute_interval(history) == pytest.approx(expected)

    def test_trailing_forgot_resets(self):
        assert compute_interval([E, E, F]) == 0
        assert compute_interval([M, E, H, F]) == 0

    def test_forgot_then_easy_restarts_at_one(self):
        assert compute_interval([E, E, E, F, E]) == 1

    def test_mastered_then_easy_keeps_growing(self):
        assert compute_interval([M, E]) == pytest.approx(999 * 2.5)

    def test_deterministic(self):
        history = [E, H, E, F, H, E, E]
        assert compute_interval(history) == compute_interval(history)

    def test_unknown_codes_are_skipped(self):
        assert compute_interval(["easy", "meh", "easy", ""]) == pytest.approx(2.5)

    def test_string_codes_are_accepted(self):
        assert compute_interval(["EASY", " hard "]) == pytest.approx(1.2)

    def test_events_folded_by_timestamp_not_storage_order(self, event):
        # Stored out of order: the forgot happened last
        history = [event(F, minutes=30), event(M, minutes=0), event(E, minutes=10)]
        assert compute_interval(history) == 0

    def test_later_mastered_overrides_earlier_forgot(self, event):
        history = [event(M, minutes=20), event(F, minutes=5)]
        assert compute_interval(history) == 999


class TestClassifyStage:
    @pytest.mark.parametrize(
        "interval, stage",
        [
            (0, LearningStage.NEW),
            (0.5, LearningStage.LEARNING),
            (1, LearningStage.LEARNING),
            (2, LearningStage.LEARNING),
            (2.01, LearningStage.REVIEW),
            (21, LearningStage.REVIEW),
            (21.01, LearningStage.MASTERED),
            (999, LearningStage.MASTERED),
        ],
    )
    def test_boundaries(self, interval, stage):
        assert classify_stage(interval) is stage

    def test_monotonic(self):
        intervals = [0, 0.5, 0.6, 1, 1.2, 2, 2.5, 6.25, 15.6, 21, 39.06, 999]
        ranks = [classify_stage(i).rank for i in intervals]
        assert ranks == sorted(ranks)


class TestMasteryPercent:
    @pytest.mark.parametrize(
        "interval, expected",
        [
            (0, 0),
            (0.5, 2),
            (1, 5),
            (2.5, 12),
            (6.25, 30),
            (10.5, 50),
            (21, 100),
            (39.0625, 100),
            (999, 100),
        ],
    )
    def test_mapping(self, interval, expected):
        assert mastery_percent(interval) == expected

    def test_percent_rounds_half_up(self):
        # round() would give 12 (banker's rounding)
        assert percent(1, 8) == 13
        assert percent(3, 8) == 38
        assert percent(0, 0) == 0


class TestItemProgress:
    def test_filters_to_one_item_and_sorts(self, event):
        events = [
            event(E, minutes=2, item_id="1"),
            event(F, minutes=1, item_id="1"),
            event(M, minutes=0, item_id="2"),
            event(M, minutes=0, item_id="1", category=Category.KANJI),
        ]
        history = item_history(events, Category.VOCAB, "1")
        assert [e.outcome for e in history] == [F, E]

        progress = item_progress(events, Category.VOCAB, "1")
        assert progress.interval == 1
        assert progress.stage is LearningStage.LEARNING
        assert progress.mastery == 5
        assert progress.reviews == 2
        assert progress.last_reviewed == history[-1].timestamp

    def test_unreviewed_item_is_new(self):
        progress = item_progress([], Category.GRAMMAR, "9")
        assert progress.stage is LearningStage.NEW
        assert progress.mastery == 0
        assert progress.reviews == 0
        assert progress.last_reviewed is None

    def test_progress_index(self, event):
        events = [
            event(M, item_id="1"),
            event(E, item_id="2"),
            event(E, item_id="3", category=Category.KANJI),
        ]
        index = progress_index(events, Category.VOCAB)
        assert set(index) == {"1", "2"}
        assert index["1"].stage is LearningStage.MASTERED
        assert index["2"].stage is LearningStage.LEARNING


def test_mixed_history_is_folded_in_given_order(event):
    history = [event(Outcome.EASY, minutes=10), event(Outcome.HARD, minutes=0), "easy"]
    # easy -> 1, hard -> 1.2, easy -> 3.0; no reordering by timestamp
    assert compute_interval(history) == pytest.approx(3.0)
    assert compute_interval([event(Outcome.MASTERED, minutes=5), "forgot"]) == 0.0
