"""Tests for the pure summary tally."""

import pytest
from app.models.feedback import ReactionKind
from app.services.feedback.aggregation import tally_summary

LOVE, LIKE, MEH, DISLIKE = (
    ReactionKind.LOVE,
    ReactionKind.LIKE,
    ReactionKind.MEH,
    ReactionKind.DISLIKE,
)


class TestTallySummary:
    def test_no_reactions_gives_zero_summary(self):
        summary = tally_summary("t1", [], now=123)
        assert summary.total_count == 0
        assert summary.love_count == summary.like_count == 0
        assert summary.meh_count == summary.dislike_count == 0
        assert summary.average_score == 0.0
        assert summary.last_updated == 123

    def test_single_love_averages_four(self):
        summary = tally_summary("t1", [LOVE], now=1)
        assert summary.love_count == 1
        assert summary.total_count == 1
        assert summary.average_score == 4.0

    def test_mixed_counts_and_average(self):
        summary = tally_summary("t1", [LOVE, LOVE, LIKE, MEH, DISLIKE, DISLIKE], now=1)
        assert (summary.love_count, summary.like_count) == (2, 1)
        assert (summary.meh_count, summary.dislike_count) == (1, 2)
        assert summary.total_count == 6
        # (4 + 4 + 3 + 2 + 1 + 1) / 6
        assert summary.average_score == pytest.approx(15 / 6)

    def test_accepts_raw_kind_strings(self):
        summary = tally_summary("t1", ["like", "meh"], now=1)
        assert summary.like_count == 1
        assert summary.meh_count == 1
        assert summary.average_score == pytest.approx(2.5)

    @pytest.mark.parametrize(
        "kinds",
        [[DISLIKE] * 7, [LOVE] * 3, [LOVE, DISLIKE], [MEH, LIKE, LIKE, DISLIKE]],
    )
    def test_average_stays_within_bounds(self, kinds):
        summary = tally_summary("t1", kinds, now=1)
        assert 1.0 <= summary.average_score <= 4.0
        assert summary.total_count == len(kinds)
