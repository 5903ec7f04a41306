"""Tests for bump chart rank series."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from marketgame.analytics.ranking import build_rank_series, sample_dates
from marketgame.models.game import PerformancePoint


def _series(days: int, rank: int, start: date = date(2025, 1, 1)) -> list[PerformancePoint]:
    return [
        PerformancePoint(
            date=start + timedelta(days=i),
            rank=rank,
            cash=0.0,
            cash_interest=0.0,
            net_worth=100000.0,
            percent_return=0.0,
        )
        for i in range(days)
    ]


class TestSampleDates:
    """Tests for sample_dates."""

    def test_under_threshold_keeps_everything(self) -> None:
        """Test that short games are not downsampled."""
        dates = [date(2025, 1, d) for d in range(1, 11)]
        assert sample_dates(dates, target_points=10) == dates

    def test_every_kth_date(self) -> None:
        """Test k = ceil(total / target) sampling from the first date."""
        dates = [date(2025, 1, 1) + timedelta(days=i) for i in range(100)]

        shown = sample_dates(dates, target_points=60)

        # ceil(100 / 60) == 2
        assert shown == dates[::2]
        assert len(shown) == 50

    def test_result_is_bounded_by_target(self) -> None:
        """Test that the sample never exceeds the target."""
        dates = [date(2025, 1, 1) + timedelta(days=i) for i in range(250)]
        for target in (1, 7, 60, 249):
            assert len(sample_dates(dates, target)) <= target

    def test_non_positive_target(self) -> None:
        """Test that a zero target is rejected."""
        with pytest.raises(ValueError, match="target_points must be positive"):
            sample_dates([date(2025, 1, 1)], target_points=0)


class TestBuildRankSeries:
    """Tests for build_rank_series."""

    def test_series_per_player_in_input_order(self) -> None:
        """Test one ascending series per player."""
        series = build_rank_series({"Ana": _series(3, 2), "Koby": _series(3, 1)})

        assert [s.name for s in series] == ["Ana", "Koby"]
        assert [p.rank for p in series[1].points] == [1, 1, 1]
        dates = [p.date for p in series[0].points]
        assert dates == sorted(dates)

    def test_downsampling_is_shared_across_players(self) -> None:
        """Test that every player is restricted to the same dates."""
        series = build_rank_series(
            {"Ana": _series(90, 2), "Koby": _series(90, 1)},
            target_points=30,
        )

        ana_dates = [p.date for p in series[0].points]
        koby_dates = [p.date for p in series[1].points]
        assert ana_dates == koby_dates
        assert len(ana_dates) == 30
        assert ana_dates[0] == date(2025, 1, 1)
        assert ana_dates[1] == date(2025, 1, 4)

    def test_distinct_dates_are_counted_across_players(self) -> None:
        """Test that a late joiner's dates shift the sampling."""
        series = build_rank_series(
            {
                "Ana": _series(3, 1),
                "Koby": _series(3, 2, start=date(2025, 1, 4)),
            },
            target_points=3,
        )

        # six distinct dates, k = 2: Jan 1, 3, 5
        assert [p.date.day for p in series[0].points] == [1, 3]
        assert [p.date.day for p in series[1].points] == [5]

    def test_empty_inputs(self) -> None:
        """Test players without performance data."""
        assert build_rank_series({}) == []
        series = build_rank_series({"Ana": []})
        assert series[0].name == "Ana"
        assert series[0].points == []
