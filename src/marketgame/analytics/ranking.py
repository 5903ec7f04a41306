"""Rank-over-time (bump chart) series with date downsampling.

The rank shown for a player on a date is the ``rank`` field of that
day's performance point. When the roster-wide number of distinct dates
exceeds the target, every k-th date is kept, with
``k = ceil(total_dates / target_points)``, and every player's series is
restricted to those dates.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date

import polars as pl

from marketgame.models.game import PerformancePoint

DEFAULT_TARGET_POINTS = 60


@dataclass(frozen=True)
class RankPoint:
    date: date
    rank: int


@dataclass(frozen=True)
class RankSeries:
    """One player's line on the bump chart."""

    name: str
    points: list[RankPoint]


def sample_dates(dates: Sequence[date], target_points: int = DEFAULT_TARGET_POINTS) -> list[date]:
    """Downsample sorted dates to roughly ``target_points`` entries.

    Args:
        dates: Distinct dates in ascending order.
        target_points: Display threshold. Must be positive.

    Returns:
        All dates when at or under the threshold, otherwise every k-th
        date starting with the first.
    """
    if target_points <= 0:
        raise ValueError("target_points must be positive")
    if len(dates) <= target_points:
        return list(dates)
    step = math.ceil(len(dates) / target_points)
    return [d for i, d in enumerate(dates) if i % step == 0]


def build_rank_series(
    performance_by_player: Mapping[str, Sequence[PerformancePoint]],
    target_points: int = DEFAULT_TARGET_POINTS,
) -> list[RankSeries]:
    """Build downsampled rank series for every player.

    Args:
        performance_by_player: Performance keyed by player name. Output
            keeps this order.
        target_points: Display threshold for distinct dates.

    Returns:
        One series per player, each ascending by date.
    """
    rows = [
        (name, point.date, point.rank)
        for name, performance in performance_by_player.items()
        for point in performance
    ]
    if not rows:
        return [RankSeries(name=name, points=[]) for name in performance_by_player]

    df = pl.DataFrame(
        rows,
        schema={"player": pl.String, "date": pl.Date, "rank": pl.Int64},
        orient="row",
    )
    all_dates = df.get_column("date").unique().sort().to_list()
    shown = sample_dates(all_dates, target_points)
    df = df.filter(pl.col("date").is_in(shown)).sort("date")

    series: list[RankSeries] = []
    for name in performance_by_player:
        player_rows = df.filter(pl.col("player") == name)
        series.append(
            RankSeries(
                name=name,
                points=[
                    RankPoint(date=row["date"], rank=row["rank"])
                    for row in player_rows.iter_rows(named=True)
                ],
            )
        )
    return series
