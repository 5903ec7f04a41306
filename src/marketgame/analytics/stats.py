"""Statistics engine for player performance series.

All functions are pure and total: degenerate inputs (empty series, a
single point, zero net worth) produce ``0`` or ``None`` rather than
raising, so a player with one data point still gets a displayable record.

Conventions:
- Performance sequences are sorted ascending by date.
- Percent values are expressed in percent (``10.0`` means 10%).
- Ties in best/worst/peak searches resolve to the first record in
  sequence order.

For a net worth series of 100,000, 110,000, 95,000 and 105,000 the daily
returns are 10%, -13.64% and 10.53%, the volatility is about 13.80 and the
max drawdown is 15,000 (13.64% of the 110,000 peak).
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

import polars as pl

from marketgame.core.logging import get_logger
from marketgame.ingestion.normalizers import slugify
from marketgame.models.game import (
    CurrentStreak,
    DailyReturn,
    Drawdown,
    Peak,
    PerformancePoint,
    PlayerStats,
    Streaks,
    StreakType,
    Transaction,
)

logger = get_logger(__name__)

INITIAL_CAPITAL = 100000.0
DEFAULT_TOTAL_PLAYERS = 7


@dataclass(frozen=True)
class CapitalUsePoint:
    """Share of starting capital invested (net worth minus cash) on one day."""

    date: date
    capital_use_percent: float


@dataclass(frozen=True)
class TradeDayCount:
    """Number of completed orders placed on one day."""

    date: date
    count: int


def calculate_daily_returns(performance: Sequence[PerformancePoint]) -> list[DailyReturn]:
    """Compute day-over-day net worth changes.

    ``change_percent`` is relative to the previous day's net worth and is
    ``0`` when that net worth is not positive.

    Returns:
        ``len(performance) - 1`` records, or none for fewer than two points.
    """
    returns: list[DailyReturn] = []
    for prev, curr in zip(performance, performance[1:]):
        change = curr.net_worth - prev.net_worth
        change_percent = change / prev.net_worth * 100 if prev.net_worth > 0 else 0.0
        returns.append(DailyReturn(date=curr.date, change=change, change_percent=change_percent))
    return returns


def calculate_volatility(daily_returns: Sequence[DailyReturn]) -> float:
    """Sample standard deviation (``n - 1``) of daily percent returns.

    Returns ``0`` for fewer than two returns.
    """
    if len(daily_returns) < 2:
        return 0.0

    series = pl.Series("change_percent", [r.change_percent for r in daily_returns], dtype=pl.Float64)
    std = series.std(ddof=1)
    return float(std) if std is not None else 0.0


def calculate_max_drawdown(
    performance: Sequence[PerformancePoint],
    initial_capital: float = INITIAL_CAPITAL,
) -> Drawdown:
    """Find the largest decline from a running net worth peak.

    The peak starts at the first point's net worth, or at
    ``initial_capital`` for an empty series. The reported percent belongs
    to the same point as the largest absolute drawdown.
    """
    peak = performance[0].net_worth if performance else initial_capital
    max_drawdown = 0.0
    max_drawdown_percent = 0.0

    for point in performance:
        if point.net_worth > peak:
            peak = point.net_worth
        drawdown = peak - point.net_worth
        if drawdown > max_drawdown:
            max_drawdown = drawdown
            max_drawdown_percent = drawdown / peak * 100 if peak > 0 else 0.0

    return Drawdown(max_drawdown=max_drawdown, max_drawdown_percent=max_drawdown_percent)


def calculate_win_rate(daily_returns: Sequence[DailyReturn]) -> float:
    """Percent of days with a strictly positive change.

    Flat days count toward the denominator only.
    """
    if not daily_returns:
        return 0.0
    wins = sum(1 for r in daily_returns if r.change > 0)
    return wins / len(daily_returns) * 100


def find_best_worst_days(
    daily_returns: Sequence[DailyReturn],
) -> tuple[DailyReturn | None, DailyReturn | None]:
    """Return the days with the largest and smallest absolute change."""
    if not daily_returns:
        return None, None

    best = worst = daily_returns[0]
    for day in daily_returns:
        if day.change > best.change:
            best = day
        if day.change < worst.change:
            worst = day
    return best, worst


def find_peak(
    performance: Sequence[PerformancePoint],
    initial_capital: float = INITIAL_CAPITAL,
) -> Peak:
    """Highest net worth reached. An empty series peaks at starting capital."""
    if not performance:
        return Peak(net_worth=initial_capital, date=None)

    peak = performance[0]
    for point in performance:
        if point.net_worth > peak.net_worth:
            peak = point
    return Peak(net_worth=peak.net_worth, date=peak.date)


def find_trough(
    performance: Sequence[PerformancePoint],
    initial_capital: float = INITIAL_CAPITAL,
) -> float:
    """Lowest net worth reached. An empty series bottoms at starting capital."""
    if not performance:
        return initial_capital
    return min(point.net_worth for point in performance)


def count_days_at_rank_one(performance: Sequence[PerformancePoint]) -> int:
    return sum(1 for p in performance if p.rank == 1)


def count_days_at_rank_last(performance: Sequence[PerformancePoint], total_players: int) -> int:
    return sum(1 for p in performance if p.rank == total_players)


def calculate_streaks(daily_returns: Sequence[DailyReturn]) -> Streaks:
    """Track win and lose runs over a return series.

    A positive change extends the win run and resets the lose run, and a
    negative change does the opposite. Flat days neither extend nor reset
    either run.
    """
    longest_win = longest_lose = 0
    win_run = lose_run = 0

    for day in daily_returns:
        if day.change > 0:
            win_run += 1
            lose_run = 0
            longest_win = max(longest_win, win_run)
        elif day.change < 0:
            lose_run += 1
            win_run = 0
            longest_lose = max(longest_lose, lose_run)

    current = CurrentStreak(type=StreakType.NONE, count=0)
    if win_run > 0:
        current = CurrentStreak(type=StreakType.WIN, count=win_run)
    elif lose_run > 0:
        current = CurrentStreak(type=StreakType.LOSE, count=lose_run)

    return Streaks(
        longest_win_streak=longest_win,
        longest_lose_streak=longest_lose,
        current_streak=current,
    )


def count_completed_trades(transactions: Sequence[Transaction]) -> int:
    """Number of orders without a cancellation reason."""
    return sum(1 for t in transactions if t.cancel_reason is None)


def calculate_sharpe_like(total_return_percent: float, volatility: float) -> float | None:
    """Total return per unit of daily volatility. None when volatility is zero."""
    if volatility == 0:
        return None
    return total_return_percent / volatility


def calculate_capital_use(
    performance: Sequence[PerformancePoint],
    initial_capital: float = INITIAL_CAPITAL,
) -> list[CapitalUsePoint]:
    """Invested amount (net worth minus cash) as a percent of starting capital.

    Values above 100 indicate margin use; short proceeds held as cash can
    push the value below zero.
    """
    return [
        CapitalUsePoint(
            date=point.date,
            capital_use_percent=(point.net_worth - point.cash) / initial_capital * 100,
        )
        for point in performance
    ]


def count_trades_by_day(transactions: Sequence[Transaction]) -> list[TradeDayCount]:
    """Completed orders grouped by order date, ascending by date."""
    counts = Counter(t.order_date for t in transactions if t.cancel_reason is None)
    return [TradeDayCount(date=day, count=counts[day]) for day in sorted(counts)]


def calculate_player_stats(
    player_name: str,
    performance: Sequence[PerformancePoint],
    transactions: Sequence[Transaction],
    holdings_count: int = 0,
    total_players: int = DEFAULT_TOTAL_PLAYERS,
    initial_capital: float = INITIAL_CAPITAL,
) -> PlayerStats:
    """Compute every per-player statistic in one record.

    Args:
        player_name: Display name of the player.
        performance: Daily series sorted ascending by date.
        transactions: Order history in any order.
        holdings_count: Number of currently open holdings.
        total_players: Roster size, used to count days in last place.
        initial_capital: Starting capital all returns are measured from.

    Returns:
        PlayerStats for the player.
    """
    daily_returns = calculate_daily_returns(performance)
    drawdown = calculate_max_drawdown(performance, initial_capital)
    best_day, worst_day = find_best_worst_days(daily_returns)
    peak = find_peak(performance, initial_capital)

    latest = performance[-1] if performance else None
    current_net_worth = latest.net_worth if latest is not None else initial_capital
    current_rank = latest.rank if latest is not None else 0
    total_return = current_net_worth - initial_capital

    stats = PlayerStats(
        name=player_name,
        slug=slugify(player_name),
        current_net_worth=current_net_worth,
        total_return=total_return,
        total_return_percent=total_return / initial_capital * 100,
        best_day=best_day,
        worst_day=worst_day,
        max_drawdown=drawdown.max_drawdown,
        max_drawdown_percent=drawdown.max_drawdown_percent,
        volatility=calculate_volatility(daily_returns),
        win_rate=calculate_win_rate(daily_returns),
        days_at_rank_one=count_days_at_rank_one(performance),
        days_at_rank_last=count_days_at_rank_last(performance, total_players),
        total_trades=count_completed_trades(transactions),
        current_rank=current_rank,
        peak_net_worth=peak.net_worth,
        peak_date=peak.date,
        lowest_net_worth=find_trough(performance, initial_capital),
        holdings_count=holdings_count,
    )

    logger.debug(
        "player_stats_calculated",
        player=player_name,
        points=len(performance),
        total_return_percent=stats.total_return_percent,
        volatility=stats.volatility,
    )
    return stats
