"""Cross-player records for the insights view.

All searches scan players in roster order and keep the first player on
ties. Empty rosters produce None records and an empty reversal list.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import TypeVar

from marketgame.analytics.stats import (
    INITIAL_CAPITAL,
    calculate_daily_returns,
    calculate_streaks,
)
from marketgame.models.game import PlayerData

T = TypeVar("T")

DEFAULT_REVERSAL_THRESHOLD_PCT = 5.0


@dataclass(frozen=True)
class PlayerDay:
    """A single daily change attributed to a player."""

    player: str
    date: date
    change: float
    change_percent: float


@dataclass(frozen=True)
class PlayerRecord:
    """A player holding a record, with the record value."""

    player: str
    value: float


@dataclass(frozen=True)
class Reversal:
    """A player who fell significantly from their peak."""

    player: str
    peak_net_worth: float
    peak_date: date | None
    peak_return_percent: float
    current_net_worth: float
    current_return_percent: float
    max_drawdown_percent: float


@dataclass(frozen=True)
class GameInsights:
    best_day: PlayerDay | None
    worst_day: PlayerDay | None
    longest_win_streak: PlayerRecord | None
    longest_lose_streak: PlayerRecord | None
    most_active_trader: PlayerRecord | None
    most_volatile: PlayerRecord | None
    least_volatile: PlayerRecord | None
    longest_leader: PlayerRecord | None
    reversals: list[Reversal]


def _first_max(items: Iterable[T], key: Callable[[T], float]) -> T | None:
    best: T | None = None
    for item in items:
        if best is None or key(item) > key(best):
            best = item
    return best


def _first_min(items: Iterable[T], key: Callable[[T], float]) -> T | None:
    return _first_max(items, lambda item: -key(item))


def _record(
    players: Sequence[PlayerData],
    key: Callable[[PlayerData], float],
    *,
    lowest: bool = False,
) -> PlayerRecord | None:
    pick = _first_min(players, key) if lowest else _first_max(players, key)
    if pick is None:
        return None
    return PlayerRecord(player=pick.player.name, value=key(pick))


def find_record_days(players: Sequence[PlayerData]) -> tuple[PlayerDay | None, PlayerDay | None]:
    """Best and worst single-day dollar change across every player."""
    days = [
        PlayerDay(
            player=data.player.name,
            date=r.date,
            change=r.change,
            change_percent=r.change_percent,
        )
        for data in players
        for r in calculate_daily_returns(data.performance)
    ]
    return _first_max(days, lambda d: d.change), _first_min(days, lambda d: d.change)


def find_streak_leaders(
    players: Sequence[PlayerData],
) -> tuple[PlayerRecord | None, PlayerRecord | None]:
    """Players with the longest win streak and the longest lose streak."""
    streaks = [
        (data.player.name, calculate_streaks(calculate_daily_returns(data.performance)))
        for data in players
    ]
    win = _first_max(streaks, lambda s: s[1].longest_win_streak)
    lose = _first_max(streaks, lambda s: s[1].longest_lose_streak)
    return (
        PlayerRecord(player=win[0], value=win[1].longest_win_streak) if win else None,
        PlayerRecord(player=lose[0], value=lose[1].longest_lose_streak) if lose else None,
    )


def most_active_trader(players: Sequence[PlayerData]) -> PlayerRecord | None:
    return _record(players, lambda p: p.stats.total_trades)


def most_volatile(players: Sequence[PlayerData]) -> PlayerRecord | None:
    return _record(players, lambda p: p.stats.volatility)


def least_volatile(players: Sequence[PlayerData]) -> PlayerRecord | None:
    return _record(players, lambda p: p.stats.volatility, lowest=True)


def longest_leader(players: Sequence[PlayerData]) -> PlayerRecord | None:
    """Player with the most days at rank 1."""
    return _record(players, lambda p: p.stats.days_at_rank_one)


def find_dramatic_reversals(
    players: Sequence[PlayerData],
    threshold_pct: float = DEFAULT_REVERSAL_THRESHOLD_PCT,
    initial_capital: float = INITIAL_CAPITAL,
) -> list[Reversal]:
    """Players whose max drawdown exceeds ``threshold_pct``, deepest first."""
    reversals = [
        Reversal(
            player=data.player.name,
            peak_net_worth=data.stats.peak_net_worth,
            peak_date=data.stats.peak_date,
            peak_return_percent=(data.stats.peak_net_worth - initial_capital)
            / initial_capital
            * 100,
            current_net_worth=data.stats.current_net_worth,
            current_return_percent=data.stats.total_return_percent,
            max_drawdown_percent=data.stats.max_drawdown_percent,
        )
        for data in players
        if data.stats.max_drawdown_percent > threshold_pct
    ]
    reversals.sort(key=lambda r: r.max_drawdown_percent, reverse=True)
    return reversals


def build_insights(
    players: Sequence[PlayerData],
    reversal_threshold_pct: float = DEFAULT_REVERSAL_THRESHOLD_PCT,
    initial_capital: float = INITIAL_CAPITAL,
) -> GameInsights:
    """Collect every cross-player record."""
    best_day, worst_day = find_record_days(players)
    win_streak, lose_streak = find_streak_leaders(players)
    return GameInsights(
        best_day=best_day,
        worst_day=worst_day,
        longest_win_streak=win_streak,
        longest_lose_streak=lose_streak,
        most_active_trader=most_active_trader(players),
        most_volatile=most_volatile(players),
        least_volatile=least_volatile(players),
        longest_leader=longest_leader(players),
        reversals=find_dramatic_reversals(players, reversal_threshold_pct, initial_capital),
    )
