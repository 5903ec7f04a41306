"""Canonical data model for stock market game exports.

All records are immutable value objects. Parsed collections are rebuilt
from the source files rather than mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class HoldingType(str, Enum):
    """Direction of an open position."""

    BUY = "BUY"  # long
    SHORT = "SHORT"


class TransactionType(str, Enum):
    """Order types recorded in the transactions export."""

    BUY = "Buy"
    SELL = "Sell"
    SHORT = "Short"
    COVER = "Cover"


class StreakType(str, Enum):
    """Direction of the streak active at the end of a return series."""

    WIN = "win"
    LOSE = "lose"
    NONE = "none"


@dataclass(frozen=True)
class Player:
    """A game participant, as listed on the leaderboard."""

    name: str
    slug: str


@dataclass(frozen=True)
class LeaderboardEntry:
    """One row of the final standings.

    Attributes:
        place: 1-based rank position.
        name: Display name.
        slug: URL-safe key derived from the name.
        net_worth: Net worth in dollars.
        last_change: Last daily change, in percent.
        trades: Number of trades placed.
        total_returns: Dollar gain over starting capital.
    """

    place: int
    name: str
    slug: str
    net_worth: float
    last_change: float
    trades: int
    total_returns: float


@dataclass(frozen=True)
class PerformancePoint:
    """One daily observation of a player's portfolio."""

    date: date
    rank: int
    cash: float
    cash_interest: float
    net_worth: float
    percent_return: float


@dataclass(frozen=True)
class Holding:
    """A currently open position.

    ``percent_of_portfolio`` is 0-100; holdings need not sum to 100
    because part of the portfolio may be cash.
    """

    symbol: str
    shares: int
    percent_of_portfolio: int
    type: HoldingType
    price: float
    price_change: float
    price_change_percent: float
    value: float
    gain_loss: float
    gain_loss_percent: float


@dataclass(frozen=True)
class Transaction:
    """An order event.

    ``transaction_date`` and ``price`` are None for orders that never
    executed. A non-None ``cancel_reason`` excludes the order from
    completed-trade counts.
    """

    symbol: str
    order_date: date
    transaction_date: date | None
    type: TransactionType
    cancel_reason: str | None
    amount: int
    price: float | None

    @property
    def is_completed(self) -> bool:
        return self.cancel_reason is None


@dataclass(frozen=True)
class DailyReturn:
    """Net worth change between two consecutive performance points."""

    date: date
    change: float
    change_percent: float


@dataclass(frozen=True)
class Drawdown:
    """Largest decline from a running peak."""

    max_drawdown: float
    max_drawdown_percent: float


@dataclass(frozen=True)
class Peak:
    """Highest net worth reached, with the date it was reached."""

    net_worth: float
    date: date | None


@dataclass(frozen=True)
class CurrentStreak:
    type: StreakType
    count: int


@dataclass(frozen=True)
class Streaks:
    """Longest and still-active win/lose runs of a return series."""

    longest_win_streak: int
    longest_lose_streak: int
    current_streak: CurrentStreak


@dataclass(frozen=True)
class PlayerStats:
    """Aggregate statistics derived from one player's series.

    Percent fields are expressed in percent (12.5 means 12.5%).
    """

    name: str
    slug: str
    current_net_worth: float
    total_return: float
    total_return_percent: float
    best_day: DailyReturn | None
    worst_day: DailyReturn | None
    max_drawdown: float
    max_drawdown_percent: float
    volatility: float
    win_rate: float
    days_at_rank_one: int
    days_at_rank_last: int
    total_trades: int
    current_rank: int
    peak_net_worth: float
    peak_date: date | None
    lowest_net_worth: float
    holdings_count: int


@dataclass(frozen=True)
class PlayerData:
    """Everything the view layer needs to render one player."""

    player: Player
    performance: tuple[PerformancePoint, ...]
    holdings: tuple[Holding, ...]
    transactions: tuple[Transaction, ...]
    stats: PlayerStats
