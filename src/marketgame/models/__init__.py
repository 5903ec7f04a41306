"""Domain records for stock market game results."""

from marketgame.models.game import (
    CurrentStreak,
    DailyReturn,
    Drawdown,
    Holding,
    HoldingType,
    LeaderboardEntry,
    Peak,
    PerformancePoint,
    Player,
    PlayerData,
    PlayerStats,
    Streaks,
    StreakType,
    Transaction,
    TransactionType,
)

__all__ = [
    "CurrentStreak",
    "DailyReturn",
    "Drawdown",
    "Holding",
    "HoldingType",
    "LeaderboardEntry",
    "Peak",
    "PerformancePoint",
    "Player",
    "PlayerData",
    "PlayerStats",
    "StreakType",
    "Streaks",
    "Transaction",
    "TransactionType",
]
