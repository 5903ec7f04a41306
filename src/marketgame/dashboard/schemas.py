"""Pydantic schemas for rendering game data bundles."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from marketgame.models.game import (
    DailyReturn,
    Holding,
    HoldingType,
    LeaderboardEntry,
    PerformancePoint,
    Player,
    PlayerData,
    PlayerStats,
    Transaction,
    TransactionType,
)


# Roster Schemas
class PlayerSchema(BaseModel):
    """Schema for a roster player."""
    name: str
    slug: str

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_domain(cls, player: Player) -> PlayerSchema:
        return cls.model_validate(player)


class LeaderboardEntrySchema(BaseModel):
    """Schema for one leaderboard row."""
    place: int = Field(..., description="1-based standing")
    name: str
    slug: str
    net_worth: float = Field(..., description="Net worth in dollars")
    last_change: float = Field(..., description="Last daily change in percent")
    trades: int
    total_returns: float = Field(..., description="Dollar gain over starting capital")

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_domain(cls, entry: LeaderboardEntry) -> LeaderboardEntrySchema:
        return cls.model_validate(entry)


# Series Schemas
class PerformancePointSchema(BaseModel):
    """Schema for one daily performance observation."""
    date: dt.date
    rank: int
    cash: float
    cash_interest: float
    net_worth: float
    percent_return: float

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_domain(cls, point: PerformancePoint) -> PerformancePointSchema:
        return cls.model_validate(point)


class HoldingSchema(BaseModel):
    """Schema for an open position."""
    symbol: str
    shares: int
    percent_of_portfolio: int = Field(..., description="Share of the portfolio, 0-100")
    type: HoldingType
    price: float
    price_change: float
    price_change_percent: float
    value: float
    gain_loss: float
    gain_loss_percent: float

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_domain(cls, holding: Holding) -> HoldingSchema:
        return cls.model_validate(holding)


class TransactionSchema(BaseModel):
    """Schema for an order event."""
    symbol: str
    order_date: dt.date
    transaction_date: dt.date | None = Field(default=None, description="None if never executed")
    type: TransactionType
    cancel_reason: str | None = None
    amount: int
    price: float | None = None
    is_completed: bool

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_domain(cls, transaction: Transaction) -> TransactionSchema:
        return cls.model_validate(transaction)


# Statistics Schemas
class DailyReturnSchema(BaseModel):
    """Schema for a day-over-day change."""
    date: dt.date
    change: float
    change_percent: float

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_domain(cls, daily_return: DailyReturn) -> DailyReturnSchema:
        return cls.model_validate(daily_return)


class PlayerStatsSchema(BaseModel):
    """Schema for a player's aggregate statistics."""
    name: str
    slug: str
    current_net_worth: float
    total_return: float
    total_return_percent: float
    best_day: DailyReturnSchema | None = None
    worst_day: DailyReturnSchema | None = None
    max_drawdown: float = Field(..., ge=0)
    max_drawdown_percent: float = Field(..., ge=0)
    volatility: float = Field(..., ge=0, description="Sample std dev of daily percent returns")
    win_rate: float = Field(..., ge=0, le=100)
    days_at_rank_one: int
    days_at_rank_last: int
    total_trades: int = Field(..., description="Orders without a cancellation reason")
    current_rank: int
    peak_net_worth: float
    peak_date: dt.date | None = None
    lowest_net_worth: float
    holdings_count: int

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_domain(cls, stats: PlayerStats) -> PlayerStatsSchema:
        return cls.model_validate(stats)


# Bundle Schemas
class PlayerDataResponse(BaseModel):
    """Schema for everything one player page renders."""
    player: PlayerSchema
    performance: list[PerformancePointSchema]
    holdings: list[HoldingSchema]
    transactions: list[TransactionSchema]
    stats: PlayerStatsSchema

    @classmethod
    def from_domain(cls, data: PlayerData) -> PlayerDataResponse:
        return cls(
            player=PlayerSchema.from_domain(data.player),
            performance=[PerformancePointSchema.from_domain(p) for p in data.performance],
            holdings=[HoldingSchema.from_domain(h) for h in data.holdings],
            transactions=[TransactionSchema.from_domain(t) for t in data.transactions],
            stats=PlayerStatsSchema.from_domain(data.stats),
        )
