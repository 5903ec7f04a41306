"""Aggregation layer and view schemas for the results dashboard."""

from marketgame.dashboard.schemas import (
    DailyReturnSchema,
    HoldingSchema,
    LeaderboardEntrySchema,
    PerformancePointSchema,
    PlayerDataResponse,
    PlayerSchema,
    PlayerStatsSchema,
    TransactionSchema,
)
from marketgame.dashboard.service import GameDataService, get_game_data_service

__all__ = [
    # Service
    "GameDataService",
    "get_game_data_service",
    # Schemas
    "DailyReturnSchema",
    "HoldingSchema",
    "LeaderboardEntrySchema",
    "PerformancePointSchema",
    "PlayerDataResponse",
    "PlayerSchema",
    "PlayerStatsSchema",
    "TransactionSchema",
]
