"""Statistics and cross-player analytics for stock market game results."""

from marketgame.analytics.concentration import (
    ConcentrationEntry,
    largest_position,
    rank_concentration,
)
from marketgame.analytics.frontier import (
    FrontierResult,
    RiskReturnPoint,
    analyze_frontier,
    build_efficient_frontier,
    find_most_efficient,
)
from marketgame.analytics.ranking import (
    RankPoint,
    RankSeries,
    build_rank_series,
    sample_dates,
)
from marketgame.analytics.records import (
    GameInsights,
    PlayerDay,
    PlayerRecord,
    Reversal,
    build_insights,
    find_dramatic_reversals,
    find_record_days,
    find_streak_leaders,
)
from marketgame.analytics.stats import (
    INITIAL_CAPITAL,
    CapitalUsePoint,
    TradeDayCount,
    calculate_capital_use,
    calculate_daily_returns,
    calculate_max_drawdown,
    calculate_player_stats,
    calculate_sharpe_like,
    calculate_streaks,
    calculate_volatility,
    calculate_win_rate,
    count_completed_trades,
    count_days_at_rank_last,
    count_days_at_rank_one,
    count_trades_by_day,
    find_best_worst_days,
    find_peak,
    find_trough,
)

__all__ = [
    # Statistics
    "INITIAL_CAPITAL",
    "CapitalUsePoint",
    "TradeDayCount",
    "calculate_capital_use",
    "calculate_daily_returns",
    "calculate_max_drawdown",
    "calculate_player_stats",
    "calculate_sharpe_like",
    "calculate_streaks",
    "calculate_volatility",
    "calculate_win_rate",
    "count_completed_trades",
    "count_days_at_rank_last",
    "count_days_at_rank_one",
    "count_trades_by_day",
    "find_best_worst_days",
    "find_peak",
    "find_trough",
    # Efficient frontier
    "FrontierResult",
    "RiskReturnPoint",
    "analyze_frontier",
    "build_efficient_frontier",
    "find_most_efficient",
    # Concentration
    "ConcentrationEntry",
    "largest_position",
    "rank_concentration",
    # Rank series
    "RankPoint",
    "RankSeries",
    "build_rank_series",
    "sample_dates",
    # Records
    "GameInsights",
    "PlayerDay",
    "PlayerRecord",
    "Reversal",
    "build_insights",
    "find_dramatic_reversals",
    "find_record_days",
    "find_streak_leaders",
]
