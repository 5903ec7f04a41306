"""Aggregated, memoized game data for the dashboard views.

``GameDataService`` combines the CSV parsers with the statistics engine
and keeps every result for the life of the process. Concurrent first
requests for the same key share one computation (see ``AsyncMemoCache``).

Failure scope:
- The leaderboard is foundational: ``DataUnavailableError`` propagates
  from every accessor.
- A player whose exports are missing fails only their own bundle;
  roster-wide accessors log and omit that player.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import replace
from functools import lru_cache
from typing import TypeVar

from marketgame.analytics.concentration import ConcentrationEntry, rank_concentration
from marketgame.analytics.frontier import FrontierResult, RiskReturnPoint, analyze_frontier
from marketgame.analytics.ranking import RankSeries, build_rank_series
from marketgame.analytics.records import GameInsights, build_insights
from marketgame.analytics.stats import calculate_player_stats
from marketgame.core.cache import AsyncMemoCache
from marketgame.core.config import Settings, get_settings
from marketgame.core.exceptions import (
    InvalidDataFormatError,
    PlayerDataUnavailableError,
    PlayerNotFoundError,
)
from marketgame.core.logging import LoggerMixin
from marketgame.ingestion.parsers import GameDataParser, build_roster, find_player_by_slug
from marketgame.models.game import (
    LeaderboardEntry,
    PerformancePoint,
    Player,
    PlayerData,
)

T = TypeVar("T")

# Errors that only invalidate one player's bundle.
PLAYER_SCOPED_ERRORS = (PlayerDataUnavailableError, InvalidDataFormatError)

_LEADERBOARD_KEY = "leaderboard"
_ROSTER_KEY = "roster"
_ALL_PLAYERS_KEY = "all"


class GameDataService(LoggerMixin):
    """Memoized accessors over one game's exports."""

    def __init__(
        self,
        settings: Settings | None = None,
        parser: GameDataParser | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Application settings. Defaults to process-wide settings.
            parser: CSV parser. Defaults to one built from ``settings``.
        """
        self.settings = settings or get_settings()
        self.parser = parser or GameDataParser(self.settings)

        self._leaderboard: AsyncMemoCache[str, tuple[LeaderboardEntry, ...]] = AsyncMemoCache(
            "leaderboard"
        )
        self._roster: AsyncMemoCache[str, tuple[Player, ...]] = AsyncMemoCache("roster")
        self._performance: AsyncMemoCache[str, tuple[PerformancePoint, ...]] = AsyncMemoCache(
            "performance"
        )
        self._player_data: AsyncMemoCache[str, PlayerData] = AsyncMemoCache("player_data")
        self._all_players: AsyncMemoCache[str, tuple[PlayerData, ...]] = AsyncMemoCache(
            "all_players_data"
        )

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    async def get_leaderboard(self) -> list[LeaderboardEntry]:
        """Leaderboard entries in file order.

        Raises:
            DataUnavailableError: If the rankings export cannot be read.
        """

        async def load() -> tuple[LeaderboardEntry, ...]:
            return tuple(await self.parser.parse_leaderboard())

        return list(await self._leaderboard.get_or_compute(_LEADERBOARD_KEY, load))

    async def get_players(self) -> list[Player]:
        """The roster, in leaderboard order."""

        async def load() -> tuple[Player, ...]:
            return tuple(build_roster(await self.get_leaderboard()))

        return list(await self._roster.get_or_compute(_ROSTER_KEY, load))

    async def get_player_by_slug(self, slug: str) -> Player | None:
        """Look up a roster player by slug. None means not found."""
        return find_player_by_slug(await self.get_players(), slug)

    async def _require_player(self, player_name: str) -> list[Player]:
        players = await self.get_players()
        if not any(p.name == player_name for p in players):
            raise PlayerNotFoundError(
                f"{player_name!r} is not on the roster", player_name=player_name
            )
        return players

    # ------------------------------------------------------------------
    # Per-player bundles
    # ------------------------------------------------------------------

    async def get_player_performance(self, player_name: str) -> tuple[PerformancePoint, ...]:
        """A player's performance series, ascending by date."""

        async def load() -> tuple[PerformancePoint, ...]:
            return tuple(await self.parser.parse_performance(player_name))

        return await self._performance.get_or_compute(player_name, load)

    async def get_player_data(self, player_name: str) -> PlayerData:
        """Build (once) the full bundle for one player.

        Raises:
            PlayerNotFoundError: If the name is not on the roster.
            PlayerDataUnavailableError: If one of the player's files is missing.
        """
        players = await self._require_player(player_name)

        async def load() -> PlayerData:
            performance, holdings, transactions = await asyncio.gather(
                self.get_player_performance(player_name),
                self.parser.parse_holdings(player_name),
                self.parser.parse_transactions(player_name),
            )
            stats = calculate_player_stats(
                player_name,
                performance,
                transactions,
                holdings_count=len(holdings),
                total_players=len(players),
                initial_capital=self.settings.initial_capital,
            )
            self.logger.info(
                "player_data_built",
                player=player_name,
                points=len(performance),
                holdings=len(holdings),
                transactions=len(transactions),
            )
            return PlayerData(
                player=Player(name=player_name, slug=stats.slug),
                performance=tuple(performance),
                holdings=tuple(holdings),
                transactions=tuple(transactions),
                stats=stats,
            )

        return await self._player_data.get_or_compute(player_name, load)

    async def get_player_data_by_slug(self, slug: str) -> PlayerData | None:
        """Bundle for the player with ``slug``, or None if no such player."""
        player = await self.get_player_by_slug(slug)
        if player is None:
            return None
        return await self.get_player_data(player.name)

    # ------------------------------------------------------------------
    # Roster-wide bundles
    # ------------------------------------------------------------------

    async def _gather_players(
        self,
        players: list[Player],
        fetch: Callable[[str], Awaitable[T]],
        what: str,
    ) -> list[tuple[Player, T]]:
        results = await asyncio.gather(
            *(fetch(player.name) for player in players),
            return_exceptions=True,
        )

        collected: list[tuple[Player, T]] = []
        for player, result in zip(players, results):
            if isinstance(result, PLAYER_SCOPED_ERRORS):
                self.logger.warning(
                    "player_omitted",
                    player=player.name,
                    dataset=what,
                    error=str(result),
                )
                continue
            if isinstance(result, BaseException):
                raise result
            collected.append((player, result))
        return collected

    async def get_all_players_performance(self) -> dict[str, tuple[PerformancePoint, ...]]:
        """Performance series keyed by player name, in roster order."""
        players = await self.get_players()
        collected = await self._gather_players(
            players, self.get_player_performance, "performance"
        )
        return {player.name: performance for player, performance in collected}

    async def get_all_players_data(self) -> list[PlayerData]:
        """Bundles for every player whose exports are readable, in roster order.

        Only a complete roster is cached. When a player was omitted the
        result is returned as is and the next call tries that player again.
        """
        players = await self.get_players()

        async def load() -> tuple[PlayerData, ...]:
            collected = await self._gather_players(players, self.get_player_data, "player_data")
            self.logger.info(
                "all_players_data_built",
                players=len(players),
                available=len(collected),
            )
            return tuple(data for _, data in collected)

        bundles = await self._all_players.get_or_compute(
            _ALL_PLAYERS_KEY,
            load,
            keep=lambda bundles: len(bundles) == len(players),
        )
        return list(bundles)

    async def get_enhanced_leaderboard(self) -> list[LeaderboardEntry]:
        """Leaderboard with net worth and total returns taken from computed stats.

        Entries for players without a bundle are returned unchanged.
        """
        leaderboard = await self.get_leaderboard()
        stats_by_name = {data.player.name: data.stats for data in await self.get_all_players_data()}

        enhanced: list[LeaderboardEntry] = []
        for entry in leaderboard:
            stats = stats_by_name.get(entry.name)
            if stats is None:
                enhanced.append(entry)
            else:
                enhanced.append(
                    replace(
                        entry,
                        net_worth=stats.current_net_worth,
                        total_returns=stats.total_return,
                    )
                )
        return enhanced

    async def get_adjacent_players(
        self, slug: str
    ) -> tuple[LeaderboardEntry | None, LeaderboardEntry | None]:
        """Leaderboard neighbours (previous, next) of the player with ``slug``."""
        leaderboard = await self.get_leaderboard()
        for index, entry in enumerate(leaderboard):
            if entry.slug == slug:
                prev_entry = leaderboard[index - 1] if index > 0 else None
                next_entry = leaderboard[index + 1] if index < len(leaderboard) - 1 else None
                return prev_entry, next_entry
        return None, None

    # ------------------------------------------------------------------
    # Cross-player analytics
    # ------------------------------------------------------------------

    async def get_insights(self) -> GameInsights:
        return build_insights(
            await self.get_all_players_data(),
            reversal_threshold_pct=self.settings.drawdown_reversal_threshold_pct,
            initial_capital=self.settings.initial_capital,
        )

    async def get_risk_return_frontier(self) -> FrontierResult:
        """Efficient frontier over (volatility, total return percent) per player."""
        points = [
            RiskReturnPoint(
                name=data.player.name,
                volatility=data.stats.volatility,
                total_return_percent=data.stats.total_return_percent,
            )
            for data in await self.get_all_players_data()
        ]
        return analyze_frontier(points)

    async def get_concentration_ranking(self) -> list[ConcentrationEntry]:
        return rank_concentration(
            {data.player.name: data.holdings for data in await self.get_all_players_data()}
        )

    async def get_rank_series(self) -> list[RankSeries]:
        """Downsampled rank-over-time series, in roster order."""
        return build_rank_series(
            await self.get_all_players_performance(),
            target_points=self.settings.bump_target_points,
        )

    def clear(self) -> None:
        """Forget every cached value."""
        for cache in (
            self._leaderboard,
            self._roster,
            self._performance,
            self._player_data,
            self._all_players,
        ):
            cache.clear()


@lru_cache
def get_game_data_service() -> GameDataService:
    """Get the process-wide service instance.

    The instance may be shared across event loops run one after another;
    its caches rebuild their locks on the new loop. Running two loops
    against it at the same time is not supported.
    """
    return GameDataService()
