"""Record parsers for stock market game CSV exports.

Each export is located by naming convention inside the configured data
directory (see ``Settings``) and mapped row by row through the field
normalizers into typed records. The leaderboard is the single source of
truth for who is a player; per-player files are looked up by roster name.

Error policy:
- A missing leaderboard raises ``DataUnavailableError``.
- A missing per-player file raises ``PlayerDataUnavailableError`` for
  that player only.
- Malformed fields fall back to defaults and are logged as warnings.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import TypeVar

from marketgame.core.config import Settings, get_settings
from marketgame.core.exceptions import (
    DataUnavailableError,
    InvalidDataFormatError,
    PlayerDataUnavailableError,
    SlugCollisionError,
)
from marketgame.core.logging import LoggerMixin
from marketgame.ingestion.csv_reader import read_csv_rows
from marketgame.ingestion.normalizers import (
    FieldParse,
    slugify,
    try_parse_currency,
    try_parse_date,
    try_parse_int,
    try_parse_number,
    try_parse_percent,
)
from marketgame.models.game import (
    Holding,
    HoldingType,
    LeaderboardEntry,
    PerformancePoint,
    Player,
    Transaction,
    TransactionType,
)

LEADERBOARD_COLUMNS = ("Place", "Name", "Net Worth", "Last", "Trades", "Total Returns")
PERFORMANCE_COLUMNS = ("Rank", "Date", "Cash", "Cash Interest", "Net Worth", "% Return")
HOLDINGS_COLUMNS = (
    "Symbol",
    "Shares",
    "% Holdings",
    "Type",
    "Price",
    "Price Change",
    "Price Change %",
    "Value",
    "Value Gain/Loss",
    "Value Gain/Loss %",
)
TRANSACTIONS_COLUMNS = (
    "Symbol",
    "Order Date",
    "Transaction Date",
    "Type",
    "Cancel Reason",
    "Amount",
    "Price",
)

_HOLDING_TYPES = {
    "BUY": HoldingType.BUY,
    "LONG": HoldingType.BUY,
    "SHORT": HoldingType.SHORT,
}
_TRANSACTION_TYPES = {t.value.lower(): t for t in TransactionType}
_MISSING_PRICE = {"", "N/A"}

T = TypeVar("T")


class _RowContext:
    """Reads fields of one CSV row, logging every defaulted value."""

    def __init__(self, parser: GameDataParser, path: Path, row_number: int, row: dict[str, str]):
        self.parser = parser
        self.path = path
        self.row_number = row_number
        self.row = row

    def text(self, column: str) -> str:
        return (self.row.get(column) or "").strip()

    def field(self, column: str, result: FieldParse[T]) -> T:
        if result.warning is not None:
            self.parser.logger.warning(
                "field_parse_fallback",
                file=self.path.name,
                row=self.row_number,
                column=column,
                raw=result.warning.raw,
                reason=result.warning.reason,
                fallback=result.value,
            )
        return result.value

    def currency(self, column: str) -> float:
        return self.field(column, try_parse_currency(self.text(column)))

    def percent(self, column: str) -> float:
        return self.field(column, try_parse_percent(self.text(column)))

    def integer(self, column: str) -> int:
        return self.field(column, try_parse_int(self.text(column)))

    def number(self, column: str) -> float:
        return self.field(column, try_parse_number(self.text(column)))

    def date_value(self, column: str) -> date | None:
        return self.field(column, try_parse_date(self.text(column)))


class GameDataParser(LoggerMixin):
    """Parse the CSV exports of one game into canonical records."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the parser.

        Args:
            settings: Settings naming the data directory and game id.
                Defaults to the process-wide settings.
        """
        self.settings = settings or get_settings()

    async def _read_player_file(
        self, path: Path, columns: Sequence[str], player_name: str
    ) -> list[dict[str, str]]:
        try:
            return await asyncio.to_thread(read_csv_rows, path, columns)
        except OSError as e:
            self.logger.error(
                "player_file_unavailable",
                player=player_name,
                path=str(path),
                error=str(e),
            )
            raise PlayerDataUnavailableError(
                f"Cannot read {path.name}",
                player_name=player_name,
                path=str(path),
            ) from e

    async def parse_leaderboard(self) -> list[LeaderboardEntry]:
        """Parse the rankings export.

        Returns:
            Leaderboard entries in file order.

        Raises:
            DataUnavailableError: If the rankings file is missing, unreadable
                or lacks the expected header.
        """
        path = self.settings.leaderboard_path
        try:
            rows = await asyncio.to_thread(read_csv_rows, path, LEADERBOARD_COLUMNS)
        except (OSError, InvalidDataFormatError) as e:
            self.logger.error("leaderboard_unavailable", path=str(path), error=str(e))
            raise DataUnavailableError(
                f"Cannot read leaderboard {path.name}",
                path=str(path),
            ) from e

        entries: list[LeaderboardEntry] = []
        for index, row in enumerate(rows, start=2):
            ctx = _RowContext(self, path, index, row)
            name = ctx.text("Name")
            if not name:
                self.logger.warning("leaderboard_row_without_name", row=index)
                continue
            entries.append(
                LeaderboardEntry(
                    place=ctx.integer("Place"),
                    name=name,
                    slug=slugify(name),
                    net_worth=ctx.currency("Net Worth"),
                    last_change=ctx.percent("Last"),
                    trades=ctx.integer("Trades"),
                    total_returns=ctx.currency("Total Returns"),
                )
            )

        self.logger.info("leaderboard_parsed", path=str(path), entries=len(entries))
        return entries

    async def parse_performance(self, player_name: str) -> list[PerformancePoint]:
        """Parse a player's daily performance export, sorted ascending by date.

        Rows whose date cannot be read are dropped since they cannot be ordered.
        """
        path = self.settings.performance_path(player_name)
        rows = await self._read_player_file(path, PERFORMANCE_COLUMNS, player_name)

        points: list[PerformancePoint] = []
        for index, row in enumerate(rows, start=2):
            ctx = _RowContext(self, path, index, row)
            point_date = ctx.date_value("Date")
            if point_date is None:
                self.logger.warning("performance_row_dropped", file=path.name, row=index)
                continue
            points.append(
                PerformancePoint(
                    date=point_date,
                    rank=ctx.integer("Rank"),
                    cash=ctx.currency("Cash"),
                    cash_interest=ctx.currency("Cash Interest"),
                    net_worth=ctx.currency("Net Worth"),
                    percent_return=ctx.percent("% Return"),
                )
            )

        points.sort(key=lambda p: p.date)
        if len({p.date for p in points}) != len(points):
            self.logger.warning("duplicate_performance_dates", player=player_name)

        self.logger.info("performance_parsed", player=player_name, points=len(points))
        return points

    async def parse_holdings(self, player_name: str) -> list[Holding]:
        """Parse a player's current holdings export. No ordering is applied."""
        path = self.settings.holdings_path(player_name)
        rows = await self._read_player_file(path, HOLDINGS_COLUMNS, player_name)

        holdings: list[Holding] = []
        for index, row in enumerate(rows, start=2):
            ctx = _RowContext(self, path, index, row)
            symbol = ctx.text("Symbol")
            if not symbol:
                continue
            raw_type = ctx.text("Type").upper()
            holding_type = _HOLDING_TYPES.get(raw_type)
            if holding_type is None:
                self.logger.warning(
                    "unknown_holding_type", file=path.name, row=index, raw=raw_type
                )
                holding_type = HoldingType.BUY
            holdings.append(
                Holding(
                    symbol=symbol,
                    shares=ctx.integer("Shares"),
                    percent_of_portfolio=ctx.integer("% Holdings"),
                    type=holding_type,
                    price=ctx.currency("Price"),
                    price_change=ctx.number("Price Change"),
                    price_change_percent=ctx.percent("Price Change %"),
                    value=ctx.currency("Value"),
                    gain_loss=ctx.currency("Value Gain/Loss"),
                    gain_loss_percent=ctx.percent("Value Gain/Loss %"),
                )
            )

        self.logger.info("holdings_parsed", player=player_name, holdings=len(holdings))
        return holdings

    async def parse_transactions(self, player_name: str) -> list[Transaction]:
        """Parse a player's order history, sorted descending by order date.

        Rows with an empty symbol are structural blanks and are skipped.
        """
        path = self.settings.transactions_path(player_name)
        rows = await self._read_player_file(path, TRANSACTIONS_COLUMNS, player_name)

        transactions: list[Transaction] = []
        for index, row in enumerate(rows, start=2):
            ctx = _RowContext(self, path, index, row)
            symbol = ctx.text("Symbol")
            if not symbol:
                continue

            raw_type = ctx.text("Type")
            transaction_type = _TRANSACTION_TYPES.get(raw_type.lower())
            order_date = ctx.date_value("Order Date")
            if transaction_type is None or order_date is None:
                self.logger.warning(
                    "transaction_row_dropped",
                    file=path.name,
                    row=index,
                    type=raw_type,
                )
                continue

            price_text = ctx.text("Price")
            transactions.append(
                Transaction(
                    symbol=symbol,
                    order_date=order_date,
                    transaction_date=(
                        ctx.date_value("Transaction Date") if ctx.text("Transaction Date") else None
                    ),
                    type=transaction_type,
                    cancel_reason=ctx.text("Cancel Reason") or None,
                    amount=ctx.integer("Amount"),
                    price=None if price_text in _MISSING_PRICE else ctx.currency("Price"),
                )
            )

        transactions.sort(key=lambda t: t.order_date, reverse=True)
        self.logger.info(
            "transactions_parsed", player=player_name, transactions=len(transactions)
        )
        return transactions

    async def get_players(self) -> list[Player]:
        """Derive the roster from the leaderboard.

        Raises:
            DataUnavailableError: If the leaderboard cannot be read.
            SlugCollisionError: If two names map to the same slug.
        """
        leaderboard = await self.parse_leaderboard()
        return build_roster(leaderboard)

    async def get_player_by_slug(self, slug: str) -> Player | None:
        """Find a roster player by slug. Returns None when absent."""
        return find_player_by_slug(await self.get_players(), slug)


def build_roster(leaderboard: Sequence[LeaderboardEntry]) -> list[Player]:
    """Build ``Player`` records from leaderboard entries, enforcing unique slugs."""
    seen: dict[str, str] = {}
    players: list[Player] = []
    for entry in leaderboard:
        if entry.slug in seen:
            raise SlugCollisionError(
                f"Players {seen[entry.slug]!r} and {entry.name!r} share slug {entry.slug!r}",
                slug=entry.slug,
                names=[seen[entry.slug], entry.name],
            )
        seen[entry.slug] = entry.name
        players.append(Player(name=entry.name, slug=entry.slug))
    return players


def find_player_by_slug(players: Sequence[Player], slug: str) -> Player | None:
    for player in players:
        if player.slug == slug:
            return player
    return None
