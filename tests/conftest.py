"""Test configuration and fixtures."""

from __future__ import annotations

import csv
from collections.abc import Sequence
from datetime import date
from pathlib import Path

import pytest

from marketgame.core.config import Settings
from marketgame.ingestion.parsers import (
    HOLDINGS_COLUMNS,
    LEADERBOARD_COLUMNS,
    PERFORMANCE_COLUMNS,
    TRANSACTIONS_COLUMNS,
)
from marketgame.models.game import PerformancePoint

KOBY = "Koby Pfonner"
ANA = "Ana Lee"
SAM = "Sam O'Neil"


def write_csv(path: Path, header: Sequence[str], rows: Sequence[Sequence[str]]) -> Path:
    """Write a CSV export the way the game spreadsheet does."""
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return path


def make_point(day: int, net_worth: float, rank: int = 1, cash: float = 0.0) -> PerformancePoint:
    """Build a performance point in May 2025."""
    return PerformancePoint(
        date=date(2025, 5, day),
        rank=rank,
        cash=cash,
        cash_interest=0.0,
        net_worth=net_worth,
        percent_return=(net_worth - 100000) / 1000,
    )


@pytest.fixture
def koby_performance() -> list[PerformancePoint]:
    """The 100k -> 110k -> 95k -> 105k series."""
    return [
        make_point(1, 100000.0, rank=1, cash=100000.0),
        make_point(2, 110000.0, rank=1, cash=20000.0),
        make_point(3, 95000.0, rank=2, cash=30000.0),
        make_point(4, 105000.0, rank=1, cash=25000.0),
    ]


@pytest.fixture
def game_dir(tmp_path: Path) -> Path:
    """A data directory with a complete three-player game export."""
    write_csv(
        tmp_path / "Rankings - MREtest.csv",
        LEADERBOARD_COLUMNS,
        [
            ["1", KOBY, "$105,000.00", "+1.50%", "4", "$5,000.00"],
            ["2", ANA, "$102,000.00", "-0.50%", "2", "$2,000.00"],
            ["3", SAM, "$97,500.00", "0.00%", "1", "($2,500.00)"],
        ],
    )

    # Performance rows are deliberately out of date order.
    write_csv(
        tmp_path / f"Portfolio Performance - {KOBY}.csv",
        PERFORMANCE_COLUMNS,
        [
            ["1", "5/4/25", "$25,000.00", "$1.20", "$105,000.00", "+5.00%"],
            ["1", "5/1/25", "$100,000.00", "$0.00", "$100,000.00", "0.00%"],
            ["2", "5/3/25", "$30,000.00", "$1.10", "$95,000.00", "-5.00%"],
            ["1", "5/2/25", "$20,000.00", "$1.00", "$110,000.00", "+10.00%"],
        ],
    )
    write_csv(
        tmp_path / f"Portfolio Performance - {ANA}.csv",
        PERFORMANCE_COLUMNS,
        [
            ["2", "5/1/25", "$100,000.00", "$0.00", "$100,000.00", "0.00%"],
            ["2", "5/2/25", "$50,000.00", "$0.50", "$101,000.00", "+1.00%"],
            ["1", "5/3/25", "$50,000.00", "$0.50", "$102,000.00", "+2.00%"],
            ["2", "5/4/25", "$50,000.00", "$0.50", "$102,000.00", "+2.00%"],
        ],
    )
    write_csv(
        tmp_path / f"Portfolio Performance - {SAM}.csv",
        PERFORMANCE_COLUMNS,
        [
            ["3", "5/1/25", "$100,000.00", "$0.00", "$100,000.00", "0.00%"],
            ["3", "5/2/25", "$90,000.00", "$0.90", "$99,000.00", "-1.00%"],
            ["3", "5/3/25", "$90,000.00", "$0.90", "$99,500.00", "-0.50%"],
            ["3", "5/4/25", "$90,000.00", "$0.90", "$98,000.00", "-2.00%"],
        ],
    )

    write_csv(
        tmp_path / f"Holdings - {KOBY}.csv",
        HOLDINGS_COLUMNS,
        [
            ["AAPL", "200", "40%", "BUY", "$210.00", "1.25", "+0.60%", "$42,000.00",
             "$2,000.00", "+5.00%"],
            ["MSFT", "75", "30%", "BUY", "$420.00", "-2.10", "-0.50%", "$31,500.00",
             "($500.00)", "-1.56%"],
        ],
    )
    write_csv(
        tmp_path / f"Holdings - {ANA}.csv",
        HOLDINGS_COLUMNS,
        [
            ["TSLA", "-300", "55%", "SHORT", "$180.00", "-3.00", "-1.64%", "$54,000.00",
             "$900.00", "+1.67%"],
        ],
    )
    write_csv(tmp_path / f"Holdings - {SAM}.csv", HOLDINGS_COLUMNS, [])

    write_csv(
        tmp_path / f"Portfolio Transactions - {KOBY}.csv",
        TRANSACTIONS_COLUMNS,
        [
            ["AAPL", "5/1/25 9:31a ET", "5/1/25 9:31a ET", "Buy", "", "200", "$200.00"],
            ["MSFT", "5/2/25 10:02a ET", "5/2/25 10:02a ET", "Buy", "", "75", "$425.00"],
            ["TSLA", "5/3/25 11:54p ET", "", "Short", "Insufficient funds", "100", "N/A"],
            ["AAPL", "5/3/25 1:15p ET", "5/3/25 1:15p ET", "Sell", "", "50", "$205.00"],
        ],
    )
    write_csv(
        tmp_path / f"Portfolio Transactions - {ANA}.csv",
        TRANSACTIONS_COLUMNS,
        [
            ["TSLA", "5/1/25 9:45a ET", "5/1/25 9:45a ET", "Short", "", "300", "$183.00"],
            ["TSLA", "5/2/25 9:45a ET", "5/2/25 9:45a ET", "cover", "", "0", "$181.00"],
        ],
    )
    write_csv(
        tmp_path / f"Portfolio Transactions - {SAM}.csv",
        TRANSACTIONS_COLUMNS,
        [
            ["SPY", "5/1/25 9:30a ET", "5/1/25 9:30a ET", "Buy", "", "10", "$560.00"],
        ],
    )
    return tmp_path


@pytest.fixture
def settings(game_dir: Path) -> Settings:
    """Settings pointed at the sample game export."""
    return Settings(data_dir=game_dir)
