"""Tests for the player statistics engine."""

from __future__ import annotations

from datetime import date

import pytest

from marketgame.analytics.stats import (
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
from marketgame.models.game import (
    DailyReturn,
    PerformancePoint,
    StreakType,
    Transaction,
    TransactionType,
)
from tests.conftest import make_point


def _returns(*changes: float) -> list[DailyReturn]:
    return [
        DailyReturn(date=date(2025, 5, i + 2), change=c, change_percent=c)
        for i, c in enumerate(changes)
    ]


def _transaction(day: int, cancel_reason: str | None = None) -> Transaction:
    return Transaction(
        symbol="AAPL",
        order_date=date(2025, 5, day),
        transaction_date=None if cancel_reason else date(2025, 5, day),
        type=TransactionType.BUY,
        cancel_reason=cancel_reason,
        amount=10,
        price=None if cancel_reason else 200.0,
    )


class TestDailyReturns:
    """Tests for calculate_daily_returns."""

    def test_end_to_end_series(self, koby_performance: list[PerformancePoint]) -> None:
        """Test the 100k/110k/95k/105k example."""
        returns = calculate_daily_returns(koby_performance)

        assert [r.change for r in returns] == [10000.0, -15000.0, 10000.0]
        assert returns[0].change_percent == pytest.approx(10.0)
        assert returns[1].change_percent == pytest.approx(-13.636, abs=0.001)
        assert returns[2].change_percent == pytest.approx(10.526, abs=0.001)
        assert [r.date for r in returns] == [p.date for p in koby_performance[1:]]

    @pytest.mark.parametrize("n", [0, 1, 2, 5])
    def test_length_and_telescoping_sum(self, n: int) -> None:
        """Test that n points give n-1 returns summing to last minus first."""
        performance = [make_point(i + 1, 100000.0 + (i % 3) * 2500 - i * 700) for i in range(n)]

        returns = calculate_daily_returns(performance)

        assert len(returns) == max(n - 1, 0)
        if n:
            assert sum(r.change for r in returns) == pytest.approx(
                performance[-1].net_worth - performance[0].net_worth
            )

    def test_zero_previous_net_worth(self) -> None:
        """Test that a non-positive base gives a zero percent change."""
        returns = calculate_daily_returns([make_point(1, 0.0), make_point(2, 500.0)])

        assert returns[0].change == 500.0
        assert returns[0].change_percent == 0.0


class TestVolatility:
    """Tests for calculate_volatility."""

    def test_fewer_than_two_returns(self) -> None:
        """Test the undefined cases."""
        assert calculate_volatility([]) == 0.0
        assert calculate_volatility(_returns(3.0)) == 0.0

    def test_sample_standard_deviation(self) -> None:
        """Test the Bessel-corrected divisor."""
        # mean 2, squared deviations 1 + 1 = 2, divided by n - 1 = 1
        assert calculate_volatility(_returns(1.0, 3.0)) == pytest.approx(2**0.5)

    def test_end_to_end_series(self, koby_performance: list[PerformancePoint]) -> None:
        """Test volatility of the example series."""
        returns = calculate_daily_returns(koby_performance)
        assert calculate_volatility(returns) == pytest.approx(13.80, abs=0.01)

    def test_constant_returns(self) -> None:
        """Test that identical returns have zero volatility."""
        assert calculate_volatility(_returns(1.0, 1.0, 1.0)) == pytest.approx(0.0)


class TestMaxDrawdown:
    """Tests for calculate_max_drawdown."""

    def test_end_to_end_series(self, koby_performance: list[PerformancePoint]) -> None:
        """Test the drop from 110k to 95k."""
        drawdown = calculate_max_drawdown(koby_performance)

        assert drawdown.max_drawdown == 15000.0
        assert drawdown.max_drawdown_percent == pytest.approx(13.64, abs=0.01)

    def test_empty_series(self) -> None:
        """Test that no data means no drawdown."""
        drawdown = calculate_max_drawdown([])
        assert drawdown.max_drawdown == 0.0
        assert drawdown.max_drawdown_percent == 0.0

    def test_monotonic_series(self) -> None:
        """Test a series that only goes up."""
        performance = [make_point(i + 1, 100000.0 + i * 1000) for i in range(5)]
        assert calculate_max_drawdown(performance).max_drawdown == 0.0

    def test_appending_higher_points_never_increases_drawdown(
        self, koby_performance: list[PerformancePoint]
    ) -> None:
        """Test that new highs cannot deepen an existing drawdown."""
        before = calculate_max_drawdown(koby_performance)
        extended = koby_performance + [make_point(5, 120000.0), make_point(6, 130000.0)]

        after = calculate_max_drawdown(extended)

        assert after.max_drawdown <= before.max_drawdown
        assert after.max_drawdown_percent == pytest.approx(before.max_drawdown_percent)

    def test_percent_belongs_to_largest_dollar_drawdown(self) -> None:
        """Test that the percent is taken at the deepest dollar drop."""
        performance = [
            make_point(1, 1000.0),
            make_point(2, 500.0),  # 500 from 1000, 50%
            make_point(3, 100000.0),
            make_point(4, 90000.0),  # 10000 from 100000, 10%
        ]

        drawdown = calculate_max_drawdown(performance)

        assert drawdown.max_drawdown == 10000.0
        assert drawdown.max_drawdown_percent == pytest.approx(10.0)


class TestWinRate:
    """Tests for calculate_win_rate."""

    def test_end_to_end_series(self, koby_performance: list[PerformancePoint]) -> None:
        """Test two wins out of three days."""
        returns = calculate_daily_returns(koby_performance)
        assert calculate_win_rate(returns) == pytest.approx(66.67, abs=0.01)

    def test_flat_days_count_in_denominator(self) -> None:
        """Test that zero-change days are neither wins nor excluded."""
        assert calculate_win_rate(_returns(1.0, 0.0, -1.0, 0.0)) == pytest.approx(25.0)

    def test_empty(self) -> None:
        """Test the empty case."""
        assert calculate_win_rate([]) == 0.0


class TestBestWorstDays:
    """Tests for find_best_worst_days."""

    def test_first_encountered_wins_ties(self) -> None:
        """Test that equal changes resolve to the earlier day."""
        returns = _returns(5.0, -2.0, 5.0, -2.0)

        best, worst = find_best_worst_days(returns)

        assert best is returns[0]
        assert worst is returns[1]

    def test_empty(self) -> None:
        """Test that no returns gives no days."""
        assert find_best_worst_days([]) == (None, None)


class TestPeakAndTrough:
    """Tests for find_peak and find_trough."""

    def test_peak(self, koby_performance: list[PerformancePoint]) -> None:
        """Test the highest point and its date."""
        peak = find_peak(koby_performance)
        assert peak.net_worth == 110000.0
        assert peak.date == date(2025, 5, 2)

    def test_peak_tie_resolves_to_first(self) -> None:
        """Test that the earliest of equal peaks is reported."""
        peak = find_peak([make_point(1, 5.0), make_point(2, 7.0), make_point(3, 7.0)])
        assert peak.date == date(2025, 5, 2)

    def test_empty_series_peaks_at_starting_capital(self) -> None:
        """Test the empty defaults."""
        peak = find_peak([], initial_capital=50000.0)
        assert peak.net_worth == 50000.0
        assert peak.date is None
        assert find_trough([], initial_capital=50000.0) == 50000.0

    def test_trough(self, koby_performance: list[PerformancePoint]) -> None:
        """Test the lowest net worth."""
        assert find_trough(koby_performance) == 95000.0


class TestRankCounts:
    """Tests for days at first and last place."""

    def test_counts(self, koby_performance: list[PerformancePoint]) -> None:
        """Test counting by rank."""
        assert count_days_at_rank_one(koby_performance) == 3
        assert count_days_at_rank_last(koby_performance, total_players=2) == 1
        assert count_days_at_rank_last(koby_performance, total_players=7) == 0


class TestStreaks:
    """Tests for calculate_streaks."""

    def test_mixed_sequence(self) -> None:
        """Test +,+,-,-,-,+."""
        streaks = calculate_streaks(_returns(1, 1, -1, -1, -1, 1))

        assert streaks.longest_win_streak == 2
        assert streaks.longest_lose_streak == 3
        assert streaks.current_streak.type is StreakType.WIN
        assert streaks.current_streak.count == 1

    def test_flat_days_neither_extend_nor_break(self) -> None:
        """Test that a zero change keeps the running streak alive."""
        streaks = calculate_streaks(_returns(1, 0, 1, 0, 0, 1))

        assert streaks.longest_win_streak == 3
        assert streaks.current_streak.type is StreakType.WIN
        assert streaks.current_streak.count == 3

    def test_ending_on_losses(self) -> None:
        """Test a lose streak still active at the end."""
        streaks = calculate_streaks(_returns(2, -1, -3))

        assert streaks.current_streak.type is StreakType.LOSE
        assert streaks.current_streak.count == 2

    def test_no_movement(self) -> None:
        """Test that all-flat and empty series have no streak."""
        for returns in ([], _returns(0, 0)):
            streaks = calculate_streaks(returns)
            assert streaks.longest_win_streak == 0
            assert streaks.longest_lose_streak == 0
            assert streaks.current_streak.type is StreakType.NONE
            assert streaks.current_streak.count == 0


class TestTrades:
    """Tests for completed trade counting."""

    def test_cancelled_orders_are_excluded(self) -> None:
        """Test that a cancellation reason removes the order."""
        transactions = [_transaction(1), _transaction(1, "Insufficient funds"), _transaction(2)]
        assert count_completed_trades(transactions) == 2

    def test_trades_by_day(self) -> None:
        """Test grouping completed orders by order date."""
        transactions = [_transaction(3), _transaction(1), _transaction(3), _transaction(2, "x")]

        counts = count_trades_by_day(transactions)

        assert [(c.date, c.count) for c in counts] == [
            (date(2025, 5, 1), 1),
            (date(2025, 5, 3), 2),
        ]


class TestDerivedRatios:
    """Tests for capital use and the Sharpe-like ratio."""

    def test_sharpe_like(self) -> None:
        """Test return per unit of volatility."""
        assert calculate_sharpe_like(10.0, 4.0) == pytest.approx(2.5)
        assert calculate_sharpe_like(10.0, 0.0) is None

    def test_capital_use(self, koby_performance: list[PerformancePoint]) -> None:
        """Test invested share of starting capital."""
        usage = calculate_capital_use(koby_performance)

        assert [u.capital_use_percent for u in usage] == pytest.approx([0.0, 90.0, 65.0, 80.0])
        assert usage[0].date == koby_performance[0].date


class TestPlayerStats:
    """Tests for calculate_player_stats."""

    def test_end_to_end_series(self, koby_performance: list[PerformancePoint]) -> None:
        """Test every field for the example series."""
        transactions = [_transaction(1), _transaction(2, "Expired"), _transaction(3)]

        stats = calculate_player_stats(
            "Koby Pfonner",
            koby_performance,
            transactions,
            holdings_count=2,
            total_players=2,
        )

        assert stats.name == "Koby Pfonner"
        assert stats.slug == "koby-pfonner"
        assert stats.current_net_worth == 105000.0
        assert stats.total_return == 5000.0
        assert stats.total_return_percent == pytest.approx(5.0)
        assert stats.best_day is not None and stats.best_day.date == date(2025, 5, 2)
        assert stats.worst_day is not None and stats.worst_day.change == -15000.0
        assert stats.max_drawdown == 15000.0
        assert stats.max_drawdown_percent == pytest.approx(13.64, abs=0.01)
        assert stats.volatility == pytest.approx(13.80, abs=0.01)
        assert stats.win_rate == pytest.approx(66.7, abs=0.1)
        assert stats.days_at_rank_one == 3
        assert stats.days_at_rank_last == 1
        assert stats.total_trades == 2
        assert stats.current_rank == 1
        assert stats.peak_net_worth == 110000.0
        assert stats.peak_date == date(2025, 5, 2)
        assert stats.lowest_net_worth == 95000.0
        assert stats.holdings_count == 2

    def test_empty_performance(self) -> None:
        """Test that a player with no data still gets a displayable record."""
        stats = calculate_player_stats("Ana Lee", [], [])

        assert stats.current_net_worth == 100000.0
        assert stats.total_return == 0.0
        assert stats.total_return_percent == 0.0
        assert stats.best_day is None
        assert stats.worst_day is None
        assert stats.volatility == 0.0
        assert stats.win_rate == 0.0
        assert stats.current_rank == 0
        assert stats.peak_net_worth == 100000.0
        assert stats.peak_date is None

    def test_single_point(self) -> None:
        """Test the one-observation case."""
        stats = calculate_player_stats("Ana Lee", [make_point(1, 101000.0, rank=3)], [])

        assert stats.total_return == 1000.0
        assert stats.volatility == 0.0
        assert stats.max_drawdown == 0.0
        assert stats.current_rank == 3

    def test_custom_initial_capital(self, koby_performance: list[PerformancePoint]) -> None:
        """Test that returns are measured from the configured capital."""
        stats = calculate_player_stats(
            "Koby Pfonner", koby_performance, [], initial_capital=50000.0
        )

        assert stats.total_return == 55000.0
        assert stats.total_return_percent == pytest.approx(110.0)
