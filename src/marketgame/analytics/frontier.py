"""Efficient frontier approximation over a risk/return scatter.

Each player is a point with volatility as risk (x) and total return
percent as reward (y). The frontier is the upper envelope of the scatter,
built with a monotone stack over points sorted by risk.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from marketgame.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RiskReturnPoint:
    """One player on the risk/return scatter."""

    name: str
    volatility: float
    total_return_percent: float

    @property
    def efficiency(self) -> float | None:
        """Return per unit of volatility, undefined for zero volatility."""
        if self.volatility == 0:
            return None
        return self.total_return_percent / self.volatility


@dataclass(frozen=True)
class FrontierResult:
    """Frontier points in ascending risk order plus the most efficient one."""

    frontier: list[RiskReturnPoint]
    most_efficient: RiskReturnPoint | None


def _slope(a: RiskReturnPoint, b: RiskReturnPoint) -> float:
    dx = b.volatility - a.volatility
    dy = b.total_return_percent - a.total_return_percent
    if dx == 0:
        if dy == 0:
            return 0.0
        return math.inf if dy > 0 else -math.inf
    return dy / dx


def build_efficient_frontier(points: Sequence[RiskReturnPoint]) -> list[RiskReturnPoint]:
    """Build the upper risk/return envelope.

    Points are visited in ascending volatility. Before a point is
    considered, the stack tail is popped while the slope into the tail is
    not steeper than the slope from the tail to the new point. The point
    is then kept only if its return exceeds the current tail's return.

    Args:
        points: Scatter points in any order.

    Returns:
        Frontier points in ascending volatility order.
    """
    ordered = sorted(points, key=lambda p: p.volatility)
    frontier: list[RiskReturnPoint] = []

    for point in ordered:
        while len(frontier) >= 2:
            last = frontier[-1]
            second_last = frontier[-2]
            if _slope(second_last, last) <= _slope(last, point):
                frontier.pop()
            else:
                break

        if not frontier or point.total_return_percent > frontier[-1].total_return_percent:
            frontier.append(point)

    return frontier


def find_most_efficient(frontier: Sequence[RiskReturnPoint]) -> RiskReturnPoint | None:
    """Pick the frontier point with the highest return-to-volatility ratio.

    Zero-volatility points have no ratio and are excluded. Ties resolve to
    the lower-risk point.
    """
    best: RiskReturnPoint | None = None
    best_ratio = -math.inf
    for point in frontier:
        ratio = point.efficiency
        if ratio is None:
            continue
        if ratio > best_ratio:
            best, best_ratio = point, ratio
    return best


def analyze_frontier(points: Sequence[RiskReturnPoint]) -> FrontierResult:
    """Build the frontier and select its most efficient point."""
    frontier = build_efficient_frontier(points)
    most_efficient = find_most_efficient(frontier)
    logger.debug(
        "efficient_frontier_built",
        points=len(points),
        frontier_points=len(frontier),
        most_efficient=most_efficient.name if most_efficient else None,
    )
    return FrontierResult(frontier=frontier, most_efficient=most_efficient)
