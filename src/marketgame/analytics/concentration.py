"""Position concentration ranking across players.

A player's concentration is the portfolio share of their largest current
holding. Players without holdings have a concentration of ``0``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from marketgame.models.game import Holding


@dataclass(frozen=True)
class ConcentrationEntry:
    """One player's largest position.

    Attributes:
        rank: 1-based position, most concentrated first.
        name: Player name.
        max_position_percent: Largest ``percent_of_portfolio`` among holdings.
        symbol: Symbol of that holding, None without holdings.
    """

    rank: int
    name: str
    max_position_percent: float
    symbol: str | None


def largest_position(holdings: Sequence[Holding]) -> Holding | None:
    """Holding with the largest portfolio share, first encountered on ties."""
    largest: Holding | None = None
    for holding in holdings:
        if largest is None or holding.percent_of_portfolio > largest.percent_of_portfolio:
            largest = holding
    return largest


def rank_concentration(holdings_by_player: Mapping[str, Sequence[Holding]]) -> list[ConcentrationEntry]:
    """Rank players by their largest position, descending.

    Players with equal concentration keep their input order.

    Args:
        holdings_by_player: Current holdings keyed by player name.

    Returns:
        One entry per player.
    """
    measured: list[tuple[str, float, str | None]] = []
    for name, holdings in holdings_by_player.items():
        top = largest_position(holdings)
        if top is None:
            measured.append((name, 0.0, None))
        else:
            measured.append((name, float(top.percent_of_portfolio), top.symbol))

    measured.sort(key=lambda item: item[1], reverse=True)
    return [
        ConcentrationEntry(rank=index, name=name, max_position_percent=pct, symbol=symbol)
        for index, (name, pct, symbol) in enumerate(measured, start=1)
    ]
