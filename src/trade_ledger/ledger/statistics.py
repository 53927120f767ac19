"""Trade statistics and P/L distributions over a list of journal trades."""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from trade_ledger.constants import DEFAULT_TOP_SYMBOLS_LIMIT
from trade_ledger.ledger.models import PositionStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from trade_ledger.ledger.models import Trade

# Sunday first, matching the journal's weekday charts.
WEEKDAYS: tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


@dataclass(frozen=True)
class TradeStatistics:
    """Aggregate statistics for a set of trades."""

    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float  # Percentage (0-100)
    avg_gain: float  # Mean stock move of winners
    avg_loss: float  # Mean stock move of losers
    avg_position_size: float  # Mean allocation (% of portfolio)
    avg_holding_days: float
    avg_reward_risk: float


@dataclass(frozen=True)
class SymbolPnL:
    symbol: str
    pnl: float


@dataclass(frozen=True)
class WeekdayPnL:
    day: str
    pnl: float


@dataclass(frozen=True)
class SetupCount:
    setup: str
    count: int


@dataclass(frozen=True)
class Allocation:
    """Open exposure of a single trade relative to the portfolio."""

    trade_id: str
    name: str
    position_status: PositionStatus
    position_size: float
    allocation_pct: float


def _mean(values: Sequence[float]) -> float:
    return float(np.mean(values)) if values else 0.0


def compute_trade_statistics(trades: Sequence[Trade]) -> TradeStatistics:
    """
    Compute win rate and averages over every trade given.

    A trade wins when `pl_rs > 0` and loses when `pl_rs < 0`; break-even trades count
    toward the total only. All averages are 0.0 for an empty list.
    """
    winners = [t for t in trades if t.pl_rs > 0]
    losers = [t for t in trades if t.pl_rs < 0]
    total = len(trades)

    return TradeStatistics(
        total_trades=total,
        winning_trades=len(winners),
        losing_trades=len(losers),
        win_rate=len(winners) / total * 100 if total else 0.0,
        avg_gain=_mean([t.stock_move for t in winners]),
        avg_loss=_mean([t.stock_move for t in losers]),
        avg_position_size=_mean([t.allocation for t in trades]),
        avg_holding_days=_mean([t.holding_days for t in trades]),
        avg_reward_risk=_mean([t.reward_risk for t in trades]),
    )


def pnl_by_symbol(
    trades: Sequence[Trade], limit: int = DEFAULT_TOP_SYMBOLS_LIMIT
) -> list[SymbolPnL]:
    """Realized P/L per symbol, best first, truncated to `limit` symbols."""
    totals: dict[str, float] = defaultdict(float)
    for trade in trades:
        if trade.position_status.is_realized:
            totals[trade.name] += trade.pl_rs

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [SymbolPnL(symbol=symbol, pnl=pnl) for symbol, pnl in ranked[:limit]]


def pnl_by_weekday(trades: Sequence[Trade]) -> list[WeekdayPnL]:
    """Realized P/L per weekday (Sunday first); days without trades report 0."""
    totals: dict[str, float] = dict.fromkeys(WEEKDAYS, 0.0)
    for trade in trades:
        if trade.position_status.is_realized:
            # date.weekday() is Monday=0; shift so Sunday lands on index 0.
            day = WEEKDAYS[(trade.date.weekday() + 1) % 7]
            totals[day] += trade.pl_rs
    return [WeekdayPnL(day=day, pnl=totals[day]) for day in WEEKDAYS]


def setup_frequency(trades: Sequence[Trade]) -> list[SetupCount]:
    """Number of trades per setup tag, most frequent first."""
    counts = Counter(t.setup for t in trades if t.setup)
    return [SetupCount(setup=setup, count=count) for setup, count in counts.most_common()]


def top_allocations(trades: Sequence[Trade], portfolio_size: float) -> list[Allocation]:
    """Open and partial positions sized against the portfolio, largest first."""
    if portfolio_size <= 0:
        return []

    allocations = [
        Allocation(
            trade_id=t.id,
            name=t.name,
            position_status=t.position_status,
            position_size=t.position_size,
            allocation_pct=t.position_size / portfolio_size * 100 if t.position_size else 0.0,
        )
        for t in trades
        if t.position_status in {PositionStatus.OPEN, PositionStatus.PARTIAL}
    ]
    return sorted(allocations, key=lambda a: a.allocation_pct, reverse=True)
