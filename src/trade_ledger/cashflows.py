"""Dated cash-flow series used by a single XIRR evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from trade_ledger.constants import DAYS_PER_YEAR
from trade_ledger.exceptions import CashFlowRangeError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date


@dataclass(frozen=True)
class CashFlowEvent:
    """A dated, signed amount.

    Positive amounts are inflows to the portfolio (deposits, terminal valuation);
    negative amounts are outflows (withdrawals, initial valuation).
    """

    date: date
    amount: float


@dataclass(frozen=True)
class CashFlowSeries:
    """
    Boundary valuations plus interim cash movements for one XIRR evaluation.

    The start boundary enters the series as an outflow of `-start_value` and the end
    boundary as an inflow of `end_value`. Interim events keep their insertion order and
    must fall inside `[start_date, end_date]`; anything outside is rejected rather than
    clipped.
    """

    start_date: date
    start_value: float
    end_date: date
    end_value: float
    events: tuple[CashFlowEvent, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise CashFlowRangeError(
                f"Series end date {self.end_date} is before its start date {self.start_date}"
            )
        for event in self.events:
            if not self.start_date <= event.date <= self.end_date:
                raise CashFlowRangeError(
                    f"Cash flow dated {event.date} is outside the series range "
                    f"[{self.start_date}, {self.end_date}]"
                )

    @classmethod
    def build(
        cls,
        start_date: date,
        start_value: float,
        end_date: date,
        end_value: float,
        events: Iterable[CashFlowEvent] = (),
    ) -> CashFlowSeries:
        """Create a series from any iterable of interim events."""
        return cls(
            start_date=start_date,
            start_value=start_value,
            end_date=end_date,
            end_value=end_value,
            events=tuple(events),
        )

    def flows(self) -> list[CashFlowEvent]:
        """Every flow in evaluation order: initial valuation, interim events, final valuation."""
        return [
            CashFlowEvent(self.start_date, -self.start_value),
            *self.events,
            CashFlowEvent(self.end_date, self.end_value),
        ]

    def amounts(self) -> list[float]:
        return [flow.amount for flow in self.flows()]

    def year_fractions(self) -> list[float]:
        """Elapsed years from the start date for each flow (start date = 0)."""
        return [(flow.date - self.start_date).days / DAYS_PER_YEAR for flow in self.flows()]
