"""Year report pairing ledger records with their return figures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from trade_ledger.ledger.models import MonthlyCapitalRecord
    from trade_ledger.ledger.monthly import MonthlyCapitalLedger
    from trade_ledger.ledger.returns import MonthlyReturns, ReturnAggregator


@dataclass(frozen=True)
class YearReport:
    """Twelve ledger records and the matching return figures for one year."""

    year: int
    opening_capital: float
    records: list[MonthlyCapitalRecord]
    returns: list[MonthlyReturns]

    @property
    def rows(self) -> list[tuple[MonthlyCapitalRecord, MonthlyReturns]]:
        return list(zip(self.records, self.returns, strict=True))

    @property
    def total_realized_pl(self) -> float:
        return sum((record.realized_pl for record in self.records), 0.0)

    @property
    def total_net_change(self) -> float:
        return sum((record.net_change for record in self.records), 0.0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "year": self.year,
            "opening_capital": self.opening_capital,
            "total_realized_pl": self.total_realized_pl,
            "total_net_change": self.total_net_change,
            "months": [
                {**record.to_dict(), "returns": returns.to_dict()}
                for record, returns in self.rows
            ],
        }


def build_year_report(
    ledger: MonthlyCapitalLedger,
    aggregator: ReturnAggregator,
    year: int,
    *,
    opening_capital: float | None = None,
) -> YearReport:
    """Compute the ledger once and derive every return window from the same records."""
    records = ledger.records_for_year(year)
    if opening_capital is None:
        opening_capital = aggregator.opening_capital(year)
    returns = aggregator.returns_for_records(records, opening_capital=opening_capital)
    return YearReport(
        year=year,
        opening_capital=opening_capital,
        records=records,
        returns=returns,
    )
