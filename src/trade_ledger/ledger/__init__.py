"""Monthly capital ledger, capital changes and return aggregation."""

from trade_ledger.ledger.capital_changes import CapitalChangeStore, InMemoryCapitalChangeRepository
from trade_ledger.ledger.models import (
    CapitalChange,
    CapitalChangeType,
    Month,
    MonthlyCapitalRecord,
    PositionStatus,
    Trade,
)
from trade_ledger.ledger.monthly import MonthlyCapitalLedger
from trade_ledger.ledger.portfolio_sizes import PortfolioSizeBook
from trade_ledger.ledger.report import YearReport, build_year_report
from trade_ledger.ledger.returns import (
    MonthlyReturns,
    ReturnAggregator,
    ReturnStatus,
    ReturnWindow,
    RollingReturnResult,
)
from trade_ledger.ledger.statistics import (
    TradeStatistics,
    compute_trade_statistics,
    pnl_by_symbol,
    pnl_by_weekday,
    setup_frequency,
    top_allocations,
)

__all__ = [
    "CapitalChange",
    "CapitalChangeStore",
    "CapitalChangeType",
    "InMemoryCapitalChangeRepository",
    "Month",
    "MonthlyCapitalLedger",
    "MonthlyCapitalRecord",
    "MonthlyReturns",
    "PortfolioSizeBook",
    "PositionStatus",
    "ReturnAggregator",
    "ReturnStatus",
    "ReturnWindow",
    "RollingReturnResult",
    "Trade",
    "TradeStatistics",
    "YearReport",
    "build_year_report",
    "compute_trade_statistics",
    "pnl_by_symbol",
    "pnl_by_weekday",
    "setup_frequency",
    "top_allocations",
]
