"""
Trade Ledger.

Monthly capital ledger and annualized-return (XIRR) engine for a personal trade journal.
"""

__version__ = "0.1.0"

from trade_ledger.cashflows import CashFlowEvent, CashFlowSeries
from trade_ledger.ledger import (
    CapitalChange,
    CapitalChangeStore,
    MonthlyCapitalLedger,
    MonthlyCapitalRecord,
    ReturnAggregator,
    Trade,
)

# Configure structlog once at import time (quiet by default).
from trade_ledger.logging import configure_structlog
from trade_ledger.xirr import XIRRSolver

configure_structlog()

__all__ = [
    "CapitalChange",
    "CapitalChangeStore",
    "CashFlowEvent",
    "CashFlowSeries",
    "MonthlyCapitalLedger",
    "MonthlyCapitalRecord",
    "ReturnAggregator",
    "Trade",
    "XIRRSolver",
    "__version__",
]
