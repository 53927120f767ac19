"""
Centralized path defaults for Trade Ledger.

All paths are expressed relative to the current working directory. Every default can be
overridden via `TRADE_LEDGER_DATA_DIR` or the CLI `--data-dir` option.
"""

from pathlib import Path

DEFAULT_DATA_DIR = Path("data")
TRADES_FILENAME = "trades.json"
CAPITAL_CHANGES_FILENAME = "capital_changes.json"
PORTFOLIO_SIZES_FILENAME = "portfolio_sizes.json"

__all__ = [
    "CAPITAL_CHANGES_FILENAME",
    "DEFAULT_DATA_DIR",
    "PORTFOLIO_SIZES_FILENAME",
    "TRADES_FILENAME",
]
