"""Shared utilities for CLI commands (console output, config and ledger loading)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import typer
from rich.console import Console

from trade_ledger.config import LedgerConfig
from trade_ledger.exceptions import StorageError
from trade_ledger.ledger import CapitalChangeStore, MonthlyCapitalLedger, ReturnAggregator
from trade_ledger.paths import (
    CAPITAL_CHANGES_FILENAME,
    PORTFOLIO_SIZES_FILENAME,
    TRADES_FILENAME,
)
from trade_ledger.storage import JsonCapitalChangeRepository, JsonPortfolioSizeBook, load_trades
from trade_ledger.xirr import XIRRSolver

if TYPE_CHECKING:
    from pathlib import Path

    from trade_ledger.ledger import Trade

console = Console()


@dataclass
class LedgerSession:
    """Everything a command needs, wired to the JSON files in one data directory."""

    config: LedgerConfig
    data_dir: Path
    trades: list[Trade]
    portfolio: JsonPortfolioSizeBook
    ledger: MonthlyCapitalLedger
    aggregator: ReturnAggregator


def load_config() -> LedgerConfig:
    """Read LedgerConfig from the environment, exiting cleanly on malformed values."""
    try:
        return LedgerConfig.from_env()
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None


def open_session(data_dir: Path | None) -> LedgerSession:
    """Load trades, capital changes and portfolio sizes from `data_dir`.

    Raises:
        typer.Exit: If the configuration or any data file is invalid.
    """
    config = load_config()
    resolved_dir = data_dir if data_dir is not None else config.data_dir

    try:
        trades = load_trades(resolved_dir / TRADES_FILENAME)
        repository = JsonCapitalChangeRepository(resolved_dir / CAPITAL_CHANGES_FILENAME)
        store = CapitalChangeStore(repository)
        portfolio = JsonPortfolioSizeBook(
            resolved_dir / PORTFOLIO_SIZES_FILENAME,
            default_size=config.default_portfolio_size,
        )
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print("[dim]This command will not modify it.[/dim]")
        raise typer.Exit(1) from None

    ledger = MonthlyCapitalLedger(
        trades,
        store,
        portfolio,
        overrides=portfolio,
        legacy_flows=portfolio.legacy_flows,
        chain_from_previous_month=config.chain_from_previous_month,
    )
    return LedgerSession(
        config=config,
        data_dir=resolved_dir,
        trades=trades,
        portfolio=portfolio,
        ledger=ledger,
        aggregator=ReturnAggregator(ledger, XIRRSolver.from_config(config)),
    )
