"""Trade statistics command."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import TYPE_CHECKING, Annotated, Any

import typer
from rich.table import Table

from trade_ledger.cli._formatting import format_currency, format_signed_currency
from trade_ledger.cli._options import DataDirOption, JsonOption
from trade_ledger.cli.utils import console, open_session
from trade_ledger.constants import DEFAULT_TOP_SYMBOLS_LIMIT
from trade_ledger.ledger import (
    compute_trade_statistics,
    pnl_by_symbol,
    pnl_by_weekday,
    setup_frequency,
    top_allocations,
)

if TYPE_CHECKING:
    from trade_ledger.ledger.statistics import (
        Allocation,
        SetupCount,
        SymbolPnL,
        TradeStatistics,
        WeekdayPnL,
    )


def _summary_table(summary: TradeStatistics) -> Table:
    table = Table(title="Trade Statistics", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Trades:", str(summary.total_trades))
    table.add_row("Win Rate:", f"{summary.win_rate:.1f}%")
    table.add_row("Avg Gain:", f"{summary.avg_gain:.2f}%")
    table.add_row("Avg Loss:", f"{summary.avg_loss:.2f}%")
    table.add_row("Avg Position Size:", f"{summary.avg_position_size:.2f}%")
    table.add_row("Avg Holding Days:", f"{summary.avg_holding_days:.1f}")
    table.add_row("Avg R:R:", f"{summary.avg_reward_risk:.2f}")
    return table


def _symbols_table(symbols: list[SymbolPnL]) -> Table:
    table = Table(title="P/L by Symbol")
    table.add_column("Symbol", style="cyan")
    table.add_column("P/L", justify="right")
    for row in symbols:
        table.add_row(row.symbol, format_signed_currency(row.pnl))
    return table


def _weekdays_table(weekdays: list[WeekdayPnL]) -> Table:
    table = Table(title="P/L by Weekday")
    table.add_column("Day", style="cyan")
    table.add_column("P/L", justify="right")
    for row in weekdays:
        table.add_row(row.day, format_signed_currency(row.pnl))
    return table


def _setups_table(setups: list[SetupCount]) -> Table:
    table = Table(title="Setups")
    table.add_column("Setup", style="cyan")
    table.add_column("Trades", justify="right")
    for row in setups:
        table.add_row(row.setup, str(row.count))
    return table


def _allocations_table(allocations: list[Allocation]) -> Table:
    table = Table(title="Open Allocations")
    table.add_column("Symbol", style="cyan")
    table.add_column("Status")
    table.add_column("Position Size", justify="right")
    table.add_column("% of Portfolio", justify="right")
    for row in allocations:
        table.add_row(
            row.name,
            row.position_status.value,
            format_currency(row.position_size),
            f"{row.allocation_pct:.2f}%",
        )
    return table


def trade_stats(
    output_json: JsonOption = False,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", min=1, help="Number of symbols to show."),
    ] = DEFAULT_TOP_SYMBOLS_LIMIT,
    data_dir: DataDirOption = None,
) -> None:
    """Show journal-wide trade statistics and P/L breakdowns."""
    session = open_session(data_dir)
    trades = session.trades

    summary = compute_trade_statistics(trades)
    symbols = pnl_by_symbol(trades, limit=limit)
    weekdays = pnl_by_weekday(trades)
    setups = setup_frequency(trades)
    allocations = top_allocations(trades, session.portfolio.get_latest_portfolio_size())

    if output_json:
        payload: dict[str, Any] = {
            "summary": asdict(summary),
            "pnl_by_symbol": [asdict(row) for row in symbols],
            "pnl_by_weekday": [asdict(row) for row in weekdays],
            "setups": [asdict(row) for row in setups],
            "allocations": [
                {**asdict(row), "position_status": row.position_status.value}
                for row in allocations
            ],
        }
        typer.echo(json.dumps(payload, indent=2, default=str))
        return

    if not trades:
        console.print("[yellow]No trades found.[/yellow]")
        return

    console.print(_summary_table(summary))
    if symbols:
        console.print(_symbols_table(symbols))
    console.print(_weekdays_table(weekdays))
    if setups:
        console.print(_setups_table(setups))
    if allocations:
        console.print(_allocations_table(allocations))
