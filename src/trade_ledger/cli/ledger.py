"""Monthly ledger commands: view the year and edit capital flows."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Annotated

import typer
from rich.table import Table

from trade_ledger.cli._formatting import (
    format_currency,
    format_optional,
    format_return,
    format_signed_currency,
)
from trade_ledger.cli._options import (
    DataDirOption,
    JsonOption,
    YearOption,
    parse_month,
    resolve_year,
)
from trade_ledger.cli.utils import console, open_session
from trade_ledger.exceptions import LedgerValidationError
from trade_ledger.ledger import ReturnWindow, build_year_report

if TYPE_CHECKING:
    from trade_ledger.ledger import YearReport


def _capital_table(report: YearReport) -> Table:
    table = Table(title=f"Capital {report.year}")
    table.add_column("Month", style="cyan")
    table.add_column("Starting", justify="right")
    table.add_column("Net Change", justify="right")
    table.add_column("Realized P/L", justify="right")
    table.add_column("P/L %", justify="right")
    table.add_column("Final", justify="right")

    for record in report.records:
        starting = format_currency(record.starting_capital)
        if record.starting_capital_overridden:
            starting = f"{starting}*"
        table.add_row(
            record.month.short_name,
            starting,
            format_signed_currency(record.net_change),
            format_signed_currency(record.realized_pl),
            format_optional(record.pl_percentage, "{:.2f}%"),
            format_currency(record.final_capital),
        )
    return table


def _trades_table(report: YearReport) -> Table:
    table = Table(title=f"Trades {report.year}")
    table.add_column("Month", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Win %", justify="right")
    table.add_column("Avg Gain", justify="right")
    table.add_column("Avg Loss", justify="right")
    table.add_column("Avg R:R", justify="right")
    table.add_column("Avg Days", justify="right")

    for record in report.records:
        table.add_row(
            record.month.short_name,
            format_optional(record.trades, "{:d}"),
            format_optional(record.win_percentage, "{:.1f}%"),
            format_optional(record.avg_gain, "{:.2f}%"),
            format_optional(record.avg_loss, "{:.2f}%"),
            format_optional(record.avg_reward_risk),
            format_optional(record.avg_holding_days, "{:.1f}"),
        )
    return table


def _returns_table(report: YearReport) -> Table:
    table = Table(title=f"Annualized Returns {report.year}")
    table.add_column("Month", style="cyan")
    for window in ReturnWindow:
        table.add_column(window.value.upper(), justify="right")

    for record, returns in report.rows:
        table.add_row(
            record.month.short_name,
            *(format_return(returns.get(window)) for window in ReturnWindow),
        )
    return table


def ledger_monthly(
    year: YearOption = None,
    output_json: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """Show the month-by-month capital ledger and annualized returns for a year."""
    session = open_session(data_dir)
    report = build_year_report(session.ledger, session.aggregator, resolve_year(year))

    if output_json:
        typer.echo(json.dumps(report.to_dict(), indent=2, default=str))
        return

    console.print(_capital_table(report))
    console.print(_trades_table(report))
    console.print(_returns_table(report))
    console.print(
        f"Opening capital: {format_currency(report.opening_capital)}  "
        f"Realized P/L: {format_signed_currency(report.total_realized_pl)}  "
        f"Net change: {format_signed_currency(report.total_net_change)}"
    )
    if any(record.starting_capital_overridden for record in report.records):
        console.print("[dim]* starting capital set explicitly[/dim]")


def ledger_set_net_change(
    month: Annotated[str, typer.Argument(help="Month (1-12 or a name such as 'mar').")],
    amount: Annotated[
        float,
        typer.Argument(
            help="Net deposit (positive) or withdrawal (negative). 0 removes the month's entry."
        ),
    ],
    year: YearOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Set a month's net deposit or withdrawal."""
    session = open_session(data_dir)
    parsed_month = parse_month(month)
    resolved_year = resolve_year(year)

    try:
        change = session.ledger.set_net_change(parsed_month, resolved_year, amount)
    except LedgerValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    label = f"{parsed_month.short_name} {resolved_year}"
    if change is None:
        console.print(f"[green]✓[/green] No net change recorded for {label}")
    else:
        amount_text = format_signed_currency(change.signed_amount)
        console.print(f"[green]✓[/green] Net change for {label}: {amount_text}")
    record = session.ledger.record_for(parsed_month, resolved_year)
    console.print(f"Final capital: {format_currency(record.final_capital)}")


def ledger_set_starting_capital(
    month: Annotated[str, typer.Argument(help="Month (1-12 or a name such as 'mar').")],
    amount: Annotated[
        float,
        typer.Argument(help="Starting capital for the month. 0 clears the explicit value."),
    ],
    year: YearOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Set or clear a month's explicit starting capital."""
    session = open_session(data_dir)
    parsed_month = parse_month(month)
    resolved_year = resolve_year(year)

    try:
        session.ledger.set_starting_capital(parsed_month, resolved_year, amount)
    except LedgerValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    label = f"{parsed_month.short_name} {resolved_year}"
    record = session.ledger.record_for(parsed_month, resolved_year)
    if amount == 0:
        console.print(f"[green]✓[/green] Starting capital override cleared for {label}")
    else:
        console.print(f"[green]✓[/green] Starting capital for {label} set")
    console.print(f"Starting capital: {format_currency(record.starting_capital)}")
