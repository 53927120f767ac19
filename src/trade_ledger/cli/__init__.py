"""
CLI application for Trade Ledger.

Provides commands to view the monthly capital ledger, edit capital flows, and
summarize journal trades.
"""

from __future__ import annotations

import typer
from dotenv import find_dotenv, load_dotenv

from trade_ledger.cli.ledger import (
    ledger_monthly,
    ledger_set_net_change,
    ledger_set_starting_capital,
)
from trade_ledger.cli.stats import trade_stats
from trade_ledger.cli.utils import console

app = typer.Typer(
    name="trade-ledger",
    help="Trade Ledger CLI - Monthly capital ledger and annualized returns.",
    add_completion=False,
)

# Negative amounts ("-5000") must reach the AMOUNT argument instead of the option parser.
_AMOUNT_CONTEXT = {"ignore_unknown_options": True}

app.command("monthly")(ledger_monthly)
app.command("set-net-change", context_settings=_AMOUNT_CONTEXT)(ledger_set_net_change)
app.command("set-starting-capital", context_settings=_AMOUNT_CONTEXT)(
    ledger_set_starting_capital
)
app.command("stats")(trade_stats)


@app.callback()
def main() -> None:
    """Trade Ledger CLI."""
    load_dotenv(find_dotenv(usecwd=True))


@app.command()
def version() -> None:
    """Show version information."""
    from trade_ledger import __version__

    console.print(f"trade-ledger v{__version__}")


__all__ = ["app"]
