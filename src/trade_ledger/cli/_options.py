"""Option and argument types shared by ledger commands."""

from __future__ import annotations

from datetime import date
from pathlib import Path  # noqa: TC003 - Required at runtime for Typer introspection
from typing import Annotated

import typer

from trade_ledger.cli.utils import console
from trade_ledger.ledger import Month

DataDirOption = Annotated[
    Path | None,
    typer.Option(
        "--data-dir",
        "-d",
        help="Directory holding the ledger JSON files. Defaults to TRADE_LEDGER_DATA_DIR or data/.",
        show_default=False,
    ),
]

YearOption = Annotated[
    int | None,
    typer.Option(
        "--year",
        "-y",
        help="Calendar year. Defaults to the current year.",
        show_default=False,
    ),
]

JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]


def resolve_year(year: int | None) -> int:
    return year if year is not None else date.today().year


def parse_month(value: str) -> Month:
    """Parse a CLI month argument, exiting cleanly when it is not a month."""
    try:
        return Month.parse(value)
    except ValueError:
        console.print(
            f"[red]Error:[/red] Invalid month '{value}'. Expected 1-12 or a month name."
        )
        raise typer.Exit(1) from None
