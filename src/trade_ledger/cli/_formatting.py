"""Formatting helpers for ledger tables."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trade_ledger.ledger import RollingReturnResult

NOT_APPLICABLE = "-"


def format_currency(value: float) -> str:
    return f"{value:,.2f}"


def format_signed_currency(value: float) -> str:
    """Format an amount as a signed currency string with color.

    Args:
        value: Amount (can be positive, negative, or zero).

    Returns:
        Formatted string with color markup.
    """
    text = f"{abs(value):,.2f}"
    if value > 0:
        return f"[green]+{text}[/green]"
    if value < 0:
        return f"[red]-{text}[/red]"
    return text


def format_optional(value: float | None, fmt: str = "{:.2f}") -> str:
    """Render a "not applicable" statistic as a dash."""
    if value is None:
        return NOT_APPLICABLE
    return fmt.format(value)


def format_return(result: RollingReturnResult) -> str:
    if not result.available:
        return NOT_APPLICABLE
    if result.percentage > 0:
        return f"[green]{result.percentage:.2f}%[/green]"
    if result.percentage < 0:
        return f"[red]{result.percentage:.2f}%[/red]"
    return f"{result.percentage:.2f}%"
