"""Month-by-month capital ledger derived from trade P/L and capital changes.

Each year is rebuilt from three explicit inputs on every call:

1. The trade list (read-only), bucketed by trade date.
2. The capital change store, aggregated per month into deposits and withdrawals.
3. Portfolio sizes: explicit starting-capital overrides first, then the anchor lookup.

Nothing is cached between calls, so the same inputs always produce identical records.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Mapping
from typing import TYPE_CHECKING

import structlog

from trade_ledger.exceptions import LedgerValidationError, StartingCapitalRequiredError
from trade_ledger.ledger.models import (
    CapitalChange,
    CapitalChangeType,
    Month,
    MonthlyCapitalRecord,
    month_start,
)
from trade_ledger.ledger.portfolio_sizes import PortfolioSizeBook
from trade_ledger.ledger.statistics import compute_trade_statistics

if TYPE_CHECKING:
    from collections.abc import Iterable

    from trade_ledger.ledger._protocols import PortfolioSizeProvider, StartingCapitalOverrides
    from trade_ledger.ledger.capital_changes import CapitalChangeStore
    from trade_ledger.ledger.models import Trade

logger = structlog.get_logger()

LegacyCapitalFlows = Mapping[tuple[int, int], tuple[float, float]]
"""(month, year) -> (deposits, withdrawals) from aggregate-only historical data."""


class MonthlyCapitalLedger:
    """
    Capital ledger for one journal.

    Month-to-month continuity is not enforced: a month's starting capital comes from its
    override or the anchor lookup, not from the previous month's final capital. Pass
    `chain_from_previous_month=True` to default un-overridden months (after January) to
    the previous month's final capital instead.

    Explicit starting capital is read from and written to `overrides`, normally the same
    PortfolioSizeBook passed as `portfolio`. Without one the ledger keeps its overrides in
    a private in-memory book.

    Usage:
        ledger = MonthlyCapitalLedger(trades, store, PortfolioSizeBook(100_000))
        records = ledger.records_for_year(2024)
        ledger.set_net_change(Month.MAR, 2024, 5_000)
    """

    def __init__(
        self,
        trades: Iterable[Trade],
        capital_changes: CapitalChangeStore,
        portfolio: PortfolioSizeProvider,
        *,
        overrides: StartingCapitalOverrides | None = None,
        legacy_flows: LegacyCapitalFlows | None = None,
        chain_from_previous_month: bool = False,
    ) -> None:
        self._trades = tuple(trades)
        self._capital_changes = capital_changes
        self._portfolio = portfolio
        self._overrides: StartingCapitalOverrides = (
            overrides if overrides is not None else PortfolioSizeBook()
        )
        self._legacy_flows: LegacyCapitalFlows = legacy_flows or {}
        self.chain_from_previous_month = chain_from_previous_month

    @property
    def capital_changes(self) -> CapitalChangeStore:
        return self._capital_changes

    @property
    def portfolio(self) -> PortfolioSizeProvider:
        return self._portfolio

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def _trades_by_month(self, year: int) -> dict[int, list[Trade]]:
        by_month: dict[int, list[Trade]] = defaultdict(list)
        for trade in self._trades:
            if trade.date.year == year:
                by_month[trade.date.month].append(trade)
        for month_trades in by_month.values():
            month_trades.sort(key=lambda t: t.date)
        return by_month

    def _resolve_flows(self, month: Month, year: int) -> tuple[float, float, bool]:
        """Return (deposits, withdrawals, from_legacy) for the month."""
        changes = self._capital_changes.changes_for(month, year)
        if changes:
            deposits = sum(
                (c.amount for c in changes if c.type == CapitalChangeType.DEPOSIT), 0.0
            )
            withdrawals = sum(
                (c.amount for c in changes if c.type == CapitalChangeType.WITHDRAWAL), 0.0
            )
            return deposits, withdrawals, False

        legacy = self._legacy_flows.get((int(month), year))
        if legacy is not None:
            return float(legacy[0]), float(legacy[1]), True
        return 0.0, 0.0, False

    def _resolve_starting_capital(
        self, month: Month, year: int, previous: MonthlyCapitalRecord | None
    ) -> tuple[float, bool]:
        """Return (starting_capital, overridden) for the month."""
        override = self._overrides.get_override(int(month), year)
        if override is not None:
            return override, True
        if self.chain_from_previous_month and previous is not None:
            return previous.final_capital, False
        return self._portfolio.get_portfolio_size(month, year), False

    def _build_record(
        self,
        month: Month,
        year: int,
        month_trades: list[Trade],
        previous: MonthlyCapitalRecord | None,
    ) -> MonthlyCapitalRecord:
        starting_capital, overridden = self._resolve_starting_capital(month, year, previous)
        deposits, withdrawals, from_legacy = self._resolve_flows(month, year)
        realized_pl = sum(
            (t.pl_rs for t in month_trades if t.position_status.is_realized), 0.0
        )
        final_capital = starting_capital + realized_pl + deposits - withdrawals

        pl_percentage = realized_pl / starting_capital * 100 if starting_capital != 0 else None

        if not month_trades:
            return MonthlyCapitalRecord(
                month=month,
                year=year,
                starting_capital=starting_capital,
                deposits=deposits,
                withdrawals=withdrawals,
                realized_pl=realized_pl,
                final_capital=final_capital,
                pl_percentage=pl_percentage,
                starting_capital_overridden=overridden,
                legacy_capital_flows=from_legacy,
            )

        stats = compute_trade_statistics(month_trades)
        return MonthlyCapitalRecord(
            month=month,
            year=year,
            starting_capital=starting_capital,
            deposits=deposits,
            withdrawals=withdrawals,
            realized_pl=realized_pl,
            final_capital=final_capital,
            trades=stats.total_trades,
            win_percentage=stats.win_rate,
            avg_gain=stats.avg_gain,
            avg_loss=stats.avg_loss,
            avg_reward_risk=stats.avg_reward_risk,
            avg_holding_days=stats.avg_holding_days,
            pl_percentage=pl_percentage,
            starting_capital_overridden=overridden,
            legacy_capital_flows=from_legacy,
        )

    def records_for_year(self, year: int) -> list[MonthlyCapitalRecord]:
        """Twelve records, January through December."""
        trades_by_month = self._trades_by_month(year)
        records: list[MonthlyCapitalRecord] = []
        previous: MonthlyCapitalRecord | None = None
        for month in Month:
            record = self._build_record(month, year, trades_by_month.get(month, []), previous)
            records.append(record)
            previous = record

        logger.debug(
            "Ledger recomputed",
            year=year,
            trades=sum(len(month_trades) for month_trades in trades_by_month.values()),
        )
        return records

    def record_for(self, month: int, year: int) -> MonthlyCapitalRecord:
        """The record for a single month."""
        return self.records_for_year(year)[Month(month) - 1]

    def starting_capital_for(self, month: int, year: int) -> float:
        return self.record_for(month, year).starting_capital

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_starting_capital(self, month: int, year: int, value: float) -> None:
        """
        Set or clear the explicit starting capital for a month.

        A value of 0 clears the override so the month falls back to the anchor lookup.

        Raises:
            LedgerValidationError: If the value is negative or not finite.
        """
        month = Month(month)
        if not math.isfinite(value) or value < 0:
            raise LedgerValidationError(
                f"Starting capital must be a non-negative amount (got {value!r})"
            )

        if value == 0:
            self._overrides.clear_override(int(month), year)
            return
        self._overrides.set_override(value, int(month), year)

    def set_net_change(self, month: int, year: int, new_value: float) -> CapitalChange | None:
        """
        Set the month's net deposit (positive) or withdrawal (negative).

        The month keeps at most one manually edited capital change, dated on the first of
        the month. The change lands in the month's own deposits or withdrawals, so the
        portfolio-size anchor moves by the same delta starting from the following month
        (January of the next year for December). Un-overridden later months then default
        to a starting capital that includes it, and the edited month keeps its own base:

        - existing change, non-zero value: update it, next anchor += new - old
        - no change, non-zero value: create one, next anchor += new
        - existing change, zero value: delete it, next anchor -= old
        - no change, zero value: nothing to do

        Returns:
            The created or updated change, or None when nothing remains for the month.

        Raises:
            LedgerValidationError: If the value is not finite.
            StartingCapitalRequiredError: If the month has no positive starting capital.
        """
        month = Month(month)
        if not math.isfinite(new_value):
            raise LedgerValidationError(f"Net change must be a finite amount (got {new_value!r})")

        if self.starting_capital_for(month, year) <= 0:
            raise StartingCapitalRequiredError(int(month), year)

        existing_changes = self._capital_changes.changes_for(month, year)
        existing = existing_changes[0] if existing_changes else None

        if existing is not None and new_value != 0:
            delta = new_value - existing.signed_amount
            updated = CapitalChange.from_net_value(
                new_value,
                month_start(month, year),
                change_id=existing.id,
            )
            self._capital_changes.update(updated)
            if delta != 0:
                self._adjust_next_anchor(month, year, delta)
            return updated

        if existing is None and new_value != 0:
            created = CapitalChange.from_net_value(new_value, month_start(month, year))
            self._capital_changes.add(created)
            self._adjust_next_anchor(month, year, new_value)
            return created

        if existing is not None:
            self._capital_changes.remove(existing.id)
            self._adjust_next_anchor(month, year, -existing.signed_amount)
        return None

    def _adjust_next_anchor(self, month: Month, year: int, delta: float) -> None:
        next_month, next_year = (1, year + 1) if month == Month.DEC else (int(month) + 1, year)
        anchor = self._portfolio.get_portfolio_size(next_month, next_year)
        self._portfolio.set_portfolio_size(anchor + delta, next_month, next_year)
        logger.info(
            "Portfolio size anchor adjusted",
            month=next_month,
            year=next_year,
            previous=anchor,
            delta=delta,
        )
