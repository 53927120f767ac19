"""Year-to-date and rolling-window annualized returns per ledger month."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any

import structlog

from trade_ledger.cashflows import CashFlowEvent, CashFlowSeries
from trade_ledger.constants import ROLLING_WINDOW_MONTHS
from trade_ledger.ledger.models import Month, month_start
from trade_ledger.xirr import XIRRSolver

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from trade_ledger.ledger.models import CapitalChange, MonthlyCapitalRecord
    from trade_ledger.ledger.monthly import MonthlyCapitalLedger

logger = structlog.get_logger()


class ReturnWindow(str, Enum):
    """Return periods reported for each month."""

    YTD = "ytd"
    ONE_MONTH = "1m"
    THREE_MONTHS = "3m"
    SIX_MONTHS = "6m"
    TWELVE_MONTHS = "12m"

    @property
    def months(self) -> int | None:
        """Trailing window length, or None for year-to-date."""
        if self is ReturnWindow.YTD:
            return None
        return dict(zip(ReturnWindow.rolling(), ROLLING_WINDOW_MONTHS, strict=True))[self]

    @classmethod
    def rolling(cls) -> tuple[ReturnWindow, ...]:
        return (cls.ONE_MONTH, cls.THREE_MONTHS, cls.SIX_MONTHS, cls.TWELVE_MONTHS)


class ReturnStatus(str, Enum):
    """Why a return has the value it has."""

    COMPUTED = "computed"
    INSUFFICIENT_HISTORY = "insufficient_history"
    NO_STARTING_CAPITAL = "no_starting_capital"
    NOT_COMPUTABLE = "not_computable"


@dataclass(frozen=True)
class RollingReturnResult:
    """
    Annualized return for one (month, year, window).

    `percentage` is 0.0 for every status other than COMPUTED.
    """

    month: Month
    year: int
    window: ReturnWindow
    percentage: float
    status: ReturnStatus = ReturnStatus.COMPUTED

    @property
    def available(self) -> bool:
        return self.status == ReturnStatus.COMPUTED


@dataclass(frozen=True)
class MonthlyReturns:
    """All return windows for one month."""

    month: Month
    year: int
    ytd: RollingReturnResult
    one_month: RollingReturnResult
    three_months: RollingReturnResult
    six_months: RollingReturnResult
    twelve_months: RollingReturnResult

    def get(self, window: ReturnWindow) -> RollingReturnResult:
        return {
            ReturnWindow.YTD: self.ytd,
            ReturnWindow.ONE_MONTH: self.one_month,
            ReturnWindow.THREE_MONTHS: self.three_months,
            ReturnWindow.SIX_MONTHS: self.six_months,
            ReturnWindow.TWELVE_MONTHS: self.twelve_months,
        }[window]

    def to_dict(self) -> dict[str, Any]:
        return {window.value: self.get(window).percentage for window in ReturnWindow}


def _as_events(changes: Iterable[CapitalChange], window_start: date) -> list[CashFlowEvent]:
    # Changes dated before the window fold into its first day.
    return [CashFlowEvent(max(c.date, window_start), c.signed_amount) for c in changes]


class ReturnAggregator:
    """
    Compose the ledger and the XIRR solver into per-month return figures.

    Rolling windows only look back within the year being reported: a window that would
    start before January reports INSUFFICIENT_HISTORY (0%) instead of reaching into the
    previous year.

    Usage:
        aggregator = ReturnAggregator(ledger)
        for returns in aggregator.returns_for_year(2024):
            print(returns.month.short_name, returns.ytd.percentage)
    """

    def __init__(self, ledger: MonthlyCapitalLedger, solver: XIRRSolver | None = None) -> None:
        self._ledger = ledger
        self._solver = solver or XIRRSolver()

    def opening_capital(self, year: int) -> float:
        """The year's opening anchor (January's portfolio-size lookup)."""
        return self._ledger.portfolio.get_portfolio_size(Month.JAN, year)

    def returns_for_year(
        self, year: int, *, opening_capital: float | None = None
    ) -> list[MonthlyReturns]:
        """Twelve MonthlyReturns, January through December."""
        records = self._ledger.records_for_year(year)
        return self.returns_for_records(records, opening_capital=opening_capital)

    def returns_for_records(
        self,
        records: Sequence[MonthlyCapitalRecord],
        *,
        opening_capital: float | None = None,
    ) -> list[MonthlyReturns]:
        """Returns for a chronological run of records from a single year."""
        if not records:
            return []
        year = records[0].year
        if any(record.year != year for record in records):
            raise ValueError("Records must all belong to the same year")
        if opening_capital is None:
            opening_capital = self.opening_capital(year)

        results: list[MonthlyReturns] = []
        for index, record in enumerate(records):
            results.append(
                MonthlyReturns(
                    month=record.month,
                    year=year,
                    ytd=self.ytd_return(records, index, opening_capital),
                    one_month=self.rolling_return(records, index, ReturnWindow.ONE_MONTH),
                    three_months=self.rolling_return(records, index, ReturnWindow.THREE_MONTHS),
                    six_months=self.rolling_return(records, index, ReturnWindow.SIX_MONTHS),
                    twelve_months=self.rolling_return(
                        records, index, ReturnWindow.TWELVE_MONTHS
                    ),
                )
            )
        return results

    def ytd_return(
        self,
        records: Sequence[MonthlyCapitalRecord],
        index: int,
        opening_capital: float,
    ) -> RollingReturnResult:
        """
        Year-to-date XIRR for `records[index]`.

        Series: opening capital on January 1st, every capital change dated on or before
        the first of the month (cumulative history), and the month's final capital on the
        first of the month.
        """
        record = records[index]
        if record.starting_capital == 0:
            return self._unavailable(record, ReturnWindow.YTD, ReturnStatus.NO_STARTING_CAPITAL)

        start = date(record.year, 1, 1)
        end = month_start(record.month, record.year)
        changes = self._ledger.capital_changes.changes_up_to_and_including(end)
        series = CashFlowSeries.build(
            start, opening_capital, end, record.final_capital, _as_events(changes, start)
        )
        return self._solve(record, ReturnWindow.YTD, series)

    def rolling_return(
        self,
        records: Sequence[MonthlyCapitalRecord],
        index: int,
        window: ReturnWindow,
    ) -> RollingReturnResult:
        """
        Trailing `window` XIRR for `records[index]`.

        Series: the final capital of the month `window.months` earlier on the first of that
        month, capital changes dated inside the window, and this month's final capital on
        the first of this month.
        """
        months = window.months
        if months is None:
            raise ValueError("rolling_return() needs a rolling window, not YTD")

        record = records[index]
        base_index = index - months
        if base_index < 0:
            return self._unavailable(record, window, ReturnStatus.INSUFFICIENT_HISTORY)

        base = records[base_index]
        start = month_start(base.month, base.year)
        end = month_start(record.month, record.year)
        changes = self._ledger.capital_changes.changes_between(start, end)
        series = CashFlowSeries.build(
            start, base.final_capital, end, record.final_capital, _as_events(changes, start)
        )
        return self._solve(record, window, series)

    def _solve(
        self, record: MonthlyCapitalRecord, window: ReturnWindow, series: CashFlowSeries
    ) -> RollingReturnResult:
        result = self._solver.solve_detailed(series)
        if not result.outcome.solved:
            logger.debug(
                "Return not computable",
                month=int(record.month),
                year=record.year,
                window=window.value,
                outcome=result.outcome.value,
            )
            return self._unavailable(record, window, ReturnStatus.NOT_COMPUTABLE)
        return RollingReturnResult(
            month=record.month,
            year=record.year,
            window=window,
            percentage=result.rate * 100,
        )

    @staticmethod
    def _unavailable(
        record: MonthlyCapitalRecord, window: ReturnWindow, status: ReturnStatus
    ) -> RollingReturnResult:
        return RollingReturnResult(
            month=record.month,
            year=record.year,
            window=window,
            percentage=0.0,
            status=status,
        )
