"""Annualized internal rate of return (XIRR) for irregular cash-flow series.

Solves for the rate `r` that zeroes the net present value

    NPV(r) = sum_i amount_i / (1 + r) ** t_i

where `t_i` is the elapsed year fraction of flow `i` from the series start, using
Newton-Raphson with the analytic derivative

    NPV'(r) = sum_i -t_i * amount_i / (1 + r) ** (t_i + 1)

The solver never raises for numerical reasons. Every degenerate case (no sign change,
zero boundary valuation, flat derivative, divergence, non-convergence) resolves to a rate
of 0.0.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np
import structlog

from trade_ledger.constants import (
    DEFAULT_XIRR_GUESS,
    DEFAULT_XIRR_MAX_ITERATIONS,
    DEFAULT_XIRR_RELAXED_TOLERANCE,
    DEFAULT_XIRR_TOLERANCE,
    XIRR_DERIVATIVE_FLOOR,
)

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from trade_ledger.cashflows import CashFlowSeries
    from trade_ledger.config import LedgerConfig

logger = structlog.get_logger()


class SolveOutcome(str, Enum):
    """How a solve finished."""

    CONVERGED = "converged"
    RELAXED = "relaxed"
    INVALID_AMOUNT = "invalid_amount"
    ALL_ZERO = "all_zero"
    NO_SIGN_CHANGE = "no_sign_change"
    ZERO_BOUNDARY = "zero_boundary"
    FLAT_DERIVATIVE = "flat_derivative"
    DIVERGED = "diverged"
    NOT_CONVERGED = "not_converged"

    @property
    def solved(self) -> bool:
        return self in {SolveOutcome.CONVERGED, SolveOutcome.RELAXED}


@dataclass(frozen=True)
class XIRRResult:
    """Detailed outcome of a solve. `rate` is 0.0 whenever `outcome.solved` is False."""

    rate: float
    outcome: SolveOutcome
    iterations: int


class XIRRSolver:
    """
    Newton-Raphson XIRR solver.

    Usage:
        solver = XIRRSolver()
        rate = solver.solve(series)  # 0.184 for 18.4%
    """

    def __init__(
        self,
        *,
        guess: float = DEFAULT_XIRR_GUESS,
        tolerance: float = DEFAULT_XIRR_TOLERANCE,
        max_iterations: int = DEFAULT_XIRR_MAX_ITERATIONS,
        relaxed_tolerance: float = DEFAULT_XIRR_RELAXED_TOLERANCE,
    ) -> None:
        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        if tolerance <= 0 or relaxed_tolerance < tolerance:
            raise ValueError("tolerances must be positive and relaxed_tolerance >= tolerance")
        if guess <= -1:
            raise ValueError("guess must be greater than -1")
        self.guess = guess
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.relaxed_tolerance = relaxed_tolerance

    @classmethod
    def from_config(cls, config: LedgerConfig) -> XIRRSolver:
        return cls(
            guess=config.xirr_guess,
            tolerance=config.xirr_tolerance,
            max_iterations=config.xirr_max_iterations,
            relaxed_tolerance=config.xirr_relaxed_tolerance,
        )

    @staticmethod
    def _npv(rate: float, amounts: NDArray[np.float64], years: NDArray[np.float64]) -> float:
        with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
            return float(np.sum(amounts / np.power(1.0 + rate, years)))

    @staticmethod
    def _npv_derivative(
        rate: float, amounts: NDArray[np.float64], years: NDArray[np.float64]
    ) -> float:
        with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
            return float(np.sum(-years * amounts / np.power(1.0 + rate, years + 1.0)))

    def solve(self, series: CashFlowSeries) -> float:
        """Annualized rate as a decimal (0.1 = 10%), or 0.0 when none is computable."""
        return self.solve_detailed(series).rate

    def solve_detailed(self, series: CashFlowSeries) -> XIRRResult:
        """Solve and report how the solve finished."""
        amounts = np.asarray(series.amounts(), dtype=np.float64)
        years = np.asarray(series.year_fractions(), dtype=np.float64)

        precheck = self._precheck(series, amounts)
        if precheck is not None:
            return self._give_up(precheck, 0)

        rate = self.guess
        npv = self._npv(rate, amounts, years)
        for iteration in range(1, self.max_iterations + 1):
            if abs(npv) < self.tolerance:
                return XIRRResult(rate=rate, outcome=SolveOutcome.CONVERGED, iterations=iteration)

            derivative = self._npv_derivative(rate, amounts, years)
            if not math.isfinite(derivative) or abs(derivative) < XIRR_DERIVATIVE_FLOOR:
                return self._give_up(SolveOutcome.FLAT_DERIVATIVE, iteration)

            rate = rate - npv / derivative
            # (1 + r) ** t is undefined for r <= -1 with fractional t.
            if not math.isfinite(rate) or rate <= -1.0:
                return self._give_up(SolveOutcome.DIVERGED, iteration)

            npv = self._npv(rate, amounts, years)
            if not math.isfinite(npv):
                return self._give_up(SolveOutcome.DIVERGED, iteration)

        if abs(npv) < self.tolerance:
            return XIRRResult(
                rate=rate, outcome=SolveOutcome.CONVERGED, iterations=self.max_iterations
            )
        if abs(npv) < self.relaxed_tolerance:
            logger.debug("XIRR accepted under relaxed tolerance", rate=rate, npv=npv)
            return XIRRResult(
                rate=rate, outcome=SolveOutcome.RELAXED, iterations=self.max_iterations
            )
        return self._give_up(SolveOutcome.NOT_CONVERGED, self.max_iterations)

    @staticmethod
    def _precheck(series: CashFlowSeries, amounts: NDArray[np.float64]) -> SolveOutcome | None:
        if not np.all(np.isfinite(amounts)):
            return SolveOutcome.INVALID_AMOUNT
        if not np.any(amounts):
            return SolveOutcome.ALL_ZERO
        if series.start_value == 0 or series.end_value == 0:
            return SolveOutcome.ZERO_BOUNDARY
        if not (np.any(amounts > 0) and np.any(amounts < 0)):
            return SolveOutcome.NO_SIGN_CHANGE
        return None

    @staticmethod
    def _give_up(outcome: SolveOutcome, iterations: int) -> XIRRResult:
        logger.debug("XIRR not computable", outcome=outcome.value, iterations=iterations)
        return XIRRResult(rate=0.0, outcome=outcome, iterations=iterations)
