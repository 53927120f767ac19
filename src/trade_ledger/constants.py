"""Centralized policy constants for the Trade Ledger engine.

Numeric defaults shared by the solver, the config loader and the CLI.
"""

from __future__ import annotations

# =============================================================================
# XIRR Solver
# =============================================================================

# Starting rate for Newton-Raphson (10% annualized).
#
# Used by:
# - xirr.py: XIRRSolver default
# - config.py: TRADE_LEDGER_XIRR_GUESS default
DEFAULT_XIRR_GUESS: float = 0.1

# Absolute tolerance on |NPV| (currency units) for a converged solve.
DEFAULT_XIRR_TOLERANCE: float = 1e-6

# Iteration cap for Newton-Raphson.
DEFAULT_XIRR_MAX_ITERATIONS: int = 100

# Relaxed tolerance on |NPV| accepted when the iteration cap is reached.
DEFAULT_XIRR_RELAXED_TOLERANCE: float = 1e-2

# |NPV'| below this is treated as a flat (degenerate) derivative.
XIRR_DERIVATIVE_FLOOR: float = 1e-12

# Day-count basis for the year fraction of each cash flow.
DAYS_PER_YEAR: float = 365.0

# =============================================================================
# Rolling Windows
# =============================================================================

# Trailing window lengths (months) for rolling returns.
#
# Used by:
# - ledger/returns.py: ReturnWindow.months
ROLLING_WINDOW_MONTHS: tuple[int, ...] = (1, 3, 6, 12)

# =============================================================================
# Ledger Defaults
# =============================================================================

# Portfolio size used when no anchor has ever been recorded.
DEFAULT_PORTFOLIO_SIZE: float = 0.0

# Description stamped on capital changes created from a monthly net edit.
MANUAL_EDIT_DESCRIPTION: str = "Manual edit from performance table"

# =============================================================================
# Trade Analytics
# =============================================================================

# Number of symbols returned by pnl_by_symbol() by default.
DEFAULT_TOP_SYMBOLS_LIMIT: int = 10
