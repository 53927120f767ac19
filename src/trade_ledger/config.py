"""Configuration for the ledger engine (environment handling)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from trade_ledger.constants import (
    DEFAULT_PORTFOLIO_SIZE,
    DEFAULT_XIRR_GUESS,
    DEFAULT_XIRR_MAX_ITERATIONS,
    DEFAULT_XIRR_RELAXED_TOLERANCE,
    DEFAULT_XIRR_TOLERANCE,
)
from trade_ledger.paths import DEFAULT_DATA_DIR

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number (got {raw!r})") from None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class LedgerConfig:
    """Configuration for the ledger and return engine."""

    xirr_guess: float = DEFAULT_XIRR_GUESS
    xirr_tolerance: float = DEFAULT_XIRR_TOLERANCE
    xirr_max_iterations: int = DEFAULT_XIRR_MAX_ITERATIONS
    xirr_relaxed_tolerance: float = DEFAULT_XIRR_RELAXED_TOLERANCE
    chain_from_previous_month: bool = False
    default_portfolio_size: float = DEFAULT_PORTFOLIO_SIZE
    data_dir: Path = DEFAULT_DATA_DIR

    @classmethod
    def from_env(cls) -> LedgerConfig:
        """Load configuration from environment variables.

        Optional:
            TRADE_LEDGER_XIRR_GUESS: Newton-Raphson starting rate (default: 0.1)
            TRADE_LEDGER_XIRR_TOLERANCE: Absolute NPV tolerance (default: 1e-6)
            TRADE_LEDGER_XIRR_MAX_ITERATIONS: Iteration cap (default: 100)
            TRADE_LEDGER_XIRR_RELAXED_TOLERANCE: NPV tolerance after the cap (default: 1e-2)
            TRADE_LEDGER_CHAIN_MONTHS: Default a month's starting capital to the previous
                month's final capital (default: false)
            TRADE_LEDGER_DEFAULT_PORTFOLIO_SIZE: Size used before any anchor exists (default: 0)
            TRADE_LEDGER_DATA_DIR: Directory holding the JSON files (default: data)
        """
        max_iterations = _env_int("TRADE_LEDGER_XIRR_MAX_ITERATIONS", DEFAULT_XIRR_MAX_ITERATIONS)
        if max_iterations <= 0:
            raise ValueError("TRADE_LEDGER_XIRR_MAX_ITERATIONS must be positive")

        return cls(
            xirr_guess=_env_float("TRADE_LEDGER_XIRR_GUESS", DEFAULT_XIRR_GUESS),
            xirr_tolerance=_env_float("TRADE_LEDGER_XIRR_TOLERANCE", DEFAULT_XIRR_TOLERANCE),
            xirr_max_iterations=max_iterations,
            xirr_relaxed_tolerance=_env_float(
                "TRADE_LEDGER_XIRR_RELAXED_TOLERANCE", DEFAULT_XIRR_RELAXED_TOLERANCE
            ),
            chain_from_previous_month=_env_bool("TRADE_LEDGER_CHAIN_MONTHS", False),
            default_portfolio_size=_env_float(
                "TRADE_LEDGER_DEFAULT_PORTFOLIO_SIZE", DEFAULT_PORTFOLIO_SIZE
            ),
            data_dir=Path(os.environ.get("TRADE_LEDGER_DATA_DIR", str(DEFAULT_DATA_DIR))),
        )
