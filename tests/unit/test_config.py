"""Tests for environment-driven configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from trade_ledger.config import LedgerConfig

_ENV_VARS = (
    "TRADE_LEDGER_XIRR_GUESS",
    "TRADE_LEDGER_XIRR_TOLERANCE",
    "TRADE_LEDGER_XIRR_MAX_ITERATIONS",
    "TRADE_LEDGER_XIRR_RELAXED_TOLERANCE",
    "TRADE_LEDGER_CHAIN_MONTHS",
    "TRADE_LEDGER_DEFAULT_PORTFOLIO_SIZE",
    "TRADE_LEDGER_DATA_DIR",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLedgerConfig:
    """Test LedgerConfig.from_env()."""

    def test_defaults(self) -> None:
        config = LedgerConfig.from_env()

        assert config.xirr_guess == 0.1
        assert config.xirr_tolerance == 1e-6
        assert config.xirr_max_iterations == 100
        assert config.xirr_relaxed_tolerance == 1e-2
        assert config.chain_from_previous_month is False
        assert config.default_portfolio_size == 0.0
        assert config.data_dir == Path("data")

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TRADE_LEDGER_XIRR_GUESS", "0.05")
        monkeypatch.setenv("TRADE_LEDGER_XIRR_MAX_ITERATIONS", "50")
        monkeypatch.setenv("TRADE_LEDGER_CHAIN_MONTHS", "yes")
        monkeypatch.setenv("TRADE_LEDGER_DEFAULT_PORTFOLIO_SIZE", "25000")
        monkeypatch.setenv("TRADE_LEDGER_DATA_DIR", "/tmp/ledger")

        config = LedgerConfig.from_env()

        assert config.xirr_guess == 0.05
        assert config.xirr_max_iterations == 50
        assert config.chain_from_previous_month is True
        assert config.default_portfolio_size == 25000.0
        assert config.data_dir == Path("/tmp/ledger")

    def test_malformed_number_names_the_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TRADE_LEDGER_XIRR_TOLERANCE", "tiny")

        with pytest.raises(ValueError, match="TRADE_LEDGER_XIRR_TOLERANCE"):
            LedgerConfig.from_env()

    def test_malformed_boolean(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TRADE_LEDGER_CHAIN_MONTHS", "maybe")

        with pytest.raises(ValueError, match="TRADE_LEDGER_CHAIN_MONTHS"):
            LedgerConfig.from_env()

    def test_non_positive_iteration_cap(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TRADE_LEDGER_XIRR_MAX_ITERATIONS", "0")

        with pytest.raises(ValueError, match="must be positive"):
            LedgerConfig.from_env()
