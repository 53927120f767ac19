"""Tests for the year report."""

from __future__ import annotations

from datetime import date

import pytest

from trade_ledger.ledger import (
    CapitalChange,
    CapitalChangeStore,
    PortfolioSizeBook,
    ReturnAggregator,
    build_year_report,
)


class TestYearReport:
    """Test pairing of ledger records and returns."""

    def test_build_year_report(self, make_trade, make_ledger) -> None:
        store = CapitalChangeStore()
        store.add(CapitalChange.from_net_value(2000.0, date(2024, 4, 1)))
        store.add(CapitalChange.from_net_value(-500.0, date(2024, 9, 1)))
        ledger = make_ledger(
            [make_trade(date(2024, 1, 15), 1000.0), make_trade(date(2024, 2, 15), -250.0)],
            store=store,
            book=PortfolioSizeBook(anchors={(1, 2024): 10000.0}),
        )

        report = build_year_report(ledger, ReturnAggregator(ledger), 2024)

        assert report.year == 2024
        assert report.opening_capital == 10000.0
        assert len(report.rows) == 12
        assert report.total_realized_pl == 750.0
        assert report.total_net_change == 1500.0
        for record, returns in report.rows:
            assert record.month == returns.month

    def test_to_dict(self, make_trade, make_ledger) -> None:
        ledger = make_ledger(
            [make_trade(date(2024, 1, 15), 500.0)],
            book=PortfolioSizeBook(anchors={(1, 2024): 10000.0}),
        )

        data = build_year_report(ledger, ReturnAggregator(ledger), 2024).to_dict()

        assert data["year"] == 2024
        assert len(data["months"]) == 12
        january, february = data["months"][0], data["months"][1]
        assert january["month"] == "Jan"
        assert january["final_capital"] == 10500.0
        assert january["win_percentage"] == 100.0
        assert february["trades"] is None
        assert february["returns"]["12m"] == 0.0
        # February falls back to the 10,000 anchor, below January's 10,500 final capital.
        expected = ((10000 / 10500) ** (365 / 31) - 1) * 100
        assert february["returns"]["1m"] == pytest.approx(expected, rel=1e-6)

    def test_opening_capital_override(self, make_ledger) -> None:
        ledger = make_ledger(book=PortfolioSizeBook(anchors={(1, 2024): 10000.0}))

        report = build_year_report(ledger, ReturnAggregator(ledger), 2024, opening_capital=9000.0)

        assert report.opening_capital == 9000.0
