"""Tests for the in-memory portfolio-size book."""

from __future__ import annotations

from trade_ledger.ledger import PortfolioSizeBook


class TestPortfolioSizeBook:
    """Test anchor lookup and carry-forward."""

    def test_default_without_anchors(self) -> None:
        book = PortfolioSizeBook(default_size=5000.0)

        assert book.get_portfolio_size(6, 2024) == 5000.0
        assert book.get_latest_portfolio_size() == 5000.0

    def test_anchor_carries_forward(self) -> None:
        book = PortfolioSizeBook(anchors={(3, 2024): 10000.0})

        assert book.get_portfolio_size(2, 2024) == 0.0
        assert book.get_portfolio_size(3, 2024) == 10000.0
        assert book.get_portfolio_size(11, 2024) == 10000.0

    def test_carry_forward_crosses_years(self) -> None:
        book = PortfolioSizeBook(anchors={(11, 2023): 8000.0, (2, 2024): 9000.0})

        assert book.get_portfolio_size(1, 2024) == 8000.0
        assert book.get_portfolio_size(5, 2024) == 9000.0

    def test_latest_is_chronological_not_insertion_order(self) -> None:
        book = PortfolioSizeBook()
        book.set_portfolio_size(12000.0, 6, 2024)
        book.set_portfolio_size(7000.0, 12, 2023)

        assert book.get_latest_portfolio_size() == 12000.0

    def test_overrides_are_independent_of_anchors(self) -> None:
        book = PortfolioSizeBook(anchors={(1, 2024): 10000.0}, overrides={(1, 2024): 15000.0})

        assert book.get_portfolio_size(1, 2024) == 10000.0
        assert book.overrides[(1, 2024)] == 15000.0
        assert book.get_override(1, 2024) == 15000.0

    def test_set_and_clear_override(self) -> None:
        book = PortfolioSizeBook()

        book.set_override(12000.0, 4, 2024)

        assert book.get_override(4, 2024) == 12000.0
        assert book.get_override(5, 2024) is None
        assert book.clear_override(4, 2024) is True
        assert book.clear_override(4, 2024) is False
        assert book.overrides == {}
