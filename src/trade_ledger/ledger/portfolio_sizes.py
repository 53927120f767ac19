"""In-memory portfolio-size anchors and starting-capital overrides."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from trade_ledger.constants import DEFAULT_PORTFOLIO_SIZE

if TYPE_CHECKING:
    from collections.abc import Mapping

    from trade_ledger.ledger.models import MonthKey

logger = structlog.get_logger()


def _chronological(key: MonthKey) -> tuple[int, int]:
    month, year = key
    return (year, month)


class PortfolioSizeBook:
    """
    Portfolio-size collaborator with two independently settable value sets.

    - Anchors: the tracked portfolio size per month. A month without its own anchor
      inherits the most recent earlier anchor, else `default_size`.
    - Overrides: explicit starting capital per month, set by the user. The ledger
      prefers an override over the anchor lookup.
    """

    def __init__(
        self,
        default_size: float = DEFAULT_PORTFOLIO_SIZE,
        anchors: Mapping[MonthKey, float] | None = None,
        overrides: Mapping[MonthKey, float] | None = None,
    ) -> None:
        self.default_size = default_size
        self.anchors: dict[MonthKey, float] = dict(anchors or {})
        self.overrides: dict[MonthKey, float] = dict(overrides or {})

    def get_portfolio_size(self, month: int, year: int) -> float:
        """Anchor for the month, carried forward from the latest earlier anchor."""
        target = (year, month)
        earlier = [key for key in self.anchors if _chronological(key) <= target]
        if not earlier:
            return self.default_size
        return self.anchors[max(earlier, key=_chronological)]

    def set_portfolio_size(self, value: float, month: int, year: int) -> None:
        self.anchors[(month, year)] = value
        logger.info("Portfolio size anchor set", month=month, year=year, value=value)

    def get_latest_portfolio_size(self) -> float:
        """Most recent anchor, or the default size when none exists."""
        if not self.anchors:
            return self.default_size
        return self.anchors[max(self.anchors, key=_chronological)]

    def get_override(self, month: int, year: int) -> float | None:
        return self.overrides.get((month, year))

    def set_override(self, value: float, month: int, year: int) -> None:
        self.overrides[(month, year)] = value
        logger.info("Starting capital override set", month=month, year=year, value=value)

    def clear_override(self, month: int, year: int) -> bool:
        """Remove the month's override. Returns False when there was none."""
        if self.overrides.pop((month, year), None) is None:
            return False
        logger.info("Starting capital override cleared", month=month, year=year)
        return True
