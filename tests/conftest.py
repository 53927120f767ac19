"""
Shared test fixtures.

PHILOSOPHY: Use REAL objects wherever possible.
- Real Pydantic trades (not dicts pretending to be trades)
- In-memory collaborators for ledger tests, temp JSON files for storage tests
"""

from __future__ import annotations

import itertools
import time
from datetime import date
from typing import TYPE_CHECKING, Any

import pytest

from trade_ledger.ledger import (
    CapitalChangeStore,
    MonthlyCapitalLedger,
    PortfolioSizeBook,
    PositionStatus,
    Trade,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator


@pytest.fixture
def make_trade() -> Callable[..., Trade]:
    """Factory for journal trades with sensible defaults."""
    ids = itertools.count(1)

    def _make(
        on: date,
        pl_rs: float = 0.0,
        *,
        status: PositionStatus = PositionStatus.CLOSED,
        **fields: Any,
    ) -> Trade:
        data: dict[str, Any] = {
            "id": f"trade-{next(ids)}",
            "name": "AAPL",
            "date": on,
            "position_status": status,
            "pl_rs": pl_rs,
        }
        data.update(fields)
        return Trade(**data)

    return _make


@pytest.fixture
def make_ledger() -> Callable[..., MonthlyCapitalLedger]:
    """Factory for a ledger wired to in-memory collaborators."""

    def _make(
        trades: Iterable[Trade] = (),
        *,
        store: CapitalChangeStore | None = None,
        book: PortfolioSizeBook | None = None,
        **options: Any,
    ) -> MonthlyCapitalLedger:
        book = book if book is not None else PortfolioSizeBook()
        return MonthlyCapitalLedger(
            trades,
            store if store is not None else CapitalChangeStore(),
            book,
            overrides=book,
            **options,
        )

    return _make


@pytest.fixture
def local_timezone(monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[[str], None]]:
    """Switch the process-local timezone (a POSIX TZ string) for one test."""

    def _set(tz: str) -> None:
        monkeypatch.setenv("TZ", tz)
        time.tzset()

    yield _set
    monkeypatch.undo()
    time.tzset()
