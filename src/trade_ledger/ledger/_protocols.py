"""Protocol definitions for the ledger's external collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from trade_ledger.ledger.models import CapitalChange


class PortfolioSizeProvider(Protocol):
    """Protocol for the externally tracked portfolio-size anchor."""

    def get_portfolio_size(self, month: int, year: int) -> float:
        """Return the anchor used as the month's default starting capital."""
        ...

    def set_portfolio_size(self, value: float, month: int, year: int) -> None:
        """Record a new anchor for the month."""
        ...

    def get_latest_portfolio_size(self) -> float:
        """Return the most recent anchor."""
        ...


class CapitalChangeRepository(Protocol):
    """Protocol for persisting capital changes, keyed by opaque identifiers."""

    def add(self, change: CapitalChange) -> None:
        """Persist a new change."""
        ...

    def update(self, change: CapitalChange) -> None:
        """Replace the stored change with the same id."""
        ...

    def delete(self, change_id: str) -> None:
        """Delete the change with this id."""
        ...

    def list_all(self) -> list[CapitalChange]:
        """Return every stored change."""
        ...


class StartingCapitalOverrides(Protocol):
    """Protocol for explicit per-month starting capital set by the user."""

    def get_override(self, month: int, year: int) -> float | None:
        """Return the month's explicit starting capital, if one is set."""
        ...

    def set_override(self, value: float, month: int, year: int) -> None:
        """Set the month's explicit starting capital."""
        ...

    def clear_override(self, month: int, year: int) -> bool:
        """Remove the month's explicit starting capital. Return whether one existed."""
        ...
