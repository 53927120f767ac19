"""Dated deposit/withdrawal events and their monthly aggregation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date

    from trade_ledger.ledger._protocols import CapitalChangeRepository
    from trade_ledger.ledger.models import CapitalChange

logger = structlog.get_logger()


class InMemoryCapitalChangeRepository:
    """Capital change repository backed by a dict (tests, one-off computations)."""

    def __init__(self, changes: Iterable[CapitalChange] = ()) -> None:
        self._changes: dict[str, CapitalChange] = {change.id: change for change in changes}

    def add(self, change: CapitalChange) -> None:
        self._changes[change.id] = change

    def update(self, change: CapitalChange) -> None:
        if change.id in self._changes:
            self._changes[change.id] = change

    def delete(self, change_id: str) -> None:
        self._changes.pop(change_id, None)

    def list_all(self) -> list[CapitalChange]:
        return list(self._changes.values())


class CapitalChangeStore:
    """
    Authoritative list of dated capital changes.

    The store does not limit how many changes a month may hold; the one-change-per-month
    convention belongs to the ledger's edit protocol.

    Usage:
        store = CapitalChangeStore()
        store.add(CapitalChange.from_net_value(5_000, date(2024, 3, 1)))
        store.net_change_for(3, 2024)  # 5000.0
    """

    def __init__(self, repository: CapitalChangeRepository | None = None) -> None:
        if repository is None:
            repository = InMemoryCapitalChangeRepository()
        self._repository = repository
        self._changes: list[CapitalChange] = list(repository.list_all())

    def add(self, change: CapitalChange) -> None:
        """Append a new change."""
        self._changes.append(change)
        self._repository.add(change)
        logger.info(
            "Capital change added",
            change_id=change.id,
            date=change.date.isoformat(),
            signed_amount=change.signed_amount,
        )

    def get(self, change_id: str) -> CapitalChange | None:
        """Get a change by id."""
        return next((c for c in self._changes if c.id == change_id), None)

    def update(self, change: CapitalChange) -> None:
        """Replace the change with the same id. No-op when the id is unknown."""
        for index, existing in enumerate(self._changes):
            if existing.id == change.id:
                self._changes[index] = change
                self._repository.update(change)
                logger.info(
                    "Capital change updated",
                    change_id=change.id,
                    date=change.date.isoformat(),
                    signed_amount=change.signed_amount,
                )
                return

    def remove(self, change_id: str) -> None:
        """Delete a change by id. No-op when the id is unknown."""
        remaining = [c for c in self._changes if c.id != change_id]
        if len(remaining) == len(self._changes):
            return
        self._changes = remaining
        self._repository.delete(change_id)
        logger.info("Capital change removed", change_id=change_id)

    def list_all(self) -> list[CapitalChange]:
        """Get all changes in insertion order."""
        return list(self._changes)

    def changes_for(self, month: int, year: int) -> list[CapitalChange]:
        """Get the changes dated in a month."""
        return [c for c in self._changes if c.falls_in(month, year)]

    def net_change_for(self, month: int, year: int) -> float:
        """Signed sum of the month's changes; 0.0 when there are none."""
        return sum((c.signed_amount for c in self.changes_for(month, year)), 0.0)

    def changes_up_to_and_including(self, on: date) -> list[CapitalChange]:
        """Get every change dated on or before `on`."""
        return [c for c in self._changes if c.date <= on]

    def changes_between(self, start: date, end: date) -> list[CapitalChange]:
        """Get every change dated inside `[start, end]`."""
        return [c for c in self._changes if start <= c.date <= end]

    def __len__(self) -> int:
        return len(self._changes)
