"""Custom exceptions for the ledger engine."""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for ledger errors."""


class LedgerValidationError(LedgerError, ValueError):
    """A mutation was rejected before any state was written."""


class StartingCapitalRequiredError(LedgerValidationError):
    """Net capital change edited for a month without a positive starting capital."""

    def __init__(self, month: int, year: int) -> None:
        self.month = month
        self.year = year
        super().__init__(
            f"Starting capital for {year}-{month:02d} must be set before adding or "
            "withdrawing funds. Set the month's starting capital first."
        )


class CashFlowRangeError(LedgerError, ValueError):
    """Cash-flow series boundaries or events are out of order."""


class StorageError(LedgerError):
    """A persisted ledger file is unreadable or has an unexpected schema."""
