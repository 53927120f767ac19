"""Ledger domain models: trades, capital changes and monthly capital records."""

from __future__ import annotations

import calendar
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from trade_ledger.constants import MANUAL_EDIT_DESCRIPTION


class Month(IntEnum):
    """Calendar month, January = 1."""

    JAN = 1
    FEB = 2
    MAR = 3
    APR = 4
    MAY = 5
    JUN = 6
    JUL = 7
    AUG = 8
    SEP = 9
    OCT = 10
    NOV = 11
    DEC = 12

    @property
    def short_name(self) -> str:
        return calendar.month_abbr[self.value]

    @classmethod
    def parse(cls, value: str | int) -> Month:
        """Parse `3`, `"3"`, `"mar"` or `"March"` into a Month."""
        if isinstance(value, int):
            return cls(value)
        text = value.strip()
        if text.isdigit():
            return cls(int(text))
        lowered = text.lower()
        for month in cls:
            if lowered in {month.short_name.lower(), calendar.month_name[month.value].lower()}:
                return month
        raise ValueError(f"Unknown month: {value!r}")


MonthKey = tuple[int, int]
"""(month, year) with month in 1..12."""


def month_start(month: int, year: int) -> date:
    """First calendar day of a month."""
    return date(year, Month(month).value, 1)


def parse_journal_date(value: str) -> date:
    """
    Calendar date of a journal date string.

    Plain dates ("2024-03-01") are taken as they are. Timestamps carrying a UTC offset
    ("2024-02-29T18:30:00.000Z") are converted to local time first, so a month start
    saved from UTC+5:30 as the previous evening in UTC still lands on March 1.

    Raises:
        ValueError: If the value is not an ISO date or timestamp.
    """
    if len(value) <= 10:
        return date.fromisoformat(value)
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


class PositionStatus(str, Enum):
    """Position status as recorded by the trade journal."""

    OPEN = "Open"
    CLOSED = "Closed"
    PARTIAL = "Partial"

    @property
    def is_realized(self) -> bool:
        """Closed and partially closed positions carry realized P/L."""
        return self in {PositionStatus.CLOSED, PositionStatus.PARTIAL}


class Trade(BaseModel):
    """Single journal trade, as read from the external trade store."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = ""
    """Opaque trade identifier."""

    name: str = ""
    """Stock or asset symbol."""

    date: date
    """Trade date used for monthly bucketing."""

    position_status: PositionStatus = Field(
        validation_alias=AliasChoices("position_status", "positionStatus")
    )

    pl_rs: float = Field(default=0.0, validation_alias=AliasChoices("pl_rs", "plRs"))
    """Realized profit/loss in currency."""

    stock_move: float = Field(
        default=0.0, validation_alias=AliasChoices("stock_move", "stockMove")
    )
    """Percentage move captured by the trade."""

    holding_days: float = Field(
        default=0.0, validation_alias=AliasChoices("holding_days", "holdingDays")
    )

    reward_risk: float = Field(
        default=0.0, validation_alias=AliasChoices("reward_risk", "rewardRisk")
    )

    setup: str | None = None
    """Setup tag (e.g. "Breakout"), if recorded."""

    allocation: float = 0.0
    """Position size as a percentage of the portfolio at entry."""

    position_size: float = Field(
        default=0.0, validation_alias=AliasChoices("position_size", "positionSize")
    )
    """Position size in currency."""

    @field_validator("date", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_journal_date(value)
        return value


class CapitalChangeType(str, Enum):
    """Direction of a manual capital movement."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


@dataclass
class CapitalChange:
    """
    A dated deposit or withdrawal.

    `amount` is always a non-negative magnitude; the direction lives in `type`.
    """

    id: str
    date: date
    amount: float
    type: CapitalChangeType
    description: str = ""

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"Capital change amount must be non-negative (got {self.amount})")

    @classmethod
    def from_net_value(
        cls,
        value: float,
        on: date,
        *,
        change_id: str | None = None,
        description: str = MANUAL_EDIT_DESCRIPTION,
    ) -> CapitalChange:
        """Build a change from a signed net value (negative = withdrawal)."""
        return cls(
            id=change_id or uuid.uuid4().hex,
            date=on,
            amount=abs(value),
            type=CapitalChangeType.DEPOSIT if value >= 0 else CapitalChangeType.WITHDRAWAL,
            description=description,
        )

    @property
    def signed_amount(self) -> float:
        """`amount` for a deposit, `-amount` for a withdrawal."""
        return self.amount if self.type == CapitalChangeType.DEPOSIT else -self.amount

    def falls_in(self, month: int, year: int) -> bool:
        return self.date.year == year and self.date.month == month

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "amount": self.amount,
            "type": self.type.value,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CapitalChange:
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            date=parse_journal_date(str(data["date"])),
            amount=float(data["amount"]),
            type=CapitalChangeType(data["type"]),
            description=data.get("description", ""),
        )


@dataclass(frozen=True)
class MonthlyCapitalRecord:
    """
    One month of the capital ledger.

    `final_capital` always equals
    `starting_capital + realized_pl + deposits - withdrawals`.

    Trade statistics are `None` ("not applicable") for a month with no trades, so an
    idle month never reads as a 0% win rate.
    """

    month: Month
    year: int
    starting_capital: float
    deposits: float
    withdrawals: float
    realized_pl: float
    final_capital: float

    trades: int | None = None
    win_percentage: float | None = None
    avg_gain: float | None = None
    avg_loss: float | None = None
    avg_reward_risk: float | None = None
    avg_holding_days: float | None = None
    pl_percentage: float | None = None

    starting_capital_overridden: bool = False
    legacy_capital_flows: bool = False

    @property
    def key(self) -> MonthKey:
        return (int(self.month), self.year)

    @property
    def net_change(self) -> float:
        """Net deposits minus withdrawals for the month."""
        return self.deposits - self.withdrawals

    @property
    def has_trades(self) -> bool:
        return self.trades is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month.short_name,
            "year": self.year,
            "starting_capital": self.starting_capital,
            "deposits": self.deposits,
            "withdrawals": self.withdrawals,
            "net_change": self.net_change,
            "realized_pl": self.realized_pl,
            "pl_percentage": self.pl_percentage,
            "final_capital": self.final_capital,
            "trades": self.trades,
            "win_percentage": self.win_percentage,
            "avg_gain": self.avg_gain,
            "avg_loss": self.avg_loss,
            "avg_reward_risk": self.avg_reward_risk,
            "avg_holding_days": self.avg_holding_days,
            "starting_capital_overridden": self.starting_capital_overridden,
        }
