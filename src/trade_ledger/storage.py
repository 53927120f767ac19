"""JSON-file persistence for trades, capital changes and portfolio sizes.

Every file is a JSON object with a single list key (`trades`, `capital_changes`) or the
portfolio-size document. Writes are atomic (temp file + fsync + rename). A missing file
reads as empty; a malformed file raises StorageError and is never overwritten.
"""

from __future__ import annotations

import json
import os
import uuid
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import TypeAdapter, ValidationError

from trade_ledger.constants import DEFAULT_PORTFOLIO_SIZE
from trade_ledger.exceptions import StorageError
from trade_ledger.ledger.models import CapitalChange, Trade
from trade_ledger.ledger.portfolio_sizes import PortfolioSizeBook

if TYPE_CHECKING:
    from pathlib import Path

    from trade_ledger.ledger.models import MonthKey

logger = structlog.get_logger()

_TRADE_LIST = TypeAdapter(list[Trade])


def atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    """Write JSON atomically (temp file + fsync + rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(f"{path.suffix}.tmp.{uuid.uuid4().hex}")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.flush()
        os.fsync(f.fileno())
    tmp_path.replace(path)


def read_json_object(path: Path, *, kind: str) -> dict[str, Any] | None:
    """Read a JSON object from `path`, or None when the file does not exist."""
    if not path.exists():
        return None
    try:
        with path.open(encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise StorageError(
            f"{kind} file is not valid JSON: {path}. Fix the file or restore from backup."
        ) from e
    if not isinstance(raw, dict):
        raise StorageError(f"{kind} file must contain a JSON object: {path}")
    return raw


def _require_list(raw: dict[str, Any], key: str, *, kind: str, path: Path) -> list[Any]:
    items = raw.get(key)
    if not isinstance(items, list):
        raise StorageError(
            f"{kind} file has an unexpected schema: {path} (expected key '{key}: [...]')"
        )
    return items


def load_trades(path: Path) -> list[Trade]:
    """Load the journal's trades from a `{"trades": [...]}` document."""
    raw = read_json_object(path, kind="Trades")
    if raw is None:
        return []
    items = _require_list(raw, "trades", kind="Trades", path=path)
    try:
        return _TRADE_LIST.validate_python(items)
    except ValidationError as e:
        raise StorageError(f"Trades file contains an invalid trade: {path}") from e


class JsonCapitalChangeRepository:
    """Capital change repository persisted to a `{"capital_changes": [...]}` file."""

    def __init__(self, storage_path: Path) -> None:
        self.storage_path = storage_path
        self._changes: dict[str, CapitalChange] = {}
        self._load()

    def _load(self) -> None:
        raw = read_json_object(self.storage_path, kind="Capital changes")
        if raw is None:
            return
        items = _require_list(
            raw, "capital_changes", kind="Capital changes", path=self.storage_path
        )
        loaded: dict[str, CapitalChange] = {}
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                raise StorageError(
                    f"Capital changes file has an invalid entry at index {i}: {self.storage_path}"
                )
            try:
                change = CapitalChange.from_dict(item)
            except (KeyError, TypeError, ValueError) as e:
                raise StorageError(
                    f"Capital changes file contains an invalid change at index {i}: "
                    f"{self.storage_path}"
                ) from e
            loaded[change.id] = change
        if not loaded:
            logger.warning("Capital changes file is empty", path=str(self.storage_path))
        self._changes = loaded

    def _save(self) -> None:
        data = {"capital_changes": [c.to_dict() for c in self._changes.values()]}
        atomic_write_json(self.storage_path, data)

    def add(self, change: CapitalChange) -> None:
        self._changes[change.id] = change
        self._save()

    def update(self, change: CapitalChange) -> None:
        if change.id in self._changes:
            self._changes[change.id] = change
            self._save()

    def delete(self, change_id: str) -> None:
        if change_id in self._changes:
            del self._changes[change_id]
            self._save()

    def list_all(self) -> list[CapitalChange]:
        return list(self._changes.values())


def _parse_month_entries(
    raw: dict[str, Any], key: str, *, path: Path
) -> dict[MonthKey, float]:
    entries = raw.get(key, [])
    if not isinstance(entries, list):
        raise StorageError(f"Portfolio sizes file has an unexpected schema: {path} ('{key}')")
    parsed: dict[MonthKey, float] = {}
    for i, entry in enumerate(entries):
        try:
            month = int(entry["month"])
            year = int(entry["year"])
            size = float(entry["size"])
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(
                f"Portfolio sizes file has an invalid '{key}' entry at index {i}: {path}"
            ) from e
        if not 1 <= month <= 12:
            raise StorageError(
                f"Portfolio sizes file has an invalid month {month} at index {i}: {path}"
            )
        parsed[(month, year)] = size
    return parsed



def _month_entries(values: dict[MonthKey, float]) -> list[dict[str, Any]]:
    return [
        {"month": month, "year": year, "size": size}
        for (month, year), size in sorted(values.items(), key=lambda item: item[0][::-1])
    ]


def _parse_legacy_flows(
    raw: dict[str, Any], *, path: Path
) -> dict[MonthKey, tuple[float, float]]:
    entries = raw.get("legacy_flows", [])
    if not isinstance(entries, list):
        raise StorageError(
            f"Portfolio sizes file has an unexpected schema: {path} ('legacy_flows')"
        )
    parsed: dict[MonthKey, tuple[float, float]] = {}
    for i, entry in enumerate(entries):
        try:
            month = int(entry["month"])
            year = int(entry["year"])
            deposits = float(entry.get("deposits", 0.0))
            withdrawals = float(entry.get("withdrawals", 0.0))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise StorageError(
                f"Portfolio sizes file has an invalid 'legacy_flows' entry at index {i}: {path}"
            ) from e
        if not 1 <= month <= 12:
            raise StorageError(
                f"Portfolio sizes file has an invalid month {month} at index {i}: {path}"
            )
        parsed[(month, year)] = (deposits, withdrawals)
    return parsed


class JsonPortfolioSizeBook(PortfolioSizeBook):
    """PortfolioSizeBook persisted to a JSON document.

    Layout:
        {
          "default_size": 100000.0,
          "anchors": [{"month": 1, "year": 2024, "size": 100000.0}],
          "overrides": [{"month": 3, "year": 2024, "size": 120000.0}],
          "legacy_flows": [{"month": 2, "year": 2023, "deposits": 5000.0, "withdrawals": 0.0}]
        }

    `legacy_flows` is optional. It holds aggregate deposits and withdrawals from journals
    that predate individual capital changes, and is read only.
    """

    def __init__(
        self, storage_path: Path, default_size: float = DEFAULT_PORTFOLIO_SIZE
    ) -> None:
        self.storage_path = storage_path
        super().__init__(default_size=default_size)
        self.legacy_flows: dict[MonthKey, tuple[float, float]] = {}
        self._load()

    def _load(self) -> None:
        raw = read_json_object(self.storage_path, kind="Portfolio sizes")
        if raw is None:
            return
        if "default_size" in raw:
            try:
                self.default_size = float(raw["default_size"])
            except (TypeError, ValueError) as e:
                raise StorageError(
                    f"Portfolio sizes file has an invalid default_size: {self.storage_path}"
                ) from e
        self.anchors = _parse_month_entries(raw, "anchors", path=self.storage_path)
        self.overrides = _parse_month_entries(raw, "overrides", path=self.storage_path)
        self.legacy_flows = _parse_legacy_flows(raw, path=self.storage_path)

    def save(self) -> None:
        document: dict[str, Any] = {
            "default_size": self.default_size,
            "anchors": _month_entries(self.anchors),
            "overrides": _month_entries(self.overrides),
        }
        if self.legacy_flows:
            document["legacy_flows"] = [
                {"month": month, "year": year, "deposits": deposits, "withdrawals": withdrawals}
                for (month, year), (deposits, withdrawals) in sorted(
                    self.legacy_flows.items(), key=lambda item: item[0][::-1]
                )
            ]
        atomic_write_json(self.storage_path, document)

    def set_portfolio_size(self, value: float, month: int, year: int) -> None:
        super().set_portfolio_size(value, month, year)
        self.save()

    def set_override(self, value: float, month: int, year: int) -> None:
        super().set_override(value, month, year)
        self.save()

    def clear_override(self, month: int, year: int) -> bool:
        cleared = super().clear_override(month, year)
        if cleared:
            self.save()
        return cleared
