"""CLI tests - real JSON files in an isolated filesystem."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from trade_ledger.cli import app

runner = CliRunner()

_ENV_VARS = (
    "TRADE_LEDGER_XIRR_GUESS",
    "TRADE_LEDGER_XIRR_TOLERANCE",
    "TRADE_LEDGER_XIRR_MAX_ITERATIONS",
    "TRADE_LEDGER_XIRR_RELAXED_TOLERANCE",
    "TRADE_LEDGER_CHAIN_MONTHS",
    "TRADE_LEDGER_DEFAULT_PORTFOLIO_SIZE",
    "TRADE_LEDGER_DATA_DIR",
)

TRADES = {
    "trades": [
        {
            "id": "t1",
            "name": "AAPL",
            "date": "2024-01-15T10:00:00.000Z",
            "positionStatus": "Closed",
            "plRs": 500,
            "stockMove": 5.0,
            "holdingDays": 3,
            "rewardRisk": 2.0,
            "setup": "Breakout",
        },
        {
            "id": "t2",
            "name": "MSFT",
            "date": "2024-03-04",
            "positionStatus": "Open",
            "plRs": 0,
            "positionSize": 2500,
        },
    ]
}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write_data(*, opening: float | None = 10000.0) -> None:
    data_dir = Path("data")
    data_dir.mkdir(exist_ok=True)
    (data_dir / "trades.json").write_text(json.dumps(TRADES))
    if opening is not None:
        (data_dir / "portfolio_sizes.json").write_text(
            json.dumps({"anchors": [{"month": 1, "year": 2024, "size": opening}]})
        )


def _monthly_json() -> dict:
    result = runner.invoke(app, ["monthly", "--year", "2024", "--json", "--data-dir", "data"])
    assert result.exit_code == 0, result.stdout
    return json.loads(result.stdout)


def test_version() -> None:
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "trade-ledger v0.1.0" in result.stdout


def test_monthly_json() -> None:
    with runner.isolated_filesystem():
        _write_data()

        data = _monthly_json()

    assert data["year"] == 2024
    assert data["opening_capital"] == 10000.0
    january, february = data["months"][0], data["months"][1]
    assert january["final_capital"] == 10500.0
    assert january["win_percentage"] == 100.0
    assert february["trades"] is None
    assert set(february["returns"]) == {"ytd", "1m", "3m", "6m", "12m"}


def test_monthly_table() -> None:
    with runner.isolated_filesystem():
        _write_data()

        result = runner.invoke(app, ["monthly", "--year", "2024", "--data-dir", "data"])

    assert result.exit_code == 0
    assert "Capital 2024" in result.stdout
    assert "Annualized Returns 2024" in result.stdout
    assert "Jan" in result.stdout
    assert "Dec" in result.stdout


def test_monthly_uses_data_dir_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    with runner.isolated_filesystem():
        _write_data()
        monkeypatch.setenv("TRADE_LEDGER_DATA_DIR", "data")

        result = runner.invoke(app, ["monthly", "--year", "2024", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["months"][0]["final_capital"] == 10500.0


def test_monthly_defaults_to_data_directory() -> None:
    with runner.isolated_filesystem():
        _write_data()

        result = runner.invoke(app, ["monthly", "--year", "2024", "--json"])

    assert result.exit_code == 0, result.stdout
    assert json.loads(result.stdout)["months"][0]["final_capital"] == 10500.0


def test_monthly_empty_data_dir() -> None:
    with runner.isolated_filesystem():
        result = runner.invoke(app, ["monthly", "--year", "2024", "--json", "--data-dir", "none"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["months"][0]["starting_capital"] == 0.0


def test_monthly_invalid_trades_file() -> None:
    with runner.isolated_filesystem():
        Path("data").mkdir()
        Path("data/trades.json").write_text("{oops")

        result = runner.invoke(app, ["monthly", "--year", "2024", "--data-dir", "data"])

    assert result.exit_code == 1
    assert "not valid JSON" in result.stdout


def test_invalid_config_exits_cleanly(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRADE_LEDGER_XIRR_MAX_ITERATIONS", "lots")
    with runner.isolated_filesystem():
        result = runner.invoke(app, ["monthly", "--year", "2024", "--data-dir", "data"])

    assert result.exit_code == 1
    assert "TRADE_LEDGER_XIRR_MAX_ITERATIONS" in result.stdout


def test_set_net_change_requires_starting_capital() -> None:
    with runner.isolated_filesystem():
        _write_data(opening=None)

        result = runner.invoke(
            app, ["set-net-change", "mar", "5000", "--year", "2024", "--data-dir", "data"]
        )

        assert result.exit_code == 1
        assert "Starting capital for 2024-03" in result.stdout
        assert not Path("data/capital_changes.json").exists()
        assert not Path("data/portfolio_sizes.json").exists()


def test_set_net_change_persists_change_and_anchor() -> None:
    with runner.isolated_filesystem():
        _write_data()

        result = runner.invoke(
            app, ["set-net-change", "mar", "5000", "--year", "2024", "--data-dir", "data"]
        )

        assert result.exit_code == 0, result.stdout
        assert "Net change for Mar 2024" in result.stdout
        changes = json.loads(Path("data/capital_changes.json").read_text())["capital_changes"]
        assert len(changes) == 1
        assert changes[0]["type"] == "deposit"
        assert changes[0]["amount"] == 5000.0
        assert changes[0]["date"] == "2024-03-01"
        sizes = json.loads(Path("data/portfolio_sizes.json").read_text())
        assert {"month": 4, "year": 2024, "size": 15000.0} in sizes["anchors"]
        assert "Final capital: 15,000.00" in result.stdout

        months = _monthly_json()["months"]
        assert months[2]["starting_capital"] == 10000.0
        assert months[2]["deposits"] == 5000.0
        assert months[2]["final_capital"] == 15000.0
        assert months[3]["starting_capital"] == 15000.0


def test_monthly_uses_legacy_flows() -> None:
    with runner.isolated_filesystem():
        _write_data()
        sizes = {
            "anchors": [{"month": 1, "year": 2024, "size": 10000.0}],
            "legacy_flows": [{"month": 2, "year": 2024, "deposits": 400.0, "withdrawals": 100.0}],
        }
        Path("data/portfolio_sizes.json").write_text(json.dumps(sizes))

        february = _monthly_json()["months"][1]

    assert february["deposits"] == 400.0
    assert february["withdrawals"] == 100.0
    assert february["final_capital"] == 10300.0


def test_set_net_change_negative_then_zero() -> None:
    with runner.isolated_filesystem():
        _write_data()
        args = ["set-net-change", "--year", "2024", "--data-dir", "data", "--"]

        withdraw = runner.invoke(app, [*args, "3", "-2000"])
        clear = runner.invoke(app, [*args, "3", "0"])

        assert withdraw.exit_code == 0, withdraw.stdout
        assert clear.exit_code == 0, clear.stdout
        assert "No net change recorded for Mar 2024" in clear.stdout
        changes = json.loads(Path("data/capital_changes.json").read_text())["capital_changes"]
        assert changes == []
        march = _monthly_json()["months"][2]
        assert march["starting_capital"] == 10000.0
        assert march["net_change"] == 0.0


def test_set_net_change_invalid_month() -> None:
    with runner.isolated_filesystem():
        _write_data()

        result = runner.invoke(
            app, ["set-net-change", "13", "100", "--year", "2024", "--data-dir", "data"]
        )

    assert result.exit_code == 1
    assert "Invalid month '13'" in result.stdout


def test_set_starting_capital() -> None:
    with runner.isolated_filesystem():
        _write_data(opening=None)

        set_result = runner.invoke(
            app, ["set-starting-capital", "feb", "12000", "--year", "2024", "--data-dir", "data"]
        )
        edit_result = runner.invoke(
            app, ["set-net-change", "feb", "1000", "--year", "2024", "--data-dir", "data"]
        )

        assert set_result.exit_code == 0, set_result.stdout
        assert "Starting capital: 12,000.00" in set_result.stdout
        assert edit_result.exit_code == 0, edit_result.stdout
        february = _monthly_json()["months"][1]
        assert february["starting_capital"] == 12000.0
        assert february["starting_capital_overridden"] is True
        assert february["final_capital"] == 13000.0


def test_set_starting_capital_rejects_negative() -> None:
    with runner.isolated_filesystem():
        _write_data()

        result = runner.invoke(
            app,
            ["set-starting-capital", "--year", "2024", "--data-dir", "data", "--", "feb", "-5"],
        )

    assert result.exit_code == 1
    assert "non-negative" in result.stdout


def test_stats_json() -> None:
    with runner.isolated_filesystem():
        _write_data()

        result = runner.invoke(app, ["stats", "--json", "--data-dir", "data"])

    assert result.exit_code == 0, result.stdout
    data = json.loads(result.stdout)
    assert data["summary"]["total_trades"] == 2
    assert data["summary"]["win_rate"] == 50.0
    assert data["pnl_by_symbol"] == [{"symbol": "AAPL", "pnl": 500.0}]
    assert [row["day"] for row in data["pnl_by_weekday"]][0] == "Sunday"
    assert data["setups"] == [{"setup": "Breakout", "count": 1}]
    assert data["allocations"][0]["name"] == "MSFT"
    assert data["allocations"][0]["position_status"] == "Open"
    assert data["allocations"][0]["allocation_pct"] == pytest.approx(25.0)


def test_stats_table() -> None:
    with runner.isolated_filesystem():
        _write_data()

        result = runner.invoke(app, ["stats", "--data-dir", "data"])

    assert result.exit_code == 0
    assert "Trade Statistics" in result.stdout
    assert "P/L by Weekday" in result.stdout


def test_stats_without_trades() -> None:
    with runner.isolated_filesystem():
        result = runner.invoke(app, ["stats", "--data-dir", "data"])

    assert result.exit_code == 0
    assert "No trades found" in result.stdout
