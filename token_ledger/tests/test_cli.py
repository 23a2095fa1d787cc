from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from token_ledger.cli.main import app
from token_ledger.runtime.context import to_hex
from token_ledger.version import __version__

runner = CliRunner()


@pytest.fixture
def scenario(tmp_path: Path, alice, bob, charlie) -> Path:
    data = {
        "deployer": to_hex(alice),
        "total_supply": 1_000,
        "calls": [
            {"method": "transfer", "caller": to_hex(alice), "args": {"to": to_hex(bob), "value": 100}},
            {"method": "approve", "caller": to_hex(bob), "args": {"spender": to_hex(charlie), "value": 50}},
            {
                "method": "transfer_from",
                "caller": to_hex(charlie),
                "args": {"from": to_hex(bob), "to": to_hex(charlie), "value": 20},
            },
            {"method": "transfer", "caller": to_hex(charlie), "args": {"to": to_hex(alice), "value": 999}},
        ],
    }
    p = tmp_path / "scenario.json"
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


def test_run_text_output(scenario):
    res = runner.invoke(app, ["run", str(scenario)])
    assert res.exit_code == 0, res.output
    out = res.stdout
    assert "[0] transfer: ok (1 events)" in out
    assert "[1] approve: ok (1 events)" in out
    assert "[2] transfer_from: ok (1 events)" in out
    assert "[3] transfer: BALANCE_TOO_LOW" in out
    assert "total_supply: 1000" in out
    assert "conserved: True" in out


def test_run_json_output(scenario, alice, bob, charlie):
    res = runner.invoke(app, ["run", str(scenario), "--json"])
    assert res.exit_code == 0, res.output
    doc = json.loads(res.stdout)
    assert doc["total_supply"] == 1_000
    assert doc["conserved"] is True
    assert [r["status"] for r in doc["receipts"]] == ["ok", "ok", "ok", "error"]
    assert doc["receipts"][3]["error"]["code"] == "BALANCE_TOO_LOW"
    assert doc["balances"] == {to_hex(alice): 900, to_hex(bob): 80, to_hex(charlie): 20}


def test_run_strict_fails_on_error_receipt(scenario):
    res = runner.invoke(app, ["run", str(scenario), "--strict"])
    assert res.exit_code == 1


def test_run_atomic_flag(tmp_path, alice, bob, charlie):
    data = {
        "deployer": to_hex(alice),
        "total_supply": 100,
        "calls": [
            {"method": "approve", "caller": to_hex(bob), "args": {"spender": to_hex(charlie), "value": 50}},
            {
                "method": "transfer_from",
                "caller": to_hex(charlie),
                "args": {"from": to_hex(bob), "to": to_hex(charlie), "value": 10},
            },
        ],
    }
    p = tmp_path / "atomic.json"
    p.write_text(json.dumps(data), encoding="utf-8")

    res = runner.invoke(app, ["run", str(p), "--json", "--atomic"])
    assert res.exit_code == 0, res.output
    doc = json.loads(res.stdout)
    assert doc["receipts"][1]["error"]["code"] == "BALANCE_TOO_LOW"
    assert doc["balances"] == {to_hex(alice): 100}


def test_run_rejects_unreadable_scenario(tmp_path):
    missing = tmp_path / "nope.json"
    res = runner.invoke(app, ["run", str(missing)])
    assert res.exit_code == 2

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"calls": []}), encoding="utf-8")
    res = runner.invoke(app, ["run", str(bad)])
    assert res.exit_code == 2


def test_run_rejects_bad_deployer(tmp_path):
    p = tmp_path / "s.json"
    p.write_text(json.dumps({"deployer": "0x12", "total_supply": 5}), encoding="utf-8")
    res = runner.invoke(app, ["run", str(p)])
    assert res.exit_code == 2


def test_config_command(monkeypatch):
    monkeypatch.setenv("TOKEN_LEDGER_ATOMIC_CALLS", "1")
    res = runner.invoke(app, ["config"])
    assert res.exit_code == 0
    assert json.loads(res.stdout)["atomic_calls"] is True


def test_version_command():
    res = runner.invoke(app, ["version"])
    assert res.exit_code == 0
    assert res.stdout.strip() == __version__


@pytest.mark.parametrize("supply", [1.9, True, "10", -1])
def test_run_rejects_non_integer_supply(tmp_path, alice, supply):
    p = tmp_path / "s.json"
    p.write_text(json.dumps({"deployer": to_hex(alice), "total_supply": supply}), encoding="utf-8")
    res = runner.invoke(app, ["run", str(p)])
    assert res.exit_code == 2
    assert "total_supply: " not in res.stdout


def test_run_reports_malformed_call_entries(tmp_path, alice, bob):
    data = {
        "deployer": to_hex(alice),
        "total_supply": 10,
        "calls": [
            {"method": "transfer", "caller": to_hex(alice),
             "args": {"caller": to_hex(bob), "to": to_hex(bob), "value": 1}},
            {"method": "transfer", "caller": to_hex(alice), "args": {"method": "approve", "to": to_hex(bob), "value": 1}},
            "transfer",
            {"method": "transfer", "caller": to_hex(alice), "args": [to_hex(bob), 1]},
            {"method": "transfer", "caller": to_hex(alice), "args": {"to": to_hex(bob), "value": 4}},
        ],
    }
    p = tmp_path / "s.json"
    p.write_text(json.dumps(data), encoding="utf-8")

    res = runner.invoke(app, ["run", str(p), "--json"])
    assert res.exit_code == 0, res.output
    doc = json.loads(res.stdout)
    codes = [(r["error"]["code"] if r["status"] == "error" else "ok") for r in doc["receipts"]]
    assert codes == ["BAD_ARGS", "BAD_ARGS", "BAD_ARGS", "BAD_ARGS", "ok"]
    assert doc["balances"] == {to_hex(alice): 6, to_hex(bob): 4}


def test_run_rejects_non_list_calls(tmp_path, alice):
    p = tmp_path / "s.json"
    p.write_text(json.dumps({"deployer": to_hex(alice), "total_supply": 1, "calls": 5}), encoding="utf-8")
    res = runner.invoke(app, ["run", str(p)])
    assert res.exit_code == 2
