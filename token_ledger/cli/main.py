"""
token-ledger — local simulator CLI for the token ledger.

Commands:
  token-ledger run SCENARIO.json   Deploy a ledger and replay a list of calls
  token-ledger config              Print the effective configuration
  token-ledger version             Print the package version

Scenario file format:

    {
      "deployer": "0x<32-byte hex>",
      "total_supply": 10000,
      "calls": [
        {"method": "transfer", "caller": "0x..", "args": {"to": "0x..", "value": 100}},
        {"method": "approve", "caller": "0x..", "args": {"spender": "0x..", "value": 50}},
        {"method": "transfer_from", "caller": "0x..",
         "args": {"from": "0x..", "to": "0x..", "value": 20}}
      ]
    }

No network access. This is a local runner for development and demos.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict

import typer

from ..config import load_config
from ..errors import LedgerError
from ..host import LedgerHost
from ..runtime.context import to_hex
from ..version import __version__

app = typer.Typer(
    name="token-ledger",
    help="Fixed-supply token ledger: local simulator",
    no_args_is_help=True,
    add_completion=False,
)


def _setup_logging(verbose: bool) -> None:
    cfg = load_config()
    level = logging.DEBUG if verbose else cfg.log_level_no
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load_scenario(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"Error: cannot read scenario {path}: {e}", err=True)
        raise typer.Exit(2)
    if not isinstance(data, dict) or "deployer" not in data or "total_supply" not in data:
        typer.echo("Error: scenario needs 'deployer' and 'total_supply'", err=True)
        raise typer.Exit(2)
    if not isinstance(data.get("calls") or [], list):
        typer.echo("Error: scenario 'calls' must be a list", err=True)
        raise typer.Exit(2)
    return data


@app.command()
def run(
    scenario: Path = typer.Argument(..., help="Scenario JSON file"),
    atomic: bool = typer.Option(
        False,
        "--atomic",
        help="Revert all writes of a failed call (also on via TOKEN_LEDGER_ATOMIC_CALLS)",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output JSON instead of text"),
    strict: bool = typer.Option(False, "--strict", help="Exit 1 if any call failed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Deploy a ledger and replay the scenario's calls in order."""
    _setup_logging(verbose)
    data = _load_scenario(scenario)

    cfg = load_config()
    if atomic:
        cfg = replace(cfg, atomic_calls=True)

    try:
        host = LedgerHost.deploy(data["total_supply"], caller=data["deployer"], config=cfg)
    except (LedgerError, ValueError) as e:
        typer.echo(f"Error: deploy failed: {e}", err=True)
        raise typer.Exit(2)

    receipts = host.call_many(list(data.get("calls") or []))
    balances = {to_hex(k): v for k, v in sorted(host.balances().items())}
    conserved = host.check_conservation()

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "total_supply": host.query("total_supply"),
                    "receipts": [r.to_dict() for r in receipts],
                    "balances": balances,
                    "conserved": conserved,
                },
                indent=2,
            )
        )
    else:
        for i, r in enumerate(receipts):
            if r.ok:
                typer.echo(f"[{i}] {r.method}: ok ({len(r.events)} events)")
            else:
                typer.echo(f"[{i}] {r.method}: {r.error_code}")
        typer.echo(f"total_supply: {host.query('total_supply')}")
        for acct, bal in balances.items():
            typer.echo(f"  {acct}  {bal}")
        typer.echo(f"conserved: {conserved}")

    if strict and not all(r.ok for r in receipts):
        raise typer.Exit(1)


@app.command("config")
def show_config() -> None:
    """Print the effective configuration as JSON."""
    typer.echo(json.dumps(load_config().as_dict(), indent=2))


@app.command()
def version() -> None:
    """Print the package version."""
    typer.echo(__version__)


def main() -> None:
    """Entry point for the token-ledger CLI."""
    app()


if __name__ == "__main__":
    main()
