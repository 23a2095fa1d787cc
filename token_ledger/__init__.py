"""
token_ledger — fixed-supply fungible token ledger.

Public entrypoints:

- Ledger: the accounting core (total supply, balances, allowances,
  transfer / transfer_from / approve). Storage and event sink are injected;
  the caller of every mutation is an explicit argument.
- LedgerHost: serialized, run-to-completion dispatcher that turns calls into
  receipts, optionally journaling each call for all-or-nothing semantics.
- Errors: BalanceTooLow, AllowanceTooLow, Overflow (all LedgerError).

    from token_ledger import Ledger
    ledger = Ledger.new(10_000, caller=alice)
    ledger.transfer(alice, bob, 100)
"""

from __future__ import annotations

from .errors import (AllowanceTooLow, BalanceTooLow, InvalidAccount,
                     InvalidAmount, LedgerError, Overflow)
from .host import LedgerHost, Receipt
from .ledger import Ledger
from .runtime.events_api import Approval, EventSink, Transfer
from .runtime.storage_api import MemoryBackend
from .safe_uint import U128_MAX
from .version import __version__


def version() -> str:
    """Return the token_ledger semantic version string."""
    return __version__


__all__ = [
    "__version__",
    "version",
    "Ledger",
    "LedgerHost",
    "Receipt",
    "EventSink",
    "MemoryBackend",
    "Transfer",
    "Approval",
    "U128_MAX",
    "LedgerError",
    "BalanceTooLow",
    "AllowanceTooLow",
    "Overflow",
    "InvalidAccount",
    "InvalidAmount",
]
