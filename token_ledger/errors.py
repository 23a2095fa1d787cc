"""
token_ledger.errors — typed exceptions for the token ledger.

The ledger communicates failed preconditions via *typed exceptions* that the
host converts into error receipts. These exceptions are pure-Python and
dependency-free so they can be imported from the lowest-level modules
(safe_uint, storage) without cycles.

Hierarchy
---------
LedgerError (base)
 ├─ BalanceTooLow    : source balance cannot cover the requested value
 ├─ AllowanceTooLow  : spender's remaining allowance cannot cover the value
 ├─ Overflow         : checked arithmetic left the U128 amount domain
 ├─ InvalidAccount   : malformed account identifier (also a ValueError)
 ├─ InvalidAmount    : amount outside [0, U128_MAX] or not an int (also a ValueError)
 ├─ UnknownMethod    : host asked to dispatch a name that is not an operation
 └─ JournalError     : commit/revert without an open checkpoint

Notes
-----
* `BalanceTooLow` and `AllowanceTooLow` are caller-correctable conditions;
  they never indicate a fault in the ledger itself.
* Codes are stable strings suitable for receipts and logs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class LedgerError(Exception):
    """
    Base ledger error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'BALANCE_TOO_LOW').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "ledger error"
    code: str = "LEDGER_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for receipts/logs."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


def _shortfall(requested: Optional[int], available: Optional[int]) -> Optional[Dict[str, Any]]:
    d: Dict[str, Any] = {}
    if requested is not None:
        d["requested"] = int(requested)
    if available is not None:
        d["available"] = int(available)
    return d or None


class BalanceTooLow(LedgerError):
    """
    The source account's balance is insufficient for the transfer.

    Usage:
        raise BalanceTooLow(requested=100, available=0)
    """
    def __init__(
        self,
        message: str = "balance too low",
        *,
        requested: Optional[int] = None,
        available: Optional[int] = None,
    ):
        super().__init__(message=message, code="BALANCE_TOO_LOW", data=_shortfall(requested, available))


class AllowanceTooLow(LedgerError):
    """The spender's remaining allowance is insufficient for the transfer."""
    def __init__(
        self,
        message: str = "allowance too low",
        *,
        requested: Optional[int] = None,
        available: Optional[int] = None,
    ):
        super().__init__(message=message, code="ALLOWANCE_TOO_LOW", data=_shortfall(requested, available))


class Overflow(LedgerError):
    """Checked arithmetic would leave the amount domain (overflow or underflow)."""
    def __init__(self, message: str = "amount overflow", *, op: Optional[str] = None):
        super().__init__(message=message, code="OVERFLOW", data=({"op": op} if op else None))


class InvalidAccount(LedgerError, ValueError):
    """Account identifier is not bytes of the configured width."""
    def __init__(self, message: str = "invalid account identifier", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_ACCOUNT", data=data)


class InvalidAmount(LedgerError, ValueError):
    """Amount is not an int in [0, U128_MAX]."""
    def __init__(self, message: str = "invalid amount", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_AMOUNT", data=data)


class UnknownMethod(LedgerError):
    """Host dispatch was asked for a name that is not a ledger operation."""
    def __init__(self, method: str):
        super().__init__(message=f"unknown method: {method}", code="UNKNOWN_METHOD", data={"method": method})


class JournalError(LedgerError):
    """Misuse of journal checkpoints (commit/revert with none open)."""
    def __init__(self, message: str = "no open checkpoint"):
        super().__init__(message=message, code="JOURNAL")


__all__ = [
    "LedgerError",
    "BalanceTooLow",
    "AllowanceTooLow",
    "Overflow",
    "InvalidAccount",
    "InvalidAmount",
    "UnknownMethod",
    "JournalError",
]
