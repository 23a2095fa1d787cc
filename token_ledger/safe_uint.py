# -*- coding: utf-8 -*-
"""
token_ledger.safe_uint
======================

Checked unsigned-integer helpers for ledger amounts.

Goals
-----
- Amounts live in the **U128** domain (0 <= n <= 2**128 - 1), the width of a
  token balance.
- Never use Python floats; never wrap silently.
- Checked variants raise `Overflow`.

Conventions
-----------
- `require_amount` validates caller-supplied inputs and raises
  `InvalidAmount` (a ValueError) for non-ints, bools and out-of-range values.
- `u128_add` / `u128_sub` are used for every balance and allowance update.
"""

from __future__ import annotations

from typing import Final

from .errors import InvalidAmount, Overflow

U128_MAX: Final[int] = (1 << 128) - 1


# ---------------------------------------------------------------------------
# Domain checks
# ---------------------------------------------------------------------------

def is_amount(n: object) -> bool:
    """True iff `n` is an int (not bool) in [0, U128_MAX]."""
    return isinstance(n, int) and not isinstance(n, bool) and 0 <= n <= U128_MAX


def require_amount(n: object, *, name: str = "value") -> int:
    """
    Ensure `n` is an integer amount in [0, U128_MAX] and return it as int.
    """
    if not isinstance(n, int) or isinstance(n, bool):
        raise InvalidAmount(
            f"{name} must be int, got {type(n).__name__}",
            data={"field": name},
        )
    if n < 0 or n > U128_MAX:
        raise InvalidAmount(
            f"{name} out of range [0, 2**128-1]",
            data={"field": name, "value": str(n)},
        )
    return int(n)


# ---------------------------------------------------------------------------
# Checked (fail-fast)
# ---------------------------------------------------------------------------

def u128_add(x: int, y: int) -> int:
    """Checked add: raise Overflow if the sum exceeds U128_MAX."""
    if x < 0 or y < 0 or x > U128_MAX or y > U128_MAX:
        raise Overflow("operand out of range", op="add")
    s = x + y
    if s > U128_MAX:
        raise Overflow(op="add")
    return s


def u128_sub(x: int, y: int) -> int:
    """Checked sub: raise Overflow on underflow (y > x)."""
    if x < 0 or y < 0 or x > U128_MAX or y > U128_MAX:
        raise Overflow("operand out of range", op="sub")
    if y > x:
        raise Overflow("amount underflow", op="sub")
    return x - y


__all__ = [
    "U128_MAX",
    "is_amount",
    "require_amount",
    "u128_add",
    "u128_sub",
]
