"""
token_ledger.runtime.context — account identifiers and the per-call context.

The ledger never discovers "who is calling" from ambient state. The host
resolves the caller (authentication is its job) and passes it explicitly,
either directly as the `caller` argument of a mutating operation or wrapped
in a `CallContext` for host-level dispatch.

Design notes
------------
- Account identifiers are raw bytes of a fixed width (default 32, see
  token_ledger.config). The ledger does not inspect their structure.
- Hex strings (with or without "0x") are accepted at the edges and
  normalized to bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from ..config import load_config
from ..errors import InvalidAccount

AccountId = bytes
AccountLike = Union[bytes, bytearray, memoryview, str]


# ----------------------------- helpers ----------------------------- #


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: AccountLike) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise InvalidAccount(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise InvalidAccount(f"invalid hex string: {value!r}") from e
    raise InvalidAccount(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def to_account_id(value: AccountLike, *, width: Optional[int] = None) -> AccountId:
    """
    Normalize `value` to an AccountId of exactly `width` bytes
    (config.account_id_bytes when not given).
    """
    b = to_bytes(value)
    expected = load_config().account_id_bytes if width is None else width
    if len(b) != expected:
        raise InvalidAccount(
            f"account id must be exactly {expected} bytes (got {len(b)})",
            data={"expected": expected, "got": len(b)},
        )
    return b


# ----------------------------- models ------------------------------ #


@dataclass(frozen=True)
class CallContext:
    """
    Identity of the party invoking one host call.

    Fields
    ------
    caller: Authenticated account id, resolved by the host before dispatch.
    """
    caller: AccountId

    def __post_init__(self) -> None:
        object.__setattr__(self, "caller", to_account_id(self.caller))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CallContext":
        return cls(caller=to_account_id(d.get("caller", b"")))

    def to_dict(self) -> Dict[str, Any]:
        return {"caller": to_hex(self.caller)}


__all__ = [
    "AccountId",
    "AccountLike",
    "CallContext",
    "to_bytes",
    "to_hex",
    "to_account_id",
]
