"""
token_ledger.runtime.events_api — ledger events and the append-only sink.

Events are an observation stream, not state: the ledger writes them and never
reads them back, and they play no part in the conservation invariant.

    Transfer { from_: Optional[AccountId], to: Optional[AccountId], value }
    Approval { from_: Optional[AccountId], to: Optional[AccountId], value }

`from_` is None only for the minting Transfer emitted at construction. For
Approval, `from_` is the owner and `to` the spender; both are always set.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .context import AccountId, to_hex

EVT_TRANSFER = b"Transfer"
EVT_APPROVAL = b"Approval"


@dataclass(frozen=True)
class Transfer:
    """Balance movement (or the minting event when `from_` is None)."""

    from_: Optional[AccountId]
    to: Optional[AccountId]
    value: int

    name = EVT_TRANSFER

    def args(self) -> Dict[str, Any]:
        return {"from": self.from_, "to": self.to, "value": self.value}


@dataclass(frozen=True)
class Approval:
    """Allowance set by `from_` (owner) for `to` (spender)."""

    from_: Optional[AccountId]
    to: Optional[AccountId]
    value: int

    name = EVT_APPROVAL

    def args(self) -> Dict[str, Any]:
        return {"from": self.from_, "to": self.to, "value": self.value}


Event = Union[Transfer, Approval]


@dataclass
class CanonicalEvent:
    """
    Canonical event representation for receipts:

        name: "0x" + hex-encoded event name bytes
        args: sequence of {"k", "t", "v"} dicts
              t="b" => bytes encoded as 0x-prefixed hex
              t="i" => integer
              t="n" => absent optional (v is None)
    """

    name: str
    args: Sequence[Mapping[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "args": [dict(a) for a in self.args]}


class EventSink:
    """Append-only, thread-safe event log."""

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._lock = threading.RLock()

    def emit(self, event: Event) -> None:
        if not isinstance(event, (Transfer, Approval)):
            raise TypeError(f"unsupported event type: {type(event).__name__}")
        with self._lock:
            self._events.append(event)

    def events(self) -> Tuple[Event, ...]:
        # Expose a stable snapshot
        with self._lock:
            return tuple(self._events)

    def drain(self) -> List[Event]:
        """Return and forget everything emitted so far."""
        with self._lock:
            out = list(self._events)
            self._events.clear()
        return out

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


class BufferedEventSink(EventSink):
    """
    Sink whose events stay pending until `flush()` forwards them to `parent`.
    `discard()` drops them; a failed call therefore emits nothing.
    """

    def __init__(self, parent: EventSink) -> None:
        super().__init__()
        self._parent = parent

    def flush(self) -> List[Event]:
        pending = self.drain()
        for ev in pending:
            self._parent.emit(ev)
        return pending

    def discard(self) -> None:
        self.drain()


# --- Receipt encoding ---------------------------------------------------------


def _encode_arg(k: str, v: Any) -> Dict[str, Any]:
    if v is None:
        return {"k": k, "t": "n", "v": None}
    if isinstance(v, (bytes, bytearray)):
        return {"k": k, "t": "b", "v": to_hex(v)}
    if isinstance(v, int) and not isinstance(v, bool):
        return {"k": k, "t": "i", "v": int(v)}
    raise TypeError(f"unsupported event arg type in receipt: {type(v).__name__}")


def to_canonical(event: Event) -> CanonicalEvent:
    return CanonicalEvent(
        name="0x" + event.name.hex(),
        args=tuple(_encode_arg(k, v) for k, v in event.args().items()),
    )


def events_for_receipt(events: Iterable[Event]) -> List[CanonicalEvent]:
    """Convert events into canonical receipt events, preserving order."""
    return [to_canonical(ev) for ev in events]


__all__ = [
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "Transfer",
    "Approval",
    "Event",
    "CanonicalEvent",
    "EventSink",
    "BufferedEventSink",
    "to_canonical",
    "events_for_receipt",
]
