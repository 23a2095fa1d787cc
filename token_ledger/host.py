"""
token_ledger.host — serialized call dispatcher around one Ledger.

The host stands in for the execution environment the ledger runs inside:
it resolves the caller, runs exactly one call at a time to completion, and
turns the outcome into a `Receipt`.

Contracts
---------
* Every call and query holds the host lock; no two operations on the same
  state interleave, even when the host is shared between threads.
* Events emitted during a call are buffered and only reach the committed
  event log when the call succeeds.
* With `atomic_calls` enabled, storage writes are staged in a journal
  checkpoint and reverted when the call fails. Without it, a failed
  `transfer_from` keeps its allowance debit (the ledger's native behavior).
* Precondition failures and malformed input become error receipts; any
  other exception is a host bug and propagates.

Usage
-----
    host = LedgerHost.deploy(10_000, caller=alice)
    r = host.call("transfer", caller=alice, to=bob, value=100)
    assert r.ok
    host.query("balance_of", account=bob)   # -> 100
"""

from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .config import LedgerConfig, load_config
from .errors import LedgerError, UnknownMethod
from .ledger import Ledger
from .runtime.context import AccountId, AccountLike, CallContext, to_hex
from .runtime.events_api import BufferedEventSink, CanonicalEvent, Event, EventSink, events_for_receipt
from .runtime.journal import Journal
from .runtime.storage_api import MemoryBackend, StorageBackend, ensure_backend

log = logging.getLogger(__name__)

MUTATIONS: Tuple[str, ...] = ("transfer", "transfer_from", "approve")
QUERIES: Tuple[str, ...] = ("total_supply", "balance_of", "allowance")

# Wire names that are Python keywords
_ARG_ALIASES: Dict[str, str] = {"from": "from_"}
# Keywords of LedgerHost.call itself
_RESERVED_ARGS = frozenset({"caller", "method"})


# ------------------------------ Data Models ---------------------------------


@dataclass(frozen=True)
class Receipt:
    """
    Outcome of one host call.

    Fields:
        method: Operation name as dispatched.
        caller: 0x-hex caller id, or None if the caller could not be resolved.
        status: "ok" or "error".
        events: Canonical events committed by this call (empty on error).
        error:  LedgerError.to_dict() on failure.
    """

    method: str
    caller: Optional[str]
    status: str
    events: Tuple[CanonicalEvent, ...] = ()
    error: Optional[Dict[str, Any]] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def error_code(self) -> Optional[str]:
        return self.error["code"] if self.error else None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "method": self.method,
            "caller": self.caller,
            "status": self.status,
            "events": [e.to_dict() for e in self.events],
        }
        if self.error is not None:
            out["error"] = self.error
        return out


def _normalize_args(args: Mapping[str, Any]) -> Dict[str, Any]:
    return {_ARG_ALIASES.get(k, k): v for k, v in args.items()}


def _bad_entry(method: str, message: str) -> Receipt:
    log.info("call entry rejected: %s", message)
    err = LedgerError(message, code="BAD_ARGS")
    return Receipt(method=method, caller=None, status="error", error=err.to_dict())


def _bind(fn: Any, *args: Any, **kwargs: Any) -> None:
    try:
        inspect.signature(fn).bind(*args, **kwargs)
    except TypeError as e:
        raise LedgerError(str(e), code="BAD_ARGS") from e


# ------------------------------- LedgerHost ---------------------------------


class LedgerHost:
    """
    Owns the storage backend and committed event log of one ledger.

    Parameters
    ----------
    storage :
        Backend already holding ledger state (see `deploy` to create it).
    config :
        Optional LedgerConfig; defaults to `load_config()`.
    events :
        Committed event log; a fresh EventSink if omitted.
    """

    def __init__(
        self,
        storage: StorageBackend,
        *,
        config: Optional[LedgerConfig] = None,
        events: Optional[EventSink] = None,
    ) -> None:
        self._storage = ensure_backend(storage)
        self._config = config if config is not None else load_config()
        self._events = events if events is not None else EventSink()
        self._lock = threading.RLock()
        self._view = Ledger.attach(self._storage, self._events)

    @classmethod
    def deploy(
        cls,
        total_supply: int,
        *,
        caller: AccountLike,
        storage: Optional[StorageBackend] = None,
        config: Optional[LedgerConfig] = None,
    ) -> "LedgerHost":
        """Create ledger state in `storage` (in-memory if omitted) and host it."""
        backend = MemoryBackend() if storage is None else storage
        events = EventSink()
        Ledger.new(total_supply, caller=caller, storage=backend, events=events)
        log.info("deployed ledger: total_supply=%d", total_supply)
        return cls(backend, config=config, events=events)

    # ------------------------------ properties ------------------------------

    @property
    def config(self) -> LedgerConfig:
        return self._config

    @property
    def storage(self) -> StorageBackend:
        return self._storage

    def events(self) -> Tuple[Event, ...]:
        """Committed events, oldest first."""
        return self._events.events()

    # -------------------------------- queries -------------------------------

    def query(self, method: str, **args: Any) -> int:
        """Run a read operation (`total_supply`, `balance_of`, `allowance`)."""
        if method not in QUERIES:
            raise UnknownMethod(method)
        fn = getattr(self._view, method)
        kwargs = _normalize_args(args)
        _bind(fn, **kwargs)
        with self._lock:
            return fn(**kwargs)

    def balances(self) -> Dict[AccountId, int]:
        with self._lock:
            return self._view.balances()

    def check_conservation(self) -> bool:
        """True iff the sum of all balances equals the total supply."""
        with self._lock:
            return sum(self._view.balances().values()) == self._view.total_supply()

    # -------------------------------- calls ---------------------------------

    def call(self, method: str, *, caller: AccountLike, **args: Any) -> Receipt:
        """
        Dispatch one state-changing operation for `caller` and return its
        receipt. Runs under the host lock from start to finish.
        """
        with self._lock:
            try:
                ctx = CallContext(caller=caller)
            except LedgerError as e:
                log.info("call %s rejected: %s", method, e.code)
                return Receipt(method=method, caller=None, status="error", error=e.to_dict())
            return self._run(method, ctx, _normalize_args(args))

    def call_many(self, calls: List[Mapping[str, Any]]) -> List[Receipt]:
        """Run `{"method", "caller", "args"}` entries in order."""
        out: List[Receipt] = []
        for c in calls:
            if not isinstance(c, Mapping):
                out.append(_bad_entry("", f"call entry must be an object, got {type(c).__name__}"))
                continue
            method = str(c.get("method", ""))
            args = c.get("args") or {}
            if not isinstance(args, Mapping):
                out.append(_bad_entry(method, f"args must be an object, got {type(args).__name__}"))
                continue
            reserved = sorted(k for k in args if k in _RESERVED_ARGS)
            if reserved:
                out.append(_bad_entry(method, f"reserved argument names: {', '.join(reserved)}"))
                continue
            out.append(self.call(method, caller=c.get("caller", b""), **dict(args)))
        return out

    def _run(self, method: str, ctx: CallContext, kwargs: Dict[str, Any]) -> Receipt:
        caller_hex = to_hex(ctx.caller)
        journal: Optional[Journal] = None
        backend: StorageBackend = self._storage
        if self._config.atomic_calls:
            journal = Journal(self._storage)
            journal.begin()
            backend = journal

        pending = BufferedEventSink(self._events)
        ledger = Ledger(backend, pending)
        try:
            if method not in MUTATIONS:
                raise UnknownMethod(method)
            fn = getattr(ledger, method)
            _bind(fn, ctx.caller, **kwargs)
            fn(ctx.caller, **kwargs)
        except LedgerError as e:
            pending.discard()
            if journal is not None:
                journal.revert()
            log.info("call %s by %s failed: %s", method, caller_hex, e.code)
            return Receipt(method=method, caller=caller_hex, status="error", error=e.to_dict())
        except Exception:
            pending.discard()
            if journal is not None:
                journal.revert()
            raise

        if journal is not None:
            journal.commit()
        emitted = pending.flush()
        log.debug("call %s by %s ok (%d events)", method, caller_hex, len(emitted))
        return Receipt(
            method=method,
            caller=caller_hex,
            status="ok",
            events=tuple(events_for_receipt(emitted)),
        )


__all__ = ["LedgerHost", "Receipt", "MUTATIONS", "QUERIES"]
