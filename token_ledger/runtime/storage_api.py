"""
token_ledger.runtime.storage_api — host key/value storage for ledger state.

The host owns durable storage; the ledger only needs a tiny bytes-in /
bytes-out interface. This module defines that interface, a default
in-process backend, and typed helpers for the unsigned integers the ledger
stores (balances, allowances, total supply).

Backend API
-----------
- get(key: bytes) -> Optional[bytes]
- set(key: bytes, value: bytes) -> None
- delete(key: bytes) -> None
- exists(key: bytes) -> bool

Typed helpers
-------------
- get_int(backend, key) -> int            # absent -> 0, big-endian unsigned
- set_int(backend, key, value) -> None    # 0 deletes the key

"Zero means absent": a zero balance and a missing balance are observably the
same, so zero values are never stored.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterator, Optional, Protocol, Tuple, runtime_checkable

from ..config import load_config
from ..errors import InvalidAmount, LedgerError
from ..safe_uint import U128_MAX


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal backend interface for ledger storage."""

    def get(self, key: bytes) -> Optional[bytes]: ...
    def set(self, key: bytes, value: bytes) -> None: ...
    def delete(self, key: bytes) -> None: ...
    def exists(self, key: bytes) -> bool: ...


class MemoryBackend:
    """Thread-safe in-memory backend for local runs and tests."""

    def __init__(self) -> None:
        self._store: Dict[bytes, bytes] = {}
        self._lock = threading.RLock()

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._store.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        with self._lock:
            self._store[key] = value

    def delete(self, key: bytes) -> None:
        with self._lock:
            self._store.pop(key, None)

    def exists(self, key: bytes) -> bool:
        with self._lock:
            return key in self._store

    def items(self, prefix: bytes = b"") -> Iterator[Tuple[bytes, bytes]]:
        """Snapshot of (key, value) pairs whose key starts with `prefix`, sorted."""
        with self._lock:
            snap = sorted((k, v) for k, v in self._store.items() if k.startswith(prefix))
        return iter(snap)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


def ensure_backend(backend: object) -> StorageBackend:
    """Return `backend` if it conforms to StorageBackend, else raise TypeError."""
    for attr in ("get", "set", "delete", "exists"):
        if not callable(getattr(backend, attr, None)):
            raise TypeError(f"storage backend missing method: {attr}")
    return backend  # type: ignore[return-value]


# --------------------------- Validation helpers --------------------------- #


def check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)):
        raise TypeError("storage key must be bytes")
    if len(key) == 0:
        raise LedgerError("storage key must be non-empty", code="STORAGE")
    max_len = load_config().max_storage_key_bytes
    if len(key) > max_len:
        raise LedgerError(f"storage key too long (>{max_len} bytes)", code="STORAGE")
    return bytes(key)


# ------------------------------ Typed helpers ----------------------------- #


def get_int(backend: StorageBackend, key: bytes) -> int:
    """
    Read a big-endian unsigned integer at `key`. Absent key reads as 0.
    """
    raw = backend.get(check_key(key))
    if not raw:
        return 0
    return int.from_bytes(raw, byteorder="big", signed=False)


def set_int(backend: StorageBackend, key: bytes, value: int) -> None:
    """
    Store `value` as minimal big-endian unsigned bytes. Enforces
    0 <= value <= U128_MAX; storing 0 deletes the key.
    """
    k = check_key(key)
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidAmount("set_int value must be int")
    if value < 0 or value > U128_MAX:
        raise InvalidAmount("set_int out of range (must fit in 128 bits)")
    if value == 0:
        backend.delete(k)
        return
    width = (value.bit_length() + 7) // 8
    backend.set(k, value.to_bytes(width, "big"))


__all__ = [
    "StorageBackend",
    "MemoryBackend",
    "ensure_backend",
    "check_key",
    "get_int",
    "set_int",
]
