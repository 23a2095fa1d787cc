"""
token_ledger.runtime.journal — journaling writes, checkpoints, revert/commit.

A `Journal` wraps any StorageBackend and is itself a StorageBackend. Writes go
to the top overlay; reads consult overlays from top → base. `commit()` merges
the top overlay into the next layer (or the base backend if it's the last
layer). `revert()` discards the top overlay.

Intended usage
--------------
    j = Journal(backend)
    j.begin()
    ledger.transfer(...)     # ledger writes through `j`
    j.commit()               # or j.revert() on failure

With no open checkpoint, writes go straight to the base backend.

Key properties
--------------
- Pure Python, no I/O.
- Deletions inside an overlay are explicit tombstones (None).
- Nested checkpoints behave as a stack (inner revert keeps outer writes).
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..errors import JournalError
from .storage_api import StorageBackend, ensure_backend

log = logging.getLogger(__name__)

_Overlay = Dict[bytes, Optional[bytes]]


class Journal:
    """
    A copy-on-write write journal with nested checkpoints.

    Parameters
    ----------
    base :
        The backend that receives writes when the outermost checkpoint commits.
    """

    def __init__(self, base: StorageBackend) -> None:
        self._base = ensure_backend(base)
        self._layers: List[_Overlay] = []

    # ------------------------------ checkpoints ------------------------------

    @property
    def depth(self) -> int:
        return len(self._layers)

    @property
    def base(self) -> StorageBackend:
        return self._base

    def begin(self) -> int:
        """Open a checkpoint; returns the new depth."""
        self._layers.append({})
        return len(self._layers)

    def commit(self) -> None:
        """Merge the top overlay into its parent (or the base backend)."""
        if not self._layers:
            raise JournalError("commit without an open checkpoint")
        top = self._layers.pop()
        if self._layers:
            self._layers[-1].update(top)
            return
        for k, v in top.items():
            if v is None:
                self._base.delete(k)
            else:
                self._base.set(k, v)
        log.debug("journal: committed %d writes to base", len(top))

    def revert(self) -> None:
        """Discard the top overlay."""
        if not self._layers:
            raise JournalError("revert without an open checkpoint")
        dropped = self._layers.pop()
        log.debug("journal: reverted %d staged writes", len(dropped))

    # ------------------------------ backend API ------------------------------

    def get(self, key: bytes) -> Optional[bytes]:
        for layer in reversed(self._layers):
            if key in layer:
                return layer[key]
        return self._base.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        if self._layers:
            self._layers[-1][key] = bytes(value)
        else:
            self._base.set(key, value)

    def delete(self, key: bytes) -> None:
        if self._layers:
            self._layers[-1][key] = None
        else:
            self._base.delete(key)

    def exists(self, key: bytes) -> bool:
        return self.get(key) is not None


__all__ = ["Journal"]
