"""
token_ledger runtime — host-facing collaborators of the ledger.

Convenience re-exports live here so callers can do:

    from token_ledger.runtime import CallContext, EventSink, Journal, MemoryBackend
    from token_ledger.runtime import events, storage  # module namespaces
"""

from __future__ import annotations

from . import events_api as events
from . import storage_api as storage
from .context import AccountId, CallContext, to_account_id, to_hex
from .events_api import Approval, BufferedEventSink, EventSink, Transfer
from .journal import Journal
from .storage_api import MemoryBackend, StorageBackend

__all__ = [
    # Types
    "AccountId",
    "CallContext",
    "Transfer",
    "Approval",
    "EventSink",
    "BufferedEventSink",
    "Journal",
    "MemoryBackend",
    "StorageBackend",
    # Helpers
    "to_account_id",
    "to_hex",
    # Namespaces (modules)
    "events",
    "storage",
]
