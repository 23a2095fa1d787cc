# -*- coding: utf-8 -*-
"""
token_ledger.ledger — fixed-supply fungible token ledger
=========================================================

Deterministic, float-free, storage-backed ledger. The total supply is fixed
at construction and credited to the constructing caller; afterwards tokens
only move between accounts, directly (`transfer`) or on an owner's behalf
through an allowance (`approve` + `transfer_from`).

Highlights
----------
- Explicit `caller` parameters for mutating calls (no ambient msg.sender).
- Explicit collaborators: a StorageBackend for state and an EventSink for
  events are injected, so every test can build an isolated instance.
- U128-checked math via `token_ledger.safe_uint` (no silent wrap).
- Events:
    - Transfer { from_, to, value }   (from_ is None for the minting event)
    - Approval { from_ (owner), to (spender), value }

Public interface
----------------
Ledger.new(total_supply, *, caller, storage=None, events=None) -> Ledger
Ledger.attach(storage, events=None) -> Ledger

total_supply() -> int
balance_of(account) -> int
allowance(owner, spender) -> int

transfer(caller, to, value) -> None
transfer_from(caller, from_, to, value) -> None
approve(caller, spender, value) -> None

Failures raise BalanceTooLow / AllowanceTooLow / Overflow. A failed call
writes nothing and emits nothing, with one exception: `transfer_from` debits
the allowance before it checks the owner's balance, so a BalanceTooLow raised
from there leaves the allowance reduced. Hosts that need whole-call atomicity
run calls inside a journal checkpoint (see token_ledger.host).

Storage layout
--------------
  tok:meta:total                        total supply
  tok:meta:inited                       presence flag (b"1")
  tok:bal:<account>                     balance
  tok:allow:<owner>|<spender>           allowance
Integers are minimal big-endian; zero is stored as absence.
"""

from __future__ import annotations

import logging
from typing import Dict, Final, Optional

from .errors import AllowanceTooLow, BalanceTooLow, LedgerError
from .runtime.context import AccountId, AccountLike, to_account_id
from .runtime.events_api import Approval, EventSink, Transfer
from .runtime.storage_api import MemoryBackend, StorageBackend, ensure_backend, get_int, set_int
from .safe_uint import require_amount, u128_add, u128_sub

log = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# Storage keys
# ------------------------------------------------------------------------------

BAL_PREFIX: Final[bytes] = b"tok:bal:"
ALLOW_PREFIX: Final[bytes] = b"tok:allow:"
K_TOTAL: Final[bytes] = b"tok:meta:total"
K_INIT: Final[bytes] = b"tok:meta:inited"


def key_balance(account: AccountId) -> bytes:
    return BAL_PREFIX + account


def key_allow(owner: AccountId, spender: AccountId) -> bytes:
    return ALLOW_PREFIX + owner + b"|" + spender


class Ledger:
    """
    Total supply, balances and allowances over an injected StorageBackend.

    Instances are cheap views: the state lives in the backend, so a host may
    build a fresh `Ledger` over a journal for each call.
    """

    def __init__(self, storage: Optional[StorageBackend] = None, events: Optional[EventSink] = None) -> None:
        self._storage = ensure_backend(MemoryBackend() if storage is None else storage)
        self._events = events if events is not None else EventSink()

    # --------------------------------------------------------------------------
    # Construction
    # --------------------------------------------------------------------------

    @classmethod
    def new(
        cls,
        total_supply: int,
        *,
        caller: AccountLike,
        storage: Optional[StorageBackend] = None,
        events: Optional[EventSink] = None,
    ) -> "Ledger":
        """
        Create ledger state: credit the whole `total_supply` to `caller` and
        emit the minting Transfer. Any supply, including zero, is accepted.
        """
        ledger = cls(storage, events)
        ledger._init(total_supply, to_account_id(caller))
        return ledger

    @classmethod
    def attach(cls, storage: StorageBackend, events: Optional[EventSink] = None) -> "Ledger":
        """Reopen a ledger over a backend that already holds its state."""
        ledger = cls(storage, events)
        if not ledger.is_initialized():
            raise LedgerError("no ledger state in backend", code="NOT_INITIALIZED")
        return ledger

    def _init(self, total_supply: int, receiver: AccountId) -> None:
        supply = require_amount(total_supply, name="total_supply")
        if self._storage.exists(K_INIT):
            raise LedgerError("ledger already initialized", code="ALREADY_INITIALIZED")

        set_int(self._storage, K_TOTAL, supply)
        set_int(self._storage, key_balance(receiver), supply)
        self._storage.set(K_INIT, b"1")

        self._events.emit(Transfer(from_=None, to=receiver, value=supply))
        log.info("ledger created: total_supply=%d receiver=%s", supply, receiver.hex())

    # --------------------------------------------------------------------------
    # Views
    # --------------------------------------------------------------------------

    @property
    def storage(self) -> StorageBackend:
        return self._storage

    @property
    def event_sink(self) -> EventSink:
        return self._events

    def is_initialized(self) -> bool:
        return self._storage.exists(K_INIT)

    def total_supply(self) -> int:
        return get_int(self._storage, K_TOTAL)

    def balance_of(self, account: AccountLike) -> int:
        return get_int(self._storage, key_balance(to_account_id(account)))

    def allowance(self, owner: AccountLike, spender: AccountLike) -> int:
        return get_int(self._storage, key_allow(to_account_id(owner), to_account_id(spender)))

    def balances(self) -> Dict[AccountId, int]:
        """
        All non-zero balances. Needs a backend that can enumerate keys
        (`items(prefix)`, e.g. MemoryBackend).
        """
        items = getattr(self._storage, "items", None)
        if not callable(items):
            raise TypeError("storage backend cannot enumerate keys")
        n = len(BAL_PREFIX)
        return {k[n:]: int.from_bytes(v, "big") for k, v in items(BAL_PREFIX) if v}

    # --------------------------------------------------------------------------
    # Mutations (explicit caller)
    # --------------------------------------------------------------------------

    def transfer(self, caller: AccountLike, to: AccountLike, value: int) -> None:
        """Move `value` from `caller` to `to`."""
        self._transfer_from_to(to_account_id(caller), to_account_id(to), require_amount(value))

    def transfer_from(self, caller: AccountLike, from_: AccountLike, to: AccountLike, value: int) -> None:
        """
        Spender (`caller`) moves `value` from `from_` to `to` using allowance.

        The allowance is debited before the owner's balance is checked.
        """
        spender = to_account_id(caller)
        owner = to_account_id(from_)
        recipient = to_account_id(to)
        amount = require_amount(value)

        allow_key = key_allow(owner, spender)
        current = get_int(self._storage, allow_key)
        if amount > current:
            raise AllowanceTooLow(requested=amount, available=current)

        set_int(self._storage, allow_key, u128_sub(current, amount))
        self._transfer_from_to(owner, recipient, amount)

    def approve(self, caller: AccountLike, spender: AccountLike, value: int) -> None:
        """Set (overwrite) the allowance of `spender` over `caller`'s balance."""
        owner = to_account_id(caller)
        sp = to_account_id(spender)
        amount = require_amount(value)

        set_int(self._storage, key_allow(owner, sp), amount)
        self._events.emit(Approval(from_=owner, to=sp, value=amount))

    # --------------------------------------------------------------------------
    # Internals
    # --------------------------------------------------------------------------

    def _transfer_from_to(self, from_: AccountId, to: AccountId, value: int) -> None:
        """
        Balance move without authorization; callers establish it first.
        All checks run before the first write.
        """
        from_bal = get_int(self._storage, key_balance(from_))
        to_bal = get_int(self._storage, key_balance(to))
        if value > from_bal:
            raise BalanceTooLow(requested=value, available=from_bal)

        new_from = u128_sub(from_bal, value)
        # self-transfer credits the already-debited balance
        new_to = u128_add(new_from if from_ == to else to_bal, value)

        set_int(self._storage, key_balance(from_), new_from)
        set_int(self._storage, key_balance(to), new_to)

        self._events.emit(Transfer(from_=from_, to=to, value=value))
        log.debug("transfer: %s -> %s value=%d", from_.hex(), to.hex(), value)


__all__ = [
    "Ledger",
    "BAL_PREFIX",
    "ALLOW_PREFIX",
    "K_TOTAL",
    "K_INIT",
    "key_balance",
    "key_allow",
]
