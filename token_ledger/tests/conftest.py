# -*- coding: utf-8 -*-
"""
token_ledger.tests.conftest
===========================

Pytest fixtures for the ledger tests.

- Deterministic 32-byte accounts (alice, bob, charlie, dave) derived with SHA3.
- A fresh in-memory ledger with 10_000 units minted to alice, plus the sink
  that recorded its events.
- Configuration cache reset so env overrides in one test never leak.
"""
from __future__ import annotations

import hashlib
import os
from typing import Dict, Tuple

import pytest

from token_ledger.config import load_config
from token_ledger.ledger import Ledger
from token_ledger.runtime.events_api import EventSink
from token_ledger.runtime.storage_api import MemoryBackend

# Keep dict/set hash-iteration stable.
os.environ.setdefault("PYTHONHASHSEED", "0")

INITIAL_SUPPLY = 10_000


def det_account(tag: str) -> bytes:
    """Stable 32-byte account id from a tag."""
    return hashlib.sha3_256(b"token-ledger-test|" + tag.encode("utf-8")).digest()


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch: pytest.MonkeyPatch):
    for k in list(os.environ):
        if k.startswith("TOKEN_LEDGER_"):
            monkeypatch.delenv(k, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def accounts() -> Dict[str, bytes]:
    return {name: det_account(name) for name in ("alice", "bob", "charlie", "dave")}


@pytest.fixture
def alice(accounts) -> bytes:
    return accounts["alice"]


@pytest.fixture
def bob(accounts) -> bytes:
    return accounts["bob"]


@pytest.fixture
def charlie(accounts) -> bytes:
    return accounts["charlie"]


@pytest.fixture
def deployed(alice) -> Tuple[Ledger, EventSink, MemoryBackend]:
    storage = MemoryBackend()
    sink = EventSink()
    ledger = Ledger.new(INITIAL_SUPPLY, caller=alice, storage=storage, events=sink)
    return ledger, sink, storage


@pytest.fixture
def ledger(deployed) -> Ledger:
    return deployed[0]


@pytest.fixture
def sink(deployed) -> EventSink:
    return deployed[1]
