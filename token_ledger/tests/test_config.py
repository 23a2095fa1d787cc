from __future__ import annotations

import logging

from token_ledger.config import load_config, min_storage_key_bytes
from token_ledger.ledger import Ledger, key_allow
from token_ledger.runtime.context import to_account_id


def test_defaults():
    cfg = load_config()
    assert cfg.account_id_bytes == 32
    assert cfg.atomic_calls is False
    assert cfg.max_storage_key_bytes == 160
    assert cfg.log_level == "WARNING"
    assert cfg.log_level_no == logging.WARNING
    assert set(cfg.as_dict()) == {"account_id_bytes", "atomic_calls", "max_storage_key_bytes", "log_level"}


def test_env_overrides_and_clamping(monkeypatch):
    monkeypatch.setenv("TOKEN_LEDGER_ACCOUNT_ID_BYTES", "20")
    monkeypatch.setenv("TOKEN_LEDGER_ATOMIC_CALLS", "yes")
    monkeypatch.setenv("TOKEN_LEDGER_MAX_STORAGE_KEY_BYTES", "99999")
    monkeypatch.setenv("TOKEN_LEDGER_LOG_LEVEL", "debug")
    load_config.cache_clear()

    cfg = load_config()
    assert cfg.account_id_bytes == 20
    assert cfg.atomic_calls is True
    assert cfg.max_storage_key_bytes == 1024
    assert cfg.log_level == "DEBUG"
    assert to_account_id(b"\x01" * 20) == b"\x01" * 20


def test_garbage_env_falls_back(monkeypatch):
    monkeypatch.setenv("TOKEN_LEDGER_ACCOUNT_ID_BYTES", "many")
    monkeypatch.setenv("TOKEN_LEDGER_LOG_LEVEL", "chatty")
    load_config.cache_clear()

    cfg = load_config()
    assert cfg.account_id_bytes == 32
    assert cfg.log_level == "WARNING"


def test_key_cap_never_drops_below_allowance_key(monkeypatch, alice, bob):
    monkeypatch.setenv("TOKEN_LEDGER_MAX_STORAGE_KEY_BYTES", "32")
    load_config.cache_clear()

    cfg = load_config()
    assert cfg.max_storage_key_bytes == min_storage_key_bytes(32) == len(key_allow(alice, bob))

    ledger = Ledger.new(10, caller=alice)
    ledger.approve(alice, bob, 5)
    ledger.transfer_from(bob, alice, bob, 5)
    assert ledger.balance_of(bob) == 5


def test_key_cap_floor_follows_account_width(monkeypatch):
    monkeypatch.setenv("TOKEN_LEDGER_ACCOUNT_ID_BYTES", "64")
    monkeypatch.setenv("TOKEN_LEDGER_MAX_STORAGE_KEY_BYTES", "100")
    load_config.cache_clear()

    assert load_config().max_storage_key_bytes == len(b"tok:allow:") + 1 + 128
