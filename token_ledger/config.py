"""
token_ledger.config — runtime flags and numeric caps for the ledger host.

This module centralizes configuration. It has NO third-party deps and is safe
to import very early.

Configuration precedence:
  1) Environment variables (TOKEN_LEDGER_*)
  2) Hardcoded safe defaults below

Key env vars (case-insensitive where boolean):
  - TOKEN_LEDGER_ACCOUNT_ID_BYTES      (int)   default: 32
  - TOKEN_LEDGER_ATOMIC_CALLS          (bool)  default: false
  - TOKEN_LEDGER_MAX_STORAGE_KEY_BYTES (int)   default: 160 (never below the allowance key length)
  - TOKEN_LEDGER_LOG_LEVEL             (str)   default: WARNING

Usage:
    from token_ledger.config import load_config
    CFG = load_config()
    if CFG.atomic_calls: ...
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

# Longest ledger key is b"tok:allow:" + owner + b"|" + spender
_ALLOW_KEY_OVERHEAD = len(b"tok:allow:") + 1


def min_storage_key_bytes(account_id_bytes: int) -> int:
    """Smallest key cap that still fits an allowance key for this account width."""
    return _ALLOW_KEY_OVERHEAD + 2 * account_id_bytes


# ----------------------------- helpers ---------------------------------------


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    return val in ("1", "true", "t", "yes", "y", "on")


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_level(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip().upper()
    return raw if raw in _LOG_LEVELS else default


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class LedgerConfig:
    # Width of an account identifier in bytes
    account_id_bytes: int
    # Journal every host call and revert it on failure
    atomic_calls: bool
    max_storage_key_bytes: int
    log_level: str

    @property
    def log_level_no(self) -> int:
        return logging.getLevelName(self.log_level)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "account_id_bytes": self.account_id_bytes,
            "atomic_calls": self.atomic_calls,
            "max_storage_key_bytes": self.max_storage_key_bytes,
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def load_config() -> LedgerConfig:
    """
    Build and cache a LedgerConfig from environment + safe defaults.
    """
    width = _env_int("TOKEN_LEDGER_ACCOUNT_ID_BYTES", 32, min_v=1, max_v=64)
    return LedgerConfig(
        account_id_bytes=width,
        atomic_calls=_env_bool("TOKEN_LEDGER_ATOMIC_CALLS", False),
        max_storage_key_bytes=_env_int(
            "TOKEN_LEDGER_MAX_STORAGE_KEY_BYTES", 160, min_v=min_storage_key_bytes(width), max_v=1024
        ),
        log_level=_env_level("TOKEN_LEDGER_LOG_LEVEL", "WARNING"),
    )


__all__ = ["LedgerConfig", "load_config", "min_storage_key_bytes"]
