"""token_ledger.version — version string for the package and the CLI.

The first available source wins:
- TOKEN_LEDGER_VERSION (lets CI stamp builds without reinstalling)
- metadata of the installed `token-ledger` distribution
- BASE_VERSION + '+dev' for a source checkout
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata

# Bump on changes to storage layout, event encoding or receipt shape.
BASE_VERSION = "0.1.0"
DIST_NAME = "token-ledger"


@lru_cache(maxsize=1)
def compute_version() -> str:
    stamped = os.getenv("TOKEN_LEDGER_VERSION")
    if stamped:
        return stamped
    try:
        installed = metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        installed = None
    return installed or f"{BASE_VERSION}+dev"


__version__ = compute_version()

__all__ = ["__version__", "BASE_VERSION", "DIST_NAME", "compute_version"]
