# -*- coding: utf-8 -*-
"""
Property-test package bootstrap.

Registers the Hypothesis profiles used by the ledger property tests and picks
one on import:

- HYPOTHESIS_PROFILE=dev|ci|fast   explicit choice
- otherwise "ci" when CI is truthy, "dev" locally

Per-test overrides go through @settings(...) on the test itself.
"""
from __future__ import annotations

import os
from typing import Final

from hypothesis import HealthCheck, Verbosity, settings

# Deadlines are off: ledger ops are cheap but CI machines are not.
settings.register_profile(
    "dev",
    settings(
        max_examples=100,
        deadline=None,
        suppress_health_check=(HealthCheck.too_slow,),
        verbosity=Verbosity.normal,
    ),
)

settings.register_profile(
    "ci",
    settings(
        max_examples=300,
        deadline=None,
        suppress_health_check=(HealthCheck.too_slow,),
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)

settings.register_profile(
    "fast",
    settings(max_examples=25, deadline=None),
)


def _env_truthy(name: str) -> bool:
    v = os.getenv(name)
    return (v or "").lower() not in ("", "0", "false", "no", "off")


_active: Final[str] = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev")
settings.load_profile(_active)
