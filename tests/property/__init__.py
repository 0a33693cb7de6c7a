# -*- coding: utf-8 -*-
"""
tests.property package bootstrap.

Shared configuration for property-based tests (Hypothesis).

What this does on import:
- Registers named Hypothesis profiles (dev/ci/fast/stress).
- Selects the active profile using HYPOTHESIS_PROFILE, otherwise "ci" on CI
  (CI env var present/truthy) and "dev" locally.
- Provides strategies for chain-shaped values (account names, symbol codes,
  assets) that the codec property tests share.

Usage in tests:
    from . import given, st, account_names

    @given(account_names())
    def test_name_roundtrips(n):
        ...

Environment knobs:
- HYPOTHESIS_PROFILE=dev|ci|fast|stress
- CI=true (auto-pick the 'ci' profile if HYPOTHESIS_PROFILE not set)
"""
from __future__ import annotations

import os
from typing import Final, Tuple

from hypothesis import HealthCheck, Verbosity, given, settings
from hypothesis import strategies as st

from eosio_abi.names import format_asset

# ---- profile registry --------------------------------------------------------


def _hc(*items: HealthCheck) -> Tuple[HealthCheck, ...]:
    return items


settings.register_profile(
    "dev",
    settings(
        max_examples=100,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.normal,
        derandomize=False,
    ),
)

settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)

settings.register_profile(
    "fast",
    settings(
        max_examples=25,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow),
        verbosity=Verbosity.normal,
        derandomize=False,
    ),
)

settings.register_profile(
    "stress",
    settings(
        max_examples=1000,
        deadline=None,
        suppress_health_check=_hc(
            HealthCheck.too_slow,
            HealthCheck.filter_too_much,
            HealthCheck.data_too_large,
        ),
        verbosity=Verbosity.normal,
        derandomize=True,
    ),
)


def _env_truthy(name: str) -> bool:
    v = os.getenv(name)
    return (v or "").lower() not in ("", "0", "false", "no", "off")


_active: Final[str] = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev")
settings.load_profile(_active)


def active_profile() -> str:
    """Return the name of the active Hypothesis profile."""
    return _active


# ---- chain-shaped strategies -------------------------------------------------

_NAME_BODY = ".12345abcdefghijklmnopqrstuvwxyz"
_NAME_LAST = ".12345abcdefghij"


@st.composite
def account_names(draw) -> str:
    """Canonical names: no trailing dots, optional 13th char from the 4-bit set."""
    body = draw(st.text(alphabet=_NAME_BODY, min_size=0, max_size=12))
    if len(body) == 12 and draw(st.booleans()):
        body += draw(st.sampled_from(_NAME_LAST))
    return body.rstrip(".")


def symbol_codes():
    return st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ", min_size=1, max_size=7)


@st.composite
def assets(draw) -> str:
    amount = draw(st.integers(min_value=-(1 << 63), max_value=(1 << 63) - 1))
    precision = draw(st.integers(min_value=0, max_value=18))
    return format_asset(amount, precision, draw(symbol_codes()))


__all__ = [
    "st",
    "given",
    "active_profile",
    "account_names",
    "symbol_codes",
    "assets",
]
