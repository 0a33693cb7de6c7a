"""
eosio_abi.config: codec feature flags and numeric caps.

The resolver and codec never read the environment on their own: every public
entrypoint accepts an explicit ``config=`` and falls back to
``DEFAULT_CONFIG``. Embedding applications that want environment-driven
settings call :func:`load_config` once at startup and pass the result down.

Configuration precedence for :func:`load_config`:
  1) Environment variables (EOSIO_ABI_*)
  2) Hardcoded safe defaults below

Key env vars (case-insensitive where boolean):
  - EOSIO_ABI_STRICT              (bool)  default: true
  - EOSIO_ABI_MAX_LIST_LENGTH     (int)   default: 1_048_576
  - EOSIO_ABI_MAX_DEPTH           (int)   default: 64
  - EOSIO_ABI_LEGACY_KEY_PREFIX   (bool)  default: false
  - EOSIO_ABI_LOGLEVEL            (str)   default: WARNING

Usage:
    from eosio_abi.config import load_config
    CFG = load_config()
    codec = BinaryCodec(schema, config=CFG)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

__all__ = ["CodecConfig", "DEFAULT_CONFIG", "load_config", "configure_logging"]


# ----------------------------- helpers ---------------------------------------


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "t", "yes", "y", "on")


def _env_int(env: Mapping[str, str], name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = env.get(name)
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


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class CodecConfig:
    # Reject non-canonical input: bool bytes other than 0/1, bytes left over
    # after a top-level decode.
    strict: bool = True

    # Upper bound on a decoded list count; guards against hostile prefixes.
    max_list_length: int = 1_048_576

    # Nesting cap for struct/list recursion in encode and decode.
    max_depth: int = 64

    # Render decoded K1 public keys as "EOS..." instead of "PUB_K1_...".
    legacy_key_prefix: bool = False

    log_level: str = "WARNING"

    def with_overrides(self, **changes: Any) -> "CodecConfig":
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "strict": self.strict,
            "max_list_length": self.max_list_length,
            "max_depth": self.max_depth,
            "legacy_key_prefix": self.legacy_key_prefix,
            "log_level": self.log_level,
        }


DEFAULT_CONFIG = CodecConfig()


def load_config(env: Optional[Mapping[str, str]] = None) -> CodecConfig:
    """
    Build a CodecConfig from environment + safe defaults.

    Passing ``env`` skips ``os.environ`` (handy in tests); without it the
    result is cached for the life of the process.
    """
    if env is None:
        return _load_from_process_env()
    return _build(env)


@lru_cache(maxsize=1)
def _load_from_process_env() -> CodecConfig:
    return _build(os.environ)


def _build(env: Mapping[str, str]) -> CodecConfig:
    level = (env.get("EOSIO_ABI_LOGLEVEL") or "WARNING").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "WARNING"
    return CodecConfig(
        strict=_env_bool(env, "EOSIO_ABI_STRICT", True),
        max_list_length=_env_int(env, "EOSIO_ABI_MAX_LIST_LENGTH", 1_048_576, min_v=1, max_v=1 << 32),
        max_depth=_env_int(env, "EOSIO_ABI_MAX_DEPTH", 64, min_v=4, max_v=1024),
        legacy_key_prefix=_env_bool(env, "EOSIO_ABI_LEGACY_KEY_PREFIX", False),
        log_level=level,
    )


def configure_logging(cfg: CodecConfig = DEFAULT_CONFIG) -> logging.Logger:
    """
    Attach a stderr handler to the ``eosio_abi`` logger at ``cfg.log_level``.

    Idempotent; libraries embedding the codec usually configure logging
    themselves and never call this.
    """
    logger = logging.getLogger("eosio_abi")
    level = getattr(logging, cfg.log_level, logging.WARNING)
    logger.setLevel(level)
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setLevel(level)
        h.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(h)
    return logger
