"""
Account names, symbols and assets.

Names
-----
A name is a uint64 holding up to 13 characters from ``.12345abcdefghijklmnopqrstuvwxyz``.
The first 12 characters take 5 bits each starting at the most significant
end; a 13th character takes the low 4 bits and so is limited to ``.1-5a-j``.
Trailing dots are not significant.

Symbols and assets
------------------
- symbol_code: up to 7 uppercase letters packed little-endian into a uint64.
- symbol:      precision byte in the low 8 bits, symbol_code above it
               (text form ``"4,EOS"``).
- asset:       int64 amount followed by a symbol (text form ``"1.0000 EOS"``).
"""

from __future__ import annotations

import re
from typing import Any, Dict, Tuple

from .errors import ValidationError

__all__ = [
    "NAME_CHARMAP",
    "name_to_int",
    "int_to_name",
    "symbol_code_to_int",
    "int_to_symbol_code",
    "parse_symbol",
    "format_symbol",
    "parse_asset",
    "format_asset",
    "coerce_extended_asset",
]

NAME_CHARMAP = ".12345abcdefghijklmnopqrstuvwxyz"

_NAME_RE = re.compile(r"^[.1-5a-z]{0,12}[.1-5a-j]?$")
_SYMBOL_CODE_RE = re.compile(r"^[A-Z]{1,7}$")
_ASSET_RE = re.compile(r"^(-?)(\d+)(?:\.(\d+))? ([A-Z]{1,7})$")

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_MAX_PRECISION = 18


def _char_value(c: str) -> int:
    if "a" <= c <= "z":
        return ord(c) - ord("a") + 6
    if "1" <= c <= "5":
        return ord(c) - ord("1") + 1
    return 0


# ──────────────────────────────────────────────────────────────────────────────
# name
# ──────────────────────────────────────────────────────────────────────────────


def name_to_int(s: Any) -> int:
    if not isinstance(s, str):
        raise ValidationError("name must be a string", value=repr(s))
    if len(s) > 13 or not _NAME_RE.match(s):
        raise ValidationError("invalid name", value=s)
    value = 0
    for i in range(13):
        c = _char_value(s[i]) if i < len(s) else 0
        if i < 12:
            value |= (c & 0x1F) << (64 - 5 * (i + 1))
        else:
            value |= c & 0x0F
    return value


def int_to_name(value: int) -> str:
    chars = ["."] * 13
    tmp = value
    for i in range(13):
        if i == 0:
            chars[12] = NAME_CHARMAP[tmp & 0x0F]
            tmp >>= 4
        else:
            chars[12 - i] = NAME_CHARMAP[tmp & 0x1F]
            tmp >>= 5
    return "".join(chars).rstrip(".")


# ──────────────────────────────────────────────────────────────────────────────
# symbol_code / symbol
# ──────────────────────────────────────────────────────────────────────────────


def symbol_code_to_int(code: Any) -> int:
    if not isinstance(code, str) or not _SYMBOL_CODE_RE.match(code):
        raise ValidationError("symbol code must be 1-7 uppercase letters", value=repr(code))
    value = 0
    for i, c in enumerate(code):
        value |= ord(c) << (8 * i)
    return value


def int_to_symbol_code(value: int) -> str:
    out = []
    while value:
        c = value & 0xFF
        if not (ord("A") <= c <= ord("Z")):
            raise ValidationError("invalid symbol code byte", byte=c)
        out.append(chr(c))
        value >>= 8
    if len(out) > 7:
        raise ValidationError("symbol code too long")
    return "".join(out)


def parse_symbol(s: Any) -> Tuple[int, str]:
    """``"4,EOS"`` -> ``(4, "EOS")``."""
    if not isinstance(s, str) or "," not in s:
        raise ValidationError("symbol must look like '<precision>,<CODE>'", value=repr(s))
    precision_s, code = s.split(",", 1)
    try:
        precision = int(precision_s)
    except ValueError as e:
        raise ValidationError("invalid symbol precision", value=s) from e
    if not 0 <= precision <= _MAX_PRECISION:
        raise ValidationError("symbol precision out of range", value=s)
    symbol_code_to_int(code)
    return precision, code


def format_symbol(precision: int, code: str) -> str:
    return f"{precision},{code}"


# ──────────────────────────────────────────────────────────────────────────────
# asset
# ──────────────────────────────────────────────────────────────────────────────


def parse_asset(s: Any) -> Tuple[int, int, str]:
    """``"1.0000 EOS"`` -> ``(10000, 4, "EOS")``; precision is the fraction width."""
    if not isinstance(s, str):
        raise ValidationError("asset must be a string", value=repr(s))
    m = _ASSET_RE.match(s.strip())
    if m is None:
        raise ValidationError("asset must look like '<amount> <CODE>'", value=s)
    sign, whole, frac, code = m.groups()
    frac = frac or ""
    if len(frac) > _MAX_PRECISION:
        raise ValidationError("asset precision out of range", value=s)
    amount = int(whole + frac)
    if sign:
        amount = -amount
    if not _INT64_MIN <= amount <= _INT64_MAX:
        raise ValidationError("asset amount out of int64 range", value=s)
    return amount, len(frac), code


def format_asset(amount: int, precision: int, code: str) -> str:
    sign = "-" if amount < 0 else ""
    digits = str(abs(amount)).rjust(precision + 1, "0")
    if precision:
        body = f"{digits[:-precision]}.{digits[-precision:]}"
    else:
        body = digits
    return f"{sign}{body} {code}"


def coerce_extended_asset(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict) or set(value) != {"quantity", "contract"}:
        raise ValidationError(
            "extended_asset must be a mapping with 'quantity' and 'contract'", value=repr(value)
        )
    return {"quantity": value["quantity"], "contract": value["contract"]}
