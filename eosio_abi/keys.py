"""
Public keys and signatures.

Binary form: one curve byte followed by the raw key material.

    curve 0 = K1 (secp256k1), curve 1 = R1 (secp256r1)
    public_key: curve || 33-byte compressed point
    signature:  curve || 65-byte compact signature

Text form: base58 over ``data || checksum`` where ``checksum`` is the first
four bytes of RIPEMD-160 over ``data || suffix``:

    PUB_K1_<b58>   suffix b"K1"
    PUB_R1_<b58>   suffix b"R1"
    SIG_K1_<b58>   suffix b"K1"
    SIG_R1_<b58>   suffix b"R1"
    EOS<b58>       legacy K1 public key, no suffix

WebAuthn keys (curve 2) carry variable-length data and are not supported.
"""

from __future__ import annotations

from typing import Any, Tuple

from Crypto.Hash import RIPEMD160

from .errors import ValidationError

__all__ = [
    "KEY_TYPES",
    "PUBLIC_KEY_SIZE",
    "SIGNATURE_SIZE",
    "b58_encode",
    "b58_decode",
    "string_to_public_key",
    "public_key_to_string",
    "string_to_signature",
    "signature_to_string",
]

KEY_TYPES = ("K1", "R1")
PUBLIC_KEY_SIZE = 33
SIGNATURE_SIZE = 65

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_B58_INDEX = {c: i for i, c in enumerate(_B58_ALPHABET)}


# ──────────────────────────────────────────────────────────────────────────────
# base58
# ──────────────────────────────────────────────────────────────────────────────


def b58_encode(data: bytes) -> str:
    value = int.from_bytes(data, "big")
    encoded = ""
    while value > 0:
        value, mod = divmod(value, 58)
        encoded = _B58_ALPHABET[mod] + encoded
    # Preserve leading zeroes as "1" characters.
    padding = 0
    for byte in data:
        if byte == 0:
            padding += 1
        else:
            break
    return "1" * padding + encoded


def b58_decode(s: str) -> bytes:
    value = 0
    for c in s:
        try:
            value = value * 58 + _B58_INDEX[c]
        except KeyError as e:
            raise ValidationError("invalid base58 character", char=c) from e
    body = value.to_bytes((value.bit_length() + 7) // 8, "big") if value else b""
    padding = len(s) - len(s.lstrip("1"))
    return b"\x00" * padding + body


def _checksum(data: bytes, suffix: bytes = b"") -> bytes:
    h = RIPEMD160.new()
    h.update(data + suffix)
    return h.digest()[:4]


def _decode_checked(b58: str, size: int, suffix: bytes) -> bytes:
    raw = b58_decode(b58)
    if len(raw) != size + 4:
        raise ValidationError("key material has wrong length", expected=size, got=len(raw) - 4)
    data, check = raw[:size], raw[size:]
    if _checksum(data, suffix) != check:
        raise ValidationError("key checksum mismatch")
    return data


def _curve_of(tag: str) -> int:
    try:
        return KEY_TYPES.index(tag)
    except ValueError as e:
        raise ValidationError("unsupported key type", key_type=tag) from e


# ──────────────────────────────────────────────────────────────────────────────
# public_key
# ──────────────────────────────────────────────────────────────────────────────


def string_to_public_key(s: Any) -> Tuple[int, bytes]:
    """Parse ``PUB_K1_...``, ``PUB_R1_...`` or legacy ``EOS...`` into (curve, data)."""
    if not isinstance(s, str):
        raise ValidationError("public key must be a string", value=repr(s))
    if s.startswith("PUB_"):
        parts = s.split("_", 2)
        if len(parts) != 3:
            raise ValidationError("malformed public key", value=s)
        curve = _curve_of(parts[1])
        return curve, _decode_checked(parts[2], PUBLIC_KEY_SIZE, parts[1].encode())
    if s.startswith("EOS"):
        return 0, _decode_checked(s[3:], PUBLIC_KEY_SIZE, b"")
    raise ValidationError("unrecognized public key format", value=s)


def public_key_to_string(curve: int, data: bytes, *, legacy: bool = False) -> str:
    if curve >= len(KEY_TYPES):
        raise ValidationError("unsupported key type", curve=curve)
    if len(data) != PUBLIC_KEY_SIZE:
        raise ValidationError("public key must be 33 bytes", got=len(data))
    if legacy and curve == 0:
        return "EOS" + b58_encode(data + _checksum(data))
    tag = KEY_TYPES[curve]
    return f"PUB_{tag}_" + b58_encode(data + _checksum(data, tag.encode()))


# ──────────────────────────────────────────────────────────────────────────────
# signature
# ──────────────────────────────────────────────────────────────────────────────


def string_to_signature(s: Any) -> Tuple[int, bytes]:
    if not isinstance(s, str) or not s.startswith("SIG_"):
        raise ValidationError("signature must look like 'SIG_<type>_<b58>'", value=repr(s))
    parts = s.split("_", 2)
    if len(parts) != 3:
        raise ValidationError("malformed signature", value=s)
    curve = _curve_of(parts[1])
    return curve, _decode_checked(parts[2], SIGNATURE_SIZE, parts[1].encode())


def signature_to_string(curve: int, data: bytes) -> str:
    if curve >= len(KEY_TYPES):
        raise ValidationError("unsupported signature type", curve=curve)
    if len(data) != SIGNATURE_SIZE:
        raise ValidationError("signature must be 65 bytes", got=len(data))
    tag = KEY_TYPES[curve]
    return f"SIG_{tag}_" + b58_encode(data + _checksum(data, tag.encode()))
