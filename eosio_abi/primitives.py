"""
Primitive type registry.

Every built-in ABI type maps to a :class:`Codec` with a fixed or
self-delimiting binary layout. The table is a read-only mapping; absence
from it is how the resolver decides a field refers to a struct or variant.

Layouts
-------
- bool:                  1 byte, 0x00 or 0x01
- intN / uintN:          N/8 bytes, two's complement, little-endian
- varuint32:             unsigned LEB128
- varint32:              zig-zag, then unsigned LEB128
- float32 / float64:     IEEE-754 little-endian
- float128:              16 raw bytes (hex in Python)
- time_point:            int64 microseconds since the Unix epoch
- time_point_sec:        uint32 seconds since the Unix epoch
- block_timestamp_type:  uint32 half-second slots since 2000-01-01T00:00:00
- name / symbol_code:    uint64 (see eosio_abi.names)
- symbol:                uint8 precision || 7-byte code
- asset:                 int64 amount || symbol
- extended_asset:        asset || name
- bytes / string:        LEB128(len) || raw / UTF-8
- checksumN:             N/8 raw bytes (hex in Python)
- public_key/signature:  curve byte || key material (see eosio_abi.keys)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Any, Callable, Mapping, Tuple

from . import keys, names
from .cursor import ByteCursor, uvarint_encode
from .errors import UnknownPrimitiveType, ValidationError

__all__ = [
    "Codec",
    "PRIMITIVES",
    "lookup",
    "is_primitive",
    "LEGACY_PUBLIC_KEY",
    "LENIENT_BOOL",
    "coerce_bytes",
]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_BLOCK_TIMESTAMP_EPOCH_MS = 946_684_800_000


@dataclass(frozen=True)
class Codec:
    """Encoder/decoder pair for one primitive type."""

    name: str
    encode_fn: Callable[[Any], bytes]
    decode_fn: Callable[[ByteCursor], Any]
    fixed_size: int | None = None

    def encode(self, value: Any) -> bytes:
        return self.encode_fn(value)

    def decode(self, cursor: ByteCursor) -> Any:
        return self.decode_fn(cursor)

    def decode_bytes(self, data: bytes) -> Tuple[Any, int]:
        """Decode one value from the start of ``data``; returns (value, bytes_consumed)."""
        cur = ByteCursor(data)
        value = self.decode_fn(cur)
        return value, cur.pos


# ──────────────────────────────────────────────────────────────────────────────
# Scalar coercion helpers
# ──────────────────────────────────────────────────────────────────────────────


def coerce_bytes(value: Any, *, fixed_len: int | None = None) -> bytes:
    """Accept bytes, bytearray or a hex string (optional 0x prefix)."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        b = bytes(value)
    elif isinstance(value, str):
        hex_part = value[2:] if value.startswith(("0x", "0X")) else value
        if len(hex_part) % 2:
            raise ValidationError("hex string must have an even number of digits")
        try:
            b = bytes.fromhex(hex_part)
        except ValueError as e:
            raise ValidationError("invalid hex", value=value) from e
    else:
        raise ValidationError("bytes must be bytes, bytearray, or hex string", value=repr(value))
    if fixed_len is not None and len(b) != fixed_len:
        raise ValidationError(f"expected exactly {fixed_len} bytes", got=len(b))
    return b


def _coerce_int(value: Any, bits: int, signed: bool) -> int:
    if isinstance(value, bool):
        raise ValidationError("integer expected, got bool")
    if isinstance(value, str):
        # 64/128-bit values travel as strings in the chain's JSON form.
        try:
            value = int(value, 10)
        except ValueError as e:
            raise ValidationError("invalid integer string", value=value) from e
    if not isinstance(value, int):
        raise ValidationError("integer expected", value=repr(value))
    min_v = -(1 << (bits - 1)) if signed else 0
    max_v = (1 << (bits - 1)) - 1 if signed else (1 << bits) - 1
    if value < min_v or value > max_v:
        kind = "int" if signed else "uint"
        raise ValidationError(f"{kind}{bits} out of range", value=value)
    return value


# ──────────────────────────────────────────────────────────────────────────────
# Integers
# ──────────────────────────────────────────────────────────────────────────────


def _int_codec(type_name: str, bits: int, signed: bool) -> Codec:
    size = bits // 8

    def enc(value: Any) -> bytes:
        return _coerce_int(value, bits, signed).to_bytes(size, "little", signed=signed)

    def dec(cur: ByteCursor) -> int:
        return int.from_bytes(cur.read(size), "little", signed=signed)

    return Codec(type_name, enc, dec, size)


def _enc_varuint32(value: Any) -> bytes:
    return uvarint_encode(_coerce_int(value, 32, False))


def _dec_varuint32(cur: ByteCursor) -> int:
    v = cur.read_uvarint()
    if v > 0xFFFFFFFF:
        raise ValidationError("varuint32 overflow", value=v)
    return v


def _enc_varint32(value: Any) -> bytes:
    v = _coerce_int(value, 32, True)
    return uvarint_encode(((v << 1) ^ (v >> 31)) & 0xFFFFFFFF)


def _dec_varint32(cur: ByteCursor) -> int:
    v = _dec_varuint32(cur)
    return (v >> 1) ^ -(v & 1)


# ──────────────────────────────────────────────────────────────────────────────
# Bool / floats
# ──────────────────────────────────────────────────────────────────────────────


def _enc_bool(value: Any) -> bytes:
    if isinstance(value, bool):
        return b"\x01" if value else b"\x00"
    if value in (0, 1) and isinstance(value, int):
        return bytes([value])
    raise ValidationError("bool must be True/False", value=repr(value))


def _dec_bool(cur: ByteCursor) -> bool:
    b = cur.read_byte()
    if b not in (0, 1):
        raise ValidationError("invalid boolean byte", byte=b)
    return b == 1


def _float_codec(type_name: str, fmt: str) -> Codec:
    size = struct.calcsize(fmt)

    def enc(value: Any) -> bytes:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError("float expected", value=repr(value))
        try:
            return struct.pack(fmt, value)
        except (OverflowError, struct.error) as e:
            raise ValidationError(f"{type_name} out of range", value=value) from e

    def dec(cur: ByteCursor) -> float:
        (v,) = struct.unpack(fmt, cur.read(size))
        return v

    return Codec(type_name, enc, dec, size)


def _fixed_bytes_codec(type_name: str, size: int) -> Codec:
    def enc(value: Any) -> bytes:
        return coerce_bytes(value, fixed_len=size)

    def dec(cur: ByteCursor) -> str:
        return cur.read(size).hex()

    return Codec(type_name, enc, dec, size)


# ──────────────────────────────────────────────────────────────────────────────
# bytes / string
# ──────────────────────────────────────────────────────────────────────────────


def _enc_bytes(value: Any) -> bytes:
    b = coerce_bytes(value)
    return uvarint_encode(len(b)) + b


def _dec_bytes(cur: ByteCursor) -> str:
    n = cur.read_uvarint()
    return cur.read(n).hex()


def _enc_string(value: Any) -> bytes:
    if not isinstance(value, str):
        raise ValidationError("string expected", value=repr(value))
    b = value.encode("utf-8")
    return uvarint_encode(len(b)) + b


def _dec_string(cur: ByteCursor) -> str:
    n = cur.read_uvarint()
    raw = cur.read(n)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError("string is not valid UTF-8", offset=cur.pos - n) from e


# ──────────────────────────────────────────────────────────────────────────────
# Time
# ──────────────────────────────────────────────────────────────────────────────


def _parse_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        s = value[:-1] if value.endswith("Z") else value
        try:
            dt = datetime.fromisoformat(s)
        except ValueError as e:
            raise ValidationError("invalid ISO-8601 time", value=value) from e
    else:
        raise ValidationError("time must be an ISO-8601 string or datetime", value=repr(value))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _micros_since_epoch(dt: datetime) -> int:
    delta = dt - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds


def _format_time(us: int, *, with_fraction: bool = True) -> str:
    try:
        dt = _EPOCH + timedelta(microseconds=us)
    except OverflowError as e:
        raise ValidationError("time outside the representable range", value=us) from e
    base = dt.strftime("%Y-%m-%dT%H:%M:%S")
    if not with_fraction:
        return base
    if dt.microsecond % 1000:
        return f"{base}.{dt.microsecond:06d}"
    return f"{base}.{dt.microsecond // 1000:03d}"


def _enc_time_point(value: Any) -> bytes:
    us = _micros_since_epoch(_parse_time(value))
    return _coerce_int(us, 64, True).to_bytes(8, "little", signed=True)


def _dec_time_point(cur: ByteCursor) -> str:
    return _format_time(int.from_bytes(cur.read(8), "little", signed=True))


def _enc_time_point_sec(value: Any) -> bytes:
    us = _micros_since_epoch(_parse_time(value))
    return _coerce_int(us // 1_000_000, 32, False).to_bytes(4, "little")


def _dec_time_point_sec(cur: ByteCursor) -> str:
    secs = int.from_bytes(cur.read(4), "little")
    return _format_time(secs * 1_000_000, with_fraction=False)


def _enc_block_timestamp(value: Any) -> bytes:
    ms = _micros_since_epoch(_parse_time(value)) // 1000
    slot = round((ms - _BLOCK_TIMESTAMP_EPOCH_MS) / 500)
    return _coerce_int(slot, 32, False).to_bytes(4, "little")


def _dec_block_timestamp(cur: ByteCursor) -> str:
    slot = int.from_bytes(cur.read(4), "little")
    return _format_time((slot * 500 + _BLOCK_TIMESTAMP_EPOCH_MS) * 1000)


# ──────────────────────────────────────────────────────────────────────────────
# name / symbol / asset
# ──────────────────────────────────────────────────────────────────────────────


def _enc_name(value: Any) -> bytes:
    return names.name_to_int(value).to_bytes(8, "little")


def _dec_name(cur: ByteCursor) -> str:
    return names.int_to_name(int.from_bytes(cur.read(8), "little"))


def _enc_symbol_code(value: Any) -> bytes:
    return names.symbol_code_to_int(value).to_bytes(8, "little")


def _dec_symbol_code(cur: ByteCursor) -> str:
    return names.int_to_symbol_code(int.from_bytes(cur.read(8), "little"))


def _pack_symbol(precision: int, code: str) -> bytes:
    return bytes([precision]) + names.symbol_code_to_int(code).to_bytes(7, "little")


def _enc_symbol(value: Any) -> bytes:
    return _pack_symbol(*names.parse_symbol(value))


def _read_symbol(cur: ByteCursor) -> Tuple[int, str]:
    precision = cur.read_byte()
    code = names.int_to_symbol_code(int.from_bytes(cur.read(7), "little"))
    return precision, code


def _dec_symbol(cur: ByteCursor) -> str:
    return names.format_symbol(*_read_symbol(cur))


def _enc_asset(value: Any) -> bytes:
    amount, precision, code = names.parse_asset(value)
    return amount.to_bytes(8, "little", signed=True) + _pack_symbol(precision, code)


def _dec_asset(cur: ByteCursor) -> str:
    amount = int.from_bytes(cur.read(8), "little", signed=True)
    precision, code = _read_symbol(cur)
    return names.format_asset(amount, precision, code)


def _enc_extended_asset(value: Any) -> bytes:
    v = names.coerce_extended_asset(value)
    return _enc_asset(v["quantity"]) + _enc_name(v["contract"])


def _dec_extended_asset(cur: ByteCursor) -> dict:
    return {"quantity": _dec_asset(cur), "contract": _dec_name(cur)}


# ──────────────────────────────────────────────────────────────────────────────
# Keys / signatures
# ──────────────────────────────────────────────────────────────────────────────


def _enc_public_key(value: Any) -> bytes:
    curve, data = keys.string_to_public_key(value)
    return bytes([curve]) + data


def _dec_public_key(cur: ByteCursor, *, legacy: bool = False) -> str:
    curve = cur.read_byte()
    return keys.public_key_to_string(curve, cur.read(keys.PUBLIC_KEY_SIZE), legacy=legacy)


def _dec_public_key_legacy(cur: ByteCursor) -> str:
    return _dec_public_key(cur, legacy=True)


def _enc_signature(value: Any) -> bytes:
    curve, data = keys.string_to_signature(value)
    return bytes([curve]) + data


def _dec_signature(cur: ByteCursor) -> str:
    curve = cur.read_byte()
    return keys.signature_to_string(curve, cur.read(keys.SIGNATURE_SIZE))


# ──────────────────────────────────────────────────────────────────────────────
# Registry
# ──────────────────────────────────────────────────────────────────────────────


def _build_registry() -> Mapping[str, Codec]:
    table = {
        "bool": Codec("bool", _enc_bool, _dec_bool, 1),
        "varuint32": Codec("varuint32", _enc_varuint32, _dec_varuint32),
        "varint32": Codec("varint32", _enc_varint32, _dec_varint32),
        "float32": _float_codec("float32", "<f"),
        "float64": _float_codec("float64", "<d"),
        "float128": _fixed_bytes_codec("float128", 16),
        "time_point": Codec("time_point", _enc_time_point, _dec_time_point, 8),
        "time_point_sec": Codec("time_point_sec", _enc_time_point_sec, _dec_time_point_sec, 4),
        "block_timestamp_type": Codec(
            "block_timestamp_type", _enc_block_timestamp, _dec_block_timestamp, 4
        ),
        "name": Codec("name", _enc_name, _dec_name, 8),
        "bytes": Codec("bytes", _enc_bytes, _dec_bytes),
        "string": Codec("string", _enc_string, _dec_string),
        "checksum160": _fixed_bytes_codec("checksum160", 20),
        "checksum256": _fixed_bytes_codec("checksum256", 32),
        "checksum512": _fixed_bytes_codec("checksum512", 64),
        "public_key": Codec("public_key", _enc_public_key, _dec_public_key, 34),
        "signature": Codec("signature", _enc_signature, _dec_signature, 66),
        "symbol": Codec("symbol", _enc_symbol, _dec_symbol, 8),
        "symbol_code": Codec("symbol_code", _enc_symbol_code, _dec_symbol_code, 8),
        "asset": Codec("asset", _enc_asset, _dec_asset, 16),
        "extended_asset": Codec("extended_asset", _enc_extended_asset, _dec_extended_asset, 24),
    }
    for bits in (8, 16, 32, 64, 128):
        table[f"int{bits}"] = _int_codec(f"int{bits}", bits, True)
        table[f"uint{bits}"] = _int_codec(f"uint{bits}", bits, False)
    return MappingProxyType(table)


PRIMITIVES: Mapping[str, Codec] = _build_registry()

LEGACY_PUBLIC_KEY = Codec("public_key", _enc_public_key, _dec_public_key_legacy, 34)


def _dec_bool_lenient(cur: ByteCursor) -> bool:
    return cur.read_byte() != 0


LENIENT_BOOL = Codec("bool", _enc_bool, _dec_bool_lenient, 1)


def is_primitive(name: str) -> bool:
    return name in PRIMITIVES


def lookup(name: str) -> Codec:
    """Return the codec for a built-in type; raise UnknownPrimitiveType otherwise."""
    try:
        return PRIMITIVES[name]
    except KeyError:
        raise UnknownPrimitiveType(f"not a primitive type: {name!r}", type=name) from None
