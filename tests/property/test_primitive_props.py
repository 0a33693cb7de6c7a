# -*- coding: utf-8 -*-
"""
Property tests for the primitive registry: every value a primitive accepts
decodes back to itself, and the bytes consumed equal the bytes produced.
"""
from __future__ import annotations

import pytest

from eosio_abi.cursor import uvarint_decode, uvarint_encode
from eosio_abi.primitives import lookup

from . import account_names, assets, given, st, symbol_codes


def _roundtrip(type_name, value):
    codec = lookup(type_name)
    raw = codec.encode(value)
    decoded, consumed = codec.decode_bytes(raw)
    assert consumed == len(raw)
    if codec.fixed_size is not None:
        assert len(raw) == codec.fixed_size
    return decoded, raw


@pytest.mark.parametrize("bits", [8, 16, 32, 64, 128])
@pytest.mark.parametrize("signed", [True, False])
def test_integers_roundtrip(bits, signed):
    lo = -(1 << (bits - 1)) if signed else 0
    hi = (1 << (bits - 1)) - 1 if signed else (1 << bits) - 1
    type_name = f"{'int' if signed else 'uint'}{bits}"

    @given(st.integers(min_value=lo, max_value=hi))
    def check(n):
        assert _roundtrip(type_name, n)[0] == n

    check()


@given(st.integers(min_value=0, max_value=(1 << 64) - 1))
def test_uvarint_roundtrip(n):
    raw = uvarint_encode(n)
    assert uvarint_decode(raw) == (n, len(raw))
    assert raw[-1] < 0x80
    assert all(b & 0x80 for b in raw[:-1])


@given(st.integers(min_value=0, max_value=0xFFFFFFFF))
def test_varuint32_roundtrip(n):
    assert _roundtrip("varuint32", n)[0] == n


@given(st.integers(min_value=-(1 << 31), max_value=(1 << 31) - 1))
def test_varint32_roundtrip(n):
    assert _roundtrip("varint32", n)[0] == n


@given(st.floats(allow_nan=False))
def test_float64_roundtrip(x):
    assert _roundtrip("float64", x)[0] == x


@given(st.floats(width=32, allow_nan=False))
def test_float32_roundtrip(x):
    assert _roundtrip("float32", x)[0] == x


@given(st.text())
def test_string_roundtrip(s):
    decoded, raw = _roundtrip("string", s)
    assert decoded == s
    assert uvarint_decode(raw)[0] == len(s.encode("utf-8"))


@given(st.binary(max_size=512))
def test_bytes_roundtrip(b):
    assert _roundtrip("bytes", b)[0] == b.hex()


@given(st.binary(min_size=32, max_size=32))
def test_checksum256_roundtrip(b):
    assert _roundtrip("checksum256", b)[0] == b.hex()


@given(account_names())
def test_name_roundtrip(n):
    assert _roundtrip("name", n)[0] == n


@given(symbol_codes(), st.integers(min_value=0, max_value=18))
def test_symbol_roundtrip(code, precision):
    text = f"{precision},{code}"
    assert _roundtrip("symbol", text)[0] == text
    assert _roundtrip("symbol_code", code)[0] == code


@given(assets())
def test_asset_roundtrip(a):
    assert _roundtrip("asset", a)[0] == a


@given(assets(), account_names())
def test_extended_asset_roundtrip(a, contract):
    value = {"quantity": a, "contract": contract}
    assert _roundtrip("extended_asset", value)[0] == value


@given(st.integers(min_value=0, max_value=0xFFFFFFFF))
def test_time_point_sec_bytes_are_stable(secs):
    raw = secs.to_bytes(4, "little")
    codec = lookup("time_point_sec")
    text, _ = codec.decode_bytes(raw)
    assert codec.encode(text) == raw


@given(st.integers(min_value=0, max_value=4_102_444_800_000_000))
def test_time_point_bytes_are_stable(us):
    raw = us.to_bytes(8, "little", signed=True)
    codec = lookup("time_point")
    text, _ = codec.decode_bytes(raw)
    assert codec.encode(text) == raw


@given(st.integers(min_value=0, max_value=0xFFFFFFFF))
def test_block_timestamp_bytes_are_stable(slot):
    raw = slot.to_bytes(4, "little")
    codec = lookup("block_timestamp_type")
    text, _ = codec.decode_bytes(raw)
    assert codec.encode(text) == raw


@given(st.sampled_from([0, 1]), st.binary(min_size=33, max_size=33))
def test_public_key_bytes_are_stable(curve, data):
    raw = bytes([curve]) + data
    codec = lookup("public_key")
    text, _ = codec.decode_bytes(raw)
    assert codec.encode(text) == raw
