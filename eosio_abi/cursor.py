"""
Byte cursor and unsigned varints shared by every codec.

Lengths, counts and variant tags on the wire are unsigned LEB128:
7 payload bits per byte, least-significant group first, high bit set on
every byte except the last.
"""

from __future__ import annotations

from typing import Tuple, Union

from .errors import TruncatedBuffer, ValidationError

__all__ = ["ByteCursor", "uvarint_encode", "uvarint_decode"]

BytesLike = Union[bytes, bytearray, memoryview]


# ──────────────────────────────────────────────────────────────────────────────
# Varint (unsigned LEB128)
# ──────────────────────────────────────────────────────────────────────────────


def uvarint_encode(n: int) -> bytes:
    """
    Unsigned LEB128 encoding.

    - n must be >= 0
    - returns minimal-length representation
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise ValidationError("uvarint value must be int", value=repr(n))
    if n < 0:
        raise ValidationError("uvarint cannot encode negative values", value=n)
    out = bytearray()
    while True:
        b = n & 0x7F
        n >>= 7
        if n:
            out.append(b | 0x80)
        else:
            out.append(b)
            break
    return bytes(out)


def uvarint_decode(buf: BytesLike, offset: int = 0) -> Tuple[int, int]:
    """
    Decode unsigned LEB128 at buf[offset:].
    Returns (value, new_offset).
    """
    n = 0
    shift = 0
    i = offset
    while i < len(buf):
        b = buf[i]
        i += 1
        n |= (b & 0x7F) << shift
        if (b & 0x80) == 0:
            return n, i
        shift += 7
        if shift > 70:  # a u64 needs at most 10 groups
            raise ValidationError("uvarint too large or malformed", offset=offset)
    raise TruncatedBuffer("truncated uvarint", offset=offset, size=len(buf))


# ──────────────────────────────────────────────────────────────────────────────
# Cursor
# ──────────────────────────────────────────────────────────────────────────────


class ByteCursor:
    """Forward-only reader over an immutable byte buffer."""

    __slots__ = ("_buf", "pos")

    def __init__(self, data: BytesLike, pos: int = 0) -> None:
        self._buf = bytes(data)
        self.pos = pos

    def __len__(self) -> int:
        return len(self._buf)

    def __repr__(self) -> str:
        return f"ByteCursor(pos={self.pos}, size={len(self._buf)})"

    @property
    def remaining(self) -> int:
        return len(self._buf) - self.pos

    def exhausted(self) -> bool:
        return self.pos >= len(self._buf)

    def read(self, n: int) -> bytes:
        end = self.pos + n
        if n < 0 or end > len(self._buf):
            raise TruncatedBuffer(
                "truncated payload", offset=self.pos, wanted=n, remaining=self.remaining
            )
        out = self._buf[self.pos:end]
        self.pos = end
        return out

    def read_byte(self) -> int:
        return self.read(1)[0]

    def read_uvarint(self) -> int:
        value, self.pos = uvarint_decode(self._buf, self.pos)
        return value

    def rest(self) -> bytes:
        return self._buf[self.pos:]
