"""
Binary codec driven by a ResolvedStructSchema.

encode(type_name, value, schema) -> bytes
decode(type_name, data, schema)  -> value

``type_name`` is a primitive, a struct or variant name, or a full type string
with markers (``"name[]"``, ``"asset?"``). Field markers map to byte layouts
as follows:

    T          T
    T[]        LEB128(n) || T × n
    T?         u8 flag (0 absent, 1 present) || T if present
    T[]?       u8 flag || LEB128(n) || T × n      (flag wraps the list)
    T?[]       LEB128(n) || (u8 flag || T if present) × n
    T$         T, or nothing at all when absent at the end of a struct
    variant    LEB128(tag) || member value

Value trees: structs are mappings, lists are sequences, variants are
``Variant(index, value)`` (a plain ``(index_or_member_name, value)`` pair is
accepted on encode).

Decoding a struct whose trailing binary-extension fields are missing from the
buffer succeeds; those keys are simply absent from the returned dict.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, NamedTuple, Union

from .config import DEFAULT_CONFIG, CodecConfig
from .cursor import ByteCursor, uvarint_encode
from .errors import (
    CodecError,
    InvalidVariantTag,
    SchemaFieldMismatch,
    TrailingBytes,
    ValidationError,
)
from .primitives import LEGACY_PUBLIC_KEY, LENIENT_BOOL, Codec, lookup
from .schema import ResolvedStructSchema

__all__ = ["Variant", "BinaryCodec", "encode", "decode", "encode_hex", "decode_hex"]

log = logging.getLogger(__name__)

Source = Union[bytes, bytearray, memoryview, ByteCursor]


class Variant(NamedTuple):
    index: int
    value: Any


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


class BinaryCodec:
    """Encoder/decoder bound to one schema and one config; stateless between calls."""

    def __init__(self, schema: ResolvedStructSchema, *, config: CodecConfig = DEFAULT_CONFIG) -> None:
        self.schema = schema
        self.config = config

    # ── public API ───────────────────────────────────────────────────────────

    def encode(self, type_name: str, value: Any) -> bytes:
        t = self.schema.expand(type_name)
        out = bytearray()
        self._encode_type(t, value, out, "", 0)
        return bytes(out)

    def decode(self, type_name: str, data: Source) -> Any:
        t = self.schema.expand(type_name)
        if isinstance(data, ByteCursor):
            return self._decode_type(t, data, "", 0)
        cur = ByteCursor(data)
        value = self._decode_type(t, cur, "", 0)
        if not cur.exhausted():
            if self.config.strict:
                raise TrailingBytes(
                    f"{cur.remaining} byte(s) left after decoding {type_name!r}",
                    type=type_name,
                    remaining=cur.remaining,
                )
            log.warning("ignoring %d trailing byte(s) after %s", cur.remaining, type_name)
        return value

    def encode_hex(self, type_name: str, value: Any) -> str:
        return self.encode(type_name, value).hex()

    def decode_hex(self, type_name: str, data: str) -> Any:
        try:
            raw = bytes.fromhex(data[2:] if data.startswith(("0x", "0X")) else data)
        except ValueError as e:
            raise ValidationError("invalid hex payload") from e
        return self.decode(type_name, raw)

    # ── encode ───────────────────────────────────────────────────────────────

    def _encode_type(self, t: Any, value: Any, out: bytearray, path: str, depth: int) -> None:
        if t.is_optional:
            if value is None:
                out.append(0)
                return
            out.append(1)
        if t.is_list:
            if isinstance(value, (str, bytes, bytearray, Mapping)) or not isinstance(value, (list, tuple)):
                raise SchemaFieldMismatch(
                    f"{path or t.base_type} expects a list", path=path, got=type(value).__name__
                )
            out += uvarint_encode(len(value))
            for i, item in enumerate(value):
                if t.is_element_optional:
                    if item is None:
                        out.append(0)
                        continue
                    out.append(1)
                self._encode_base(t.base_type, item, out, f"{path}[{i}]", depth + 1)
            return
        self._encode_base(t.base_type, value, out, path, depth)

    def _encode_base(self, base: str, value: Any, out: bytearray, path: str, depth: int) -> None:
        if depth > self.config.max_depth:
            raise ValidationError("value nested deeper than max_depth", path=path, max_depth=self.config.max_depth)
        if base in self.schema:
            if self.schema.is_variant(base):
                self._encode_variant(base, value, out, path, depth)
            else:
                self._encode_struct(base, value, out, path, depth)
            return
        codec = self._primitive(base)
        try:
            out += codec.encode(value)
        except CodecError as e:
            e.data.setdefault("path", path or "<root>")
            e.data.setdefault("type", base)
            raise

    def _encode_struct(self, name: str, value: Any, out: bytearray, path: str, depth: int) -> None:
        if not isinstance(value, Mapping):
            raise SchemaFieldMismatch(
                f"struct {name!r} expects a mapping", struct=name, path=path, got=type(value).__name__
            )
        omitted: str | None = None
        for f in self.schema[name]:
            fpath = _join(path, f.name)
            present = f.name in value
            if f.is_extension:
                if not present:
                    omitted = omitted or f.name
                    continue
                if omitted is not None:
                    raise SchemaFieldMismatch(
                        f"extension field {f.name!r} given while earlier extension {omitted!r} is missing",
                        struct=name,
                        path=fpath,
                    )
            elif not present and not f.is_optional:
                raise SchemaFieldMismatch(
                    f"missing required field {f.name!r} of {name!r}", struct=name, path=fpath
                )
            self._encode_type(f, value.get(f.name), out, fpath, depth + 1)

    def _encode_variant(self, name: str, value: Any, out: bytearray, path: str, depth: int) -> None:
        slots = self.schema[name]
        if not isinstance(value, (tuple, list)) or len(value) != 2:
            raise SchemaFieldMismatch(
                f"variant {name!r} expects a (tag, value) pair", variant=name, path=path
            )
        tag, inner = value
        if isinstance(tag, str):
            index = next((i for i, s in enumerate(slots) if s.name == tag), None)
            if index is None:
                raise SchemaFieldMismatch(
                    f"{tag!r} is not a member of variant {name!r}", variant=name, path=path
                )
        elif isinstance(tag, int) and not isinstance(tag, bool) and 0 <= tag < len(slots):
            index = tag
        else:
            raise SchemaFieldMismatch(
                f"bad tag {tag!r} for variant {name!r}", variant=name, path=path, members=len(slots)
            )
        out += uvarint_encode(index)
        slot = slots[index]
        self._encode_type(slot, inner, out, f"{path}<{slot.name}>", depth + 1)

    # ── decode ───────────────────────────────────────────────────────────────

    def _decode_type(self, t: Any, cur: ByteCursor, path: str, depth: int) -> Any:
        if t.is_optional and not self._read_flag(cur, path):
            return None
        if t.is_list:
            n = cur.read_uvarint()
            if n > self.config.max_list_length:
                raise ValidationError(
                    "list length exceeds max_list_length", path=path, length=n, limit=self.config.max_list_length
                )
            items: List[Any] = []
            for i in range(n):
                ipath = f"{path}[{i}]"
                if t.is_element_optional and not self._read_flag(cur, ipath):
                    items.append(None)
                    continue
                items.append(self._decode_base(t.base_type, cur, ipath, depth + 1))
            return items
        return self._decode_base(t.base_type, cur, path, depth)

    def _decode_base(self, base: str, cur: ByteCursor, path: str, depth: int) -> Any:
        if depth > self.config.max_depth:
            raise ValidationError("value nested deeper than max_depth", path=path, max_depth=self.config.max_depth)
        if base in self.schema:
            if self.schema.is_variant(base):
                return self._decode_variant(base, cur, path, depth)
            return self._decode_struct(base, cur, path, depth)
        codec = self._primitive(base)
        try:
            return codec.decode(cur)
        except CodecError as e:
            e.data.setdefault("path", path or "<root>")
            e.data.setdefault("type", base)
            raise

    def _decode_struct(self, name: str, cur: ByteCursor, path: str, depth: int) -> dict:
        result: dict = {}
        for f in self.schema[name]:
            if f.is_extension and cur.exhausted():
                continue
            result[f.name] = self._decode_type(f, cur, _join(path, f.name), depth + 1)
        return result

    def _decode_variant(self, name: str, cur: ByteCursor, path: str, depth: int) -> Variant:
        slots = self.schema[name]
        offset = cur.pos
        tag = cur.read_uvarint()
        if tag >= len(slots):
            raise InvalidVariantTag(
                f"tag {tag} out of range for variant {name!r}",
                variant=name,
                tag=tag,
                members=len(slots),
                offset=offset,
            )
        slot = slots[tag]
        return Variant(tag, self._decode_type(slot, cur, f"{path}<{slot.name}>", depth + 1))

    # ── helpers ──────────────────────────────────────────────────────────────

    def _read_flag(self, cur: ByteCursor, path: str) -> bool:
        flag = cur.read_byte()
        if flag not in (0, 1) and self.config.strict:
            raise ValidationError("invalid optional flag", path=path, flag=flag, offset=cur.pos - 1)
        return flag != 0

    def _primitive(self, base: str) -> Codec:
        if base == "public_key" and self.config.legacy_key_prefix:
            return LEGACY_PUBLIC_KEY
        if base == "bool" and not self.config.strict:
            return LENIENT_BOOL
        return lookup(base)


def encode(
    type_name: str, value: Any, schema: ResolvedStructSchema, *, config: CodecConfig = DEFAULT_CONFIG
) -> bytes:
    return BinaryCodec(schema, config=config).encode(type_name, value)


def decode(
    type_name: str, data: Source, schema: ResolvedStructSchema, *, config: CodecConfig = DEFAULT_CONFIG
) -> Any:
    return BinaryCodec(schema, config=config).decode(type_name, data)


def encode_hex(
    type_name: str, value: Any, schema: ResolvedStructSchema, *, config: CodecConfig = DEFAULT_CONFIG
) -> str:
    return BinaryCodec(schema, config=config).encode_hex(type_name, value)


def decode_hex(
    type_name: str, data: str, schema: ResolvedStructSchema, *, config: CodecConfig = DEFAULT_CONFIG
) -> Any:
    return BinaryCodec(schema, config=config).decode_hex(type_name, data)
