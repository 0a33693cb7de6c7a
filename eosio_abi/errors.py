"""
eosio_abi.errors
----------------

A small, consistent error system for the ABI resolver and binary codec.

Design goals
------------
- One root `AbiError` with a machine-friendly `code` and optional `data`.
- Two families: *resolution* failures (the ABI itself is malformed) and
  *codec* failures (a value or byte buffer does not match its schema).
- Safe JSON representation (`to_dict`) so the surrounding query layer can
  surface these as user-facing validation failures.

None of these errors are retryable: they describe a malformed ABI or a value
that does not conform to its own declared schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping

__all__ = [
    "AbiErrorCode",
    "AbiError",
    "ResolutionError",
    "UnknownPrimitiveType",
    "MalformedTypeString",
    "CyclicInheritance",
    "UnresolvedAliasTarget",
    "DuplicateFieldName",
    "MisplacedBinaryExtension",
    "InvalidAbiDocument",
    "UnknownAction",
    "UnknownTable",
    "CodecError",
    "SchemaFieldMismatch",
    "TruncatedBuffer",
    "TrailingBytes",
    "InvalidVariantTag",
    "ValidationError",
]


class AbiErrorCode(str, Enum):
    # Schema resolution
    UNKNOWN_PRIMITIVE = "ABI/UNKNOWN_PRIMITIVE_TYPE"
    MALFORMED_TYPE = "ABI/MALFORMED_TYPE_STRING"
    CYCLIC_INHERITANCE = "ABI/CYCLIC_INHERITANCE"
    UNRESOLVED_ALIAS = "ABI/UNRESOLVED_ALIAS_TARGET"
    DUPLICATE_FIELD = "ABI/DUPLICATE_FIELD_NAME"
    MISPLACED_EXTENSION = "ABI/MISPLACED_BINARY_EXTENSION"
    INVALID_DOCUMENT = "ABI/INVALID_DOCUMENT"
    UNKNOWN_ACTION = "ABI/UNKNOWN_ACTION"
    UNKNOWN_TABLE = "ABI/UNKNOWN_TABLE"

    # Encode / decode
    FIELD_MISMATCH = "CODEC/SCHEMA_FIELD_MISMATCH"
    TRUNCATED = "CODEC/TRUNCATED_BUFFER"
    TRAILING = "CODEC/TRAILING_BYTES"
    VARIANT_TAG = "CODEC/INVALID_VARIANT_TAG"
    VALIDATION = "CODEC/VALIDATION"


@dataclass(eq=False)
class AbiError(Exception):
    """
    Root error for the ABI resolver and codec.

    Attributes
    ----------
    code: str
        Machine-stable error code (see AbiErrorCode).
    message: str
        Human hint suitable for logs and API responses.
    data: dict
        Optional machine data (type names, field paths, offsets).
    retryable: bool
        Always False here; kept for parity with transport-level errors.
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    retryable: bool = False

    def __post_init__(self) -> None:
        super().__init__(f"{self.code}: {self.message}")

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe shape suitable for logs and API bridges."""
        return {
            "code": str(self.code.value if isinstance(self.code, Enum) else self.code),
            "message": self.message,
            "data": _coerce_json(self.data),
            "retryable": self.retryable,
        }

    def __str__(self) -> str:
        code = self.code.value if isinstance(self.code, Enum) else self.code
        parts = [f"{code}: {self.message}"]
        if self.data:
            preview = ", ".join(f"{k}={_preview(v)}" for k, v in self.data.items())
            parts.append(f"[{preview}]")
        return " ".join(parts)


# ---------------------------------------------------------------------------
# Resolution-time failures
# ---------------------------------------------------------------------------


class ResolutionError(AbiError):
    """Base for failures found while building a schema from an ABI."""

    default_code = AbiErrorCode.INVALID_DOCUMENT
    default_message = "ABI resolution failed"

    def __init__(self, message: str | None = None, **data: Any) -> None:
        super().__init__(
            code=self.default_code,
            message=message or self.default_message,
            data=_jsonmap(data),
        )


class UnknownPrimitiveType(ResolutionError):
    default_code = AbiErrorCode.UNKNOWN_PRIMITIVE
    default_message = "unknown type"


class MalformedTypeString(ResolutionError):
    default_code = AbiErrorCode.MALFORMED_TYPE
    default_message = "malformed type string"


class CyclicInheritance(ResolutionError):
    default_code = AbiErrorCode.CYCLIC_INHERITANCE
    default_message = "cyclic inheritance"


class UnresolvedAliasTarget(ResolutionError):
    default_code = AbiErrorCode.UNRESOLVED_ALIAS
    default_message = "reference to an undeclared type"


class DuplicateFieldName(ResolutionError):
    default_code = AbiErrorCode.DUPLICATE_FIELD
    default_message = "duplicate field name"


class MisplacedBinaryExtension(ResolutionError):
    default_code = AbiErrorCode.MISPLACED_EXTENSION
    default_message = "binary extension field followed by a regular field"


class InvalidAbiDocument(ResolutionError):
    default_code = AbiErrorCode.INVALID_DOCUMENT
    default_message = "ABI document does not match the ABI JSON schema"


class UnknownAction(ResolutionError):
    default_code = AbiErrorCode.UNKNOWN_ACTION
    default_message = "action not declared in ABI"


class UnknownTable(ResolutionError):
    default_code = AbiErrorCode.UNKNOWN_TABLE
    default_message = "table not declared in ABI"


# ---------------------------------------------------------------------------
# Encode/decode failures
# ---------------------------------------------------------------------------


class CodecError(AbiError):
    """Base for failures during a single encode or decode call."""

    default_code = AbiErrorCode.VALIDATION
    default_message = "codec failure"

    def __init__(self, message: str | None = None, **data: Any) -> None:
        super().__init__(
            code=self.default_code,
            message=message or self.default_message,
            data=_jsonmap(data),
        )


class SchemaFieldMismatch(CodecError):
    default_code = AbiErrorCode.FIELD_MISMATCH
    default_message = "value does not match schema"


class TruncatedBuffer(CodecError):
    default_code = AbiErrorCode.TRUNCATED
    default_message = "buffer ended before value was complete"


class TrailingBytes(CodecError):
    default_code = AbiErrorCode.TRAILING
    default_message = "unexpected bytes after decoded value"


class InvalidVariantTag(CodecError):
    default_code = AbiErrorCode.VARIANT_TAG
    default_message = "variant tag out of range"


class ValidationError(CodecError):
    """Raised when a Python value is not representable by a primitive."""

    default_code = AbiErrorCode.VALIDATION
    default_message = "invalid value"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: _coerce_json(v) for k, v in data.items()}


def _coerce_json(v: Any) -> Any:
    # Keep JSON primitives; stringify the rest; hex-encode bytes.
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (list, tuple)):
        return [_coerce_json(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _coerce_json(x) for k, x in v.items()}
    if isinstance(v, (bytes, bytearray)):
        return bytes(v).hex()
    return str(v)


def _preview(v: Any, limit: int = 96) -> str:
    s = str(_coerce_json(v))
    return s if len(s) <= limit else s[:limit] + "…"
