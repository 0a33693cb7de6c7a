"""
eosio_abi: EOSIO/Antelope ABI type grammar, struct resolver and binary codec.

Typical flow::

    from eosio_abi import resolve, encode, decode

    schema = resolve(abi_json)                 # frozen, shareable
    raw = encode("transfer", {...}, schema)    # bytes
    value = decode("transfer", raw, schema)    # dict

Higher-level helpers live in :mod:`eosio_abi.contract` (action/table lookups
for one contract) and :mod:`eosio_abi.transaction` (transaction bodies).
"""

from __future__ import annotations

from .codec import BinaryCodec, Variant, decode, decode_hex, encode, encode_hex
from .config import DEFAULT_CONFIG, CodecConfig, configure_logging, load_config
from .contract import ContractAbi
from .document import AbiDocument, validate_abi
from .errors import (
    AbiError,
    AbiErrorCode,
    CodecError,
    CyclicInheritance,
    DuplicateFieldName,
    InvalidAbiDocument,
    InvalidVariantTag,
    MalformedTypeString,
    MisplacedBinaryExtension,
    ResolutionError,
    SchemaFieldMismatch,
    TrailingBytes,
    TruncatedBuffer,
    UnknownAction,
    UnknownPrimitiveType,
    UnknownTable,
    UnresolvedAliasTarget,
    ValidationError,
)
from .grammar import ParsedType, format_type, parse
from .primitives import PRIMITIVES, is_primitive
from .resolver import resolve
from .schema import ResolvedField, ResolvedStructSchema
from .transaction import deserialize_transaction, serialize_transaction
from .version import __version__

__all__ = [
    "__version__",
    # grammar
    "ParsedType",
    "parse",
    "format_type",
    # primitives
    "PRIMITIVES",
    "is_primitive",
    # resolution
    "AbiDocument",
    "validate_abi",
    "resolve",
    "ResolvedField",
    "ResolvedStructSchema",
    # codec
    "BinaryCodec",
    "Variant",
    "encode",
    "decode",
    "encode_hex",
    "decode_hex",
    # facades
    "ContractAbi",
    "serialize_transaction",
    "deserialize_transaction",
    # config
    "CodecConfig",
    "DEFAULT_CONFIG",
    "load_config",
    "configure_logging",
    # errors
    "AbiError",
    "AbiErrorCode",
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
