"""
Transaction body serialization.

The chain's transaction envelope is itself described as an ABI document
(:data:`TRANSACTION_ABI`) and goes through the same resolver and codec as any
contract ABI. Action payloads are serialized with the owning contract's ABI
first and embedded as ``bytes``.

The bytes produced here are what the signing collaborator hashes; signing and
pushing to a node are not part of this package.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Union

from .codec import BinaryCodec
from .config import DEFAULT_CONFIG, CodecConfig
from .contract import ContractAbi
from .errors import SchemaFieldMismatch, UnknownAction
from .resolver import resolve
from .schema import ResolvedStructSchema

__all__ = [
    "TRANSACTION_ABI",
    "transaction_schema",
    "serialize_action",
    "serialize_transaction",
    "deserialize_transaction",
]

log = logging.getLogger(__name__)

TRANSACTION_ABI: Mapping[str, Any] = {
    "version": "eosio::abi/1.1",
    "structs": [
        {
            "name": "permission_level",
            "base": "",
            "fields": [
                {"name": "actor", "type": "name"},
                {"name": "permission", "type": "name"},
            ],
        },
        {
            "name": "action",
            "base": "",
            "fields": [
                {"name": "account", "type": "name"},
                {"name": "name", "type": "name"},
                {"name": "authorization", "type": "permission_level[]"},
                {"name": "data", "type": "bytes"},
            ],
        },
        {
            "name": "extension",
            "base": "",
            "fields": [
                {"name": "type", "type": "uint16"},
                {"name": "data", "type": "bytes"},
            ],
        },
        {
            "name": "transaction_header",
            "base": "",
            "fields": [
                {"name": "expiration", "type": "time_point_sec"},
                {"name": "ref_block_num", "type": "uint16"},
                {"name": "ref_block_prefix", "type": "uint32"},
                {"name": "max_net_usage_words", "type": "varuint32"},
                {"name": "max_cpu_usage_ms", "type": "uint8"},
                {"name": "delay_sec", "type": "varuint32"},
            ],
        },
        {
            "name": "transaction",
            "base": "transaction_header",
            "fields": [
                {"name": "context_free_actions", "type": "action[]"},
                {"name": "actions", "type": "action[]"},
                {"name": "transaction_extensions", "type": "extension[]"},
            ],
        },
    ],
}

_HEADER_DEFAULTS = {
    "max_net_usage_words": 0,
    "max_cpu_usage_ms": 0,
    "delay_sec": 0,
    "context_free_actions": [],
    "transaction_extensions": [],
}


@lru_cache(maxsize=1)
def transaction_schema() -> ResolvedStructSchema:
    """Resolved schema of the built-in transaction structs (immutable, safe to share)."""
    return resolve(TRANSACTION_ABI)


def _contract_for(account: str, contracts: Mapping[str, ContractAbi]) -> ContractAbi:
    try:
        return contracts[account]
    except KeyError:
        raise UnknownAction(
            f"no ABI supplied for account {account!r}", account=account
        ) from None


def serialize_action(
    action: Mapping[str, Any],
    contracts: Mapping[str, ContractAbi],
    *,
    config: CodecConfig = DEFAULT_CONFIG,
) -> Dict[str, Any]:
    """
    Return a copy of ``action`` whose ``data`` is the serialized payload (hex).

    The payload is encoded with the contract's schema under ``config``; the
    config the contract was built with is not used here.
    """
    if "data" not in action:
        raise SchemaFieldMismatch("action has no data", action=action.get("name"))
    out = dict(action)
    data = action["data"]
    if isinstance(data, Mapping):
        contract = _contract_for(action["account"], contracts)
        codec = BinaryCodec(contract.schema, config=config)
        out["data"] = codec.encode_hex(contract.action_type(action["name"]), data)
    return out


def serialize_transaction(
    tx: Mapping[str, Any],
    contracts: Optional[Mapping[str, ContractAbi]] = None,
    *,
    config: CodecConfig = DEFAULT_CONFIG,
) -> bytes:
    """
    Serialize a transaction body.

    ``data`` of each action may be a mapping (serialized with the ABI in
    ``contracts`` keyed by account), or already-serialized bytes / hex.
    ``config`` governs the action payloads as well as the envelope.
    Missing header fields that have a natural zero default are filled in.
    """
    contracts = contracts or {}
    body: Dict[str, Any] = {**_HEADER_DEFAULTS, **tx}
    for key in ("context_free_actions", "actions"):
        body[key] = [serialize_action(a, contracts, config=config) for a in body.get(key) or []]
    raw = BinaryCodec(transaction_schema(), config=config).encode("transaction", body)
    log.debug("serialized transaction: %d actions, %d bytes", len(body["actions"]), len(raw))
    return raw


def deserialize_transaction(
    raw: Union[bytes, str],
    contracts: Optional[Mapping[str, ContractAbi]] = None,
    *,
    config: CodecConfig = DEFAULT_CONFIG,
) -> Dict[str, Any]:
    """
    Decode a transaction body.

    Action payloads whose account has an ABI in ``contracts`` are decoded into
    ``data`` with the original bytes kept as ``hex_data``; others stay hex.
    ``config`` governs the action payloads as well as the envelope.
    """
    contracts = contracts or {}
    codec = BinaryCodec(transaction_schema(), config=config)
    tx = codec.decode_hex("transaction", raw) if isinstance(raw, str) else codec.decode("transaction", raw)
    for key in ("context_free_actions", "actions"):
        decoded: List[Dict[str, Any]] = []
        for action in tx[key]:
            contract = contracts.get(action["account"])
            if contract is not None:
                payload = BinaryCodec(contract.schema, config=config).decode_hex(
                    contract.action_type(action["name"]), action["data"]
                )
                action = {**action, "hex_data": action["data"], "data": payload}
            decoded.append(action)
        tx[key] = decoded
    return tx
