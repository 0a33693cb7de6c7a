"""
Shared pytest fixtures: ABI documents, resolved schemas and sample keys.

Every fixture returns fresh objects or frozen ones, so tests may mutate what
they get without leaking into each other.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict

import pytest

from eosio_abi import ContractAbi, resolve
from eosio_abi.keys import public_key_to_string, signature_to_string

TRANSFER_HEX = "0000000000855c340000000000000e3d102700000000000004454f530000000000"

FIXTURES = Path(__file__).resolve().parent / "tests" / "fixtures"

_TOKEN_ABI: Dict[str, Any] = json.loads((FIXTURES / "abi" / "eosio.token.abi.json").read_text(encoding="utf-8"))

# Exercises inheritance, aliases, variants, optionals, lists and extensions.
_SHAPES_ABI: Dict[str, Any] = {
    "version": "eosio::abi/1.2",
    "types": [
        {"new_type_name": "account_name", "type": "name"},
        {"new_type_name": "names", "type": "name[]"},
        {"new_type_name": "point_alias", "type": "point"},
        {"new_type_name": "shape_alias", "type": "shape"},
    ],
    "structs": [
        {"name": "a", "base": "", "fields": [{"name": "x", "type": "uint8"}]},
        {"name": "b", "base": "a", "fields": [{"name": "y", "type": "uint16"}]},
        {"name": "point", "base": "", "fields": [{"name": "x", "type": "int32"}, {"name": "y", "type": "int32"}]},
        {
            "name": "record",
            "base": "",
            "fields": [
                {"name": "owner", "type": "account_name"},
                {"name": "friends", "type": "names"},
                {"name": "nickname", "type": "string?"},
                {"name": "tags", "type": "string[]?"},
                {"name": "origin", "type": "point_alias"},
            ],
        },
        {
            "name": "versioned",
            "base": "",
            "fields": [
                {"name": "id", "type": "uint64"},
                {"name": "note", "type": "string$"},
                {"name": "score", "type": "uint32?$"},
            ],
        },
        {"name": "holder", "base": "", "fields": [{"name": "value", "type": "shape"}]},
    ],
    "variants": [{"name": "shape", "types": ["uint8", "string", "point"]}],
    "actions": [{"name": "setrecord", "type": "record", "ricardian_contract": ""}],
    "tables": [{"name": "records", "type": "record", "index_type": "i64", "key_names": [], "key_types": []}],
}


@pytest.fixture
def token_abi() -> Dict[str, Any]:
    return copy.deepcopy(_TOKEN_ABI)


@pytest.fixture
def shapes_abi() -> Dict[str, Any]:
    return copy.deepcopy(_SHAPES_ABI)


@pytest.fixture(scope="session")
def token_schema():
    return resolve(_TOKEN_ABI)


@pytest.fixture(scope="session")
def shapes_schema():
    return resolve(_SHAPES_ABI)


@pytest.fixture(scope="session")
def token_contract() -> ContractAbi:
    return ContractAbi.from_json(_TOKEN_ABI, account="eosio.token")


@pytest.fixture(scope="session")
def transfer_hex() -> str:
    return TRANSFER_HEX


@pytest.fixture(scope="session")
def sample_key_bytes() -> bytes:
    return bytes([0x02]) + bytes(range(1, 33))


@pytest.fixture(scope="session")
def sample_public_key(sample_key_bytes) -> str:
    return public_key_to_string(0, sample_key_bytes)


@pytest.fixture(scope="session")
def sample_signature() -> str:
    return signature_to_string(0, bytes([0x1F]) + bytes(range(64)))
