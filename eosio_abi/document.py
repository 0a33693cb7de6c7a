"""
ABI document loading.

Turns the chain's JSON ABI into an immutable :class:`AbiDocument` after
validating its shape against the packaged JSON Schema
(``schemas/abi.schema.json``, Draft 2020-12). Only ``types``, ``structs`` and
``variants`` feed the resolver; ``actions`` and ``tables`` are kept for the
contract facade. Unknown top-level keys are ignored.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from typing import Any, Mapping, Optional, Tuple, Union

import jsonschema

from .errors import InvalidAbiDocument

__all__ = [
    "AbiField",
    "AbiStruct",
    "AbiAlias",
    "AbiVariant",
    "AbiAction",
    "AbiTable",
    "AbiDocument",
    "load_abi_schema",
    "validate_abi",
]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AbiField:
    name: str
    type: str


@dataclass(frozen=True)
class AbiStruct:
    name: str
    base: str = ""
    fields: Tuple[AbiField, ...] = ()


@dataclass(frozen=True)
class AbiAlias:
    new_type_name: str
    type: str


@dataclass(frozen=True)
class AbiVariant:
    name: str
    types: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AbiAction:
    name: str
    type: str
    ricardian_contract: str = ""


@dataclass(frozen=True)
class AbiTable:
    name: str
    type: str
    index_type: str = ""
    key_names: Tuple[str, ...] = ()
    key_types: Tuple[str, ...] = ()


@lru_cache(maxsize=1)
def load_abi_schema() -> Mapping[str, Any]:
    text = resources.files(__package__).joinpath("schemas").joinpath("abi.schema.json").read_text(encoding="utf-8")
    return json.loads(text)


@lru_cache(maxsize=1)
def _validator() -> jsonschema.Draft202012Validator:
    return jsonschema.Draft202012Validator(load_abi_schema())


def validate_abi(abi: Any) -> None:
    """Raise InvalidAbiDocument describing the most relevant schema violation, if any."""
    errors = list(_validator().iter_errors(abi))
    if errors:
        first = jsonschema.exceptions.best_match(errors)
        path = "/".join(str(p) for p in first.absolute_path) or "<root>"
        raise InvalidAbiDocument(
            f"ABI document invalid at {path}: {first.message}",
            path=path,
            violations=len(errors),
        )


@dataclass(frozen=True)
class AbiDocument:
    version: str = ""
    types: Tuple[AbiAlias, ...] = ()
    structs: Tuple[AbiStruct, ...] = ()
    variants: Tuple[AbiVariant, ...] = ()
    actions: Tuple[AbiAction, ...] = ()
    tables: Tuple[AbiTable, ...] = ()

    @classmethod
    def from_json(cls, abi: Union[Mapping[str, Any], str, bytes]) -> "AbiDocument":
        """Build from a JSON mapping or JSON text, validating the shape first."""
        if isinstance(abi, (str, bytes, bytearray)):
            try:
                abi = json.loads(abi)
            except ValueError as e:
                raise InvalidAbiDocument(f"ABI is not valid JSON: {e}") from e
        validate_abi(abi)
        doc = cls(
            version=abi.get("version") or "",
            types=tuple(AbiAlias(t["new_type_name"], t["type"]) for t in abi.get("types") or ()),
            structs=tuple(
                AbiStruct(
                    name=s["name"],
                    base=s.get("base") or "",
                    fields=tuple(AbiField(f["name"], f["type"]) for f in s["fields"]),
                )
                for s in abi.get("structs") or ()
            ),
            variants=tuple(AbiVariant(v["name"], tuple(v["types"])) for v in abi.get("variants") or ()),
            actions=tuple(
                AbiAction(a["name"], a["type"], a.get("ricardian_contract") or "")
                for a in abi.get("actions") or ()
            ),
            tables=tuple(
                AbiTable(
                    name=t["name"],
                    type=t["type"],
                    index_type=t.get("index_type") or "",
                    key_names=tuple(t.get("key_names") or ()),
                    key_types=tuple(t.get("key_types") or ()),
                )
                for t in abi.get("tables") or ()
            ),
        )
        log.debug(
            "loaded ABI version=%s structs=%d variants=%d aliases=%d",
            doc.version or "?",
            len(doc.structs),
            len(doc.variants),
            len(doc.types),
        )
        return doc

    def action(self, name: str) -> Optional[AbiAction]:
        return next((a for a in self.actions if a.name == name), None)

    def table(self, name: str) -> Optional[AbiTable]:
        return next((t for t in self.tables if t.name == name), None)
