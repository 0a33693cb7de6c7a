"""
Struct resolver: ABI document -> ResolvedStructSchema.

Phases, all on a working index local to one ``resolve()`` call:

1. declare   every struct by name
2. variants  each variant ``{name, types}`` becomes a synthetic struct whose
             fields are ``{name: t, type: t + "$@"}``, one slot per member
3. aliases   an alias of a bare struct/variant name registers a copy of that
             struct under the new name; any other alias (primitives, or
             targets carrying markers such as ``name[]``) is expanded where it
             is used
4. flatten   base fields first (transitively), then the struct's own fields
5. check     no duplicate names, extensions only at the tail, every field
             type known

Any failure aborts the whole build; nothing partial is returned.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Set, Tuple, Union

from .document import AbiDocument, AbiField, AbiStruct
from .errors import (
    CyclicInheritance,
    DuplicateFieldName,
    InvalidAbiDocument,
    MisplacedBinaryExtension,
    UnknownPrimitiveType,
    UnresolvedAliasTarget,
)
from .grammar import ParsedType, apply_alias, format_type, parse
from .primitives import is_primitive
from .schema import ResolvedField, ResolvedStructSchema

__all__ = ["resolve", "variant_struct"]

log = logging.getLogger(__name__)


def variant_struct(name: str, types: Tuple[str, ...]) -> AbiStruct:
    """The synthetic struct standing in for a variant."""
    return AbiStruct(name=name, base="", fields=tuple(AbiField(t, t + "$@") for t in types))


def resolve(abi: Union[AbiDocument, Mapping[str, Any], str, bytes]) -> ResolvedStructSchema:
    """Build the frozen schema for one ABI document."""
    doc = abi if isinstance(abi, AbiDocument) else AbiDocument.from_json(abi)
    schema = _Resolver(doc).run()
    log.debug(
        "resolved ABI: structs=%d variants=%d type_aliases=%d",
        len(schema),
        len(schema.variants),
        len(schema.type_aliases),
    )
    return schema


class _Resolver:
    def __init__(self, doc: AbiDocument) -> None:
        self.doc = doc
        self.declared: Dict[str, AbiStruct] = {}
        self.variant_names: Set[str] = set()
        self.alias_raw: Dict[str, str] = {}
        self.type_aliases: Dict[str, ParsedType] = {}
        self.resolved: Dict[str, Tuple[ResolvedField, ...]] = {}

    def run(self) -> ResolvedStructSchema:
        for s in self.doc.structs:
            self._declare(s)
        for v in self.doc.variants:
            self._declare(variant_struct(v.name, v.types))
            self.variant_names.add(v.name)
        self._register_aliases()

        for name in self.declared:
            self._resolve_struct(name, ())

        return ResolvedStructSchema(
            {name: self.resolved[name] for name in self.declared},
            frozenset(self.variant_names),
            self.type_aliases,
        )

    # ── declarations ─────────────────────────────────────────────────────────

    def _declare(self, struct: AbiStruct) -> None:
        if struct.name in self.declared:
            raise InvalidAbiDocument(f"type {struct.name!r} declared twice", type=struct.name)
        if is_primitive(struct.name):
            raise InvalidAbiDocument(
                f"type {struct.name!r} shadows a built-in type", type=struct.name
            )
        self.declared[struct.name] = struct

    def _register_aliases(self) -> None:
        for alias in self.doc.types:
            new = alias.new_type_name
            if new in self.alias_raw or new in self.declared or is_primitive(new):
                raise InvalidAbiDocument(f"alias {new!r} redefines an existing type", type=new)
            self.alias_raw[new] = alias.type

        for alias in self.doc.types:
            new = alias.new_type_name
            target = self._expand(parse(alias.type), (new,))
            bare = target == ParsedType(target.base_type)
            if bare and target.base_type in self.declared:
                self.declared[new] = replace(self.declared[target.base_type], name=new)
                if target.base_type in self.variant_names:
                    self.variant_names.add(new)
            elif is_primitive(target.base_type) or target.base_type in self.declared:
                self.type_aliases[new] = target
            else:
                raise UnresolvedAliasTarget(
                    f"alias {new!r} targets unknown type {alias.type!r}",
                    alias=new,
                    target=alias.type,
                )

    def _expand(self, t: ParsedType, seen: Tuple[str, ...]) -> ParsedType:
        """Follow alias names until the base is a struct, variant or primitive."""
        if t.base_type in self.declared or t.base_type not in self.alias_raw:
            return t
        if t.base_type in seen:
            raise CyclicInheritance(
                f"alias cycle through {t.base_type!r}", chain=list(seen) + [t.base_type]
            )
        target = self._expand(parse(self.alias_raw[t.base_type]), seen + (t.base_type,))
        return apply_alias(t, target)

    # ── flattening ───────────────────────────────────────────────────────────

    def _resolve_struct(self, name: str, stack: Tuple[str, ...]) -> Tuple[ResolvedField, ...]:
        done = self.resolved.get(name)
        if done is not None:
            return done
        if name in stack:
            raise CyclicInheritance(
                f"struct {name!r} inherits from itself", chain=list(stack) + [name]
            )
        struct = self.declared[name]

        fields: List[ResolvedField] = []
        if struct.base:
            if struct.base not in self.declared:
                raise UnresolvedAliasTarget(
                    f"base {struct.base!r} of struct {name!r} is not declared",
                    struct=name,
                    base=struct.base,
                )
            fields.extend(self._resolve_struct(struct.base, stack + (name,)))
        fields.extend(self._resolve_field(name, f) for f in struct.fields)

        self._check(name, fields)
        out = tuple(fields)
        self.resolved[name] = out
        return out

    def _resolve_field(self, struct_name: str, f: AbiField) -> ResolvedField:
        t = self._expand(parse(f.type), ())
        is_object = not is_primitive(t.base_type)
        if is_object and t.base_type not in self.declared:
            raise UnknownPrimitiveType(
                f"field {struct_name}.{f.name} has unknown type {t.base_type!r}",
                struct=struct_name,
                field=f.name,
                type=format_type(t),
            )
        return ResolvedField(
            name=f.name,
            base_type=t.base_type,
            is_object=is_object,
            is_list=t.is_list,
            is_optional=t.is_optional,
            is_extension=t.is_extension,
            is_variant_member=t.is_variant_member,
            is_element_optional=t.is_element_optional,
        )

    @staticmethod
    def _check(name: str, fields: List[ResolvedField]) -> None:
        seen: Set[str] = set()
        in_extensions = False
        for f in fields:
            if f.name in seen:
                raise DuplicateFieldName(
                    f"struct {name!r} has field {f.name!r} more than once", struct=name, field=f.name
                )
            seen.add(f.name)
            if f.is_extension:
                in_extensions = True
            elif in_extensions:
                raise MisplacedBinaryExtension(
                    f"struct {name!r}: field {f.name!r} follows a binary extension field",
                    struct=name,
                    field=f.name,
                )
